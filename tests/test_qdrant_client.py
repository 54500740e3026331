import json

import httpx
import pytest

from shared.clients.rag.qdrant.RAGClientQdrant import RAGClientQdrant
from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.models.errors import BackendError

BASE_URL = "http://qdrant.local:6333"


class QdrantStub:
    """Records requests and answers them from a route table keyed by (method, path)."""

    def __init__(self, routes: dict):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"status": {"error": "not found"}})
        if callable(route):
            return route(request)
        return httpx.Response(200, json=route)

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture(autouse=True)
def qdrant_env(monkeypatch):
    monkeypatch.setenv("RAG_QDRANT_BASE_URL", BASE_URL)
    monkeypatch.setenv("RAG_QDRANT_COLLECTION", "docs")
    monkeypatch.setenv("RAG_QDRANT_API_KEY", "secret")


async def booted(helper_config, stub: QdrantStub) -> RAGClientQdrant:
    client = RAGClientQdrant(helper_config=helper_config)
    await client.boot(transport=httpx.MockTransport(stub))
    return client


def point(point_id: str, user_id: str | None = "alice") -> dict:
    payload = {"text": "hello", "uploadedAt": "2026-01-01T00:00:00+00:00"}
    if user_id is not None:
        payload["userId"] = user_id
    return {"id": point_id, "vector": [0.1, 0.2], "payload": payload}


def test_manager_selects_qdrant(helper_config, monkeypatch):
    monkeypatch.delenv("RAG_ENGINE", raising=False)
    client = RAGClientManager(helper_config=helper_config).get_client()
    assert isinstance(client, RAGClientQdrant)
    assert client.get_collection_name() == "docs"


def test_missing_base_url_fails_on_construction(helper_config, monkeypatch):
    monkeypatch.delenv("RAG_QDRANT_BASE_URL")
    with pytest.raises(ValueError):
        RAGClientQdrant(helper_config=helper_config)


async def test_search_is_always_filtered_by_user(helper_config):
    stub = QdrantStub({
        ("POST", "/collections/docs/points/search"): {
            "result": [
                {"id": "a", "score": 0.92, "payload": {"text": "first", "userId": "alice"}},
                {"id": "b", "score": 0.41, "payload": {"text": "second", "userId": "alice"}},
            ],
            "status": "ok",
        },
    })
    client = await booted(helper_config, stub)
    hits = await client.do_search([0.1, 0.2], user_id="alice", limit=7)

    body = stub.body()
    assert body["filter"] == {"must": [{"key": "userId", "match": {"value": "alice"}}]}
    assert body["limit"] == 7
    assert body["with_payload"] is True
    assert stub.requests[-1].headers["api-key"] == "secret"
    assert [h["id"] for h in hits] == ["a", "b"]
    assert hits[0]["payload"]["text"] == "first"


async def test_upsert_waits_for_write(helper_config):
    stub = QdrantStub({("PUT", "/collections/docs/points"): {"result": {"status": "completed"}, "status": "ok"}})
    client = await booted(helper_config, stub)
    await client.do_upsert_points([point("p1"), point("p2")])

    request = stub.requests[-1]
    assert request.url.params["wait"] == "true"
    assert [p["id"] for p in stub.body()["points"]] == ["p1", "p2"]


async def test_upsert_without_user_id_sends_nothing(helper_config):
    stub = QdrantStub({("PUT", "/collections/docs/points"): {"status": "ok"}})
    client = await booted(helper_config, stub)
    with pytest.raises(ValueError, match="userId"):
        await client.do_upsert_points([point("p1"), point("p2", user_id=None)])
    assert stub.requests == []


async def test_scroll_all_follows_page_offsets(helper_config):
    pages = {
        None: {"result": {"points": [{"id": 1}, {"id": 2}], "next_page_offset": 3}, "status": "ok", "time": 0.01},
        3: {"result": {"points": [{"id": 3}], "next_page_offset": None}, "status": "ok", "time": 0.01},
    }

    def scroll(request: httpx.Request) -> httpx.Response:
        offset = json.loads(request.content).get("offset")
        return httpx.Response(200, json=pages[offset])

    stub = QdrantStub({
        ("POST", "/collections/docs/points/scroll"): scroll,
    })
    client = await booted(helper_config, stub)
    result = await client.do_scroll_all(client.build_user_filter("alice"), page_size=2)
    assert result.point_ids() == [1, 2, 3]
    assert result.next_page_offset is None


async def test_delete_by_ids(helper_config):
    stub = QdrantStub({("POST", "/collections/docs/points/delete"): {"status": "ok"}})
    client = await booted(helper_config, stub)
    await client.do_delete_points(["a", "b"])
    assert stub.body() == {"points": ["a", "b"]}
    assert stub.requests[-1].url.params["wait"] == "true"


async def test_ensure_collection_creates_when_missing(helper_config):
    stub = QdrantStub({
        ("GET", "/collections/docs/exists"): {"result": {"exists": False}, "status": "ok"},
        ("PUT", "/collections/docs"): {"result": True, "status": "ok"},
    })
    client = await booted(helper_config, stub)
    assert await client.do_ensure_collection(vector_size=1536, distance="Cosine") is True
    assert stub.body() == {"vectors": {"size": 1536, "distance": "Cosine"}}


async def test_ensure_collection_keeps_existing(helper_config):
    stub = QdrantStub({("GET", "/collections/docs/exists"): {"result": {"exists": True}, "status": "ok"}})
    client = await booted(helper_config, stub)
    assert await client.do_ensure_collection(vector_size=1536) is False
    assert len(stub.requests) == 1


async def test_collection_info(helper_config):
    stub = QdrantStub({
        ("GET", "/collections/docs"): {
            "result": {
                "status": "green",
                "points_count": 42,
                "config": {"params": {"vectors": {"size": 1536, "distance": "Cosine"}}},
            },
            "status": "ok",
        },
    })
    client = await booted(helper_config, stub)
    info = await client.do_get_collection_info()
    assert (info.name, info.status, info.points_count, info.vector_size, info.distance) == ("docs", "green", 42, 1536, "Cosine")


async def test_error_status_raises(helper_config):
    stub = QdrantStub({
        ("POST", "/collections/docs/points/search"): lambda request: httpx.Response(500, json={"status": {"error": "boom"}}),
    })
    client = await booted(helper_config, stub)
    with pytest.raises(BackendError, match="status 500") as excinfo:
        await client.do_search([0.1], user_id="alice")
    assert excinfo.value.status_code == 500


async def test_request_before_boot_raises(helper_config):
    client = RAGClientQdrant(helper_config=helper_config)
    with pytest.raises(RuntimeError, match="not initialised"):
        await client.do_healthcheck()
