import pytest
from fastapi.testclient import TestClient

from conftest import ScriptedLLM
from server.api.api_app import app
from server.api.services.QueryService import NO_RESULTS_ANSWER, QueryService
from services.chunking.TextChunker import TextChunker
from services.extraction.ExtractionService import ExtractionService
from services.extraction.extractors.CsvExtractor import CsvExtractor
from services.extraction.extractors.TextExtractor import TextExtractor
from services.ingestion.IngestionService import IngestionService
from services.retrieval.RetrievalService import RetrievalService
from shared.models.errors import GenerationError

API_KEY = "test-key"
NOTES = "The quarterly planning meeting moved to Thursday.\n\nBudget reviews happen every second Monday."


def headers(user_id: str | None = "alice", api_key: str | None = API_KEY) -> dict:
    result = {}
    if api_key is not None:
        result["X-Api-Key"] = api_key
    if user_id is not None:
        result["X-User-Id"] = user_id
    return result


@pytest.fixture
def llm() -> ScriptedLLM:
    return ScriptedLLM(answer="Thursday.")


@pytest.fixture
def client(helper_config, logger, embedder, index, llm, monkeypatch):
    """TestClient without the lifespan: app state is wired to in-memory fakes."""
    monkeypatch.setenv("API_SERVER_API_KEY", API_KEY)
    extraction = ExtractionService(helper_config, extractors=[TextExtractor(helper_config), CsvExtractor(helper_config)])
    app.state.config = helper_config
    app.state.logging = logger
    app.state.rag_client = index
    app.state.ingestion_service = IngestionService(
        helper_config=helper_config,
        extraction_service=extraction,
        chunker=TextChunker(helper_config),
        embed_client=embedder,
        rag_client=index,
    )
    app.state.query_service = QueryService(
        helper_config=helper_config,
        retrieval_service=RetrievalService(helper_config=helper_config, embed_client=embedder, rag_client=index),
        llm_client=llm,
    )
    return TestClient(app)


def upload_notes(client: TestClient, user_id: str = "alice") -> dict:
    response = client.post(
        "/api/upload/txt",
        headers=headers(user_id),
        files={"file": ("notes.txt", NOTES.encode(), "text/plain")},
    )
    assert response.status_code == 200, response.text
    return response.json()


def test_health_needs_no_key(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "OK"


def test_wrong_api_key_is_rejected(client):
    response = client.post("/api/chat", headers=headers(api_key="nope"), json={"message": "hi"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Invalid or missing API key."}


def test_missing_user_id_is_rejected(client):
    response = client.post("/api/chat", headers=headers(user_id=None), json={"message": "hi"})
    assert response.status_code == 401


def test_empty_message_is_bad_request(client):
    response = client.post("/api/chat", headers=headers(), json={"message": "   "})
    assert response.status_code == 400
    assert response.json()["message"] == "No message provided"


def test_upload_txt(client, index):
    body = upload_notes(client)
    assert body["success"] is True
    assert body["filename"] == "notes.txt"
    assert body["documentCount"] == index.count_for("alice") > 0
    assert "url" not in body


def test_chat_answers_from_own_documents(client, llm):
    upload_notes(client)
    response = client.post(
        "/api/chat",
        headers=headers(),
        json={"message": "When is the planning meeting?", "history": [{"role": "user", "content": "hello"}]},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["answer"] == "Thursday."
    assert body["sources"][0]["name"] == "notes.txt"
    assert body["sources"][0]["type"] == "txt"
    assert body["timestamp"]
    assert "User: hello" in llm.prompts[0]


def test_chat_without_documents_returns_fallback(client, llm):
    upload_notes(client, user_id="bob")
    response = client.post("/api/chat", headers=headers("alice"), json={"message": "When is the planning meeting?"})
    assert response.status_code == 200
    assert response.json()["answer"] == NO_RESULTS_ANSWER
    assert response.json()["sources"] == []
    assert llm.prompts == []


def test_generation_failure_maps_to_bad_gateway(client, llm):
    upload_notes(client)
    llm.error = GenerationError("Answer generation failed: quota exceeded")
    response = client.post("/api/chat", headers=headers(), json={"message": "When is the planning meeting?"})
    assert response.status_code == 502
    assert response.json() == {"success": False, "message": "Answer generation failed: quota exceeded"}


def test_extension_must_match_route(client):
    response = client.post("/api/upload/csv", headers=headers(), files={"file": ("notes.txt", b"a,b\n1,2\n", "text/csv")})
    assert response.status_code == 400


def test_unsupported_extension_is_bad_request(client):
    response = client.post("/api/upload/txt", headers=headers(), files={"file": ("slides.pptx", b"data", "application/octet-stream")})
    assert response.status_code == 400
    assert "not supported" in response.json()["message"]


def test_missing_file_is_bad_request(client):
    response = client.post("/api/upload/pdf", headers=headers())
    assert response.status_code == 400
    assert response.json()["message"] == "No file uploaded"


def test_oversized_file_is_bad_request(client, monkeypatch):
    monkeypatch.setenv("UPLOAD_MAX_FILE_MB", "0.00001")
    response = client.post("/api/upload/txt", headers=headers(), files={"file": ("notes.txt", NOTES.encode(), "text/plain")})
    assert response.status_code == 400
    assert "too large" in response.json()["message"]


def test_empty_file_is_unprocessable(client, index):
    response = client.post("/api/upload/txt", headers=headers(), files={"file": ("empty.txt", b"   ", "text/plain")})
    assert response.status_code == 422
    assert response.json()["success"] is False
    assert index.points == {}


def test_blank_url_is_bad_request(client):
    response = client.post("/api/upload/url", headers=headers(), json={"url": "  "})
    assert response.status_code == 400
    assert response.json()["message"] == "URL is required"


def test_non_http_url_is_bad_request(client):
    response = client.post("/api/upload/url", headers=headers(), json={"url": "ftp://example.com/file.txt"})
    assert response.status_code == 400
    assert "Invalid URL" in response.json()["message"]


def test_purge_only_touches_caller(client, index):
    upload_notes(client, user_id="alice")
    upload_notes(client, user_id="bob")
    bob_count = index.count_for("bob")

    response = client.delete("/api/collection/documents", headers=headers("alice"))
    assert response.status_code == 200
    assert response.json()["deletedCount"] > 0
    assert index.count_for("alice") == 0
    assert index.count_for("bob") == bob_count


def test_collection_info(client):
    upload_notes(client)
    response = client.get("/api/collection/info", headers=headers())
    assert response.status_code == 200
    body = response.json()
    assert body["collection"] == "test_documents"
    assert body["pointsCount"] > 0
    assert body["distance"] == "Cosine"
