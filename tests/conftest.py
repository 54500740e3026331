import os
import tempfile

# logging_setup writes to $ROOT_DIR/logs; keep test runs out of the working tree
os.environ.setdefault("ROOT_DIR", tempfile.mkdtemp(prefix="nurodesk_tests_"))

import hashlib
import logging
import math
import re

import pytest

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.CollectionInfo import CollectionInfo
from shared.clients.rag.models.Scroll import ScrollResult
from shared.helper.HelperConfig import HelperConfig

VECTOR_SIZE = 64


def cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class HashingEmbedder:
    """Deterministic bag-of-words embedder: every token adds 1.0 to one hashed dimension."""

    def __init__(self, size: int = VECTOR_SIZE):
        self.size = size
        self.calls: list[str] = []
        self.fail_after: int | None = None

    def get_vector_size(self) -> int:
        return self.size

    def get_distance(self) -> str:
        return "Cosine"

    async def embed_text(self, text: str) -> list[float]:
        if self.fail_after is not None and len(self.calls) >= self.fail_after:
            raise RuntimeError("embedding service unavailable")
        self.calls.append(text)
        vector = [0.0] * self.size
        for token in re.findall(r"\w+", text.lower()):
            vector[int(hashlib.md5(token.encode()).hexdigest(), 16) % self.size] += 1.0
        return vector


class InMemoryIndex:
    """Vector index fake honouring payload filters and cosine similarity."""

    build_user_filter = staticmethod(RAGClientInterface.build_user_filter)

    def __init__(self):
        self.points: dict[str, dict] = {}
        self.upsert_batches: list[int] = []
        self.fail_upsert = False
        self.fail_search = False

    def get_collection_name(self) -> str:
        return "test_documents"

    def _matches(self, point: dict, filters: list[dict]) -> bool:
        payload = point["payload"]
        return all(payload.get(f["key"]) == f["match"]["value"] for f in filters)

    def count_for(self, user_id: str) -> int:
        return sum(1 for p in self.points.values() if self._matches(p, self.build_user_filter(user_id)))

    async def do_upsert_points(self, points: list[dict], wait: bool = True) -> None:
        if self.fail_upsert:
            raise Exception("Request to http://index/points failed with status 503")
        RAGClientInterface.validate_points(points)
        self.upsert_batches.append(len(points))
        for point in points:
            self.points[str(point["id"])] = point

    async def do_search(self, vector: list[float], user_id: str, limit: int = 15) -> list[dict]:
        if self.fail_search:
            raise Exception("Request to http://index/search failed with status 500")
        filters = self.build_user_filter(user_id)
        hits = [
            {"id": point_id, "score": cosine(vector, point["vector"]), "payload": dict(point["payload"])}
            for point_id, point in self.points.items()
            if self._matches(point, filters)
        ]
        hits.sort(key=lambda hit: hit["score"], reverse=True)
        return hits[:limit]

    async def do_scroll_all(self, filters: list[dict], page_size: int = 1000, with_payload: bool = False) -> ScrollResult:
        return ScrollResult(result=[{"id": point_id} for point_id, point in self.points.items() if self._matches(point, filters)])

    async def do_delete_points(self, point_ids: list, wait: bool = True) -> None:
        for point_id in point_ids:
            self.points.pop(str(point_id), None)

    async def do_get_collection_info(self) -> CollectionInfo:
        return CollectionInfo(
            name=self.get_collection_name(),
            status="green",
            points_count=len(self.points),
            vector_size=VECTOR_SIZE,
            distance="Cosine",
        )


class ScriptedLLM:
    def __init__(self, answer: str = "Scripted answer.", error: Exception | None = None):
        self.answer = answer
        self.error = error
        self.prompts: list[str] = []

    async def do_generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("nurodesk.tests")


@pytest.fixture
def helper_config(logger) -> HelperConfig:
    return HelperConfig(logger=logger)


@pytest.fixture
def embedder() -> HashingEmbedder:
    return HashingEmbedder()


@pytest.fixture
def index() -> InMemoryIndex:
    return InMemoryIndex()
