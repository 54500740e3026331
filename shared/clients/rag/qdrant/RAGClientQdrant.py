from typing import Any

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.CollectionInfo import CollectionInfo
from shared.clients.rag.models.Scroll import ScrollResult
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class RAGClientQdrant(RAGClientInterface):
    """Qdrant REST API (https://api.qdrant.tech)."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None)
        self._api_key = self.get_config_val("API_KEY", default="")
        self._collection = self.get_config_val("COLLECTION", default="nurodesk_documents")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Qdrant"

    def get_collection_name(self) -> str:
        return self._collection

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string"),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="COLLECTION", val_type="string", default="nurodesk_documents"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"api-key": self._api_key} if self._api_key else {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/healthz"

    def _collection_path(self, suffix: str = "") -> str:
        return f"/collections/{self._collection}{suffix}"

    def _get_endpoint_collection(self) -> str:
        return self._collection_path()

    def _get_endpoint_exists(self) -> str:
        return self._collection_path("/exists")

    def _get_endpoint_upsert(self) -> str:
        return self._collection_path("/points")

    def _get_endpoint_search(self) -> str:
        return self._collection_path("/points/search")

    def _get_endpoint_scroll(self) -> str:
        return self._collection_path("/points/scroll")

    def _get_endpoint_delete(self) -> str:
        return self._collection_path("/points/delete")

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_create_collection_payload(self, vector_size: int, distance: str) -> dict:
        return {"vectors": {"size": vector_size, "distance": distance}}

    def get_upsert_payload(self, points: list[dict[str, Any]]) -> dict:
        return {"points": points}

    def get_search_payload(self, vector: list[float], filters: list[dict], limit: int) -> dict:
        return {
            "vector": vector,
            "filter": {"must": filters},
            "limit": limit,
            "with_payload": True,
            "with_vector": False,
        }

    def get_scroll_payload(self, filters: list[dict], limit: int, offset: str | int | None = None, with_payload: bool = False) -> dict:
        payload = {
            "filter": {"must": filters},
            "limit": limit,
            "with_payload": with_payload,
            "with_vector": False,
        }
        if offset is not None:
            payload["offset"] = offset
        return payload

    def get_delete_payload(self, point_ids: list[str | int]) -> dict:
        return {"points": point_ids}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_exists(self, raw_response: dict) -> bool:
        return bool((raw_response.get("result") or {}).get("exists"))

    def extract_search_hits(self, raw_response: dict) -> list[dict]:
        return [
            {"id": hit.get("id"), "score": hit.get("score", 0.0), "payload": hit.get("payload") or {}}
            for hit in raw_response.get("result") or []
        ]

    def extract_scroll_page(self, raw_response: dict) -> ScrollResult:
        result = raw_response.get("result") or {}
        return ScrollResult(result=result.get("points") or [], next_page_offset=result.get("next_page_offset"))

    def extract_collection_info(self, raw_response: dict) -> CollectionInfo:
        result = raw_response.get("result") or {}
        vectors = ((result.get("config") or {}).get("params") or {}).get("vectors") or {}
        return CollectionInfo(
            name=self._collection,
            status=result.get("status", "unknown"),
            points_count=result.get("points_count") or 0,
            vector_size=vectors.get("size"),
            distance=vectors.get("distance"),
        )
