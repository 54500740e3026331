from abc import abstractmethod
from typing import Any

from shared.clients.ClientInterface import ClientInterface
from shared.clients.rag.models.CollectionInfo import CollectionInfo
from shared.clients.rag.models.Scroll import ScrollResult
from shared.helper.HelperConfig import HelperConfig

USER_ID_KEY = "userId"


class RAGClientInterface(ClientInterface):
    """Vector index holding the chunks of all users in one collection.

    Tenancy is a payload field: upserts are rejected unless every point carries
    a userId, and do_search always adds the userId filter itself, so no caller
    can issue an unfiltered similarity search.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ############### CHECKER ##################
    ##########################################

    @staticmethod
    def validate_points(points: list[dict[str, Any]]) -> None:
        """
        Raises:
            ValueError: If any point has no payload userId.
        """
        for point in points:
            if not (point.get("payload") or {}).get(USER_ID_KEY):
                raise ValueError(f"Point {point.get('id')!r} has no '{USER_ID_KEY}' in its payload.")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "rag"

    @abstractmethod
    def get_collection_name(self) -> str:
        pass

    @staticmethod
    def build_user_filter(user_id: str) -> list[dict]:
        """Returns the filter conditions that restrict a request to one user's points."""
        return [{"key": USER_ID_KEY, "match": {"value": user_id}}]

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_collection(self) -> str:
        """Collection resource: create (PUT) and info (GET)."""
        pass

    @abstractmethod
    def _get_endpoint_exists(self) -> str:
        pass

    @abstractmethod
    def _get_endpoint_upsert(self) -> str:
        pass

    @abstractmethod
    def _get_endpoint_search(self) -> str:
        pass

    @abstractmethod
    def _get_endpoint_scroll(self) -> str:
        pass

    @abstractmethod
    def _get_endpoint_delete(self) -> str:
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_create_collection_payload(self, vector_size: int, distance: str) -> dict:
        pass

    @abstractmethod
    def get_upsert_payload(self, points: list[dict[str, Any]]) -> dict:
        pass

    @abstractmethod
    def get_search_payload(self, vector: list[float], filters: list[dict], limit: int) -> dict:
        """
        Body of a filtered nearest-neighbour search returning payloads, not vectors.

        Args:
            vector (list[float]): The query vector.
            filters (list[dict]): Conditions that must all match.
            limit (int): Maximum number of hits.
        """
        pass

    @abstractmethod
    def get_scroll_payload(self, filters: list[dict], limit: int, offset: str | int | None = None, with_payload: bool = False) -> dict:
        """
        Body of one scroll page over the points matching the filters.

        Args:
            filters (list[dict]): Conditions that must all match.
            limit (int): Page size.
            offset (str | int | None): Cursor returned by the previous page.
            with_payload (bool): Return payloads along with the ids.
        """
        pass

    @abstractmethod
    def get_delete_payload(self, point_ids: list[str | int]) -> dict:
        pass

    ################ RESPONSE PARSER ##################
    @abstractmethod
    def extract_exists(self, raw_response: dict) -> bool:
        pass

    @abstractmethod
    def extract_search_hits(self, raw_response: dict) -> list[dict]:
        """
        Returns:
            list[dict]: Hits as {"id", "score", "payload"}, best first.
        """
        pass

    @abstractmethod
    def extract_scroll_page(self, raw_response: dict) -> ScrollResult:
        """
        Returns:
            ScrollResult: The page's points and the cursor of the next page (None on the last page).
        """
        pass

    @abstractmethod
    def extract_collection_info(self, raw_response: dict) -> CollectionInfo:
        pass

    ##########################################
    ########### COLLECTION ###################
    ##########################################

    async def do_existence_check(self) -> bool:
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_exists(), raise_on_error=True)
        return self.extract_exists(resp.json())

    async def do_create_collection(self, vector_size: int, distance: str = "Cosine") -> None:
        await self.do_request(
            method="PUT",
            endpoint=self._get_endpoint_collection(),
            json=self.get_create_collection_payload(vector_size, distance),
            raise_on_error=True,
        )

    async def do_ensure_collection(self, vector_size: int, distance: str = "Cosine") -> bool:
        """Create the collection unless it exists.

        Args:
            vector_size (int): Dimension of the embedding model.
            distance (str): Similarity metric, e.g. "Cosine".

        Returns:
            bool: True if the collection was created, False if it already existed.
        """
        if await self.do_existence_check():
            self.logging.info("Collection %r already exists.", self.get_collection_name())
            return False
        await self.do_create_collection(vector_size=vector_size, distance=distance)
        self.logging.info("Collection %r created (size=%d, distance=%s).", self.get_collection_name(), vector_size, distance)
        return True

    async def do_get_collection_info(self) -> CollectionInfo:
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_collection(), raise_on_error=True)
        return self.extract_collection_info(resp.json())

    ##########################################
    ############### POINTS ###################
    ##########################################

    async def do_upsert_points(self, points: list[dict[str, Any]], wait: bool = True) -> None:
        """Insert points, replacing any point with the same id.

        Args:
            points (list[dict[str, Any]]): Points as {"id", "vector", "payload"}.
            wait (bool): Return only after the backend has applied the write.

        Raises:
            ValueError: If a point has no payload userId. Nothing is sent in that case.
            BackendError: If the backend rejects the request.
        """
        self.validate_points(points)
        await self.do_request(
            method="PUT",
            endpoint=self._get_endpoint_upsert(),
            json=self.get_upsert_payload(points),
            params={"wait": str(wait).lower()},
            raise_on_error=True,
        )

    async def do_search(self, vector: list[float], user_id: str, limit: int = 15) -> list[dict]:
        """Nearest-neighbour search over one user's points.

        Args:
            vector (list[float]): The query embedding.
            user_id (str): The requesting user. Always applied as a filter.
            limit (int): Maximum number of hits.

        Returns:
            list[dict]: Hits as {"id", "score", "payload"}, best first.
        """
        if not user_id:
            raise ValueError("A user id is required for every search.")
        resp = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_search(),
            json=self.get_search_payload(vector, self.build_user_filter(user_id), limit),
            raise_on_error=True,
        )
        return self.extract_search_hits(resp.json())

    async def do_scroll(self, filters: list[dict], limit: int, offset: str | int | None = None, with_payload: bool = False) -> ScrollResult:
        """Fetch one page of points matching the filters. See do_scroll_all for every page."""
        resp = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_scroll(),
            json=self.get_scroll_payload(filters, limit, offset, with_payload),
            raise_on_error=True,
        )
        return self.extract_scroll_page(resp.json())

    async def do_scroll_all(self, filters: list[dict], page_size: int = 1000, with_payload: bool = False) -> ScrollResult:
        """Follow the scroll cursor until the last page.

        Returns:
            ScrollResult: Points of all pages; next_page_offset is None.
        """
        points: list[dict] = []
        offset: str | int | None = None
        page = 0
        while True:
            page += 1
            result = await self.do_scroll(filters, limit=page_size, offset=offset, with_payload=with_payload)
            points.extend(result.result)
            self.logging.debug("Scroll page %d from %s: %d point(s) so far.", page, self.get_engine_name(), len(points))
            offset = result.next_page_offset
            if offset is None:
                return ScrollResult(result=points)

    async def do_delete_points(self, point_ids: list[str | int], wait: bool = True) -> None:
        await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_delete(),
            json=self.get_delete_payload(point_ids),
            params={"wait": str(wait).lower()},
            raise_on_error=True,
        )
