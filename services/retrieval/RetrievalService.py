from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.errors import RetrievalError
from shared.models.search import RetrievedDocument


class RetrievalService:
    """Embeds a query and runs a tenant-filtered similarity search."""

    def __init__(
        self,
        helper_config: HelperConfig,
        embed_client: EmbedClientInterface,
        rag_client: RAGClientInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self.top_k = helper_config.get_int_val("RETRIEVAL_TOP_K", default=15)
        self._embed_client = embed_client
        self._rag_client = rag_client

    async def retrieve(self, query: str, user_id: str, k: int | None = None) -> list[RetrievedDocument]:
        """Return the user's chunks most similar to the query.

        Args:
            query (str): The natural language question.
            user_id (str): The requesting user's id. Only this user's points are searched.
            k (int | None): Maximum number of results; RETRIEVAL_TOP_K when not given.

        Returns:
            list[RetrievedDocument]: Sorted by descending score. Empty when nothing matched.

        Raises:
            ValueError: If k is smaller than 1.
            RetrievalError: If embedding the query or the index search fails.
        """
        if not user_id:
            raise RetrievalError("Refusing to search without a user id.")
        limit = k if k is not None else self.top_k
        if limit < 1:
            raise ValueError(f"k must be at least 1, got {limit}.")

        try:
            vector = await self._embed_client.embed_text(query)
        except Exception as exc:
            self.logging.error("Query embedding failed for user %s: %s", user_id, exc)
            raise RetrievalError(f"Query embedding failed: {exc}") from exc

        try:
            hits = await self._rag_client.do_search(vector, user_id=user_id, limit=limit)
        except Exception as exc:
            self.logging.error("Index search failed for user %s: %s", user_id, exc)
            raise RetrievalError(f"Index search failed: {exc}") from exc

        documents = [RetrievedDocument.from_hit(hit) for hit in hits]
        foreign = [doc for doc in documents if doc.user_id != user_id]
        if foreign:
            self.logging.error("Index returned %d point(s) of other users for user %s; dropping them.", len(foreign), user_id)
            documents = [doc for doc in documents if doc.user_id == user_id]

        documents.sort(key=lambda doc: doc.score, reverse=True)
        self.logging.info("Retrieved %d document(s) for user %s, query=%r", len(documents), user_id, query[:80])
        return documents
