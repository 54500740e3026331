"""Ingestion service.

Extracts one uploaded source, splits its text into chunks, embeds every chunk
via the EmbedClient and upserts the resulting points into the RAG backend,
each payload tagged with the owning user's id.
"""

from services.chunking.TextChunker import TextChunker
from services.extraction.ExtractionService import ExtractionService
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.VectorPoint import VectorPoint
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import SourceDescriptor
from shared.models.errors import EmptyDocumentError, IngestionError


class IngestionService:
    """Orchestrates extract -> chunk -> embed -> upsert for one source, and per-user purges."""

    def __init__(
        self,
        helper_config: HelperConfig,
        extraction_service: ExtractionService,
        chunker: TextChunker,
        embed_client: EmbedClientInterface,
        rag_client: RAGClientInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self.upsert_batch_size = helper_config.get_int_val("UPSERT_BATCH_SIZE", default=100)
        self.scroll_page_size = helper_config.get_int_val("PURGE_SCROLL_PAGE_SIZE", default=10000)
        self._extraction = extraction_service
        self._chunker = chunker
        self._embed_client = embed_client
        self._rag_client = rag_client

    ##########################################
    ################ INGEST ##################
    ##########################################

    async def ingest(self, source: SourceDescriptor, user_id: str) -> int:
        """Store one source for one user.

        Args:
            source (SourceDescriptor): The uploaded file or URL.
            user_id (str): Opaque id of the owning user, stamped on every point.

        Returns:
            int: Number of chunks stored.

        Raises:
            ExtractionError: If the source yields no usable text. Nothing is stored.
            IngestionError: If an embedding or upsert call fails. Points of earlier
                batches may already be stored.
        """
        if not user_id:
            raise IngestionError("Refusing to ingest without a user id.")

        units = await self._extraction.extract(source)

        chunks = self._chunker.split(units, metadata={**source.origin_metadata(), "userId": user_id})
        if not chunks:
            raise EmptyDocumentError(f"'{source.identifier}' produced no chunks.")
        self.logging.info("Embedding %d chunk(s) of '%s' for user %s...", len(chunks), source.identifier, user_id)

        # one chunk at a time, in order
        points: list[dict] = []
        for index, chunk in enumerate(chunks, start=1):
            try:
                vector = await self._embed_client.embed_text(chunk.text)
            except Exception as exc:
                self.logging.error("Embedding failed for chunk %d of %d from '%s': %s", index, len(chunks), source.identifier, exc)
                raise IngestionError(f"Embedding failed for chunk {index} of {len(chunks)} from '{source.identifier}': {exc}") from exc
            points.append({
                "id": chunk.id,
                "vector": vector,
                "payload": VectorPoint.from_chunk(chunk).to_payload(),
            })

        # upsert in batches to avoid oversized requests
        try:
            for batch_start in range(0, len(points), self.upsert_batch_size):
                batch = points[batch_start: batch_start + self.upsert_batch_size]
                await self._rag_client.do_upsert_points(batch)
        except Exception as exc:
            self.logging.error("Upsert failed for '%s': %s", source.identifier, exc)
            raise IngestionError(f"Index upsert failed for '{source.identifier}': {exc}") from exc

        self.logging.info("Stored '%s' for user %s: %d chunks upserted.", source.identifier, user_id, len(points))
        return len(points)

    ##########################################
    ################ PURGE ###################
    ##########################################

    async def purge_user_documents(self, user_id: str) -> int:
        """Delete every point owned by one user (scroll ids, then delete by id).

        Not atomic: a point upserted for the same user between the scroll and
        the delete survives the purge.

        Returns:
            int: Number of points deleted.

        Raises:
            IngestionError: If the scroll or the delete call fails.
        """
        if not user_id:
            raise IngestionError("Refusing to purge without a user id.")

        try:
            scroll_result = await self._rag_client.do_scroll_all(
                filters=self._rag_client.build_user_filter(user_id),
                page_size=self.scroll_page_size,
            )
            point_ids = scroll_result.point_ids()
            if point_ids:
                await self._rag_client.do_delete_points(point_ids)
        except Exception as exc:
            self.logging.error("Purge failed for user %s: %s", user_id, exc)
            raise IngestionError(f"Purging documents of user {user_id} failed: {exc}") from exc

        self.logging.info("Purged %d point(s) of user %s.", len(point_ids), user_id)
        return len(point_ids)
