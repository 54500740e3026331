from typing import Any

from langchain_text_splitters import RecursiveCharacterTextSplitter

from shared.helper.HelperConfig import HelperConfig
from shared.models.document import Chunk, TextUnit

# paragraph, line, sentence, word, then a hard character cut
SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


class TextChunker:
    """Splits text units into overlapping, size-bounded chunks along natural boundaries."""

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self.chunk_size = helper_config.get_int_val("CHUNK_SIZE", default=4000)
        self.chunk_overlap = helper_config.get_int_val("CHUNK_OVERLAP", default=800)
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError(f"CHUNK_OVERLAP ({self.chunk_overlap}) must be smaller than CHUNK_SIZE ({self.chunk_size}).")
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            separators=SEPARATORS,
            # a sentence keeps its full stop instead of passing it to the next chunk
            keep_separator="end",
        )

    def split(self, units: list[TextUnit], metadata: dict[str, Any] | None = None) -> list[Chunk]:
        """Split every unit and stamp each chunk with the unit's metadata.

        Args:
            units (list[TextUnit]): Extracted text units, in source order.
            metadata (dict[str, Any] | None): Caller metadata (userId, uploadedAt, ...).
                Wins over unit metadata on key collision.

        Returns:
            list[Chunk]: Chunks in source order, none longer than CHUNK_SIZE.
        """
        caller_metadata = metadata or {}
        chunks: list[Chunk] = []
        for unit in units:
            for piece in self._splitter.split_text(unit.text):
                chunks.append(Chunk(text=piece, metadata={**unit.metadata, **caller_metadata}))
        self.logging.debug("Split %d text unit(s) into %d chunk(s).", len(units), len(chunks))
        return chunks
