from services.extraction.extractors.ExtractorInterface import ExtractorInterface
from shared.models.document import SourceDescriptor, SourceType, TextUnit
from shared.models.errors import EmptyDocumentError


class TextExtractor(ExtractorInterface):
    def get_source_types(self) -> list[SourceType]:
        return [SourceType.TXT]

    async def extract(self, source: SourceDescriptor) -> list[TextUnit]:
        text = self._require_content(source).decode("utf-8", errors="replace")
        if not text.strip():
            raise EmptyDocumentError(f"TXT file '{source.identifier}' is empty.")
        self.logging.info("Loaded %d characters from TXT '%s'.", len(text), source.identifier)
        return [TextUnit(text=text, metadata={"type": "txt"})]
