"""Extraction service.

Dispatches an uploaded source to the strategy registered for its type and
normalises the outcome: either a non-empty list of text units, or an
ExtractionError. Web URLs pointing at YouTube are routed to the video strategy.
"""

from urllib.parse import urlparse

from services.extraction.extractors.CsvExtractor import CsvExtractor
from services.extraction.extractors.ExtractorInterface import ExtractorInterface
from services.extraction.extractors.PdfExtractor import PdfExtractor
from services.extraction.extractors.TextExtractor import TextExtractor
from services.extraction.extractors.WebExtractor import WebExtractor
from services.extraction.youtube.YouTubeExtractor import YouTubeExtractor
from services.extraction.youtube.youtube_utils import is_youtube_url
from shared.clients.stt.STTClientInterface import STTClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import SourceDescriptor, SourceType, TextUnit
from shared.models.errors import (
    EmptyDocumentError,
    ExtractionError,
    InvalidURLError,
    UnsupportedSourceError,
)


class ExtractionService:
    """Converts a raw source (file bytes or URL) into text units with metadata."""

    def __init__(
        self,
        helper_config: HelperConfig,
        stt_client: STTClientInterface | None = None,
        extractors: list[ExtractorInterface] | None = None,
    ) -> None:
        self.logging = helper_config.get_logger()
        if extractors is None:
            if stt_client is None:
                raise ValueError("An STT client is required to build the default extractors.")
            extractors = [
                PdfExtractor(helper_config=helper_config),
                CsvExtractor(helper_config=helper_config),
                TextExtractor(helper_config=helper_config),
                WebExtractor(helper_config=helper_config),
                YouTubeExtractor(helper_config=helper_config, stt_client=stt_client),
            ]
        self._registry: dict[SourceType, ExtractorInterface] = {}
        for extractor in extractors:
            for source_type in extractor.get_source_types():
                self._registry[source_type] = extractor

    ##########################################
    ################ GETTER ##################
    ##########################################

    def resolve_source_type(self, source: SourceDescriptor) -> SourceType:
        """Return the type used for dispatch.

        URL sources are validated as http(s) and re-typed as youtube when the host is YouTube.

        Raises:
            InvalidURLError: If a URL source is not an absolute http(s) URL.
        """
        if not source.is_url():
            return source.source_type
        parsed = urlparse(source.identifier)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidURLError(f"Invalid URL format: '{source.identifier}'.")
        if is_youtube_url(source.identifier):
            return SourceType.YOUTUBE
        return source.source_type

    ##########################################
    ################ CORE ####################
    ##########################################

    async def extract(self, source: SourceDescriptor) -> list[TextUnit]:
        """Extract text units from one source.

        Args:
            source (SourceDescriptor): The uploaded file or URL.

        Returns:
            list[TextUnit]: Non-empty units in source order.

        Raises:
            ExtractionError: (or a refinement) if no usable text can be produced.
        """
        source_type = self.resolve_source_type(source)
        extractor = self._registry.get(source_type)
        if extractor is None:
            raise UnsupportedSourceError(f"No extraction strategy for source type '{source_type.value}'.")

        self.logging.info("Extracting %s source '%s'...", source_type.value, source.identifier)
        try:
            units = await extractor.extract(source)
        except ExtractionError:
            raise
        except Exception as exc:
            self.logging.error("Extraction of %s source '%s' failed: %s", source_type.value, source.identifier, exc)
            raise ExtractionError(f"Failed to process {source_type.value.upper()} '{source.identifier}': {exc}") from exc

        units = [unit for unit in units if unit.text.strip()]
        if not units:
            raise EmptyDocumentError(f"No content extracted from '{source.identifier}'.")

        self.logging.info(
            "Extracted %d text unit(s), %d characters from '%s'.",
            len(units), sum(len(u.text) for u in units), source.identifier,
        )
        return units
