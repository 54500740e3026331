import httpx
from bs4 import BeautifulSoup

from services.extraction.extractors.ExtractorInterface import ExtractorInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import SourceDescriptor, SourceType, TextUnit
from shared.models.errors import ExtractionError, InsufficientContentError

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; NuroDesk/1.0; +document-ingestion)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

# elements whose text never belongs to the visible page body
NON_CONTENT_TAGS = ["script", "style", "noscript", "template", "svg", "nav", "header", "footer", "aside"]


class WebExtractor(ExtractorInterface):
    """Fetches a page and keeps the readable text of its <body>."""

    def __init__(self, helper_config: HelperConfig, transport: httpx.AsyncBaseTransport | None = None):
        super().__init__(helper_config=helper_config)
        self.min_chars = helper_config.get_int_val("EXTRACT_WEB_MIN_CHARS", default=100)
        self.timeout = helper_config.get_number_val("EXTRACT_WEB_TIMEOUT", default=30)
        self._transport = transport

    def get_source_types(self) -> list[SourceType]:
        return [SourceType.URL]

    async def extract(self, source: SourceDescriptor) -> list[TextUnit]:
        url = source.identifier
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers=DEFAULT_HEADERS,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ExtractionError(f"Failed to load webpage '{url}': {exc}") from exc

        text = self.extract_body_text(response.text)
        if len(text) < self.min_chars:
            raise InsufficientContentError(f"Insufficient content on webpage '{url}' ({len(text)} characters).")

        self.logging.info("Loaded %d characters from webpage '%s'.", len(text), url)
        return [TextUnit(text=text, metadata={"type": "url"})]

    @staticmethod
    def extract_body_text(html: str) -> str:
        """Return the visible text of the page body, one text block per line."""
        soup = BeautifulSoup(html, "html.parser")
        for tag in soup(NON_CONTENT_TAGS):
            tag.decompose()
        body = soup.body or soup
        lines = [line.strip() for line in body.get_text(separator="\n").splitlines()]
        return "\n".join(line for line in lines if line)
