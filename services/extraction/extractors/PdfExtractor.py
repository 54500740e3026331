import asyncio
import io

import PyPDF2

from services.extraction.extractors.ExtractorInterface import ExtractorInterface
from services.extraction.helpers.PdfOcr import PdfOcr
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import SourceDescriptor, SourceType, TextUnit
from shared.models.errors import EmptyDocumentError, ExtractionError


class PdfExtractor(ExtractorInterface):
    """Native text layer per page, with OCR on demand for scanned PDFs.

    OCR runs only when the native text is shorter than EXTRACT_OCR_MIN_TEXT_CHARS,
    and its output is kept (as one extra "pdf_ocr" unit) only if it is longer
    than what the text layer gave.
    """

    def __init__(self, helper_config: HelperConfig, ocr: PdfOcr | None = None):
        super().__init__(helper_config=helper_config)
        self.min_text_chars = helper_config.get_int_val("EXTRACT_OCR_MIN_TEXT_CHARS", default=500)
        self._ocr = ocr or PdfOcr(helper_config=helper_config)

    def get_source_types(self) -> list[SourceType]:
        return [SourceType.PDF]

    async def extract(self, source: SourceDescriptor) -> list[TextUnit]:
        content = self._require_content(source)
        try:
            pages = await asyncio.to_thread(self._read_pages, content)
        except Exception as exc:
            raise ExtractionError(f"PDF processing failed: {exc}") from exc

        units = [
            TextUnit(text=text, metadata={"type": "pdf", "loc": {"pageNumber": number}})
            for number, text in enumerate(pages, start=1)
            if text.strip()
        ]
        native_length = len("\n".join(pages))
        self.logging.debug("PDF '%s': %d page(s), %d characters of native text.", source.identifier, len(pages), native_length)

        if native_length < self.min_text_chars:
            self.logging.info("Low text detected in '%s' (%d chars), running OCR...", source.identifier, native_length)
            try:
                ocr_text = await self._ocr.do_ocr(content)
            except ExtractionError as exc:
                if not units:
                    raise
                self.logging.warning("OCR failed for '%s', keeping native text only: %s", source.identifier, exc)
                ocr_text = ""
            if len(ocr_text) > native_length:
                units.append(TextUnit(text=ocr_text, metadata={"type": "pdf_ocr"}))

        if not units:
            raise EmptyDocumentError(f"No text could be extracted from PDF '{source.identifier}'.")
        return units

    @staticmethod
    def _read_pages(content: bytes) -> list[str]:
        reader = PyPDF2.PdfReader(io.BytesIO(content))
        return [page.extract_text() or "" for page in reader.pages]
