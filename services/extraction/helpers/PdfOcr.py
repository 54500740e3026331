import asyncio
import os
import tempfile

import pytesseract
from PIL import Image

from services.extraction.helpers.command import run_command
from shared.helper.HelperConfig import HelperConfig
from shared.models.errors import CommandTimeoutError, ExtractionError


class PdfOcr:
    """Rasterizes a PDF with pdftoppm and reads every page image with Tesseract.

    All page images live in a temporary directory that is removed when the
    call returns, whether OCR succeeded, failed or timed out.
    """

    def __init__(self, helper_config: HelperConfig, command_runner=run_command):
        self.logging = helper_config.get_logger()
        self._run_command = command_runner
        self.rasterize_timeout = helper_config.get_number_val("EXTRACT_OCR_TIMEOUT", default=120)
        self.page_timeout = helper_config.get_number_val("EXTRACT_OCR_PAGE_TIMEOUT", default=60)
        self.language = helper_config.get_string_val("EXTRACT_OCR_LANGUAGE", default="eng")

    ##########################################
    ################ CORE ####################
    ##########################################

    async def do_ocr(self, pdf_bytes: bytes) -> str:
        """Return the OCR text of all pages, in page order.

        Raises:
            ExtractionError: If rasterization, Tesseract or reading the page images fails.
            CommandTimeoutError: If rasterization or a single page exceeds its timeout.
        """
        try:
            return await self._rasterize_and_read(pdf_bytes)
        except OSError as exc:
            raise ExtractionError(f"OCR could not access its page images: {exc}") from exc

    async def _rasterize_and_read(self, pdf_bytes: bytes) -> str:
        with tempfile.TemporaryDirectory(prefix="nurodesk_ocr_") as tmp_dir:
            pdf_path = os.path.join(tmp_dir, "source.pdf")
            with open(pdf_path, "wb") as fh:
                fh.write(pdf_bytes)

            await self._run_command(
                ["pdftoppm", "-png", pdf_path, os.path.join(tmp_dir, "page")],
                timeout=self.rasterize_timeout,
                check=True,
            )

            # pdftoppm zero-pads page numbers, so lexical order is page order
            images = sorted(f for f in os.listdir(tmp_dir) if f.endswith(".png"))
            self.logging.info("Running OCR on %d page image(s)...", len(images))

            texts: list[str] = []
            for image_name in images:
                text = await asyncio.to_thread(self._read_image, os.path.join(tmp_dir, image_name))
                texts.append(text)

        return "\n".join(texts).strip()

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _read_image(self, image_path: str) -> str:
        try:
            with Image.open(image_path) as image:
                return pytesseract.image_to_string(image, lang=self.language, timeout=self.page_timeout)
        except pytesseract.TesseractNotFoundError as exc:
            raise ExtractionError("Tesseract is not installed or not found in PATH.") from exc
        except pytesseract.TesseractError as exc:
            raise ExtractionError(f"OCR of '{os.path.basename(image_path)}' failed: {exc}") from exc
        except OSError as exc:
            # corrupt or unreadable page image
            raise ExtractionError(f"Page image '{os.path.basename(image_path)}' could not be read: {exc}") from exc
        except RuntimeError as exc:
            # pytesseract signals its own timeout with a bare RuntimeError
            raise CommandTimeoutError(f"OCR of '{os.path.basename(image_path)}' did not finish within {self.page_timeout}s.") from exc
