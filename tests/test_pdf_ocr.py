import os

import pytesseract
import pytest
from PIL import Image

from services.extraction.extractors.PdfExtractor import PdfExtractor
from services.extraction.helpers.PdfOcr import PdfOcr
from shared.models.document import SourceDescriptor, SourceType
from shared.models.errors import CommandTimeoutError, ExtractionError


class FakeRasterizer:
    """Stands in for pdftoppm: writes the given page files next to the output prefix."""

    def __init__(self, pages: dict[str, bytes | None] | None = None, error: Exception | None = None):
        # None as content means a valid blank PNG
        self.pages = pages or {}
        self.error = error
        self.calls: list[dict] = []

    async def __call__(self, args: list[str], timeout: float, check: bool = False):
        prefix = args[-1]
        self.calls.append({"args": args, "timeout": timeout, "check": check, "dir": os.path.dirname(prefix)})
        assert os.path.exists(args[-2])
        if self.error is not None:
            raise self.error
        for name, content in self.pages.items():
            path = os.path.join(os.path.dirname(prefix), name)
            if content is None:
                Image.new("RGB", (8, 8), "white").save(path)
            else:
                with open(path, "wb") as fh:
                    fh.write(content)

    @property
    def work_dir(self) -> str:
        return self.calls[-1]["dir"]


@pytest.fixture
def read_by_name(monkeypatch):
    """Tesseract replacement that reports which page image it was given."""
    seen = []

    def image_to_string(image, lang=None, timeout=0):
        seen.append({"lang": lang, "timeout": timeout})
        return f"text of {os.path.basename(image.filename)}"

    monkeypatch.setattr(pytesseract, "image_to_string", image_to_string)
    return seen


def failing_tesseract(monkeypatch, error: Exception) -> None:
    def image_to_string(image, lang=None, timeout=0):
        raise error

    monkeypatch.setattr(pytesseract, "image_to_string", image_to_string)


async def test_pages_are_read_in_page_order(helper_config, read_by_name):
    rasterizer = FakeRasterizer({"page-10.png": None, "page-02.png": None, "page-01.png": None})
    text = await PdfOcr(helper_config, command_runner=rasterizer).do_ocr(b"%PDF-1.4")

    assert text == "text of page-01.png\ntext of page-02.png\ntext of page-10.png"
    call = rasterizer.calls[0]
    assert call["args"][:2] == ["pdftoppm", "-png"]
    assert call["check"] is True
    assert call["timeout"] == 120
    assert not os.path.exists(rasterizer.work_dir)


async def test_ocr_settings_are_passed_to_tesseract(helper_config, read_by_name, monkeypatch):
    monkeypatch.setenv("EXTRACT_OCR_LANGUAGE", "deu")
    monkeypatch.setenv("EXTRACT_OCR_PAGE_TIMEOUT", "15")
    await PdfOcr(helper_config, command_runner=FakeRasterizer({"page-1.png": None})).do_ocr(b"%PDF-1.4")
    assert read_by_name == [{"lang": "deu", "timeout": 15}]


async def test_work_dir_is_removed_when_rasterization_fails(helper_config):
    rasterizer = FakeRasterizer(error=ExtractionError("'pdftoppm' exited with status 1: damaged"))
    with pytest.raises(ExtractionError, match="damaged"):
        await PdfOcr(helper_config, command_runner=rasterizer).do_ocr(b"%PDF-1.4")
    assert not os.path.exists(rasterizer.work_dir)


async def test_work_dir_is_removed_when_rasterization_times_out(helper_config):
    rasterizer = FakeRasterizer(error=CommandTimeoutError("'pdftoppm' did not finish within 120s."))
    with pytest.raises(CommandTimeoutError):
        await PdfOcr(helper_config, command_runner=rasterizer).do_ocr(b"%PDF-1.4")
    assert not os.path.exists(rasterizer.work_dir)


async def test_tesseract_error_is_extraction_error(helper_config, monkeypatch):
    failing_tesseract(monkeypatch, pytesseract.TesseractError(1, "Failed loading language 'xyz'"))
    rasterizer = FakeRasterizer({"page-1.png": None})
    with pytest.raises(ExtractionError, match="OCR of 'page-1.png' failed"):
        await PdfOcr(helper_config, command_runner=rasterizer).do_ocr(b"%PDF-1.4")
    assert not os.path.exists(rasterizer.work_dir)


async def test_missing_tesseract_is_extraction_error(helper_config, monkeypatch):
    failing_tesseract(monkeypatch, pytesseract.TesseractNotFoundError())
    with pytest.raises(ExtractionError, match="Tesseract is not installed"):
        await PdfOcr(helper_config, command_runner=FakeRasterizer({"page-1.png": None})).do_ocr(b"%PDF-1.4")


async def test_page_timeout_is_command_timeout(helper_config, monkeypatch):
    failing_tesseract(monkeypatch, RuntimeError("Tesseract process timeout"))
    with pytest.raises(CommandTimeoutError, match="page-1.png"):
        await PdfOcr(helper_config, command_runner=FakeRasterizer({"page-1.png": None})).do_ocr(b"%PDF-1.4")


async def test_corrupt_page_image_is_extraction_error(helper_config, read_by_name):
    rasterizer = FakeRasterizer({"page-1.png": b"not an image"})
    with pytest.raises(ExtractionError, match="could not be read"):
        await PdfOcr(helper_config, command_runner=rasterizer).do_ocr(b"%PDF-1.4")
    assert not os.path.exists(rasterizer.work_dir)


async def test_corrupt_page_image_keeps_native_pdf_text(helper_config, read_by_name, monkeypatch):
    monkeypatch.setattr(PdfExtractor, "_read_pages", staticmethod(lambda content: ["Native page text, short."]))
    ocr = PdfOcr(helper_config, command_runner=FakeRasterizer({"page-1.png": b"not an image"}))
    source = SourceDescriptor(source_type=SourceType.PDF, identifier="r.pdf", content=b"%PDF-1.4")

    units = await PdfExtractor(helper_config, ocr=ocr).extract(source)

    assert [(u.text, u.metadata["type"]) for u in units] == [("Native page text, short.", "pdf")]
