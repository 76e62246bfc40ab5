"""
Tests for text acquisition and normalization.

Acquisition never fails: any problem with the upload falls back to the
original filename as the only text.
"""

import pytest

from conftest import FakeOCRBackend, FakePDFBackend, page_from_lines, png_bytes
from invoice_fields.input_handler import (
    ExtractionInput,
    InputHandler,
    PDFProcessor,
    PageText,
    TextNormalizer,
    TextRun,
    reconstruct_page_text,
)
from invoice_fields.ocr_engine import OCREngine
from invoice_fields.utils.exceptions import ConfigurationError, CorruptedFileError

from config import ConfigurationManager


def make_handler(pages=None, corrupted=False, ocr_text="", ocr_fail=False):
    pdf_backend = FakePDFBackend(pages, corrupted=corrupted)
    ocr_backend = FakeOCRBackend(ocr_text, fail=ocr_fail)
    handler = InputHandler(
        pdf_processor=PDFProcessor(backend=pdf_backend),
        ocr_engine=OCREngine(backend=ocr_backend)
    )
    return handler, pdf_backend, ocr_backend


class TestReconstructPageText:

    def test_new_line_on_vertical_shift(self):
        runs = [TextRun("Total:", 10, 100), TextRun("$50.00", 60, 100), TextRun("Due", 10, 120)]
        assert reconstruct_page_text(runs) == "Total: $50.00\nDue"

    def test_small_shifts_are_joined(self):
        runs = [TextRun("IN", 10, 100), TextRun("V-1", 15, 102)]
        assert reconstruct_page_text(runs) == "INV-1"

    def test_no_double_space(self):
        runs = [TextRun("Total: ", 10, 100), TextRun("$5", 80, 100)]
        assert reconstruct_page_text(runs) == "Total: $5"

    def test_empty_runs_are_ignored(self):
        assert reconstruct_page_text([TextRun("", 0, 0), TextRun("A", 50, 50)]) == "A"


class TestTextNormalizer:

    def setup_method(self):
        self.normalizer = TextNormalizer()

    def test_whitespace_and_filename(self):
        raw = "Total:\t $50.00  \r\n\r\n\r\n\r\nDue Date"
        assert self.normalizer.normalize(raw, "a.pdf") == "Total: $50.00\n\nDue Date\n\nFilename: a.pdf"

    def test_empty_text_is_just_filename(self):
        assert self.normalizer.normalize("   \n ", "scan.png") == "Filename: scan.png"

    def test_never_empty(self):
        assert self.normalizer.normalize(None, "") == "Filename:"


class TestExtractionInput:

    def test_from_path(self, tmp_path):
        path = tmp_path / "AWS-INV-2024-0099.pdf"
        path.write_bytes(b"%PDF-1.4")

        inp = ExtractionInput.from_path(path)

        assert inp.mime_type == "application/pdf"
        assert inp.original_filename == "AWS-INV-2024-0099.pdf"
        assert inp.data == b"%PDF-1.4"
        assert inp.extension == ".pdf"


class TestInputHandler:

    def test_plain_text(self):
        handler, _, _ = make_handler()
        inp = ExtractionInput("Total: 10.00 €".encode("utf-8"), "text/plain", "a.txt")
        assert handler.acquire(inp) == "Total: 10.00 €"

    def test_invalid_utf8_is_replaced(self):
        handler, _, _ = make_handler()
        inp = ExtractionInput(b"Total \xff 10", "text/plain", "a.txt")
        assert handler.acquire(inp) == "Total \ufffd 10"

    @pytest.mark.parametrize("data", [None, b""])
    def test_missing_buffer_returns_filename(self, data):
        handler, _, _ = make_handler()
        inp = ExtractionInput(data, "application/pdf", "AWS-INV-2024-0099.pdf")
        assert handler.acquire(inp) == "AWS-INV-2024-0099.pdf"

    def test_file_type_detection(self):
        handler, _, _ = make_handler()
        assert handler.detect_file_type(ExtractionInput(b"x", "application/octet-stream", "a.PDF")) == "pdf"
        assert handler.detect_file_type(ExtractionInput(b"x", "image/png", "upload")) == "image"
        assert handler.detect_file_type(ExtractionInput(b"x", "application/octet-stream", "a.jpg")) == "image"
        assert handler.detect_file_type(ExtractionInput(b"x", "text/csv", "a.csv")) == "text"

    def test_pdf_text_layer(self):
        pages = [
            page_from_lines(1, ["Invoice Number: INV-2024-001", "Total: $1,234.56 for cloud hosting"]),
            page_from_lines(2, ["Due Date: 20/03/2024"]),
        ]
        handler, backend, ocr = make_handler(pages)

        text = handler.acquire(ExtractionInput(b"%PDF", "application/pdf", "a.pdf"))

        assert text == (
            "Invoice Number: INV-2024-001\nTotal: $1,234.56 for cloud hosting"
            "\n\nDue Date: 20/03/2024"
        )
        assert backend.requested_pages == 3
        assert ocr.calls == 0

    def test_pdf_reads_at_most_three_pages(self):
        pages = [page_from_lines(i, [f"Page {i} with enough text to skip OCR"]) for i in range(1, 6)]
        handler, _, _ = make_handler(pages)

        text = handler.acquire(ExtractionInput(b"%PDF", "application/pdf", "a.pdf"))

        assert "Page 3" in text
        assert "Page 4" not in text

    def test_corrupted_pdf_returns_filename(self):
        handler, _, _ = make_handler(corrupted=True)
        inp = ExtractionInput(b"not a pdf", "application/pdf", "broken.pdf")
        assert handler.acquire(inp) == "broken.pdf"

    def test_image_only_pdf_falls_back_to_ocr(self, monkeypatch):
        handler, _, ocr = make_handler([PageText(1, [])], ocr_text="Total: $99.00")
        monkeypatch.setattr(handler.pdf_processor, "render_pages", lambda data: [png_bytes()])

        text = handler.acquire(ExtractionInput(b"%PDF", "application/pdf", "scan.pdf"))

        assert text == "Total: $99.00"
        assert ocr.calls == 1

    def test_failed_ocr_fallback_keeps_text_layer(self, monkeypatch):
        handler, _, _ = make_handler([page_from_lines(1, ["Total"])])

        def broken_render(data):
            raise CorruptedFileError("<pdf stream>", "cannot render")

        monkeypatch.setattr(handler.pdf_processor, "render_pages", broken_render)

        assert handler.acquire(ExtractionInput(b"%PDF", "application/pdf", "scan.pdf")) == "Total"

    def test_ocr_fallback_can_be_disabled(self):
        ConfigurationManager().set("acquisition.pdf.ocr_fallback", False)
        handler, _, ocr = make_handler([page_from_lines(1, ["Total"])], ocr_text="OCR text")

        assert handler.acquire(ExtractionInput(b"%PDF", "application/pdf", "scan.pdf")) == "Total"
        assert ocr.calls == 0

    def test_image_ocr(self):
        handler, _, ocr = make_handler(ocr_text="Amount Due: $450.00")
        inp = ExtractionInput(png_bytes(), "image/png", "receipt.png")

        assert handler.acquire(inp) == "Amount Due: $450.00"
        assert ocr.calls == 1

    def test_ocr_failure_returns_filename(self):
        handler, _, _ = make_handler(ocr_fail=True)
        inp = ExtractionInput(png_bytes(), "image/png", "receipt.png")
        assert handler.acquire(inp) == "receipt.png"

    def test_undecodable_image_returns_filename(self):
        handler, _, _ = make_handler(ocr_text="never used")
        inp = ExtractionInput(b"not an image", "image/jpeg", "photo.jpg")
        assert handler.acquire(inp) == "photo.jpg"


def test_unknown_pdf_backend_is_a_configuration_error():
    ConfigurationManager().set("acquisition.pdf.backend", "nope")
    with pytest.raises(ConfigurationError):
        PDFProcessor()


def test_unknown_ocr_engine_is_a_configuration_error():
    ConfigurationManager().set("ocr.engine", "nope")
    with pytest.raises(ConfigurationError):
        OCREngine()
