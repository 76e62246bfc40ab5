"""
Pytest configuration and shared fakes.

The OCR, PDF text-layer and completion ports are replaced by in-memory
fakes so the suite runs without Tesseract, real PDFs or network access.
"""

import io
from typing import List, Optional

import pytest
from PIL import Image

from config import ConfigurationManager
from invoice_fields.input_handler.pdf_processor import PageText, PDFTextBackend, TextRun
from invoice_fields.model_inference.completion_client import CompletionClient
from invoice_fields.ocr_engine.tesseract_backend import OCRBackend
from invoice_fields.utils.exceptions import (
    CompletionServiceError,
    CorruptedFileError,
    OCRProcessingError,
)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Fresh configuration singleton without API keys for every test"""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_MODEL", raising=False)
    monkeypatch.delenv("INVOICE_FIELDS_LOG_LEVEL", raising=False)
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


class FakeCompletionClient(CompletionClient):
    """Returns a canned answer, or raises the configured error"""

    provider = "fake"

    def __init__(self, response: Optional[str] = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.prompts: List[str] = []

    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if not self.response:
            raise CompletionServiceError("Empty response", self.provider)
        return self.response


class FakeOCRBackend(OCRBackend):
    """Returns fixed text for every image"""

    name = "fake"

    def __init__(self, text: str = "", fail: bool = False):
        self.text = text
        self.fail = fail
        self.calls = 0

    def recognize_image(self, image: Image.Image) -> str:
        self.calls += 1
        if self.fail:
            raise OCRProcessingError("image", "engine crashed")
        return self.text


class FakePDFBackend(PDFTextBackend):
    """Serves pre-built pages regardless of the bytes passed in"""

    name = "fake"

    def __init__(self, pages: Optional[List[PageText]] = None, corrupted: bool = False):
        self.pages = pages or []
        self.corrupted = corrupted
        self.requested_pages = None

    def extract_pages(self, data: bytes, max_pages: int) -> List[PageText]:
        self.requested_pages = max_pages
        if self.corrupted:
            raise CorruptedFileError("<pdf stream>", "not a PDF")
        return self.pages[:max_pages]


def page_from_lines(page_number: int, lines: List[str]) -> PageText:
    """Build a page with one run per line, 20 units apart vertically"""
    runs = [TextRun(line, 10, 100 + 20 * index) for index, line in enumerate(lines)]
    return PageText(page_number, runs)


def png_bytes(size=(600, 600), color="white") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()
