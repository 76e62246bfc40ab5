"""
PDF Processor Module.

This module reads the text layer of PDF invoices:
    - Positioned text runs per page (PDF text-layer port)
    - Line/word structure rebuilt from run positions
    - Page rendering for OCR of image-only PDFs

Naive concatenation of text runs loses the line breaks and spaces that
the field patterns depend on, so text is rebuilt from run coordinates:
a vertical shift larger than line_tolerance starts a new line and a
horizontal shift larger than space_threshold inserts a space.

Backends:
    - pymupdf (default): PyMuPDF span origins
    - pdfplumber: word boxes

Author: ML Engineering Team
"""

import io
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Type

import fitz  # PyMuPDF
import pdfplumber
from PIL import Image

from config import get_config
from invoice_fields.utils.logger import get_logger
from invoice_fields.utils.exceptions import ConfigurationError, CorruptedFileError

# Initialize module logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class TextRun:
    """A piece of text and the position it was drawn at."""
    text: str
    x: float
    y: float


@dataclass
class PageText:
    """Text runs of one PDF page, in drawing order."""
    page_number: int
    runs: List[TextRun] = field(default_factory=list)


def reconstruct_page_text(
    runs: List[TextRun],
    line_tolerance: float = 5,
    space_threshold: float = 10
) -> str:
    """
    Rebuild page text from positioned runs.

    Args:
        runs: Text runs in drawing order.
        line_tolerance: Vertical shift above which a new line starts.
        space_threshold: Horizontal shift above which a space is inserted.

    Returns:
        Page text with line breaks and word gaps restored.

    Example:
        >>> reconstruct_page_text([
        ...     TextRun("Total:", 10, 100),
        ...     TextRun("$50.00", 60, 100),
        ...     TextRun("Due Date:", 10, 120),
        ... ])
        "Total: $50.00\\nDue Date:"
    """
    parts: List[str] = []
    previous: Optional[TextRun] = None

    for run in runs:
        if not run.text:
            continue

        if previous is not None:
            if abs(run.y - previous.y) > line_tolerance:
                parts.append("\n")
            elif (abs(run.x - previous.x) > space_threshold
                  and not parts[-1][-1:].isspace()
                  and not run.text[:1].isspace()):
                parts.append(" ")

        parts.append(run.text)
        previous = run

    return "".join(parts)


class PDFTextBackend(ABC):
    """Reads positioned text runs from PDF bytes."""

    name = "base"

    @abstractmethod
    def extract_pages(self, data: bytes, max_pages: int) -> List[PageText]:
        """
        Read up to max_pages pages.

        Raises:
            CorruptedFileError: If the document cannot be opened.
        """


class PyMuPDFTextBackend(PDFTextBackend):
    """Text layer through PyMuPDF span origins."""

    name = "pymupdf"

    def extract_pages(self, data: bytes, max_pages: int) -> List[PageText]:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise CorruptedFileError("<pdf stream>", str(e))

        pages = []
        with doc:
            for index in range(min(len(doc), max_pages)):
                try:
                    page = doc.load_page(index)
                    pages.append(PageText(index + 1, self._page_runs(page)))
                except Exception as e:
                    logger.warning(f"Skipping PDF page {index + 1}: {e}")

        return pages

    @staticmethod
    def _page_runs(page) -> List[TextRun]:
        runs = []
        for block in page.get_text("dict").get("blocks", []):
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    x, y = span["origin"]
                    runs.append(TextRun(span["text"], x, y))
        return runs


class PdfPlumberTextBackend(PDFTextBackend):
    """Text layer through pdfplumber word boxes."""

    name = "pdfplumber"

    def extract_pages(self, data: bytes, max_pages: int) -> List[PageText]:
        try:
            pdf = pdfplumber.open(io.BytesIO(data))
        except Exception as e:
            raise CorruptedFileError("<pdf stream>", str(e))

        pages = []
        with pdf:
            for index, page in enumerate(pdf.pages[:max_pages]):
                try:
                    words = page.extract_words()
                    runs = [TextRun(word["text"], word["x0"], word["top"]) for word in words]
                    pages.append(PageText(index + 1, runs))
                except Exception as e:
                    logger.warning(f"Skipping PDF page {index + 1}: {e}")

        return pages


class PDFProcessor:
    """
    Processor for PDF files.

    Extracts text from digital PDFs and renders pages of image-only
    PDFs for OCR.

    Attributes:
        backend: PDFTextBackend used for the text layer
        max_pages: Maximum number of pages read
        render_dpi: Resolution for page rendering

    Example:
        >>> processor = PDFProcessor()
        >>> text = processor.extract_text(pdf_bytes)
    """

    BACKENDS: Dict[str, Type[PDFTextBackend]] = {
        PyMuPDFTextBackend.name: PyMuPDFTextBackend,
        PdfPlumberTextBackend.name: PdfPlumberTextBackend,
    }

    def __init__(self, backend: Optional[PDFTextBackend] = None) -> None:
        """
        Initialize the PDF processor with configuration.

        Args:
            backend: Text-layer backend. If None, acquisition.pdf.backend
                    selects one.

        Raises:
            ConfigurationError: If the configured backend is unknown.
        """
        self.max_pages = get_config("acquisition.pdf.max_pages", 3)
        self.line_tolerance = get_config("acquisition.pdf.line_tolerance", 5)
        self.space_threshold = get_config("acquisition.pdf.space_threshold", 10)
        self.min_text_warning = get_config("acquisition.pdf.min_text_warning", 50)
        self.render_dpi = get_config("acquisition.pdf.render_dpi", 300)

        if backend is None:
            backend_name = get_config("acquisition.pdf.backend", PyMuPDFTextBackend.name)
            backend_cls = self.BACKENDS.get(backend_name)
            if backend_cls is None:
                raise ConfigurationError(
                    "acquisition.pdf.backend",
                    backend_name,
                    f"Supported backends: {sorted(self.BACKENDS)}"
                )
            backend = backend_cls()

        self.backend = backend

        logger.debug(f"PDFProcessor initialized (backend={self.backend.name}, max_pages={self.max_pages})")

    def extract_pages(self, data: bytes, max_pages: Optional[int] = None) -> List[PageText]:
        """Read positioned text runs for the first pages."""
        return self.backend.extract_pages(data, max_pages or self.max_pages)

    def extract_text(self, data: bytes) -> str:
        """
        Extract the text layer of a PDF.

        Args:
            data: PDF file content.

        Returns:
            Text of the first pages, pages separated by a blank line.

        Raises:
            CorruptedFileError: If the PDF cannot be opened.
        """
        pages = self.extract_pages(data)

        page_texts = [
            reconstruct_page_text(page.runs, self.line_tolerance, self.space_threshold)
            for page in pages
        ]
        text = "\n\n".join(t for t in page_texts if t.strip())

        if len(text.strip()) < self.min_text_warning:
            logger.warning(
                f"PDF text layer has only {len(text.strip())} characters; "
                f"it may be scanned or image-based"
            )

        logger.debug(f"Extracted {len(text)} characters from {len(pages)} PDF page(s)")
        return text

    def render_pages(
        self,
        data: bytes,
        max_pages: Optional[int] = None,
        dpi: Optional[int] = None
    ) -> List[Image.Image]:
        """
        Render the first pages to RGB images.

        Args:
            data: PDF file content.
            max_pages: Number of pages to render.
            dpi: Render resolution.

        Returns:
            List of PIL Images.

        Raises:
            CorruptedFileError: If rendering fails.
        """
        max_pages = max_pages or self.max_pages
        # Default PDF resolution is 72 DPI
        zoom = (dpi or self.render_dpi) / 72.0
        images = []

        try:
            with fitz.open(stream=data, filetype="pdf") as doc:
                for index in range(min(len(doc), max_pages)):
                    pix = doc.load_page(index).get_pixmap(matrix=fitz.Matrix(zoom, zoom))
                    image = Image.open(io.BytesIO(pix.tobytes("png")))
                    images.append(image.convert('RGB') if image.mode != 'RGB' else image)
        except Exception as e:
            logger.error(f"PDF rendering failed: {e}")
            raise CorruptedFileError("<pdf stream>", str(e))

        logger.debug(f"Rendered {len(images)} PDF page(s) at zoom {zoom:.2f}")
        return images
