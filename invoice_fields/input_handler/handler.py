"""
Main Input Handler Module.

This module provides the InputHandler class that turns an uploaded file
of unknown type into raw text. It detects the file type and delegates to
the PDF text layer, the OCR engine, or plain decoding.

Acquisition never fails: when the content is missing or unreadable the
original filename is returned as the only text, so later stages always
have something to work with.

Usage:
    from invoice_fields.input_handler import ExtractionInput, InputHandler

    handler = InputHandler()
    text = handler.acquire(ExtractionInput.from_path("invoice.pdf"))

Classes:
    ExtractionInput: One uploaded file
    InputHandler: Text acquisition
"""

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from config import get_config
from invoice_fields.utils.logger import get_logger
from invoice_fields.utils.helpers import get_file_extension
from invoice_fields.utils.exceptions import InvoiceExtractionError, MissingBufferError
from invoice_fields.ocr_engine import OCREngine

from .pdf_processor import PDFProcessor
from .image_processor import ImageProcessor


# Initialize module logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class ExtractionInput:
    """
    One uploaded file, supplied once per extraction call.

    Attributes:
        data: File content (None when the upload carried no buffer)
        mime_type: Declared MIME type
        original_filename: Filename as uploaded
    """
    data: Optional[bytes]
    mime_type: str
    original_filename: str

    @classmethod
    def from_path(cls, filepath: Union[str, Path]) -> "ExtractionInput":
        """
        Build an input from a file on disk, guessing the MIME type.

        Example:
            >>> inp = ExtractionInput.from_path("invoices/AWS-INV-2024-0099.pdf")
            >>> inp.mime_type
            "application/pdf"
        """
        path = Path(filepath)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            data=path.read_bytes(),
            mime_type=mime_type or "application/octet-stream",
            original_filename=path.name
        )

    @property
    def extension(self) -> str:
        return get_file_extension(self.original_filename)

    def __repr__(self) -> str:
        size = len(self.data) if self.data is not None else None
        return (
            f"ExtractionInput(filename='{self.original_filename}', "
            f"mime='{self.mime_type}', bytes={size})"
        )


class InputHandler:
    """
    Text acquisition for invoice uploads.

    Attributes:
        pdf_processor: PDFProcessor for the PDF text layer
        image_processor: ImageProcessor for OCR preprocessing
        ocr_engine: OCREngine, created on first use

    Example:
        >>> handler = InputHandler()
        >>> text = handler.acquire(ExtractionInput(b"Total: 10.00", "text/plain", "a.txt"))
        >>> text
        "Total: 10.00"
    """

    PDF_EXTENSIONS = {'.pdf'}
    IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.tiff', '.tif', '.bmp', '.gif', '.webp'}

    def __init__(
        self,
        pdf_processor: Optional[PDFProcessor] = None,
        ocr_engine: Optional[OCREngine] = None,
        image_processor: Optional[ImageProcessor] = None
    ) -> None:
        """
        Initialize the InputHandler.

        Args:
            pdf_processor: PDF text-layer processor. Built from config if None.
            ocr_engine: OCR port. Built from config on first use if None.
            image_processor: Image preprocessor. Built from config if None.
        """
        self.image_extensions = {
            ext.lower() for ext in get_config("acquisition.image.extensions", list(self.IMAGE_EXTENSIONS))
        }
        self.ocr_fallback = get_config("acquisition.pdf.ocr_fallback", True)
        self.ocr_fallback_min_chars = get_config("acquisition.pdf.ocr_fallback_min_chars", 20)

        self.pdf_processor = pdf_processor or PDFProcessor()
        self.image_processor = image_processor or ImageProcessor()
        self._ocr_engine = ocr_engine

        logger.debug("InputHandler initialized")

    @property
    def ocr_engine(self) -> OCREngine:
        if self._ocr_engine is None:
            self._ocr_engine = OCREngine()
        return self._ocr_engine

    def detect_file_type(self, inp: ExtractionInput) -> str:
        """
        Detect the type of an upload.

        Args:
            inp: Uploaded file.

        Returns:
            File type string: 'pdf', 'image' or 'text'.
        """
        mime_type = (inp.mime_type or "").lower()
        extension = inp.extension

        if mime_type == "application/pdf" or extension in self.PDF_EXTENSIONS:
            return 'pdf'
        if mime_type.startswith("image/") or extension in self.image_extensions:
            return 'image'
        return 'text'

    def acquire(self, inp: ExtractionInput) -> str:
        """
        Obtain raw text from an upload.

        Args:
            inp: Uploaded file.

        Returns:
            Acquired text, or the original filename if acquisition failed.

        Example:
            >>> handler.acquire(ExtractionInput(None, "application/pdf", "AWS-INV-2024-0099.pdf"))
            "AWS-INV-2024-0099.pdf"
        """
        filename = inp.original_filename

        try:
            if not inp.data:
                raise MissingBufferError(filename)

            file_type = self.detect_file_type(inp)
            logger.debug(f"Acquiring text from {file_type}: {filename}")

            if file_type == 'pdf':
                text = self._acquire_pdf(inp.data, filename)
            elif file_type == 'image':
                text = self._acquire_image(inp.data, filename)
            else:
                text = self._decode_text(inp.data)

        except InvoiceExtractionError as e:
            logger.warning(f"Text acquisition failed, using filename as text: {e}")
            return filename

        except Exception as e:
            logger.exception(f"Unexpected error acquiring {filename}, using filename as text: {e}")
            return filename

        logger.info(f"Acquired {len(text)} characters from {filename}")
        return text

    def _acquire_pdf(self, data: bytes, filename: str) -> str:
        text = self.pdf_processor.extract_text(data)

        if not self.ocr_fallback or len(text.strip()) >= self.ocr_fallback_min_chars:
            return text

        logger.info(f"PDF text layer of {filename} is nearly empty, trying OCR")

        try:
            pages = self.pdf_processor.render_pages(data)
            ocr_text = "\n\n".join(
                self.ocr_engine.recognize(self.image_processor.prepare(page, filename))
                for page in pages
            )
        except InvoiceExtractionError as e:
            logger.warning(f"OCR of rendered PDF pages failed, keeping text layer: {e}")
            return text

        return ocr_text if len(ocr_text.strip()) > len(text.strip()) else text

    def _acquire_image(self, data: bytes, filename: str) -> str:
        image = self.image_processor.prepare(data, filename)
        return self.ocr_engine.recognize(image)

    @staticmethod
    def _decode_text(data: bytes) -> str:
        return data.decode("utf-8-sig", errors="replace")
