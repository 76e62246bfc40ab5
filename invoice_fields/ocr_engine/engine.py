"""
Main OCR Engine Module.

This module provides the OCREngine class, the OCR port used by text
acquisition. It accepts raw image bytes or a decoded image and returns
plain text, independent of the backend behind it.

Usage:
    from invoice_fields.ocr_engine import OCREngine

    engine = OCREngine()
    text = engine.recognize(image_bytes)

Author: ML Engineering Team
"""

import io
from typing import Dict, Optional, Type, Union

from PIL import Image, UnidentifiedImageError

from config import get_config
from invoice_fields.utils.logger import get_logger
from invoice_fields.utils.exceptions import ConfigurationError, OCRProcessingError
from .tesseract_backend import OCRBackend, TesseractBackend

# Initialize module logger
logger = get_logger(__name__)


class OCREngine:
    """
    OCR engine providing a single recognize() call.

    Attributes:
        backend: The active OCR backend instance

    Example:
        >>> engine = OCREngine()
        >>> text = engine.recognize(open("receipt.png", "rb").read())
    """

    BACKENDS: Dict[str, Type[OCRBackend]] = {
        TesseractBackend.name: TesseractBackend,
    }

    def __init__(self, backend: Optional[OCRBackend] = None) -> None:
        """
        Initialize the OCR engine.

        Args:
            backend: OCR backend to use. If None, ocr.engine selects one.

        Raises:
            ConfigurationError: If the configured engine is unknown.
            OCREngineNotAvailableError: If the engine is not installed.
        """
        if backend is None:
            backend_name = get_config("ocr.engine", TesseractBackend.name)
            if backend_name == "pytesseract":
                backend_name = TesseractBackend.name

            backend_cls = self.BACKENDS.get(backend_name)
            if backend_cls is None:
                raise ConfigurationError(
                    "ocr.engine",
                    backend_name,
                    f"Supported engines: {sorted(self.BACKENDS)}"
                )
            backend = backend_cls()

        self.backend = backend
        logger.info(f"OCR Engine initialized with backend: {self.backend.name}")

    def recognize(self, image: Union[bytes, Image.Image]) -> str:
        """
        Extract the text of an image.

        Args:
            image: Encoded image bytes or a PIL Image.

        Returns:
            Recognized text as one block.

        Raises:
            OCRProcessingError: If the image cannot be decoded or OCR fails.
        """
        if isinstance(image, (bytes, bytearray)):
            try:
                image = Image.open(io.BytesIO(image))
                image.load()
            except (UnidentifiedImageError, OSError) as e:
                raise OCRProcessingError("image bytes", f"Failed to load image: {e}")

        if not isinstance(image, Image.Image):
            raise OCRProcessingError("unknown", "Invalid image input")

        logger.debug(f"Recognizing {image.width}x{image.height} image with {self.backend.name}")
        return self.backend.recognize_image(image)
