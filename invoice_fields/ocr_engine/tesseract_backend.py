"""
Tesseract OCR Backend.

This module provides OCR functionality using Tesseract (pytesseract).
The whole image is recognized as one opaque block of text.

Requirements:
    - Tesseract OCR installed on the system
    - pytesseract Python package

Author: ML Engineering Team
"""

import time
from abc import ABC, abstractmethod

import pytesseract
from PIL import Image

from config import get_config
from invoice_fields.utils.logger import get_logger
from invoice_fields.utils.exceptions import OCREngineNotAvailableError, OCRProcessingError

# Initialize module logger
logger = get_logger(__name__)


class OCRBackend(ABC):
    """Recognizes the text of a decoded image."""

    name = "base"

    @abstractmethod
    def recognize_image(self, image: Image.Image) -> str:
        """
        Return the best-effort plain text of an image.

        Raises:
            OCRProcessingError: If recognition fails or times out.
        """


class TesseractBackend(OCRBackend):
    """
    Tesseract OCR backend implementation.

    Attributes:
        language: Tesseract language code (e.g., "eng")
        psm: Page Segmentation Mode (1-13)
        oem: OCR Engine Mode (0-3)
        timeout: Seconds before the Tesseract process is killed (0 = none)

    Example:
        >>> backend = TesseractBackend()
        >>> text = backend.recognize_image(image)
    """

    name = "tesseract"

    def __init__(self) -> None:
        """
        Initialize the Tesseract backend with configuration.

        Raises:
            OCREngineNotAvailableError: If Tesseract is not installed.
        """
        self.language = get_config("ocr.tesseract.lang", "eng")
        self.psm = get_config("ocr.tesseract.psm", 3)
        self.oem = get_config("ocr.tesseract.oem", 3)
        self.extra_config = get_config("ocr.tesseract.config", "")
        self.timeout = get_config("ocr.tesseract.timeout", 30)

        self._check_tesseract()

        logger.debug(
            f"TesseractBackend initialized (lang={self.language}, "
            f"psm={self.psm}, oem={self.oem}, timeout={self.timeout}s)"
        )

    def _check_tesseract(self) -> None:
        try:
            version = pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError as e:
            raise OCREngineNotAvailableError(f"Tesseract OCR (not installed or not in PATH): {e}")

        logger.debug(f"Tesseract version: {version}")

    def _build_config(self) -> str:
        """
        Build Tesseract configuration string.

        Returns:
            Configuration string for Tesseract.
        """
        config_parts = [
            f"--psm {self.psm}",
            f"--oem {self.oem}"
        ]

        if self.extra_config:
            config_parts.append(self.extra_config)

        return ' '.join(config_parts)

    def recognize_image(self, image: Image.Image) -> str:
        start_time = time.time()

        if image.mode != 'RGB':
            image = image.convert('RGB')

        try:
            text = pytesseract.image_to_string(
                image,
                lang=self.language,
                config=self._build_config(),
                timeout=self.timeout
            )
        except pytesseract.TesseractError as e:
            raise OCRProcessingError("image", str(e))
        except RuntimeError as e:
            # pytesseract signals a killed process with a plain RuntimeError
            raise OCRProcessingError("image", f"Tesseract timed out after {self.timeout}s: {e}")

        logger.info(f"OCR completed: {len(text)} characters ({time.time() - start_time:.2f}s)")
        return text
