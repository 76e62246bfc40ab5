"""
Input Handler Module for the Invoice Field Extraction Engine.

This module provides functionality for:
    - Detecting upload types (PDF, image, plain text)
    - Reading the PDF text layer with position-aware spacing
    - Preparing images for OCR
    - Normalizing acquired text

Supported formats:
    - PDF (digital, with OCR fallback for scanned pages)
    - Images: JPG, JPEG, PNG, TIFF, BMP, GIF, WEBP
    - Anything else is decoded as UTF-8 text

Author: ML Engineering Team
"""

from .handler import ExtractionInput, InputHandler
from .pdf_processor import PDFProcessor, PageText, TextRun, reconstruct_page_text
from .image_processor import ImageProcessor
from .text_normalizer import TextNormalizer

__all__ = [
    'ExtractionInput',
    'InputHandler',
    'PDFProcessor',
    'PageText',
    'TextRun',
    'reconstruct_page_text',
    'ImageProcessor',
    'TextNormalizer'
]
