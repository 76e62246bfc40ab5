"""
OCR Engine Module for the Invoice Field Extraction Engine.

This module provides the OCR port used by text acquisition:
    - OCREngine.recognize(image) -> text
    - Pluggable backends (Tesseract by default)

Author: ML Engineering Team
"""

from .engine import OCREngine
from .tesseract_backend import OCRBackend, TesseractBackend

__all__ = ['OCREngine', 'OCRBackend', 'TesseractBackend']
