"""
Invoice Field Extraction Engine - Source Package.

This package contains all core modules for best-effort extraction of
invoice header fields from uploaded documents. Each module has a single
responsibility.

Modules:
    - input_handler: PDF, image and plain-text acquisition, text normalization
    - ocr_engine: Text recognition for images and scanned pages
    - pattern_extraction: Rule-based candidate extractors
    - model_inference: Optional completion-service extraction and result types
    - postprocessor: Normalization, validation and the per-field merge
    - orchestrator: The InvoiceFieldExtractor entry point

Architecture:
    Input → Acquisition → Normalization → Pattern Extraction ─┐
                                       ↘ Completion Service ──┴→ Merge → Record
"""

__version__ = "1.0.0"
__author__ = "ML Engineering Team"

__all__ = [
    'input_handler',
    'ocr_engine',
    'pattern_extraction',
    'model_inference',
    'postprocessor',
    'orchestrator',
    'utils'
]
