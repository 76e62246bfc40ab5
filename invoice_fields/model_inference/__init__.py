"""
Model Inference Module for the Invoice Field Extraction Engine.

This module provides the optional external extraction path and the
result types shared by the whole engine.

Features:
    - Completion service port and OpenAI client
    - Prompt construction and tolerant JSON parsing
    - Per-field result variants (Unset / FromPattern / FromModel)
    - The ExtractedInvoiceFields output record

Author: ML Engineering Team
"""

from .extraction_result import (
    ExtractedInvoiceFields,
    FieldResult,
    FromModel,
    FromPattern,
    Unset,
    UNSET,
    SUPPORTED_CURRENCY,
)
from .completion_client import CompletionClient, OpenAICompletionClient, build_completion_client
from .extractor import ModelFieldExtractor

__all__ = [
    'ExtractedInvoiceFields',
    'FieldResult',
    'FromModel',
    'FromPattern',
    'Unset',
    'UNSET',
    'SUPPORTED_CURRENCY',
    'CompletionClient',
    'OpenAICompletionClient',
    'build_completion_client',
    'ModelFieldExtractor',
]
