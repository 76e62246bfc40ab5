"""
Post-Processing Module for the Invoice Field Extraction Engine.

This module provides functionality for:
    - Date normalization with day/month ambiguity resolution
    - Amount normalization
    - Field validation
    - Merging model guesses with pattern results

Author: ML Engineering Team
"""

from .processor import FieldMerger
from .validators import DateValidator, AmountValidator, FieldValidator
from .normalizers import DateNormalizer, AmountNormalizer

__all__ = [
    'FieldMerger',
    'DateValidator',
    'AmountValidator',
    'FieldValidator',
    'DateNormalizer',
    'AmountNormalizer'
]
