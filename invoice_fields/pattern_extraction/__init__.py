"""
Pattern Extraction Module for the Invoice Field Extraction Engine.

This module provides deterministic field extraction:
    - Ordered rule tables (pattern + base confidence + source tag)
    - Generic candidate collection and best-candidate selection
    - One extractor per field family

Author: ML Engineering Team
"""

from .candidates import Rule, Candidate, collect_candidates, select_best
from .extractors import (
    InvoiceNumberExtractor,
    AmountExtractor,
    ProviderExtractor,
    DateExtractor,
    CategoryExtractor,
    PatternExtractor,
)

__all__ = [
    'Rule',
    'Candidate',
    'collect_candidates',
    'select_best',
    'InvoiceNumberExtractor',
    'AmountExtractor',
    'ProviderExtractor',
    'DateExtractor',
    'CategoryExtractor',
    'PatternExtractor',
]
