"""
Utility Module for the Invoice Field Extraction Engine.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Exception hierarchy
    - Small helpers
"""

from .logger import setup_logger, setup_logger_from_config, get_logger
from .helpers import ensure_directory, get_file_extension, truncate_text

__all__ = [
    'setup_logger',
    'setup_logger_from_config',
    'get_logger',
    'ensure_directory',
    'get_file_extension',
    'truncate_text'
]
