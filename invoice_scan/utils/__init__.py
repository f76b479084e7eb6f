"""
Utility Module for the Invoice Scan pipeline.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Exceptions
    - Common helpers
"""

from .logger import setup_logger, setup_logger_from_config, set_debug, get_logger
from .helpers import (
    ensure_directory,
    validate_file_exists,
    collapse_whitespace,
    casefold_key,
)

__all__ = [
    'setup_logger',
    'setup_logger_from_config',
    'set_debug',
    'get_logger',
    'ensure_directory',
    'validate_file_exists',
    'collapse_whitespace',
    'casefold_key',
]
