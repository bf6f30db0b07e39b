"""
Utility Module for the Invoice Manager.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Exceptions
    - Common helpers
"""

from .logger import setup_logger, get_logger
from .helpers import get_file_extension, strip_code_fences, to_number

__all__ = [
    'setup_logger',
    'get_logger',
    'get_file_extension',
    'strip_code_fences',
    'to_number'
]
