"""
Post-Processing Module for the Invoice Manager.

This module provides functionality for:
    - Parsing and validating extraction model output
    - Recomputing derived customer totals
    - Synthesizing record identifiers
    - Validating single-field edits

Author: ML Engineering Team
"""

from .processor import PostProcessor, ExtractionBatch
from .validators import (
    ResponseValidator,
    FieldValidator,
    InvoiceFieldValidator,
    ProductFieldValidator,
    CustomerFieldValidator
)

__all__ = [
    'PostProcessor',
    'ExtractionBatch',
    'ResponseValidator',
    'FieldValidator',
    'InvoiceFieldValidator',
    'ProductFieldValidator',
    'CustomerFieldValidator'
]
