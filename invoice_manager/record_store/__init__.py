"""
Record Store Module for the Invoice Manager.

This module provides:
    - Invoice, Product and Customer records
    - The in-memory RecordStore shared with the presentation layer
    - Validated grid editing
    - Aggregate statistics

Author: ML Engineering Team
"""

from .records import Invoice, Product, Customer
from .store import RecordStore
from .editor import RecordEditor
from .statistics import StoreStatistics, summarize

__all__ = [
    'Invoice',
    'Product',
    'Customer',
    'RecordStore',
    'RecordEditor',
    'StoreStatistics',
    'summarize'
]
