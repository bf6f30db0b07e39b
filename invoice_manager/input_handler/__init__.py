"""
Input Handler Module for the Invoice Manager.

This module turns an uploaded document into the single image sent to the
extraction model:
    - Spreadsheets (.xls, .xlsx): first sheet rendered to PNG
    - PDF: first page rendered to PNG
    - Images: passed through unchanged

Any other upload is rejected with UnsupportedFormatError.

Author: ML Engineering Team
"""

from .handler import InputHandler, UploadedFile, RasterImage
from .spreadsheet_processor import SpreadsheetProcessor
from .pdf_processor import PDFProcessor
from .image_processor import ImageProcessor

__all__ = [
    'InputHandler',
    'UploadedFile',
    'RasterImage',
    'SpreadsheetProcessor',
    'PDFProcessor',
    'ImageProcessor'
]
