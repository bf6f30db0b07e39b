"""
Invoice Manager - Source Package.

Extracts invoices, products and customers from uploaded documents with a
multimodal model and keeps them in an in-memory record store.

Modules:
    - input_handler: Spreadsheet, PDF and image rasterization
    - model_inference: Multimodal extraction client
    - postprocessor: Response parsing, normalization and field validation
    - record_store: Records, store, grid editing and statistics
    - pipeline: One extraction cycle from upload to store

Architecture:
    Upload -> Rasterize -> Extract -> Normalize -> Record Store
"""

__version__ = "1.0.0"
__author__ = "ML Engineering Team"

__all__ = [
    'input_handler',
    'model_inference',
    'postprocessor',
    'record_store',
    'pipeline',
    'schema',
    'utils'
]
