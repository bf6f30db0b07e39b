"""
Model Inference Module for the Invoice Manager.

This module provides the extraction client that sends a rasterized
invoice to a multimodal Gemini model (google-genai) and returns its
JSON text.

Author: ML Engineering Team
"""

from .extractor import InvoiceExtractor

__all__ = ['InvoiceExtractor']
