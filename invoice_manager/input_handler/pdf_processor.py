"""
PDF Processor Module.

This module renders the first page of a PDF to a PNG image. Documents
with several pages are truncated to page one.

Uses PyMuPDF when available and pdf2image (Poppler) otherwise.

Author: ML Engineering Team
"""

import io
from typing import Any, Dict, Tuple

from config import get_config
from invoice_manager.utils.exceptions import InputError, RasterizationError
from invoice_manager.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

# Default PDF resolution
PDF_POINTS_PER_INCH = 72.0


class PDFProcessor:
    """
    Processor for PDF documents.

    Attributes:
        scale: Upscale factor applied to the page's viewport (2.0 by default)

    Example:
        >>> processor = PDFProcessor()
        >>> png_bytes, metadata = processor.process(pdf_bytes, "invoice.pdf")
        >>> metadata['total_pages']
        3
    """

    def __init__(self, scale: float = None) -> None:
        """
        Initialize the PDF processor with configuration.

        Args:
            scale: Render scale; if None, uses config (input.pdf.scale).
        """
        self.scale = float(scale or get_config("input.pdf.scale", 2.0))

        self._check_dependencies()

        logger.debug(f"PDFProcessor initialized (scale={self.scale})")

    def _check_dependencies(self) -> None:
        """Detect which PDF rendering backends are installed."""
        try:
            import fitz  # PyMuPDF
            self._pymupdf = fitz
        except ImportError:
            logger.debug("PyMuPDF not available. Using pdf2image as primary.")
            self._pymupdf = None

        try:
            import pdf2image
            self._pdf2image = pdf2image
        except ImportError:
            logger.debug("pdf2image not available.")
            self._pdf2image = None

    def process(self, content: bytes, filename: str = "document.pdf") -> Tuple[bytes, Dict[str, Any]]:
        """
        Render page one of a PDF.

        Args:
            content: Raw PDF bytes.
            filename: Name used in logs and errors.

        Returns:
            Tuple of (PNG bytes, metadata dictionary).

        Raises:
            RasterizationError: If the PDF cannot be opened or rendered.
            InputError: If no PDF backend is installed.
        """
        logger.info(f"Processing PDF: {filename}")

        if self._pymupdf is not None:
            png, metadata = self._render_with_pymupdf(content, filename)
        elif self._pdf2image is not None:
            png, metadata = self._render_with_pdf2image(content, filename)
        else:
            raise InputError(
                "No PDF processing library available. "
                "Install PyMuPDF or pdf2image."
            )

        if metadata.get('total_pages', 1) > 1:
            logger.info(
                f"PDF has {metadata['total_pages']} pages, using page 1 only"
            )

        metadata.update({
            'original_filename': filename,
            'file_size_bytes': len(content),
            'file_type': 'pdf',
            'scale': self.scale,
            'page_count': 1
        })
        return png, metadata

    def _render_with_pymupdf(self, content: bytes, filename: str) -> Tuple[bytes, Dict[str, Any]]:
        logger.debug("Using PyMuPDF for PDF rendering")
        fitz = self._pymupdf

        try:
            with fitz.open(stream=content, filetype="pdf") as doc:
                if doc.page_count == 0:
                    raise ValueError("PDF has no pages")

                page = doc.load_page(0)
                pix = page.get_pixmap(matrix=fitz.Matrix(self.scale, self.scale))
                metadata = {
                    'total_pages': doc.page_count,
                    'width': pix.width,
                    'height': pix.height
                }
                return pix.tobytes("png"), metadata

        except Exception as e:
            logger.error(f"PyMuPDF rendering failed: {e}")
            raise RasterizationError(filename, str(e)) from e

    def _render_with_pdf2image(self, content: bytes, filename: str) -> Tuple[bytes, Dict[str, Any]]:
        logger.debug("Using pdf2image for PDF rendering")

        try:
            info = self._pdf2image.pdfinfo_from_bytes(content)
            images = self._pdf2image.convert_from_bytes(
                content,
                dpi=int(PDF_POINTS_PER_INCH * self.scale),
                first_page=1,
                last_page=1,
                fmt='png'
            )
            if not images:
                raise ValueError("PDF has no pages")

            image = images[0]
            buffer = io.BytesIO()
            image.save(buffer, format='PNG')
            metadata = {
                'total_pages': int(info.get('Pages', 1)),
                'width': image.width,
                'height': image.height
            }
            return buffer.getvalue(), metadata

        except Exception as e:
            logger.error(f"pdf2image conversion failed: {e}")
            raise RasterizationError(filename, str(e)) from e
