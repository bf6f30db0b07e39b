"""
Image Processor Module.

Images are handed to the extraction model exactly as uploaded; this
module only reads their metadata (size, mode, format) with Pillow.

Author: ML Engineering Team
"""

import io
from typing import Any, Dict, Tuple

from PIL import Image, UnidentifiedImageError

from invoice_manager.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class ImageProcessor:
    """
    Processor for image uploads (any image/* media type).

    The returned bytes are the upload's bytes, untouched.

    Example:
        >>> processor = ImageProcessor()
        >>> data, metadata = processor.process(png_bytes, "scan.png")
        >>> data == png_bytes
        True
    """

    def process(self, content: bytes, filename: str = "image") -> Tuple[bytes, Dict[str, Any]]:
        """
        Pass an image through and describe it.

        Args:
            content: Raw image bytes.
            filename: Name used in logs.

        Returns:
            Tuple of (the same bytes, metadata dictionary).
        """
        logger.info(f"Processing image: {filename}")

        metadata = {
            'original_filename': filename,
            'file_size_bytes': len(content),
            'file_type': 'image',
            'page_count': 1
        }
        metadata.update(self._extract_metadata(content, filename))

        return content, metadata

    def _extract_metadata(self, content: bytes, filename: str) -> Dict[str, Any]:
        try:
            with Image.open(io.BytesIO(content)) as image:
                return {
                    'width': image.width,
                    'height': image.height,
                    'mode': image.mode,
                    'format': image.format
                }
        except (UnidentifiedImageError, OSError) as e:
            # The model may still read formats Pillow does not know.
            logger.warning(f"Could not read image metadata for {filename}: {e}")
            return {}
        except Exception as e:
            # Oversized images (DecompressionBombError) still pass through.
            logger.warning(f"Skipped image metadata for {filename}: {e}")
            return {}
