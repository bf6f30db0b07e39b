"""
Main Input Handler Module.

This module provides the InputHandler class, the rasterizer of the
extraction pipeline. It detects the kind of an uploaded document and
delegates to the matching processor, always producing exactly one image.

Usage:
    from invoice_manager.input_handler import InputHandler

    handler = InputHandler()
    upload = handler.load("invoice.pdf")
    image = handler.rasterize(upload)

Classes:
    UploadedFile: An uploaded document held in memory
    RasterImage: The single image produced for one upload
    InputHandler: Type detection and dispatch
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from config import get_config
from invoice_manager.utils.exceptions import (
    InputFileNotFoundError,
    UnsupportedFormatError,
)
from invoice_manager.utils.helpers import encode_data_uri, get_file_extension, guess_media_type
from invoice_manager.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


@dataclass
class UploadedFile:
    """
    A document as received from the user.

    Attributes:
        filename: Original filename (used for extension-based detection)
        content: Raw file bytes
        media_type: Declared media type, may be empty
    """
    filename: str
    content: bytes
    media_type: str = ""

    def __repr__(self) -> str:
        return (
            f"UploadedFile(filename='{self.filename}', "
            f"media_type='{self.media_type}', size={len(self.content)})"
        )


@dataclass
class RasterImage:
    """
    The single raster image produced for an upload.

    Attributes:
        data: Encoded image bytes
        media_type: Media type of data (e.g. 'image/png')
        source_type: 'spreadsheet', 'pdf' or 'image'
        source_file: Filename of the upload
        metadata: Processor-specific details (page counts, sizes, ...)
    """
    data: bytes
    media_type: str
    source_type: str
    source_file: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_data_uri(self) -> str:
        """Encode the image as a base64 data URI."""
        return encode_data_uri(self.data, self.media_type)

    def __repr__(self) -> str:
        return (
            f"RasterImage(source='{self.source_file}', type='{self.source_type}', "
            f"media_type='{self.media_type}', size={len(self.data)})"
        )


class InputHandler:
    """
    Rasterizer for uploaded invoice documents.

    Supported inputs:
        - Spreadsheets (.xls, .xlsx or their media types): first sheet
        - PDF (.pdf or application/pdf): first page
        - Any image/* media type: passed through unchanged

    Anything else raises UnsupportedFormatError before any processing.

    Example:
        >>> handler = InputHandler()
        >>> image = handler.rasterize(UploadedFile("scan.png", data, "image/png"))
        >>> image.source_type
        'image'
    """

    SPREADSHEET_EXTENSIONS = {'.xls', '.xlsx'}
    SPREADSHEET_MEDIA_TYPES = {
        'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        'application/vnd.ms-excel',
    }
    PDF_EXTENSIONS = {'.pdf'}
    PDF_MEDIA_TYPES = {'application/pdf'}
    IMAGE_MEDIA_TYPE_PREFIX = 'image/'

    def __init__(
        self,
        spreadsheet_processor=None,
        pdf_processor=None,
        image_processor=None
    ) -> None:
        """
        Initialize the InputHandler.

        Args:
            spreadsheet_processor: Optional SpreadsheetProcessor override.
            pdf_processor: Optional PDFProcessor override.
            image_processor: Optional ImageProcessor override.
        """
        from .image_processor import ImageProcessor
        from .pdf_processor import PDFProcessor
        from .spreadsheet_processor import SpreadsheetProcessor

        self.spreadsheet_extensions = self._lowered(
            get_config("input.spreadsheet.extensions", self.SPREADSHEET_EXTENSIONS)
        )
        self.spreadsheet_media_types = self._lowered(
            get_config("input.spreadsheet.media_types", self.SPREADSHEET_MEDIA_TYPES)
        )
        self.pdf_extensions = self._lowered(
            get_config("input.pdf.extensions", self.PDF_EXTENSIONS)
        )
        self.pdf_media_types = self._lowered(
            get_config("input.pdf.media_types", self.PDF_MEDIA_TYPES)
        )
        self.image_prefix = get_config(
            "input.image.media_type_prefix", self.IMAGE_MEDIA_TYPE_PREFIX
        ).lower()

        self.spreadsheet_processor = spreadsheet_processor or SpreadsheetProcessor()
        self.pdf_processor = pdf_processor or PDFProcessor()
        self.image_processor = image_processor or ImageProcessor()

        logger.info("InputHandler initialized (spreadsheet, pdf, image)")

    @staticmethod
    def _lowered(values) -> set:
        return {value.lower() for value in values}

    def detect_file_type(self, upload: UploadedFile) -> str:
        """
        Detect the kind of an uploaded document.

        The declared media type and the filename extension are both
        consulted; when no media type is declared, one is guessed from
        the filename.

        Args:
            upload: The uploaded document.

        Returns:
            'spreadsheet', 'pdf' or 'image'.

        Raises:
            UnsupportedFormatError: If the document is none of these.
        """
        extension = get_file_extension(upload.filename)
        media_type = (upload.media_type or guess_media_type(upload.filename)).lower()

        if media_type in self.spreadsheet_media_types or extension in self.spreadsheet_extensions:
            file_type = 'spreadsheet'
        elif media_type in self.pdf_media_types or extension in self.pdf_extensions:
            file_type = 'pdf'
        elif media_type.startswith(self.image_prefix):
            file_type = 'image'
        else:
            raise UnsupportedFormatError(upload.filename, media_type or None)

        logger.debug(f"Detected {file_type} file: {upload.filename}")
        return file_type

    def rasterize(self, upload: UploadedFile) -> RasterImage:
        """
        Convert an upload into a single raster image.

        Args:
            upload: The uploaded document.

        Returns:
            RasterImage for the first sheet, the first page, or the
            original image.

        Raises:
            UnsupportedFormatError: If the document kind is not supported.
            RasterizationError: If conversion fails.
        """
        file_type = self.detect_file_type(upload)
        logger.info(f"Rasterizing {file_type}: {upload.filename}")

        if file_type == 'spreadsheet':
            data, metadata = self.spreadsheet_processor.process(upload.content, upload.filename)
            media_type = 'image/png'
        elif file_type == 'pdf':
            data, metadata = self.pdf_processor.process(upload.content, upload.filename)
            media_type = 'image/png'
        else:
            media_type = (upload.media_type or guess_media_type(upload.filename)).lower()
            data, metadata = self.image_processor.process(upload.content, upload.filename)

        image = RasterImage(
            data=data,
            media_type=media_type,
            source_type=file_type,
            source_file=upload.filename,
            metadata=metadata
        )
        logger.info(f"Rasterized {upload.filename}: {len(data)} bytes ({media_type})")
        return image

    def load(
        self,
        filepath: Union[str, Path],
        media_type: Optional[str] = None
    ) -> UploadedFile:
        """
        Read a document from disk as an upload.

        Args:
            filepath: Path to the document.
            media_type: Declared media type; guessed from the name if None.

        Returns:
            UploadedFile holding the file's bytes.

        Raises:
            InputFileNotFoundError: If the path is not an existing file.
        """
        path = Path(filepath)
        if not path.is_file():
            raise InputFileNotFoundError(str(filepath))

        upload = UploadedFile(
            filename=path.name,
            content=path.read_bytes(),
            media_type=media_type or guess_media_type(path.name)
        )
        logger.debug(f"Loaded {upload!r}")
        return upload
