"""
Custom Exceptions Module.

This module defines the exceptions raised by the extraction pipeline.
Every failure of an extraction cycle maps onto one of three user-facing
categories: unsupported format, extraction failed, malformed response.

Exception Hierarchy:
    InvoiceManagerError (base)
    ├── InputError
    │   ├── UnsupportedFormatError
    │   └── InputFileNotFoundError
    ├── ExtractionFailedError
    │   ├── RasterizationError
    │   └── ModelRequestError
    ├── MalformedResponseError
    └── PipelineBusyError
"""


class InvoiceManagerError(Exception):
    """
    Base exception for all invoice manager errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(InvoiceManagerError):
    """Base exception for input handling errors."""
    pass


class UnsupportedFormatError(InputError):
    """
    Raised when an upload is neither a spreadsheet, a PDF nor an image.

    Example:
        >>> raise UnsupportedFormatError("notes.csv", "text/csv")
    """

    def __init__(self, filename: str, media_type: str = None):
        message = f"Unsupported file format: '{filename}'"
        details = {"filename": filename, "media_type": media_type}
        super().__init__(message, details)


class InputFileNotFoundError(InputError):
    """Raised when an input file cannot be found on disk."""

    def __init__(self, filepath: str):
        message = f"File not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


# =============================================================================
# EXTRACTION ERRORS
# =============================================================================

class ExtractionFailedError(InvoiceManagerError):
    """Base exception for rasterization and model request failures."""
    pass


class RasterizationError(ExtractionFailedError):
    """Raised when a document cannot be converted to an image."""

    def __init__(self, filename: str, reason: str = None):
        message = f"Could not rasterize: {filename}"
        details = {"filename": filename, "reason": reason}
        super().__init__(message, details)


class ModelRequestError(ExtractionFailedError):
    """Raised when the extraction model cannot be reached or fails."""

    def __init__(self, model_name: str, reason: str = None):
        message = f"Extraction request failed: {model_name}"
        details = {"model": model_name, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# RESPONSE ERRORS
# =============================================================================

class MalformedResponseError(InvoiceManagerError):
    """
    Raised when the model response is not JSON or does not match the schema.

    Attributes:
        path: Location of the offending value (e.g. "customers[2].phoneNumber").
    """

    def __init__(self, reason: str, path: str = None):
        message = f"Malformed extraction response: {reason}"
        details = {"path": path} if path else {}
        super().__init__(message, details)
        self.path = path


class PipelineBusyError(InvoiceManagerError):
    """Raised when an upload is submitted while another one is in flight."""

    def __init__(self):
        super().__init__("An upload is already being processed")


__all__ = [
    'InvoiceManagerError',
    'InputError',
    'UnsupportedFormatError',
    'InputFileNotFoundError',
    'ExtractionFailedError',
    'RasterizationError',
    'ModelRequestError',
    'MalformedResponseError',
    'PipelineBusyError',
]
