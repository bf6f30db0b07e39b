"""
Helper Utilities Module.

Small, generic functions shared across the pipeline.

Functions:
    - get_file_extension: Extract file extension safely
    - guess_media_type: Media type from a filename
    - encode_data_uri / split_data_uri: base64 data URI handling
    - strip_code_fences: Remove Markdown fences around model output
    - to_number: Lenient numeric coercion
"""

import base64
import math
import mimetypes
import re
from pathlib import Path
from typing import Any, Optional, Tuple, Union

_DATA_URI_HEADER = re.compile(r'^data:(?P<media_type>[^;,]*);base64$')


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Extract the file extension from a filepath.

    Returns the extension in lowercase, including the dot.
    Returns empty string if no extension exists.

    Example:
        >>> get_file_extension("Invoices.XLSX")
        ".xlsx"
        >>> get_file_extension("noextension")
        ""
    """
    return Path(filepath).suffix.lower()


def guess_media_type(filename: str) -> str:
    """
    Guess a media type from a filename.

    Returns an empty string when the extension is unknown.
    """
    media_type, _ = mimetypes.guess_type(filename)
    return media_type or ""


def encode_data_uri(data: bytes, media_type: str) -> str:
    """
    Encode binary data as a base64 data URI.

    Example:
        >>> encode_data_uri(b"abc", "image/png")
        'data:image/png;base64,YWJj'
    """
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{payload}"


def split_data_uri(data_uri: str) -> Tuple[str, str]:
    """
    Split a base64 data URI into its media type and payload.

    The media type is empty when the header does not declare one.

    Returns:
        Tuple of (media_type, base64_payload).

    Raises:
        ValueError: If the string is not a base64 data URI.
    """
    header, sep, payload = data_uri.partition(',')
    match = _DATA_URI_HEADER.match(header)
    if not sep or match is None:
        raise ValueError("Not a base64 data URI")
    return match.group('media_type'), payload


def strip_code_fences(text: str) -> str:
    """
    Remove Markdown code-fence markers (```json and ```) from model output.

    Every marker is removed, wherever it appears; the remaining text is
    stripped of surrounding whitespace.

    Example:
        >>> strip_code_fences('```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    if not text:
        return ""
    return text.replace("```json", "").replace("```", "").strip()

def to_number(value: Any) -> Optional[float]:
    """
    Coerce a JSON or grid value to a float.

    Accepts ints, floats and numeric strings (surrounding whitespace and
    thousands separators allowed). Booleans, empty strings, NaN, infinities,
    integers too large for a float and anything unparseable yield None.

    Example:
        >>> to_number("1,250.50")
        1250.5
        >>> to_number("n/a") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        cleaned = value.strip().replace(',', '')
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return number
