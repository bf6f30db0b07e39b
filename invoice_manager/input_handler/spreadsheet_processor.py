"""
Spreadsheet Processor Module.

This module renders the first sheet of an Excel workbook to a PNG image:

    1. Read the first sheet with pandas (openpyxl for .xlsx, xlrd for .xls)
    2. Convert it to an HTML table
    3. Render the HTML to PNG with imgkit (wkhtmltoimage)

Rendering happens in a temporary directory that is removed once the
image has been read back, whether or not rendering succeeded.

Author: ML Engineering Team
"""

import io
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import imgkit
import pandas as pd

from config import get_config
from invoice_manager.utils.exceptions import RasterizationError
from invoice_manager.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
body {{ background: #ffffff; font-family: Arial, sans-serif; font-size: 14px; }}
table {{ border-collapse: collapse; }}
td {{ border: 1px solid #999999; padding: 4px 8px; }}
</style>
</head>
<body>
{table}
</body>
</html>
"""


class SpreadsheetProcessor:
    """
    Processor for .xls and .xlsx workbooks.

    Only the first sheet is rendered. Cells are laid out as they appear in
    the sheet; no header row is assumed.

    Attributes:
        render_options: Options passed to wkhtmltoimage
        wkhtmltoimage_path: Explicit binary path, or None to search PATH

    Example:
        >>> processor = SpreadsheetProcessor()
        >>> png_bytes, metadata = processor.process(xlsx_bytes, "invoices.xlsx")
        >>> metadata['rows']
        12
    """

    def __init__(
        self,
        render_options: Optional[Dict[str, Any]] = None,
        wkhtmltoimage_path: Optional[str] = None
    ) -> None:
        """
        Initialize the spreadsheet processor with configuration.

        Args:
            render_options: wkhtmltoimage options; if None, uses config.
            wkhtmltoimage_path: Binary location; if None, uses config.
        """
        if render_options is None:
            render_options = get_config(
                "input.spreadsheet.render_options", {'format': 'png', 'quiet': ''}
            )
        self.render_options = dict(render_options)
        self.wkhtmltoimage_path = (
            wkhtmltoimage_path
            or get_config("input.spreadsheet.wkhtmltoimage_path", "")
            or None
        )

        logger.debug(
            f"SpreadsheetProcessor initialized "
            f"(wkhtmltoimage={self.wkhtmltoimage_path or 'PATH'})"
        )

    def process(self, content: bytes, filename: str = "workbook.xlsx") -> Tuple[bytes, Dict[str, Any]]:
        """
        Render the first sheet of a workbook.

        Args:
            content: Raw workbook bytes.
            filename: Name used in logs and errors.

        Returns:
            Tuple of (PNG bytes, metadata dictionary).

        Raises:
            RasterizationError: If the workbook cannot be read or rendered.
        """
        logger.info(f"Processing spreadsheet: {filename}")

        sheet = self.read_first_sheet(content, filename)
        html = self.to_html(sheet)
        png = self.render_html(html, filename)

        metadata = {
            'original_filename': filename,
            'file_size_bytes': len(content),
            'file_type': 'spreadsheet',
            'rows': int(sheet.shape[0]),
            'columns': int(sheet.shape[1]),
            'page_count': 1
        }
        logger.info(
            f"Rendered spreadsheet {filename}: "
            f"{metadata['rows']} rows x {metadata['columns']} columns"
        )
        return png, metadata

    def read_first_sheet(self, content: bytes, filename: str) -> pd.DataFrame:
        """Load the first sheet with every cell kept as-is."""
        try:
            return pd.read_excel(
                io.BytesIO(content),
                sheet_name=0,
                header=None,
                dtype=object
            )
        except Exception as e:
            logger.error(f"Failed to read workbook {filename}: {e}")
            raise RasterizationError(filename, str(e)) from e

    @staticmethod
    def to_html(sheet: pd.DataFrame) -> str:
        """Convert a sheet to a standalone HTML page."""
        table = sheet.to_html(header=False, index=False, na_rep="", border=0)
        return HTML_TEMPLATE.format(table=table)

    def render_html(self, html: str, filename: str) -> bytes:
        """
        Render HTML to PNG inside a scratch directory.

        Raises:
            RasterizationError: If wkhtmltoimage fails or produces nothing.
        """
        config = None
        if self.wkhtmltoimage_path:
            config = imgkit.config(wkhtmltoimage=self.wkhtmltoimage_path)

        with tempfile.TemporaryDirectory(prefix="invoice_sheet_") as workdir:
            html_path = Path(workdir) / "sheet.html"
            png_path = Path(workdir) / "sheet.png"
            html_path.write_text(html, encoding="utf-8")

            try:
                imgkit.from_file(
                    str(html_path),
                    str(png_path),
                    options=self.render_options,
                    config=config
                )
                png = png_path.read_bytes()
            except Exception as e:
                logger.error(f"Failed to render spreadsheet {filename}: {e}")
                raise RasterizationError(filename, str(e)) from e

        if not png:
            raise RasterizationError(filename, "renderer produced an empty image")
        return png
