"""Tests for turning uploads into a single raster image."""
import io
from pathlib import Path

import fitz
import imgkit
import pandas as pd
import pytest
from PIL import Image

from invoice_manager.input_handler import (
    InputHandler,
    PDFProcessor,
    SpreadsheetProcessor,
    UploadedFile,
)
from invoice_manager.utils.exceptions import (
    ExtractionFailedError,
    InputFileNotFoundError,
    RasterizationError,
    UnsupportedFormatError,
)

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def make_pdf(pages) -> bytes:
    """Build a PDF whose pages are filled with the given (width, height, rgb) specs."""
    doc = fitz.open()
    for width, height, color in pages:
        page = doc.new_page(width=width, height=height)
        page.draw_rect(page.rect, color=color, fill=color)
    data = doc.tobytes()
    doc.close()
    return data


def make_xlsx() -> bytes:
    buffer = io.BytesIO()
    frame = pd.DataFrame([["Invoice", "INV-1"], ["Customer", "Acme Ltd"], ["Total", 150]])
    frame.to_excel(buffer, header=False, index=False, engine="openpyxl")
    return buffer.getvalue()


@pytest.fixture
def handler() -> InputHandler:
    return InputHandler()


@pytest.fixture
def fake_wkhtmltoimage(monkeypatch, png_factory):
    """Replace imgkit.from_file with a renderer that writes a small PNG."""
    calls = []

    def from_file(filename, output_path, options=None, config=None, **kwargs):
        calls.append({
            "html_path": Path(filename),
            "html": Path(filename).read_text(encoding="utf-8"),
            "options": options,
        })
        Path(output_path).write_bytes(png_factory(30, 10))
        return True

    monkeypatch.setattr(imgkit, "from_file", from_file)
    return calls


class TestDetection:
    @pytest.mark.parametrize(
        "filename, media_type, expected",
        [
            ("march.xlsx", XLSX, "spreadsheet"),
            ("march.xls", "application/vnd.ms-excel", "spreadsheet"),
            ("march.xlsx", "", "spreadsheet"),
            ("upload", XLSX, "spreadsheet"),
            ("invoice.pdf", "application/pdf", "pdf"),
            ("upload", "application/pdf", "pdf"),
            ("scan.png", "image/png", "image"),
            ("photo", "image/webp", "image"),
            ("scan.jpg", "", "image"),
        ],
    )
    def test_detects_supported_kinds(self, handler, filename, media_type, expected) -> None:
        upload = UploadedFile(filename, b"", media_type)
        assert handler.detect_file_type(upload) == expected

    @pytest.mark.parametrize(
        "filename, media_type",
        [
            ("notes.csv", "text/csv"),
            ("notes.csv", ""),
            ("letter.docx", ""),
            ("archive", "application/zip"),
        ],
    )
    def test_rejects_other_kinds(self, handler, filename, media_type) -> None:
        with pytest.raises(UnsupportedFormatError):
            handler.rasterize(UploadedFile(filename, b"data", media_type))


class TestPDF:
    def test_renders_only_first_page_at_double_scale(self, handler) -> None:
        data = make_pdf([(200, 100, (1, 0, 0)), (300, 300, (0, 0, 1))])

        image = handler.rasterize(UploadedFile("invoice.pdf", data, "application/pdf"))

        assert image.media_type == "image/png"
        assert image.source_type == "pdf"
        assert image.metadata["total_pages"] == 2
        with Image.open(io.BytesIO(image.data)) as rendered:
            assert rendered.size == (400, 200)
            assert rendered.convert("RGB").getpixel((200, 100)) == (255, 0, 0)

    def test_broken_pdf_is_an_extraction_failure(self) -> None:
        with pytest.raises(RasterizationError) as exc_info:
            PDFProcessor().process(b"%PDF-1.4 garbage", "broken.pdf")

        assert isinstance(exc_info.value, ExtractionFailedError)


class TestImage:
    def test_image_bytes_pass_through_unchanged(self, handler, png_bytes) -> None:
        image = handler.rasterize(UploadedFile("scan.png", png_bytes, "image/png"))

        assert image.data == png_bytes
        assert image.media_type == "image/png"
        assert image.metadata["width"] == 40
        assert image.metadata["height"] == 20

    def test_unreadable_image_still_passes_through(self, handler) -> None:
        image = handler.rasterize(UploadedFile("scan.heic", b"opaque", "image/heic"))

        assert image.data == b"opaque"
        assert image.media_type == "image/heic"
        assert "width" not in image.metadata

    def test_oversized_image_still_passes_through(self, handler, png_bytes, monkeypatch) -> None:
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

        image = handler.rasterize(UploadedFile("scan.png", png_bytes, "image/png"))

        assert image.data == png_bytes
        assert "width" not in image.metadata

    def test_data_uri_carries_media_type(self, handler, png_bytes) -> None:
        image = handler.rasterize(UploadedFile("scan.png", png_bytes, "image/png"))
        assert image.to_data_uri().startswith("data:image/png;base64,")


class TestSpreadsheet:
    def test_first_sheet_rendered_and_scratch_directory_removed(
        self, handler, fake_wkhtmltoimage
    ) -> None:
        image = handler.rasterize(UploadedFile("march.xlsx", make_xlsx(), XLSX))

        assert image.media_type == "image/png"
        assert image.source_type == "spreadsheet"
        assert image.metadata["rows"] == 3
        assert Image.open(io.BytesIO(image.data)).size == (30, 10)

        call = fake_wkhtmltoimage[0]
        assert "Acme Ltd" in call["html"]
        assert call["options"]["format"] == "png"
        assert not call["html_path"].parent.exists()

    def test_scratch_directory_removed_when_rendering_fails(self, monkeypatch) -> None:
        seen = []

        def from_file(filename, output_path, options=None, config=None, **kwargs):
            seen.append(Path(filename))
            raise OSError("wkhtmltoimage exited with code 1")

        monkeypatch.setattr(imgkit, "from_file", from_file)

        with pytest.raises(RasterizationError):
            SpreadsheetProcessor().process(make_xlsx(), "march.xlsx")

        assert seen and not seen[0].parent.exists()

    def test_unreadable_workbook_is_an_extraction_failure(self, fake_wkhtmltoimage) -> None:
        with pytest.raises(RasterizationError):
            SpreadsheetProcessor().process(b"not a workbook", "march.xlsx")

        assert fake_wkhtmltoimage == []


class TestLoad:
    def test_load_reads_bytes_and_guesses_media_type(self, handler, tmp_path, png_bytes) -> None:
        path = tmp_path / "scan.png"
        path.write_bytes(png_bytes)

        upload = handler.load(path)

        assert upload.filename == "scan.png"
        assert upload.content == png_bytes
        assert upload.media_type == "image/png"

    def test_declared_media_type_wins(self, handler, tmp_path) -> None:
        path = tmp_path / "export.bin"
        path.write_bytes(b"data")

        assert handler.load(path, media_type="application/pdf").media_type == "application/pdf"

    def test_missing_file(self, handler, tmp_path) -> None:
        with pytest.raises(InputFileNotFoundError):
            handler.load(tmp_path / "missing.pdf")
