"""Tests for the command line entry point."""
import json

import pytest

import main as cli
from invoice_manager.input_handler import InputHandler
from invoice_manager.model_inference import InvoiceExtractor
from invoice_manager.pipeline import ExtractionPipeline
from invoice_manager.record_store import RecordStore


def test_unsupported_file_reports_json_and_fails(tmp_path, capsys) -> None:
    path = tmp_path / "notes.csv"
    path.write_text("a,b\n1,2\n", encoding="utf-8")

    exit_code = cli.main(["--input", str(path), "--quiet"])

    report = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert report["result"]["error_kind"] == "unsupported_format"
    assert report["invoices"] == []
    assert report["statistics"]["product_count"] == 0


def test_missing_input_file(tmp_path, capsys) -> None:
    exit_code = cli.main(["--input", str(tmp_path / "missing.pdf")])

    assert exit_code == 1
    assert "File not found" in capsys.readouterr().err


def test_run_extraction_with_injected_pipeline(
    tmp_path, png_bytes, fake_client_factory, fenced_reply
) -> None:
    path = tmp_path / "scan.png"
    path.write_bytes(png_bytes)
    pipeline = ExtractionPipeline(
        input_handler=InputHandler(),
        extractor=InvoiceExtractor(client=fake_client_factory(reply=fenced_reply)),
        store=RecordStore(merge_mode="append"),
    )

    result, store = cli.run_extraction(str(path), pipeline=pipeline)
    report = cli.build_report(result, store)

    assert result.success
    assert report["statistics"]["invoice_count"] == 3
    assert report["statistics"]["customer_total_amount"] == 180.0
    assert {c["customerName"] for c in report["customers"]} == {"A", "B", "C"}


@pytest.mark.parametrize("flags, shows_traceback", [(["--debug"], True), ([], False)])
def test_unexpected_error_traceback_only_with_debug(
    tmp_path, png_bytes, capsys, monkeypatch, flags, shows_traceback
) -> None:
    path = tmp_path / "scan.png"
    path.write_bytes(png_bytes)

    def explode(**kwargs):
        raise RuntimeError("renderer crashed")

    monkeypatch.setattr(cli, "run_extraction", explode)

    exit_code = cli.main(["--input", str(path), *flags])

    err = capsys.readouterr().err
    assert exit_code == 1
    assert "Unexpected error: renderer crashed" in err
    assert ("Traceback" in err) is shows_traceback
