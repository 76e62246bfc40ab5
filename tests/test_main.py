"""
Tests for the command-line entry point.
"""

import json
import logging

import pytest

import main
from invoice_fields.utils.logger import ROOT_LOGGER_NAME


INVOICE_TEXT = (
    "Invoice Number: INV-2024-001\n"
    "Total: $1,234.56\n"
    "Invoice Date: 15/03/2024\n"
    "Due Date: 20/03/2024\n"
)


@pytest.fixture(autouse=True)
def detach_log_handlers():
    """main() binds handlers to the captured stdout; drop them afterwards"""
    yield
    logging.getLogger(ROOT_LOGGER_NAME).handlers.clear()


def test_collect_input_files(tmp_path):
    (tmp_path / "b.txt").write_text("x")
    (tmp_path / "a.PDF").write_bytes(b"%PDF")
    (tmp_path / "notes.docx").write_bytes(b"x")

    files = main.collect_input_files(str(tmp_path))

    assert [f.name for f in files] == ["a.PDF", "b.txt"]


def test_collect_input_files_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        main.collect_input_files(str(tmp_path / "missing"))

    unsupported = tmp_path / "notes.docx"
    unsupported.write_bytes(b"x")
    with pytest.raises(ValueError):
        main.collect_input_files(str(unsupported))


def test_main_writes_json(tmp_path):
    invoice = tmp_path / "invoice.txt"
    invoice.write_text(INVOICE_TEXT, encoding="utf-8")
    output = tmp_path / "out" / "results.json"

    exit_code = main.main(["--input", str(invoice), "--output", str(output), "--no-ai", "--quiet"])

    assert exit_code == 0
    results = json.loads(output.read_text(encoding="utf-8"))
    assert results == [{
        "file": "invoice.txt",
        "invoiceNumber": "INV-2024-001",
        "amount": 1234.56,
        "currency": "USD",
        "billingDate": "2024-03-15",
        "dueDate": "2024-03-20",
    }]


def test_main_prints_sources(tmp_path, capsys):
    invoice = tmp_path / "invoice.txt"
    invoice.write_text(INVOICE_TEXT, encoding="utf-8")

    assert main.main(["-i", str(invoice), "--no-ai", "--sources", "-q"]) == 0

    printed = capsys.readouterr().out
    payload = json.loads(printed[printed.index("[\n"):])
    assert payload[0]["sources"]["amount"] == "pattern"


def test_main_missing_input(tmp_path):
    assert main.main(["--input", str(tmp_path / "missing"), "--no-ai", "-q"]) == 1


def test_main_empty_directory(tmp_path):
    assert main.main(["--input", str(tmp_path), "--no-ai", "-q"]) == 1
