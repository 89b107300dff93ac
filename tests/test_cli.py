"""
Tests for the command-line interface.
"""

import json

import pytest
from typer.testing import CliRunner

from vendor_invoices import __version__
from vendor_invoices.cli import app


runner = CliRunner()

BAUHAUS_TEXT = "\n".join([
    "Einzelrechnung Nr. 123.456/789",
    "Rechnungsdatum 14.03.2024",
    "1 12345678 Schraubenset 100 Stk 2 ST 11,90 23,80 C",
    "Zu zahlender Betrag 23,80 EUR",
])


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def invoice_file(tmp_path):
    path = tmp_path / "bauhaus.txt"
    path.write_text(BAUHAUS_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def broken_file(tmp_path):
    path = tmp_path / "broken.txt"
    path.write_text("Rechnungsdatum 14.03.2024\nZu zahlender Betrag 1,00 EUR", encoding="utf-8")
    return path


class TestExtractCommand:
    """Tests for `extract`."""

    def test_prints_json(self, invoice_file):
        result = runner.invoke(app, ["extract", "--vendor", "bauhaus", "--input", str(invoice_file)])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["vendor"] == "bauhaus"
        assert data["meta"]["invoice_number"] == "123.456/789"
        assert data["items"][0]["net_price_single"] == 10.0

    def test_writes_output_file(self, invoice_file, tmp_path):
        output = tmp_path / "out.json"
        result = runner.invoke(app, ["extract", "-v", "bauhaus", "-i", str(invoice_file), "-o", str(output)])
        assert result.exit_code == 0
        assert "123.456/789" in result.stdout
        data = json.loads(output.read_text(encoding="utf-8"))
        assert len(data) == 1
        assert data[0]["items"][0]["kind"] == "expense"

    def test_extraction_error(self, broken_file):
        result = runner.invoke(app, ["extract", "--vendor", "bauhaus", "--input", str(broken_file)])
        assert result.exit_code == 1
        assert "INVOICE_NUMBER" in result.output

    def test_unknown_vendor(self, invoice_file):
        result = runner.invoke(app, ["extract", "--vendor", "aldi", "--input", str(invoice_file)])
        assert result.exit_code != 0


class TestExtractDirCommand:
    """Tests for `extract-dir`."""

    def test_skips_failing_documents(self, invoice_file, broken_file, tmp_path):
        output = tmp_path / "all.json"
        result = runner.invoke(
            app,
            ["extract-dir", "-v", "bauhaus", "-d", str(tmp_path), "-p", "*.txt", "-o", str(output)],
        )
        assert result.exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert [invoice["meta"]["invoice_number"] for invoice in data] == ["123.456/789"]

    def test_nothing_extracted(self, broken_file, tmp_path):
        output = tmp_path / "all.json"
        result = runner.invoke(
            app,
            ["extract-dir", "-v", "bauhaus", "-d", str(tmp_path), "-p", "*.txt", "-o", str(output)],
        )
        assert result.exit_code == 1
        assert not output.exists()


class TestInfoCommands:
    """Tests for `vendors` and `version`."""

    def test_vendors(self):
        result = runner.invoke(app, ["vendors"])
        assert result.exit_code == 0
        assert "metro" in result.stdout
        assert "A=19%" in result.stdout
        assert "medicalcorner" in result.stdout

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert f"v{__version__}" in result.stdout
