"""
Command-line interface for vendor invoice extraction.

Provides these commands:
- extract: Extract one invoice document with a vendor profile
- extract-dir: Extract every matching document in a directory
- vendors: List the built-in vendor profiles
- version: Show version information
"""

import json
from pathlib import Path
from typing import Optional

import typer

from .config import logger
from .errors import InvoiceEngineError
from .extractor import (
    extract_invoice_from_file,
    extract_invoices_from_dir,
    write_extracted_invoices,
)
from .schemas import Invoice, InvoiceVendor
from .vendors import default_registry


# Create Typer app
app = typer.Typer(
    name="vendor-invoices",
    help="Profile-driven vendor invoice extraction CLI",
    add_completion=False,
)


def _summary_line(invoice: Invoice) -> str:
    return (
        f"  - {invoice.meta.invoice_number} | {invoice.meta.date:%Y-%m-%d} | "
        f"{invoice.meta.gross_total:.2f} | {len(invoice.items)} item(s)"
    )


@app.command()
def extract(
    vendor: InvoiceVendor = typer.Option(
        ...,
        "--vendor",
        "-v",
        help="Vendor profile to apply",
    ),
    input_file: Path = typer.Option(
        ...,
        "--input",
        "-i",
        help="Invoice document (PDF or plain text)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output JSON file path (prints to stdout when omitted)",
    ),
) -> None:
    """
    Extract a single invoice document.

    The whole document must fit the vendor's profile; the first field that
    cannot be extracted is reported and nothing is written.
    """
    try:
        invoice = extract_invoice_from_file(input_file, vendor)
    except (InvoiceEngineError, ValueError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if output is None:
        typer.echo(json.dumps(invoice.model_dump(mode="json"), indent=2))
        return

    write_extracted_invoices([invoice], output)
    typer.echo(f"[OK] Extracted invoice to: {output}")
    typer.echo(_summary_line(invoice))


@app.command("extract-dir")
def extract_dir(
    vendor: InvoiceVendor = typer.Option(
        ...,
        "--vendor",
        "-v",
        help="Vendor profile to apply to every document",
    ),
    doc_dir: Path = typer.Option(
        ...,
        "--dir",
        "-d",
        help="Directory containing invoice documents",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    pattern: str = typer.Option(
        "*.pdf",
        "--pattern",
        "-p",
        help="Glob pattern selecting the documents",
    ),
    output: Path = typer.Option(
        "extracted_invoices.json",
        "--output",
        "-o",
        help="Output JSON file path",
    ),
) -> None:
    """
    Extract all invoice documents in a directory to JSON.

    Documents that do not fit the profile are logged and skipped.
    """
    typer.echo(f"Extracting {vendor.value} invoices from: {doc_dir}")

    try:
        invoices = extract_invoices_from_dir(doc_dir, vendor, pattern)
    except FileNotFoundError as e:
        typer.echo(f"Error during extraction: {e}", err=True)
        logger.exception("Extraction failed")
        raise typer.Exit(code=1)

    if not invoices:
        typer.echo("No invoices were extracted.", err=True)
        raise typer.Exit(code=1)

    write_extracted_invoices(invoices, output)

    typer.echo(f"\n[OK] Extracted {len(invoices)} invoice(s) to: {output}")
    typer.echo("\nExtracted invoices:")
    for invoice in invoices[:10]:
        typer.echo(_summary_line(invoice))
    if len(invoices) > 10:
        typer.echo(f"  ... and {len(invoices) - 10} more")


@app.command()
def vendors() -> None:
    """List the built-in vendor profiles and their VAT classes."""
    for tag in default_registry.vendors:
        profile = default_registry.profile(tag)
        classes = ", ".join(f"{token}={rate:.0%}" for token, rate in profile.vat_classes)
        typer.echo(f"{tag:<15} VAT: {classes}")


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__
    typer.echo(f"Vendor Invoices v{__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
