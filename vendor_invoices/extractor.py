"""
Profile-driven extraction of invoices from document text.

This module provides functionality to:
- Extract header data (number, total, date, payment type) with a vendor profile
- Locate regular and discount line items and resolve their fields
- Combine both into an immutable Invoice
- Load document text from PDF or text files and run the engine over it

``extract`` is a pure function of the compiled profile and the text: it
performs no I/O, keeps no state between calls and either returns a complete
Invoice or raises the first ExtractionError it meets.
"""

import json
import re
from datetime import datetime
from itertools import count
from pathlib import Path
from typing import Iterable, Optional, Union

import pdfplumber

from .config import (
    AMOUNT,
    ARTNR,
    DESC,
    GROSS_PRICE_SINGLE,
    GROSS_PRICE_TOTAL,
    INVOICE_DATE,
    INVOICE_NUMBER,
    MAX_TEXT_CHARS,
    NET_PRICE_SINGLE,
    NET_PRICE_TOTAL,
    PAYMENT_TYPE,
    POS,
    PU_AMOUNT,
    SUM,
    VAT,
    logger,
)
from .dates import assemble_date
from .errors import FieldMissing, NumberFormatError
from .numbers import derive_net, parse_integer, parse_locale_number, round_price
from .profile import CompiledVendor
from .schemas import (
    Invoice,
    InvoiceItem,
    InvoiceItemType,
    InvoiceMeta,
    InvoiceVendor,
    ItemKindPolicy,
)
from .vendors import get_compiled_vendor

_EXTRA_SPACES = re.compile(r"\s+")


# ============================================================================
# Capture Helpers
# ============================================================================

def _capture(match: re.Match, name: str) -> Optional[str]:
    """
    Text of a named group, or None.

    A group the pattern does not declare and a declared group that did not
    take part in the match are both treated as absent.
    """
    if name not in match.re.groupindex:
        return None
    return match.group(name)


def _required(match: Optional[re.Match], name: str) -> str:
    value = _capture(match, name) if match else None
    if value is None:
        raise FieldMissing(name)
    return value


def _number(match: re.Match, name: str) -> Optional[float]:
    raw = _capture(match, name)
    return parse_locale_number(raw, name) if raw is not None else None


# ============================================================================
# Header Extraction
# ============================================================================

def extract_invoice_number(compiled: CompiledVendor, text: str) -> str:
    """Trimmed INVOICE_NUMBER capture of the invoice-number pattern."""
    number = _required(compiled.invoice_number.search(text), INVOICE_NUMBER).strip()
    if not number:
        raise FieldMissing(INVOICE_NUMBER)
    return number


def extract_gross_total(compiled: CompiledVendor, text: str) -> float:
    """SUM capture of the invoice-total pattern, parsed as a locale number."""
    raw = _required(compiled.invoice_total.search(text), SUM)
    return parse_locale_number(raw, SUM)


def extract_invoice_date(compiled: CompiledVendor, text: str) -> datetime:
    """Timestamp assembled from the date pattern's year/month/day/... groups."""
    match = compiled.invoice_date.search(text)
    if match is None:
        raise FieldMissing(INVOICE_DATE)
    return assemble_date(match.groupdict())


def extract_payment_type(compiled: CompiledVendor, text: str) -> Optional[str]:
    """
    Optional payment type with internal whitespace collapsed.

    Taken from the dedicated payment-type pattern when the profile has one,
    otherwise from a PAYMENT_TYPE group inside the total pattern.
    """
    if compiled.payment_type is not None:
        pattern = compiled.payment_type
    elif compiled.invoice_total.has_group(PAYMENT_TYPE):
        pattern = compiled.invoice_total
    else:
        return None

    match = pattern.search(text)
    raw = _capture(match, PAYMENT_TYPE) if match else None
    if raw is None:
        return None

    payment_type = _EXTRA_SPACES.sub(" ", raw.strip())
    return payment_type or None


def extract_meta(compiled: CompiledVendor, text: str) -> InvoiceMeta:
    """
    Extract the invoice header.

    Raises:
        FieldMissing: If the number, total or date pattern yields nothing
        NumberFormatError: If the total is not a number
        DateFieldMissing, InvalidCalendarDate: If the date is incomplete or invalid
    """
    return InvoiceMeta(
        invoice_number=extract_invoice_number(compiled, text),
        gross_total=extract_gross_total(compiled, text),
        date=extract_invoice_date(compiled, text),
        payment_type=extract_payment_type(compiled, text),
    )


# ============================================================================
# Field Resolution
# ============================================================================

def resolve_vat(compiled: CompiledVendor, match: re.Match) -> float:
    """
    VAT rate of an item match.

    The VAT-class token is looked up in the vendor's table. The profile's
    default rate applies only when the match carries no VAT capture at all.
    """
    token = _capture(match, VAT)
    if token is not None:
        return compiled.rate(token.strip())
    if compiled.default_vat is None:
        raise FieldMissing(VAT)
    return compiled.default_vat


def resolve_price(match: re.Match, net_name: str, gross_name: str, vat: float) -> Optional[float]:
    """
    Net price from an explicit net capture, else derived from the gross capture.

    Returns None when neither capture is present so the caller decides
    whether that is an error.
    """
    net = _number(match, net_name)
    if net is not None:
        return net

    gross = _number(match, gross_name)
    if gross is not None:
        return derive_net(gross, vat)

    return None


def _description(match: re.Match) -> str:
    description = _required(match, DESC).strip()
    if not description:
        raise FieldMissing(DESC)
    return description


def _article_number(match: re.Match) -> str:
    return (_capture(match, ARTNR) or "").strip()


def resolve_item(compiled: CompiledVendor, match: re.Match, counter: int) -> InvoiceItem:
    """
    Resolve one regular line item.

    Args:
        compiled: The compiled vendor profile
        match: A match of the line-item pattern
        counter: Position used when the match has no POS capture

    Returns:
        The resolved InvoiceItem
    """
    vat = resolve_vat(compiled, match)

    packaging = _number(match, PU_AMOUNT)
    if packaging is None:
        packaging = 1.0
    elif packaging == 0:
        raise NumberFormatError(_capture(match, PU_AMOUNT), PU_AMOUNT)

    amount = parse_locale_number(_required(match, AMOUNT), AMOUNT)
    quantity = amount * packaging

    net_price_single = resolve_price(match, NET_PRICE_SINGLE, GROSS_PRICE_SINGLE, vat)
    if net_price_single is None:
        raise FieldMissing(NET_PRICE_SINGLE)

    # Sign is taken per pack; dividing and rounding may leave -0.0
    kind = InvoiceItemType.EXPENSE
    if compiled.profile.item_kind_policy == ItemKindPolicy.SIGN and net_price_single * amount < 0:
        kind = InvoiceItemType.CREDIT

    if packaging != 1.0:
        net_price_single = round_price(net_price_single / packaging)

    net_total_price = resolve_price(match, NET_PRICE_TOTAL, GROSS_PRICE_TOTAL, vat)
    if net_total_price is None:
        raise FieldMissing(NET_PRICE_TOTAL)

    raw_position = _capture(match, POS)
    position = parse_integer(raw_position, POS) if raw_position is not None else counter

    return InvoiceItem(
        kind=kind,
        position=position,
        article_number=_article_number(match),
        description=_description(match),
        net_price_single=net_price_single,
        vat=vat,
        quantity=quantity,
        net_total_price=net_total_price,
    )


def resolve_discount_item(compiled: CompiledVendor, match: re.Match, position: int) -> InvoiceItem:
    """
    Resolve one discount/credit item.

    Discount lines usually print a single amount, so the unit price falls
    back to the total captures and the total to ``unit price * quantity``.
    """
    vat = resolve_vat(compiled, match)

    amount = _number(match, AMOUNT)
    quantity = amount if amount is not None else 1.0

    net_price_single = resolve_price(match, NET_PRICE_SINGLE, GROSS_PRICE_SINGLE, vat)
    net_total_price = resolve_price(match, NET_PRICE_TOTAL, GROSS_PRICE_TOTAL, vat)

    if net_price_single is None:
        if net_total_price is None:
            raise FieldMissing(NET_PRICE_SINGLE)
        net_price_single = net_total_price
    if net_total_price is None:
        net_total_price = round_price(net_price_single * quantity)

    return InvoiceItem(
        kind=InvoiceItemType.CREDIT,
        position=position,
        article_number=_article_number(match),
        description=_description(match),
        net_price_single=net_price_single,
        vat=vat,
        quantity=quantity,
        net_total_price=net_total_price,
    )


# ============================================================================
# Item Extraction
# ============================================================================

def extract_items(compiled: CompiledVendor, text: str) -> list[InvoiceItem]:
    """
    Extract all line items in document order, discount items last.

    Regular items without a POS capture are numbered 1, 2, 3, ... by a
    counter local to this call. Discount items are numbered after the
    highest regular position.

    Raises:
        ExtractionError: On the first item field that cannot be resolved
    """
    items = [
        resolve_item(compiled, match, counter)
        for counter, match in zip(count(1), compiled.invoice_item.scan(text))
    ]

    if compiled.invoice_discount_item is not None:
        first = max((item.position for item in items), default=0) + 1
        items.extend(
            resolve_discount_item(compiled, match, position)
            for position, match in zip(count(first), compiled.invoice_discount_item.scan(text))
        )

    logger.debug(f"Resolved {len(items)} item(s) for vendor '{compiled.vendor}'")
    return items


# ============================================================================
# Main Extraction Functions
# ============================================================================

def _vendor_tag(vendor: Union[InvoiceVendor, str]) -> str:
    return vendor.value if isinstance(vendor, InvoiceVendor) else vendor


def extract(
    compiled: CompiledVendor,
    text: str,
    vendor_tag: Optional[Union[InvoiceVendor, str]] = None,
) -> Invoice:
    """
    Extract a complete Invoice from document text.

    Args:
        compiled: The compiled vendor profile
        text: Plain document text with original line breaks
        vendor_tag: Tag stored on the Invoice (defaults to the profile's vendor)

    Returns:
        The extracted Invoice

    Raises:
        ExtractionError: On the first field that cannot be extracted; no
            partial Invoice is ever returned
    """
    invoice = Invoice(
        vendor=_vendor_tag(vendor_tag) if vendor_tag is not None else compiled.vendor,
        meta=extract_meta(compiled, text),
        items=extract_items(compiled, text),
    )

    logger.info(
        f"Extracted invoice {invoice.meta.invoice_number} "
        f"with {len(invoice.items)} item(s) for vendor '{invoice.vendor}'"
    )
    return invoice


def extract_for_vendor(vendor: Union[InvoiceVendor, str], text: str) -> Invoice:
    """Extract with the built-in profile of a vendor."""
    return extract(get_compiled_vendor(vendor), text, vendor)


# ============================================================================
# Document Text
# ============================================================================

def extract_text_from_pdf(pdf_path: Path) -> str:
    """
    Extract all text content from a PDF file.

    Layout-preserving extraction keeps column alignment so fixed-width
    item patterns still match.

    Args:
        pdf_path: Path to the PDF file

    Returns:
        Concatenated text from all pages
    """
    text_parts = []

    with pdfplumber.open(pdf_path) as pdf:
        for page in pdf.pages:
            page_text = page.extract_text(layout=True)
            if page_text:
                text_parts.append(page_text)

    return "\n".join(text_parts)


def load_document_text(path: Path) -> str:
    """Text of a document: PDFs through pdfplumber, anything else read as UTF-8."""
    if path.suffix.lower() == ".pdf":
        text = extract_text_from_pdf(path)
    else:
        text = path.read_text(encoding="utf-8")

    if not text:
        raise ValueError(f"Could not extract text from document: {path}")
    if len(text) > MAX_TEXT_CHARS:
        raise ValueError(f"Document text of {path} exceeds {MAX_TEXT_CHARS} characters")

    return text


def extract_invoice_from_file(path: Path, vendor: Union[InvoiceVendor, str]) -> Invoice:
    """
    Extract an invoice from a PDF or text file with a built-in profile.

    Raises:
        ValueError: If the document has no text or too much of it
        ExtractionError: If the text does not fit the vendor's profile
    """
    logger.info(f"Extracting invoice from: {path.name}")
    return extract_for_vendor(vendor, load_document_text(path))


def extract_invoices_from_dir(
    doc_dir: Path,
    vendor: Union[InvoiceVendor, str],
    pattern: str = "*.pdf",
) -> list[Invoice]:
    """
    Extract invoices from all matching files in a directory.

    Documents that fail extraction are logged and skipped.

    Args:
        doc_dir: Directory containing the documents
        vendor: Vendor whose profile is applied to every document
        pattern: Glob pattern selecting the documents

    Returns:
        List of extracted Invoice objects
    """
    if not doc_dir.exists():
        raise FileNotFoundError(f"Directory not found: {doc_dir}")

    paths = sorted(doc_dir.glob(pattern))

    if not paths:
        logger.warning(f"No documents matching {pattern} found in: {doc_dir}")
        return []

    logger.info(f"Found {len(paths)} documents to process")

    invoices = []
    for path in paths:
        try:
            invoices.append(extract_invoice_from_file(path, vendor))
        except Exception as e:
            logger.error(f"Failed to extract invoice from {path}: {e}")

    logger.info(f"Successfully extracted {len(invoices)} invoices")
    return invoices


def write_extracted_invoices(invoices: Iterable[Invoice], output_path: Path) -> None:
    """
    Write extracted invoices to a JSON file.

    Args:
        invoices: Invoice objects to write
        output_path: Path to output JSON file
    """
    output_data = [invoice.model_dump(mode="json") for invoice in invoices]

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(output_data, f, indent=2)

    logger.info(f"Wrote {len(output_data)} invoices to: {output_path}")
