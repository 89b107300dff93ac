"""
Vendor Invoice Extraction

A profile-driven engine that turns the plain text of vendor invoices into
structured header data and line items with net prices, VAT rates and
quantities.
"""

__version__ = "0.1.0"
__author__ = "Vendor Invoices Team"

from .errors import (
    DateFieldMissing,
    ExtractionError,
    FieldMissing,
    InvalidCalendarDate,
    InvoiceEngineError,
    NumberFormatError,
    PatternError,
    UnrecognizedVatClass,
)
from .schemas import (
    Invoice,
    InvoiceItem,
    InvoiceItemType,
    InvoiceMeta,
    InvoiceVendor,
    ItemKindPolicy,
    MatchMode,
    PatternSlot,
    VendorProfile,
)
from .profile import CompiledVendor, compile_profile
from .vendors import VendorRegistry, get_compiled_vendor
from .extractor import extract, extract_for_vendor, extract_items, extract_meta

__all__ = [
    "CompiledVendor",
    "DateFieldMissing",
    "ExtractionError",
    "FieldMissing",
    "InvalidCalendarDate",
    "Invoice",
    "InvoiceEngineError",
    "InvoiceItem",
    "InvoiceItemType",
    "InvoiceMeta",
    "InvoiceVendor",
    "ItemKindPolicy",
    "MatchMode",
    "NumberFormatError",
    "PatternError",
    "PatternSlot",
    "UnrecognizedVatClass",
    "VendorProfile",
    "VendorRegistry",
    "compile_profile",
    "extract",
    "extract_for_vendor",
    "extract_items",
    "extract_meta",
    "get_compiled_vendor",
]
