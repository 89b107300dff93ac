"""
Pydantic models for vendor profiles and extracted invoice data.

This module defines the core data structures used throughout the engine:
- PatternSlot and VendorProfile describing one vendor's document layout
- InvoiceItem, InvoiceMeta and Invoice produced by an extraction call
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Enums
# ============================================================================

class InvoiceVendor(str, Enum):
    """Vendors shipped with a built-in profile."""
    METRO = "metro"
    BAUHAUS = "bauhaus"
    IKEA = "ikea"
    MEDICAL_CORNER = "medicalcorner"


class InvoiceItemType(str, Enum):
    """Whether a line item costs money or gives some back."""
    EXPENSE = "expense"
    CREDIT = "credit"


class MatchMode(str, Enum):
    """
    How a pattern is run against the document.

    LINE scans physical lines (``^``/``$`` anchor per line for header
    patterns), DOCUMENT scans the whole text so one record may span lines.
    """
    LINE = "line"
    DOCUMENT = "document"


class ItemKindPolicy(str, Enum):
    """How regular line items are classified."""
    EXPENSE = "expense"  # always Expense, credits come from the discount pattern
    SIGN = "sign"        # Credit when net_price_single * quantity < 0


# ============================================================================
# Vendor Profile
# ============================================================================

class PatternSlot(BaseModel):
    """
    One pattern of a vendor profile together with its matching mode.

    Attributes:
        pattern: Regular expression using named groups for the captured fields
        mode: Line-by-line or whole-document scanning
        dot_matches_newline: Overrides whether ``.`` crosses line breaks;
            defaults to True in DOCUMENT mode and False in LINE mode
    """
    pattern: str = Field(..., min_length=1, description="Regular expression with named groups")
    mode: MatchMode = Field(MatchMode.LINE, description="Matching granularity")
    dot_matches_newline: Optional[bool] = Field(
        None,
        description="Let '.' match line breaks (defaults to mode == DOCUMENT)"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def dotall(self) -> bool:
        if self.dot_matches_newline is not None:
            return self.dot_matches_newline
        return self.mode == MatchMode.DOCUMENT


class VendorProfile(BaseModel):
    """
    Declarative description of one vendor's invoice layout.

    New vendors are added by declaring a profile, never by writing code.
    ``vat_classes`` is an ordered list of ``(token, rate)`` pairs so that a
    duplicated token can be detected when the profile is compiled.
    """
    vendor: str = Field(..., min_length=1, description="Vendor tag carried into every Invoice")
    invoice_number: PatternSlot
    invoice_date: PatternSlot
    invoice_total: PatternSlot
    invoice_item: PatternSlot
    invoice_discount_item: Optional[PatternSlot] = None
    payment_type: Optional[PatternSlot] = Field(
        None,
        description="Dedicated pattern for PAYMENT_TYPE when it is not part of the total pattern"
    )
    vat_classes: list[tuple[str, float]] = Field(default_factory=list)
    default_vat: Optional[float] = Field(
        None,
        description="Rate used when an item pattern has no VAT capture at all"
    )
    item_kind_policy: ItemKindPolicy = ItemKindPolicy.EXPENSE

    model_config = ConfigDict(frozen=True)


# ============================================================================
# Extracted Invoice
# ============================================================================

class InvoiceItem(BaseModel):
    """
    Represents a single line item of an extracted invoice.

    Attributes:
        kind: Expense or Credit
        position: Position on the invoice, unique per invoice
        article_number: Vendor article number, empty if not printed
        description: Item description
        net_price_single: Net price of one unit
        vat: VAT rate as a fraction (0.19 for 19 %)
        quantity: Quantity in units, packaging multiplier applied
        net_total_price: Net price of the whole line
    """
    kind: InvoiceItemType = Field(..., description="Expense or Credit")
    position: int = Field(..., ge=0, description="Position on the invoice")
    article_number: str = Field("", description="Vendor article number")
    description: str = Field(..., min_length=1, description="Item description")
    net_price_single: float = Field(..., description="Net unit price")
    vat: float = Field(..., ge=0, lt=1, description="VAT rate as a fraction")
    quantity: float = Field(..., description="Quantity, may be fractional")
    net_total_price: float = Field(..., description="Net price of the line")

    model_config = ConfigDict(frozen=True)


class InvoiceMeta(BaseModel):
    """Header data of an extracted invoice."""
    invoice_number: str = Field(..., min_length=1, description="Invoice number as printed")
    gross_total: float = Field(..., description="Gross invoice total")
    payment_type: Optional[str] = Field(None, description="Payment type, if the vendor prints one")
    date: datetime = Field(..., description="Invoice date and time")

    model_config = ConfigDict(frozen=True)

    @field_validator("invoice_number")
    @classmethod
    def strip_invoice_number(cls, v: str) -> str:
        """Invoice numbers are stored trimmed and never blank."""
        v = v.strip()
        if not v:
            raise ValueError("invoice_number must not be blank")
        return v


class Invoice(BaseModel):
    """
    An extracted invoice: vendor tag, header data and ordered line items.

    Regular items come first in document order, discount items follow.
    """
    vendor: str = Field(..., min_length=1, description="Vendor tag of the profile used")
    meta: InvoiceMeta
    items: list[InvoiceItem] = Field(default_factory=list)

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "vendor": "bauhaus",
                    "meta": {
                        "invoice_number": "123.456/789",
                        "gross_total": 119.0,
                        "payment_type": None,
                        "date": "2024-03-01T00:00:00",
                    },
                    "items": [
                        {
                            "kind": "expense",
                            "position": 1,
                            "article_number": "12345678",
                            "description": "Schraubenset",
                            "net_price_single": 100.0,
                            "vat": 0.19,
                            "quantity": 1.0,
                            "net_total_price": 100.0,
                        }
                    ],
                }
            ]
        },
    )

    @property
    def net_total(self) -> float:
        """Sum of all line totals, credits included."""
        return sum(item.net_total_price for item in self.items)
