"""
Exceptions raised by the extraction engine.

Exception Hierarchy:
    InvoiceEngineError (base)
    ├── PatternError
    └── ExtractionError
        ├── FieldMissing
        ├── DateFieldMissing
        ├── NumberFormatError
        ├── InvalidCalendarDate
        └── UnrecognizedVatClass

``PatternError`` marks a broken vendor profile and is raised while compiling.
Everything under ``ExtractionError`` is raised per document and means the
text did not fit the vendor's profile.
"""

from typing import Optional


class InvoiceEngineError(Exception):
    """
    Base exception for all engine errors.

    Attributes:
        message: Human-readable error message.
        details: Dictionary with the field name, raw text and similar context.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class PatternError(InvoiceEngineError):
    """Raised when a vendor profile cannot be compiled."""

    def __init__(self, vendor: str, slot: str, reason: str):
        message = f"Invalid profile for vendor '{vendor}' in {slot}: {reason}"
        details = {"vendor": vendor, "slot": slot, "reason": reason}
        super().__init__(message, details)
        self.vendor = vendor
        self.slot = slot


# =============================================================================
# EXTRACTION ERRORS
# =============================================================================

class ExtractionError(InvoiceEngineError):
    """Base exception for failures while extracting a single document."""
    pass


class FieldMissing(ExtractionError):
    """
    Raised when a required capture did not match.

    Example:
        >>> raise FieldMissing("INVOICE_NUMBER")
    """

    def __init__(self, name: str):
        message = f"Missing required field {name} on invoice"
        super().__init__(message, {"field": name})
        self.name = name


class DateFieldMissing(ExtractionError):
    """Raised when the date pattern matched without a required component."""

    def __init__(self, name: str):
        message = f"Missing date component '{name}' on invoice"
        super().__init__(message, {"field": name})
        self.name = name


class NumberFormatError(ExtractionError):
    """Raised when a captured literal is not a number."""

    def __init__(self, raw: str, field: Optional[str] = None):
        message = f"Could not parse number on invoice: {raw!r}"
        super().__init__(message, {"field": field, "raw": raw})
        self.raw = raw
        self.field = field


class InvalidCalendarDate(ExtractionError):
    """Raised when assembled date components do not denote a real timestamp."""

    def __init__(self, components: dict, reason: str):
        message = f"Unparseable date on invoice: {reason}"
        super().__init__(message, {"components": components})
        self.components = components


class UnrecognizedVatClass(ExtractionError):
    """Raised when a VAT-class token has no entry in the vendor's table."""

    def __init__(self, token: str):
        message = f"Unrecognized VAT class: {token!r}"
        super().__init__(message, {"field": "VAT", "raw": token})
        self.token = token
