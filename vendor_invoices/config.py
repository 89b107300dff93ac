"""
Configuration constants for the vendor invoice extraction engine.
"""

import logging
import os
from typing import Final

# ============================================================================
# Capture Group Names
# ============================================================================

# Header fields
INVOICE_NUMBER: Final[str] = "INVOICE_NUMBER"
INVOICE_DATE: Final[str] = "INVOICE_DATE"
SUM: Final[str] = "SUM"
PAYMENT_TYPE: Final[str] = "PAYMENT_TYPE"

# Date components, required first
DATE_REQUIRED_GROUPS: Final[tuple[str, ...]] = ("year", "month", "day")
DATE_OPTIONAL_GROUPS: Final[tuple[str, ...]] = ("hour", "minute", "second")

# Line item fields
POS: Final[str] = "POS"
ARTNR: Final[str] = "ARTNR"
DESC: Final[str] = "DESC"
AMOUNT: Final[str] = "AMOUNT"
PU_AMOUNT: Final[str] = "PU_AMOUNT"
VAT: Final[str] = "VAT"
NET_PRICE_SINGLE: Final[str] = "NET_PRICE_SINGLE"
GROSS_PRICE_SINGLE: Final[str] = "GROSS_PRICE_SINGLE"
NET_PRICE_TOTAL: Final[str] = "NET_PRICE_TOTAL"
GROSS_PRICE_TOTAL: Final[str] = "GROSS_PRICE_TOTAL"

# ============================================================================
# Numeric Conventions
# ============================================================================

# Decimal places kept for prices derived from gross values
PRICE_DECIMALS: Final[int] = 3

# ============================================================================
# Input Limits
# ============================================================================

# Longest document text handed to the engine by the file helpers
MAX_TEXT_CHARS: Final[int] = int(os.getenv("MAX_TEXT_CHARS", "2000000"))

# ============================================================================
# Logging Configuration
# ============================================================================

LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO")


def setup_logging() -> logging.Logger:
    """Configure and return the application logger."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("vendor_invoices")


logger = setup_logging()
