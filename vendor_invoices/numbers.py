"""
Numeric helpers shared by all vendor profiles.

Vendors print numbers in the German convention: ``.`` groups thousands,
``,`` is the decimal point and a minus sign may trail the number
(``"10,000-"``). Prices derived from gross values are kept at three
decimal places.
"""

import math
import re
from typing import Optional

from .config import PRICE_DECIMALS
from .errors import NumberFormatError

_WHITESPACE = re.compile(r"\s+")
_DECIMAL_LITERAL = re.compile(r"\+?(?:\d+(?:\.\d*)?|\.\d+)", re.ASCII)
_INTEGER_LITERAL = re.compile(r"\+?\d+", re.ASCII)


def parse_locale_number(value: str, field: Optional[str] = None) -> float:
    """
    Parse a number printed in the vendors' locale convention.

    Thousands dots and all whitespace are removed, any ``-`` anywhere in the
    literal makes the result negative, and ``,`` becomes the decimal point.

    Args:
        value: Raw captured text, e.g. ``"1.312,00"`` or ``"10,000-"``
        field: Capture group name, reported in the error

    Returns:
        The parsed value

    Raises:
        NumberFormatError: If the cleaned literal is not a decimal number
    """
    cleaned = _WHITESPACE.sub("", value.replace(".", ""))
    negative = "-" in cleaned
    cleaned = cleaned.replace("-", "").replace(",", ".")

    if not _DECIMAL_LITERAL.fullmatch(cleaned):
        raise NumberFormatError(value, field)

    number = float(cleaned)
    return -number if negative else number


def parse_integer(value: str, field: Optional[str] = None) -> int:
    """Parse a non-negative integer capture such as a position or date part."""
    cleaned = value.strip()
    if not _INTEGER_LITERAL.fullmatch(cleaned):
        raise NumberFormatError(value, field)
    return int(cleaned)


def round_price(value: float, decimals: int = PRICE_DECIMALS) -> float:
    """Round half away from zero to a fixed number of decimals."""
    factor = 10 ** decimals
    return math.copysign(math.floor(abs(value) * factor + 0.5), value) / factor


def derive_net(gross: float, vat: float) -> float:
    """
    Net price for a gross price at the given VAT rate.

    ``net = gross * (1 - vat / (1 + vat))``, rounded to three decimals.

    >>> derive_net(119.0, 0.19)
    100.0
    """
    return round_price(gross * (1 - vat / (1 + vat)))
