"""
Compilation of vendor profiles.

A ``VendorProfile`` is plain configuration. ``compile_profile`` checks it
once and turns it into an immutable ``CompiledVendor`` that holds the
compiled patterns and the VAT table. The compiled form is read-only and can
be shared by any number of concurrent extraction calls.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from .config import (
    GROSS_PRICE_SINGLE,
    GROSS_PRICE_TOTAL,
    NET_PRICE_SINGLE,
    NET_PRICE_TOTAL,
    PAYMENT_TYPE,
    logger,
)
from .errors import PatternError, UnrecognizedVatClass
from .schemas import MatchMode, PatternSlot, VendorProfile

# Physical line breaks only; str.splitlines() also splits on form feeds and the like
_LINE_BREAK = re.compile(r"\r?\n")


@dataclass(frozen=True)
class CompiledPattern:
    """A compiled pattern slot that knows how to scan a document."""
    regex: re.Pattern
    mode: MatchMode

    def has_group(self, name: str) -> bool:
        return name in self.regex.groupindex

    def search(self, text: str) -> Optional[re.Match]:
        """First match anywhere in the document."""
        return self.regex.search(text)

    def scan(self, text: str) -> Iterator[re.Match]:
        """
        Visit all matches in document order.

        LINE mode yields every non-overlapping match of each physical line
        (split on ``\\n`` or ``\\r\\n`` only); DOCUMENT mode yields every
        non-overlapping match over the whole text.
        """
        if self.mode == MatchMode.DOCUMENT:
            yield from self.regex.finditer(text)
            return

        for line in _LINE_BREAK.split(text):
            yield from self.regex.finditer(line)


@dataclass(frozen=True)
class CompiledVendor:
    """
    A vendor profile with all patterns compiled.

    Attributes:
        profile: The profile this was compiled from
        invoice_number: Pattern capturing INVOICE_NUMBER
        invoice_date: Pattern capturing year/month/day[/hour/minute/second]
        invoice_total: Pattern capturing SUM and optionally PAYMENT_TYPE
        invoice_item: Pattern for regular line items
        invoice_discount_item: Pattern for discount/credit items, if any
        payment_type: Dedicated PAYMENT_TYPE pattern, if any
        vat_classes: Read-only mapping of VAT-class token to rate
    """
    profile: VendorProfile
    invoice_number: CompiledPattern
    invoice_date: CompiledPattern
    invoice_total: CompiledPattern
    invoice_item: CompiledPattern
    invoice_discount_item: Optional[CompiledPattern]
    payment_type: Optional[CompiledPattern]
    vat_classes: Mapping[str, float]

    @property
    def vendor(self) -> str:
        return self.profile.vendor

    @property
    def default_vat(self) -> Optional[float]:
        return self.profile.default_vat

    def rate(self, token: str) -> float:
        """
        Look up the VAT rate for a VAT-class token.

        Raises:
            UnrecognizedVatClass: If the token is not in the vendor's table
        """
        try:
            return self.vat_classes[token]
        except KeyError:
            raise UnrecognizedVatClass(token) from None


# ============================================================================
# Compilation
# ============================================================================

def _compile_slot(vendor: str, name: str, slot: PatternSlot) -> CompiledPattern:
    flags = re.MULTILINE if slot.mode == MatchMode.LINE else 0
    if slot.dotall:
        flags |= re.DOTALL

    try:
        regex = re.compile(slot.pattern, flags)
    except re.error as e:
        raise PatternError(vendor, name, str(e)) from e

    return CompiledPattern(regex=regex, mode=slot.mode)


def _compile_vat_classes(profile: VendorProfile) -> Mapping[str, float]:
    table: dict[str, float] = {}

    for token, rate in profile.vat_classes:
        if token in table:
            raise PatternError(profile.vendor, "vat_classes", f"duplicate VAT class {token!r}")
        if not 0 <= rate < 1:
            raise PatternError(profile.vendor, "vat_classes", f"rate {rate} for {token!r} outside [0, 1)")
        table[token] = rate

    if profile.default_vat is not None and profile.default_vat not in table.values():
        raise PatternError(
            profile.vendor,
            "default_vat",
            f"default rate {profile.default_vat} is not a declared VAT class",
        )

    return MappingProxyType(table)


def _require_price_pair(vendor: str, pattern: CompiledPattern, net: str, gross: str) -> None:
    if not (pattern.has_group(net) or pattern.has_group(gross)):
        raise PatternError(vendor, "invoice_item", f"pattern captures neither {net} nor {gross}")


def compile_profile(profile: VendorProfile) -> CompiledVendor:
    """
    Check a vendor profile and compile its patterns.

    Args:
        profile: The vendor's declarative profile

    Returns:
        The immutable compiled vendor

    Raises:
        PatternError: If a pattern does not parse, the VAT table repeats a
            token, the line-item pattern cannot yield prices or the payment-type
            pattern has no PAYMENT_TYPE group
    """
    vendor = profile.vendor

    def optional(name: str, slot: Optional[PatternSlot]) -> Optional[CompiledPattern]:
        return _compile_slot(vendor, name, slot) if slot is not None else None

    item = _compile_slot(vendor, "invoice_item", profile.invoice_item)
    _require_price_pair(vendor, item, NET_PRICE_SINGLE, GROSS_PRICE_SINGLE)
    _require_price_pair(vendor, item, NET_PRICE_TOTAL, GROSS_PRICE_TOTAL)

    payment_type = optional("payment_type", profile.payment_type)
    if payment_type is not None and not payment_type.has_group(PAYMENT_TYPE):
        raise PatternError(vendor, "payment_type", f"pattern does not capture {PAYMENT_TYPE}")

    compiled = CompiledVendor(
        profile=profile,
        invoice_number=_compile_slot(vendor, "invoice_number", profile.invoice_number),
        invoice_date=_compile_slot(vendor, "invoice_date", profile.invoice_date),
        invoice_total=_compile_slot(vendor, "invoice_total", profile.invoice_total),
        invoice_item=item,
        invoice_discount_item=optional("invoice_discount_item", profile.invoice_discount_item),
        payment_type=payment_type,
        vat_classes=_compile_vat_classes(profile),
    )

    logger.info(f"Compiled profile for vendor '{vendor}'")
    return compiled
