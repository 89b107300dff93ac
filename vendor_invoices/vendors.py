"""
Built-in vendor profiles and the registry that compiles them.

Each vendor is described purely as data. ``VendorRegistry`` compiles a
profile the first time it is requested and hands out the same immutable
``CompiledVendor`` afterwards; compilation happens at most once per vendor
even when several threads ask at the same time.
"""

import threading
from typing import Final, Iterable, Union

from .config import logger
from .profile import CompiledVendor, compile_profile
from .schemas import InvoiceVendor, ItemKindPolicy, MatchMode, PatternSlot, VendorProfile


# ============================================================================
# Built-in Profiles
# ============================================================================

# Fixed-width wholesale receipt. Prices are net per pack, PU_AMOUNT is the
# pack content. Discounts are indented lines without article data.
METRO: Final[VendorProfile] = VendorProfile(
    vendor=InvoiceVendor.METRO.value,
    invoice_number=PatternSlot(
        pattern=r"RECHNUNGS?-? ?NR\.?:?\s+(?P<INVOICE_NUMBER>[.\d/]+)",
    ),
    invoice_date=PatternSlot(
        pattern=(
            r"RECHNUNGSDATUM:\s+(?P<day>\d\d)\.(?P<month>\d\d)\.(?P<year>\d{4}) "
            r"(?P<hour>\d\d):(?P<minute>\d\d)"
        ),
    ),
    invoice_total=PatternSlot(
        pattern=(
            r"SUMME EUR\s+(?P<SUM>[\d.,\-]+)"
            r"(?:[\s\-]+(?P<PAYMENT_TYPE>[a-zA-Z0-9:\-., ]+) +[\d.,\-]+)?"
        ),
    ),
    invoice_item=PatternSlot(
        pattern=(
            r"^(?P<MM>.) (?P<ARTNR>\d{6}\.\d) (?P<EAN>[\d ]{14}) (?P<DESC>.{31}) "
            r"(?P<PACK>.{2}) (?P<EINZELPREIS>.{11}) (?P<PU_AMOUNT>.{10}) "
            r"(?P<NET_PRICE_SINGLE>.{10}) (?P<AMOUNT>.{6}) (?P<NET_PRICE_TOTAL>.{11}) "
            r"(?P<VAT>.) (?P<STUECKPREIS>.{10})[ \u00a0](?P<INT>.) (?P<KD>.+)?$"
        ),
    ),
    invoice_discount_item=PatternSlot(
        pattern=r"^ {26}(?P<DESC>.{50}) *(?P<NET_PRICE_SINGLE>.{11}) (?P<VAT>.)?[ 0-9]{12}$",
    ),
    vat_classes=[("A", 0.19), ("B", 0.07)],
    item_kind_policy=ItemKindPolicy.SIGN,
)

# Gross prices per item, explicit single-digit positions.
BAUHAUS: Final[VendorProfile] = VendorProfile(
    vendor=InvoiceVendor.BAUHAUS.value,
    invoice_number=PatternSlot(pattern=r"Einzelrechnung\s+Nr\.\s+(?P<INVOICE_NUMBER>[.\d/]+)"),
    invoice_date=PatternSlot(
        pattern=r"Rechnungsdatum\s+(?P<day>\d\d)\.(?P<month>\d\d)\.(?P<year>\d{4})",
    ),
    invoice_total=PatternSlot(pattern=r"Zu zahlender Betrag\s+(?P<SUM>[\d.,\-]+) EUR"),
    invoice_item=PatternSlot(
        pattern=(
            r"^(?P<POS>\d)\s+(?P<ARTNR>\d{8})\s+(?P<DESC>.{1,100})\s+"
            r"(?P<AMOUNT>\d{1,6}) (?:ST|KAR)\s+(?P<GROSS_PRICE_SINGLE>.{1,7})\s+"
            r"(?P<GROSS_PRICE_TOTAL>.{1,7})\s+(?P<VAT>\w)$"
        ),
    ),
    vat_classes=[("C", 0.19)],
    item_kind_policy=ItemKindPolicy.SIGN,
)

# VAT printed as a percentage next to each item.
IKEA: Final[VendorProfile] = VendorProfile(
    vendor=InvoiceVendor.IKEA.value,
    invoice_number=PatternSlot(pattern=r"Rechnungsnummer: (?P<INVOICE_NUMBER>\w+)"),
    invoice_date=PatternSlot(
        pattern=r"Rechnungsdatum:\s+(?P<day>\d{1,2})\.(?P<month>\d{1,2})\.(?P<year>\d{2,4})",
    ),
    invoice_total=PatternSlot(pattern=r"Rechnungssumme:\s+€\s+(?P<SUM>[0-9,.]+)"),
    invoice_item=PatternSlot(
        pattern=(
            r"^(?P<ARTNR>\d{2,3}\.\d{2,3}\.\d{2,3})\s+(?P<DESC>.+)\s+(?P<AMOUNT>\d+)\s+"
            r"(?P<GROSS_PRICE_SINGLE>\d{1,5},\d{0,2})\s+(?P<VAT>\d{1,2}) %\s+"
            r"€ (?P<GROSS_PRICE_TOTAL>[0-9,.]+)$"
        ),
    ),
    vat_classes=[("19", 0.19), ("7", 0.07)],
    item_kind_policy=ItemKindPolicy.SIGN,
)

# Header values follow a block of labels; item records are separated by
# blank lines and may wrap their description over several lines.
MEDICAL_CORNER: Final[VendorProfile] = VendorProfile(
    vendor=InvoiceVendor.MEDICAL_CORNER.value,
    invoice_number=PatternSlot(pattern=r"Rechnung\s+(?P<INVOICE_NUMBER>\w+)"),
    invoice_date=PatternSlot(
        pattern=(
            r"Rechnungsdatum:\s+\nKundennummer:\s+\nLieferschein:\s+\nLieferdatum:\s+\n"
            r"Bearbeiter:\s+\n.+\n(?P<day>\d{1,2})\.(?P<month>\d{2})\.(?P<year>\d{4})"
        ),
        mode=MatchMode.DOCUMENT,
        dot_matches_newline=False,
    ),
    invoice_total=PatternSlot(pattern=r"Gesamt (?P<SUM>\d+,\d{2}) EUR"),
    invoice_item=PatternSlot(
        pattern=(
            r"\n\n(?P<POS>\d+) (?P<ARTNR>[A-Z0-9_-]+(?:[^\WA-Z]{4})?) (?P<DESC>.+?) "
            r"(?P<AMOUNT>\d+) (?P<VAT>\d+)% (?P<GROSS_PRICE_SINGLE>\d+,\d{2}) "
            r"(?P<GROSS_PRICE_TOTAL>\d+,\d{2})"
        ),
        mode=MatchMode.DOCUMENT,
    ),
    vat_classes=[("0", 0.0), ("19", 0.19), ("7", 0.07)],
    item_kind_policy=ItemKindPolicy.SIGN,
)

BUILTIN_PROFILES: Final[tuple[VendorProfile, ...]] = (METRO, BAUHAUS, IKEA, MEDICAL_CORNER)


# ============================================================================
# Registry
# ============================================================================

class VendorRegistry:
    """
    Compiles vendor profiles on first use and caches the result.

    Example:
        >>> registry = VendorRegistry(BUILTIN_PROFILES)
        >>> registry.get("metro").vendor
        'metro'
    """

    def __init__(self, profiles: Iterable[VendorProfile]):
        self._profiles: dict[str, VendorProfile] = {}
        for profile in profiles:
            if profile.vendor in self._profiles:
                raise ValueError(f"Duplicate profile for vendor: {profile.vendor}")
            self._profiles[profile.vendor] = profile

        self._compiled: dict[str, CompiledVendor] = {}
        self._lock = threading.Lock()

    @property
    def vendors(self) -> list[str]:
        return list(self._profiles)

    def profile(self, vendor: Union[InvoiceVendor, str]) -> VendorProfile:
        """Declared profile for a vendor tag."""
        tag = vendor.value if isinstance(vendor, InvoiceVendor) else vendor
        try:
            return self._profiles[tag]
        except KeyError:
            available = ", ".join(self._profiles)
            raise ValueError(
                f"No profile for vendor '{tag}'. Available vendors: {available}"
            ) from None

    def get(self, vendor: Union[InvoiceVendor, str]) -> CompiledVendor:
        """
        Compiled profile for a vendor, compiling it on the first request.

        Raises:
            ValueError: If no profile is registered for the vendor
            PatternError: If the profile does not compile
        """
        profile = self.profile(vendor)

        compiled = self._compiled.get(profile.vendor)
        if compiled is not None:
            return compiled

        with self._lock:
            compiled = self._compiled.get(profile.vendor)
            if compiled is None:
                logger.debug(f"Compiling profile for vendor '{profile.vendor}' on first use")
                compiled = compile_profile(profile)
                self._compiled[profile.vendor] = compiled

        return compiled


default_registry = VendorRegistry(BUILTIN_PROFILES)


def get_compiled_vendor(vendor: Union[InvoiceVendor, str]) -> CompiledVendor:
    """Compiled built-in profile for a vendor."""
    return default_registry.get(vendor)
