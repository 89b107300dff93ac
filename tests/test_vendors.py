"""
Tests for the built-in vendor profiles.

Each test feeds a small document laid out the way the vendor prints its
invoices through ``extract_for_vendor``.
"""

import pytest
from datetime import datetime

from vendor_invoices.errors import FieldMissing
from vendor_invoices.extractor import extract_for_vendor
from vendor_invoices.schemas import InvoiceItemType, InvoiceVendor


def metro_item(desc: str, pu: str, net_single: str, amount: str, net_total: str, vat: str = "A") -> str:
    columns = [
        "1",
        "123456.7",
        "4012345678901 ",
        f"{desc:<31}",
        "ST",
        " " * 11,
        f"{pu:>10}",
        f"{net_single:>10}",
        f"{amount:>6}",
        f"{net_total:>11}",
        vat,
        " " * 10,
    ]
    return " ".join(columns) + " X "


def metro_discount(desc: str, value: str, vat: str = "A") -> str:
    return " " * 26 + f"{desc:<50}" + f"{value:>11}" + " " + vat + " " * 12


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def metro_text() -> str:
    return "\n".join([
        "METRO Cash & Carry Deutschland GmbH",
        "RECHNUNGS-NR.: 12/345.678",
        "RECHNUNGSDATUM: 05.03.2024 14:37",
        metro_item("MINERALWASSER 0,75L", "6", "8,94", "2", "17,88"),
        metro_item("KAFFEE CREMA 1KG", "1", "14,99", "1", "14,99", "B"),
        metro_discount("AKTIONSRABATT", "5,00-"),
        "SUMME EUR          32,87 -  EC  Karte    32,87",
    ])


@pytest.fixture
def bauhaus_text() -> str:
    return "\n".join([
        "BAUHAUS Fachcentrum",
        "Einzelrechnung Nr. 123.456/789",
        "Rechnungsdatum 14.03.2024",
        "1 12345678 Schraubenset 100 Stk 2 ST 11,90 23,80 C",
        "2 87654321 Holzleim 1 KAR 5,95 5,95 C",
        "Zu zahlender Betrag 29,75 EUR",
    ])


@pytest.fixture
def ikea_text() -> str:
    return "\n".join([
        "IKEA Deutschland GmbH & Co. KG",
        "Rechnungsnummer: 8827364",
        "Rechnungsdatum: 2.4.2024",
        "102.345.67 KALLAX Regal weiss 2 49,99 19 % € 99,98",
        "Rechnungssumme: € 99,98",
    ])


@pytest.fixture
def medical_corner_text() -> str:
    return "\n".join([
        "Medical Corner GmbH",
        "Rechnung RE20240117",
        "",
        "Rechnungsdatum: ",
        "Kundennummer: ",
        "Lieferschein: ",
        "Lieferdatum: ",
        "Bearbeiter: ",
        "RE20240117",
        "17.01.2024",
        "",
        "1 MC-100abcd Verbandsmaterial",
        "steril 3 19% 4,99 14,97",
        "",
        "2 MC-200 Handschuhe 1 7% 8,56 8,56",
        "",
        "Gesamt 23,53 EUR",
    ])


# ============================================================================
# Vendors
# ============================================================================

class TestMetro:
    """Fixed-width wholesale receipts."""

    def test_meta(self, metro_text):
        invoice = extract_for_vendor(InvoiceVendor.METRO, metro_text)
        assert invoice.vendor == "metro"
        assert invoice.meta.invoice_number == "12/345.678"
        assert invoice.meta.date == datetime(2024, 3, 5, 14, 37)
        assert invoice.meta.gross_total == 32.87
        assert invoice.meta.payment_type == "EC Karte"

    def test_pack_unit_items(self, metro_text):
        water, coffee, _ = extract_for_vendor("metro", metro_text).items
        assert water.position == 1
        assert water.article_number == "123456.7"
        assert water.description == "MINERALWASSER 0,75L"
        assert water.quantity == 12.0
        assert water.net_price_single == 1.49
        assert water.net_total_price == 17.88
        assert water.vat == 0.19

        assert coffee.position == 2
        assert coffee.net_price_single == 14.99
        assert coffee.vat == 0.07
        assert coffee.kind == InvoiceItemType.EXPENSE

    def test_discount(self, metro_text):
        discount = extract_for_vendor("metro", metro_text).items[-1]
        assert discount.kind == InvoiceItemType.CREDIT
        assert discount.position == 3
        assert discount.description == "AKTIONSRABATT"
        assert discount.net_price_single == -5.0
        assert discount.net_total_price == -5.0
        assert discount.quantity == 1.0


class TestBauhaus:
    """Gross prices with explicit positions."""

    def test_extract(self, bauhaus_text):
        invoice = extract_for_vendor("bauhaus", bauhaus_text)
        assert invoice.meta.invoice_number == "123.456/789"
        assert invoice.meta.date == datetime(2024, 3, 14)
        assert invoice.meta.gross_total == 29.75
        assert invoice.meta.payment_type is None

        screws, glue = invoice.items
        assert screws.position == 1
        assert screws.article_number == "12345678"
        assert screws.description == "Schraubenset 100 Stk"
        assert screws.quantity == 2.0
        assert screws.net_price_single == 10.0
        assert screws.net_total_price == 20.0
        assert screws.vat == 0.19

        assert glue.position == 2
        assert glue.description == "Holzleim"
        assert glue.net_price_single == 5.0

    def test_missing_invoice_number(self, bauhaus_text):
        text = bauhaus_text.replace("Einzelrechnung Nr. 123.456/789", "Einzelrechnung")
        with pytest.raises(FieldMissing) as exc_info:
            extract_for_vendor("bauhaus", text)
        assert exc_info.value.name == "INVOICE_NUMBER"


class TestIkea:
    """Percentage VAT tokens."""

    def test_extract(self, ikea_text):
        invoice = extract_for_vendor("ikea", ikea_text)
        assert invoice.meta.invoice_number == "8827364"
        assert invoice.meta.date == datetime(2024, 4, 2)
        assert invoice.meta.gross_total == 99.98

        (shelf,) = invoice.items
        assert shelf.position == 1
        assert shelf.article_number == "102.345.67"
        assert shelf.description == "KALLAX Regal weiss"
        assert shelf.quantity == 2.0
        assert shelf.vat == 0.19
        assert shelf.net_price_single == 42.008
        assert shelf.net_total_price == 84.017


class TestMedicalCorner:
    """Multi-line records matched over the whole document."""

    def test_meta(self, medical_corner_text):
        invoice = extract_for_vendor("medicalcorner", medical_corner_text)
        assert invoice.meta.invoice_number == "RE20240117"
        assert invoice.meta.date == datetime(2024, 1, 17)
        assert invoice.meta.gross_total == 23.53

    def test_items_span_lines(self, medical_corner_text):
        dressing, gloves = extract_for_vendor("medicalcorner", medical_corner_text).items

        assert dressing.position == 1
        assert dressing.article_number == "MC-100abcd"
        assert dressing.description == "Verbandsmaterial\nsteril"
        assert dressing.quantity == 3.0
        assert dressing.vat == 0.19
        assert dressing.net_price_single == 4.193
        assert dressing.net_total_price == 12.58

        assert gloves.position == 2
        assert gloves.article_number == "MC-200"
        assert gloves.vat == 0.07
        assert gloves.net_price_single == 8.0

    def test_date_block_must_be_contiguous(self, medical_corner_text):
        text = medical_corner_text.replace("Lieferdatum: \n", "Lieferdatum: \nLieferort: \n")
        with pytest.raises(FieldMissing) as exc_info:
            extract_for_vendor("medicalcorner", text)
        assert exc_info.value.name == "INVOICE_DATE"


def test_unknown_vendor():
    with pytest.raises(ValueError):
        extract_for_vendor("aldi", "Rechnung 1")
