from decimal import Decimal

from qrslip.core.billing_reference import (
    clean_iban,
    format_amount,
    format_creditor_reference,
    format_iban,
    format_qr_reference,
    generate_qrr_reference,
    generate_reference,
    generate_rf_reference,
    iban_iid,
    is_qr_iban,
)
from qrslip.core.checksums import creditor_reference_check, qr_reference_check


def test_clean_iban():
    assert clean_iban(" ch93 0076 2011 6238 5295 7 ") == "CH9300762011623852957"
    assert clean_iban(None) == ""


def test_qr_iban_detection():
    """Test the QR-IID range 30000-31999 decides the IBAN kind"""
    assert iban_iid("CH4431999123000889012") == 31999
    assert is_qr_iban("CH4431999123000889012") is True
    assert is_qr_iban("CH44 3199 9123 0008 8901 2") is True
    assert is_qr_iban("CH9300762011623852957") is False
    assert is_qr_iban("DE89370400440532013000") is False
    assert is_qr_iban("") is False


def test_generate_rf_reference_is_valid():
    reference = generate_rf_reference("INV-2024-001")
    assert reference.startswith("RF")
    assert reference.endswith("INV2024001")
    assert creditor_reference_check(reference) is True
    assert generate_rf_reference("---") is None


def test_generate_qrr_reference_is_valid():
    """Test generated QR references have 27 digits and a valid check digit"""
    for seed in ("1", "invoice-42", "12345678901234567890123456789"):
        reference = generate_qrr_reference(seed)
        assert len(reference) == 27
        assert reference.isdigit()
        assert qr_reference_check(reference) is True


def test_generate_qrr_reference_keeps_digits():
    assert generate_qrr_reference("24075277") != generate_qrr_reference("24075278")
    assert generate_qrr_reference("24075277") == generate_qrr_reference("24075277")


def test_generate_reference_follows_iban_kind():
    assert generate_reference("CH4431999123000889012", "42").isdigit()
    assert generate_reference("CH9300762011623852957", "42").startswith("RF")
    assert generate_reference("CH9300762011623852957", "") is None


def test_display_formatting():
    assert format_iban("CH9300762011623852957") == "CH93 0076 2011 6238 5295 7"
    assert format_qr_reference("210000000003139471430009017") == "21 00000 00003 13947 14300 09017"
    assert format_creditor_reference("RF18539007547034") == "RF18 5390 0754 7034"


def test_format_amount():
    """Test amounts use a blank as thousands separator and two decimals"""
    assert format_amount(Decimal("1949.75")) == "1 949.75"
    assert format_amount(Decimal("1234567.5")) == "1 234 567.50"
    assert format_amount(Decimal("0")) == "0.00"
    assert format_amount(None) == ""
