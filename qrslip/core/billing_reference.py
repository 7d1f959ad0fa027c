import hashlib
import re
from decimal import Decimal

from qrslip.core.checksums import (
    QR_REFERENCE_LENGTH,
    creditor_reference_check_digits,
    qr_reference_check_digit,
)


QR_IID_START = 30000
QR_IID_END = 31999


def clean_iban(value: str | None) -> str:
    return re.sub(r"[^0-9A-Za-z]", "", (value or "").strip()).upper()


def clean_reference(value: str | None) -> str:
    return re.sub(r"\s", "", (value or "").strip()).upper()


def iban_iid(iban: str | None) -> int | None:
    cleaned = clean_iban(iban)
    if len(cleaned) < 9:
        return None
    if not cleaned.startswith(("CH", "LI")):
        return None
    iid = cleaned[4:9]
    if not iid.isdigit():
        return None
    return int(iid)


def is_qr_iban(iban: str | None) -> bool:
    iid = iban_iid(iban)
    return iid is not None and QR_IID_START <= iid <= QR_IID_END


def generate_rf_reference(seed: str) -> str | None:
    base = re.sub(r"[^0-9A-Z]", "", (seed or "").upper())
    if not base:
        return None
    base = base[:21]
    return f"RF{creditor_reference_check_digits(base)}{base}"


def generate_qrr_reference(seed: str) -> str:
    digits = re.sub(r"\D", "", seed or "")
    if len(digits) < QR_REFERENCE_LENGTH - 1:
        hash_int = int(hashlib.sha1((seed or "").encode("utf-8")).hexdigest(), 16)
        digits = (digits + str(hash_int)).zfill(QR_REFERENCE_LENGTH - 1)
    base = digits[-(QR_REFERENCE_LENGTH - 1):]
    return f"{base}{qr_reference_check_digit(base)}"


def generate_reference(iban: str | None, seed: str) -> str | None:
    if not seed:
        return None
    if is_qr_iban(iban):
        return generate_qrr_reference(seed)
    return generate_rf_reference(seed)


# ============================================================================
# DISPLAY FORMATTING
# ============================================================================

def _chunks(value: str, size: int) -> list[str]:
    return [value[i:i + size] for i in range(0, len(value), size)]


def format_iban(iban: str) -> str:
    """'CH4431999123000889012' -> 'CH44 3199 9123 0008 8901 2'"""
    return " ".join(_chunks(clean_iban(iban), 4))


def format_qr_reference(reference: str) -> str:
    """Two leading digits, then blocks of five: '21 00000 00003 13947 14300 09017'."""
    number = clean_reference(reference).zfill(QR_REFERENCE_LENGTH)
    return " ".join([number[:2], *_chunks(number[2:], 5)])


def format_creditor_reference(reference: str) -> str:
    return " ".join(_chunks(clean_reference(reference), 4))


def format_amount(amount: Decimal | None) -> str:
    """Two decimals, blank as thousands separator: Decimal('1949.75') -> '1 949.75'."""
    if amount is None:
        return ""
    return f"{Decimal(amount):,.2f}".replace(",", " ")
