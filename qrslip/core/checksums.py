"""
Check-digit algorithms used by Swiss QR bills.

- mod-97 (ISO 7064) for IBANs and ISO 11649 creditor references
- recursive mod-10 for QR references (former ESR/BVR reference numbers)

All functions are pure. Malformed input raises MalformedInputError, a
well-formed input with wrong check digits simply returns False.
"""

import re

from qrslip.core.errors import MalformedInputError


# Transition table of the recursive mod-10 algorithm: next carry = table[carry][digit]
MOD10_TABLE = (
    (0, 9, 4, 6, 8, 2, 7, 1, 3, 5),
    (9, 4, 6, 8, 2, 7, 1, 3, 5, 0),
    (4, 6, 8, 2, 7, 1, 3, 5, 0, 9),
    (6, 8, 2, 7, 1, 3, 5, 0, 9, 4),
    (8, 2, 7, 1, 3, 5, 0, 9, 4, 6),
    (2, 7, 1, 3, 5, 0, 9, 4, 6, 8),
    (7, 1, 3, 5, 0, 9, 4, 6, 8, 2),
    (1, 3, 5, 0, 9, 4, 6, 8, 2, 7),
    (3, 5, 0, 9, 4, 6, 8, 2, 7, 1),
    (5, 0, 9, 4, 6, 8, 2, 7, 1, 3),
)

QR_REFERENCE_LENGTH = 27

_ALNUM_RE = re.compile(r"[0-9A-Z]+")


def mod97(numeric_str: str) -> int:
    remainder = 0
    for ch in numeric_str:
        remainder = (remainder * 10 + int(ch)) % 97
    return remainder


def alnum_to_numeric(value: str) -> str:
    """Map A..Z to 10..35 and keep digits, as required by ISO 7064 mod 97-10."""
    digits = []
    for ch in value:
        if ch.isdigit():
            digits.append(ch)
        else:
            digits.append(str(ord(ch) - 55))
    return "".join(digits)


def _require_alnum(value: str, what: str) -> str:
    if not isinstance(value, str) or not _ALNUM_RE.fullmatch(value):
        raise MalformedInputError(f"{what} must only contain digits and upper-case letters")
    return value


def iban_check_digit(account: str) -> bool:
    """Return True when the IBAN passes the mod-97 check."""
    _require_alnum(account, "IBAN")
    if not 5 <= len(account) <= 34:
        raise MalformedInputError("IBAN must have between 5 and 34 characters")
    if not account[:2].isalpha() or not account[2:4].isdigit():
        raise MalformedInputError("IBAN must start with a country code and two check digits")
    rearranged = account[4:] + account[:4]
    return mod97(alnum_to_numeric(rearranged)) == 1


def iban_check_digits(country: str, bban: str) -> str:
    """Compute the two check digits for a country code and a BBAN."""
    _require_alnum(country + bban, "IBAN")
    numeric = alnum_to_numeric(f"{bban}{country}00")
    return f"{98 - mod97(numeric):02d}"


def creditor_reference_check(reference: str) -> bool:
    """Return True when the ISO 11649 creditor reference passes mod-97."""
    _require_alnum(reference, "Creditor reference")
    if not reference.startswith("RF"):
        raise MalformedInputError("Creditor reference must start with 'RF'")
    if not 5 <= len(reference) <= 25:
        raise MalformedInputError("Creditor reference must have between 5 and 25 characters")
    if not reference[2:4].isdigit():
        raise MalformedInputError("Creditor reference check digits must be numeric")
    rearranged = reference[4:] + reference[:4]
    return mod97(alnum_to_numeric(rearranged)) == 1


def creditor_reference_check_digits(body: str) -> str:
    _require_alnum(body, "Creditor reference")
    numeric = alnum_to_numeric(f"{body}RF00")
    return f"{98 - mod97(numeric):02d}"


def qr_reference_check_digit(digits: str) -> int:
    """Return the recursive mod-10 check digit for a string of digits."""
    if not isinstance(digits, str) or not digits.isdigit() or not digits.isascii():
        raise MalformedInputError("QR reference must only contain digits")
    carry = 0
    for ch in digits:
        carry = MOD10_TABLE[carry][int(ch)]
    return (10 - carry) % 10


def qr_reference_check(reference: str) -> bool:
    """Return True when a 27 digit QR reference carries the right check digit."""
    if not isinstance(reference, str) or len(reference) != QR_REFERENCE_LENGTH:
        raise MalformedInputError(f"QR reference must have {QR_REFERENCE_LENGTH} digits")
    if not reference.isascii() or not reference.isdigit():
        raise MalformedInputError("QR reference must only contain digits")
    return qr_reference_check_digit(reference[:-1]) == int(reference[-1])
