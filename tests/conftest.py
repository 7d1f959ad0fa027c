from decimal import Decimal

import pytest

from qrslip.schemas.bill import (
    Bill,
    CombinedAddress,
    Party,
    StructuredAddress,
)

ORDINARY_IBAN = "CH9300762011623852957"
QR_IBAN = "CH4431999123000889012"
QR_REFERENCE = "210000000003139471430009017"
CREDITOR_REFERENCE = "RF18539007547034"


class FakeMeasurer:
    """Fixed advance per character, proportional to the font size (mm)."""

    def __init__(self, factor: float = 0.18):
        self.factor = factor

    def width(self, text, font_size, bold=False):
        return len(text) * font_size * self.factor


def fake_qr_generator(payload, error_correction="M"):
    return tuple(
        tuple((row + col) % 2 == 0 for col in range(25))
        for row in range(25)
    )


@pytest.fixture
def creditor():
    return Party(
        name="Muster AG",
        address=StructuredAddress(
            street="Musterstrasse",
            house_number="1",
            postal_code="8000",
            town="Zürich",
            country="CH",
        ),
    )


@pytest.fixture
def debtor():
    return Party(
        name="Pia Rutschmann",
        address=CombinedAddress(
            line1="Marktgasse 28",
            line2="9400 Rorschach",
            country="CH",
        ),
    )


@pytest.fixture
def make_bill(creditor):
    """
    Factory for a valid bill (ordinary IBAN, no reference).
    Usage:
        def test_something(make_bill):
            bill = make_bill(amount=None)
    """
    def _make(**overrides):
        fields = {
            "account": ORDINARY_IBAN,
            "creditor": creditor,
            "amount": Decimal("1949.75"),
            "currency": "CHF",
        }
        fields.update(overrides)
        return Bill(**fields)

    return _make


@pytest.fixture
def measurer():
    return FakeMeasurer()


@pytest.fixture
def qr_generator():
    return fake_qr_generator
