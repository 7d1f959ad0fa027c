"""
Swiss Payments Code payload: the text encoded in the QR symbol.

Field order follows the implementation guidelines for the QR-bill,
payload version 0200. Optional fields that do not apply are written as empty
lines so every field keeps its position.
"""

import logging
from decimal import Decimal, InvalidOperation

from qrslip.core.bill_validation import require_valid_bill
from qrslip.core.config import settings
from qrslip.core.errors import PayloadFormatError, UnsupportedPayloadVersionError
from qrslip.schemas.bill import (
    AdditionalInformation,
    Bill,
    CombinedAddress,
    Currency,
    Language,
    Party,
    StructuredAddress,
    reference_from_string,
)

logger = logging.getLogger(__name__)


ADDRESS_FIELDS = 7

# Field names in payload order (version 0200), without the alternative procedures
PAYLOAD_FIELDS = (
    "qr_type",
    "version",
    "coding",
    "account",
    "creditor.kind",
    "creditor.name",
    "creditor.street_or_line1",
    "creditor.house_number_or_line2",
    "creditor.postal_code",
    "creditor.town",
    "creditor.country",
    "ultimate_creditor.kind",
    "ultimate_creditor.name",
    "ultimate_creditor.street_or_line1",
    "ultimate_creditor.house_number_or_line2",
    "ultimate_creditor.postal_code",
    "ultimate_creditor.town",
    "ultimate_creditor.country",
    "amount",
    "currency",
    "debtor.kind",
    "debtor.name",
    "debtor.street_or_line1",
    "debtor.house_number_or_line2",
    "debtor.postal_code",
    "debtor.town",
    "debtor.country",
    "reference.kind",
    "reference.number",
    "message",
    "trailer",
    "billing_information",
)


def _address_lines(party: Party | None) -> list[str]:
    if party is None:
        return [""] * ADDRESS_FIELDS
    address = party.address
    if isinstance(address, StructuredAddress):
        return [
            "S",
            party.name,
            address.street,
            address.house_number,
            address.postal_code,
            address.town,
            address.country,
        ]
    return [
        "K",
        party.name,
        address.line1,
        address.line2,
        "",
        "",
        address.country,
    ]


def _format_amount(amount: Decimal | None) -> str:
    if amount is None:
        return ""
    return f"{amount:.2f}"


class PayloadEncoderV0200:
    QR_TYPE = "SPC"
    VERSION = "0200"
    CODING = "1"
    TRAILER = "EPD"
    LINE_SEPARATOR = "\r\n"

    def lines(self, bill: Bill) -> list[str]:
        lines = [
            self.QR_TYPE,
            self.VERSION,
            self.CODING,
            bill.account,
        ]
        lines.extend(_address_lines(bill.creditor))
        # Ultimate creditor: reserved for future use, must stay empty
        lines.extend([""] * ADDRESS_FIELDS)
        lines.extend([_format_amount(bill.amount), bill.currency.value])
        lines.extend(_address_lines(bill.debtor))
        lines.extend([bill.reference.kind, bill.reference.number])
        lines.extend(
            [
                bill.additional_information.message,
                self.TRAILER,
                bill.additional_information.billing_information,
            ]
        )
        lines.extend(bill.alternative_procedures)
        return lines

    def encode(self, validated) -> str:
        bill = require_valid_bill(validated)
        payload = self.LINE_SEPARATOR.join(self.lines(bill))
        logger.debug(f"Encoded payload version {self.VERSION} ({len(payload)} characters)")
        return payload


PAYLOAD_ENCODERS = {
    PayloadEncoderV0200.VERSION: PayloadEncoderV0200,
}


def get_encoder(version: str | None = None):
    version = version or settings.PAYLOAD_VERSION
    try:
        return PAYLOAD_ENCODERS[version]()
    except KeyError:
        raise UnsupportedPayloadVersionError(f"Unsupported payload version '{version}'") from None


def encode_payload(validated, version: str | None = None) -> str:
    return get_encoder(version).encode(validated)


# ============================================================================
# PARSING
# ============================================================================

def parse_payload(text: str) -> dict[str, str]:
    """Split a payload into {field name: value} by position."""
    lines = text.replace("\r\n", "\n").split("\n")
    if len(lines) < len(PAYLOAD_FIELDS):
        raise PayloadFormatError(
            f"Expected at least {len(PAYLOAD_FIELDS)} lines, found {len(lines)}"
        )
    fields = dict(zip(PAYLOAD_FIELDS, lines))
    if fields["qr_type"] != PayloadEncoderV0200.QR_TYPE:
        raise PayloadFormatError(f"Unknown QR type '{fields['qr_type']}'")
    if fields["version"] not in PAYLOAD_ENCODERS:
        raise UnsupportedPayloadVersionError(f"Unsupported payload version '{fields['version']}'")
    if fields["trailer"] != PayloadEncoderV0200.TRAILER:
        raise PayloadFormatError(f"Missing trailer '{PayloadEncoderV0200.TRAILER}'")

    extra = lines[len(PAYLOAD_FIELDS):]
    for index, procedure in enumerate(extra):
        fields[f"alternative_procedures[{index}]"] = procedure
    return fields


def _party_from_fields(fields: dict[str, str], prefix: str) -> Party | None:
    kind = fields[f"{prefix}.kind"]
    if not kind:
        return None
    name = fields[f"{prefix}.name"]
    first = fields[f"{prefix}.street_or_line1"]
    second = fields[f"{prefix}.house_number_or_line2"]
    country = fields[f"{prefix}.country"]
    if kind == "S":
        address = StructuredAddress(
            street=first,
            house_number=second,
            postal_code=fields[f"{prefix}.postal_code"],
            town=fields[f"{prefix}.town"],
            country=country,
        )
    elif kind == "K":
        address = CombinedAddress(line1=first, line2=second, country=country)
    else:
        raise PayloadFormatError(f"Unknown address type '{kind}' for {prefix}")
    return Party(name=name, address=address)


def bill_from_payload(text: str, language: Language = Language.EN) -> Bill:
    """Rebuild a Bill from a payload. The result still has to be validated."""
    fields = parse_payload(text)
    try:
        amount = Decimal(fields["amount"]) if fields["amount"] else None
    except InvalidOperation:
        raise PayloadFormatError(f"Invalid amount '{fields['amount']}'") from None
    try:
        currency = Currency(fields["currency"])
    except ValueError:
        raise PayloadFormatError(f"Unknown currency '{fields['currency']}'") from None

    reference = reference_from_string(fields["reference.number"])
    if reference.kind != (fields["reference.kind"] or "NON"):
        raise PayloadFormatError(
            f"Reference type '{fields['reference.kind']}' does not match the reference number"
        )

    procedures = tuple(
        value for key, value in fields.items() if key.startswith("alternative_procedures[")
    )
    return Bill(
        account=fields["account"],
        creditor=_party_from_fields(fields, "creditor"),
        debtor=_party_from_fields(fields, "debtor"),
        amount=amount,
        currency=currency,
        reference=reference,
        additional_information=AdditionalInformation(
            message=fields["message"],
            billing_information=fields["billing_information"],
        ),
        alternative_procedures=procedures,
        language=language,
    )
