"""
Validation of a Bill against the Swiss QR-bill rules (payload version 0200).

Every rule is checked; nothing short-circuits, so the caller gets all
problems of a bill at once. User-input problems are returned, never raised.
"""

import logging
from collections.abc import Mapping
from decimal import Decimal

from pydantic import BaseModel

from qrslip.core.billing_reference import is_qr_iban
from qrslip.core.checksums import (
    QR_REFERENCE_LENGTH,
    creditor_reference_check,
    iban_check_digit,
    qr_reference_check,
)
from qrslip.core.countries import ISO_COUNTRY_CODES
from qrslip.core.errors import EncodingPreconditionError, ErrorCategory, MalformedInputError
from qrslip.core.swico import S1_PREFIX, check_s1_syntax
from qrslip.schemas.bill import (
    Bill,
    CombinedAddress,
    CreditorReference,
    Party,
    QRReference,
    StructuredAddress,
)

logger = logging.getLogger(__name__)


IBAN_ALLOWED_COUNTRIES = ("CH", "LI")
IBAN_LENGTH = 21

MAX_AMOUNT = Decimal("999999999.99")
CENT = Decimal("0.01")
MAX_NAME = 70
MAX_STREET = 70
MAX_HOUSE_NUMBER = 16
MAX_POSTAL_CODE = 16
MAX_TOWN = 35
MAX_ADDRESS_LINE = 70
MAX_ADDITIONAL_INFORMATION = 140
MAX_ALTERNATIVE_PROCEDURES = 2
MAX_ALTERNATIVE_PROCEDURE = 100

# Latin character set permitted in the payload: printable Basic Latin plus the
# listed Latin-1 Supplement / Latin Extended-A characters.
_EXTRA_CHARACTERS = (
    "£´·"
    "ÀÁÂÄÇÈÉÊËÌÍÎÏÑÒÓÔÖÙÚÛÜß"
    "àáâäçèéêëìíîïñòóôö÷ùúûüýÿ"
    "ŒœŠšŽžŸ€"
)
ALLOWED_CHARACTERS = frozenset(chr(c) for c in range(0x20, 0x7F)) | frozenset(_EXTRA_CHARACTERS)


class Violation(BaseModel):
    field: str
    rule: str
    category: ErrorCategory
    message: str


class ValidationResult(Mapping):
    """Read-only mapping of field id -> ordered list of violated rule ids.

    An empty result means the bill is valid. The payload encoder and the
    layout engine only accept a valid result, never a bare Bill.
    """

    def __init__(self, bill: Bill, violations: list[Violation]):
        self._bill = bill
        self._violations = tuple(violations)
        errors: dict[str, list[str]] = {}
        for violation in self._violations:
            errors.setdefault(violation.field, []).append(violation.rule)
        self._errors = errors

    def __getitem__(self, field: str) -> list[str]:
        return list(self._errors[field])

    def __iter__(self):
        return iter(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __repr__(self) -> str:
        return f"ValidationResult({self._errors!r})"

    @property
    def bill(self) -> Bill:
        return self._bill

    @property
    def is_valid(self) -> bool:
        return not self._errors

    @property
    def violations(self) -> tuple[Violation, ...]:
        return self._violations

    def categories(self, field: str) -> list[ErrorCategory]:
        return [v.category for v in self._violations if v.field == field]

    def require_valid(self) -> Bill:
        """Return the bill, or raise when a stage is handed an invalid result."""
        if self._errors:
            raise EncodingPreconditionError(
                f"Bill has validation errors on: {', '.join(self._errors)}",
                fields=list(self._errors),
            )
        return self._bill


def require_valid_bill(validated) -> Bill:
    if not isinstance(validated, ValidationResult):
        raise EncodingPreconditionError(
            "Expected the ValidationResult returned by validate_bill(), "
            f"got {type(validated).__name__}"
        )
    return validated.require_valid()


class _Collector:
    def __init__(self):
        self.violations: list[Violation] = []

    def add(self, field: str, rule: str, category: ErrorCategory, message: str) -> None:
        self.violations.append(
            Violation(field=field, rule=rule, category=category, message=message)
        )

    def text(
        self,
        field: str,
        value: str,
        max_length: int,
        *,
        required: bool = False,
    ) -> None:
        if required and not value.strip():
            self.add(field, "required", ErrorCategory.STRUCTURAL, "This field is required")
        if len(value) > max_length:
            self.add(
                field,
                "max_length",
                ErrorCategory.LENGTH,
                f"At most {max_length} characters allowed, found {len(value)}",
            )
        invalid = sorted({ch for ch in value if ch not in ALLOWED_CHARACTERS})
        if invalid:
            self.add(
                field,
                "charset",
                ErrorCategory.STRUCTURAL,
                f"Characters not allowed: {''.join(invalid)!r}",
            )


# ============================================================================
# RULES
# ============================================================================

def _check_account(bill: Bill, out: _Collector) -> None:
    account = bill.account
    if not account:
        out.add("account", "required", ErrorCategory.STRUCTURAL, "The IBAN is required")
        return
    if account[:2] not in IBAN_ALLOWED_COUNTRIES:
        out.add("account", "country", ErrorCategory.STRUCTURAL, "The IBAN needs to start with CH or LI")
    if len(account) != IBAN_LENGTH:
        out.add(
            "account",
            "format",
            ErrorCategory.STRUCTURAL,
            f"A CH/LI IBAN has {IBAN_LENGTH} characters, found {len(account)}",
        )
        return
    try:
        if not iban_check_digit(account):
            out.add("account", "checksum", ErrorCategory.CHECKSUM, "IBAN checksum failed")
    except MalformedInputError as exc:
        out.add("account", "format", ErrorCategory.STRUCTURAL, f"Not a valid IBAN format: {exc}")


def _check_address(prefix: str, party: Party, out: _Collector) -> None:
    address = party.address
    if isinstance(address, StructuredAddress):
        out.text(f"{prefix}.address.street", address.street, MAX_STREET)
        out.text(f"{prefix}.address.house_number", address.house_number, MAX_HOUSE_NUMBER)
        out.text(f"{prefix}.address.postal_code", address.postal_code, MAX_POSTAL_CODE, required=True)
        out.text(f"{prefix}.address.town", address.town, MAX_TOWN, required=True)
    elif isinstance(address, CombinedAddress):
        out.text(f"{prefix}.address.line1", address.line1, MAX_ADDRESS_LINE)
        out.text(f"{prefix}.address.line2", address.line2, MAX_ADDRESS_LINE, required=True)

    field = f"{prefix}.address.country"
    if not address.country:
        out.add(field, "required", ErrorCategory.STRUCTURAL, "The country code is required")
    elif address.country not in ISO_COUNTRY_CODES:
        out.add(field, "country", ErrorCategory.STRUCTURAL, "Not an ISO 3166-1 alpha-2 country code")


def _check_parties(bill: Bill, out: _Collector) -> None:
    if bill.creditor is None:
        out.add("creditor", "required", ErrorCategory.STRUCTURAL, "The creditor is required")
    else:
        out.text("creditor.name", bill.creditor.name, MAX_NAME, required=True)
        _check_address("creditor", bill.creditor, out)

    if bill.debtor is not None:
        out.text("debtor.name", bill.debtor.name, MAX_NAME)
        _check_address("debtor", bill.debtor, out)


def _check_amount(bill: Bill, out: _Collector) -> None:
    if bill.currency is None:
        out.add("currency", "required", ErrorCategory.STRUCTURAL, "The currency is required")

    amount = bill.amount
    if amount is None:
        return
    if not amount.is_finite():
        out.add("amount", "format", ErrorCategory.STRUCTURAL, "The amount must be a finite number")
        return
    # -0.00 compares equal to zero but would carry its sign into the payload
    if amount.is_signed():
        out.add("amount", "negative", ErrorCategory.STRUCTURAL, "The amount cannot be negative")
    if abs(amount) <= MAX_AMOUNT and amount != amount.quantize(CENT):
        out.add("amount", "precision", ErrorCategory.STRUCTURAL, "At most two decimals are allowed")
    if amount > MAX_AMOUNT:
        out.add("amount", "range", ErrorCategory.LENGTH, f"The amount cannot exceed {MAX_AMOUNT}")


def _check_reference(bill: Bill, out: _Collector) -> None:
    reference = bill.reference
    if isinstance(reference, QRReference):
        try:
            if not qr_reference_check(reference.number):
                out.add("reference", "checksum", ErrorCategory.CHECKSUM, "QR reference checksum failed")
        except MalformedInputError:
            out.add(
                "reference",
                "format",
                ErrorCategory.STRUCTURAL,
                f"A QR reference has {QR_REFERENCE_LENGTH} digits",
            )
    elif isinstance(reference, CreditorReference):
        try:
            if not creditor_reference_check(reference.number):
                out.add(
                    "reference",
                    "checksum",
                    ErrorCategory.CHECKSUM,
                    "Creditor reference checksum failed",
                )
        except MalformedInputError as exc:
            out.add("reference", "format", ErrorCategory.STRUCTURAL, str(exc))

    if not bill.account:
        return
    qr_iban = is_qr_iban(bill.account)
    if qr_iban and not isinstance(reference, QRReference):
        out.add(
            "reference",
            "qr_iban_requires_qr_reference",
            ErrorCategory.CROSS_FIELD,
            "A QR-IBAN can only be used with a QR reference",
        )
    if not qr_iban and isinstance(reference, QRReference):
        out.add(
            "reference",
            "qr_reference_requires_qr_iban",
            ErrorCategory.CROSS_FIELD,
            "A QR reference can only be used with a QR-IBAN",
        )


def _check_additional_information(bill: Bill, out: _Collector) -> None:
    info = bill.additional_information
    out.text("additional_information.message", info.message, MAX_ADDITIONAL_INFORMATION)
    out.text(
        "additional_information.billing_information",
        info.billing_information,
        MAX_ADDITIONAL_INFORMATION,
    )
    total = len(info.message) + len(info.billing_information)
    if total > MAX_ADDITIONAL_INFORMATION:
        out.add(
            "additional_information",
            "max_length",
            ErrorCategory.LENGTH,
            f"Message and billing information together cannot exceed "
            f"{MAX_ADDITIONAL_INFORMATION} characters, found {total}",
        )
    if info.billing_information.startswith(S1_PREFIX):
        for problem in check_s1_syntax(info.billing_information):
            out.add(
                "additional_information.billing_information",
                "swico_syntax",
                ErrorCategory.STRUCTURAL,
                problem,
            )


def _check_alternative_procedures(bill: Bill, out: _Collector) -> None:
    procedures = bill.alternative_procedures
    if len(procedures) > MAX_ALTERNATIVE_PROCEDURES:
        out.add(
            "alternative_procedures",
            "max_count",
            ErrorCategory.LENGTH,
            f"At most {MAX_ALTERNATIVE_PROCEDURES} alternative procedures allowed",
        )
    for index, procedure in enumerate(procedures):
        out.text(f"alternative_procedures[{index}]", procedure, MAX_ALTERNATIVE_PROCEDURE, required=True)


def _check_language(bill: Bill, out: _Collector) -> None:
    if bill.language is None:
        out.add("language", "required", ErrorCategory.STRUCTURAL, "The language is required")


_RULES = (
    _check_account,
    _check_parties,
    _check_amount,
    _check_reference,
    _check_additional_information,
    _check_alternative_procedures,
    _check_language,
)


def validate_bill(bill: Bill) -> ValidationResult:
    out = _Collector()
    for rule in _RULES:
        rule(bill, out)
    result = ValidationResult(bill, out.violations)
    logger.debug(f"Bill validation found {len(out.violations)} violation(s) on {len(result)} field(s)")
    return result
