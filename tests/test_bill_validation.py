from decimal import Decimal

import pytest

from conftest import CREDITOR_REFERENCE, QR_IBAN, QR_REFERENCE
from qrslip.core.bill_validation import (
    ValidationResult,
    require_valid_bill,
    validate_bill,
)
from qrslip.core.errors import EncodingPreconditionError, ErrorCategory
from qrslip.core.payload import encode_payload
from qrslip.schemas.bill import (
    AdditionalInformation,
    CombinedAddress,
    CreditorReference,
    Party,
    QRReference,
    StructuredAddress,
)


def test_valid_bill_has_empty_result(make_bill):
    """Test a complete bill validates to an empty mapping"""
    result = validate_bill(make_bill())
    assert isinstance(result, ValidationResult)
    assert result.is_valid
    assert dict(result) == {}
    assert len(result) == 0


def test_valid_bill_with_debtor_and_scor(make_bill, debtor):
    bill = make_bill(debtor=debtor, reference=CreditorReference(number="RF18 5390 0754 7034"))
    assert validate_bill(bill).is_valid


def test_qr_iban_with_qr_reference_is_valid(make_bill):
    bill = make_bill(account=QR_IBAN, reference=QRReference(number=QR_REFERENCE))
    assert validate_bill(bill).is_valid


def test_required_fields(make_bill):
    """Test missing creditor, account and currency are all reported at once"""
    result = validate_bill(make_bill(account="", creditor=None, currency=None, language=None))
    assert result["account"] == ["required"]
    assert result["creditor"] == ["required"]
    assert result["currency"] == ["required"]
    assert result["language"] == ["required"]
    assert result.categories("creditor") == [ErrorCategory.STRUCTURAL]


def test_amount_boundaries(make_bill):
    """Test 999 999 999.99 is the highest amount allowed"""
    assert validate_bill(make_bill(amount=Decimal("999999999.99"))).is_valid

    result = validate_bill(make_bill(amount=Decimal("1000000000.00")))
    assert result["amount"] == ["range"]
    assert result.categories("amount") == [ErrorCategory.LENGTH]


def test_amount_zero_and_open_amount(make_bill):
    assert validate_bill(make_bill(amount=Decimal("0.00"))).is_valid
    assert validate_bill(make_bill(amount=None)).is_valid


def test_amount_sign_and_precision(make_bill):
    assert validate_bill(make_bill(amount=Decimal("-1.00")))["amount"] == ["negative"]
    assert validate_bill(make_bill(amount=Decimal("1.005")))["amount"] == ["precision"]
    assert validate_bill(make_bill(amount=Decimal("-1.005")))["amount"] == ["negative", "precision"]


def test_negative_zero_amount_is_rejected(make_bill):
    """Test -0.00 is reported as negative so no sign reaches the payload"""
    result = validate_bill(make_bill(amount=Decimal("-0.00")))
    assert result["amount"] == ["negative"]
    with pytest.raises(EncodingPreconditionError):
        encode_payload(result)


def test_trailing_zero_decimals_are_accepted(make_bill):
    result = validate_bill(make_bill(amount=Decimal("1.000")))
    assert result.is_valid
    assert encode_payload(result).split("\r\n")[18] == "1.00"


def test_name_length_boundary(make_bill, creditor):
    """Test a name of exactly 70 characters validates, 71 does not"""
    ok = creditor.model_copy(update={"name": "A" * 70})
    assert validate_bill(make_bill(creditor=ok)).is_valid

    too_long = creditor.model_copy(update={"name": "A" * 71})
    result = validate_bill(make_bill(creditor=too_long))
    assert result["creditor.name"] == ["max_length"]
    assert result.categories("creditor.name") == [ErrorCategory.LENGTH]


def test_creditor_name_required_debtor_name_optional(make_bill, creditor, debtor):
    nameless = creditor.model_copy(update={"name": ""})
    assert validate_bill(make_bill(creditor=nameless))["creditor.name"] == ["required"]

    anonymous_debtor = debtor.model_copy(update={"name": ""})
    assert validate_bill(make_bill(debtor=anonymous_debtor)).is_valid


def test_qr_iban_with_creditor_reference_is_cross_field_error(make_bill):
    """Test QR-IBAN combined with a SCOR reference is rejected on the reference"""
    bill = make_bill(account=QR_IBAN, reference=CreditorReference(number=CREDITOR_REFERENCE))
    result = validate_bill(bill)
    assert list(result) == ["reference"]
    assert result["reference"] == ["qr_iban_requires_qr_reference"]
    assert result.categories("reference") == [ErrorCategory.CROSS_FIELD]


def test_ordinary_iban_with_qr_reference_is_cross_field_error(make_bill):
    bill = make_bill(reference=QRReference(number=QR_REFERENCE))
    result = validate_bill(bill)
    assert result["reference"] == ["qr_reference_requires_qr_iban"]
    assert result.categories("reference") == [ErrorCategory.CROSS_FIELD]


def test_qr_iban_without_reference_is_rejected(make_bill):
    """Test the QR-IBAN CH4431999123000889012 needs a QR reference"""
    result = validate_bill(make_bill(account=QR_IBAN))
    assert result["reference"] == ["qr_iban_requires_qr_reference"]


def test_account_checks(make_bill):
    assert validate_bill(make_bill(account="CH9300762011623852958"))["account"] == ["checksum"]
    assert validate_bill(make_bill(account="DE89370400440532013000"))["account"] == ["country", "format"]
    assert validate_bill(make_bill(account="CH93007620116238529"))["account"] == ["format"]
    result = validate_bill(make_bill(account="CH9300762011623852957"))
    assert "account" not in result


def test_reference_checksums(make_bill):
    bad_scor = make_bill(reference=CreditorReference(number="RF19539007547034"))
    assert validate_bill(bad_scor)["reference"] == ["checksum"]

    bad_qrr = make_bill(account=QR_IBAN, reference=QRReference(number="210000000003139471430009018"))
    result = validate_bill(bad_qrr)
    assert result["reference"] == ["checksum"]
    assert result.categories("reference") == [ErrorCategory.CHECKSUM]

    short_qrr = make_bill(account=QR_IBAN, reference=QRReference(number="1234"))
    assert validate_bill(short_qrr)["reference"] == ["format"]


def test_structured_address_rules(make_bill):
    creditor = Party(
        name="Muster AG",
        address=StructuredAddress(street="S" * 71, house_number="1", postal_code="", town="", country="XX"),
    )
    result = validate_bill(make_bill(creditor=creditor))
    assert result["creditor.address.street"] == ["max_length"]
    assert result["creditor.address.postal_code"] == ["required"]
    assert result["creditor.address.town"] == ["required"]
    assert result["creditor.address.country"] == ["country"]


def test_combined_address_rules(make_bill):
    debtor = Party(name="Pia", address=CombinedAddress(line1="Marktgasse 28", line2="", country=""))
    result = validate_bill(make_bill(debtor=debtor))
    assert result["debtor.address.line2"] == ["required"]
    assert result["debtor.address.country"] == ["required"]


def test_charset_is_rejected_not_transliterated(make_bill):
    """Test characters outside the Latin subset are reported"""
    info = AdditionalInformation(message="Rechnung → März")
    result = validate_bill(make_bill(additional_information=info))
    assert result["additional_information.message"] == ["charset"]
    assert result.categories("additional_information.message") == [ErrorCategory.STRUCTURAL]
    assert validate_bill(make_bill(additional_information=AdditionalInformation(message="Rechnung März"))).is_valid


def test_additional_information_joint_length(make_bill):
    info = AdditionalInformation(message="M" * 100, billing_information="//S1/10/" + "1" * 40)
    result = validate_bill(make_bill(additional_information=info))
    assert result["additional_information"] == ["max_length"]
    assert "additional_information.message" not in result


def test_swico_billing_information(make_bill):
    ok = AdditionalInformation(billing_information="//S1/10/10201409/11/190512/32/7.7")
    assert validate_bill(make_bill(additional_information=ok)).is_valid

    bad = AdditionalInformation(billing_information="//S1/11/191312")
    result = validate_bill(make_bill(additional_information=bad))
    assert result["additional_information.billing_information"] == ["swico_syntax"]


def test_alternative_procedures(make_bill):
    assert validate_bill(make_bill(alternative_procedures=("eBill/B/41010560425610173",))).is_valid

    result = validate_bill(make_bill(alternative_procedures=("a", "b", "c")))
    assert result["alternative_procedures"] == ["max_count"]

    result = validate_bill(make_bill(alternative_procedures=("x" * 101,)))
    assert result["alternative_procedures[0]"] == ["max_length"]


def test_all_violations_are_collected(make_bill, creditor):
    """Test the validator does not stop at the first problem"""
    bill = make_bill(
        account="CH9300762011623852958",
        creditor=creditor.model_copy(update={"name": "A" * 71}),
        amount=Decimal("-5"),
        currency=None,
        reference=CreditorReference(number="RF19539007547034"),
    )
    result = validate_bill(bill)
    assert set(result) == {"account", "creditor.name", "amount", "currency", "reference"}


def test_result_is_read_only_mapping(make_bill):
    result = validate_bill(make_bill(currency=None))
    rules = result["currency"]
    rules.append("tampered")
    assert result["currency"] == ["required"]
    with pytest.raises(TypeError):
        result["currency"] = []


def test_require_valid_bill(make_bill):
    """Test the encoding precondition accepts only a valid ValidationResult"""
    bill = make_bill()
    assert require_valid_bill(validate_bill(bill)) == bill

    with pytest.raises(EncodingPreconditionError):
        require_valid_bill(bill)

    with pytest.raises(EncodingPreconditionError) as exc:
        require_valid_bill(validate_bill(make_bill(currency=None)))
    assert exc.value.fields == ["currency"]
