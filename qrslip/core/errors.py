from enum import Enum


class ErrorCategory(str, Enum):
    STRUCTURAL = "structural"
    LENGTH = "length"
    CHECKSUM = "checksum"
    CROSS_FIELD = "cross_field"


class QRSlipError(Exception):
    """Base class for every error raised by qrslip."""


class MalformedInputError(QRSlipError, ValueError):
    """Checksum input does not have the expected shape (length, characters).

    Kept apart from a checksum mismatch so callers can tell
    "not an IBAN" from "IBAN checksum failed".
    """


class EncodingPreconditionError(QRSlipError):
    """A payload or layout stage was called without a valid validation result."""

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message)
        self.fields = fields or []


class RenderOverflowError(QRSlipError):
    """Wrapped text does not fit the fixed height of its layout slot."""

    def __init__(self, slots: dict[str, float]):
        self.slots = slots
        details = ", ".join(f"{name} (+{excess:.1f} mm)" for name, excess in slots.items())
        super().__init__(f"Text does not fit its layout slot: {details}")


class QRCapacityError(QRSlipError):
    """The payload does not fit in any QR symbol at the requested level."""


class InvalidBillError(QRSlipError):
    def __init__(self, result):
        self.result = result
        fields = ", ".join(result.keys())
        super().__init__(f"Bill is not valid: {fields}")


class UnsupportedPayloadVersionError(QRSlipError, ValueError):
    pass


class PayloadFormatError(QRSlipError, ValueError):
    """A payload handed to the parser is not a Swiss Payments Code text."""


class SwicoSyntaxError(QRSlipError, ValueError):
    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("Invalid Swico S1 billing information: " + "; ".join(problems))
