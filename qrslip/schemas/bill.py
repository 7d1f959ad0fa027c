from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from qrslip.core.billing_reference import clean_iban, clean_reference


class Currency(str, Enum):
    CHF = "CHF"
    EUR = "EUR"


class Language(str, Enum):
    DE = "de"
    FR = "fr"
    IT = "it"
    EN = "en"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ----------------------------------------------------------------------------
# Addresses
# ----------------------------------------------------------------------------

class StructuredAddress(_Frozen):
    kind: Literal["S"] = "S"
    street: str = ""
    house_number: str = ""
    postal_code: str = ""
    town: str = ""
    country: str = ""

    @field_validator("country")
    @classmethod
    def _upper_country(cls, value: str) -> str:
        return value.strip().upper()


class CombinedAddress(_Frozen):
    kind: Literal["K"] = "K"
    line1: str = ""
    line2: str = ""
    country: str = ""

    @field_validator("country")
    @classmethod
    def _upper_country(cls, value: str) -> str:
        return value.strip().upper()


Address = Annotated[Union[StructuredAddress, CombinedAddress], Field(discriminator="kind")]


class Party(_Frozen):
    name: str = ""
    address: Address


# ----------------------------------------------------------------------------
# References
# ----------------------------------------------------------------------------

class NoReference(_Frozen):
    kind: Literal["NON"] = "NON"

    @property
    def number(self) -> str:
        return ""


class QRReference(_Frozen):
    kind: Literal["QRR"] = "QRR"
    number: str

    @field_validator("number", mode="before")
    @classmethod
    def _strip_spaces(cls, value):
        return clean_reference(value) if isinstance(value, str) else value


class CreditorReference(_Frozen):
    kind: Literal["SCOR"] = "SCOR"
    number: str

    @field_validator("number", mode="before")
    @classmethod
    def _strip_spaces(cls, value):
        return clean_reference(value) if isinstance(value, str) else value


Reference = Annotated[
    Union[NoReference, QRReference, CreditorReference],
    Field(discriminator="kind"),
]


def reference_from_string(value: str | None) -> NoReference | QRReference | CreditorReference:
    """Pick the reference variant from its textual form."""
    cleaned = clean_reference(value)
    if not cleaned:
        return NoReference()
    if cleaned.startswith("RF"):
        return CreditorReference(number=cleaned)
    return QRReference(number=cleaned)


# ----------------------------------------------------------------------------
# Bill
# ----------------------------------------------------------------------------

class AdditionalInformation(_Frozen):
    message: str = ""
    billing_information: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.message or self.billing_information)


class Bill(_Frozen):
    account: str = ""
    creditor: Optional[Party] = None
    debtor: Optional[Party] = None
    amount: Optional[Decimal] = None
    currency: Optional[Currency] = None
    reference: Reference = Field(default_factory=NoReference)
    additional_information: AdditionalInformation = Field(default_factory=AdditionalInformation)
    alternative_procedures: tuple[str, ...] = ()
    due_date: Optional[date] = None
    language: Optional[Language] = Language.EN

    @field_validator("account", mode="before")
    @classmethod
    def _clean_account(cls, value):
        return clean_iban(value) if isinstance(value, str) else value
