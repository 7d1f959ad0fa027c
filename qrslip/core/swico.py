"""
Swico S1 syntax for the structured billing information of a QR bill.

The billing information is a sequence of tagged values following the
"//S1" prefix, e.g.

    //S1/10/10201409/11/190512/20/1400.000-53/30/106017086/31/180508/32/7.7/40/2:10;0:30

Free-text values (invoice and customer reference) escape "/" and "\\" with a
backslash.

References:
- Swico, Syntax definition of the bill information for QR bills (S1)
"""

import re
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from qrslip.core.errors import SwicoSyntaxError


S1_PREFIX = "//S1"
DATE_FMT = "%y%m%d"

# Tag -> SwicoS1 field, in the order required by the syntax
S1_TAGS = {
    "10": "invoice_reference",
    "11": "document_date",
    "20": "customer_reference",
    "30": "vat_number",
    "31": "vat_dates",
    "32": "vat_details",
    "33": "vat_import",
    "40": "conditions",
}

_NUMBER_RE = re.compile(r"\d+(\.\d+)?")


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("/", "\\/")


def _unescape(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value)


def _split_unescaped(body: str) -> list[str]:
    parts = []
    current = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\":
            if i + 1 >= len(body) or body[i + 1] not in "\\/":
                raise SwicoSyntaxError([f"invalid escape sequence at position {i}"])
            current.append(body[i:i + 2])
            i += 2
            continue
        if ch == "/":
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    parts.append("".join(current))
    return parts


def parse_s1(text: str) -> dict[str, str]:
    """Split an S1 string into {tag: unescaped value}."""
    if not text.startswith(S1_PREFIX):
        raise SwicoSyntaxError([f"billing information must start with {S1_PREFIX}"])
    body = text[len(S1_PREFIX):]
    if not body:
        return {}

    parts = _split_unescaped(body)
    if parts[0] != "" or len(parts) % 2 == 0:
        raise SwicoSyntaxError(["tags and values must alternate as /tag/value"])

    values: dict[str, str] = {}
    for tag, raw in zip(parts[1::2], parts[2::2]):
        if tag not in S1_TAGS:
            raise SwicoSyntaxError([f"unknown tag /{tag}/"])
        if tag in values:
            raise SwicoSyntaxError([f"duplicate tag /{tag}/"])
        values[tag] = _unescape(raw)

    order = list(S1_TAGS)
    positions = [order.index(tag) for tag in values]
    if positions != sorted(positions):
        raise SwicoSyntaxError(["tags must appear in ascending order"])
    return values


def _check_date(value: str) -> bool:
    if len(value) != 6 or not value.isdigit():
        return False
    try:
        datetime.strptime(value, DATE_FMT)
    except ValueError:
        return False
    return True


def _check_number_groups(value: str, pair_size: int | None) -> bool:
    for group in value.split(";"):
        items = group.split(":")
        if pair_size is not None and len(items) != pair_size:
            return False
        if len(items) > 2:
            return False
        if not all(_NUMBER_RE.fullmatch(item) for item in items):
            return False
    return True


def check_s1_syntax(text: str) -> list[str]:
    """Return the list of syntax problems of an S1 string (empty when valid)."""
    try:
        values = parse_s1(text)
    except SwicoSyntaxError as exc:
        return list(exc.problems)

    problems = []
    if "11" in values and not _check_date(values["11"]):
        problems.append("/11/ document date must be YYMMDD")
    if "31" in values:
        vat_dates = values["31"]
        chunks = [vat_dates[i:i + 6] for i in range(0, len(vat_dates), 6)]
        if len(vat_dates) not in (6, 12) or not all(_check_date(c) for c in chunks):
            problems.append("/31/ VAT date must be YYMMDD or YYMMDDYYMMDD")
    if "30" in values:
        vat_number = values["30"]
        if len(vat_number) != 9 or not vat_number.isdigit():
            problems.append("/30/ VAT number must have 9 digits")
    for tag in ("32", "33", "40"):
        if tag not in values:
            continue
        value = values[tag]
        if "," in value:
            problems.append(f"/{tag}/ decimals must use '.' as separator")
            continue
        pair_size = 2 if tag in ("33", "40") else None
        if not _check_number_groups(value, pair_size):
            problems.append(f"/{tag}/ must be a list of rate:value groups")
    if "40" in values and "," not in values["40"] and _check_number_groups(values["40"], 2):
        if not all(group.split(":")[1].isdigit() for group in values["40"].split(";")):
            problems.append("/40/ payment terms must be given in whole days")
    return problems


class SwicoS1(BaseModel):
    """Structured billing information, Swico syntax version S1."""

    model_config = ConfigDict(frozen=True)

    invoice_reference: str = ""
    document_date: Optional[date] = None
    customer_reference: str = ""
    vat_number: str = ""
    vat_dates: tuple[date, ...] = ()
    vat_details: str = ""
    vat_import: str = ""
    conditions: str = ""

    def _raw_values(self) -> dict[str, str]:
        return {
            "10": _escape(self.invoice_reference),
            "11": self.document_date.strftime(DATE_FMT) if self.document_date else "",
            "20": _escape(self.customer_reference),
            "30": self.vat_number,
            "31": "".join(d.strftime(DATE_FMT) for d in self.vat_dates),
            "32": self.vat_details,
            "33": self.vat_import,
            "40": self.conditions,
        }

    def to_string(self) -> str:
        parts = [f"/{tag}/{value}" for tag, value in self._raw_values().items() if value]
        if not parts:
            return ""
        text = S1_PREFIX + "".join(parts)
        problems = check_s1_syntax(text)
        if problems:
            raise SwicoSyntaxError(problems)
        return text

    @classmethod
    def parse(cls, text: str) -> "SwicoS1":
        problems = check_s1_syntax(text)
        if problems:
            raise SwicoSyntaxError(problems)
        values = parse_s1(text)

        def as_date(raw: str) -> date:
            return datetime.strptime(raw, DATE_FMT).date()

        vat_dates = values.get("31", "")
        return cls(
            invoice_reference=values.get("10", ""),
            document_date=as_date(values["11"]) if "11" in values else None,
            customer_reference=values.get("20", ""),
            vat_number=values.get("30", ""),
            vat_dates=tuple(as_date(vat_dates[i:i + 6]) for i in range(0, len(vat_dates), 6)),
            vat_details=values.get("32", ""),
            vat_import=values.get("33", ""),
            conditions=values.get("40", ""),
        )
