"""
Swiss QR Bill slip layout.

Turns a validated bill and its payload into the ordered drawing primitives
of the receipt and the payment part. Positions and font sizes follow the
SIX style guide for the QR-bill; everything is measured in millimetres from
the top-left corner of the 210 x 105 mm slip.

Text is wrapped to its column with a TextMeasurer supplied by the renderer.
A section that grows past the bottom of its slot is reported as a whole with
RenderOverflowError; no primitives are returned in that case.
"""

import logging
from typing import Callable, Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field

from qrslip.core.bill_validation import require_valid_bill
from qrslip.core.billing_reference import (
    format_amount,
    format_creditor_reference,
    format_iban,
    format_qr_reference,
)
from qrslip.core.config import settings
from qrslip.core.errors import RenderOverflowError
from qrslip.pdf import dimensions as dims
from qrslip.pdf.labels import labels_for
from qrslip.pdf.primitives import (
    FilledRect,
    LineSegment,
    PaymentSlip,
    QRCodeBlock,
    ScissorsMark,
    TextRun,
)
from qrslip.pdf.qr_code import generate_qr_matrix
from qrslip.schemas.bill import (
    Bill,
    CreditorReference,
    Party,
    QRReference,
    StructuredAddress,
)

logger = logging.getLogger(__name__)


class TextMeasurer(Protocol):
    def width(self, text: str, font_size: float, bold: bool = False) -> float:
        """Width of a single line of text in millimetres."""
        ...


QRGenerator = Callable[[str, str], tuple[tuple[bool, ...], ...]]


class LayoutOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    draw_top_line: bool = Field(default_factory=lambda: settings.DRAW_TOP_LINE)
    draw_payment_line: bool = Field(default_factory=lambda: settings.DRAW_PAYMENT_LINE)
    draw_scissors: bool = Field(default_factory=lambda: settings.DRAW_SCISSORS)
    error_correction: str = Field(default_factory=lambda: settings.QR_ERROR_CORRECTION)
    parts: Literal["both", "receipt", "payment"] = Field(default_factory=lambda: settings.PARTS)


# ============================================================================
# TEXT HELPERS
# ============================================================================

def wrap_text(
    text: str,
    max_width: float,
    measurer: TextMeasurer,
    font_size: float,
    bold: bool = False,
) -> list[str]:
    """
    Greedy word wrap to max_width millimetres.

    Words wider than the column are broken between characters.
    """
    def fits(candidate: str) -> bool:
        return measurer.width(candidate, font_size, bold) <= max_width

    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if fits(candidate):
            current = candidate
            continue
        if current:
            lines.append(current)
            current = ""
        # At least one character per line, even when the column is narrower
        while word and not fits(word):
            cut = max(len(word) - 1, 1)
            while cut > 1 and not fits(word[:cut]):
                cut -= 1
            lines.append(word[:cut])
            word = word[cut:]
        current = word
    if current:
        lines.append(current)
    return lines


def address_lines(party: Party) -> list[str]:
    """Display lines of a party: name, street line, locality line."""
    address = party.address
    if isinstance(address, StructuredAddress):
        street = f"{address.street} {address.house_number}".strip()
        locality = f"{address.country}-{address.postal_code} {address.town}"
        lines = [party.name, street, locality]
    else:
        lines = [party.name, address.line1, address.line2]
    return [line for line in lines if line]


def reference_display(bill: Bill) -> str:
    reference = bill.reference
    if isinstance(reference, QRReference):
        return format_qr_reference(reference.number)
    if isinstance(reference, CreditorReference):
        return format_creditor_reference(reference.number)
    return ""


class _Cursor:
    """Text cursor of one column: each line moves down by its line spacing."""

    def __init__(self, x: float, y: float, fonts: dict, measurer: TextMeasurer, width: float = 0.0):
        self.x = x
        self.y = y
        self.fonts = fonts
        self.measurer = measurer
        self.width = width
        self.primitives: list = []

    def _font(self, style: str) -> tuple[float, float]:
        size, spacing = self.fonts[style]
        return size, spacing * dims.PT_TO_MM

    def line(self, text: str, style: str, bold: bool = False, x: float | None = None, align: str = "start") -> None:
        size, spacing = self._font(style)
        self.y += spacing
        if text:
            self.primitives.append(
                TextRun(
                    text=text,
                    x=self.x if x is None else x,
                    y=self.y,
                    font_size=size,
                    bold=bold,
                    align=align,
                )
            )

    def place(self, text: str, style: str, x: float, bold: bool = False) -> None:
        """Put text on the current baseline without moving the cursor."""
        self.primitives.append(
            TextRun(text=text, x=x, y=self.y, font_size=self.fonts[style][0], bold=bold)
        )

    def paragraph(self, text: str, style: str, bold: bool = False) -> None:
        size, _ = self._font(style)
        for line in wrap_text(text, self.width, self.measurer, size, bold):
            self.line(line, style, bold)

    def skip(self, style: str = "value") -> None:
        self.y += self._font(style)[1]


def blank_box(x: float, y: float, width: float, height: float) -> list[LineSegment]:
    """Corner marks of an empty field to be filled in by hand."""
    d = dims.CORNER_MARK_LENGTH
    w = dims.CORNER_MARK_WIDTH_PT
    corners = (
        (x, y, d, d),
        (x + width, y, -d, d),
        (x, y + height, d, -d),
        (x + width, y + height, -d, -d),
    )
    segments = []
    for cx, cy, dx, dy in corners:
        segments.append(LineSegment(x1=cx, y1=cy, x2=cx + dx, y2=cy, width_pt=w))
        segments.append(LineSegment(x1=cx, y1=cy, x2=cx, y2=cy + dy, width_pt=w))
    return segments


def swiss_cross(qr_x: float, qr_y: float) -> list[FilledRect]:
    """Swiss cross centred on the QR code, drawn on a 19.8 unit grid."""
    size = dims.SWISS_CROSS_SIZE
    scale = size / 19.8
    x = qr_x + (dims.QR_SIZE - size) / 2
    y = qr_y + (dims.QR_SIZE - size) / 2
    return [
        FilledRect(x=x, y=y, width=size, height=size, fill="white"),
        # Black square 0.7..19.1, leaving a white border
        FilledRect(
            x=x + 0.7 * scale,
            y=y + 0.7 * scale,
            width=18.4 * scale,
            height=18.4 * scale,
            fill="black",
        ),
        FilledRect(x=x + 8.3 * scale, y=y + 4.0 * scale, width=3.3 * scale, height=11 * scale, fill="white"),
        FilledRect(x=x + 4.4 * scale, y=y + 7.9 * scale, width=11 * scale, height=3.3 * scale, fill="white"),
    ]


# ============================================================================
# LAYOUT ENGINE
# ============================================================================

class SlipLayoutEngine:
    def __init__(
        self,
        measurer: TextMeasurer,
        qr_generator: QRGenerator = generate_qr_matrix,
        options: LayoutOptions | None = None,
    ):
        self.measurer = measurer
        self.qr_generator = qr_generator
        self.options = options or LayoutOptions()

    def build(self, validated, payload: str) -> PaymentSlip:
        bill = require_valid_bill(validated)
        labels = labels_for(bill.language)
        overflow: dict[str, float] = {}

        parts = self.options.parts
        primitives: list = []
        primitives.extend(self._separators())
        if parts in ("both", "receipt"):
            primitives.extend(self._receipt(bill, labels, overflow))
        if parts in ("both", "payment"):
            primitives.extend(self._payment_part(bill, labels, payload, overflow))

        if overflow:
            logger.warning(f"Slip layout overflow in {', '.join(overflow)}")
            raise RenderOverflowError(overflow)

        logger.debug(f"Slip layout built with {len(primitives)} primitives ({bill.language.value})")
        return PaymentSlip(
            width=dims.SLIP_WIDTH,
            height=dims.SLIP_HEIGHT,
            language=bill.language,
            primitives=tuple(primitives),
        )

    # ------------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------------

    def _separators(self) -> list:
        items: list = []
        width = dims.SEPARATOR_WIDTH_PT
        if self.options.draw_top_line:
            items.append(LineSegment(x1=0, y1=0, x2=dims.SLIP_WIDTH, y2=0, width_pt=width, dashed=True))
            if self.options.draw_scissors:
                items.append(ScissorsMark(x=dims.TOP_SCISSORS[0], y=dims.TOP_SCISSORS[1]))
        if self.options.draw_payment_line:
            items.append(
                LineSegment(
                    x1=dims.RECEIPT_WIDTH,
                    y1=0,
                    x2=dims.RECEIPT_WIDTH,
                    y2=dims.SLIP_HEIGHT,
                    width_pt=width,
                    dashed=True,
                )
            )
            if self.options.draw_scissors:
                items.append(
                    ScissorsMark(x=dims.PAYMENT_SCISSORS[0], y=dims.PAYMENT_SCISSORS[1], rotation=90)
                )
        return items

    def _information(
        self,
        bill: Bill,
        labels: dict,
        cursor: _Cursor,
        debtor_box: tuple[float, float],
        with_additional_information: bool,
    ) -> None:
        cursor.line(labels["payable_to"], "heading", bold=True)
        cursor.line(format_iban(bill.account), "value")
        for line in address_lines(bill.creditor):
            cursor.paragraph(line, "value")
        cursor.skip()

        if bill.reference.kind != "NON":
            cursor.line(labels["reference"], "heading", bold=True)
            cursor.line(reference_display(bill), "value")
            cursor.skip()

        info = bill.additional_information
        if with_additional_information and not info.is_empty:
            cursor.line(labels["additional_information"], "heading", bold=True)
            for text in (info.message, info.billing_information):
                if text:
                    cursor.paragraph(text, "value")
            cursor.skip()

        if bill.due_date is not None:
            cursor.line(labels["payable_by_date"], "heading", bold=True)
            cursor.line(bill.due_date.strftime("%d.%m.%Y"), "value")
            cursor.skip()

        if bill.debtor is not None:
            cursor.line(labels["payable_by"], "heading", bold=True)
            for line in address_lines(bill.debtor):
                cursor.paragraph(line, "value")
        else:
            cursor.line(labels["payable_by_extended"], "heading", bold=True)
            cursor.y += dims.BLANK_BOX_GAP
            width, height = debtor_box
            cursor.primitives.extend(blank_box(cursor.x, cursor.y, width, height))
            cursor.y += height

    def _amount(
        self,
        bill: Bill,
        labels: dict,
        cursor: _Cursor,
        amount_x: float,
        box_x: float,
        box: tuple[float, float],
    ) -> None:
        cursor.line(labels["currency"], "heading", bold=True)
        cursor.place(labels["amount"], "heading", x=amount_x, bold=True)
        heading_y = cursor.y
        cursor.line(bill.currency.value, "amount")
        if bill.amount is not None:
            cursor.place(format_amount(bill.amount), "amount", x=amount_x)
        else:
            width, height = box
            cursor.primitives.extend(blank_box(box_x, heading_y + dims.AMOUNT_BOX_GAP, width, height))

    def _receipt(self, bill: Bill, labels: dict, overflow: dict) -> list:
        fonts = dims.RECEIPT_FONTS
        measurer = self.measurer

        title = _Cursor(*dims.RECEIPT_TITLE, fonts, measurer)
        title.line(labels["receipt"], "title", bold=True)

        info = _Cursor(*dims.RECEIPT_INFO, fonts, measurer, width=dims.RECEIPT_INFO_WIDTH)
        self._information(bill, labels, info, dims.RECEIPT_DEBTOR_BOX, with_additional_information=False)
        if info.y > dims.RECEIPT_INFO_BOTTOM:
            overflow["receipt.information"] = info.y - dims.RECEIPT_INFO_BOTTOM

        amount = _Cursor(*dims.RECEIPT_AMOUNT, fonts, measurer)
        offset = dims.RECEIPT_AMOUNT_OFFSET if bill.amount is not None else dims.RECEIPT_AMOUNT_OFFSET_BLANK
        self._amount(
            bill,
            labels,
            amount,
            amount_x=dims.RECEIPT_AMOUNT[0] + offset,
            box_x=dims.RECEIPT_AMOUNT_BOX_X,
            box=dims.RECEIPT_AMOUNT_BOX,
        )

        acceptance = _Cursor(*dims.RECEIPT_ACCEPTANCE, fonts, measurer)
        acceptance.line(labels["acceptance_point"], "acceptance", bold=True, align="end")

        return title.primitives + info.primitives + amount.primitives + acceptance.primitives

    def _payment_part(self, bill: Bill, labels: dict, payload: str, overflow: dict) -> list:
        fonts = dims.PAYMENT_FONTS
        measurer = self.measurer

        title = _Cursor(*dims.PAYMENT_TITLE, fonts, measurer)
        title.line(labels["payment_part"], "title", bold=True)

        qr_x, qr_y = dims.QR_POSITION
        modules = self.qr_generator(payload, self.options.error_correction)
        qr_items = [QRCodeBlock(x=qr_x, y=qr_y, size=dims.QR_SIZE, modules=modules)]
        qr_items.extend(swiss_cross(qr_x, qr_y))

        amount = _Cursor(*dims.PAYMENT_AMOUNT, fonts, measurer)
        offset = dims.PAYMENT_AMOUNT_OFFSET if bill.amount is not None else dims.PAYMENT_AMOUNT_OFFSET_BLANK
        self._amount(
            bill,
            labels,
            amount,
            amount_x=dims.PAYMENT_AMOUNT[0] + offset,
            box_x=dims.PAYMENT_AMOUNT_BOX_X,
            box=dims.PAYMENT_AMOUNT_BOX,
        )

        info = _Cursor(*dims.PAYMENT_INFO, fonts, measurer, width=dims.PAYMENT_INFO_WIDTH)
        self._information(bill, labels, info, dims.PAYMENT_DEBTOR_BOX, with_additional_information=True)
        if info.y > dims.PAYMENT_INFO_BOTTOM:
            overflow["payment.information"] = info.y - dims.PAYMENT_INFO_BOTTOM

        further = self._alternative_procedures(bill, overflow)

        return title.primitives + qr_items + amount.primitives + info.primitives + further

    def _alternative_procedures(self, bill: Bill, overflow: dict) -> list:
        cursor = _Cursor(
            *dims.ALTERNATIVE_PROCEDURES,
            dims.PAYMENT_FONTS,
            self.measurer,
            width=dims.ALTERNATIVE_PROCEDURES_WIDTH,
        )
        size = dims.PAYMENT_FONTS["further_information"][0]
        for procedure in bill.alternative_procedures:
            name, sep, rest = procedure.partition(":")
            rest = rest.strip()
            if not sep:
                cursor.paragraph(procedure, "further_information")
                continue
            # Procedure name in bold, the remainder on the same baseline
            cursor.paragraph(name + sep, "further_information", bold=True)
            if not rest:
                continue
            last = cursor.primitives[-1].text
            rest_x = cursor.x + self.measurer.width(last + " ", size, True)
            available = cursor.x + cursor.width - rest_x
            if available < self.measurer.width(rest[0], size):
                cursor.paragraph(rest, "further_information")
                continue
            lines = wrap_text(rest, available, self.measurer, size)
            cursor.place(lines[0], "further_information", x=rest_x)
            for line in lines[1:]:
                cursor.line(line, "further_information")
        if cursor.y > dims.ALTERNATIVE_PROCEDURES_BOTTOM:
            overflow["payment.alternative_procedures"] = cursor.y - dims.ALTERNATIVE_PROCEDURES_BOTTOM
        return cursor.primitives
