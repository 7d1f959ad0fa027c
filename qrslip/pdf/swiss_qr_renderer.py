"""
Swiss QR Bill Renderer

Paints a laid-out PaymentSlip with ReportLab. The slip is converted into a
ReportLab Drawing once; the PDF renderer draws it on a canvas (slip sized or
at the bottom of an A4 page), the SVG renderer serialises it with renderSVG.

References:
- SIX Implementation Guidelines v2.2
- SIX Style Guide QR-bill
"""

import logging
from io import BytesIO

from reportlab.graphics import renderSVG
from reportlab.graphics.shapes import Drawing, Group, Line, Rect, String
from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas as pdf_canvas

from qrslip.core.bill_validation import validate_bill
from qrslip.core.config import settings
from qrslip.core.errors import InvalidBillError
from qrslip.core.payload import encode_payload
from qrslip.pdf import dimensions as dims
from qrslip.pdf.layout import LayoutOptions, SlipLayoutEngine
from qrslip.pdf.primitives import (
    FilledRect,
    LineSegment,
    PaymentSlip,
    QRCodeBlock,
    ScissorsMark,
    TextRun,
)
from qrslip.schemas.bill import Bill

logger = logging.getLogger(__name__)


SCISSORS_FONT = ("ZapfDingbats", 10)
SCISSORS_GLYPH = '"'
SCISSORS_DASH_PATTERN = [2, 2]


# ============================================================================
# TEXT MEASUREMENT
# ============================================================================

class ReportLabTextMeasurer:
    """Font metrics of the standard PDF fonts, in millimetres."""

    def __init__(self, font_name: str | None = None, font_name_bold: str | None = None):
        self.font_name = font_name or settings.FONT_NAME
        self.font_name_bold = font_name_bold or settings.FONT_NAME_BOLD

    def width(self, text: str, font_size: float, bold: bool = False) -> float:
        font = self.font_name_bold if bold else self.font_name
        return pdfmetrics.stringWidth(text, font, font_size) / mm


# ============================================================================
# DRAWING
# ============================================================================

def _qr_group(block: QRCodeBlock, height: float) -> Group:
    """Dark modules as rectangles, consecutive modules of a row merged."""
    group = Group()
    count = len(block.modules)
    if not count:
        return group
    module = block.size / count
    for row_index, row in enumerate(block.modules):
        y = (height - block.y - (row_index + 1) * module) * mm
        col = 0
        while col < count:
            if not row[col]:
                col += 1
                continue
            start = col
            while col < count and row[col]:
                col += 1
            group.add(
                Rect(
                    (block.x + start * module) * mm,
                    y,
                    (col - start) * module * mm,
                    module * mm,
                    fillColor=colors.black,
                    strokeColor=None,
                )
            )
    return group


def build_drawing(slip: PaymentSlip, font_name: str | None = None, font_name_bold: str | None = None) -> Drawing:
    """
    Convert the slip primitives into a ReportLab Drawing.

    Slip coordinates are top-down millimetres; ReportLab uses bottom-up points.
    """
    font_name = font_name or settings.FONT_NAME
    font_name_bold = font_name_bold or settings.FONT_NAME_BOLD
    height = slip.height
    drawing = Drawing(slip.width * mm, height * mm)

    for item in slip.primitives:
        if isinstance(item, TextRun):
            drawing.add(
                String(
                    item.x * mm,
                    (height - item.y) * mm,
                    item.text,
                    fontName=font_name_bold if item.bold else font_name,
                    fontSize=item.font_size,
                    textAnchor=item.align,
                    fillColor=colors.black,
                )
            )
        elif isinstance(item, LineSegment):
            drawing.add(
                Line(
                    item.x1 * mm,
                    (height - item.y1) * mm,
                    item.x2 * mm,
                    (height - item.y2) * mm,
                    strokeColor=colors.black,
                    strokeWidth=item.width_pt,
                    strokeDashArray=SCISSORS_DASH_PATTERN if item.dashed else None,
                )
            )
        elif isinstance(item, FilledRect):
            fill = colors.black if item.fill == "black" else colors.white
            drawing.add(
                Rect(
                    item.x * mm,
                    (height - item.y - item.height) * mm,
                    item.width * mm,
                    item.height * mm,
                    fillColor=fill,
                    strokeColor=None,
                )
            )
        elif isinstance(item, QRCodeBlock):
            drawing.add(_qr_group(item, height))
        elif isinstance(item, ScissorsMark):
            font, size = SCISSORS_FONT
            # Glyph centred on the mark position
            glyph = String(0, -size / 3, SCISSORS_GLYPH, fontName=font, fontSize=size, textAnchor="middle")
            group = Group(glyph)
            group.translate(item.x * mm, (height - item.y) * mm)
            group.rotate(-item.rotation)
            drawing.add(group)

    return drawing


# ============================================================================
# RENDERERS
# ============================================================================

class PdfRenderer:
    """PDF output, either slip sized or at the bottom of an A4 page."""

    def __init__(self, full_page: bool | None = None):
        self.full_page = settings.FULL_PAGE if full_page is None else full_page

    def render(self, slip: PaymentSlip) -> bytes:
        drawing = build_drawing(slip)
        if self.full_page:
            pagesize = (dims.A4_WIDTH * mm, dims.A4_HEIGHT * mm)
        else:
            pagesize = (slip.width * mm, slip.height * mm)

        buffer = BytesIO()
        c = pdf_canvas.Canvas(buffer, pagesize=pagesize, invariant=1)
        # Draw QR bill at bottom of page
        drawing.drawOn(c, 0, 0)
        c.showPage()
        c.save()
        data = buffer.getvalue()
        buffer.close()
        logger.debug(f"Rendered PDF slip ({len(data)} bytes, full_page={self.full_page})")
        return data


class SvgRenderer:
    def render(self, slip: PaymentSlip) -> bytes:
        data = renderSVG.drawToString(build_drawing(slip)).encode("utf-8")
        logger.debug(f"Rendered SVG slip ({len(data)} bytes)")
        return data


class CaptureRenderer:
    """Serialises the primitive list as JSON; useful for tests and debugging."""

    def render(self, slip: PaymentSlip) -> bytes:
        return slip.model_dump_json().encode("utf-8")


# ============================================================================
# CONVENIENCE PIPELINE
# ============================================================================

def generate_qr_bill(
    bill: Bill,
    renderer=None,
    *,
    options: LayoutOptions | None = None,
    measurer=None,
) -> bytes:
    """
    Validate, encode, lay out and render a bill in one call.

    Args:
        bill: The bill to print
        renderer: Any object with render(slip) -> bytes (default: PdfRenderer)
        options: Layout options (separation lines, scissors, QR level)
        measurer: Text measurer (default: ReportLab font metrics)

    Raises:
        InvalidBillError: the bill did not validate; the result is attached
    """
    result = validate_bill(bill)
    if not result.is_valid:
        raise InvalidBillError(result)

    payload = encode_payload(result)
    engine = SlipLayoutEngine(measurer or ReportLabTextMeasurer(), options=options)
    slip = engine.build(result, payload)
    return (renderer or PdfRenderer()).render(slip)
