"""
Drawing primitives produced by the layout engine.

Coordinates are millimetres, origin at the top-left corner of the slip, y
growing downwards. For text, y is the baseline.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from qrslip.schemas.bill import Language


class _Primitive(BaseModel):
    model_config = ConfigDict(frozen=True)


class TextRun(_Primitive):
    kind: Literal["text"] = "text"
    text: str
    x: float
    y: float
    font_size: float
    bold: bool = False
    align: Literal["start", "end"] = "start"


class LineSegment(_Primitive):
    kind: Literal["line"] = "line"
    x1: float
    y1: float
    x2: float
    y2: float
    width_pt: float
    dashed: bool = False


class FilledRect(_Primitive):
    kind: Literal["rect"] = "rect"
    x: float
    y: float
    width: float
    height: float
    fill: Literal["black", "white"] = "black"


class QRCodeBlock(_Primitive):
    """The QR module matrix scaled into a size x size square."""

    kind: Literal["qr"] = "qr"
    x: float
    y: float
    size: float
    modules: tuple[tuple[bool, ...], ...]


class ScissorsMark(_Primitive):
    kind: Literal["scissors"] = "scissors"
    x: float
    y: float
    rotation: float = 0.0


Primitive = Annotated[
    Union[TextRun, LineSegment, FilledRect, QRCodeBlock, ScissorsMark],
    Field(discriminator="kind"),
]


class PaymentSlip(_Primitive):
    width: float
    height: float
    language: Language
    primitives: tuple[Primitive, ...]

    def of_kind(self, kind: type) -> list:
        return [p for p in self.primitives if isinstance(p, kind)]

    def texts(self) -> list[str]:
        return [p.text for p in self.of_kind(TextRun)]
