"""QR module matrix for the payment part, built with ReportLab's QR encoder."""

import logging

from reportlab.graphics.barcode import qr

from qrslip.core.config import settings
from qrslip.core.errors import QRCapacityError

logger = logging.getLogger(__name__)


ERROR_CORRECTION_LEVELS = ("L", "M", "Q", "H")


def generate_qr_matrix(
    payload: str,
    error_correction: str | None = None,
) -> tuple[tuple[bool, ...], ...]:
    """
    Encode the payload and return the module matrix (True = dark).

    The matrix has no quiet zone. Raises QRCapacityError when the payload
    does not fit any symbol version at the requested level.
    """
    level = (error_correction or settings.QR_ERROR_CORRECTION).upper()
    if level not in ERROR_CORRECTION_LEVELS:
        raise ValueError(f"Unknown QR error correction level '{error_correction}'")

    try:
        widget = qr.QrCodeWidget(payload, barLevel=level)
        widget.qr.make()
    except Exception as e:
        logger.error(f"QR encoding failed for a {len(payload)} character payload: {e}")
        raise QRCapacityError(f"Payload does not fit in a QR code at level {level}: {e}") from e

    count = widget.qr.getModuleCount()
    return tuple(
        tuple(bool(widget.qr.isDark(row, col)) for col in range(count))
        for row in range(count)
    )
