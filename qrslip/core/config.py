from typing import Literal

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    QR_ERROR_CORRECTION: str = "M"
    PAYLOAD_VERSION: str = "0200"

    FONT_NAME: str = "Helvetica"
    FONT_NAME_BOLD: str = "Helvetica-Bold"

    # Perforation lines and scissors marks
    DRAW_TOP_LINE: bool = True
    DRAW_PAYMENT_LINE: bool = True
    DRAW_SCISSORS: bool = True

    FULL_PAGE: bool = False
    PARTS: Literal["both", "receipt", "payment"] = "both"

    class Config:
        env_file = ".env"
        env_prefix = "QRSLIP_"

settings = Settings()
