# pcr_app/core/config.py
import os
from typing import List
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class Settings(BaseModel):
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "PCR Report Service")
    API_V1_STR: str = os.getenv("API_V1_STR", "/api")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS (env takes priority)
    BACKEND_CORS_ORIGINS: List[str] = _split_csv(
        os.getenv(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173",
        ))

    # ---------- PDF defaults ----------
    PDF_PAGE_FORMAT: str = os.getenv("PDF_PAGE_FORMAT", "letter")
    PDF_ORIENTATION: str = os.getenv("PDF_ORIENTATION", "portrait")
    PDF_FONT_SIZE: float = float(os.getenv("PDF_FONT_SIZE", "8") or 8)
    PDF_MARGIN_MM: float = float(os.getenv("PDF_MARGIN_MM", "10") or 10)
    PDF_INCLUDE_IMAGES: bool = _flag("PDF_INCLUDE_IMAGES", "true")
    PDF_SHOW_PAGE_NUMBERS: bool = _flag("PDF_SHOW_PAGE_NUMBERS", "true")
    PDF_REPORT_TITLE: str = os.getenv("PDF_REPORT_TITLE", "Patient Care Report")
    PDF_LOGO_PATH: str = os.getenv("PDF_LOGO_PATH", "")

    # object URLs handed to the preview host
    PDF_OBJECT_URL_PREFIX: str = os.getenv("PDF_OBJECT_URL_PREFIX", "blob:pcr")

    # ---------- Print jobs ----------
    PRINT_JOB_LIMIT: int = int(os.getenv("PRINT_JOB_LIMIT", "100"))


settings = Settings()
