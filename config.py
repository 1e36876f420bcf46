# config.py
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent


def _env_flag(name: str, default: str = "1") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # PDF export storage (downloads land here)
    EXPORTS_DIR = os.getenv("EXPORTS_DIR", (BASE_DIR / "exports").as_posix())

    # Branding
    BRAND_NAME = os.getenv("BRAND_NAME", "Kayit")

    # Currency used when an invoice carries none.
    # XOF/XAF are printed without decimals, space-grouped, with an FCFA label.
    DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "XOF")

    # Repeat the table column header band at the top of continuation pages.
    # Turn off to get bare rows on continuation pages.
    PDF_REPEAT_TABLE_HEADER = _env_flag("PDF_REPEAT_TABLE_HEADER", "1")
