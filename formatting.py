import math
import re
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from babel.numbers import format_currency, is_currency

NBSP = "\u00a0"

# CFA franc family: never printed with sub-unit decimals.
CFA_CURRENCIES = {"XOF", "XAF"}
CFA_LABEL = "FCFA"

# Every other ISO 4217 code prints French style, symbol after the amount.
MONEY_LOCALE = "fr_FR"
MONEY_PATTERN = f"#,##0{NBSP}\u00a4"
NARROW_NBSP = "\u202f"


def _round_whole(amount) -> int:
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _grouped(value: int) -> str:
    return f"{value:,}".replace(",", NBSP)


def _plain_number(amount) -> str:
    try:
        f = float(amount)
    except (TypeError, ValueError):
        return str(amount)
    if math.isfinite(f) and f.is_integer():
        return str(int(f))
    return str(f)


def format_money(amount, currency_code: str = "XOF") -> str:
    """
    Render an amount for print, always without decimals.

    - XOF/XAF: "1 500 000 FCFA" (non-breaking spaces)
    - ISO 4217 codes: "1 500 €", "1 500 $US", "1 500 SEK", ...
    - anything else: "<amount> <code>" instead of failing
    """
    code = (currency_code or "").strip().upper()
    try:
        whole = _round_whole(amount)
    except (InvalidOperation, ValueError, TypeError, OverflowError):
        return f"{_plain_number(amount)} {code}".strip()

    if code in CFA_CURRENCIES:
        return f"{_grouped(whole)}{NBSP}{CFA_LABEL}"

    if not is_currency(code):
        return f"{_plain_number(amount)} {code}".strip()
    text = format_currency(
        whole, code, format=MONEY_PATTERN, locale=MONEY_LOCALE, currency_digits=False,
    )
    # CLDR groups French amounts with a narrow no-break space
    return text.replace(NARROW_NBSP, NBSP)


def format_date(value) -> str:
    """ISO date (or datetime) -> DD/MM/YYYY. Anything unparseable is returned as-is."""
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.strftime("%d/%m/%Y")
    raw = str(value).strip()
    if not raw:
        return ""
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = datetime.strptime(raw[:10], "%Y-%m-%d")
        except ValueError:
            return raw
    return parsed.strftime("%d/%m/%Y")


def format_quantity(qty) -> str:
    return _plain_number(qty)


def safe_filename(name: str, fallback: str = "Facture") -> str:
    # strip characters not allowed on Windows/mac paths
    return re.sub(r'[\\/*?:"<>|]', "", (name or "")).strip() or fallback
