from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from models import BusinessProfile

logger = logging.getLogger(__name__)

DEFAULT_ACCENT = "#2563eb"
TEXT_PRIMARY = "#1e293b"
TEXT_SECONDARY = "#64748b"
TEXT_ON_ACCENT = "#ffffff"
BACKGROUND_TINT = "#f8fafc"
BORDER = "#e2e8f0"
MUTED = "#94a3b8"

# Status badge colors do not follow the accent.
STATUS_COLORS = {
    "paid": "#10b981",
    "overdue": "#ef4444",
    "pending": "#f59e0b",
}

_HEX_COLOR = re.compile(r"#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})")


@dataclass(frozen=True)
class Theme:
    accent: str
    text_primary: str = TEXT_PRIMARY
    text_secondary: str = TEXT_SECONDARY
    text_on_accent: str = TEXT_ON_ACCENT
    background: str = BACKGROUND_TINT
    border: str = BORDER
    muted: str = MUTED


@dataclass(frozen=True)
class Capabilities:
    """Everything the plan tier switches on or off, decided in one place."""
    template: str
    show_logo: bool
    show_signature: bool
    promo_footer: bool


def _brand_accent(raw: str | None) -> str | None:
    accent = (raw or "").strip()
    if not accent:
        return None
    if not _HEX_COLOR.fullmatch(accent):
        logger.debug("Ignoring malformed brand color %r", accent)
        return None
    if len(accent) == 4:
        # CSS shorthand #rgb -> #rrggbb
        accent = "#" + "".join(c * 2 for c in accent[1:])
    return accent.lower()


def resolve_theme(profile: BusinessProfile) -> Theme:
    accent = DEFAULT_ACCENT
    if profile.tier == "business":
        accent = _brand_accent(profile.brand_color) or DEFAULT_ACCENT
    return Theme(accent=accent)


def resolve_capabilities(profile: BusinessProfile) -> Capabilities:
    tier = profile.tier
    return Capabilities(
        template="premium" if tier == "business" else "standard",
        show_logo=tier != "starter",
        show_signature=tier == "business",
        promo_footer=tier == "starter",
    )
