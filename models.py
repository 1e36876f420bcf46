from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import Optional

INVOICE_STATUSES = ("paid", "pending", "overdue")
PLAN_TIERS = ("starter", "pro", "business")


def _opt_str(value) -> Optional[str]:
    """JSON values may arrive as numbers; empty values become None."""
    if value is None or value == "":
        return None
    return str(value)


# -----------------------------
# Images
# -----------------------------
@dataclass(frozen=True)
class ImageRef:
    """
    Raw encoded raster bytes (PNG/JPEG) for a logo or a signature.
    Decoding happens at render time (see images.load_image).
    """
    data: bytes

    @classmethod
    def from_data_url(cls, value: str | None) -> Optional["ImageRef"]:
        """
        The web client stores uploads as data URLs
        ("data:image/png;base64,...."). Bad or empty values give None so
        the renderer simply omits the image.
        """
        raw = str(value or "").strip()
        if not raw:
            return None
        if raw.startswith("data:"):
            _, _, raw = raw.partition(",")
        try:
            data = base64.b64decode(raw, validate=False)
        except (binascii.Error, ValueError):
            return None
        return cls(data) if data else None


# -----------------------------
# Invoice
# -----------------------------
@dataclass(frozen=True)
class LineItem:
    description: str
    quantity: float
    price: float

    @property
    def line_total(self) -> float:
        return float(self.quantity) * float(self.price)


@dataclass(frozen=True)
class Invoice:
    """
    Invoice as handed over by the editing form. `total` is trusted as given:
    the renderer prints it verbatim and never recomputes it from the items.
    """
    number: str
    client_name: str
    date: str
    items: list[LineItem]
    total: float
    status: str = "pending"
    currency: str = "XOF"
    client_email: Optional[str] = None
    client_address: Optional[str] = None
    due_date: Optional[str] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None

    # Convenience totals (computed, not printed)
    def items_total(self) -> float:
        return sum(item.line_total for item in self.items)

    def total_matches_items(self, tolerance: float = 0.005) -> bool:
        return abs(float(self.total) - self.items_total()) <= tolerance

    @classmethod
    def from_dict(cls, raw: dict, default_currency: str = "XOF") -> "Invoice":
        status = str(raw.get("status") or "pending").strip().lower()
        if status not in INVOICE_STATUSES:
            raise ValueError(f"Unknown invoice status: {status!r}")

        raw_items = raw.get("items") or []
        if not isinstance(raw_items, list) or not all(isinstance(it, dict) for it in raw_items):
            raise ValueError("Invoice items must be a list of objects")
        items = [
            LineItem(
                description=str(it.get("description") or ""),
                quantity=float(it.get("quantity") or 0),
                price=float(it.get("price") or 0),
            )
            for it in raw_items
        ]
        return cls(
            number=str(raw.get("number") or "").strip(),
            client_name=str(raw.get("clientName") or "").strip(),
            client_email=_opt_str(raw.get("clientEmail")),
            client_address=_opt_str(raw.get("clientAddress")),
            date=str(raw.get("date") or ""),
            due_date=_opt_str(raw.get("dueDate")),
            items=items,
            total=float(raw.get("total") or 0),
            status=status,
            currency=str(raw.get("currency") or default_currency).strip().upper(),
            payment_method=_opt_str(raw.get("paymentMethod")),
            notes=_opt_str(raw.get("notes")),
        )


# -----------------------------
# Business profile
# -----------------------------
@dataclass(frozen=True)
class BusinessProfile:
    display_name: str
    email: str
    tier: str = "starter"
    phone: Optional[str] = None
    address: Optional[str] = None
    logo: Optional[ImageRef] = field(default=None, repr=False)
    signature: Optional[ImageRef] = field(default=None, repr=False)
    brand_color: Optional[str] = None
    # Already merged into Invoice.notes upstream; kept for completeness.
    default_note: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: dict) -> "BusinessProfile":
        tier = str(raw.get("plan") or raw.get("tier") or "starter").strip().lower()
        if tier not in PLAN_TIERS:
            raise ValueError(f"Unknown plan tier: {tier!r}")

        display_name = str(raw.get("businessName") or raw.get("name") or "").strip()
        return cls(
            display_name=display_name,
            email=str(raw.get("email") or "").strip(),
            tier=tier,
            phone=_opt_str(raw.get("phone")),
            address=_opt_str(raw.get("address")),
            logo=ImageRef.from_data_url(raw.get("logo")),
            signature=ImageRef.from_data_url(raw.get("signature")),
            brand_color=_opt_str(raw.get("brandColor")),
            default_note=_opt_str(raw.get("defaultNote")),
        )
