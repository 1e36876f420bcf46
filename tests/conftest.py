import io

import pytest
from PIL import Image

from models import BusinessProfile, ImageRef, Invoice, LineItem


def png_bytes(width: int = 200, height: int = 100, color: str = "red") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def make_invoice():
    def _make(items=None, total=None, **overrides):
        if items is None:
            items = [
                LineItem("Consultation", 2, 25000),
                LineItem("Frais de déplacement", 1, 5000),
            ]
        fields = dict(
            number="FAC-2026-001",
            client_name="Awa Diop",
            client_email="awa@example.com",
            client_address="Rue 10, Dakar",
            date="2026-10-01",
            due_date="2026-10-31",
            items=items,
            total=sum(i.line_total for i in items) if total is None else total,
            status="pending",
            currency="XOF",
            payment_method="Wave",
            notes="Merci pour votre confiance.",
        )
        fields.update(overrides)
        return Invoice(**fields)
    return _make


@pytest.fixture
def make_profile():
    def _make(**overrides):
        fields = dict(
            display_name="Atelier Ndiaye",
            email="contact@atelier.example",
            phone="+221 77 000 00 00",
            address="Avenue Cheikh Anta Diop\nDakar",
            tier="starter",
        )
        fields.update(overrides)
        return BusinessProfile(**fields)
    return _make


@pytest.fixture
def logo_ref():
    return ImageRef(png_bytes(300, 100, "navy"))


@pytest.fixture
def signature_ref():
    return ImageRef(png_bytes(160, 120, "blue"))
