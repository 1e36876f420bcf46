"""End-to-end layout scenarios for invoice documents."""

import pytest

from formatting import format_money
from layout import PRINTABLE_BOTTOM, PRINTABLE_TOP
from models import ImageRef, LineItem
from pdf_service import build_invoice_document, document_title, render_invoice_pdf, render_pdf_bytes
from sections import STAMP_TOP
from theme import DEFAULT_ACCENT


def _tags(page):
    return {p.tag for p in page.items}


def _assert_within_printable_area(doc):
    for page in doc.pages:
        for prim in page.items:
            assert prim.top >= PRINTABLE_TOP - 1e-6, (page.number, prim)
            assert prim.bottom <= PRINTABLE_BOTTOM + 1e-6, (page.number, prim)


def _overflow_items(n=40):
    return [LineItem(f"Article {i}\nDétail de la prestation\nRéférence interne", 2, 1500) for i in range(n)]


def test_single_page_starter_invoice(make_invoice, make_profile, logo_ref):
    profile = make_profile(tier="starter", logo=None, brand_color="#ff0000")
    doc = build_invoice_document(make_invoice(), profile)

    assert doc.page_count == 1
    texts = doc.texts()
    assert "Créé gratuitement avec Kayit" in texts
    assert "Passez en Pro pour retirer ce message" in texts
    accents = {p.color for p in doc.pages[0].items if p.tag == "header:name"}
    assert accents == {DEFAULT_ACCENT}
    _assert_within_printable_area(doc)


def test_starter_never_prints_logo(make_invoice, make_profile, logo_ref):
    doc = build_invoice_document(make_invoice(), make_profile(tier="starter", logo=logo_ref))
    assert not doc.pages[0].tagged("header:logo")
    assert doc.pages[0].tagged("header:name")


def test_pro_prints_logo_without_promo(make_invoice, make_profile, logo_ref):
    doc = build_invoice_document(make_invoice(), make_profile(tier="pro", logo=logo_ref))
    logos = doc.pages[0].tagged("header:logo")
    assert len(logos) == 1
    assert logos[0].w == pytest.approx(35)
    assert logos[0].h == pytest.approx(35 / 3)
    assert not doc.pages[0].tagged("footer:promo")


def test_broken_logo_falls_back_to_name(make_invoice, make_profile):
    doc = build_invoice_document(make_invoice(), make_profile(tier="pro", logo=ImageRef(b"broken")))
    assert not doc.pages[0].tagged("header:logo")
    assert doc.pages[0].tagged("header:name")


def test_total_printed_verbatim_not_recomputed(make_invoice, make_profile):
    items = [LineItem("A", 1, 1000), LineItem("B", 2, 1000)]
    inv = make_invoice(items=items, total=12345)
    assert not inv.total_matches_items()

    doc = build_invoice_document(inv, make_profile())
    totals = [p.text for p in doc.pages[-1].items if p.tag in ("totals:total", "totals:subtotal")]
    assert totals == [format_money(12345, "XOF")] * 2
    assert format_money(3000, "XOF") not in totals


def test_upstream_total_invariant_holds_for_fixture(make_invoice):
    inv = make_invoice()
    assert inv.total == sum(i.quantity * i.price for i in inv.items)
    assert inv.total_matches_items()


@pytest.mark.parametrize("tier", ["starter", "business"])
def test_overflow_table_paginates(make_invoice, make_profile, tier):
    doc = build_invoice_document(make_invoice(items=_overflow_items()), make_profile(tier=tier))

    assert doc.page_count >= 2
    assert doc.pages_with("totals") == [doc.page_count]
    assert doc.pages_with("footer") == [doc.page_count]

    row_pages = {}
    for page in doc.pages:
        for prim in page.items:
            if prim.tag.startswith("table-row:"):
                row_pages.setdefault(prim.tag, set()).add(page.number)
    assert len(row_pages) == 40
    assert all(len(pages) == 1 for pages in row_pages.values())
    _assert_within_printable_area(doc)


def test_business_without_signature(make_invoice, make_profile):
    profile = make_profile(tier="business", brand_color="#0a7d4f", signature=None)
    doc = build_invoice_document(make_invoice(status="paid"), profile)

    assert doc.page_count == 1
    assert not doc.pages_with("signature")
    assert "LA DIRECTION" not in doc.texts()
    assert "PAYÉE" in doc.texts()
    band = [p for p in doc.pages[0].items if p.tag == "table-header" and hasattr(p, "color") and hasattr(p, "h")]
    assert band and band[0].color == "#0a7d4f"


def test_business_with_undecodable_signature(make_invoice, make_profile):
    profile = make_profile(tier="business", signature=ImageRef(b"not a png"))
    doc = build_invoice_document(make_invoice(), profile)
    assert not doc.pages_with("signature")


def test_signature_stamp_is_rotated_and_fitted(make_invoice, make_profile, signature_ref):
    doc = build_invoice_document(make_invoice(), make_profile(tier="business", signature=signature_ref))
    stamps = doc.pages[-1].tagged("signature:image")
    assert len(stamps) == 1
    stamp = stamps[0]
    assert stamp.rotation == -3
    assert stamp.w <= 40 and stamp.h <= 25
    assert stamp.w / stamp.h == pytest.approx(160 / 120)
    assert "LA DIRECTION" in doc.pages[-1].texts()


@pytest.mark.parametrize("n", range(1, 14))
def test_signature_never_collides_with_totals(make_invoice, make_profile, signature_ref, n):
    inv = make_invoice(items=_overflow_items(n))
    doc = build_invoice_document(inv, make_profile(tier="business", signature=signature_ref))

    last = doc.pages[-1]
    assert doc.pages_with("signature") == [doc.page_count]
    assert doc.pages_with("totals") == [doc.page_count]
    assert max(p.bottom for p in last.tagged("totals")) <= STAMP_TOP + 1e-6
    rows = [p for p in last.items if p.tag.startswith("table-row:")]
    assert all(p.bottom <= STAMP_TOP + 1e-6 for p in rows)
    _assert_within_printable_area(doc)


def test_premium_status_badges(make_invoice, make_profile):
    for status, label, color in [("paid", "PAYÉE", "#10b981"), ("overdue", "EN RETARD", "#ef4444"),
                                 ("pending", "EN ATTENTE", "#f59e0b")]:
        doc = build_invoice_document(make_invoice(status=status), make_profile(tier="business"))
        badge = doc.pages[0].tagged("header:status")
        assert [(b.text, b.color) for b in badge] == [(label, color)]


def test_blank_number_uses_placeholder(make_invoice, make_profile):
    doc = build_invoice_document(make_invoice(number=""), make_profile())
    assert [p.text for p in doc.pages[0].tagged("header:number")] == ["----"]
    assert doc.title == "Facture"


def test_long_notes_flow_into_body(make_invoice, make_profile):
    notes = "\n".join(f"Condition {i} : paiement à réception de la facture." for i in range(80))
    doc = build_invoice_document(make_invoice(notes=notes), make_profile())

    assert doc.page_count >= 2
    assert "Voir les notes ci-dessus." in doc.pages[-1].texts()
    assert "NOTES (suite)" in doc.texts()
    assert doc.pages_with("totals") == [doc.page_count]
    _assert_within_printable_area(doc)


def test_short_notes_stay_in_footer(make_invoice, make_profile):
    doc = build_invoice_document(make_invoice(notes="Merci !"), make_profile())
    assert [p.text for p in doc.pages[0].tagged("footer:notes")] == ["Merci !"]
    assert not doc.pages_with("notes")


def test_document_title(make_invoice):
    assert document_title(make_invoice(number="F-1")) == "Facture F-1"


def test_render_pdf_bytes(make_invoice, make_profile, logo_ref, signature_ref):
    profile = make_profile(tier="business", logo=logo_ref, signature=signature_ref, brand_color="#aa3300")
    data = render_invoice_pdf(make_invoice(items=_overflow_items()), profile)
    assert data.startswith(b"%PDF-")
    assert data.rstrip().endswith(b"%%EOF")


def test_render_is_independent_per_call(make_invoice, make_profile):
    inv = make_invoice()
    profile = make_profile()
    a = build_invoice_document(inv, profile)
    b = build_invoice_document(inv, profile)
    assert a is not b
    assert [p.items for p in a.pages] == [p.items for p in b.pages]
    assert render_pdf_bytes(a)[:5] == b"%PDF-"


LONG_CLIENT = "Société Nationale de Distribution d'Électricité et des Eaux du Sénégal SA"


@pytest.mark.parametrize("tier", ["pro", "business"])
def test_long_client_details_are_wrapped_not_dropped(make_invoice, make_profile, tier):
    inv = make_invoice(
        client_name=LONG_CLIENT,
        client_address="Immeuble Kébé\nRue 14 x 17\nDakar\nSénégal",
    )
    doc = build_invoice_document(inv, make_profile(tier=tier))
    page = doc.pages[0]

    names = page.tagged("client:name")
    assert len(names) > 1
    assert " ".join(p.text for p in names) == LONG_CLIENT

    texts = page.texts()
    for line in ["Immeuble Kébé", "Rue 14 x 17", "Dakar", "Sénégal", "awa@example.com"]:
        assert line in texts

    client_bottom = max(p.bottom for p in page.tagged("client"))
    table_top = min(p.top for p in page.tagged("table-header"))
    assert client_bottom < table_top
    _assert_within_printable_area(doc)


def test_long_business_name_wraps_in_heading(make_invoice, make_profile):
    name = "Établissements Commerciaux Réunis de la Petite Côte et du Sine-Saloum"
    doc = build_invoice_document(make_invoice(), make_profile(tier="starter", display_name=name))
    headings = doc.pages[0].tagged("header:name")
    assert len(headings) > 1
    assert " ".join(p.text for p in headings) == name
