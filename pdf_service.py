# pdf_service.py
import io
import logging

from reportlab.pdfgen import canvas
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib import colors

from config import Config
from layout import PAGE_H, FilledRect, Line, Pager, PlacedImage, RenderedDocument, TextRun
from models import BusinessProfile, Invoice
from sections import (
    FOOTER_MAX_NOTE_LINES,
    LABELS,
    RenderContext,
    footer_note_lines,
    render_client_block,
    render_footer,
    render_items_table,
    render_notes_block,
    render_premium_header,
    render_signature,
    render_standard_header,
    render_totals,
)
from theme import resolve_capabilities, resolve_theme

logger = logging.getLogger(__name__)

# Section order per template. Signature and footer are pinned to the final page.
TEMPLATES = {
    "standard": (
        render_standard_header,
        render_client_block,
        render_items_table,
        render_notes_block,
        render_totals,
        render_footer,
    ),
    "premium": (
        render_premium_header,
        render_items_table,
        render_notes_block,
        render_totals,
        render_signature,
        render_footer,
    ),
}


def document_title(inv: Invoice) -> str:
    return f"Facture {inv.number}".strip() if (inv.number or "").strip() else "Facture"


def build_invoice_document(
    inv: Invoice,
    profile: BusinessProfile,
    *,
    repeat_table_header: bool | None = None,
    brand_name: str | None = None,
) -> RenderedDocument:
    """
    Lay out the invoice into pages of positioned primitives.

    Missing or broken logo/signature images are skipped. The invoice itself
    is not validated here: items and total are trusted as given.
    """
    caps = resolve_capabilities(profile)
    ctx = RenderContext(
        invoice=inv,
        profile=profile,
        theme=resolve_theme(profile),
        caps=caps,
        pager=Pager(),
        brand_name=brand_name or Config.BRAND_NAME,
        repeat_table_header=(
            Config.PDF_REPEAT_TABLE_HEADER if repeat_table_header is None else repeat_table_header
        ),
    )

    note_lines = footer_note_lines(inv)
    if len(note_lines) > FOOTER_MAX_NOTE_LINES:
        ctx.notes_overflow = note_lines

    for section in TEMPLATES[caps.template]:
        section(ctx)

    doc = ctx.pager.finish(title=document_title(inv))
    logger.info(
        "Laid out invoice %s: template=%s pages=%d",
        inv.number or "(no number)", caps.template, doc.page_count,
    )
    return doc


# -----------------------------
# PDF serialization
# -----------------------------
def _pt_y(y_mm: float) -> float:
    return (PAGE_H - y_mm) * mm


def _draw(pdf: canvas.Canvas, prim) -> None:
    if isinstance(prim, TextRun):
        pdf.setFont(prim.font, prim.size)
        pdf.setFillColor(colors.HexColor(prim.color))
        x, y = prim.x * mm, _pt_y(prim.y)
        if prim.align == "right":
            pdf.drawRightString(x, y, prim.text)
        elif prim.align == "center":
            pdf.drawCentredString(x, y, prim.text)
        else:
            pdf.drawString(x, y, prim.text)
    elif isinstance(prim, Line):
        pdf.setStrokeColor(colors.HexColor(prim.color))
        pdf.setLineWidth(prim.width)
        pdf.line(prim.x1 * mm, _pt_y(prim.y1), prim.x2 * mm, _pt_y(prim.y2))
    elif isinstance(prim, FilledRect):
        pdf.setFillColor(colors.HexColor(prim.color))
        x, y, w, h = prim.x * mm, _pt_y(prim.bottom), prim.w * mm, prim.h * mm
        if prim.radius:
            pdf.roundRect(x, y, w, h, prim.radius * mm, stroke=0, fill=1)
        else:
            pdf.rect(x, y, w, h, stroke=0, fill=1)
    elif isinstance(prim, PlacedImage):
        w, h = prim.w * mm, prim.h * mm
        if prim.rotation:
            pdf.saveState()
            pdf.translate((prim.x + prim.w / 2) * mm, _pt_y(prim.y + prim.h / 2))
            pdf.rotate(prim.rotation)
            pdf.drawImage(prim.image, -w / 2, -h / 2, width=w, height=h, mask="auto")
            pdf.restoreState()
        else:
            pdf.drawImage(prim.image, prim.x * mm, _pt_y(prim.y + prim.h), width=w, height=h, mask="auto")
    else:
        raise TypeError(f"Unknown draw primitive: {type(prim).__name__}")


def render_pdf_bytes(doc: RenderedDocument, author: str = "") -> bytes:
    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=A4)
    pdf.setTitle(doc.title or LABELS["doc_title"].title())
    if author:
        pdf.setAuthor(author)

    for page in doc.pages:
        for prim in page.items:
            _draw(pdf, prim)
        pdf.showPage()

    pdf.save()
    return buf.getvalue()


def render_invoice_pdf(inv: Invoice, profile: BusinessProfile, **kwargs) -> bytes:
    doc = build_invoice_document(inv, profile, **kwargs)
    return render_pdf_bytes(doc, author=profile.display_name)
