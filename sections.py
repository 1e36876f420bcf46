"""
Section renderers for invoice documents.

Each renderer reads the invoice and profile from a RenderContext and emits
primitives through the Pager. Flowing sections move the cursor; pinned
sections (signature, footer) are placed at fixed positions on the current
page.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from reportlab.pdfbase.pdfmetrics import stringWidth

from formatting import format_date, format_money, format_quantity
from images import ImageOmitted, fit_image, load_image
from layout import (
    CONTENT_W,
    FOOTER_TOP,
    MARGIN,
    PAGE_W,
    PT_TO_MM,
    FilledRect,
    Line,
    Pager,
    PlacedImage,
    TextRun,
)
from models import BusinessProfile, Invoice
from theme import STATUS_COLORS, Capabilities, Theme

logger = logging.getLogger(__name__)

LABELS = {
    "doc_title": "FACTURE",
    "number": "FACTURE N°",
    "date": "Date : {}",
    "due": "Échéance : {}",
    "status": {"paid": "PAYÉE", "overdue": "EN RETARD", "pending": "EN ATTENTE"},
    "tagline": "Gestion de factures",
    "issued_by": "ÉMIS PAR",
    "billed_to": "FACTURÉ À",
    "col_desc": "DESCRIPTION",
    "col_qty": "QTÉ",
    "col_price": "PRIX UNIT.",
    "col_amount": "MONTANT",
    "col_total": "TOTAL",
    "subtotal": "Sous-total",
    "total_standard": "Total à payer",
    "total_premium": "TOTAL À PAYER :",
    "signature": "LA DIRECTION",
    "contact": "NOUS CONTACTER",
    "payment": "PAIEMENT",
    "payment_via": "Via : {}",
    "notes": "NOTES",
    "notes_cont": "NOTES (suite)",
    "notes_see_above": "Voir les notes ci-dessus.",
    "promo": "Créé gratuitement avec {}",
    "promo_upsell": "Passez en Pro pour retirer ce message",
}

NUMBER_PLACEHOLDER = "----"

# Item table
MIN_ROW_HEIGHT = 12.0
LINE_HEIGHT = 5.0
ROW_PADDING = 8.0
HEADER_BAND_H = 10.0
TABLE_FONT_SIZE = 9

# Images
LOGO_MAX_W = 35.0
LOGO_MAX_H = 25.0
STAMP_MAX_W = 40.0
STAMP_MAX_H = 25.0
STAMP_ROTATION = -3.0
STAMP_LABEL_Y = 216.0
STAMP_TOP = 212.0

# Totals
TOTALS_HEIGHT = 27.0

# Footer
FOOTER_TITLE_Y = FOOTER_TOP + 5
FOOTER_TEXT_Y = FOOTER_TOP + 10
FOOTER_LINE_H = 3.5
FOOTER_NOTE_LINE_H = 3.0
FOOTER_MAX_NOTE_LINES = 6
FOOTER_NOTES_X = MARGIN + 120
FOOTER_NOTES_W = PAGE_W - FOOTER_NOTES_X - MARGIN
PROMO_Y = 279.0
PROMO_UPSELL_Y = 284.0

NOTES_LINE_H = 4.5


@dataclass
class RenderContext:
    invoice: Invoice
    profile: BusinessProfile
    theme: Theme
    caps: Capabilities
    pager: Pager
    brand_name: str = "Kayit"
    repeat_table_header: bool = True
    # Set by the assembler when notes do not fit the footer column.
    notes_overflow: list[str] = field(default_factory=list)

    @property
    def premium(self) -> bool:
        return self.caps.template == "premium"


# -----------------------------
# Text helpers
# -----------------------------
def text_width(text: str, font: str, size: float) -> float:
    """Width of `text` in millimetres."""
    return stringWidth(str(text), font, size) * PT_TO_MM


def _split_long_token(token: str, font: str, size: float, max_width: float) -> list[str]:
    """Break a single long token (like an email) into width-safe chunks."""
    if text_width(token, font, size) <= max_width:
        return [token]
    chunks = []
    remaining = token
    while remaining:
        lo, hi = 1, len(remaining)
        fit = 1
        while lo <= hi:
            mid = (lo + hi) // 2
            if text_width(remaining[:mid], font, size) <= max_width:
                fit = mid
                lo = mid + 1
            else:
                hi = mid - 1
        chunks.append(remaining[:fit])
        remaining = remaining[fit:]
    return chunks


def wrap_text(text, font: str, size: float, max_width: float) -> list[str]:
    """
    Greedy word wrap. Every returned line fits `max_width` (mm), except a
    single character wider than the column, which is kept on its own line.
    Explicit newlines start a new line; blank lines are dropped.
    """
    lines: list[str] = []
    for paragraph in str(text or "").splitlines():
        words = []
        for w in paragraph.split():
            words.extend(_split_long_token(w, font, size, max_width))

        current = ""
        for w in words:
            test = current + (" " if current else "") + w
            if text_width(test, font, size) <= max_width:
                current = test
            else:
                if current:
                    lines.append(current)
                current = w
        if current:
            lines.append(current)
    return lines or [""]


def _fit_lines(text: str, font: str, size: float, max_width: float, min_size: float) -> tuple[list[str], float]:
    """Shrink the font down to `min_size`, then wrap whatever still does not fit."""
    s = size
    while s > min_size and text_width(text or "", font, s) > max_width:
        s -= 1
    return wrap_text(text, font, s, max_width), s


def _leading(size: float) -> float:
    return size * PT_TO_MM * 1.2


def _text(ctx: RenderContext, x, y, text, font="Helvetica", size=10, color=None, align="left", tag=""):
    ctx.pager.emit(TextRun(
        x=x, y=y, text=str(text), font=font, size=size,
        color=color or ctx.theme.text_primary, align=align, tag=tag,
    ))


def _lines(ctx: RenderContext, x, y, lines, step, font="Helvetica", size=9, color=None, tag=""):
    for i, ln in enumerate(lines):
        _text(ctx, x, y + i * step, ln, font, size, color, tag=tag)


def _load_fitted(ref, max_w, max_h):
    img = load_image(ref)
    iw, ih = img.getSize()
    w, h = fit_image(iw, ih, max_w, max_h)
    return img, w, h


def _status_badge(ctx: RenderContext, x, y, tag="header"):
    status = ctx.invoice.status
    label = LABELS["status"].get(status)
    if not label:
        return
    _text(ctx, x, y, label, "Helvetica-Bold", 10, STATUS_COLORS[status], align="right", tag=f"{tag}:status")


def _sender_contact_lines(profile: BusinessProfile) -> list[str]:
    out = []
    for part in [profile.address, profile.phone, profile.email]:
        for ln in (part or "").splitlines():
            if ln.strip():
                out.append(ln.strip())
    return out


def _client_lines(invoice: Invoice) -> list[str]:
    out = []
    for part in [invoice.client_address, invoice.client_email]:
        for ln in (part or "").splitlines():
            if ln.strip():
                out.append(ln.strip())
    return out


# -----------------------------
# Identity & metadata header
# -----------------------------
def render_standard_header(ctx: RenderContext) -> None:
    pager = ctx.pager
    inv = ctx.invoice
    y0 = pager.y
    right_x = PAGE_W - MARGIN
    name = ctx.profile.display_name

    drew_logo = False
    height = 40.0
    if ctx.caps.show_logo and ctx.profile.logo is not None:
        try:
            img, w, h = _load_fitted(ctx.profile.logo, LOGO_MAX_W, LOGO_MAX_H)
            pager.emit(PlacedImage(MARGIN, y0, w, h, img, tag="header:logo"))
            drew_logo = True
        except ImageOmitted as e:
            logger.info("Logo omitted for invoice %s: %s", inv.number or "?", e)

    if not drew_logo:
        heading, size = _fit_lines(name, "Helvetica-Bold", 26, CONTENT_W * 0.55, 14)
        _lines(ctx, MARGIN, y0 + 10, heading, _leading(size), "Helvetica-Bold", size, ctx.theme.accent,
               tag="header:name")
        tagline_y = y0 + 16 + (len(heading) - 1) * _leading(size)
        _text(ctx, MARGIN, tagline_y, LABELS["tagline"], "Helvetica", 10, ctx.theme.text_secondary, tag="header")
        height = max(height, tagline_y - y0 + 24)

    _text(ctx, right_x, y0 + 5, LABELS["number"], "Helvetica-Bold", 9, ctx.theme.text_secondary, "right", tag="header")
    _text(ctx, right_x, y0 + 11, inv.number or NUMBER_PLACEHOLDER, "Helvetica-Bold", 14, align="right", tag="header:number")
    _text(ctx, right_x, y0 + 17, LABELS["date"].format(format_date(inv.date)), "Helvetica", 10,
          ctx.theme.text_secondary, "right", tag="header")

    status_y = y0 + 23
    if inv.due_date:
        _text(ctx, right_x, status_y, LABELS["due"].format(format_date(inv.due_date)), "Helvetica", 10,
              ctx.theme.text_secondary, "right", tag="header")
        status_y += 6
    _status_badge(ctx, right_x, status_y)

    pager.advance(height)


def render_premium_header(ctx: RenderContext) -> None:
    """Two-column header: sender identity on the left, invoice data and client on the right."""
    pager = ctx.pager
    inv = ctx.invoice
    profile = ctx.profile
    y0 = pager.y
    left_y = y0 + 5

    if ctx.caps.show_logo and profile.logo is not None:
        try:
            img, w, h = _load_fitted(profile.logo, LOGO_MAX_W, LOGO_MAX_H)
            pager.emit(PlacedImage(MARGIN, left_y, w, h, img, tag="header:logo"))
            left_y += h + 8
        except ImageOmitted as e:
            logger.info("Logo omitted for invoice %s: %s", inv.number or "?", e)

    left_w = 80.0
    names, size = _fit_lines(profile.display_name, "Helvetica-Bold", 16, left_w, 10)
    _lines(ctx, MARGIN, left_y + 5, names, _leading(size), "Helvetica-Bold", size, ctx.theme.accent,
           tag="header:name")
    left_y += 12 + (len(names) - 1) * _leading(size)

    _text(ctx, MARGIN, left_y, f"{LABELS['issued_by']} :", "Helvetica-Bold", 8, tag="header")
    sender = []
    for ln in _sender_contact_lines(profile):
        sender.extend(wrap_text(ln, "Helvetica", 9, left_w))
    _lines(ctx, MARGIN, left_y + 5, sender, 4, "Helvetica", 9, ctx.theme.text_secondary, tag="header")
    final_left = left_y + 5 + len(sender) * 4

    right_x = PAGE_W - MARGIN
    right_y = y0 + 15
    _text(ctx, right_x, right_y, LABELS["doc_title"], "Helvetica-Bold", 32, ctx.theme.accent, "right", tag="header")
    _text(ctx, right_x, right_y + 10, f"#{inv.number or NUMBER_PLACEHOLDER}", "Helvetica-Bold", 10,
          align="right", tag="header:number")
    _text(ctx, right_x, right_y + 15, LABELS["date"].format(format_date(inv.date)), "Helvetica", 9,
          ctx.theme.text_secondary, "right", tag="header")

    status_y = right_y + 21
    if inv.due_date:
        _text(ctx, right_x, status_y, LABELS["due"].format(format_date(inv.due_date)), "Helvetica", 9,
              ctx.theme.text_secondary, "right", tag="header")
        status_y += 6
    _status_badge(ctx, right_x, status_y)

    final_right = render_client_block(ctx, right_y + 45)
    target = max(final_left, final_right) + 20
    pager.advance(target - pager.y)


# -----------------------------
# Client block
# -----------------------------
def render_client_block(ctx: RenderContext, y: float | None = None) -> float | None:
    """
    Premium: client column on the right half, starting at `y`; returns the
    bottom of the column.
    Standard: divider line, then an "issued by / billed to" strip that moves
    the cursor.
    """
    inv = ctx.invoice
    if ctx.premium:
        x = PAGE_W / 2 + 20
        col_w = PAGE_W - MARGIN - x
        _text(ctx, x, y, f"{LABELS['billed_to']} :", "Helvetica-Bold", 8, tag="client")
        names, size = _fit_lines(inv.client_name, "Helvetica-Bold", 11, col_w, 8)
        _lines(ctx, x, y + 6, names, _leading(size), "Helvetica-Bold", size, tag="client:name")
        y += (len(names) - 1) * _leading(size)
        lines = []
        for ln in _client_lines(inv):
            lines.extend(wrap_text(ln, "Helvetica", 9, col_w))
        _lines(ctx, x, y + 11, lines, 4, "Helvetica", 9, ctx.theme.text_secondary, tag="client")
        return y + 11 + len(lines) * 4

    pager = ctx.pager
    profile = ctx.profile
    pager.emit(Line(MARGIN, pager.y, PAGE_W - MARGIN, pager.y, ctx.theme.border, 0.3, tag="client:divider"))
    pager.advance(15)

    left_x = MARGIN
    left_w = PAGE_W / 2 - MARGIN - 5
    right_x = PAGE_W / 2 + 10
    right_w = PAGE_W - MARGIN - right_x
    y = pager.y
    _text(ctx, left_x, y, LABELS["issued_by"], "Helvetica-Bold", 8, ctx.theme.muted, tag="client")
    _text(ctx, right_x, y, LABELS["billed_to"], "Helvetica-Bold", 8, ctx.theme.muted, tag="client")
    y += 6

    sender_names, s1 = _fit_lines(profile.display_name, "Helvetica-Bold", 11, left_w, 8)
    _lines(ctx, left_x, y, sender_names, _leading(s1), "Helvetica-Bold", s1, tag="client")
    sender_y = y + 6 + (len(sender_names) - 1) * _leading(s1)
    sender = []
    for ln in [profile.email, profile.phone]:
        if (ln or "").strip():
            sender.extend(wrap_text(ln.strip(), "Helvetica", 10, left_w))
    _lines(ctx, left_x, sender_y, sender, 5, "Helvetica", 10, ctx.theme.text_secondary, tag="client")

    client_names, s2 = _fit_lines(inv.client_name, "Helvetica-Bold", 11, right_w, 8)
    _lines(ctx, right_x, y, client_names, _leading(s2), "Helvetica-Bold", s2, tag="client:name")
    client_y = y + 6 + (len(client_names) - 1) * _leading(s2)
    client = []
    for ln in [inv.client_email] + (inv.client_address or "").splitlines():
        if (ln or "").strip():
            client.extend(wrap_text(ln.strip(), "Helvetica", 10, right_w))
    _lines(ctx, right_x, client_y, client, 5, "Helvetica", 10, ctx.theme.text_secondary, tag="client")

    block_h = 6 + max(sender_y + len(sender) * 5, client_y + len(client) * 5) - y
    pager.advance(max(40.0, block_h + 10))


# -----------------------------
# Itemized table
# -----------------------------
@dataclass(frozen=True)
class TableColumns:
    desc_x: float
    desc_w: float
    qty_x: float
    qty_align: str
    price_x: float
    total_x: float
    total_label: str


def table_columns(premium: bool) -> TableColumns:
    """Column anchors as fixed fractions of the printable width."""
    if premium:
        return TableColumns(
            desc_x=MARGIN + 5,
            desc_w=CONTENT_W * 0.40,
            price_x=MARGIN + CONTENT_W * 0.62,
            qty_x=MARGIN + CONTENT_W * 0.76,
            qty_align="center",
            total_x=PAGE_W - MARGIN - 5,
            total_label=LABELS["col_total"],
        )
    return TableColumns(
        desc_x=MARGIN + 5,
        desc_w=CONTENT_W * 0.42,
        qty_x=MARGIN + CONTENT_W * 0.50,
        qty_align="center",
        price_x=MARGIN + CONTENT_W * 0.70,
        total_x=PAGE_W - MARGIN - 5,
        total_label=LABELS["col_amount"],
    )


def row_height(line_count: int) -> float:
    return max(MIN_ROW_HEIGHT, line_count * LINE_HEIGHT + ROW_PADDING)


def max_lines_per_row(pager: Pager) -> int:
    usable = pager.flow_bottom - pager.top - HEADER_BAND_H - ROW_PADDING
    return max(1, int(math.floor(usable / LINE_HEIGHT)))


def _table_header_band(ctx: RenderContext, cols: TableColumns) -> None:
    pager = ctx.pager
    y = pager.y
    if ctx.premium:
        band_color, text_color, size = ctx.theme.accent, ctx.theme.text_on_accent, 9
    else:
        band_color, text_color, size = ctx.theme.background, ctx.theme.muted, 8
    pager.emit(FilledRect(MARGIN, y, CONTENT_W, HEADER_BAND_H, band_color, tag="table-header"))
    ty = y + 6.5
    font = "Helvetica-Bold"
    _text(ctx, cols.desc_x, ty, LABELS["col_desc"], font, size, text_color, tag="table-header")
    _text(ctx, cols.qty_x, ty, LABELS["col_qty"], font, size, text_color, cols.qty_align, tag="table-header")
    _text(ctx, cols.price_x, ty, LABELS["col_price"], font, size, text_color, "right", tag="table-header")
    _text(ctx, cols.total_x, ty, cols.total_label, font, size, text_color, "right", tag="table-header")
    pager.advance(HEADER_BAND_H)


def _table_row(ctx: RenderContext, cols: TableColumns, index: int, desc_lines: list[str], item=None) -> None:
    pager = ctx.pager
    currency = ctx.invoice.currency
    tag = f"table-row:{index}"
    top = pager.y
    base = top + 6

    desc_font = "Helvetica-Bold" if ctx.premium else "Helvetica"
    _lines(ctx, cols.desc_x, base, desc_lines, LINE_HEIGHT, desc_font, TABLE_FONT_SIZE, ctx.theme.text_primary, tag=tag)

    if item is not None:
        muted = ctx.theme.text_secondary
        _text(ctx, cols.qty_x, base, format_quantity(item.quantity), "Helvetica", TABLE_FONT_SIZE, muted,
              cols.qty_align, tag=tag)
        _text(ctx, cols.price_x, base, format_money(item.price, currency), "Helvetica", TABLE_FONT_SIZE, muted,
              "right", tag=tag)
        _text(ctx, cols.total_x, base, format_money(item.line_total, currency), "Helvetica-Bold", TABLE_FONT_SIZE,
              align="right", tag=tag)

    pager.advance(row_height(len(desc_lines)))
    pager.emit(Line(MARGIN, pager.y, PAGE_W - MARGIN, pager.y, ctx.theme.border, 0.5, tag=tag))


def render_items_table(ctx: RenderContext) -> None:
    """
    One row per line item. Each row is measured first and moved to a new
    page as a whole when it does not fit. Descriptions too long for a single
    page continue in description-only rows.
    """
    pager = ctx.pager
    cols = table_columns(ctx.premium)
    desc_font = "Helvetica-Bold" if ctx.premium else "Helvetica"
    limit = max_lines_per_row(pager)

    rows = []
    for item in ctx.invoice.items:
        lines = wrap_text(item.description, desc_font, TABLE_FONT_SIZE, cols.desc_w)
        chunks = [lines[i:i + limit] for i in range(0, len(lines), limit)]
        rows.append((item, chunks))

    first_h = row_height(len(rows[0][1][0])) if rows else MIN_ROW_HEIGHT
    pager.ensure_space(HEADER_BAND_H + first_h)
    _table_header_band(ctx, cols)

    def repeat_header(p: Pager) -> None:
        _table_header_band(ctx, cols)

    if ctx.repeat_table_header:
        pager.on_page_break(repeat_header)
    try:
        for index, (item, chunks) in enumerate(rows):
            for n, chunk in enumerate(chunks):
                pager.ensure_space(row_height(len(chunk)))
                _table_row(ctx, cols, index, chunk, item if n == 0 else None)
    finally:
        pager.remove_page_break_listener(repeat_header)


# -----------------------------
# Notes continuation (notes too long for the footer column)
# -----------------------------
def footer_note_lines(invoice: Invoice) -> list[str]:
    if not (invoice.notes or "").strip():
        return []
    return wrap_text(invoice.notes, "Helvetica", 7, FOOTER_NOTES_W)


def render_notes_block(ctx: RenderContext) -> None:
    if not ctx.notes_overflow:
        return
    pager = ctx.pager
    lines = []
    for ln in (ctx.invoice.notes or "").splitlines():
        if ln.strip():
            lines.extend(wrap_text(ln.strip(), "Helvetica", 9, CONTENT_W))

    pager.advance(6)
    pager.ensure_space(6 + NOTES_LINE_H)
    _text(ctx, MARGIN, pager.y + 4, LABELS["notes"], "Helvetica-Bold", 9, tag="notes")
    pager.advance(6)
    for ln in lines:
        if pager.ensure_space(NOTES_LINE_H):
            _text(ctx, MARGIN, pager.y + 4, LABELS["notes_cont"], "Helvetica-Bold", 9, tag="notes")
            pager.advance(6)
        _text(ctx, MARGIN, pager.y + 3.5, ln, "Helvetica", 9, ctx.theme.text_secondary, tag="notes")
        pager.advance(NOTES_LINE_H)


# -----------------------------
# Totals
# -----------------------------
def stamp_reserve(ctx: RenderContext) -> float:
    """Space the pinned stamp needs below the totals on the final page."""
    if ctx.caps.show_signature and ctx.profile.signature is not None:
        return ctx.pager.flow_bottom - STAMP_TOP
    return 0.0


def render_totals(ctx: RenderContext) -> None:
    """Subtotal and total both print Invoice.total verbatim."""
    pager = ctx.pager
    inv = ctx.invoice
    amount = format_money(inv.total, inv.currency)
    right_x = PAGE_W - MARGIN - 5

    pager.ensure_space(TOTALS_HEIGHT + stamp_reserve(ctx))
    pager.advance(5)

    if ctx.premium:
        sum_w = 90.0
        sum_x = PAGE_W - MARGIN - sum_w
        y = pager.y
        _text(ctx, sum_x, y + 5, f"{LABELS['subtotal']} :", "Helvetica", 9, ctx.theme.text_secondary, tag="totals")
        _text(ctx, right_x, y + 5, amount, "Helvetica-Bold", 9, align="right", tag="totals:subtotal")
        pager.advance(10)
        y = pager.y
        pager.emit(FilledRect(sum_x - 5, y, sum_w + 5, 12, ctx.theme.accent, tag="totals"))
        _text(ctx, sum_x, y + 8, LABELS["total_premium"], "Helvetica-Bold", 10, ctx.theme.text_on_accent, tag="totals")
        _text(ctx, right_x, y + 8, amount, "Helvetica-Bold", 12, ctx.theme.text_on_accent, "right", tag="totals:total")
        pager.advance(12)
        return

    sum_w = 100.0
    sum_x = PAGE_W - MARGIN - sum_w
    y = pager.y
    _text(ctx, sum_x + 5, y + 5, LABELS["subtotal"], "Helvetica", 10, ctx.theme.text_secondary, tag="totals")
    _text(ctx, right_x, y + 5, amount, "Helvetica-Bold", 10, align="right", tag="totals:subtotal")
    pager.advance(8)
    y = pager.y
    pager.emit(FilledRect(sum_x, y, sum_w, 14, ctx.theme.background, radius=2, tag="totals"))
    pager.emit(Line(sum_x, y, sum_x + sum_w, y, ctx.theme.border, 0.8, tag="totals"))
    pager.emit(Line(sum_x, y + 14, sum_x + sum_w, y + 14, ctx.theme.border, 0.8, tag="totals"))
    _text(ctx, sum_x + 5, y + 10, LABELS["total_standard"], "Helvetica-Bold", 10, tag="totals")
    _text(ctx, right_x, y + 10, amount, "Helvetica-Bold", 12, ctx.theme.accent, "right", tag="totals:total")
    pager.advance(14)


# -----------------------------
# Signature / stamp (premium only)
# -----------------------------
def render_signature(ctx: RenderContext) -> None:
    """
    Pinned above the footer of the current page, independent of the cursor.
    render_totals() already reserved the zone on this page.
    """
    if not (ctx.caps.show_signature and ctx.profile.signature is not None):
        return
    try:
        img, w, h = _load_fitted(ctx.profile.signature, STAMP_MAX_W, STAMP_MAX_H)
    except ImageOmitted as e:
        logger.info("Signature omitted for invoice %s: %s", ctx.invoice.number or "?", e)
        return

    center_x = PAGE_W - MARGIN - STAMP_MAX_W / 2
    _text(ctx, center_x, STAMP_LABEL_Y, LABELS["signature"], "Helvetica-Bold", 8, align="center", tag="signature")
    ctx.pager.emit(PlacedImage(center_x - w / 2, STAMP_LABEL_Y + 2, w, h, img, rotation=STAMP_ROTATION,
                               tag="signature:image"))


# -----------------------------
# Footer
# -----------------------------
def render_footer(ctx: RenderContext) -> None:
    """Three columns pinned at the bottom of the current page: contact, payment, notes."""
    pager = ctx.pager
    inv = ctx.invoice
    profile = ctx.profile
    theme = ctx.theme

    rule_color = theme.accent if ctx.premium else theme.border
    pager.emit(Line(MARGIN, FOOTER_TOP, PAGE_W - MARGIN, FOOTER_TOP, rule_color, 0.5, tag="footer"))

    col1_x = MARGIN
    col2_x = MARGIN + 60
    col_w = 55.0

    _text(ctx, col1_x, FOOTER_TITLE_Y, LABELS["contact"], "Helvetica-Bold", 8, tag="footer")
    contact = []
    for ln in [profile.email, profile.phone]:
        if (ln or "").strip():
            contact.extend(wrap_text(ln.strip(), "Helvetica", 7, col_w))
    _lines(ctx, col1_x, FOOTER_TEXT_Y, contact[:4], FOOTER_LINE_H, "Helvetica", 7, theme.text_secondary, tag="footer")

    _text(ctx, col2_x, FOOTER_TITLE_Y, LABELS["payment"], "Helvetica-Bold", 8, tag="footer")
    payment = []
    if (inv.payment_method or "").strip():
        payment.extend(wrap_text(LABELS["payment_via"].format(inv.payment_method.strip()), "Helvetica", 7, col_w))
    if inv.due_date:
        payment.append(LABELS["due"].format(format_date(inv.due_date)))
    _lines(ctx, col2_x, FOOTER_TEXT_Y, payment[:4], FOOTER_LINE_H, "Helvetica", 7, theme.text_secondary, tag="footer")

    _text(ctx, FOOTER_NOTES_X, FOOTER_TITLE_Y, LABELS["notes"], "Helvetica-Bold", 8, tag="footer")
    if ctx.notes_overflow:
        notes = [LABELS["notes_see_above"]]
    else:
        notes = footer_note_lines(inv)
    if notes and notes != [""]:
        _lines(ctx, FOOTER_NOTES_X, FOOTER_TEXT_Y, notes, FOOTER_NOTE_LINE_H, "Helvetica", 7,
               theme.text_secondary, tag="footer:notes")

    if not ctx.premium and ctx.caps.promo_footer:
        center = PAGE_W / 2
        _text(ctx, center, PROMO_Y, LABELS["promo"].format(ctx.brand_name), "Helvetica", 10, theme.muted,
              "center", tag="footer:promo")
        _text(ctx, center, PROMO_UPSELL_Y, LABELS["promo_upsell"], "Helvetica", 8, theme.muted,
              "center", tag="footer:promo")
