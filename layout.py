"""
Page model and vertical layout cursor for invoice documents.

Coordinates are millimetres on an A4 portrait page with the origin at the
top-left corner and y growing downwards. The PDF serializer converts them to
reportlab's bottom-left points.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)

PAGE_W = 210.0
PAGE_H = 297.0
MARGIN = 20.0
MARGIN_TOP = 20.0
MARGIN_BOTTOM = 10.0
PRINTABLE_TOP = MARGIN_TOP
PRINTABLE_BOTTOM = PAGE_H - MARGIN_BOTTOM
CONTENT_W = PAGE_W - 2 * MARGIN

# Pinned footer band; flowing content stops above it.
FOOTER_TOP = 250.0
FLOW_BOTTOM = FOOTER_TOP - 4.0

PT_TO_MM = 25.4 / 72.0
ASCENT = 0.8
DESCENT = 0.2
EPSILON = 1e-6


class RenderError(Exception):
    """Base class for invoice rendering errors."""


class LayoutOverflowError(RenderError):
    """A primitive would land outside the printable area."""


# -----------------------------
# Draw primitives
# -----------------------------
@dataclass(frozen=True)
class TextRun:
    x: float
    y: float  # baseline
    text: str
    font: str = "Helvetica"
    size: float = 10.0  # points
    color: str = "#000000"
    align: str = "left"  # left | right | center
    tag: str = ""

    @property
    def top(self) -> float:
        return self.y - self.size * PT_TO_MM * ASCENT

    @property
    def bottom(self) -> float:
        return self.y + self.size * PT_TO_MM * DESCENT


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str = "#000000"
    width: float = 0.5  # points
    tag: str = ""

    @property
    def top(self) -> float:
        return min(self.y1, self.y2)

    @property
    def bottom(self) -> float:
        return max(self.y1, self.y2)


@dataclass(frozen=True)
class FilledRect:
    x: float
    y: float  # top edge
    w: float
    h: float
    color: str
    radius: float = 0.0
    tag: str = ""

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y + self.h


@dataclass(frozen=True)
class PlacedImage:
    x: float
    y: float  # top edge of the unrotated box
    w: float
    h: float
    image: Any = field(repr=False, compare=False)
    rotation: float = 0.0  # degrees, counter-clockwise, about the box center
    tag: str = ""

    def _half_height(self) -> float:
        rad = math.radians(self.rotation)
        return (abs(self.w * math.sin(rad)) + abs(self.h * math.cos(rad))) / 2.0

    @property
    def top(self) -> float:
        return self.y + self.h / 2.0 - self._half_height()

    @property
    def bottom(self) -> float:
        return self.y + self.h / 2.0 + self._half_height()


# -----------------------------
# Pages / document
# -----------------------------
@dataclass
class Page:
    number: int
    items: list = field(default_factory=list)
    finalized: bool = False

    def add(self, prim) -> None:
        if self.finalized:
            raise RenderError(f"Page {self.number} is already finalized")
        if prim.top < PRINTABLE_TOP - EPSILON or prim.bottom > PRINTABLE_BOTTOM + EPSILON:
            raise LayoutOverflowError(
                f"{type(prim).__name__} {prim.tag or ''} at {prim.top:.2f}-{prim.bottom:.2f}mm "
                f"outside printable area on page {self.number}"
            )
        self.items.append(prim)

    def tagged(self, prefix: str) -> list:
        return [p for p in self.items if p.tag.startswith(prefix)]

    def texts(self) -> list[str]:
        return [p.text for p in self.items if isinstance(p, TextRun)]


@dataclass
class RenderedDocument:
    pages: list[Page]
    title: str = ""

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def pages_with(self, prefix: str) -> list[int]:
        return [p.number for p in self.pages if p.tagged(prefix)]

    def texts(self) -> list[str]:
        out: list[str] = []
        for page in self.pages:
            out.extend(page.texts())
        return out


# -----------------------------
# Layout cursor
# -----------------------------
class Pager:
    """
    Tracks the write position on the current page and opens new pages.

    advance() moves the cursor and breaks the page once it crosses the flow
    bottom. ensure_space() is the look-ahead used before a block that must not
    be split: the break happens before the block is emitted.
    """

    WRITING = "writing"
    PAGINATING = "paginating"

    def __init__(self, top: float = MARGIN_TOP, flow_bottom: float = FLOW_BOTTOM):
        self.top = top
        self.flow_bottom = flow_bottom
        self.pages: list[Page] = [Page(1)]
        self.y = top
        self.state = self.WRITING
        self._listeners: list[Callable[["Pager"], None]] = []
        self._finished = False

    @property
    def page(self) -> Page:
        return self.pages[-1]

    @property
    def page_number(self) -> int:
        return len(self.pages)

    @property
    def at_page_top(self) -> bool:
        return self.y <= self.top + EPSILON

    def remaining(self) -> float:
        return self.flow_bottom - self.y

    def on_page_break(self, fn: Callable[["Pager"], None]) -> None:
        self._listeners.append(fn)

    def remove_page_break_listener(self, fn: Callable[["Pager"], None]) -> None:
        if fn in self._listeners:
            self._listeners.remove(fn)

    def emit(self, prim) -> None:
        if self._finished:
            raise RenderError("Pager already finished")
        self.page.add(prim)

    def break_page(self) -> None:
        self.state = self.PAGINATING
        self.page.finalized = True
        self.pages.append(Page(len(self.pages) + 1))
        self.y = self.top
        self.state = self.WRITING
        logger.debug("Page break -> page %d", self.page_number)
        for fn in list(self._listeners):
            fn(self)

    def advance(self, amount: float) -> bool:
        """Move down by `amount`; returns True when a page break happened."""
        self.y += amount
        if self.y > self.flow_bottom + EPSILON:
            self.break_page()
            return True
        return False

    def ensure_space(self, amount: float) -> bool:
        """
        Break the page first if `amount` does not fit below the cursor.
        A block taller than a whole page is left on a fresh page as is.
        """
        if amount <= self.remaining() + EPSILON:
            return False
        if self.at_page_top:
            return False
        self.break_page()
        return True

    def finish(self, title: str = "") -> RenderedDocument:
        self.page.finalized = True
        self._finished = True
        return RenderedDocument(pages=list(self.pages), title=title)
