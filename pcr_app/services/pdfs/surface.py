# FILE: pcr_app/services/pdfs/surface.py
"""
Page geometry, the layout cursor and the drawing surface.

Layout code works top-down: ``y`` grows from the top margin towards the
bottom of the page, in points. Only this module converts to reportlab's
bottom-left origin.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, LEGAL, LETTER, landscape, portrait
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas as rl_canvas

from pcr_app.schemas.pdf import PdfMargins, PdfOptions
from pcr_app.services.pdfs.text import TextStyle

logger = logging.getLogger(__name__)

PAGE_FORMATS = {"letter": LETTER, "a4": A4, "legal": LEGAL}


def mm_pt(x_mm: float) -> float:
    return x_mm * mm


def page_size(options: PdfOptions) -> Tuple[float, float]:
    size = PAGE_FORMATS[options.format]
    return landscape(size) if options.orientation == "landscape" else portrait(size)


# -----------------------------
# Geometry
# -----------------------------
@dataclass(frozen=True)
class Margins:
    top: float
    right: float
    bottom: float
    left: float

    @classmethod
    def from_mm(cls, m: PdfMargins) -> "Margins":
        return cls(top=mm_pt(m.top), right=mm_pt(m.right), bottom=mm_pt(m.bottom), left=mm_pt(m.left))


@dataclass(frozen=True)
class PageGeometry:
    width: float
    height: float
    margins: Margins

    @property
    def content_width(self) -> float:
        return self.width - self.margins.left - self.margins.right

    @property
    def left(self) -> float:
        return self.margins.left

    @property
    def right(self) -> float:
        return self.width - self.margins.right

    @property
    def top(self) -> float:
        return self.margins.top

    @property
    def bottom_limit(self) -> float:
        return self.height - self.margins.bottom

    @property
    def body_height(self) -> float:
        return self.bottom_limit - self.top


class LayoutCursor:
    """Current write position (top-down) on the current page."""

    def __init__(self, top: float):
        self.y = top
        self.page = 1

    def move(self, dy: float) -> None:
        if dy < 0:
            raise ValueError("cursor never moves up within a page")
        self.y += dy

    def reset(self, top: float) -> None:
        self.y = top
        self.page += 1


@dataclass(frozen=True)
class PlacedText:
    """Layout trace entry, recorded only when tracing is enabled."""

    page: int
    x: float
    top: float
    text: str
    width: float
    max_width: Optional[float]


# -----------------------------
# Page-number canvas (Page X of Y)
# -----------------------------
class NumberedCanvas(rl_canvas.Canvas):
    def __init__(self, *args, show_page_numbers: bool = True, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []
        self._show_page_numbers = show_page_numbers

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        num_pages = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_page_number(num_pages)
            super().showPage()
        super().save()

    def _draw_page_number(self, page_count: int):
        if not self._show_page_numbers:
            return
        page_w, _ = self._pagesize
        self.saveState()
        self.setFont("Helvetica", 7)
        self.setFillColor(colors.grey)
        self.drawRightString(page_w - mm_pt(10), mm_pt(4), f"Page {self._pageNumber} of {page_count}")
        self.restoreState()


# -----------------------------
# Drawing surface
# -----------------------------
class DrawingSurface:
    """
    One canvas + its geometry + the single layout cursor.

    Every primitive goes through ``claim`` (space check, optional page
    break, cursor advance) so the bottom-margin arithmetic lives in one
    place. Style is passed per call and wrapped in save/restoreState, so no
    font or colour leaks from one draw to the next.
    """

    def __init__(self, canv: rl_canvas.Canvas, margins: Margins, *, trace: bool = False):
        self.canvas = canv
        self.margins = margins
        self.geometry = self._read_geometry()
        self.cursor = LayoutCursor(self.geometry.top)
        self.trace: Optional[List[PlacedText]] = [] if trace else None
        self._page_hooks: List[Callable[["DrawingSurface"], None]] = []

    def _read_geometry(self) -> PageGeometry:
        w, h = self.canvas._pagesize
        return PageGeometry(width=float(w), height=float(h), margins=self.margins)

    # ---- cursor ----
    @property
    def y(self) -> float:
        return self.cursor.y

    @property
    def page(self) -> int:
        return self.cursor.page

    def fits(self, height: float) -> bool:
        return self.cursor.y + height <= self.geometry.bottom_limit

    def new_page(self) -> None:
        self.canvas.showPage()
        self.geometry = self._read_geometry()
        self.cursor.reset(self.geometry.top)
        logger.debug("layout: started page %s", self.cursor.page)
        for hook in list(self._page_hooks):
            hook(self)

    def ensure(self, height: float) -> bool:
        """Start a new page unless ``height`` fits below the cursor."""
        if self.fits(height):
            return False
        self.new_page()
        return True

    def claim(self, height: float) -> float:
        """Reserve ``height`` (breaking the page first if needed); returns its top."""
        self.ensure(height)
        top = self.cursor.y
        self.cursor.move(height)
        return top

    def skip(self, dy: float) -> None:
        self.cursor.move(dy)

    def move_to(self, y: float) -> None:
        self.cursor.move(max(0.0, y - self.cursor.y))

    @contextmanager
    def on_new_page(self, hook: Callable[["DrawingSurface"], None]) -> Iterator[None]:
        """Run ``hook`` after every page break inside the block (repeating headers)."""
        self._page_hooks.append(hook)
        try:
            yield
        finally:
            self._page_hooks.remove(hook)

    # ---- drawing (top-down coordinates) ----
    def _pdf_y(self, y: float) -> float:
        return self.geometry.height - y

    def text(
        self,
        x: float,
        top: float,
        s: str,
        style: TextStyle,
        *,
        align: str = "left",
        max_width: Optional[float] = None,
    ) -> float:
        """Draw one line whose line box starts at ``top``; returns its width."""
        c = self.canvas
        width = style.width(s)
        c.saveState()
        c.setFont(style.font_name, style.size)
        c.setFillColor(style.color)
        base = self._pdf_y(top + style.baseline_offset)
        if align == "center":
            c.drawCentredString(x, base, s)
            left = x - width / 2
        elif align == "right":
            c.drawRightString(x, base, s)
            left = x - width
        else:
            c.drawString(x, base, s)
            left = x
        c.restoreState()
        if self.trace is not None and s:
            self.trace.append(PlacedText(self.page, left, top, s, width, max_width))
        return width

    def rect(
        self,
        x: float,
        top: float,
        w: float,
        h: float,
        *,
        fill: Optional[colors.Color] = None,
        stroke: Optional[colors.Color] = colors.black,
        line_width: float = 0.5,
    ) -> None:
        c = self.canvas
        c.saveState()
        if fill is not None:
            c.setFillColor(fill)
        if stroke is not None:
            c.setStrokeColor(stroke)
            c.setLineWidth(line_width)
        # reportlab rect uses bottom-left
        c.rect(x, self._pdf_y(top + h), w, h, stroke=1 if stroke is not None else 0, fill=1 if fill is not None else 0)
        c.restoreState()

    def line(self, x1: float, y1: float, x2: float, y2: float, *, width: float = 0.5, color=colors.black) -> None:
        c = self.canvas
        c.saveState()
        c.setStrokeColor(color)
        c.setLineWidth(width)
        c.line(x1, self._pdf_y(y1), x2, self._pdf_y(y2))
        c.restoreState()

    def image(self, img, x: float, top: float, w: float, h: float) -> None:
        self.canvas.drawImage(img, x, self._pdf_y(top + h), width=w, height=h, mask="auto")


def new_surface(buf, options: PdfOptions, *, title: str = "", trace: bool = False,
                canvas_cls=NumberedCanvas) -> DrawingSurface:
    canv = canvas_cls(
        buf,
        pagesize=page_size(options),
        invariant=1,
        show_page_numbers=options.show_page_numbers,
    )
    canv.setTitle(title)
    canv.setAuthor("")
    return DrawingSurface(canv, Margins.from_mm(options.margins), trace=trace)
