# FILE: pcr_app/services/pdfs/primitives.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from reportlab.lib import colors

from pcr_app.services.pdfs.surface import DrawingSurface, mm_pt
from pcr_app.services.pdfs.text import TextStyle, fit_text, wrap_text
from pcr_app.utils.text import safe_str

SPAN_DENOMINATOR = 4
ROW_SPACER = mm_pt(1)
MIN_VALUE_WIDTH = mm_pt(4)
MIN_BLOCK_VALUE_WIDTH = mm_pt(10)

BANNER_HEIGHT = mm_pt(8)
BANNER_SPACER = mm_pt(6)
BANNER_FILL = colors.Color(100 / 255, 100 / 255, 100 / 255)
HEADER_FILL = colors.Color(220 / 255, 220 / 255, 220 / 255)
RULE_GAP = mm_pt(6)


@dataclass(frozen=True)
class MeasuredCell:
    label: str
    label_width: float
    x: float
    width: float
    value_width: float
    lines: Tuple[str, ...]
    line_height: float
    # a label too wide to share its line sits wrapped above the value
    label_lines: Tuple[str, ...] = ()

    @property
    def line_count(self) -> int:
        return len(self.label_lines) + max(1, len(self.lines))

    @property
    def height(self) -> float:
        return self.line_count * self.line_height


def value_floor(style: TextStyle, minimum: float) -> float:
    """Narrowest value column worth keeping beside a label at this font size."""
    return max(minimum, style.size * 2)


def measure_fields(
    fields: Sequence[Tuple[str, Any]],
    spans: Sequence[int],
    style: TextStyle,
    *,
    x: float,
    width: float,
) -> List[MeasuredCell]:
    if len(fields) != len(spans):
        raise ValueError(f"{len(fields)} fields but {len(spans)} spans")
    if sum(spans) != SPAN_DENOMINATOR:
        raise ValueError(f"column spans must add up to {SPAN_DENOMINATOR}, got {list(spans)}")

    unit = width / SPAN_DENOMINATOR
    bold = style.strong()
    floor = value_floor(style, MIN_VALUE_WIDTH)
    cells: List[MeasuredCell] = []
    cx = x
    for (label, value), span in zip(fields, spans):
        label = safe_str(label)
        cell_w = unit * span
        label_w = bold.width(label + " ") if label else 0.0
        if not label or cell_w - label_w >= floor:
            lines = wrap_text(safe_str(value), cell_w - label_w, style)
            cells.append(MeasuredCell(label, label_w, cx, cell_w, cell_w - label_w, lines, style.line_height))
        else:
            stacked = wrap_text(label, cell_w, bold)
            lines = wrap_text(safe_str(value), cell_w, style)
            cells.append(MeasuredCell(label, 0.0, cx, cell_w, cell_w, lines, style.line_height, stacked))
        cx += cell_w
    return cells


def _draw_cell_line(surface: DrawingSurface, cell: MeasuredCell, k: int, top: float, style: TextStyle) -> None:
    """Line ``k`` of a measured cell: stacked label lines first, then value lines."""
    n_label = len(cell.label_lines)
    if k < n_label:
        surface.text(cell.x, top, cell.label_lines[k], style.strong(), max_width=cell.width)
        return
    i = k - n_label
    if i == 0 and cell.label and not n_label:
        surface.text(cell.x, top, cell.label, style.strong(), max_width=cell.label_width)
    if i < len(cell.lines):
        surface.text(cell.x + cell.label_width, top, cell.lines[i], style, max_width=cell.value_width)


def fields_row(
    surface: DrawingSurface,
    fields: Sequence[Tuple[str, Any]],
    spans: Sequence[int],
    style: TextStyle,
    *,
    x: Optional[float] = None,
    width: Optional[float] = None,
) -> float:
    """
    Lay out labelled values across weighted column spans (out of 4).

    All cells are measured first; the row takes the height of its tallest
    cell and either fits on the current page or moves whole to the next.
    A row taller than a whole page body is instead continued line by line
    across pages. Returns the row height (spacer excluded).
    """
    g = surface.geometry
    x = g.left if x is None else x
    width = g.content_width if width is None else width

    cells = measure_fields(fields, spans, style, x=x, width=width)
    n_lines = max(c.line_count for c in cells)
    row_h = n_lines * style.line_height

    if row_h <= g.body_height:
        top = surface.claim(row_h)
        for k in range(n_lines):
            for cell in cells:
                _draw_cell_line(surface, cell, k, top + k * style.line_height, style)
    else:
        for k in range(n_lines):
            top = surface.claim(style.line_height)
            for cell in cells:
                _draw_cell_line(surface, cell, k, top, style)

    surface.skip(ROW_SPACER)
    return row_h


def multiline_block(
    surface: DrawingSurface,
    label: str,
    value: Any,
    style: TextStyle,
    *,
    x: Optional[float] = None,
    width: Optional[float] = None,
) -> Tuple[str, ...]:
    """
    A label followed by free text that may run for many lines.

    Each output line is placed with its own ``claim`` so a long narrative
    continues on the next page instead of running past the bottom margin.
    A label too wide to leave room for the text is wrapped on its own lines
    above it. Returns the wrapped value lines.
    """
    g = surface.geometry
    x = g.left if x is None else x
    width = g.content_width if width is None else width

    label = safe_str(label)
    bold = style.strong()
    label_w = bold.width(label + " ") if label else 0.0
    label_lines: Tuple[str, ...] = ()
    if label and width - label_w < value_floor(style, MIN_BLOCK_VALUE_WIDTH):
        label_lines = wrap_text(label, width, bold)
        label_w = 0.0
    value_w = width - label_w
    lines = wrap_text(safe_str(value).strip(), value_w, style)

    for ln in label_lines:
        top = surface.claim(style.line_height)
        surface.text(x, top, ln, bold, max_width=width)
    for i, ln in enumerate(lines):
        top = surface.claim(style.line_height)
        if i == 0 and label and not label_lines:
            surface.text(x, top, label, bold, max_width=label_w)
        surface.text(x + label_w, top, ln, style, max_width=value_w)

    surface.skip(ROW_SPACER)
    return lines


def caption(surface: DrawingSurface, text: str, style: TextStyle, *, gap: float = mm_pt(1)) -> None:
    """Bold sub-heading kept together with at least one following line."""
    g = surface.geometry
    bold = style.strong()
    surface.ensure(style.line_height * 2 + gap)
    top = surface.claim(style.line_height)
    surface.text(g.left, top, fit_text(text, g.content_width, bold), bold, max_width=g.content_width)
    surface.skip(gap)


def banner(
    surface: DrawingSurface,
    title: str,
    style: TextStyle,
    *,
    spacer: float = BANNER_SPACER,
    keep_with: float = 0.0,
) -> None:
    """Shaded full-width section title bar."""
    surface.ensure(BANNER_HEIGHT + spacer + keep_with)
    draw_banner(surface, title, style)
    surface.skip(BANNER_HEIGHT + spacer)


def draw_banner(surface: DrawingSurface, title: str, style: TextStyle) -> None:
    g = surface.geometry
    top = surface.y
    surface.rect(g.left, top, g.content_width, BANNER_HEIGHT, fill=BANNER_FILL, stroke=None)
    title_style = style.strong().colored(colors.white)
    text_top = top + (BANNER_HEIGHT - title_style.line_height) / 2
    title_w = g.content_width - mm_pt(2)
    surface.text(g.left + mm_pt(2), text_top, fit_text(title, title_w, title_style), title_style, max_width=title_w)


def rule(surface: DrawingSurface, *, gap: float = RULE_GAP) -> None:
    """Full-width separator line at the cursor."""
    g = surface.geometry
    surface.line(g.left, surface.y, g.right, surface.y, width=0.4)
    surface.skip(gap)
