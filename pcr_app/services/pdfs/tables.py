# FILE: pcr_app/services/pdfs/tables.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Literal, Optional, Sequence, Tuple

from pcr_app.services.pdfs.primitives import BANNER_HEIGHT, HEADER_FILL, draw_banner
from pcr_app.services.pdfs.surface import DrawingSurface, mm_pt
from pcr_app.services.pdfs.text import TextStyle, fit_text, wrap_text
from pcr_app.utils.text import safe_str

CELL_PAD_X = mm_pt(1.5)
MIN_CELL_WIDTH = mm_pt(4)
TABLE_BANNER_SPACER = mm_pt(4)
MIN_HEADER_ROW_HEIGHT = mm_pt(6)
# cells get a taller line box than body text so wrapped rows breathe
TABLE_LINE_FACTOR = 1.6

TRANSPOSED_ROW_HEIGHT = mm_pt(6)
TRANSPOSED_MIN_DENOMINATOR = 8
TRANSPOSED_MAX_COLUMNS = 16
LABEL_COLUMN_MAX = mm_pt(30)
LABEL_COLUMN_SHARE = 0.25
BAND_GAP = mm_pt(3)


@dataclass(frozen=True)
class TableSpec:
    """
    ``rows`` orientation: ``headers`` name the columns, each row is one record.
    ``transposed`` orientation: ``headers`` are the fixed row labels and each
    entry of ``rows`` is one data column (one value per label).

    Column widths follow the orientation: equal division for ``rows``, a
    label column plus data columns over a minimum denominator of 8 for
    ``transposed``.
    """

    title: str
    headers: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...] = ()
    orientation: Literal["rows", "transposed"] = "rows"

    @property
    def width_policy(self) -> str:
        return "label_column" if self.orientation == "transposed" else "equal"

    @classmethod
    def build(cls, title: str, headers: Sequence[str], rows: Sequence[Sequence[object]], **kw) -> "TableSpec":
        clean = tuple(tuple(safe_str(v) for v in r) for r in rows)
        return cls(title=title, headers=tuple(headers), rows=clean, **kw)


@dataclass(frozen=True)
class RowPlacement:
    page: int
    top: float
    height: float


@dataclass
class TableLayout:
    header_row_height: float = 0.0
    rows: List[RowPlacement] = field(default_factory=list)
    header_draws: int = 0
    column_width: float = 0.0
    bands: int = 0


# -----------------------------
# Row-oriented table
# -----------------------------
def table_style(style: TextStyle) -> TextStyle:
    return replace(style, line_factor=TABLE_LINE_FACTOR)


def header_row_height(style: TextStyle) -> float:
    return max(MIN_HEADER_ROW_HEIGHT, style.line_height + mm_pt(2))


def measure_row(row: Sequence[str], col_w: float, style: TextStyle) -> Tuple[List[Tuple[str, ...]], float]:
    wrap_w = max(MIN_CELL_WIDTH, style.size, col_w - 2 * CELL_PAD_X)
    cells = [wrap_text(v, wrap_w, style) for v in row]
    lines = max([1] + [len(c) for c in cells])
    return cells, lines * style.line_height


def draw_row_table(
    surface: DrawingSurface,
    spec: TableSpec,
    style: TextStyle,
    *,
    banner_style: Optional[TextStyle] = None,
) -> TableLayout:
    """
    Banner, shaded header row, then one bordered row per record.

    Rows are measured before drawing and never split: a row that does not
    fit starts a new page, where banner and header are drawn again first.
    Only a row taller than a whole page below the header is continued
    across pages.
    """
    g = surface.geometry
    banner_style = banner_style or style.sized(style.size + 1)
    cell_style = table_style(style)
    n_cols = len(spec.headers)
    col_w = g.content_width / n_cols
    head_h = header_row_height(style)
    head_block = BANNER_HEIGHT + TABLE_BANNER_SPACER + head_h
    layout = TableLayout(header_row_height=head_h, column_width=col_w)

    measured = [measure_row(r, col_w, cell_style) for r in spec.rows]

    def draw_header(s: DrawingSurface) -> None:
        draw_banner(s, spec.title, banner_style)
        s.skip(BANNER_HEIGHT + TABLE_BANNER_SPACER)
        _draw_header_row(s, spec.headers, col_w, head_h, style.strong())
        layout.header_draws += 1

    first_row_h = measured[0][1] if measured else 0.0
    surface.ensure(head_block + min(first_row_h, g.body_height - head_block))
    draw_header(surface)

    with surface.on_new_page(draw_header):
        for cells, row_h in measured:
            if row_h > surface.geometry.body_height - head_block:
                _draw_tall_row(surface, cells, col_w, cell_style, layout)
                continue
            top = surface.claim(row_h)
            _draw_body_row(surface, top, cells, col_w, row_h, cell_style)
            layout.rows.append(RowPlacement(surface.page, top, row_h))
    return layout


def _draw_tall_row(
    surface: DrawingSurface,
    cells: Sequence[Tuple[str, ...]],
    col_w: float,
    style: TextStyle,
    layout: TableLayout,
) -> None:
    """Continue one oversized row over as many pages as its lines need."""
    lh = style.line_height
    total = max([1] + [len(c) for c in cells])
    start = 0
    while start < total:
        room = int((surface.geometry.bottom_limit - surface.y) // lh)
        if room < 1:
            surface.new_page()
            room = max(1, int((surface.geometry.bottom_limit - surface.y) // lh))
        end = min(total, start + room)
        chunk = [c[start:end] for c in cells]
        height = (end - start) * lh
        top = surface.claim(height)
        _draw_body_row(surface, top, chunk, col_w, height, style)
        layout.rows.append(RowPlacement(surface.page, top, height))
        start = end


def _draw_header_row(surface: DrawingSurface, headers: Sequence[str], col_w: float, row_h: float, style: TextStyle) -> None:
    g = surface.geometry
    top = surface.y
    surface.rect(g.left, top, col_w * len(headers), row_h, fill=HEADER_FILL)
    text_top = top + (row_h - style.line_height) / 2
    for i, h in enumerate(headers):
        cx = g.left + i * col_w
        label = fit_text(h, col_w - 2 * CELL_PAD_X, style)
        surface.text(cx + col_w / 2, text_top, label, style, align="center", max_width=col_w)
        if i:
            surface.line(cx, top, cx, top + row_h)
    surface.skip(row_h)


def _draw_body_row(
    surface: DrawingSurface,
    top: float,
    cells: Sequence[Tuple[str, ...]],
    col_w: float,
    row_h: float,
    style: TextStyle,
) -> None:
    g = surface.geometry
    surface.rect(g.left, top, col_w * len(cells), row_h)
    for i, lines in enumerate(cells):
        cx = g.left + i * col_w
        if i:
            surface.line(cx, top, cx, top + row_h)
        for k, ln in enumerate(lines):
            surface.text(cx + col_w / 2, top + k * style.line_height, ln, style,
                         align="center", max_width=col_w - 2 * CELL_PAD_X)


# -----------------------------
# Transposed (label column + one column per event)
# -----------------------------
def transposed_column_width(available_width: float, column_count: int) -> float:
    """Data columns take 1/8 of the width until there are more than 8 of them."""
    return available_width / max(TRANSPOSED_MIN_DENOMINATOR, column_count)


def label_column_width(content_width: float) -> float:
    return min(LABEL_COLUMN_MAX, content_width * LABEL_COLUMN_SHARE)


def transposed_row_height(style: TextStyle) -> float:
    return max(TRANSPOSED_ROW_HEIGHT, style.line_height + mm_pt(1))


def draw_transposed_table(
    surface: DrawingSurface,
    spec: TableSpec,
    style: TextStyle,
    *,
    max_columns: int = TRANSPOSED_MAX_COLUMNS,
) -> TableLayout:
    """
    Few fixed row labels, one data column per time-indexed event.

    More than ``max_columns`` events are split into stacked bands; each band
    is kept whole on one page.
    """
    g = surface.geometry
    labels = spec.headers
    columns = list(spec.rows) or [tuple("" for _ in labels)]
    label_w = label_column_width(g.content_width)
    data_w = g.content_width - label_w
    row_h = transposed_row_height(style)
    band_h = len(labels) * row_h
    layout = TableLayout()

    bands = [columns[i:i + max_columns] for i in range(0, len(columns), max_columns)]
    for b, band in enumerate(bands):
        if b:
            surface.skip(BAND_GAP)
        col_w = transposed_column_width(data_w, len(band))
        top = surface.claim(band_h)
        _draw_band(surface, top, labels, band, label_w, col_w, row_h, style)
        layout.rows.append(RowPlacement(surface.page, top, band_h))
        layout.column_width = col_w
    layout.bands = len(bands)
    return layout


def _draw_band(
    surface: DrawingSurface,
    top: float,
    labels: Sequence[str],
    band: Sequence[Sequence[str]],
    label_w: float,
    col_w: float,
    row_h: float,
    style: TextStyle,
) -> None:
    g = surface.geometry
    x0 = g.left
    n_rows = len(labels)
    height = n_rows * row_h
    width = label_w + len(band) * col_w

    surface.rect(x0, top, label_w, height, fill=HEADER_FILL, stroke=None)
    surface.rect(x0, top, width, height)
    # label column separator
    surface.line(x0 + label_w, top, x0 + label_w, top + height, width=1.0)
    for c in range(1, len(band)):
        vx = x0 + label_w + c * col_w
        surface.line(vx, top, vx, top + height)
    for r in range(1, n_rows):
        hy = top + r * row_h
        surface.line(x0, hy, x0 + width, hy)

    pad = (row_h - style.line_height) / 2
    bold = style.strong()
    for r, label in enumerate(labels):
        text = fit_text(label, label_w - 2 * CELL_PAD_X, bold)
        surface.text(x0 + label_w / 2, top + r * row_h + pad, text, bold,
                     align="center", max_width=label_w - 2 * CELL_PAD_X)

    for c, column in enumerate(band):
        cx = x0 + label_w + c * col_w + col_w / 2
        for r in range(n_rows):
            value = column[r] if r < len(column) else ""
            text = fit_text(value, col_w - 2 * CELL_PAD_X, style)
            surface.text(cx, top + r * row_h + pad, text, style,
                         align="center", max_width=col_w - 2 * CELL_PAD_X)


def draw_table(surface: DrawingSurface, spec: TableSpec, style: TextStyle) -> TableLayout:
    if spec.orientation == "transposed":
        return draw_transposed_table(surface, spec, style)
    return draw_row_table(surface, spec, style)
