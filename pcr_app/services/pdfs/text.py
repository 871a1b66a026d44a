# FILE: pcr_app/services/pdfs/text.py
"""
Text styles and measurement.

Everything that could overflow a column is measured here with the same
font metrics reportlab uses to draw, *before* anything is placed on the
canvas. ``wrap_text`` is memoised: identical (text, width, font, size)
always yields the identical tuple of lines.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from functools import lru_cache
from typing import List, Tuple

from reportlab.lib import colors
from reportlab.pdfbase.pdfmetrics import stringWidth

BOLD_VARIANTS = {
    "Helvetica": "Helvetica-Bold",
    "Times-Roman": "Times-Bold",
    "Courier": "Courier-Bold",
}

LINE_HEIGHT_FACTOR = 1.15
ELLIPSIS = "..."


@dataclass(frozen=True)
class TextStyle:
    family: str = "Helvetica"
    size: float = 8
    bold: bool = False
    color: colors.Color = colors.black
    line_factor: float = LINE_HEIGHT_FACTOR

    @property
    def font_name(self) -> str:
        if self.bold:
            return BOLD_VARIANTS.get(self.family, self.family)
        return self.family

    @property
    def line_height(self) -> float:
        return self.line_factor * self.size

    @property
    def baseline_offset(self) -> float:
        # distance from the top of a line box to the text baseline
        return (self.line_height - self.size) / 2 + self.size * 0.8

    def width(self, text: str) -> float:
        return stringWidth(text or "", self.font_name, self.size)

    def strong(self) -> "TextStyle":
        return replace(self, bold=True)

    def regular(self) -> "TextStyle":
        return replace(self, bold=False)

    def sized(self, size: float) -> "TextStyle":
        return replace(self, size=size)

    def colored(self, color: colors.Color) -> "TextStyle":
        return replace(self, color=color)


def wrap_text(text: str, max_width: float, style: TextStyle) -> Tuple[str, ...]:
    return _wrap(text or "", float(max_width), style.font_name, float(style.size))


@lru_cache(maxsize=4096)
def _wrap(text: str, max_w: float, font: str, size: float) -> Tuple[str, ...]:
    lines: List[str] = []
    for para in text.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        lines.extend(_wrap_paragraph(para, max_w, font, size))
    # an empty value still owns one (blank) line
    return tuple(lines) or ("",)


def _wrap_paragraph(para: str, max_w: float, font: str, size: float) -> List[str]:
    words = para.split()
    if not words:
        return [""]
    lines: List[str] = []
    cur = ""
    for w in words:
        test = f"{cur} {w}" if cur else w
        if stringWidth(test, font, size) <= max_w:
            cur = test
            continue
        if cur:
            lines.append(cur)
            cur = ""
        if stringWidth(w, font, size) <= max_w:
            cur = w
        else:
            pieces = _break_word(w, max_w, font, size)
            lines.extend(pieces[:-1])
            cur = pieces[-1]
    if cur:
        lines.append(cur)
    return lines


def _break_word(word: str, max_w: float, font: str, size: float) -> List[str]:
    """Hard-break a single word that is wider than the column."""
    pieces: List[str] = []
    cur = ""
    for ch in word:
        if cur and stringWidth(cur + ch, font, size) > max_w:
            pieces.append(cur)
            cur = ch
        else:
            cur += ch
    pieces.append(cur)
    return pieces


def fit_text(text: str, max_width: float, style: TextStyle) -> str:
    """Single-line fit: returns ``text`` or its longest ellipsized prefix."""
    text = text or ""
    if style.width(text) <= max_width:
        return text
    for end in range(len(text) - 1, 0, -1):
        candidate = text[:end].rstrip() + ELLIPSIS
        if style.width(candidate) <= max_width:
            return candidate
    return ""
