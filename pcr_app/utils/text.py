# FILE: pcr_app/utils/text.py
from __future__ import annotations

import re
from typing import Any, Iterable

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def safe_str(v: Any) -> str:
    if v is None:
        return ""
    try:
        s = str(v)
    except Exception:
        return ""
    return s.replace("\u2011", "-")  # avoid non-breaking hyphen rendering issues


def is_blank(v: Any) -> bool:
    return safe_str(v).strip() == ""


def join_filled(values: Iterable[Any], sep: str = ", ") -> str:
    return sep.join(s for s in (safe_str(v).strip() for v in values) if s)


def sanitize_filename_part(s: str) -> str:
    """Every non-alphanumeric character becomes an underscore."""
    return _NON_ALNUM.sub("_", s or "")
