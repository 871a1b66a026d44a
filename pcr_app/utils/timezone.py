# FILE: pcr_app/utils/timezone.py
from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """
    ISO-8601 UTC timestamp with millisecond precision, e.g.
    "2026-10-18T14:03:07.512Z". Used as the operator confirmation marker.
    """
    return now_utc().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def fmt_generated(dt: datetime) -> str:
    return dt.strftime("%d-%b-%Y %I:%M %p")
