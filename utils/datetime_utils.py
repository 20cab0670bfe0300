"""Utilities for local timestamps and their text forms."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from core.settings import VIEW

CSV_FORMAT = VIEW.csv_timestamp_format
DISPLAY_FORMAT = VIEW.display_timestamp_format

_FALLBACK_FORMATS = (
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y",
)


def local_now() -> datetime:
    """Naive local time; SQLite stores timestamps without a zone."""
    return datetime.now()


def strip_tz(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


def format_timestamp(dt: Optional[datetime]) -> str:
    """Render ``dt`` as ``yyyy-MM-dd HH:mm:ss``; empty string for ``None``."""

    if dt is None:
        return ""
    return dt.strftime(CSV_FORMAT)


def parse_timestamp(s: Optional[str]) -> Optional[datetime]:
    """Parse a timestamp written by us or by common spreadsheet tools.

    Raises ``ValueError`` for non-empty text that matches no known form.
    """

    if s is None:
        return None
    value = s.strip()
    if not value:
        return None

    try:
        return datetime.strptime(value, CSV_FORMAT)
    except ValueError:
        pass

    iso = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return strip_tz(datetime.fromisoformat(iso))
    except ValueError:
        pass

    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError(f"Unrecognised timestamp: {value!r}")


def format_display(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.strftime(DISPLAY_FORMAT)


__all__ = [
    "CSV_FORMAT",
    "DISPLAY_FORMAT",
    "format_display",
    "format_timestamp",
    "local_now",
    "parse_timestamp",
    "strip_tz",
]
