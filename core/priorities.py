"""Utility helpers for task priorities."""
from __future__ import annotations

from enum import IntEnum
from typing import Dict


class Priority(IntEnum):
    LOW = 0
    MEDIUM = 1
    HIGH = 2


# Higher value sorts first under "Priority (High First)".
PRIORITY_META: Dict[int, Dict[str, str]] = {
    Priority.LOW: {
        "label": "Low",
        "short": "Low",
        "color": "#0EA5E9",    # sky-500
        "bgcolor": "#E0F2FE",  # sky-100
    },
    Priority.MEDIUM: {
        "label": "Medium",
        "short": "Med",
        "color": "#F59E0B",    # amber-500
        "bgcolor": "#FEF3C7",  # amber-100
    },
    Priority.HIGH: {
        "label": "High",
        "short": "High",
        "color": "#EF4444",    # red-500
        "bgcolor": "#FEE2E2",  # red-100
    },
}

DEFAULT_PRIORITY = Priority.MEDIUM


def normalize_priority(value: int | str | None) -> Priority:
    """Map external values (ints, digit strings, level names) onto a Priority."""
    if value is None:
        return DEFAULT_PRIORITY
    if isinstance(value, str):
        text = value.strip()
        if text.upper() in Priority.__members__:
            return Priority[text.upper()]
        value = text
    try:
        ivalue = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PRIORITY
    if ivalue not in PRIORITY_META:
        return DEFAULT_PRIORITY
    return Priority(ivalue)


def parse_priority(value: str) -> Priority | None:
    """Strict variant used by importers: ``None`` for anything undefined."""
    try:
        ivalue = int(value)
    except (TypeError, ValueError):
        return None
    if ivalue not in PRIORITY_META:
        return None
    return Priority(ivalue)


def priority_label(value: int, *, short: bool = False) -> str:
    meta = PRIORITY_META.get(value, PRIORITY_META[DEFAULT_PRIORITY])
    return meta["short" if short else "label"]


def priority_color(value: int) -> str:
    meta = PRIORITY_META.get(value, PRIORITY_META[DEFAULT_PRIORITY])
    return meta["color"]


def priority_bgcolor(value: int) -> str:
    meta = PRIORITY_META.get(value, PRIORITY_META[DEFAULT_PRIORITY])
    return meta["bgcolor"]


def priority_options() -> Dict[str, str]:
    """Return mapping of dropdown values -> labels, highest first."""
    return {
        str(int(level)): PRIORITY_META[level]["label"]
        for level in sorted(PRIORITY_META, reverse=True)
    }
