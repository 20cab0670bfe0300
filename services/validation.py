# taskdesk/services/validation.py
from __future__ import annotations

import re
from typing import Optional

from core.errors import ValidationError
from core.settings import VIEW

TITLE_MAX = VIEW.title_max_length
DESCRIPTION_MAX = VIEW.description_max_length

TITLE_TOO_LONG = f"Title must be {TITLE_MAX} characters or less"
TITLE_REQUIRED = "Title is required"
DESCRIPTION_TOO_LONG = f"Description must be {DESCRIPTION_MAX} characters or less"

CATEGORY_NAME_MAX = 50
COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def title_error(title: Optional[str]) -> str:
    """Return the message for an invalid title, or ``""``.

    Length is checked on the raw input, before trimming, so an overlong
    value padded with spaces is still reported as too long.
    """
    value = title or ""
    if len(value) > TITLE_MAX:
        return TITLE_TOO_LONG
    if not value.strip():
        return TITLE_REQUIRED
    return ""


def description_error(description: Optional[str]) -> str:
    value = description or ""
    if value.strip() and len(value) > DESCRIPTION_MAX:
        return DESCRIPTION_TOO_LONG
    return ""


def validate_task_fields(title: Optional[str], description: Optional[str]) -> None:
    message = title_error(title)
    if message:
        raise ValidationError(message, field="title")
    message = description_error(description)
    if message:
        raise ValidationError(message, field="description")


def validate_category_name(name: str) -> None:
    if not 1 <= len(name) <= CATEGORY_NAME_MAX:
        raise ValidationError("Category name must be between 1 and 50 characters", field="name")


def validate_color(color: str) -> None:
    if not COLOR_RE.match(color):
        raise ValidationError("Color must be in #RRGGBB format", field="color")


__all__ = [
    "DESCRIPTION_MAX",
    "DESCRIPTION_TOO_LONG",
    "TITLE_MAX",
    "TITLE_REQUIRED",
    "TITLE_TOO_LONG",
    "description_error",
    "title_error",
    "validate_category_name",
    "validate_color",
    "validate_task_fields",
]
