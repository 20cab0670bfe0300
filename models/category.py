# taskdesk/models/category.py

from typing import Optional

from sqlmodel import Field, SQLModel


DEFAULT_COLOR = "#6366F1"  # indigo

DEFAULT_CATEGORIES = (
    ("Work", "#3B82F6"),
    ("Personal", "#10B981"),
    ("Shopping", "#F59E0B"),
    ("Health", "#EF4444"),
    ("Learning", "#8B5CF6"),
    ("Other", DEFAULT_COLOR),
)


class Category(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    color: str = DEFAULT_COLOR


__all__ = ["Category", "DEFAULT_COLOR", "DEFAULT_CATEGORIES"]
