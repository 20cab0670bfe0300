# taskdesk/models/task.py
from typing import Optional
from datetime import datetime

from sqlmodel import SQLModel, Field

from core.priorities import DEFAULT_PRIORITY
from utils.datetime_utils import format_display, local_now


class Task(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=200)
    description: str = ""
    is_completed: bool = False
    created_at: datetime = Field(default_factory=local_now)
    completed_at: Optional[datetime] = None
    category_id: Optional[int] = Field(default=None, foreign_key="category.id", index=True)
    priority: int = int(DEFAULT_PRIORITY)     # core.priorities.Priority

    @property
    def status_text(self) -> str:
        return "COMPLETED" if self.is_completed else "PENDING"

    @property
    def created_at_text(self) -> str:
        return format_display(self.created_at) or ""

    @property
    def completed_at_text(self) -> Optional[str]:
        return format_display(self.completed_at)
