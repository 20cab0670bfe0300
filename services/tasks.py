# taskdesk/services/tasks.py
from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Optional

from sqlmodel import Session, select

from core.errors import ValidationError
from core.log import get_logger
from core.priorities import DEFAULT_PRIORITY, normalize_priority
from models.category import Category
from models.task import Task
from services.validation import validate_task_fields
from storage.db import get_session
from utils.datetime_utils import local_now, strip_tz

logger = get_logger("tasks")

EVENTS = ("after_create", "after_update", "after_delete")


def completion_stamp(
    is_completed: bool,
    completed_at: Optional[datetime],
) -> Optional[datetime]:
    """CompletedAt for a record about to be saved with ``is_completed``."""
    if not is_completed:
        return None
    return strip_tz(completed_at) or local_now()


class TaskService:
    def __init__(self, session_factory: Callable[[], Session] = get_session):
        self._session_factory = session_factory
        self._listeners = {event: set() for event in EVENTS}

    def subscribe(self, event: str, callback):
        if event not in self._listeners:
            raise ValueError(f"Unsupported event: {event}")
        self._listeners[event].add(callback)

    def unsubscribe(self, event: str, callback):
        if event not in self._listeners:
            return
        self._listeners[event].discard(callback)

    def _emit(self, event: str, task_id: int):
        listeners = list(self._listeners.get(event, []))
        for listener in listeners:
            try:
                listener(task_id)
            except Exception:
                logger.exception("Listener %r failed on %s for task %s", listener, event, task_id)

    # ---------- Queries ----------
    def list_all(self) -> List[Task]:
        with self._session_factory() as s:
            return list(s.exec(select(Task)))

    def get(self, task_id: int) -> Optional[Task]:
        with self._session_factory() as s:
            return s.get(Task, task_id)

    def count_for_category(self, category_id: int) -> int:
        with self._session_factory() as s:
            stmt = select(Task).where(Task.category_id == category_id)
            return len(list(s.exec(stmt)))

    # ---------- Mutations ----------
    def add(
        self,
        title: str,
        description: Optional[str] = "",
        *,
        priority: int = DEFAULT_PRIORITY,
        category_id: Optional[int] = None,
        is_completed: bool = False,
        created_at: Optional[datetime] = None,
        completed_at: Optional[datetime] = None,
        emit: bool = True,
    ) -> Task:
        validate_task_fields(title, description)
        with self._session_factory() as s:
            self._check_category(s, category_id)
            t = Task(
                title=title.strip(),
                description=(description or "").strip(),
                is_completed=bool(is_completed),
                created_at=strip_tz(created_at) or local_now(),
                completed_at=completion_stamp(is_completed, completed_at),
                category_id=category_id,
                priority=int(normalize_priority(priority)),
            )
            s.add(t)
            s.commit()
            s.refresh(t)
            logger.debug("Created task %s", t.id)
        if emit:
            self._emit("after_create", t.id)
        return t

    def replace(
        self,
        task_id: int,
        *,
        title: str,
        description: Optional[str],
        is_completed: bool,
        completed_at: Optional[datetime] = None,
        category_id: Optional[int] = None,
        priority: int = DEFAULT_PRIORITY,
        emit: bool = True,
    ) -> Optional[Task]:
        """Overwrite every mutable field of a task; ``created_at`` is kept."""
        validate_task_fields(title, description)
        with self._session_factory() as s:
            t = s.get(Task, task_id)
            if not t:
                return None
            self._check_category(s, category_id)
            t.title = title.strip()
            t.description = (description or "").strip()
            t.is_completed = bool(is_completed)
            t.completed_at = completion_stamp(is_completed, completed_at)
            t.category_id = category_id
            t.priority = int(normalize_priority(priority))
            s.add(t)
            s.commit()
            s.refresh(t)
            logger.debug("Replaced task %s", t.id)
        if emit:
            self._emit("after_update", t.id)
        return t

    def set_completed(self, task_id: int, completed: bool) -> Optional[Task]:
        with self._session_factory() as s:
            t = s.get(Task, task_id)
            if not t:
                return None
            if completed and not t.is_completed:
                t.completed_at = local_now()
            elif not completed:
                t.completed_at = None
            t.is_completed = bool(completed)
            s.add(t)
            s.commit()
            s.refresh(t)
        self._emit("after_update", t.id)
        return t

    def toggle_complete(self, task_id: int) -> Optional[Task]:
        t = self.get(task_id)
        if not t:
            return None
        return self.set_completed(task_id, not t.is_completed)

    def delete(self, task_id: int, *, emit: bool = True) -> bool:
        with self._session_factory() as s:
            t = s.get(Task, task_id)
            if not t:
                return False
            s.delete(t)
            s.commit()
            logger.debug("Deleted task %s", task_id)
        if emit:
            self._emit("after_delete", task_id)
        return True

    # ------------------------------------------------------------------
    def _check_category(self, session: Session, category_id: Optional[int]) -> None:
        if category_id is None:
            return
        if session.get(Category, category_id) is None:
            raise ValidationError(f"Category {category_id} does not exist", field="category_id")


__all__ = ["TaskService", "completion_stamp"]
