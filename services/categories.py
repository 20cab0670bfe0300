# taskdesk/services/categories.py
from __future__ import annotations

from typing import Callable, List, Optional

from sqlmodel import Session, select

from core.log import get_logger
from models.category import DEFAULT_COLOR, Category
from models.task import Task
from services.validation import validate_category_name, validate_color
from storage.db import get_session

logger = get_logger("categories")


class CategoryService:
    def __init__(self, session_factory: Callable[[], Session] = get_session):
        self._session_factory = session_factory

    def list(self) -> List[Category]:
        with self._session_factory() as session:
            stmt = select(Category).order_by(Category.name.asc())
            return list(session.exec(stmt))

    def get(self, category_id: int) -> Optional[Category]:
        with self._session_factory() as session:
            return session.get(Category, category_id)

    def add(self, name: str, color: str = DEFAULT_COLOR) -> Category:
        name = name.strip()
        self._validate_inputs(name, color)
        with self._session_factory() as session:
            category = Category(name=name, color=color.upper())
            session.add(category)
            session.commit()
            session.refresh(category)
            return category

    def insert_with_id(self, category_id: int, name: str, color: str = DEFAULT_COLOR) -> Category:
        """Insert keeping an externally assigned identity (backup restore)."""
        name = name.strip()
        self._validate_inputs(name, color)
        with self._session_factory() as session:
            category = Category(id=category_id, name=name, color=color.upper())
            session.add(category)
            session.commit()
            session.refresh(category)
            return category

    def update(self, category_id: int, name: str, color: str) -> Optional[Category]:
        name = name.strip()
        self._validate_inputs(name, color)
        with self._session_factory() as session:
            category = session.get(Category, category_id)
            if not category:
                return None
            category.name = name
            category.color = color.upper()
            session.add(category)
            session.commit()
            session.refresh(category)
            return category

    def delete(self, category_id: int) -> bool:
        with self._session_factory() as session:
            category = session.get(Category, category_id)
            if not category:
                return False
            # Detach tasks first; tasks are never deleted with their category.
            stmt = select(Task).where(Task.category_id == category_id)
            detached = 0
            for task in list(session.exec(stmt)):
                task.category_id = None
                session.add(task)
                detached += 1
            session.delete(category)
            session.commit()
        logger.info("Deleted category %s, detached %d tasks", category_id, detached)
        return True

    # ------------------------------------------------------------------
    def _validate_inputs(self, name: str, color: str) -> None:
        validate_category_name(name)
        validate_color(color)


__all__ = ["CategoryService"]
