# taskdesk/services/task_view.py
"""Filter/sort pipeline that produces the displayed task list.

Order of operations is fixed: search, status filter, category filter,
then sort. The displayed list is replaced wholesale on every change of
any input and subscribers receive the new list.
"""
from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable, List, Optional

from models.task import Task


class FilterStatus(str, Enum):
    ALL = "All"
    PENDING = "Pending"
    COMPLETED = "Completed"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def from_label(cls, label: Optional[str]) -> "FilterStatus":
        for status in cls:
            if status.value == label:
                return status
        return cls.ALL


class SortOption(str, Enum):
    DATE_DESCENDING = "Newest First"
    DATE_ASCENDING = "Oldest First"
    TITLE_ASCENDING = "Title (A-Z)"
    TITLE_DESCENDING = "Title (Z-A)"
    STATUS_ASCENDING = "Status (Pending First)"
    STATUS_DESCENDING = "Status (Completed First)"
    PRIORITY_HIGH_FIRST = "Priority (High First)"
    PRIORITY_LOW_FIRST = "Priority (Low First)"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def from_label(cls, label: Optional[str]) -> "SortOption":
        for option in cls:
            if option.value == label:
                return option
        return cls.DATE_DESCENDING


def matches_search(task: Task, search_text: str) -> bool:
    needle = search_text.casefold()
    if needle in (task.title or "").casefold():
        return True
    return bool(task.description) and needle in task.description.casefold()


def filter_tasks(
    tasks: Iterable[Task],
    *,
    search_text: str = "",
    status: FilterStatus = FilterStatus.ALL,
    category_id: Optional[int] = None,
) -> List[Task]:
    result = list(tasks)
    if search_text and search_text.strip():
        result = [t for t in result if matches_search(t, search_text)]
    if status is FilterStatus.PENDING:
        result = [t for t in result if not t.is_completed]
    elif status is FilterStatus.COMPLETED:
        result = [t for t in result if t.is_completed]
    if category_id is not None:
        result = [t for t in result if t.category_id == category_id]
    return result


def _newest_first(tasks: List[Task]) -> List[Task]:
    return sorted(tasks, key=lambda t: t.created_at, reverse=True)


def sort_tasks(tasks: Iterable[Task], option: SortOption) -> List[Task]:
    items = list(tasks)
    if option is SortOption.DATE_ASCENDING:
        return sorted(items, key=lambda t: t.created_at)
    if option is SortOption.TITLE_ASCENDING:
        return sorted(items, key=lambda t: t.title)
    if option is SortOption.TITLE_DESCENDING:
        return sorted(items, key=lambda t: t.title, reverse=True)
    # Status and priority ties fall back to newest first; sorted() is stable.
    if option is SortOption.STATUS_ASCENDING:
        return sorted(_newest_first(items), key=lambda t: t.is_completed)
    if option is SortOption.STATUS_DESCENDING:
        return sorted(_newest_first(items), key=lambda t: t.is_completed, reverse=True)
    if option is SortOption.PRIORITY_HIGH_FIRST:
        return sorted(_newest_first(items), key=lambda t: t.priority, reverse=True)
    if option is SortOption.PRIORITY_LOW_FIRST:
        return sorted(_newest_first(items), key=lambda t: t.priority)
    return _newest_first(items)


def apply_view(
    tasks: Iterable[Task],
    *,
    search_text: str = "",
    status: FilterStatus = FilterStatus.ALL,
    sort: SortOption = SortOption.DATE_DESCENDING,
    category_id: Optional[int] = None,
) -> List[Task]:
    filtered = filter_tasks(tasks, search_text=search_text, status=status, category_id=category_id)
    return sort_tasks(filtered, sort)


class TaskListView:
    def __init__(self, tasks: Iterable[Task] = ()):
        self._all: List[Task] = list(tasks)
        self.items: List[Task] = []
        self.search_text = ""
        self.status_filter = FilterStatus.ALL
        self.sort_option = SortOption.DATE_DESCENDING
        self.category_id: Optional[int] = None
        self._selected_id: Optional[int] = None
        self._subscribers: List[Callable[[List[Task]], None]] = []
        self.refresh()

    # ----- subscribers -----
    def subscribe(self, callback: Callable[[List[Task]], None]) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[List[Task]], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    # ----- inputs -----
    @property
    def all_tasks(self) -> List[Task]:
        return list(self._all)

    def set_tasks(self, tasks: Iterable[Task]) -> List[Task]:
        self._all = list(tasks)
        return self.refresh()

    def set_search_text(self, text: Optional[str]) -> List[Task]:
        self.search_text = text or ""
        return self.refresh()

    def set_status_filter(self, status: FilterStatus | str) -> List[Task]:
        if not isinstance(status, FilterStatus):
            status = FilterStatus.from_label(status)
        self.status_filter = status
        return self.refresh()

    def set_sort_option(self, option: SortOption | str) -> List[Task]:
        if not isinstance(option, SortOption):
            option = SortOption.from_label(option)
        self.sort_option = option
        return self.refresh()

    def set_category_filter(self, category_id: Optional[int]) -> List[Task]:
        self.category_id = category_id
        return self.refresh()

    # ----- selection -----
    @property
    def selected_id(self) -> Optional[int]:
        return self._selected_id

    @property
    def selected(self) -> Optional[Task]:
        if self._selected_id is None:
            return None
        return next((t for t in self.items if t.id == self._selected_id), None)

    def select(self, task_id: Optional[int]) -> Optional[Task]:
        if task_id is None or not any(t.id == task_id for t in self.items):
            self._selected_id = None
        else:
            self._selected_id = task_id
        return self.selected

    @property
    def has_items(self) -> bool:
        return bool(self.items)

    # ----- pipeline -----
    def refresh(self) -> List[Task]:
        self.items = apply_view(
            self._all,
            search_text=self.search_text,
            status=self.status_filter,
            sort=self.sort_option,
            category_id=self.category_id,
        )
        if self._selected_id is not None and not any(t.id == self._selected_id for t in self.items):
            self._selected_id = None
        for callback in list(self._subscribers):
            callback(self.items)
        return self.items


__all__ = [
    "FilterStatus",
    "SortOption",
    "TaskListView",
    "apply_view",
    "filter_tasks",
    "matches_search",
    "sort_tasks",
]
