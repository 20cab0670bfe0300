# taskdesk/services/board.py
"""UI-agnostic controller behind the main TaskDesk window.

The board owns the task list view, the new-task draft, the edit form and
the category list. Every command is a plain method with a matching
``can_*`` predicate; commands report outcomes through the notification
center and never let storage errors escape to the caller.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from core.errors import ValidationError
from core.log import get_logger
from core.priorities import DEFAULT_PRIORITY, Priority, normalize_priority
from models.category import DEFAULT_COLOR, Category
from models.task import Task
from services.categories import CategoryService
from services.confirmation import ConfirmationService
from services.exporter import ExportService
from services.importer import ImportResult, ImportService
from services.notifications import NotificationCenter
from services.task_view import FilterStatus, SortOption, TaskListView
from services.tasks import TaskService
from services.validation import description_error, title_error

logger = get_logger("board")

TASK_NOT_FOUND = "Task not found"


@dataclass
class TaskForm:
    title: str = ""
    description: str = ""
    priority: Priority = DEFAULT_PRIORITY
    category_id: Optional[int] = None
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    title_error: str = ""
    description_error: str = ""

    @classmethod
    def from_task(cls, task: Task) -> "TaskForm":
        return cls(
            title=task.title,
            description=task.description or "",
            priority=normalize_priority(task.priority),
            category_id=task.category_id,
            is_completed=task.is_completed,
            completed_at=task.completed_at,
        )

    def set_title(self, value: Optional[str]) -> str:
        self.title = value or ""
        self.title_error = title_error(self.title)
        return self.title_error

    def set_description(self, value: Optional[str]) -> str:
        self.description = value or ""
        self.description_error = description_error(self.description)
        return self.description_error

    def validate(self) -> bool:
        self.title_error = title_error(self.title)
        self.description_error = description_error(self.description)
        return self.is_valid

    @property
    def is_valid(self) -> bool:
        return not self.title_error and not self.description_error

    @property
    def first_error(self) -> str:
        return self.title_error or self.description_error


class TaskBoard:
    def __init__(
        self,
        tasks: TaskService,
        categories: CategoryService,
        *,
        notifications: Optional[NotificationCenter] = None,
        confirmation: Optional[ConfirmationService] = None,
        importer: Optional[ImportService] = None,
        exporter: Optional[ExportService] = None,
    ):
        self.tasks = tasks
        self.category_service = categories
        self.notifications = notifications or NotificationCenter()
        self.confirmation = confirmation or ConfirmationService()
        self.importer = importer or ImportService(tasks, categories)
        self.exporter = exporter or ExportService(tasks, categories)

        self.view = TaskListView()
        self.categories: List[Category] = []
        self.new_task = TaskForm()
        self.edit_form: Optional[TaskForm] = None
        self.is_editing = False
        self._listeners: List[Callable[[], None]] = []

    # ---------- change notification ----------
    def subscribe(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def unsubscribe(self, callback: Callable[[], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _changed(self) -> None:
        for callback in list(self._listeners):
            callback()

    # ---------- loading ----------
    def load(self) -> None:
        self.reload_categories()
        self.reload_tasks()

    def reload_tasks(self) -> List[Task]:
        try:
            tasks = self.tasks.list_all()
        except SQLAlchemyError as exc:
            logger.exception("Loading tasks failed")
            self.notifications.error(f"Failed to load tasks: {exc}")
            return self.view.items
        items = self.view.set_tasks(tasks)
        self._changed()
        return items

    def reload_categories(self) -> List[Category]:
        try:
            self.categories = self.category_service.list()
        except SQLAlchemyError as exc:
            logger.exception("Loading categories failed")
            self.notifications.error(f"Failed to load categories: {exc}")
        self._changed()
        return self.categories

    @property
    def displayed(self) -> List[Task]:
        return self.view.items

    @property
    def selected(self) -> Optional[Task]:
        return self.view.selected

    def category_for(self, task: Task) -> Optional[Category]:
        return next((c for c in self.categories if c.id == task.category_id), None)

    # ---------- view pipeline inputs ----------
    def set_search_text(self, text: Optional[str]) -> List[Task]:
        return self.view.set_search_text(text)

    def set_status_filter(self, status: FilterStatus | str) -> List[Task]:
        return self.view.set_status_filter(status)

    def set_sort_option(self, option: SortOption | str) -> List[Task]:
        return self.view.set_sort_option(option)

    def set_category_filter(self, category_id: Optional[int]) -> List[Task]:
        return self.view.set_category_filter(category_id)

    # ---------- new task ----------
    def set_new_title(self, value: Optional[str]) -> str:
        return self.new_task.set_title(value)

    def set_new_description(self, value: Optional[str]) -> str:
        return self.new_task.set_description(value)

    def set_new_priority(self, value: int | str | None) -> None:
        self.new_task.priority = normalize_priority(value)

    def set_new_category(self, category_id: Optional[int]) -> None:
        self.new_task.category_id = category_id

    def can_add_task(self) -> bool:
        return not title_error(self.new_task.title) and not description_error(self.new_task.description)

    def add_task(self) -> Optional[Task]:
        form = self.new_task
        if not form.validate():
            self.notifications.error(form.first_error)
            self._changed()
            return None
        try:
            task = self.tasks.add(
                form.title,
                form.description,
                priority=form.priority,
                category_id=form.category_id,
            )
        except ValidationError as exc:
            self.notifications.error(exc.message)
            return None
        except SQLAlchemyError as exc:
            logger.exception("Adding task failed")
            self.notifications.error(f"Failed to add task: {exc}")
            return None
        self.notifications.success("Task added successfully!")
        self.new_task = TaskForm()
        self.reload_tasks()
        return task

    # ---------- selection / editing ----------
    def select_task(self, task_id: Optional[int]) -> Optional[Task]:
        if self.is_editing:
            self.is_editing = False
            self.edit_form = None
        task = self.view.select(task_id)
        self._changed()
        return task

    def can_edit_task(self, task_id: Optional[int]) -> bool:
        return task_id is not None and any(t.id == task_id for t in self.view.items)

    def edit_task(self, task_id: Optional[int]) -> Optional[TaskForm]:
        task = self.view.select(task_id)
        if task is None:
            self.is_editing = False
            self.edit_form = None
        else:
            self.edit_form = TaskForm.from_task(task)
            self.is_editing = True
        self._changed()
        return self.edit_form

    def can_save_task(self) -> bool:
        return self.is_editing and self.edit_form is not None and self.view.selected_id is not None

    def save_task(self) -> Optional[Task]:
        if not self.can_save_task():
            return None
        form = self.edit_form
        task_id = self.view.selected_id
        if not form.validate():
            self.notifications.error(form.first_error)
            self._changed()
            return None
        try:
            task = self.tasks.replace(
                task_id,
                title=form.title,
                description=form.description,
                is_completed=form.is_completed,
                completed_at=form.completed_at,
                category_id=form.category_id,
                priority=form.priority,
            )
        except ValidationError as exc:
            self.notifications.error(exc.message)
            return None
        except SQLAlchemyError as exc:
            logger.exception("Saving task %s failed", task_id)
            self.notifications.error(f"Failed to save task: {exc}")
            return None
        if task is None:
            self.notifications.error(TASK_NOT_FOUND)
            self.is_editing = False
            self.edit_form = None
            self.reload_tasks()
            return None
        self.notifications.success("Task updated successfully!")
        self.is_editing = False
        self.edit_form = None
        self.reload_tasks()
        self.view.select(task_id)
        self._changed()
        return task

    def cancel_edit(self) -> None:
        if self.view.selected_id is None and not self.is_editing:
            return
        self.is_editing = False
        self.edit_form = None
        self.reload_tasks()

    # ---------- completion / deletion ----------
    def can_toggle_complete(self, task_id: Optional[int]) -> bool:
        return task_id is not None

    def toggle_complete(self, task_id: Optional[int]) -> Optional[Task]:
        if not self.can_toggle_complete(task_id):
            return None
        try:
            task = self.tasks.toggle_complete(task_id)
        except SQLAlchemyError as exc:
            logger.exception("Toggling task %s failed", task_id)
            self.notifications.error(f"Failed to update task: {exc}")
            return None
        if task is None:
            self.notifications.error(TASK_NOT_FOUND)
            self.reload_tasks()
            return None
        status = "completed" if task.is_completed else "marked as pending"
        self.notifications.success(f"Task {status}!")
        self.reload_tasks()
        return task

    def can_delete_task(self, task_id: Optional[int]) -> bool:
        return task_id is not None

    def delete_task(self, task_id: Optional[int]) -> None:
        if not self.can_delete_task(task_id):
            return
        task = next((t for t in self.view.all_tasks if t.id == task_id), None)
        title = task.title if task else f"#{task_id}"

        def _on_result(confirmed: bool) -> None:
            if confirmed:
                self._delete_confirmed(task_id)

        self.confirmation.ask(
            "Delete Task",
            f"Are you sure you want to delete '{title}'? This action cannot be undone.",
            _on_result,
        )

    def _delete_confirmed(self, task_id: int) -> None:
        try:
            deleted = self.tasks.delete(task_id)
        except SQLAlchemyError as exc:
            logger.exception("Deleting task %s failed", task_id)
            self.notifications.error(f"Failed to delete task: {exc}")
            return
        if not deleted:
            self.notifications.error(TASK_NOT_FOUND)
        else:
            if self.view.selected_id == task_id:
                self.view.select(None)
                self.is_editing = False
                self.edit_form = None
            self.notifications.success("Task deleted successfully!")
        self.reload_tasks()

    # ---------- categories ----------
    def add_category(self, name: str, color: str = DEFAULT_COLOR) -> Optional[Category]:
        try:
            category = self.category_service.add(name, color)
        except ValidationError as exc:
            self.notifications.error(exc.message)
            return None
        except SQLAlchemyError as exc:
            logger.exception("Adding category failed")
            self.notifications.error(f"Failed to add category: {exc}")
            return None
        self.notifications.success(f"Category '{category.name}' added!")
        self.reload_categories()
        return category

    def update_category(self, category_id: int, name: str, color: str) -> Optional[Category]:
        try:
            category = self.category_service.update(category_id, name, color)
        except ValidationError as exc:
            self.notifications.error(exc.message)
            return None
        except SQLAlchemyError as exc:
            logger.exception("Updating category %s failed", category_id)
            self.notifications.error(f"Failed to update category: {exc}")
            return None
        if category is None:
            self.notifications.error("Category not found")
        else:
            self.notifications.success(f"Category '{category.name}' updated!")
        self.reload_categories()
        return category

    def delete_category(self, category_id: int) -> None:
        category = next((c for c in self.categories if c.id == category_id), None)
        name = category.name if category else f"#{category_id}"
        in_use = sum(1 for t in self.view.all_tasks if t.category_id == category_id)

        def _on_result(confirmed: bool) -> None:
            if confirmed:
                self._delete_category_confirmed(category_id)

        self.confirmation.ask(
            "Delete Category",
            f"Delete category '{name}'? {in_use} task(s) will be left without a category.",
            _on_result,
        )

    def _delete_category_confirmed(self, category_id: int) -> None:
        try:
            deleted = self.category_service.delete(category_id)
        except SQLAlchemyError as exc:
            logger.exception("Deleting category %s failed", category_id)
            self.notifications.error(f"Failed to delete category: {exc}")
            return
        if not deleted:
            self.notifications.error("Category not found")
        else:
            self.notifications.success("Category deleted successfully!")
        if self.new_task.category_id == category_id:
            self.new_task.category_id = None
        if self.view.category_id == category_id:
            self.view.category_id = None
        self.reload_categories()
        self.reload_tasks()

    # ---------- export ----------
    def can_export(self) -> bool:
        return bool(self.view.all_tasks)

    def export_json(self, path: str | Path) -> bool:
        if not self.can_export():
            self.notifications.error("No tasks to export.")
            return False
        try:
            count = self.exporter.export_json(path)
        except (OSError, SQLAlchemyError) as exc:
            logger.exception("JSON export failed")
            self.notifications.error(f"Failed to export: {exc}")
            return False
        self.notifications.success(f"Successfully exported {count} tasks to JSON!")
        return True

    def export_csv(self, path: str | Path) -> bool:
        try:
            count = self.exporter.export_csv(path)
        except (OSError, SQLAlchemyError) as exc:
            logger.exception("CSV export failed")
            self.notifications.error(f"Failed to export: {exc}")
            return False
        self.notifications.success(f"Successfully exported {count} tasks to CSV!")
        return True

    def export_backup(self, path: str | Path) -> bool:
        try:
            task_count, category_count = self.exporter.export_backup(path)
        except (OSError, SQLAlchemyError) as exc:
            logger.exception("Backup export failed")
            self.notifications.error(f"Failed to create backup: {exc}")
            return False
        self.notifications.success(
            f"Successfully created backup with {task_count} tasks and {category_count} categories!"
        )
        return True

    # ---------- import ----------
    def import_json(self, path: str | Path, overwrite_existing: bool = False) -> None:
        self._confirm_import(
            "Import Tasks",
            self._import_prompt(overwrite_existing),
            lambda: self.importer.import_json_file(path, overwrite_existing),
        )

    def import_csv(self, path: str | Path, overwrite_existing: bool = False) -> None:
        self._confirm_import(
            "Import Tasks",
            self._import_prompt(overwrite_existing),
            lambda: self.importer.import_csv_file(path, overwrite_existing),
        )

    def restore_backup(self, path: str | Path, overwrite_existing: bool = False) -> None:
        self._confirm_import(
            "Restore Backup",
            "This will restore tasks and categories from the backup file. Continue?",
            lambda: self.importer.restore_backup_file(path, overwrite_existing),
            restore=True,
        )

    def _import_prompt(self, overwrite_existing: bool) -> str:
        if overwrite_existing:
            return "This will add tasks from the file and overwrite tasks with matching ids. Continue?"
        return "This will add tasks from the file. Existing tasks will be preserved. Continue?"

    def _confirm_import(self, title: str, message: str, run: Callable[[], ImportResult], *, restore: bool = False) -> None:
        def _on_result(confirmed: bool) -> None:
            if not confirmed:
                logger.info("%s cancelled by user", title)
                return
            self._report_import(run(), restore=restore)

        self.confirmation.ask(title, message, _on_result)

    def _report_import(self, result: ImportResult, *, restore: bool) -> None:
        if not result.success:
            verb = "Restore" if restore else "Import"
            self.notifications.error(f"{verb} failed: {result.message}")
            return
        if restore:
            text = (
                f"Successfully restored {result.imported_task_count} tasks "
                f"and {result.imported_category_count} categories!"
            )
            self.reload_categories()
        else:
            text = f"Successfully imported {result.imported_task_count} tasks!"
        if result.skipped_task_count:
            text += f" {result.skipped_task_count} skipped."
        self.notifications.success(text)
        self.reload_tasks()


__all__ = ["TaskBoard", "TaskForm", "TASK_NOT_FOUND"]
