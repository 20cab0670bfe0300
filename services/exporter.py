# taskdesk/services/exporter.py
"""Write tasks and categories to exchange files."""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from core.log import get_logger
from services.categories import CategoryService
from services.serialization import encode_backup, encode_tasks_csv, encode_tasks_json
from services.tasks import TaskService
from utils.datetime_utils import local_now

logger = get_logger("exporter")

JSON_FILE_NAME = "todos.json"
CSV_FILE_NAME = "todos.csv"


def suggested_backup_name(now: Optional[datetime] = None) -> str:
    stamp = (now or local_now()).strftime("%Y%m%d_%H%M%S")
    return f"todo_backup_{stamp}.json"


def write_text_atomic(target: str | Path, payload: str) -> Path:
    path = Path(target)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(payload, encoding="utf-8")
        tmp.replace(path)
    finally:
        if tmp.exists():
            try:
                tmp.unlink()
            except OSError:
                pass
    return path


class ExportService:
    def __init__(self, tasks: TaskService, categories: CategoryService):
        self.tasks = tasks
        self.categories = categories

    def export_json(self, path: str | Path) -> int:
        todos = self.tasks.list_all()
        write_text_atomic(path, encode_tasks_json(todos))
        logger.info("Exported %d tasks to JSON %s", len(todos), path)
        return len(todos)

    def export_csv(self, path: str | Path) -> int:
        todos = self.tasks.list_all()
        write_text_atomic(path, encode_tasks_csv(todos))
        logger.info("Exported %d tasks to CSV %s", len(todos), path)
        return len(todos)

    def export_backup(self, path: str | Path) -> Tuple[int, int]:
        todos = self.tasks.list_all()
        categories = self.categories.list()
        write_text_atomic(path, encode_backup(todos, categories))
        logger.info("Backup written to %s: %d tasks, %d categories", path, len(todos), len(categories))
        return len(todos), len(categories)


__all__ = [
    "CSV_FILE_NAME",
    "ExportService",
    "JSON_FILE_NAME",
    "suggested_backup_name",
    "write_text_atomic",
]
