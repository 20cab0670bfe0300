# taskdesk/services/importer.py
"""Merge decoded exchange files into the task and category tables."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Set

from sqlalchemy.exc import SQLAlchemyError

from core.errors import DecodeError, ValidationError
from core.log import get_logger
from services.categories import CategoryService
from services.serialization import (
    CategoryRecord,
    Decoded,
    TaskRecord,
    decode_backup,
    decode_tasks_csv,
    decode_tasks_json,
)
from services.tasks import TaskService

logger = get_logger("importer")


@dataclass
class ImportResult:
    success: bool
    message: str = ""
    imported_task_count: int = 0
    imported_category_count: int = 0
    total_task_count: int = 0
    skipped_task_count: int = 0

    @classmethod
    def failure(cls, message: str) -> "ImportResult":
        return cls(success=False, message=message)


def _read_text(path: str | Path) -> str:
    # utf-8-sig drops the BOM spreadsheet tools like to prepend.
    return Path(path).read_text(encoding="utf-8-sig")


class ImportService:
    def __init__(self, tasks: TaskService, categories: CategoryService):
        self.tasks = tasks
        self.categories = categories

    # ---------- File entry points ----------
    def import_json_file(self, path: str | Path, overwrite_existing: bool = False) -> ImportResult:
        return self._import_file(path, decode_tasks_json, "Error importing JSON", overwrite_existing)

    def import_csv_file(self, path: str | Path, overwrite_existing: bool = False) -> ImportResult:
        return self._import_file(path, decode_tasks_csv, "Error importing CSV", overwrite_existing)

    def restore_backup_file(self, path: str | Path, overwrite_existing: bool = False) -> ImportResult:
        try:
            text = _read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.exception("Cannot read backup %s", path)
            return ImportResult.failure(f"Error restoring backup: {exc}")
        return self.restore_backup_text(text, overwrite_existing)

    # ---------- Text entry points ----------
    def import_json_text(self, text: str, overwrite_existing: bool = False) -> ImportResult:
        return self._import_text(text, decode_tasks_json, overwrite_existing)

    def import_csv_text(self, text: str, overwrite_existing: bool = False) -> ImportResult:
        return self._import_text(text, decode_tasks_csv, overwrite_existing)

    def restore_backup_text(self, text: str, overwrite_existing: bool = False) -> ImportResult:
        try:
            contents = decode_backup(text)
        except DecodeError as exc:
            logger.warning("Backup rejected: %s", exc)
            return ImportResult.failure(str(exc))

        try:
            imported_categories = self.import_categories(contents.categories.items, overwrite_existing)
            result = self.import_tasks(contents.tasks, overwrite_existing)
        except SQLAlchemyError as exc:
            logger.exception("Backup restore aborted")
            return ImportResult.failure(f"Error restoring backup: {exc}")
        result.imported_category_count = imported_categories
        result.message = (
            f"Restored {result.imported_task_count} of {result.total_task_count} tasks "
            f"and {imported_categories} categories"
        )
        logger.info("Backup %s restored: %s", contents.version, result.message)
        return result

    # ---------- Reconciliation ----------
    def import_categories(self, records: Iterable[CategoryRecord], overwrite_existing: bool = False) -> int:
        imported = 0
        for record in records:
            try:
                existing = self.categories.get(record.id) if record.id else None
                if existing is None:
                    if record.id:
                        self.categories.insert_with_id(record.id, record.name, record.color)
                    else:
                        self.categories.add(record.name, record.color)
                    imported += 1
                elif overwrite_existing:
                    self.categories.update(record.id, record.name, record.color)
                    imported += 1
            except (ValidationError, SQLAlchemyError) as exc:
                logger.warning("Skipping category %r: %s", record.name, exc)
        return imported

    def import_tasks(self, decoded: Decoded[TaskRecord], overwrite_existing: bool = False) -> ImportResult:
        result = ImportResult(
            success=True,
            total_task_count=decoded.total,
            skipped_task_count=decoded.skipped,
        )
        known_categories: Set[int] = {c.id for c in self.categories.list() if c.id is not None}

        for record in decoded.items:
            # Matching uses the identity from the file, before it is discarded.
            original_id = record.id
            category_id = record.category_id if record.category_id in known_categories else None
            fields = dict(
                title=record.title,
                description=record.description,
                is_completed=record.is_completed,
                completed_at=record.completed_at,
                category_id=category_id,
                priority=record.priority,
            )
            try:
                if overwrite_existing and original_id:
                    replaced = self.tasks.replace(original_id, **fields)
                    if replaced is not None:
                        result.imported_task_count += 1
                        continue
                self.tasks.add(created_at=record.created_at, **fields)
                result.imported_task_count += 1
            except (ValidationError, SQLAlchemyError) as exc:
                result.skipped_task_count += 1
                logger.warning("Skipping task %r: %s", record.title[:40], exc)

        if not result.message:
            result.message = f"Imported {result.imported_task_count} of {result.total_task_count} tasks"
        logger.info(result.message)
        return result

    # ------------------------------------------------------------------
    def _import_text(
        self,
        text: str,
        decoder: Callable[[str], Decoded[TaskRecord]],
        overwrite_existing: bool,
    ) -> ImportResult:
        try:
            decoded = decoder(text)
        except DecodeError as exc:
            logger.warning("Import rejected: %s", exc)
            return ImportResult.failure(str(exc))
        try:
            return self.import_tasks(decoded, overwrite_existing)
        except SQLAlchemyError as exc:
            logger.exception("Import aborted")
            return ImportResult.failure(f"Error importing tasks: {exc}")

    def _import_file(
        self,
        path: str | Path,
        decoder: Callable[[str], Decoded[TaskRecord]],
        error_prefix: str,
        overwrite_existing: bool,
    ) -> ImportResult:
        try:
            text = _read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.exception("Cannot read import file %s", path)
            return ImportResult.failure(f"{error_prefix}: {exc}")
        return self._import_text(text, decoder, overwrite_existing)


__all__ = ["ImportResult", "ImportService"]
