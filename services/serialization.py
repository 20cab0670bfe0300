"""Text encoders/decoders for task exchange files.

Three formats are supported:

* JSON - an array of task objects;
* CSV - header ``Id,Title,Description,IsCompleted,CreatedAt,CompletedAt,CategoryId,Priority``
  with Title/Description always quoted;
* backup - a JSON envelope ``{version, exportDate, todos, categories}``.

A document that is malformed as a whole raises :class:`core.errors.DecodeError`.
Single malformed rows are skipped and counted in :class:`Decoded.skipped`.
"""
from __future__ import annotations

import csv
import io
import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, Iterable, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as SchemaError

from core.errors import DecodeError
from core.log import get_logger
from core.priorities import DEFAULT_PRIORITY, Priority, normalize_priority, parse_priority
from core.settings import VIEW
from models.category import DEFAULT_COLOR, Category
from models.task import Task
from utils.datetime_utils import format_timestamp, local_now, parse_timestamp, strip_tz

logger = get_logger("serialization")

CSV_HEADER = "Id,Title,Description,IsCompleted,CreatedAt,CompletedAt,CategoryId,Priority"
CSV_MIN_FIELDS = 5
BACKUP_VERSION = VIEW.backup_version

T = TypeVar("T")

_LINE_BREAK = re.compile(r"\r?\n")


# ---------- Exchange schemas ----------
class TaskRecord(BaseModel):
    """A task as it travels through export files."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int = 0
    title: str
    description: str = ""
    is_completed: bool = Field(default=False, alias="isCompleted")
    created_at: datetime = Field(default_factory=local_now, alias="createdAt")
    completed_at: Optional[datetime] = Field(default=None, alias="completedAt")
    category_id: Optional[int] = Field(default=None, alias="categoryId")
    priority: Priority = DEFAULT_PRIORITY

    @field_validator("id", mode="before")
    @classmethod
    def _id_or_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("description", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("priority", mode="before")
    @classmethod
    def _lenient_priority(cls, value: Any) -> Priority:
        return normalize_priority(value)

    @field_validator("created_at", "completed_at", mode="after")
    @classmethod
    def _naive(cls, value: Optional[datetime]) -> Optional[datetime]:
        return strip_tz(value)

    @classmethod
    def from_task(cls, task: Task) -> "TaskRecord":
        return cls(
            id=task.id or 0,
            title=task.title,
            description=task.description or "",
            is_completed=task.is_completed,
            created_at=task.created_at,
            completed_at=task.completed_at,
            category_id=task.category_id,
            priority=task.priority,
        )


class CategoryRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int = 0
    name: str
    color: str = DEFAULT_COLOR

    @classmethod
    def from_category(cls, category: Category) -> "CategoryRecord":
        return cls(id=category.id or 0, name=category.name, color=category.color)


class BackupData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version: str = BACKUP_VERSION
    export_date: datetime = Field(default_factory=local_now, alias="exportDate")
    todos: List[TaskRecord] = Field(default_factory=list)
    categories: List[CategoryRecord] = Field(default_factory=list)


class _BackupEnvelope(BaseModel):
    # Rows stay raw so one bad entry does not reject the whole envelope.
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    version: str
    export_date: Optional[datetime] = Field(default=None, alias="exportDate")
    todos: Optional[List[Any]] = None
    categories: Optional[List[Any]] = None


@dataclass
class Decoded(Generic[T]):
    items: List[T] = field(default_factory=list)
    skipped: int = 0

    @property
    def total(self) -> int:
        return len(self.items) + self.skipped


@dataclass
class BackupContents:
    version: str
    export_date: Optional[datetime]
    tasks: Decoded[TaskRecord]
    categories: Decoded[CategoryRecord]


TaskLike = Union[Task, TaskRecord]


def _as_record(task: TaskLike) -> TaskRecord:
    return task if isinstance(task, TaskRecord) else TaskRecord.from_task(task)


def _dump(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)


def _load(text: str, message: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"{message}: {exc.msg} (line {exc.lineno})") from exc


def _validate_rows(model: type[BaseModel], rows: Iterable[Any]) -> Decoded:
    result: Decoded = Decoded()
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            result.skipped += 1
            logger.warning("Skipping entry %d: not an object", index)
            continue
        try:
            result.items.append(model.model_validate(row))
        except SchemaError as exc:
            result.skipped += 1
            logger.warning("Skipping entry %d: %s", index, exc.errors()[0].get("msg"))
    return result


# ---------- JSON ----------
def encode_tasks_json(tasks: Iterable[TaskLike]) -> str:
    records = [_as_record(t).model_dump(mode="json", by_alias=True) for t in tasks]
    return _dump(records)


def decode_tasks_json(text: str) -> Decoded[TaskRecord]:
    data = _load(text, "Invalid JSON file format")
    if not isinstance(data, list):
        raise DecodeError("Invalid JSON file format")
    return _validate_rows(TaskRecord, data)


# ---------- CSV ----------
def _escape(value: Optional[str]) -> str:
    if not value:
        return ""
    return value.replace('"', '""')


def _csv_line(task: TaskRecord) -> str:
    return ",".join(
        [
            str(task.id or 0),
            f'"{_escape(task.title)}"',
            f'"{_escape(task.description)}"',
            "True" if task.is_completed else "False",
            format_timestamp(task.created_at),
            format_timestamp(task.completed_at),
            "" if task.category_id is None else str(task.category_id),
            str(int(task.priority)),
        ]
    )


def encode_tasks_csv(tasks: Iterable[TaskLike]) -> str:
    lines = [CSV_HEADER]
    lines.extend(_csv_line(_as_record(t)) for t in tasks)
    return "\n".join(lines) + "\n"


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"Not a boolean: {value!r}")


def _parse_optional_int(value: str) -> Optional[int]:
    text = value.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def parse_csv_row(parts: List[str]) -> Optional[TaskRecord]:
    """Build a record from one CSV row, ``None`` if the row is unusable."""
    if len(parts) < CSV_MIN_FIELDS:
        return None
    try:
        created_at = parse_timestamp(parts[4])
        if created_at is None:
            return None
        completed_at = parse_timestamp(parts[5]) if len(parts) > 5 else None
        priority = parse_priority(parts[7]) if len(parts) > 7 else None
        return TaskRecord(
            id=_parse_optional_int(parts[0]) or 0,
            title=parts[1],
            description=parts[2],
            is_completed=_parse_bool(parts[3]),
            created_at=created_at,
            completed_at=completed_at,
            category_id=_parse_optional_int(parts[6]) if len(parts) > 6 else None,
            priority=priority if priority is not None else DEFAULT_PRIORITY,
        )
    except (ValueError, SchemaError):
        return None


def _read_row(chunk: str) -> List[str]:
    return next(csv.reader(io.StringIO(chunk), delimiter=",", quotechar='"', doublequote=True), [])


def _quote_open(chunk: str) -> bool:
    return chunk.count('"') % 2 == 1


def split_csv_rows(text: str) -> List[Optional[List[str]]]:
    """Quote-aware split: commas, newlines and doubled quotes inside quotes are data.

    A quoted field may continue on the next physical line, but never into a
    line that reads as a complete row by itself. A row whose quote never
    closes comes back as ``None`` so the caller can skip it alone.
    """
    lines = _LINE_BREAK.split(text)
    rows: List[Optional[List[str]]] = []
    index = 0
    while index < len(lines):
        chunk = lines[index]
        index += 1
        while _quote_open(chunk) and index < len(lines) and parse_csv_row(_read_row(lines[index])) is None:
            chunk += "\n" + lines[index]
            index += 1
        rows.append(None if _quote_open(chunk) else _read_row(chunk))
    return rows


def decode_tasks_csv(text: str) -> Decoded[TaskRecord]:
    try:
        rows = split_csv_rows(text)
    except csv.Error as exc:
        raise DecodeError(f"CSV file is empty or invalid: {exc}") from exc
    rows = [parts for parts in rows if parts is None or any(p.strip() for p in parts)]
    if len(rows) < 2:
        raise DecodeError("CSV file is empty or invalid")

    result: Decoded[TaskRecord] = Decoded()
    for number, parts in enumerate(rows[1:], start=2):
        record = parse_csv_row(parts) if parts is not None else None
        if record is None:
            result.skipped += 1
            reason = "unclosed quote" if parts is None else f"{len(parts)} fields"
            logger.warning("Skipping CSV row %d: %s", number, reason)
            continue
        result.items.append(record)
    return result


# ---------- Backup ----------
def encode_backup(
    tasks: Iterable[TaskLike],
    categories: Iterable[Category],
    *,
    export_date: Optional[datetime] = None,
) -> str:
    backup = BackupData(
        version=BACKUP_VERSION,
        export_date=export_date or local_now(),
        todos=[_as_record(t) for t in tasks],
        categories=[CategoryRecord.from_category(c) for c in categories],
    )
    return _dump(backup.model_dump(mode="json", by_alias=True))


def decode_backup(text: str) -> BackupContents:
    data = _load(text, "Invalid backup file format")
    if not isinstance(data, dict):
        raise DecodeError("Invalid backup file format")
    try:
        envelope = _BackupEnvelope.model_validate(data)
    except SchemaError as exc:
        raise DecodeError(f"Invalid backup file format: {exc.errors()[0].get('msg')}") from exc
    return BackupContents(
        version=envelope.version,
        export_date=strip_tz(envelope.export_date),
        tasks=_validate_rows(TaskRecord, envelope.todos or []),
        categories=_validate_rows(CategoryRecord, envelope.categories or []),
    )


__all__ = [
    "BACKUP_VERSION",
    "BackupContents",
    "BackupData",
    "CSV_HEADER",
    "CategoryRecord",
    "Decoded",
    "TaskRecord",
    "decode_backup",
    "decode_tasks_csv",
    "decode_tasks_json",
    "encode_backup",
    "encode_tasks_csv",
    "encode_tasks_json",
    "parse_csv_row",
    "split_csv_rows",
]
