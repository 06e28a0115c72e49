# src/taskflow/tasks/mapper.py

"""
Record <-> domain translation.

The record store keeps a few fields in string form:
- `completed` is a string that contains "completed" when the task is done
- `Tags` is a comma-joined string

Those encodings stay in this module; everything above it sees typed values.
Reading never raises: unknown or missing fields fall back to defaults.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, date, datetime
from typing import Any

from ..core.ports import Record, RecordId
from .task_models import Category, CategoryFields, Priority, Task, TaskFields

logger = logging.getLogger(__name__)

COMPLETED_MARKER = "completed"
DEFAULT_CATEGORY_COLOR = "bg-blue-500"

AUDIT_FIELDS = ["Owner", "CreatedOn", "CreatedBy", "ModifiedOn", "ModifiedBy"]
TASK_FIELDS = [
    "Id", "Name", "Tags", *AUDIT_FIELDS,
    "title", "description", "completed", "due_date", "priority", "category",
]
CATEGORY_FIELDS = ["Id", "Name", "Tags", *AUDIT_FIELDS, "color"]


# ---- field codecs ----

def decode_completed(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (list, tuple)):
        raw = ",".join(str(x) for x in raw)
    if not isinstance(raw, str):
        return False
    return COMPLETED_MARKER in raw


def encode_completed(completed: bool) -> str:
    return COMPLETED_MARKER if completed else ""


def decode_tags(raw: Any) -> list[str]:
    if isinstance(raw, (list, tuple)):
        parts: Iterable[Any] = raw
    elif isinstance(raw, str):
        parts = raw.split(",")
    else:
        return []
    out: list[str] = []
    for p in parts:
        if not isinstance(p, str):
            continue
        p = p.strip()
        if p:
            out.append(p)
    return out


def encode_tags(tags: Iterable[str]) -> str:
    return ",".join(t for t in tags if t)


def parse_datetime(raw: Any) -> datetime | None:
    """Parse "YYYY-MM-DD" or an ISO timestamp into an aware UTC datetime."""
    if isinstance(raw, datetime):
        return raw if raw.tzinfo else raw.replace(tzinfo=UTC)
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day, tzinfo=UTC)
    if not isinstance(raw, str) or not raw.strip():
        return None
    s = raw.strip()
    try:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable date value %r", s)
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=UTC)


def encode_date(value: date | datetime) -> str:
    if isinstance(value, datetime):
        value = value.date()
    return value.strftime("%Y-%m-%d")


def decode_reference(raw: Any) -> str | None:
    """A lookup field may come back as a bare id or as {"Id": .., "Name": ..}."""
    if isinstance(raw, dict):
        raw = raw.get("Id", raw.get("id"))
    if raw is None:
        return None
    s = str(raw).strip()
    return s or None


# ---- tasks ----

def record_to_task(record: Record, *, default_category: str, now: datetime | None = None) -> Task:
    if now is None:
        now = datetime.now(UTC)

    title = record.get("title") or record.get("Name") or ""
    description = record.get("description") or ""

    return Task(
        id=record.get("Id"),  # type: ignore[arg-type]
        title=str(title),
        description=str(description),
        completed=decode_completed(record.get("completed")),
        created_at=parse_datetime(record.get("CreatedOn")) or now,
        due_date=parse_datetime(record.get("due_date")) or now,
        priority=Priority.from_remote(record.get("priority")),
        category_id=decode_reference(record.get("category")) or default_category,
        tags=decode_tags(record.get("Tags")),
    )


def task_fields_to_record(fields: TaskFields, *, record_id: RecordId | None = None) -> Record:
    """
    Build the writable field map for create/update.

    `Name` mirrors `title` (the table keeps both).
    """
    record: Record = {}
    if record_id is not None:
        record["Id"] = record_id

    record.update(
        {
            "Name": fields.title,
            "Tags": encode_tags(fields.tags),
            "title": fields.title,
            "description": fields.description or "",
            "completed": encode_completed(fields.completed),
            "due_date": encode_date(fields.due_date) if fields.due_date else "",
            "priority": str(fields.priority),
        }
    )

    if fields.category_id:
        record["category"] = fields.category_id

    return record


def task_to_fields(task: Task, **overrides: Any) -> TaskFields:
    """The full current field set of a task, with optional overrides."""
    values: dict[str, Any] = {
        "title": task.title,
        "description": task.description,
        "completed": task.completed,
        "due_date": task.due_date.date(),
        "priority": task.priority,
        "category_id": task.category_id,
        "tags": tuple(task.tags),
    }
    values.update(overrides)
    return TaskFields(**values)


# ---- categories ----

def record_to_category(record: Record) -> Category:
    name = record.get("Name") or record.get("name") or ""
    color = record.get("color") or DEFAULT_CATEGORY_COLOR
    return Category(
        id=decode_reference(record.get("Id", record.get("id"))) or "",
        name=str(name),
        color=str(color),
    )


def category_fields_to_record(fields: CategoryFields, *, record_id: RecordId | None = None) -> Record:
    record: Record = {}
    if record_id is not None:
        record["Id"] = record_id
    record.update(
        {
            "Name": fields.name,
            "Tags": encode_tags(fields.tags),
            "color": fields.color or DEFAULT_CATEGORY_COLOR,
        }
    )
    return record
