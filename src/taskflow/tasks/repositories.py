# src/taskflow/tasks/repositories.py

from __future__ import annotations

"""
Task and category repositories.

Thin façades over the record store:
- map records to domain objects (via mapper.py),
- catch every store failure at this boundary,
- report user-visible messages through the injected Notifier,
- return a failure value (None / False / []) instead of raising.
"""

import logging
from typing import Any

from ..core.notifier import LoggingNotifier
from ..core.ports import Notifier, Record, RecordId, RecordStore, WhereCondition
from . import mapper
from .engine import DEFAULT_CATEGORY_ID
from .task_models import (
    ALL_CATEGORY_ID,
    Category,
    CategoryFields,
    Task,
    TaskFields,
    all_tasks_category,
    builtin_categories,
)

logger = logging.getLogger(__name__)


def _first_written(response: Any) -> tuple[Record | None, list[dict[str, Any]]]:
    """
    Pick the first successful result of a create/update call.

    Returns (record, field_errors). field_errors is only filled when nothing
    was written.
    """
    if not isinstance(response, dict) or not response.get("success"):
        return None, []
    results = response.get("results") or []
    for r in results:
        if isinstance(r, dict) and r.get("success"):
            data = r.get("data")
            return (data if isinstance(data, dict) else {}), []
    errors: list[dict[str, Any]] = []
    if results and isinstance(results[0], dict):
        errors = [e for e in (results[0].get("errors") or []) if isinstance(e, dict)]
    return None, errors


def _any_deleted(response: Any) -> bool:
    if not isinstance(response, dict) or not response.get("success"):
        return False
    return any(isinstance(r, dict) and r.get("success") for r in response.get("results") or [])


class _RecordRepository:
    """Shared create/update/delete plumbing for one table."""

    entity = "record"

    def __init__(self, store: RecordStore, *, table: str, notifier: Notifier | None = None) -> None:
        self._store = store
        self._table = table
        self._notifier: Notifier = notifier or LoggingNotifier()

    def _report_write_failure(self, action: str, errors: list[dict[str, Any]]) -> None:
        if not errors:
            self._notifier.error(f"Failed to {action} {self.entity}")
            return
        for err in errors:
            label = err.get("fieldLabel") or "Field"
            self._notifier.error(f"{label}: {err.get('message') or 'invalid value'}")

    async def _write(self, action: str, record: Record) -> Record | None:
        try:
            if action == "create":
                response = await self._store.create_record(self._table, [record])
            else:
                response = await self._store.update_record(self._table, [record])
        except Exception:
            logger.exception("%s %s failed table=%s", action, self.entity, self._table)
            self._notifier.error(f"Failed to {action} {self.entity}")
            return None

        written, errors = _first_written(response)
        if written is None:
            logger.warning(
                "%s %s: store reported no success table=%s errors=%s",
                action, self.entity, self._table, errors,
            )
            self._report_write_failure(action, errors)
            return None

        self._notifier.success(f"{self.entity.capitalize()} {action}d successfully!")
        return written

    async def _delete(self, ids: tuple[RecordId, ...]) -> bool:
        if not ids:
            return False
        try:
            response = await self._store.delete_record(self._table, list(ids))
        except Exception:
            logger.exception("delete %s failed table=%s ids=%s", self.entity, self._table, ids)
            self._notifier.error(f"Failed to delete {self.entity}")
            return False

        if not _any_deleted(response):
            logger.warning("delete %s: nothing deleted table=%s ids=%s", self.entity, self._table, ids)
            self._notifier.error(f"Failed to delete {self.entity}")
            return False

        self._notifier.success(f"{self.entity.capitalize()} deleted successfully!")
        return True

    async def _fetch(
        self,
        fields: list[str],
        *,
        where: list[WhereCondition] | None = None,
        where_groups: list[dict[str, Any]] | None = None,
    ) -> list[Record] | None:
        """Raw records, or None on failure (already logged, not yet reported)."""
        try:
            response = await self._store.fetch_records(
                self._table, fields=fields, where=where, where_groups=where_groups
            )
        except Exception:
            logger.exception("fetch %s failed table=%s", self.entity, self._table)
            return None
        if not isinstance(response, dict) or not isinstance(response.get("data"), list):
            logger.warning("fetch %s: empty or malformed payload table=%s", self.entity, self._table)
            return None
        return [r for r in response["data"] if isinstance(r, dict)]

    async def _get(self, record_id: RecordId, fields: list[str]) -> Record | None:
        try:
            response = await self._store.get_record_by_id(self._table, record_id, fields=fields)
        except Exception:
            logger.exception("get %s failed table=%s id=%s", self.entity, self._table, record_id)
            self._notifier.error(f"Failed to load {self.entity}")
            return None
        if not isinstance(response, dict) or not isinstance(response.get("data"), dict):
            return None
        return response["data"]


class TaskRepository(_RecordRepository):
    entity = "task"

    def __init__(
        self,
        store: RecordStore,
        *,
        table: str = "task",
        notifier: Notifier | None = None,
        default_category: str = DEFAULT_CATEGORY_ID,
    ) -> None:
        super().__init__(store, table=table, notifier=notifier)
        self._default_category = default_category

    def _to_task(self, record: Record) -> Task:
        return mapper.record_to_task(record, default_category=self._default_category)

    async def fetch_all(
        self,
        *,
        where: list[WhereCondition] | None = None,
        where_groups: list[dict[str, Any]] | None = None,
    ) -> list[Task]:
        records = await self._fetch(mapper.TASK_FIELDS, where=where, where_groups=where_groups)
        if records is None:
            self._notifier.error("Failed to load tasks")
            return []
        return [self._to_task(r) for r in records]

    async def search(self, query: str, category_id: str | None = None) -> list[Task]:
        """Server-side filter: title OR description contains `query`, optional exact category."""
        where: list[WhereCondition] = []
        groups: list[dict[str, Any]] = []

        query = (query or "").strip()
        if query:
            groups.append(
                {
                    "operator": "OR",
                    "subGroups": [
                        {"conditions": [{"fieldName": "title", "operator": "Contains", "values": [query]}]},
                        {"conditions": [{"fieldName": "description", "operator": "Contains", "values": [query]}]},
                    ],
                }
            )

        if category_id and category_id != ALL_CATEGORY_ID:
            where.append({"fieldName": "category", "operator": "ExactMatch", "values": [category_id]})

        return await self.fetch_all(where=where or None, where_groups=groups or None)

    async def get(self, task_id: RecordId) -> Task | None:
        record = await self._get(task_id, mapper.TASK_FIELDS)
        return self._to_task(record) if record is not None else None

    async def create(self, fields: TaskFields) -> Task | None:
        record = mapper.task_fields_to_record(fields.validate())
        written = await self._write("create", record)
        return self._to_task(written) if written is not None else None

    async def update(self, task_id: RecordId, fields: TaskFields, *, require_title: bool = True) -> Task | None:
        checked = fields.validate(require_title=require_title)
        record = mapper.task_fields_to_record(checked, record_id=task_id)
        written = await self._write("update", record)
        return self._to_task(written) if written is not None else None

    async def delete(self, *task_ids: RecordId) -> bool:
        return await self._delete(task_ids)


class CategoryRepository(_RecordRepository):
    entity = "category"

    def __init__(self, store: RecordStore, *, table: str = "category", notifier: Notifier | None = None) -> None:
        super().__init__(store, table=table, notifier=notifier)

    def builtin_categories(self) -> list[Category]:
        return builtin_categories()

    async def fetch_all(self) -> list[Category]:
        """Remote categories with "All Tasks" first; built-ins when the fetch fails."""
        records = await self._fetch(mapper.CATEGORY_FIELDS)
        if records is None:
            self._notifier.error("Failed to load categories, using defaults")
            return self.builtin_categories()

        out = [all_tasks_category()]
        for rec in records:
            cat = mapper.record_to_category(rec)
            if cat.id and cat.id != ALL_CATEGORY_ID:
                out.append(cat)
        return out

    async def get(self, category_id: RecordId) -> Category | None:
        record = await self._get(category_id, mapper.CATEGORY_FIELDS)
        return mapper.record_to_category(record) if record is not None else None

    async def create(self, fields: CategoryFields) -> Category | None:
        written = await self._write("create", mapper.category_fields_to_record(fields.validate()))
        return mapper.record_to_category(written) if written is not None else None

    async def update(self, category_id: RecordId, fields: CategoryFields) -> Category | None:
        record = mapper.category_fields_to_record(fields.validate(), record_id=category_id)
        written = await self._write("update", record)
        return mapper.record_to_category(written) if written is not None else None

    async def delete(self, *category_ids: RecordId) -> bool:
        return await self._delete(category_ids)
