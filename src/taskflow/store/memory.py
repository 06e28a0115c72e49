# src/taskflow/store/memory.py

from __future__ import annotations

import copy
import itertools
import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from ..core.ports import Record, RecordId, WhereCondition

logger = logging.getLogger(__name__)


def _matches(record: Record, cond: WhereCondition) -> bool:
    field_name = cond.get("fieldName")
    op = cond.get("operator", "ExactMatch")
    values = cond.get("values") or []
    raw = record.get(str(field_name))
    if isinstance(raw, dict):
        raw = raw.get("Id")
    value = "" if raw is None else str(raw)

    if op == "Contains":
        low = value.lower()
        return any(str(v).lower() in low for v in values)
    if op == "ExactMatch":
        return any(str(v) == value for v in values)

    logger.debug("Unsupported where operator %r, treating as no match", op)
    return False


def _matches_group(record: Record, group: dict[str, Any]) -> bool:
    conditions: list[WhereCondition] = []
    for sub in group.get("subGroups") or []:
        conditions.extend(sub.get("conditions") or [])
    if not conditions:
        return True
    if str(group.get("operator", "AND")).upper() == "OR":
        return any(_matches(record, c) for c in conditions)
    return all(_matches(record, c) for c in conditions)


class InMemoryRecordStore:
    """
    Record store kept in process memory.

    Used for demo runs without a configured backend (TASKFLOW_OFFLINE=1) and by
    the test suite. Response shapes match the hosted API.
    """

    def __init__(self, tables: dict[str, list[Record]] | None = None) -> None:
        self._tables: dict[str, dict[RecordId, Record]] = {}
        self._ids = itertools.count(1)
        for table, records in (tables or {}).items():
            for rec in records:
                self._insert(table, rec)

    def _insert(self, table: str, fields: Record) -> Record:
        rows = self._tables.setdefault(table, {})
        rec = copy.deepcopy(fields)
        rec_id = rec.get("Id")
        if rec_id is None:
            rec_id = next(self._ids)
            rec["Id"] = rec_id
        now = datetime.now(UTC).isoformat()
        rec.setdefault("CreatedOn", now)
        rec.setdefault("ModifiedOn", now)
        rows[rec_id] = rec
        return copy.deepcopy(rec)

    def rows(self, table: str) -> list[Record]:
        return [copy.deepcopy(r) for r in self._tables.get(table, {}).values()]

    @staticmethod
    def _project(record: Record, fields: list[str]) -> Record:
        if not fields:
            return copy.deepcopy(record)
        return {f: copy.deepcopy(record[f]) for f in fields if f in record}

    async def fetch_records(
        self,
        table: str,
        *,
        fields: list[str],
        where: list[WhereCondition] | None = None,
        where_groups: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        out: list[Record] = []
        for rec in self._tables.get(table, {}).values():
            if where and not all(_matches(rec, c) for c in where):
                continue
            if where_groups and not all(_matches_group(rec, g) for g in where_groups):
                continue
            out.append(self._project(rec, fields))
        return {"success": True, "data": out}

    async def get_record_by_id(self, table: str, record_id: RecordId, *, fields: list[str]) -> dict[str, Any]:
        rec = self._tables.get(table, {}).get(record_id)
        if rec is None:
            return {"success": False, "data": None}
        return {"success": True, "data": self._project(rec, fields)}

    async def create_record(self, table: str, records: list[Record]) -> dict[str, Any]:
        results = []
        for fields in records:
            fields = {k: v for k, v in fields.items() if k != "Id"}
            results.append({"success": True, "data": self._insert(table, fields)})
        return {"success": True, "results": results}

    async def update_record(self, table: str, records: list[Record]) -> dict[str, Any]:
        rows = self._tables.get(table, {})
        results = []
        for fields in records:
            rec = rows.get(fields.get("Id"))  # type: ignore[arg-type]
            if rec is None:
                results.append(
                    {"success": False, "errors": [{"fieldLabel": "Id", "message": "Record does not exist"}]}
                )
                continue
            rec.update(copy.deepcopy(fields))
            rec["ModifiedOn"] = datetime.now(UTC).isoformat()
            results.append({"success": True, "data": copy.deepcopy(rec)})
        return {"success": True, "results": results}

    async def delete_record(self, table: str, record_ids: list[RecordId]) -> dict[str, Any]:
        rows = self._tables.get(table, {})
        results = [{"success": rows.pop(rid, None) is not None} for rid in record_ids]
        return {"success": True, "results": results}

    async def aclose(self) -> None:
        return


def demo_store(*, task_table: str = "task", category_table: str = "category") -> InMemoryRecordStore:
    """In-memory store seeded with the four sample categories and three sample tasks."""
    today = datetime.now(UTC).date()

    def day(offset: int) -> str:
        return (today + timedelta(days=offset)).isoformat()

    categories = [
        {"Id": "design", "Name": "Design", "color": "bg-purple-500"},
        {"Id": "development", "Name": "Development", "color": "bg-blue-500"},
        {"Id": "management", "Name": "Management", "color": "bg-green-500"},
        {"Id": "marketing", "Name": "Marketing", "color": "bg-pink-500"},
    ]
    tasks = [
        {
            "Name": "Design new dashboard layout",
            "title": "Design new dashboard layout",
            "description": "Create wireframes and mockups for the analytics dashboard redesign",
            "completed": "",
            "due_date": day(2),
            "priority": "high",
            "category": "design",
            "Tags": "UI/UX,Design",
        },
        {
            "Name": "Review team performance metrics",
            "title": "Review team performance metrics",
            "description": "Analyze Q4 performance data and prepare monthly report",
            "completed": "completed",
            "due_date": day(-1),
            "priority": "medium",
            "category": "management",
            "Tags": "Analytics,Reports",
        },
        {
            "Name": "Update project documentation",
            "title": "Update project documentation",
            "description": "Document new API endpoints and update integration guides",
            "completed": "",
            "due_date": day(1),
            "priority": "low",
            "category": "development",
            "Tags": "Documentation,API",
        },
    ]
    return InMemoryRecordStore({category_table: categories, task_table: tasks})
