# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from taskflow.core.errors import RemoteCallFailure
from taskflow.core.ports import Record, RecordId
from taskflow.store.memory import InMemoryRecordStore


@dataclass(slots=True)
class RecordingNotifier:
    """Captures user-visible notices for assertions."""

    successes: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def success(self, text: str) -> None:
        self.successes.append(text)

    def error(self, text: str) -> None:
        self.errors.append(text)


class FakeRecordStore(InMemoryRecordStore):
    """
    In-memory store with call recording and failure injection.

    - `fail_ops`: operation names that raise RemoteCallFailure
    - `reject_ops`: operation name -> field errors returned with zero successes
    """

    def __init__(self, tables: dict[str, list[Record]] | None = None) -> None:
        super().__init__(tables)
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.fail_ops: set[str] = set()
        self.reject_ops: dict[str, list[dict[str, str]]] = {}

    def _enter(self, op: str, table: str, **kwargs: Any) -> None:
        self.calls.append((op, table, kwargs))
        if op in self.fail_ops:
            raise RemoteCallFailure(f"{op} failed (injected)")

    def _rejected(self, op: str) -> dict[str, Any] | None:
        if op not in self.reject_ops:
            return None
        return {"success": True, "results": [{"success": False, "errors": self.reject_ops[op]}]}

    def ops(self, table: str | None = None) -> list[str]:
        return [op for op, t, _ in self.calls if table is None or t == table]

    def mutating_ops(self) -> list[str]:
        return [op for op in self.ops() if op in ("create", "update", "delete")]

    async def fetch_records(self, table, *, fields, where=None, where_groups=None):
        self._enter("fetch", table, where=where, where_groups=where_groups)
        return await super().fetch_records(table, fields=fields, where=where, where_groups=where_groups)

    async def get_record_by_id(self, table, record_id: RecordId, *, fields):
        self._enter("get", table, record_id=record_id)
        return await super().get_record_by_id(table, record_id, fields=fields)

    async def create_record(self, table, records):
        self._enter("create", table, records=records)
        return self._rejected("create") or await super().create_record(table, records)

    async def update_record(self, table, records):
        self._enter("update", table, records=records)
        return self._rejected("update") or await super().update_record(table, records)

    async def delete_record(self, table, record_ids):
        self._enter("delete", table, record_ids=record_ids)
        return await super().delete_record(table, record_ids)


def task_record(title: str, **fields: Any) -> Record:
    rec: Record = {
        "Name": title,
        "title": title,
        "description": "",
        "completed": "",
        "priority": "medium",
        "category": "development",
        "Tags": "",
    }
    rec.update(fields)
    return rec
