# src/taskflow/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The engine depends on Protocols instead of concrete implementations.
This keeps the record store backend swappable and makes testing easier.
"""

from typing import Any, Protocol

Record = dict[str, Any]
# Flat field map as returned by the record store: {"Id": 1, "title": "...", ...}.

RecordId = int | str

WhereCondition = dict[str, Any]
# {"fieldName": "title", "operator": "Contains" | "ExactMatch", "values": [...]}


class RecordStore(Protocol):
    """Generic CRUD API over named tables (hosted record store)."""

    async def fetch_records(
            self,
            table: str,
            *,
            fields: list[str],
            where: list[WhereCondition] | None = None,
            where_groups: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]: ...

    async def get_record_by_id(
            self, table: str, record_id: RecordId, *, fields: list[str]
    ) -> dict[str, Any]: ...

    async def create_record(self, table: str, records: list[Record]) -> dict[str, Any]: ...
    async def update_record(self, table: str, records: list[Record]) -> dict[str, Any]: ...
    async def delete_record(self, table: str, record_ids: list[RecordId]) -> dict[str, Any]: ...

    async def aclose(self) -> None: ...


class Notifier(Protocol):
    """
    User-visible message channel (toasts in a GUI, printed notices in the console).

    Implementations must not raise.
    """

    def success(self, text: str) -> None: ...
    def error(self, text: str) -> None: ...


class TaskRepo(Protocol):
    async def fetch_all(
            self,
            *,
            where: list[WhereCondition] | None = None,
            where_groups: list[dict[str, Any]] | None = None,
    ) -> list[Any]: ...

    async def get(self, task_id: RecordId) -> Any | None: ...
    async def create(self, fields: Any) -> Any | None: ...
    async def update(self, task_id: RecordId, fields: Any, *, require_title: bool = True) -> Any | None: ...
    async def delete(self, *task_ids: RecordId) -> bool: ...


class CategoryRepo(Protocol):
    async def fetch_all(self) -> list[Any]: ...
    def builtin_categories(self) -> list[Any]: ...
