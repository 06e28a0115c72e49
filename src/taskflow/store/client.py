# src/taskflow/store/client.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.errors import ConfigurationError, RemoteCallFailure
from ..core.ports import Record, RecordId, WhereCondition

logger = logging.getLogger(__name__)


def _make_timeout(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s)


class RecordStoreClient:
    """
    Async HTTP client for the hosted record store.

    The client is created once in the composition root and passed to every
    repository. It never retries: a failed call raises RemoteCallFailure and
    the caller decides what to report.
    """

    def __init__(
        self,
        *,
        base_url: str,
        project_id: str,
        public_key: str,
        timeout: httpx.Timeout | float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not project_id or not project_id.strip():
            raise ConfigurationError("Record store project id is not set. Set TASKFLOW_PROJECT_ID in your .env.")
        if not public_key or not public_key.strip():
            raise ConfigurationError("Record store public key is not set. Set TASKFLOW_PUBLIC_KEY in your .env.")
        if not base_url or not base_url.strip():
            raise ConfigurationError("Record store base URL is not set. Set TASKFLOW_API_BASE_URL in your .env.")

        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "X-Project-Id": project_id.strip(),
                "X-Public-Key": public_key.strip(),
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Any, *, transport: httpx.AsyncBaseTransport | None = None) -> RecordStoreClient:
        return cls(
            base_url=str(getattr(settings, "api_base_url", "") or ""),
            project_id=str(getattr(settings, "project_id", "") or ""),
            public_key=str(getattr(settings, "public_key", "") or ""),
            timeout=_make_timeout(
                float(getattr(settings, "connect_timeout_seconds", 5.0)),
                float(getattr(settings, "read_timeout_seconds", 20.0)),
            ),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---- low-level helpers ----

    async def _call(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteCallFailure(f"{method} {url} failed: {e.__class__.__name__}") from e

        if resp.status_code >= 400:
            raise RemoteCallFailure(
                f"{method} {url} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            body = resp.json()
        except ValueError as e:
            raise RemoteCallFailure(f"{method} {url} returned a non-JSON body") from e

        if not isinstance(body, dict):
            raise RemoteCallFailure(f"{method} {url} returned unexpected payload type {type(body).__name__}")

        logger.debug("%s %s -> %s", method, url, resp.status_code)
        return body

    @staticmethod
    def _records_url(table: str) -> str:
        return f"/tables/{table}/records"

    # ---- public API ----

    async def fetch_records(
        self,
        table: str,
        *,
        fields: list[str],
        where: list[WhereCondition] | None = None,
        where_groups: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"fields": list(fields)}
        if where:
            payload["where"] = where
        if where_groups:
            payload["whereGroups"] = where_groups
        return await self._call("POST", f"{self._records_url(table)}/query", json=payload)

    async def get_record_by_id(self, table: str, record_id: RecordId, *, fields: list[str]) -> dict[str, Any]:
        return await self._call(
            "GET",
            f"{self._records_url(table)}/{record_id}",
            params={"fields": ",".join(fields)},
        )

    async def create_record(self, table: str, records: list[Record]) -> dict[str, Any]:
        return await self._call("POST", self._records_url(table), json={"records": records})

    async def update_record(self, table: str, records: list[Record]) -> dict[str, Any]:
        return await self._call("PATCH", self._records_url(table), json={"records": records})

    async def delete_record(self, table: str, record_ids: list[RecordId]) -> dict[str, Any]:
        return await self._call("DELETE", self._records_url(table), json={"RecordIds": list(record_ids)})
