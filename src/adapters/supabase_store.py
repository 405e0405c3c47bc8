"""Supabase store adapter — implements StorePort with the supabase async client.

All Supabase-specific logic lives here. Core modules never import this
directly; they depend on the StorePort protocol.

Failures are classified for the store call policy: timeouts, connection
errors, 408/429, 5xx and PostgREST's own connection errors are transient;
a unique violation (23505) is a conflict; every other error is permanent.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx
from supabase import AsyncClient, PostgrestAPIError, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from src.ports.store_port import (
    Filters,
    StoreConflictError,
    StoreError,
    TransientStoreError,
)

logger = logging.getLogger(__name__)

_TIMEOUT_SECONDS = 10
_UNIQUE_VIOLATION = "23505"
# PostgREST could not reach or time out on the database
_POSTGREST_UNAVAILABLE = {"PGRST000", "PGRST001", "PGRST002", "PGRST003"}


def _apply_filters(query: Any, filters: Filters | None) -> Any:
    """Add equality, IN and IS NULL filters to a query builder."""
    for column, value in (filters or {}).items():
        if isinstance(value, (list, tuple, set, frozenset)):
            query = query.in_(column, list(value))
        elif value is None:
            query = query.is_(column, "null")
        else:
            query = query.eq(column, value)
    return query


def _apply_order(query: Any, order_by: Sequence[str]) -> Any:
    for term in order_by:
        if term.startswith("-"):
            query = query.order(term[1:], desc=True)
        else:
            query = query.order(term, desc=False)
    return query


def _classify(exc: PostgrestAPIError, what: str) -> StoreError:
    code = str(exc.code or "")
    detail = exc.message or str(exc)
    if code == _UNIQUE_VIOLATION or code == "409":
        return StoreConflictError(f"{what} conflict: {detail}")
    if code in ("408", "429") or (len(code) == 3 and code.startswith("5")) \
            or code in _POSTGREST_UNAVAILABLE:
        return TransientStoreError(f"{what} failed: {code} {detail}")
    return StoreError(f"{what} failed: {code} {detail}")


class SupabaseStore:
    """Supabase (PostgREST) implementation of StorePort."""

    def __init__(
        self,
        url: str | None = None,
        key: str | None = None,
        timeout: float = _TIMEOUT_SECONDS,
    ) -> None:
        if url is None or key is None:
            from src.config import settings

            url = settings.SUPABASE_URL if url is None else url
            key = settings.SUPABASE_KEY if key is None else key
        self._url = url.rstrip("/")
        self._key = key
        self._timeout = timeout
        self._client: AsyncClient | None = None

    async def _get_client(self) -> AsyncClient:
        if self._client is None:
            self._client = await acreate_client(
                self._url,
                self._key,
                options=AsyncClientOptions(postgrest_client_timeout=self._timeout),
            )
        return self._client

    async def _execute(self, what: str, query: Any) -> list[dict]:
        try:
            resp = await query.execute()
        except PostgrestAPIError as exc:
            error = _classify(exc, what)
            logger.error("Supabase %s: %s", what, error)
            raise error from exc
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            logger.warning("Supabase %s unreachable: %s", what, exc)
            raise TransientStoreError(f"{what} failed: {exc}") from exc
        return list(resp.data or [])

    async def select(
        self,
        table: str,
        filters: Filters | None = None,
        order_by: Sequence[str] = (),
    ) -> list[dict]:
        client = await self._get_client()
        query = _apply_order(_apply_filters(client.table(table).select("*"), filters), order_by)
        return await self._execute(f"select {table}", query)

    async def insert(self, table: str, rows: list[dict]) -> list[dict]:
        if not rows:
            return []
        client = await self._get_client()
        return await self._execute(f"insert {table}", client.table(table).insert(rows))

    async def update(self, table: str, values: dict, filters: Filters) -> list[dict]:
        if not filters:
            raise StoreError("Refusing to update without filters")
        client = await self._get_client()
        query = _apply_filters(client.table(table).update(values), filters)
        return await self._execute(f"update {table}", query)

    async def delete(self, table: str, filters: Filters) -> int:
        if not filters:
            raise StoreError("Refusing to delete without filters")
        client = await self._get_client()
        query = _apply_filters(client.table(table).delete(), filters)
        return len(await self._execute(f"delete {table}", query))
