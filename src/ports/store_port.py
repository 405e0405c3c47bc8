"""Store port — abstract interface for the backing relational store.

Core modules depend on this protocol, never on a specific provider.

Table-like access with equality filters: a filter value that is a list,
tuple or set means "column IN values". ``order_by`` entries are column
names; a leading ``-`` sorts descending.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence


class StoreError(Exception):
    """Raised when a store operation fails permanently."""


class TransientStoreError(StoreError):
    """Raised when a store operation failed in a way worth retrying."""


class StoreConflictError(StoreError):
    """Raised when an insert or update violates a uniqueness constraint."""


Filters = dict[str, Any]


class StorePort(Protocol):
    """Abstract store interface used by core modules."""

    async def select(
        self,
        table: str,
        filters: Filters | None = None,
        order_by: Sequence[str] = (),
    ) -> list[dict]: ...

    async def insert(self, table: str, rows: list[dict]) -> list[dict]: ...

    async def update(
        self, table: str, values: dict, filters: Filters
    ) -> list[dict]: ...

    async def delete(self, table: str, filters: Filters) -> int: ...
