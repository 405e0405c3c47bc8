"""
Household Chores — Store call policy.

Every round-trip to the backing store goes through ``call_store``: it is
bounded by STORE_TIMEOUT_SECONDS and retried at most STORE_RETRIES times on
transient failures. Permanent store errors and domain errors pass through
untouched.

Inserts go through ``insert_row``, which makes a retried insert land on the
same row instead of creating a second one.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import TYPE_CHECKING, Awaitable, Callable, TypeVar

from src.core.errors import StoreTimeout, TransientError
from src.ports.store_port import StoreConflictError, TransientStoreError

if TYPE_CHECKING:
    from src.ports.store_port import StorePort

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_store(
    operation: Callable[[], Awaitable[T]],
    *,
    what: str,
    timeout: float | None = None,
    retries: int | None = None,
) -> T:
    """Run one store operation under the timeout/retry policy.

    Args:
        operation: Zero-argument callable returning a fresh awaitable on each
            call (a coroutine cannot be awaited twice).
        what: Short description for logs, e.g. "insert chore".
        timeout: Seconds per attempt. Defaults to settings.
        retries: Extra attempts after the first. Defaults to settings.

    Raises:
        StoreTimeout: every attempt timed out (the last one is the cause).
        TransientError: the last attempt failed with a transient store error.
    """
    if timeout is None or retries is None:
        from src.config import settings

        timeout = settings.STORE_TIMEOUT_SECONDS if timeout is None else timeout
        retries = settings.STORE_RETRIES if retries is None else retries

    attempt = 0
    while True:
        attempt += 1
        try:
            return await asyncio.wait_for(operation(), timeout=timeout)
        except asyncio.TimeoutError as exc:
            if attempt > retries:
                logger.error("Store call '%s' timed out after %d attempt(s)", what, attempt)
                raise StoreTimeout(f"{what} timed out after {timeout:g}s") from exc
            logger.warning("Store call '%s' timed out, retrying", what)
        except TransientStoreError as exc:
            if attempt > retries:
                logger.error("Store call '%s' failed after %d attempt(s): %s", what, attempt, exc)
                raise TransientError(f"{what} failed: {exc}") from exc
            logger.warning("Store call '%s' failed (%s), retrying", what, exc)


async def insert_row(store: StorePort, table: str, row: dict, *, what: str) -> dict:
    """Insert one row under ``call_store`` so that a retry cannot duplicate it.

    The id is generated here rather than by the store. If an attempt commits
    but its answer is lost, the retry collides with that id; the row is then
    read back and returned as the result.
    """
    row = dict(row)
    row.setdefault("id", str(uuid.uuid4()))
    try:
        rows = await call_store(lambda: store.insert(table, [row]), what=what)
    except StoreConflictError:
        existing = await call_store(
            lambda: store.select(table, {"id": row["id"]}), what=f"{what} (read back)",
        )
        if not existing:
            raise
        logger.warning("Store call '%s' had already committed; using row %s", what, row["id"])
        return existing[0]
    return rows[0]
