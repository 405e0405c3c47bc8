"""
Household Chores — Mutation tracking for optimistic views.

A view may show the expected result of a mutation before the store has
confirmed it. Each mutation is tracked as PENDING, then CONFIRMED or FAILED,
so the caller can always reconcile: confirmed changes are kept, failed ones
are rolled back to the last confirmed state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MutationState(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class Mutation:
    label: str                          # e.g. "complete chore 42"
    state: MutationState = MutationState.PENDING
    result: Any = None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is MutationState.CONFIRMED


async def run_mutation(label: str, operation: Awaitable[Any]) -> Mutation:
    """Await ``operation`` and record its outcome. Never raises."""
    mutation = Mutation(label=label)
    try:
        mutation.result = await operation
    except Exception as exc:
        logger.warning("Mutation '%s' failed: %s", label, exc)
        mutation.state = MutationState.FAILED
        mutation.error = exc
    else:
        mutation.state = MutationState.CONFIRMED
    return mutation


class OptimisticState(Generic[T]):
    """A value with one confirmed version and an optimistic overlay.

    ``current`` is what a view renders: the optimistic value while a
    mutation is pending, otherwise the confirmed one.
    """

    def __init__(self, confirmed: T) -> None:
        self._confirmed = confirmed
        self._optimistic: T | None = None
        self._pending = False

    @property
    def confirmed(self) -> T:
        return self._confirmed

    @property
    def current(self) -> T:
        return self._optimistic if self._pending else self._confirmed

    @property
    def pending(self) -> bool:
        return self._pending

    async def apply(
        self,
        label: str,
        patch: Callable[[T], T],
        operation: Awaitable[Any],
        reconcile: Callable[[T, Any], T] | None = None,
    ) -> Mutation:
        """Show ``patch(confirmed)`` while ``operation`` runs, then settle.

        Args:
            patch: Builds the expected value from the confirmed one.
            reconcile: Builds the new confirmed value from the optimistic one
                and the operation's result. Defaults to keeping the patch.
        """
        self._optimistic = patch(self._confirmed)
        self._pending = True
        mutation = await run_mutation(label, operation)
        if mutation.succeeded:
            self._confirmed = (
                reconcile(self._optimistic, mutation.result) if reconcile else self._optimistic
            )
        else:
            logger.info("Rolling back optimistic change '%s'", label)
        self._optimistic = None
        self._pending = False
        return mutation

    def replace(self, confirmed: T) -> None:
        """Adopt an authoritative value, e.g. after a fresh board build."""
        self._confirmed = confirmed
