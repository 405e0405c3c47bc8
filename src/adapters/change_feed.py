"""In-process change feed — implements ChangeFeedPort.

Views subscribe per household and get called after each mutation so they
can rebuild the board. A failing subscriber is logged and never breaks the
mutation that published the event.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Awaitable, Callable

from src.ports.change_port import ChangeEvent

logger = logging.getLogger(__name__)

Subscriber = Callable[[ChangeEvent], Awaitable[None]]


class LocalChangeFeed:
    """In-memory fan-out implementation of ChangeFeedPort."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Subscriber]] = defaultdict(list)

    def subscribe(self, household_id: str, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for a household; returns an unsubscribe function."""
        self._subscribers[household_id].append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(household_id, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    async def publish(self, event: ChangeEvent) -> None:
        for callback in list(self._subscribers.get(event.household_id, [])):
            try:
                await callback(event)
            except Exception as exc:
                logger.error(
                    "Change subscriber failed for %s %s: %s",
                    event.table, event.record_id, exc,
                )
