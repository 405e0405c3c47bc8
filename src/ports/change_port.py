"""Change feed port — abstract interface for announcing household changes.

Views subscribe to re-run the board when something changed. The core works
without a feed; it only keeps views fresh.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class ChangeEvent:
    table: str          # "chores" | "chore_assignments" | "machines" | ...
    household_id: str
    record_id: str
    action: str         # "insert" | "update" | "delete"


class ChangeFeedPort(Protocol):
    """Abstract change feed interface used by core modules."""

    async def publish(self, event: ChangeEvent) -> None: ...
