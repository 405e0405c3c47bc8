"""
Household Chores — Data Models.

Records as they live in the backing store. Every model can be built from a
store row (a plain dict keyed by column name) via ``from_row``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ChoreStatus(Enum):
    """Three-state chore lifecycle. Both non-ongoing states are terminal."""

    ONGOING = "ongoing"
    COMPLETED = "completed"
    PASSED = "passed"


class MachineStatus(Enum):
    AVAILABLE = "available"
    BUSY = "busy"


@dataclass(frozen=True)
class Person:
    """A household member (a row of ``profiles``)."""

    id: str
    display_name: str
    household_id: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> Person:
        return cls(
            id=row["id"],
            display_name=(row.get("display_name") or "").strip() or "Unnamed",
            household_id=row.get("household_id"),
        )


@dataclass
class Household:
    """A group of people sharing chores and machines, joined by invite code."""

    id: str
    name: str
    invite_code: str

    @classmethod
    def from_row(cls, row: dict) -> Household:
        return cls(id=row["id"], name=row["name"], invite_code=row["invite_code"])


@dataclass
class Chore:
    """A task with a due date, a lifecycle status and one or more assignees.

    ``drop_reason`` is only set once passed; ``completed_at`` and
    ``image_url`` only once completed.
    """

    id: str
    household_id: str
    name: str                          # e.g. "Take out trash"
    due_date: str                      # ISO date YYYY-MM-DD
    status: ChoreStatus = ChoreStatus.ONGOING
    description: str | None = None
    drop_reason: str | None = None
    completed_at: str | None = None    # ISO datetime
    image_url: str | None = None
    repeat_mask: int = 0               # weekday bitmask, 0 = does not repeat
    created_at: str = ""

    @classmethod
    def from_row(cls, row: dict) -> Chore:
        return cls(
            id=row["id"],
            household_id=row["household_id"],
            name=row["name"],
            due_date=row["due_date"],
            status=ChoreStatus(row.get("status") or ChoreStatus.ONGOING.value),
            description=row.get("description"),
            drop_reason=row.get("drop_reason"),
            completed_at=row.get("completed_at"),
            image_url=row.get("image_url"),
            repeat_mask=int(row.get("repeat_days") or 0),
            created_at=row.get("created_at") or "",
        )


@dataclass(frozen=True)
class Assignment:
    """Link between a chore and a person responsible for it."""

    chore_id: str
    person_id: str

    @classmethod
    def from_row(cls, row: dict) -> Assignment:
        return cls(chore_id=row["chore_id"], person_id=row["profile_id"])


@dataclass
class Machine:
    """A shared resource (e.g. laundry) with binary occupancy state."""

    id: str
    household_id: str
    name: str
    status: MachineStatus = MachineStatus.AVAILABLE
    occupied_by: str | None = None     # person id, set iff busy
    image_url: str | None = None
    created_at: str = ""

    @property
    def is_busy(self) -> bool:
        return self.status is MachineStatus.BUSY

    @classmethod
    def from_row(cls, row: dict) -> Machine:
        return cls(
            id=row["id"],
            household_id=row["household_id"],
            name=row["name"],
            status=MachineStatus(row.get("status") or MachineStatus.AVAILABLE.value),
            occupied_by=row.get("occupied_by"),
            image_url=row.get("image_url"),
            created_at=row.get("created_at") or "",
        )


@dataclass
class Thread:
    """A household discussion thread, optionally about one chore."""

    id: str
    household_id: str
    author_id: str
    body: str
    title: str = ""
    chore_id: str | None = None
    created_at: str = ""
    messages: list[Message] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: dict) -> Thread:
        return cls(
            id=row["id"],
            household_id=row["household_id"],
            author_id=row["author_id"],
            body=row["body"],
            title=row.get("title") or "",
            chore_id=row.get("chore_id"),
            created_at=row.get("created_at") or "",
        )


@dataclass
class Message:
    id: str
    thread_id: str
    author_id: str
    text: str
    created_at: str = ""

    @classmethod
    def from_row(cls, row: dict) -> Message:
        return cls(
            id=row["id"],
            thread_id=row["thread_id"],
            author_id=row["author_id"],
            text=row["text"],
            created_at=row.get("created_at") or "",
        )
