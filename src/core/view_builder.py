"""
Household Chores — Reconciliation View Builder.

Projects members, chores and assignments into one board entry per member.
Every member gets an entry even with nothing assigned, so the board shows
who has no responsibilities as well as who has some.

Read-only; safe to rebuild on every request or change notification.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from src.core.chore_repository import is_overdue, sort_chores
from src.core.recurrence import Weekday, decode
from src.data.models import Chore, ChoreStatus, Person

if TYPE_CHECKING:
    from src.core.assignment_ledger import AssignmentLedger
    from src.core.chore_repository import ChoreRepository
    from src.core.household_directory import HouseholdDirectory

logger = logging.getLogger(__name__)


@dataclass
class ChoreView:
    chore: Chore
    assignee_ids: list[str] = field(default_factory=list)
    assignee_names: list[str] = field(default_factory=list)
    repeat_days: list[Weekday] = field(default_factory=list)
    overdue: bool = False

    @property
    def repeat_labels(self) -> list[str]:
        return [d.short_name for d in self.repeat_days]


@dataclass
class MemberView:
    person: Person
    chores: list[ChoreView] = field(default_factory=list)


class ViewBuilder:
    def __init__(
        self,
        directory: HouseholdDirectory,
        chores: ChoreRepository,
        ledger: AssignmentLedger,
    ) -> None:
        self._directory = directory
        self._chores = chores
        self._ledger = ledger

    async def build_household_view(
        self,
        household_id: str,
        status: ChoreStatus | None = ChoreStatus.ONGOING,
        today: date | None = None,
    ) -> list[MemberView]:
        """One entry per member, by display name; chores by due date.

        ``status`` defaults to current work; pass another status (or None for
        everything) for history screens.
        """
        members = await self._directory.list_members(household_id)
        chores = await self._chores.list_chores(household_id, status)
        assignees = await self._ledger.assignee_ids_by_chore(c.id for c in chores)
        names = {p.id: p.display_name for p in members}

        board = {p.id: MemberView(person=p) for p in members}
        for chore in sort_chores(chores):
            assigned = set(assignees.get(chore.id, []))
            member_ids = [p.id for p in members if p.id in assigned]
            if not member_ids:
                logger.warning(
                    "Chore %s '%s' has no assignee in household %s; left off the board",
                    chore.id, chore.name, household_id,
                )
                continue
            view = ChoreView(
                chore=chore,
                assignee_ids=member_ids,
                assignee_names=[names[pid] for pid in member_ids],
                repeat_days=decode(chore.repeat_mask),
                overdue=is_overdue(chore, today),
            )
            for pid in member_ids:
                board[pid].chores.append(view)

        return [board[p.id] for p in members]

    async def build_view_for_person(
        self,
        person_id: str,
        status: ChoreStatus | None = ChoreStatus.ONGOING,
        today: date | None = None,
    ) -> list[MemberView]:
        """Board of the person's household; just the person if they have none."""
        person = await self._directory.get_person(person_id)
        if person.household_id is None:
            return [MemberView(person=person)]
        return await self.build_household_view(person.household_id, status, today)

    async def list_unassigned(
        self,
        household_id: str,
        status: ChoreStatus | None = ChoreStatus.ONGOING,
    ) -> list[Chore]:
        """Chores with no current member assigned, for the caller to resolve."""
        members = {p.id for p in await self._directory.list_members(household_id)}
        chores = await self._chores.list_chores(household_id, status)
        assignees = await self._ledger.assignee_ids_by_chore(c.id for c in chores)
        return [
            c for c in chores
            if not any(pid in members for pid in assignees.get(c.id, []))
        ]
