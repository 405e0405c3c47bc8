"""
Household Chores — Assignment Ledger.

Many-to-many mapping of chores to the people responsible for them. Every
assignee must belong to the chore's household; assigning is additive and
idempotent (an existing pair is never duplicated).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from src.core.errors import CrossHouseholdError, NotFound, ValidationError
from src.core.household_directory import sort_members
from src.core.chore_repository import sort_chores
from src.core.store_calls import call_store
from src.data.models import Assignment, Chore, ChoreStatus, Person
from src.ports.store_port import StoreConflictError

if TYPE_CHECKING:
    from src.core.chore_repository import ChoreRepository
    from src.core.household_directory import HouseholdDirectory
    from src.ports.store_port import StorePort

logger = logging.getLogger(__name__)


class AssignmentLedger:
    def __init__(
        self,
        store: StorePort,
        directory: HouseholdDirectory,
        chores: ChoreRepository,
    ) -> None:
        self._store = store
        self._directory = directory
        self._chores = chores

    async def check_assignees(
        self, household_id: str, person_ids: Iterable[str],
    ) -> list[Person]:
        """Validate a prospective assignee set against a household.

        Raises:
            ValidationError: the set is empty.
            NotFound: an id does not belong to any person.
            CrossHouseholdError: a person belongs to another household (or none).
        """
        ids = {pid for pid in person_ids if pid}
        if not ids:
            raise ValidationError({"assignees": "Assign at least one person."})

        people = await self._directory.get_people(ids)
        missing = sorted(ids - people.keys())
        if missing:
            raise NotFound(f"Unknown person(s): {', '.join(missing)}")
        outsiders = sorted(p.id for p in people.values() if p.household_id != household_id)
        if outsiders:
            raise CrossHouseholdError(
                f"Not in household {household_id}: {', '.join(outsiders)}"
            )
        return sort_members(list(people.values()))

    async def assign(self, chore_id: str, person_ids: Iterable[str]) -> None:
        chore = await self._chores.get_chore(chore_id)
        ids = {p.id for p in await self.check_assignees(chore.household_id, person_ids)}

        existing = await self._assignee_ids(chore_id)
        new_ids = sorted(ids - existing)
        if not new_ids:
            return
        try:
            await call_store(
                lambda: self._store.insert(
                    "chore_assignments",
                    [{"chore_id": chore_id, "profile_id": pid} for pid in new_ids],
                ),
                what="insert assignments",
            )
        except StoreConflictError:
            # A retried insert whose first attempt committed, or a concurrent assign
            if not set(new_ids) <= await self._assignee_ids(chore_id):
                raise
        logger.info("Chore %s assigned to %s", chore_id, ", ".join(new_ids))

    async def assignments_for(self, chore_id: str) -> list[Person]:
        """Assignees of a chore, each once, in display order."""
        await self._chores.get_chore(chore_id)
        people = await self._directory.get_people(await self._assignee_ids(chore_id))
        return sort_members(list(people.values()))

    async def chores_for(
        self,
        person_id: str,
        status: ChoreStatus | None = ChoreStatus.ONGOING,
    ) -> list[Chore]:
        """Chores a person is assigned to, by due date."""
        await self._directory.get_person(person_id)
        rows = await call_store(
            lambda: self._store.select("chore_assignments", {"profile_id": person_id}),
            what="list assignments of person",
        )
        chores = await self._chores.get_chores(
            Assignment.from_row(r).chore_id for r in rows
        )
        if status is not None:
            chores = [c for c in chores if c.status is ChoreStatus(status)]
        return sort_chores(chores)

    async def assignee_ids_by_chore(self, chore_ids: Iterable[str]) -> dict[str, list[str]]:
        """One round-trip lookup of assignee ids for many chores."""
        ids = sorted(set(chore_ids))
        result: dict[str, list[str]] = {cid: [] for cid in ids}
        if not ids:
            return result
        rows = await call_store(
            lambda: self._store.select(
                "chore_assignments", {"chore_id": ids}, order_by=("chore_id", "profile_id"),
            ),
            what="list assignments",
        )
        for assignment in map(Assignment.from_row, rows):
            if assignment.person_id not in result[assignment.chore_id]:
                result[assignment.chore_id].append(assignment.person_id)
        return result

    async def _assignee_ids(self, chore_id: str) -> set[str]:
        rows = await call_store(
            lambda: self._store.select("chore_assignments", {"chore_id": chore_id}),
            what="list assignments of chore",
        )
        return {Assignment.from_row(r).person_id for r in rows}
