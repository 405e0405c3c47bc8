"""
Household Chores — Household Directory.

Resolves who belongs to which household. Membership is soft: leaving a
household clears ``profiles.household_id`` and never deletes the person.
"""

from __future__ import annotations

import logging
import secrets
import string
from typing import TYPE_CHECKING

from src.core.errors import CrossHouseholdError, NotFound, TransientError, ValidationError
from src.core.store_calls import call_store, insert_row
from src.data.models import Household, MachineStatus, Person
from src.ports.store_port import StoreConflictError

if TYPE_CHECKING:
    from src.ports.store_port import StorePort

logger = logging.getLogger(__name__)

INVITE_CODE_LENGTH = 6
_INVITE_ALPHABET = string.ascii_uppercase + string.digits
_MAX_INVITE_ATTEMPTS = 10


def generate_invite_code() -> str:
    """Six upper-case base-36 characters, e.g. "K3Q9ZD"."""
    return "".join(secrets.choice(_INVITE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


def sort_members(people: list[Person]) -> list[Person]:
    """Display-name order, ties broken by id."""
    return sorted(people, key=lambda p: (p.display_name.casefold(), p.id))


class HouseholdDirectory:
    """Membership lookups and household join/leave."""

    def __init__(self, store: StorePort) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_person(self, person_id: str) -> Person:
        rows = await call_store(
            lambda: self._store.select("profiles", {"id": person_id}),
            what="fetch person",
        )
        if not rows:
            raise NotFound(f"Person {person_id} not found")
        return Person.from_row(rows[0])

    async def get_people(self, person_ids) -> dict[str, Person]:
        """Fetch many people at once, keyed by id. Missing ids are absent."""
        ids = sorted(set(person_ids))
        if not ids:
            return {}
        rows = await call_store(
            lambda: self._store.select("profiles", {"id": ids}),
            what="fetch people",
        )
        return {r["id"]: Person.from_row(r) for r in rows}

    async def get_household(self, household_id: str) -> Household:
        rows = await call_store(
            lambda: self._store.select("households", {"id": household_id}),
            what="fetch household",
        )
        if not rows:
            raise NotFound(f"Household {household_id} not found")
        return Household.from_row(rows[0])

    async def resolve_household_for_person(self, person_id: str) -> str | None:
        """Return the person's household id, or None if they have not joined one."""
        person = await self.get_person(person_id)
        return person.household_id

    async def list_members(self, household_id: str) -> list[Person]:
        await self.get_household(household_id)
        rows = await call_store(
            lambda: self._store.select(
                "profiles", {"household_id": household_id}, order_by=("display_name", "id"),
            ),
            what="list members",
        )
        return sort_members([Person.from_row(r) for r in rows])

    async def require_member(self, person_id: str, household_id: str) -> Person:
        """Return the person if they belong to ``household_id``."""
        person = await self.get_person(person_id)
        if person.household_id != household_id:
            raise CrossHouseholdError(
                f"Person {person_id} is not a member of household {household_id}"
            )
        return person

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def register_person(self, display_name: str) -> Person:
        """Create a person with no household yet (signup)."""
        name = (display_name or "").strip()
        if not name:
            raise ValidationError({"display_name": "Display name is required."})
        person = Person.from_row(
            await insert_row(
                self._store, "profiles", {"display_name": name}, what="insert person",
            )
        )
        logger.info("Person registered: %s '%s'", person.id, person.display_name)
        return person

    async def create_household(self, name: str, creator_id: str) -> Household:
        """Create a household with a fresh invite code; the creator joins it."""
        name = (name or "").strip()
        if not name:
            raise ValidationError({"name": "House name is required."})
        await self.get_person(creator_id)

        household = None
        for _ in range(_MAX_INVITE_ATTEMPTS):
            code = generate_invite_code()
            try:
                row = await insert_row(
                    self._store,
                    "households",
                    {"name": name, "invite_code": code},
                    what="insert household",
                )
            except StoreConflictError:
                logger.info("Invite code %s already taken, generating another", code)
                continue
            household = Household.from_row(row)
            break
        if household is None:
            raise TransientError("Could not generate a unique invite code")

        await self._set_household(creator_id, household.id)
        logger.info("Household created: %s '%s' (code %s)", household.id, name, household.invite_code)
        return household

    async def join_household(self, person_id: str, invite_code: str) -> Household:
        code = (invite_code or "").strip().upper()
        if not code:
            raise ValidationError({"invite_code": "Invite code is required."})
        rows = await call_store(
            lambda: self._store.select("households", {"invite_code": code}),
            what="find household by invite code",
        )
        if not rows:
            raise NotFound("Invalid invite code")
        household = Household.from_row(rows[0])

        current = await self.resolve_household_for_person(person_id)
        if current == household.id:
            return household
        if current is not None:
            await self.leave_household(person_id)
        await self._set_household(person_id, household.id)
        logger.info("Person %s joined household %s", person_id, household.id)
        return household

    async def rename_household(self, household_id: str, name: str) -> Household:
        name = (name or "").strip()
        if not name:
            raise ValidationError({"name": "House name is required."})
        rows = await call_store(
            lambda: self._store.update("households", {"name": name}, {"id": household_id}),
            what="rename household",
        )
        if not rows:
            raise NotFound(f"Household {household_id} not found")
        return Household.from_row(rows[0])

    async def leave_household(self, person_id: str) -> list[str]:
        """Remove a person from their household, cascading explicitly.

        Deletes the person's assignments on the household's chores, frees any
        machine they occupy, then clears their membership. Chores and the
        household itself stay for the remaining members.

        Returns:
            Ids of ongoing chores that were left with no assignee at all.
        """
        household_id = await self.resolve_household_for_person(person_id)
        if household_id is None:
            return []

        chore_rows = await call_store(
            lambda: self._store.select("chores", {"household_id": household_id}),
            what="list household chores",
        )
        chore_ids = [r["id"] for r in chore_rows]
        orphaned: list[str] = []
        if chore_ids:
            await call_store(
                lambda: self._store.delete(
                    "chore_assignments", {"profile_id": person_id, "chore_id": chore_ids},
                ),
                what="delete assignments of leaving person",
            )
            remaining = await call_store(
                lambda: self._store.select("chore_assignments", {"chore_id": chore_ids}),
                what="list remaining assignments",
            )
            still_assigned = {r["chore_id"] for r in remaining}
            orphaned = [
                r["id"] for r in chore_rows
                if r["status"] == "ongoing" and r["id"] not in still_assigned
            ]

        await call_store(
            lambda: self._store.update(
                "machines",
                {"status": MachineStatus.AVAILABLE.value, "occupied_by": None},
                {"household_id": household_id, "occupied_by": person_id},
            ),
            what="free machines of leaving person",
        )
        await self._set_household(person_id, None)

        if orphaned:
            logger.warning(
                "Person %s left household %s; %d chore(s) now unassigned",
                person_id, household_id, len(orphaned),
            )
        logger.info("Person %s left household %s", person_id, household_id)
        return orphaned

    async def _set_household(self, person_id: str, household_id: str | None) -> None:
        rows = await call_store(
            lambda: self._store.update(
                "profiles", {"household_id": household_id}, {"id": person_id},
            ),
            what="update membership",
        )
        if not rows:
            raise NotFound(f"Person {person_id} not found")
