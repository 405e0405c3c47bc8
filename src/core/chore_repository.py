"""
Household Chores — Chore Repository.

Owns chore records and their lifecycle:

    ongoing ──> completed   (terminal, optional proof image)
       └──────> passed      (terminal, reason defaults to "N/A")

There are no timed transitions; "overdue" is computed for display only.
Transitions are written as conditional updates on ``status = ongoing`` so
two members racing on the same chore cannot both succeed.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING

from src.core.errors import IncompleteDeletionError, InvalidTransition, NotFound, ValidationError
from src.core.recurrence import MAX_MASK
from src.core.store_calls import call_store, insert_row
from src.data.models import Chore, ChoreStatus

if TYPE_CHECKING:
    from src.core.household_directory import HouseholdDirectory
    from src.ports.store_port import StorePort

logger = logging.getLogger(__name__)

DEFAULT_DROP_REASON = "N/A"


def sort_chores(chores: list[Chore]) -> list[Chore]:
    """Due date ascending, ties broken by id."""
    return sorted(chores, key=lambda c: (c.due_date, c.id))


def is_overdue(chore: Chore, today: date | None = None) -> bool:
    """True for ongoing chores whose due date is before ``today``."""
    if chore.status is not ChoreStatus.ONGOING or not chore.due_date:
        return False
    if today is None:
        today = date.today()
    try:
        return date.fromisoformat(chore.due_date[:10]) < today
    except ValueError:
        return False


class ChoreRepository:
    """Chore records, filtered by household and status."""

    def __init__(self, store: StorePort, directory: HouseholdDirectory) -> None:
        self._store = store
        self._directory = directory

    async def validate_new_chore(
        self,
        household_id: str,
        name: str,
        due_date: str | date | None,
        repeat_mask: int = 0,
    ) -> dict[str, str]:
        """Check every field of a new chore; return field -> message for each failure."""
        errors: dict[str, str] = {}
        if not (name or "").strip():
            errors["name"] = "Chore title is required."

        if due_date is None or (isinstance(due_date, str) and not due_date.strip()):
            errors["due_date"] = "Expected finish time is required."
        elif _parse_due_date(due_date) is None:
            errors["due_date"] = "Due date must be a date (YYYY-MM-DD)."

        if isinstance(repeat_mask, bool) or not isinstance(repeat_mask, int) \
                or not 0 <= repeat_mask <= MAX_MASK:
            errors["repeat_mask"] = f"Repeat mask must be an integer between 0 and {MAX_MASK}."

        if not household_id:
            errors["household_id"] = "No household found for this user."
        else:
            try:
                await self._directory.get_household(household_id)
            except NotFound:
                errors["household_id"] = "No household found for this user."
        return errors

    async def create_chore(
        self,
        household_id: str,
        name: str,
        due_date: str | date | None,
        description: str | None = None,
        repeat_mask: int = 0,
    ) -> Chore:
        """Insert an ongoing chore. Assignees are added through the ledger."""
        errors = await self.validate_new_chore(household_id, name, due_date, repeat_mask)
        if errors:
            raise ValidationError(errors)

        row = {
            "household_id": household_id,
            "name": name.strip(),
            "description": (description or "").strip() or None,
            "due_date": _parse_due_date(due_date).isoformat(),
            "status": ChoreStatus.ONGOING.value,
            "repeat_days": repeat_mask,
        }
        chore = Chore.from_row(
            await insert_row(self._store, "chores", row, what="insert chore")
        )
        logger.info("Chore created: %s '%s' due %s", chore.id, chore.name, chore.due_date)
        return chore

    async def get_chore(self, chore_id: str) -> Chore:
        rows = await call_store(
            lambda: self._store.select("chores", {"id": chore_id}), what="fetch chore",
        )
        if not rows:
            raise NotFound(f"Chore {chore_id} not found")
        return Chore.from_row(rows[0])

    async def get_chores(self, chore_ids) -> list[Chore]:
        ids = sorted(set(chore_ids))
        if not ids:
            return []
        rows = await call_store(
            lambda: self._store.select("chores", {"id": ids}), what="fetch chores",
        )
        return [Chore.from_row(r) for r in rows]

    async def list_chores(
        self,
        household_id: str,
        status: ChoreStatus | None = ChoreStatus.ONGOING,
    ) -> list[Chore]:
        """Chores of a household, current work by default.

        Pass ``status=None`` explicitly for the full history.
        """
        filters: dict = {"household_id": household_id}
        if status is not None:
            filters["status"] = ChoreStatus(status).value
        rows = await call_store(
            lambda: self._store.select("chores", filters, order_by=("due_date", "id")),
            what="list chores",
        )
        return sort_chores([Chore.from_row(r) for r in rows])

    async def mark_completed(
        self,
        chore_id: str,
        completed_at: datetime | str | None = None,
        image_url: str | None = None,
    ) -> Chore:
        if completed_at is None:
            completed_at = datetime.now().astimezone()
        if isinstance(completed_at, datetime):
            completed_at = completed_at.isoformat()

        values = {"status": ChoreStatus.COMPLETED.value, "completed_at": completed_at}
        if image_url:
            values["image_url"] = image_url
        chore = await self._transition(chore_id, values)
        logger.info("Chore %s '%s' completed", chore.id, chore.name)
        return chore

    async def mark_passed(self, chore_id: str, reason: str | None = None) -> Chore:
        reason = (reason or "").strip() or DEFAULT_DROP_REASON
        chore = await self._transition(
            chore_id, {"status": ChoreStatus.PASSED.value, "drop_reason": reason},
        )
        logger.info("Chore %s '%s' passed: %s", chore.id, chore.name, reason)
        return chore

    async def delete_chore(self, chore_id: str) -> Chore:
        """Hard-delete a chore, removing its assignments first."""
        chore = await self.get_chore(chore_id)
        await call_store(
            lambda: self._store.delete("chore_assignments", {"chore_id": chore_id}),
            what="delete chore assignments",
        )
        try:
            await call_store(
                lambda: self._store.delete("chores", {"id": chore_id}), what="delete chore",
            )
        except Exception as exc:
            logger.error("Chore %s lost its assignments but was not deleted: %s", chore_id, exc)
            raise IncompleteDeletionError(
                chore_id, f"Chore {chore_id} has no assignees and was not deleted ({exc})",
            ) from exc
        logger.info("Chore %s '%s' deleted", chore.id, chore.name)
        return chore

    async def _transition(self, chore_id: str, values: dict) -> Chore:
        current = await self.get_chore(chore_id)
        target = values["status"]
        if current.status is not ChoreStatus.ONGOING:
            raise InvalidTransition(
                f"Chore {chore_id} is {current.status.value}; cannot become {target}"
            )
        rows = await call_store(
            lambda: self._store.update(
                "chores", values, {"id": chore_id, "status": ChoreStatus.ONGOING.value},
            ),
            what=f"mark chore {target}",
        )
        if rows:
            return Chore.from_row(rows[0])

        # Either another writer moved it out of ongoing, or this very write
        # committed on an attempt whose answer was lost and the retry matched nothing
        latest = await call_store(
            lambda: self._store.select("chores", {"id": chore_id}), what="fetch chore",
        )
        if not latest:
            raise NotFound(f"Chore {chore_id} not found")
        if all(latest[0].get(column) == value for column, value in values.items()):
            logger.warning("Chore %s was already %s by this call", chore_id, target)
            return Chore.from_row(latest[0])
        raise InvalidTransition(
            f"Chore {chore_id} is {latest[0]['status']}; cannot become {target}"
        )


def _parse_due_date(value: str | date) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None
