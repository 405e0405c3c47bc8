"""
Household Chores — Chore Service.

UI-agnostic orchestration of the chore mutations that span more than one
table or collaborator:

- create a chore and its assignments as one logical operation, deleting the
  chore again if the assignments cannot be written;
- complete a chore with an optional proof image, where the upload is
  best-effort and never blocks the completion;
- pass and delete chores.

Every operation takes the acting person's id explicitly and checks that
they belong to the chore's household.
"""

from __future__ import annotations

import logging
import time
from datetime import date, datetime
from pathlib import PurePath
from typing import TYPE_CHECKING, Iterable

from src.core.errors import IncompleteCreationError, InvalidTransition, ValidationError
from src.core.recurrence import encode, parse_days
from src.data.models import ChoreStatus
from src.ports.change_port import ChangeEvent

if TYPE_CHECKING:
    from src.core.assignment_ledger import AssignmentLedger
    from src.core.chore_repository import ChoreRepository
    from src.core.household_directory import HouseholdDirectory
    from src.data.models import Chore
    from src.ports.blob_port import BlobStoragePort
    from src.ports.change_port import ChangeFeedPort

logger = logging.getLogger(__name__)

_IMAGE_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "heic": "image/heic",
}


class ChoreService:
    """Stateless service that orchestrates chore mutations."""

    def __init__(
        self,
        directory: HouseholdDirectory,
        chores: ChoreRepository,
        ledger: AssignmentLedger,
        blobs: BlobStoragePort | None = None,
        changes: ChangeFeedPort | None = None,
    ) -> None:
        self._directory = directory
        self._chores = chores
        self._ledger = ledger
        self._blobs = blobs
        self._changes = changes

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_chore(
        self,
        actor_id: str,
        household_id: str,
        name: str,
        due_date: str | date | None,
        assignee_ids: Iterable[str],
        description: str | None = None,
        repeat_days: Iterable[str] = (),
    ) -> Chore:
        """Create an ongoing chore together with its assignees.

        Args:
            actor_id: The person creating the chore; must be a member.
            repeat_days: Short weekday names, e.g. ["Mon", "Thu"].

        Raises:
            ValidationError: every invalid field at once.
            CrossHouseholdError: the actor or an assignee is not a member.
            IncompleteCreationError: the chore row exists but could be neither
                assigned nor removed.
        """
        assignee_ids = [pid for pid in assignee_ids if pid]

        errors = await self._chores.validate_new_chore(household_id, name, due_date)
        repeat_mask = 0
        try:
            repeat_mask = encode(parse_days(repeat_days))
        except ValidationError as exc:
            errors.update(exc.errors)
        if not assignee_ids:
            errors["assignees"] = "Assign at least one person."
        if errors:
            raise ValidationError(errors)

        await self._directory.require_member(actor_id, household_id)
        await self._ledger.check_assignees(household_id, assignee_ids)

        chore = await self._chores.create_chore(
            household_id, name, due_date, description=description, repeat_mask=repeat_mask,
        )
        try:
            await self._ledger.assign(chore.id, assignee_ids)
        except Exception as exc:
            logger.error("Assigning new chore %s failed, rolling back: %s", chore.id, exc)
            await self._roll_back_creation(chore, exc)
            raise

        await self._publish(chore.household_id, "chores", chore.id, "insert")
        return chore

    async def _roll_back_creation(self, chore: Chore, cause: Exception) -> None:
        try:
            await self._chores.delete_chore(chore.id)
        except Exception as exc:
            logger.error("Rollback of chore %s failed: %s", chore.id, exc)
            raise IncompleteCreationError(
                chore.id,
                f"Chore {chore.id} was created but has no assignees ({cause})",
            ) from exc

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def complete_chore(
        self,
        actor_id: str,
        chore_id: str,
        image: bytes | None = None,
        image_name: str | None = None,
        completed_at: datetime | None = None,
    ) -> Chore:
        """Mark a chore completed, attaching a proof image when one uploads."""
        chore = await self._chores.get_chore(chore_id)
        await self._directory.require_member(actor_id, chore.household_id)
        if chore.status is not ChoreStatus.ONGOING:
            raise InvalidTransition(
                f"Chore {chore_id} is {chore.status.value}; cannot become completed"
            )

        image_url = None
        if image:
            image_url = await self._upload_proof(chore_id, image, image_name)

        chore = await self._chores.mark_completed(chore_id, completed_at, image_url)
        await self._publish(chore.household_id, "chores", chore.id, "update")
        return chore

    async def pass_chore(self, actor_id: str, chore_id: str, reason: str = "") -> Chore:
        chore = await self._chores.get_chore(chore_id)
        await self._directory.require_member(actor_id, chore.household_id)
        chore = await self._chores.mark_passed(chore_id, reason)
        await self._publish(chore.household_id, "chores", chore.id, "update")
        return chore

    async def delete_chore(self, actor_id: str, chore_id: str) -> Chore:
        chore = await self._chores.get_chore(chore_id)
        await self._directory.require_member(actor_id, chore.household_id)
        chore = await self._chores.delete_chore(chore_id)
        await self._publish(chore.household_id, "chores", chore.id, "delete")
        return chore

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _upload_proof(
        self, chore_id: str, image: bytes, image_name: str | None,
    ) -> str | None:
        if self._blobs is None:
            logger.warning("No blob storage configured; completing chore %s without image", chore_id)
            return None

        ext = PurePath(image_name or "").suffix.lstrip(".").lower() or "jpg"
        path = f"chores/{chore_id}/{int(time.time() * 1000)}.{ext}"
        content_type = _IMAGE_TYPES.get(ext, "application/octet-stream")
        try:
            return await self._blobs.upload(path, image, content_type)
        except Exception as exc:
            logger.warning("Proof image upload failed for chore %s: %s", chore_id, exc)
            return None

    async def _publish(self, household_id: str, table: str, record_id: str, action: str) -> None:
        if self._changes is None:
            return
        await self._changes.publish(
            ChangeEvent(table=table, household_id=household_id, record_id=record_id, action=action)
        )
