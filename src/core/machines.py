"""
Household Chores — Shared machines.

Machines are either available or busy with exactly one occupier. Occupy and
finish are conditional updates, so when two members race for the same
machine exactly one of them wins and the other gets a definitive refusal.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.core.errors import MachineBusyError, NotFound, NotOccupierError, ValidationError
from src.core.store_calls import call_store, insert_row
from src.data.models import Machine, MachineStatus
from src.ports.change_port import ChangeEvent

if TYPE_CHECKING:
    from src.core.household_directory import HouseholdDirectory
    from src.ports.change_port import ChangeFeedPort
    from src.ports.store_port import StorePort

logger = logging.getLogger(__name__)


class MachineRegistry:
    def __init__(
        self,
        store: StorePort,
        directory: HouseholdDirectory,
        changes: ChangeFeedPort | None = None,
    ) -> None:
        self._store = store
        self._directory = directory
        self._changes = changes

    async def add_machine(
        self,
        actor_id: str,
        household_id: str,
        name: str,
        image_url: str | None = None,
    ) -> Machine:
        name = (name or "").strip()
        if not name:
            raise ValidationError({"name": "Machine name is required."})
        await self._directory.require_member(actor_id, household_id)

        row = {
            "household_id": household_id,
            "name": name,
            "image_url": image_url or None,
            "status": MachineStatus.AVAILABLE.value,
            "occupied_by": None,
        }
        machine = Machine.from_row(
            await insert_row(self._store, "machines", row, what="insert machine")
        )
        logger.info("Machine added: %s '%s'", machine.id, machine.name)
        await self._publish(machine, "insert")
        return machine

    async def get_machine(self, machine_id: str) -> Machine:
        rows = await call_store(
            lambda: self._store.select("machines", {"id": machine_id}), what="fetch machine",
        )
        if not rows:
            raise NotFound(f"Machine {machine_id} not found")
        return Machine.from_row(rows[0])

    async def list_machines(
        self,
        household_id: str,
        status: MachineStatus | None = None,
        occupied_by: str | None = None,
    ) -> list[Machine]:
        """Machines of a household in creation order.

        ``status`` narrows to available or busy ones; ``occupied_by`` to the
        machines one person is using.
        """
        filters: dict = {"household_id": household_id}
        if status is not None:
            filters["status"] = MachineStatus(status).value
        if occupied_by is not None:
            filters["occupied_by"] = occupied_by
        rows = await call_store(
            lambda: self._store.select("machines", filters, order_by=("created_at", "id")),
            what="list machines",
        )
        return [Machine.from_row(r) for r in rows]

    async def list_available(self, household_id: str) -> list[Machine]:
        return await self.list_machines(household_id, status=MachineStatus.AVAILABLE)

    async def machines_for(self, person_id: str) -> list[Machine]:
        """Machines the person currently occupies in their household."""
        household_id = await self._directory.resolve_household_for_person(person_id)
        if household_id is None:
            return []
        return await self.list_machines(household_id, occupied_by=person_id)

    async def occupy(self, machine_id: str, person_id: str) -> Machine:
        """Set busy only where currently available.

        Raises:
            MachineBusyError: someone else got there first.
        """
        machine = await self.get_machine(machine_id)
        await self._directory.require_member(person_id, machine.household_id)

        rows = await call_store(
            lambda: self._store.update(
                "machines",
                {"status": MachineStatus.BUSY.value, "occupied_by": person_id},
                {"id": machine_id, "status": MachineStatus.AVAILABLE.value},
            ),
            what="occupy machine",
        )
        if rows:
            machine = Machine.from_row(rows[0])
        else:
            latest = await self.get_machine(machine_id)
            # A lost answer on a committed attempt leaves the retry matching nothing
            if not (machine.status is MachineStatus.AVAILABLE
                    and latest.is_busy and latest.occupied_by == person_id):
                raise MachineBusyError(machine_id, latest.occupied_by)
            logger.warning("Machine %s was already occupied by this call", machine_id)
            machine = latest
        logger.info("Machine %s occupied by %s", machine_id, person_id)
        await self._publish(machine, "update")
        return machine

    async def finish(self, machine_id: str, person_id: str) -> Machine:
        """Free a machine; only its occupier may do this."""
        before = await self.get_machine(machine_id)
        rows = await call_store(
            lambda: self._store.update(
                "machines",
                {"status": MachineStatus.AVAILABLE.value, "occupied_by": None},
                {
                    "id": machine_id,
                    "status": MachineStatus.BUSY.value,
                    "occupied_by": person_id,
                },
            ),
            what="finish machine",
        )
        if rows:
            machine = Machine.from_row(rows[0])
        else:
            latest = await self.get_machine(machine_id)
            if not (before.is_busy and before.occupied_by == person_id and not latest.is_busy):
                raise NotOccupierError(f"Machine {machine_id} is not occupied by {person_id}")
            logger.warning("Machine %s was already freed by this call", machine_id)
            machine = latest
        logger.info("Machine %s freed by %s", machine_id, person_id)
        await self._publish(machine, "update")
        return machine

    async def _publish(self, machine: Machine, action: str) -> None:
        if self._changes is None:
            return
        await self._changes.publish(
            ChangeEvent(
                table="machines",
                household_id=machine.household_id,
                record_id=machine.id,
                action=action,
            )
        )
