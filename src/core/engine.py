"""
Household Chores — Engine wiring.

Builds every core component on top of one store, so callers (the entry
point, a web layer, tests) share a single object graph.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.core.assignment_ledger import AssignmentLedger
from src.core.chore_repository import ChoreRepository
from src.core.chore_service import ChoreService
from src.core.household_directory import HouseholdDirectory
from src.core.machines import MachineRegistry
from src.core.threads import ThreadBoard
from src.core.view_builder import ViewBuilder

if TYPE_CHECKING:
    from src.ports.blob_port import BlobStoragePort
    from src.ports.change_port import ChangeFeedPort
    from src.ports.store_port import StorePort


@dataclass
class HouseholdEngine:
    directory: HouseholdDirectory
    chores: ChoreRepository
    ledger: AssignmentLedger
    service: ChoreService
    views: ViewBuilder
    machines: MachineRegistry
    threads: ThreadBoard

    @classmethod
    def from_store(
        cls,
        store: StorePort,
        blobs: BlobStoragePort | None = None,
        changes: ChangeFeedPort | None = None,
    ) -> HouseholdEngine:
        directory = HouseholdDirectory(store)
        chores = ChoreRepository(store, directory)
        ledger = AssignmentLedger(store, directory, chores)
        return cls(
            directory=directory,
            chores=chores,
            ledger=ledger,
            service=ChoreService(directory, chores, ledger, blobs=blobs, changes=changes),
            views=ViewBuilder(directory, chores, ledger),
            machines=MachineRegistry(store, directory, changes=changes),
            threads=ThreadBoard(store, directory, chores, changes=changes),
        )
