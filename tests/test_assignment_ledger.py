"""Tests for src.core.assignment_ledger — who is on which chore."""

import pytest

from src.core.errors import CrossHouseholdError, NotFound, ValidationError
from src.data.models import ChoreStatus


@pytest.fixture
def make_chore(engine, household):
    async def _make(name="Dishes", due="2025-07-02"):
        return await engine.chores.create_chore(household.id, name, due)
    return _make


class TestAssign:
    @pytest.mark.asyncio
    async def test_assign_and_read_back(self, engine, household, make_chore):
        chore = await make_chore()
        await engine.ledger.assign(chore.id, [household.bob.id, household.alice.id])
        people = await engine.ledger.assignments_for(chore.id)
        assert [p.display_name for p in people] == ["Alice", "Bob"]

    @pytest.mark.asyncio
    async def test_reassign_is_idempotent(self, engine, household, make_chore, store):
        chore = await make_chore()
        await engine.ledger.assign(chore.id, {household.alice.id})
        await engine.ledger.assign(chore.id, {household.alice.id})
        rows = await store.select("chore_assignments", {"chore_id": chore.id})
        assert len(rows) == 1

    @pytest.mark.asyncio
    async def test_assign_is_additive(self, engine, household, make_chore):
        chore = await make_chore()
        await engine.ledger.assign(chore.id, [household.alice.id])
        await engine.ledger.assign(chore.id, [household.bob.id])
        assert len(await engine.ledger.assignments_for(chore.id)) == 2

    @pytest.mark.asyncio
    async def test_empty_set_rejected(self, engine, make_chore):
        chore = await make_chore()
        with pytest.raises(ValidationError) as exc_info:
            await engine.ledger.assign(chore.id, [])
        assert exc_info.value.errors == {"assignees": "Assign at least one person."}

    @pytest.mark.asyncio
    async def test_outsider_rejected(self, engine, household, outsider, make_chore, store):
        chore = await make_chore()
        with pytest.raises(CrossHouseholdError):
            await engine.ledger.assign(chore.id, [household.alice.id, outsider.id])
        assert await store.select("chore_assignments", {"chore_id": chore.id}) == []

    @pytest.mark.asyncio
    async def test_person_without_household_rejected(self, engine, make_chore):
        chore = await make_chore()
        drifter = await engine.directory.register_person("Drifter")
        with pytest.raises(CrossHouseholdError):
            await engine.ledger.assign(chore.id, [drifter.id])

    @pytest.mark.asyncio
    async def test_unknown_person(self, engine, make_chore):
        chore = await make_chore()
        with pytest.raises(NotFound):
            await engine.ledger.assign(chore.id, ["ghost"])

    @pytest.mark.asyncio
    async def test_unknown_chore(self, engine, household):
        with pytest.raises(NotFound):
            await engine.ledger.assign("missing", [household.alice.id])


class TestInverseLookup:
    @pytest.mark.asyncio
    async def test_chores_for_person(self, engine, household, make_chore):
        later = await make_chore("Later", "2025-07-09")
        sooner = await make_chore("Sooner", "2025-07-01")
        other = await make_chore("Other", "2025-07-05")
        await engine.ledger.assign(later.id, [household.alice.id])
        await engine.ledger.assign(sooner.id, [household.alice.id])
        await engine.ledger.assign(other.id, [household.bob.id])

        chores = await engine.ledger.chores_for(household.alice.id)
        assert [c.name for c in chores] == ["Sooner", "Later"]

    @pytest.mark.asyncio
    async def test_chores_for_filters_status(self, engine, household, make_chore):
        chore = await make_chore()
        await engine.ledger.assign(chore.id, [household.alice.id])
        await engine.chores.mark_completed(chore.id)

        assert await engine.ledger.chores_for(household.alice.id) == []
        history = await engine.ledger.chores_for(household.alice.id, status=None)
        assert [c.status for c in history] == [ChoreStatus.COMPLETED]

    @pytest.mark.asyncio
    async def test_assignee_ids_by_chore(self, engine, household, make_chore):
        a = await make_chore("A")
        b = await make_chore("B")
        await engine.ledger.assign(a.id, [household.alice.id, household.bob.id])
        mapping = await engine.ledger.assignee_ids_by_chore([a.id, b.id])
        assert sorted(mapping[a.id]) == sorted([household.alice.id, household.bob.id])
        assert mapping[b.id] == []
