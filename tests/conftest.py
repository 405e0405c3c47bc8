"""Shared test fixtures and configuration.

Sets up environment variables so src.config loads the local providers,
and provides common fixtures like a temp SQLite store and a seeded household.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("STORE_PROVIDER", "sqlite")
os.environ.setdefault("BLOB_PROVIDER", "local")
os.environ.setdefault("DATABASE_PATH", "data/test_household.db")
os.environ.setdefault("STORE_TIMEOUT_SECONDS", "10")
os.environ.setdefault("STORE_RETRIES", "1")

from dataclasses import dataclass

import pytest
import pytest_asyncio


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_household.db")


@pytest.fixture
def store(tmp_db_path):
    """Return a SQLiteStore backed by a temp file."""
    from src.data.db import SQLiteStore
    return SQLiteStore(db_path=tmp_db_path)


@pytest.fixture
def engine(store):
    """Return a HouseholdEngine over the temp store, without blobs or feed."""
    from src.core.engine import HouseholdEngine
    return HouseholdEngine.from_store(store)


@dataclass
class SeededHousehold:
    id: str
    invite_code: str
    alice: object
    bob: object


@pytest_asyncio.fixture
async def household(engine):
    """Household "Flat 3B" with members Alice (creator) and Bob."""
    alice = await engine.directory.register_person("Alice")
    bob = await engine.directory.register_person("Bob")
    house = await engine.directory.create_household("Flat 3B", alice.id)
    await engine.directory.join_household(bob.id, house.invite_code)
    return SeededHousehold(
        id=house.id,
        invite_code=house.invite_code,
        alice=await engine.directory.get_person(alice.id),
        bob=await engine.directory.get_person(bob.id),
    )


@pytest_asyncio.fixture
async def outsider(engine):
    """Carol, a member of a different household."""
    carol = await engine.directory.register_person("Carol")
    await engine.directory.create_household("Other House", carol.id)
    return await engine.directory.get_person(carol.id)
