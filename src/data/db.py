"""
Household Chores — SQLite store.

Local implementation of StorePort: the same tables the hosted project
exposes, kept in a single SQLite file. Used for development, the demo entry
point and the test suite.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from src.ports.store_port import Filters, StoreConflictError, StoreError

logger = logging.getLogger(__name__)

_SCHEMA = {
    "households": """
        CREATE TABLE IF NOT EXISTS households (
            id          TEXT PRIMARY KEY,
            name        TEXT NOT NULL,
            invite_code TEXT NOT NULL UNIQUE,
            created_at  TEXT NOT NULL
        )
    """,
    "profiles": """
        CREATE TABLE IF NOT EXISTS profiles (
            id           TEXT PRIMARY KEY,
            display_name TEXT NOT NULL DEFAULT '',
            household_id TEXT REFERENCES households(id),
            created_at   TEXT NOT NULL
        )
    """,
    "chores": """
        CREATE TABLE IF NOT EXISTS chores (
            id           TEXT PRIMARY KEY,
            household_id TEXT NOT NULL REFERENCES households(id),
            name         TEXT NOT NULL,
            description  TEXT,
            due_date     TEXT NOT NULL,
            status       TEXT NOT NULL DEFAULT 'ongoing',
            drop_reason  TEXT,
            completed_at TEXT,
            image_url    TEXT,
            repeat_days  INTEGER NOT NULL DEFAULT 0,
            created_at   TEXT NOT NULL
        )
    """,
    "chore_assignments": """
        CREATE TABLE IF NOT EXISTS chore_assignments (
            chore_id   TEXT NOT NULL REFERENCES chores(id),
            profile_id TEXT NOT NULL REFERENCES profiles(id),
            PRIMARY KEY (chore_id, profile_id)
        )
    """,
    "machines": """
        CREATE TABLE IF NOT EXISTS machines (
            id           TEXT PRIMARY KEY,
            household_id TEXT NOT NULL REFERENCES households(id),
            name         TEXT NOT NULL,
            image_url    TEXT,
            status       TEXT NOT NULL DEFAULT 'available',
            occupied_by  TEXT,
            created_at   TEXT NOT NULL
        )
    """,
    "threads": """
        CREATE TABLE IF NOT EXISTS threads (
            id           TEXT PRIMARY KEY,
            household_id TEXT NOT NULL REFERENCES households(id),
            chore_id     TEXT,
            author_id    TEXT NOT NULL,
            title        TEXT NOT NULL DEFAULT '',
            body         TEXT NOT NULL,
            created_at   TEXT NOT NULL
        )
    """,
    "messages": """
        CREATE TABLE IF NOT EXISTS messages (
            id         TEXT PRIMARY KEY,
            thread_id  TEXT NOT NULL REFERENCES threads(id),
            author_id  TEXT NOT NULL,
            text       TEXT NOT NULL,
            created_at TEXT NOT NULL
        )
    """,
}


class SQLiteStore:
    """SQLite-backed implementation of StorePort."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from src.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._columns: dict[str, set[str]] = {}
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create every table if it doesn't exist and record its columns."""
        with self._connect() as conn:
            for table, ddl in _SCHEMA.items():
                conn.execute(ddl)
                self._columns[table] = {
                    row[1] for row in conn.execute(f"PRAGMA table_info({table})").fetchall()
                }
        logger.debug("Household tables initialized at %s", self._db_path)

    # ------------------------------------------------------------------
    # SQL building
    # ------------------------------------------------------------------

    def _check_columns(self, table: str, columns) -> None:
        known = self._columns.get(table)
        if known is None:
            raise StoreError(f"Unknown table {table!r}")
        unknown = set(columns) - known
        if unknown:
            raise StoreError(f"Unknown column(s) for {table}: {sorted(unknown)}")

    def _where(self, table: str, filters: Filters | None) -> tuple[str, list]:
        if not filters:
            return "", []
        self._check_columns(table, filters)
        clauses: list[str] = []
        params: list = []
        for column, value in filters.items():
            if isinstance(value, (list, tuple, set, frozenset)):
                values = list(value)
                if not values:
                    clauses.append("0")
                    continue
                clauses.append(f"{column} IN ({', '.join('?' for _ in values)})")
                params.extend(values)
            elif value is None:
                clauses.append(f"{column} IS NULL")
            else:
                clauses.append(f"{column} = ?")
                params.append(value)
        return " WHERE " + " AND ".join(clauses), params

    def _order(self, table: str, order_by: Sequence[str]) -> str:
        if not order_by:
            return ""
        terms = []
        for term in order_by:
            column = term.lstrip("-")
            self._check_columns(table, [column])
            terms.append(f"{column} {'DESC' if term.startswith('-') else 'ASC'}")
        return " ORDER BY " + ", ".join(terms)

    # ------------------------------------------------------------------
    # StorePort
    # ------------------------------------------------------------------

    async def select(
        self,
        table: str,
        filters: Filters | None = None,
        order_by: Sequence[str] = (),
    ) -> list[dict]:
        where, params = self._where(table, filters)
        query = f"SELECT * FROM {table}{where}{self._order(table, order_by)}"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [dict(r) for r in rows]

    async def insert(self, table: str, rows: list[dict]) -> list[dict]:
        """Insert rows, filling ``id`` and ``created_at`` where the table has them."""
        if not rows:
            return []
        columns = self._columns.get(table, set())
        prepared: list[dict] = []
        for row in rows:
            row = dict(row)
            if "id" in columns:
                row.setdefault("id", str(uuid.uuid4()))
            if "created_at" in columns:
                row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
            self._check_columns(table, row)
            prepared.append(row)

        try:
            with self._connect() as conn:
                for row in prepared:
                    names = list(row)
                    conn.execute(
                        f"INSERT INTO {table} ({', '.join(names)}) "
                        f"VALUES ({', '.join('?' for _ in names)})",
                        [row[n] for n in names],
                    )
        except sqlite3.IntegrityError as exc:
            raise StoreConflictError(f"Insert into {table} rejected: {exc}") from exc

        logger.debug("Inserted %d row(s) into %s", len(prepared), table)
        if "id" not in columns:
            return prepared
        # Read back so column defaults are part of the result
        by_id = {
            r["id"]: r
            for r in await self.select(table, {"id": [row["id"] for row in prepared]})
        }
        return [by_id[row["id"]] for row in prepared]

    async def update(self, table: str, values: dict, filters: Filters) -> list[dict]:
        """Update matching rows and return them as they are afterwards.

        Runs under BEGIN IMMEDIATE so the rows picked by ``filters`` are the
        rows written: a filter on the current state acts as a guard.
        """
        if not filters:
            raise StoreError("Refusing to update without filters")
        self._check_columns(table, values)
        where, params = self._where(table, filters)
        key = "id" if "id" in self._columns[table] else "rowid"

        conn = self._connect()
        try:
            with conn:
                conn.execute("BEGIN IMMEDIATE")
                keys = [r[0] for r in conn.execute(f"SELECT {key} FROM {table}{where}", params)]
                if not keys:
                    return []
                placeholders = ", ".join("?" for _ in keys)
                assignments = ", ".join(f"{c} = ?" for c in values)
                conn.execute(
                    f"UPDATE {table} SET {assignments} WHERE {key} IN ({placeholders})",
                    [*values.values(), *keys],
                )
                rows = conn.execute(
                    f"SELECT * FROM {table} WHERE {key} IN ({placeholders})", keys,
                ).fetchall()
        except sqlite3.IntegrityError as exc:
            raise StoreConflictError(f"Update of {table} rejected: {exc}") from exc
        finally:
            conn.close()
        return [dict(r) for r in rows]

    async def delete(self, table: str, filters: Filters) -> int:
        if not filters:
            raise StoreError("Refusing to delete without filters")
        where, params = self._where(table, filters)
        with self._connect() as conn:
            cursor = conn.execute(f"DELETE FROM {table}{where}", params)
        return cursor.rowcount
