"""
Household Chores — Discussion threads.

Members open threads in their household, optionally about a chore, and post
messages in them. Threads list newest first; messages oldest first.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.core.errors import CrossHouseholdError, NotFound, ValidationError
from src.core.store_calls import call_store, insert_row
from src.data.models import Message, Thread
from src.ports.change_port import ChangeEvent

if TYPE_CHECKING:
    from src.core.chore_repository import ChoreRepository
    from src.core.household_directory import HouseholdDirectory
    from src.ports.change_port import ChangeFeedPort
    from src.ports.store_port import StorePort

logger = logging.getLogger(__name__)


class ThreadBoard:
    def __init__(
        self,
        store: StorePort,
        directory: HouseholdDirectory,
        chores: ChoreRepository,
        changes: ChangeFeedPort | None = None,
    ) -> None:
        self._store = store
        self._directory = directory
        self._chores = chores
        self._changes = changes

    async def start_thread(
        self,
        author_id: str,
        body: str,
        title: str = "",
        chore_id: str | None = None,
    ) -> Thread:
        body = (body or "").strip()
        if not body:
            raise ValidationError({"body": "Write something to start a discussion."})

        household_id = await self._directory.resolve_household_for_person(author_id)
        if household_id is None:
            raise CrossHouseholdError(f"Person {author_id} has no household")
        if chore_id is not None:
            chore = await self._chores.get_chore(chore_id)
            if chore.household_id != household_id:
                raise CrossHouseholdError(f"Chore {chore_id} is not in household {household_id}")

        row = {
            "household_id": household_id,
            "author_id": author_id,
            "title": (title or "").strip(),
            "body": body,
            "chore_id": chore_id,
        }
        thread = Thread.from_row(
            await insert_row(self._store, "threads", row, what="insert thread")
        )
        logger.info("Thread %s started by %s", thread.id, author_id)
        await self._publish("threads", household_id, thread.id)
        return thread

    async def get_thread(self, thread_id: str, with_messages: bool = False) -> Thread:
        rows = await call_store(
            lambda: self._store.select("threads", {"id": thread_id}), what="fetch thread",
        )
        if not rows:
            raise NotFound(f"Thread {thread_id} not found")
        thread = Thread.from_row(rows[0])
        if with_messages:
            thread.messages = await self.list_messages(thread_id)
        return thread

    async def list_threads(self, household_id: str, chore_id: str | None = None) -> list[Thread]:
        filters = {"household_id": household_id}
        if chore_id is not None:
            filters["chore_id"] = chore_id
        rows = await call_store(
            lambda: self._store.select("threads", filters, order_by=("-created_at", "id")),
            what="list threads",
        )
        return [Thread.from_row(r) for r in rows]

    async def post_message(self, thread_id: str, author_id: str, text: str) -> Message:
        text = (text or "").strip()
        if not text:
            raise ValidationError({"text": "Message is empty."})
        thread = await self.get_thread(thread_id)
        await self._directory.require_member(author_id, thread.household_id)

        row = {"thread_id": thread_id, "author_id": author_id, "text": text}
        message = Message.from_row(
            await insert_row(self._store, "messages", row, what="insert message")
        )
        await self._publish("messages", thread.household_id, message.id)
        return message

    async def list_messages(self, thread_id: str) -> list[Message]:
        rows = await call_store(
            lambda: self._store.select(
                "messages", {"thread_id": thread_id}, order_by=("created_at", "id"),
            ),
            what="list messages",
        )
        return [Message.from_row(r) for r in rows]

    async def _publish(self, table: str, household_id: str, record_id: str) -> None:
        if self._changes is None:
            return
        await self._changes.publish(
            ChangeEvent(table=table, household_id=household_id, record_id=record_id, action="insert")
        )
