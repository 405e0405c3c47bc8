"""
Household Chores — Entry Point.

`python main.py <person_id>` prints the chore board of that person's
household from the configured store.
"""

import asyncio
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from src.adapters.store_factory import create_blob_storage, create_store
from src.core.engine import HouseholdEngine
from src.core.errors import HouseholdError


async def print_board(person_id: str) -> None:
    engine = HouseholdEngine.from_store(create_store(), blobs=create_blob_storage())
    for entry in await engine.views.build_view_for_person(person_id):
        print(f"{entry.person.display_name}:")
        if not entry.chores:
            print("  (no chores)")
        for view in entry.chores:
            flags = " [overdue]" if view.overdue else ""
            repeat = f" every {', '.join(view.repeat_labels)}" if view.repeat_days else ""
            print(f"  - {view.chore.name} due {view.chore.due_date}{repeat}{flags}")


def main() -> None:
    if len(sys.argv) != 2:
        print("usage: python main.py <person_id>", file=sys.stderr)
        sys.exit(2)
    try:
        asyncio.run(print_board(sys.argv[1]))
    except HouseholdError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
