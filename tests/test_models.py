"""Tests for src.data.models — building records from store rows."""

from src.data.models import (
    Assignment,
    Chore,
    ChoreStatus,
    Machine,
    MachineStatus,
    Person,
    Thread,
)


def test_chore_from_full_row():
    chore = Chore.from_row({
        "id": "c1",
        "household_id": "h1",
        "name": "Take out trash",
        "due_date": "2025-07-02",
        "status": "completed",
        "description": "Bins",
        "drop_reason": None,
        "completed_at": "2025-07-02T18:30:00+00:00",
        "image_url": "https://img/1.jpg",
        "repeat_days": 21,
        "created_at": "2025-07-01T09:00:00+00:00",
    })
    assert chore.status is ChoreStatus.COMPLETED
    assert chore.repeat_mask == 21
    assert chore.image_url == "https://img/1.jpg"


def test_chore_defaults_from_sparse_row():
    chore = Chore.from_row({
        "id": "c1", "household_id": "h1", "name": "Mop", "due_date": "2025-07-02",
    })
    assert chore.status is ChoreStatus.ONGOING
    assert chore.repeat_mask == 0
    assert chore.description is None
    assert chore.created_at == ""


def test_person_blank_name_is_unnamed():
    assert Person.from_row({"id": "p1", "display_name": "  "}).display_name == "Unnamed"
    assert Person.from_row({"id": "p2"}).household_id is None


def test_assignment_reads_profile_column():
    assert Assignment.from_row({"chore_id": "c1", "profile_id": "p1"}) == Assignment("c1", "p1")


def test_machine_busy_flag():
    machine = Machine.from_row({
        "id": "m1", "household_id": "h1", "name": "Washer",
        "status": "busy", "occupied_by": "p1",
    })
    assert machine.status is MachineStatus.BUSY
    assert machine.is_busy


def test_thread_starts_without_messages():
    thread = Thread.from_row({
        "id": "t1", "household_id": "h1", "author_id": "p1", "body": "Hi", "title": None,
    })
    assert thread.title == ""
    assert thread.messages == []
