# tests/test_sqlite_backend.py

from __future__ import annotations

import sqlite3
from datetime import timedelta
from pathlib import Path

import pytest

from taskboard.errors import CollaboratorError
from taskboard.notifications.notification_store import NotificationStore
from taskboard.storage.memory_backend import InMemoryBackend
from taskboard.storage.sqlite_backend import SQLiteBackend
from taskboard.tasks.task_store import TaskStore
from taskboard.users.user_store import UserStore

from .conftest import NOW
from .fakes import sequential_ids

TASK_RECORD = {
    "id": "t1",
    "title": "Ship",
    "description": None,
    "status": "todo",
    "priority": "low",
    "assigned_to": None,
    "created_by": "u1",
    "due_date": None,
    "created_at": "2024-05-15T12:00:00+00:00",
    "updated_at": "2024-05-15T12:00:00+00:00",
    "tags": ["x", "y"],
}


@pytest.mark.parametrize("make_backend", ["sqlite", "memory"])
def test_backends_round_trip_the_same_records(tmp_path: Path, make_backend: str) -> None:
    backend = SQLiteBackend(tmp_path / "db.sqlite3") if make_backend == "sqlite" else InMemoryBackend()

    stored = backend.tasks.insert_record(dict(TASK_RECORD))
    assert stored == TASK_RECORD
    assert backend.tasks.get_record("t1") == TASK_RECORD

    updated = backend.tasks.update_record("t1", {"status": "completed", "tags": []})
    assert updated is not None
    assert (updated["status"], updated["tags"]) == ("completed", [])

    assert backend.tasks.update_record("missing", {"status": "todo"}) is None
    assert backend.tasks.delete_record("t1") is True
    assert backend.tasks.delete_record("t1") is False
    assert backend.tasks.get_record("t1") is None


def test_sqlite_bool_and_unknown_keys(sqlite_backend) -> None:
    rec = sqlite_backend.notifications.insert_record(
        {"id": "n1", "message": "m", "type": "reminder", "read": False, "extra": "ignored",
         "created_at": "2024-05-15T12:00:00+00:00"}
    )
    assert rec["read"] is False
    assert "extra" not in rec

    assert sqlite_backend.notifications.update_record("n1", {"read": True})["read"] is True


def test_sqlite_list_keeps_insertion_order(sqlite_backend) -> None:
    for i in (3, 1, 2):
        sqlite_backend.profiles.insert_record({"id": f"u{i}", "email": f"u{i}@example.com"})
    assert [r["id"] for r in sqlite_backend.profiles.list_records()] == ["u3", "u1", "u2"]


def test_sqlite_errors_become_collaborator_errors(sqlite_backend) -> None:
    sqlite_backend.profiles.insert_record({"id": "u1", "email": "a@example.com"})
    with pytest.raises(CollaboratorError) as exc:
        sqlite_backend.profiles.insert_record({"id": "u1", "email": "b@example.com"})
    assert exc.value.collaborator == "sqlite"
    assert "UNIQUE" in exc.value.message


def test_sqlite_migrates_missing_columns(tmp_path: Path) -> None:
    db = tmp_path / "old.sqlite3"
    conn = sqlite3.connect(db)
    conn.execute("CREATE TABLE tasks (id TEXT PRIMARY KEY, title TEXT NOT NULL DEFAULT '')")
    conn.execute("INSERT INTO tasks (id, title) VALUES ('old', 'Legacy')")
    conn.commit()
    conn.close()

    backend = SQLiteBackend(db)

    rec = backend.tasks.get_record("old")
    assert rec is not None
    assert rec["tags"] == []
    assert rec["status"] == "todo"


def test_stores_work_over_sqlite(sqlite_backend, clock) -> None:
    users = UserStore(sqlite_backend, clock=clock)
    users.create_profile(user_id="u1", email="alice@example.com", name="Alice")
    users.create_profile(user_id="u2", email="bob@example.com", name="Bob")
    notifications = NotificationStore(sqlite_backend, clock=clock, id_factory=sequential_ids("n"))
    tasks = TaskStore(sqlite_backend, users=users, notifications=notifications, clock=clock)

    task = tasks.create_task(
        title="Fix bug", created_by="u2", acting_user_id="u2", assigned_to="u1",
        due_date=NOW + timedelta(days=1), tags=["bug"],
    )

    assert tasks.get_task(task.id) == task
    assert notifications.unread_count("u1") == 1

    done = tasks.update_task(task.id, acting_user_id="u1", status="completed")
    assert done is not None and done.is_completed
    assert [n.message for n in notifications.list_notifications("u2")] == ["Alice completed the task: Fix bug"]
