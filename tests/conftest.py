# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard.cli.bootstrap import create_initial_state
from taskboard.core.state import AppState
from taskboard.notifications.notification_store import NotificationStore
from taskboard.storage.memory_backend import InMemoryBackend
from taskboard.storage.sqlite_backend import SQLiteBackend
from taskboard.tasks.task_store import TaskStore
from taskboard.users.user_store import UserStore

from .fakes import FixedClock, sequential_ids

# Wednesday; the Monday-based week runs 2024-05-13 .. 2024-05-19.
NOW = datetime(2024, 5, 15, 12, 0, tzinfo=UTC)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskboard-test",
        log_level="DEBUG",
        backend="memory",
        data_dir=tmp_path / "data",
        db_path=tmp_path / "data" / "taskboard.sqlite3",
        seed_demo_data=False,
        timezone="UTC",
        week_start=0,
        reminders_enabled=False,
        reminder_lead_hours=24.0,
        reminder_interval_seconds=60.0,
    )


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture()
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture()
def sqlite_backend(tmp_path: Path) -> SQLiteBackend:
    return SQLiteBackend(tmp_path / "taskboard.sqlite3")


@pytest.fixture()
def users(backend, clock) -> UserStore:
    store = UserStore(backend, clock=clock)
    store.create_profile(user_id="u1", email="alice@example.com", name="Alice Smith", role="admin")
    store.create_profile(user_id="u2", email="bob@example.com", name="Bob Jones")
    return store


@pytest.fixture()
def notifications(backend, clock) -> NotificationStore:
    return NotificationStore(backend, clock=clock, id_factory=sequential_ids("n"))


@pytest.fixture()
def tasks(backend, clock, users, notifications) -> TaskStore:
    return TaskStore(
        backend,
        users=users,
        notifications=notifications,
        clock=clock,
        id_factory=sequential_ids("t"),
    )


@pytest.fixture()
def state(settings, backend, clock, users) -> AppState:
    """
    AppState wired through the real composition root over the in-memory backend.

    The `users` fixture has already created the two profiles, so both emails
    can /login.
    """
    return create_initial_state(settings=settings, backend=backend, clock=clock)
