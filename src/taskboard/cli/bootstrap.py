# src/taskboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the backend (SQLite file or in-memory),
- wires stores, identity provider and session tracker into AppState,
- seeds demo data into an empty backend (optional).
"""

from __future__ import annotations

import logging
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..config import get_settings
from ..core.ports import Backend, Clock
from ..core.state import AppState
from ..identity.session import LocalIdentityProvider, SessionTracker
from ..notifications.notification_store import NotificationStore
from ..storage.memory_backend import InMemoryBackend
from ..storage.seed import seed_demo_data
from ..storage.sqlite_backend import SQLiteBackend
from ..tasks.task_store import TaskStore
from ..users.user_store import UserStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def make_clock(tz_name: str) -> Clock:
    """Aware "now" in the configured zone; calendar-day views follow this zone."""
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r; falling back to UTC", tz_name)
        tz = ZoneInfo("UTC")

    def _now() -> datetime:
        return datetime.now(tz)

    return _now


def create_backend(settings) -> Backend:
    if getattr(settings, "backend", "sqlite") == "memory":
        return InMemoryBackend()
    return SQLiteBackend(settings.db_path)


def register_accounts(identity: LocalIdentityProvider, users: UserStore) -> int:
    """Every profile with an email can sign in with it."""
    n = 0
    for user in users.list_users():
        if user.email:
            identity.register(user.email, user.id)
            n += 1
    return n


def create_initial_state(*, settings=None, backend: Backend | None = None, clock: Clock | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings/backend/clock injectable makes the app easier to test and
    avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if backend is None:
        _ensure_local_dirs(settings)
        backend = create_backend(settings)

    if clock is None:
        clock = make_clock(getattr(settings, "timezone", "UTC"))

    if getattr(settings, "seed_demo_data", False):
        seed_demo_data(backend, clock())

    users = UserStore(backend, clock=clock)
    notifications = NotificationStore(backend, clock=clock)
    tasks = TaskStore(backend, users=users, notifications=notifications, clock=clock)

    identity = LocalIdentityProvider()
    register_accounts(identity, users)

    session = SessionTracker(identity, users)
    session.start()

    return AppState(
        settings=settings,
        backend=backend,
        clock=clock,
        users=users,
        notifications=notifications,
        tasks=tasks,
        identity=identity,
        session=session,
    )


def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.session.stop()
    except Exception:
        logger.debug("Session tracker stop failed.", exc_info=True)
    try:
        state.backend.close()
    except Exception:
        logger.exception("Backend close failed.")
