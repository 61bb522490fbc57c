# src/taskboard/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime

from ..identity.session import LocalIdentityProvider, SessionTracker
from ..notifications.notification_store import NotificationStore
from ..tasks.task_store import TaskStore
from ..users.user_store import UserStore
from .ports import Backend, Clock


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    backend: Backend
    clock: Clock
    users: UserStore
    notifications: NotificationStore
    tasks: TaskStore
    identity: LocalIdentityProvider
    session: SessionTracker

    # Serializes console commands and background reminder sweeps.
    lock: threading.RLock = field(default_factory=threading.RLock)

    def now(self) -> datetime:
        return self.clock()

    @property
    def current_user_id(self) -> str | None:
        user = self.session.current_user
        return user.id if user else None
