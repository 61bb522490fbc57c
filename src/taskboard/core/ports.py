# src/taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The stores depend on Protocols instead of concrete backends.
This keeps storage/identity providers swappable and makes testing easier.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

Record = dict[str, Any]
# Backend-side row: snake_case keys, ISO-8601 timestamps, optional keys may be absent.

Clock = Callable[[], datetime]


class RecordTable(Protocol):
    """
    One collection at the persistence boundary (tasks, profiles, notifications).

    Implementations raise CollaboratorError on failure; a missing id is
    reported as None / False, never as an exception.
    """

    def list_records(self) -> list[Record]: ...
    def get_record(self, record_id: str) -> Record | None: ...
    def insert_record(self, record: Record) -> Record: ...
    def update_record(self, record_id: str, changes: Record) -> Record | None: ...
    def delete_record(self, record_id: str) -> bool: ...


class Backend(Protocol):
    """Persistence collaborator: the three tables the core reads and writes."""

    @property
    def tasks(self) -> RecordTable: ...

    @property
    def profiles(self) -> RecordTable: ...

    @property
    def notifications(self) -> RecordTable: ...

    def close(self) -> None: ...


@dataclass(slots=True, frozen=True)
class Session:
    """What the identity collaborator knows about the signed-in principal."""

    subject_id: str
    email: str | None = None


SessionCallback = Callable[[Session | None], None]


class IdentityProvider(Protocol):
    """
    Identity collaborator.

    subscribe() returns an unsubscribe callable; the callback receives the new
    session (or None) on every login/logout.
    """

    def current_session(self) -> Session | None: ...
    def subscribe(self, callback: SessionCallback) -> Callable[[], None]: ...
