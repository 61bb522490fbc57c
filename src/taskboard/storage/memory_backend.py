# src/taskboard/storage/memory_backend.py

from __future__ import annotations

import copy
import logging

from ..core.ports import Record
from ..errors import CollaboratorError

logger = logging.getLogger(__name__)


class InMemoryTable:
    """
    Process-local table: the browser-local-storage style variant.

    Records are deep-copied on the way in and out, so callers can never
    mutate stored state by accident.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._rows: dict[str, Record] = {}

    def list_records(self) -> list[Record]:
        return [copy.deepcopy(r) for r in self._rows.values()]

    def get_record(self, record_id: str) -> Record | None:
        row = self._rows.get(str(record_id))
        return copy.deepcopy(row) if row is not None else None

    def insert_record(self, record: Record) -> Record:
        record_id = record.get("id")
        if not record_id:
            raise CollaboratorError("memory", f"{self.name}: record id is required")
        if str(record_id) in self._rows:
            raise CollaboratorError("memory", f"{self.name}: duplicate id {record_id!r}")
        self._rows[str(record_id)] = copy.deepcopy(record)
        return copy.deepcopy(record)

    def update_record(self, record_id: str, changes: Record) -> Record | None:
        row = self._rows.get(str(record_id))
        if row is None:
            return None
        row.update(copy.deepcopy({k: v for k, v in changes.items() if k != "id"}))
        return copy.deepcopy(row)

    def delete_record(self, record_id: str) -> bool:
        return self._rows.pop(str(record_id), None) is not None

    def count(self) -> int:
        return len(self._rows)


class InMemoryBackend:
    def __init__(self) -> None:
        self._tasks = InMemoryTable("tasks")
        self._profiles = InMemoryTable("profiles")
        self._notifications = InMemoryTable("notifications")
        logger.debug("InMemoryBackend ready")

    @property
    def tasks(self) -> InMemoryTable:
        return self._tasks

    @property
    def profiles(self) -> InMemoryTable:
        return self._profiles

    @property
    def notifications(self) -> InMemoryTable:
        return self._notifications

    def close(self) -> None:
        return
