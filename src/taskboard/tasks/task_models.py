# src/taskboard/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class TaskStatus(StrEnum):
    """
    Task status.

    There is no state machine: any status may follow any other.
    The only derived meaning is that COMPLETED suppresses overdue classification.
    """

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    COMPLETED = "completed"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.TODO
        try:
            return cls(raw)
        except ValueError:
            return cls.TODO


_STATUS_LABELS: dict[TaskStatus, str] = {
    TaskStatus.TODO: "To Do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.REVIEW: "In Review",
    TaskStatus.COMPLETED: "Completed",
}


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_db(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(raw)
        except ValueError:
            return cls.MEDIUM


@dataclass(slots=True, frozen=True)
class Task:
    id: str
    title: str
    status: TaskStatus
    priority: Priority
    created_by: str
    created_at: datetime
    updated_at: datetime

    description: str | None = None
    assigned_to: str | None = None
    due_date: datetime | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED


# Fields a caller may change through TaskStore.update_task.
UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {"title", "description", "status", "priority", "assigned_to", "due_date", "tags"}
)
