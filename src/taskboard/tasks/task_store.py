# src/taskboard/tasks/task_store.py

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

from ..core.ports import Backend, Clock
from ..errors import ValidationError
from ..notifications.notification_models import Notification
from ..notifications.notification_store import NotificationStore
from ..notifications.rules import evaluate_task_change
from ..storage.mapping import ensure_aware, task_changes_to_record, task_from_record, task_to_record
from ..users.user_store import UserStore
from .task_models import UPDATABLE_FIELDS, Priority, Task, TaskStatus

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return uuid.uuid4().hex


# ---- field coercion (shared by create/update) ----


def _coerce_title(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("title", "title is required")
    return value.strip()


def _coerce_status(value: Any) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError as e:
        raise ValidationError("status", f"unknown status {value!r}") from e


def _coerce_priority(value: Any) -> Priority:
    try:
        return Priority(value)
    except ValueError as e:
        raise ValidationError("priority", f"unknown priority {value!r}") from e


def _coerce_optional_text(field: str, value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    return value.strip() or None


def _coerce_due_date(value: Any) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, datetime):
        raise ValidationError("due_date", "must be a datetime")
    return ensure_aware(value)


def _coerce_tags(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        raise ValidationError("tags", "must be a collection of strings, not a string")
    tags: list[str] = []
    for t in value:
        if not isinstance(t, str):
            raise ValidationError("tags", f"tag {t!r} is not a string")
        if t.strip():
            tags.append(t.strip())
    return tuple(tags)


_COERCERS: dict[str, Callable[[Any], Any]] = {
    "title": _coerce_title,
    "description": lambda v: _coerce_optional_text("description", v),
    "status": _coerce_status,
    "priority": _coerce_priority,
    "assigned_to": lambda v: _coerce_optional_text("assigned_to", v),
    "due_date": _coerce_due_date,
    "tags": _coerce_tags,
}


class TaskStore:
    """
    Task CRUD + queries over the backend's `tasks` table.

    Mutations take an explicit `acting_user_id`; it is only used to render
    notification messages (no permission checks). create_task/update_task run
    the notification rules before returning, so any resulting notification is
    already stored when the caller sees the task.

    The task is written before its notifications. If storing a notification
    fails, the CollaboratorError reaches the caller but the task write stands:
    check get_task/list_tasks before re-issuing a create, or it is duplicated.

    Read-modify-write is last-writer-wins: there is no version check.
    """

    def __init__(
        self,
        backend: Backend,
        *,
        users: UserStore,
        notifications: NotificationStore,
        clock: Clock = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._table = backend.tasks
        self._users = users
        self._notifications = notifications
        self._clock = clock
        self._new_id = id_factory

    # ---- reads ----

    def list_tasks(self) -> list[Task]:
        return [task_from_record(r) for r in self._table.list_records()]

    def get_task(self, task_id: str) -> Task | None:
        if not task_id:
            return None
        rec = self._table.get_record(task_id)
        return task_from_record(rec) if rec else None

    def count_tasks(self) -> int:
        return len(self._table.list_records())

    # ---- mutations ----

    def create_task(
        self,
        *,
        title: str,
        created_by: str,
        acting_user_id: str | None,
        description: str | None = None,
        status: TaskStatus | str = TaskStatus.TODO,
        priority: Priority | str = Priority.MEDIUM,
        assigned_to: str | None = None,
        due_date: datetime | None = None,
        tags: Iterable[str] | None = None,
    ) -> Task:
        if not created_by or not str(created_by).strip():
            raise ValidationError("created_by", "created_by is required")

        now = self._clock()
        task = Task(
            id=self._new_id(),
            title=_coerce_title(title),
            description=_coerce_optional_text("description", description),
            status=_coerce_status(status),
            priority=_coerce_priority(priority),
            assigned_to=_coerce_optional_text("assigned_to", assigned_to),
            created_by=str(created_by).strip(),
            due_date=_coerce_due_date(due_date),
            created_at=now,
            updated_at=now,
            tags=_coerce_tags(tags),
        )

        stored = task_from_record(self._table.insert_record(task_to_record(task)))
        logger.debug(
            "Task created id=%s status=%s assigned_to=%s due=%s",
            stored.id,
            stored.status.value,
            stored.assigned_to,
            stored.due_date,
        )

        self._emit(None, stored, acting_user_id)
        return stored

    def update_task(
        self,
        task_id: str,
        *,
        acting_user_id: str | None,
        **changes: Any,
    ) -> Task | None:
        """
        Partial update: only the given fields change; None clears an optional field.

        Always bumps updated_at. Returns None when the task does not exist.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(sorted(unknown)[0], "field cannot be updated")

        coerced = {name: _COERCERS[name](value) for name, value in changes.items()}

        before = self.get_task(task_id)
        if before is None:
            return None

        # updated_at never goes below created_at, even with a skewed clock.
        coerced["updated_at"] = max(self._clock(), before.created_at)

        rec = self._table.update_record(task_id, task_changes_to_record(coerced))
        if rec is None:
            # Deleted between our read and write.
            return None

        after = task_from_record(rec)
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(changes))

        self._emit(before, after, acting_user_id)
        return after

    def delete_task(self, task_id: str, *, acting_user_id: str | None = None) -> bool:
        deleted = self._table.delete_record(task_id)
        if deleted:
            logger.info("Task deleted id=%s by=%s", task_id, acting_user_id)
        return deleted

    # ---- queries ----

    def tasks_assigned_to(self, user_id: str) -> list[Task]:
        return [t for t in self.list_tasks() if t.assigned_to == user_id]

    def tasks_created_by(self, user_id: str) -> list[Task]:
        return [t for t in self.list_tasks() if t.created_by == user_id]

    def overdue_tasks_for(self, user_id: str, as_of: datetime | None = None) -> list[Task]:
        """Assigned to user_id, due strictly before the as_of instant, not completed."""
        ref = ensure_aware(as_of) if as_of is not None else self._clock()
        return [
            t
            for t in self.tasks_assigned_to(user_id)
            if t.due_date is not None and t.due_date < ref and not t.is_completed
        ]

    # ---- side effects ----

    def _emit(self, before: Task | None, after: Task, acting_user_id: str | None) -> list[Notification]:
        drafts = evaluate_task_change(before, after, self._users.display_name(acting_user_id))
        return [self._notifications.create_from_draft(d) for d in drafts]
