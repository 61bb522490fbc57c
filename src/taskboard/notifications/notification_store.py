# src/taskboard/notifications/notification_store.py

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from ..core.ports import Backend, Clock
from ..errors import ValidationError
from ..storage.mapping import notification_from_record, notification_to_record
from .notification_models import Notification, NotificationDraft, NotificationType

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return uuid.uuid4().hex


class NotificationStore:
    """
    Notifications over the backend's `notifications` table.

    Notifications are append-only: the only mutation is the `read` flag.
    `recipient_id=None` on the query methods means "all notifications".
    """

    def __init__(
        self,
        backend: Backend,
        *,
        clock: Clock = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._table = backend.notifications
        self._clock = clock
        self._new_id = id_factory

    def list_notifications(self, recipient_id: str | None = None) -> list[Notification]:
        """Newest first; ties keep the most recently inserted first."""
        items = [notification_from_record(r) for r in reversed(self._table.list_records())]
        if recipient_id is not None:
            items = [n for n in items if n.recipient_id == recipient_id]
        return sorted(items, key=lambda n: n.created_at, reverse=True)

    def get_notification(self, notification_id: str) -> Notification | None:
        rec = self._table.get_record(notification_id)
        return notification_from_record(rec) if rec else None

    def create_notification(
        self,
        *,
        message: str,
        type: NotificationType | str,
        task_id: str | None = None,
        recipient_id: str | None = None,
        read: bool = False,
    ) -> Notification:
        if not message or not message.strip():
            raise ValidationError("message", "message is required")
        try:
            ntype = NotificationType(type)
        except ValueError as e:
            raise ValidationError("type", f"unknown notification type {type!r}") from e

        notification = Notification(
            id=self._new_id(),
            message=message.strip(),
            type=ntype,
            task_id=task_id,
            recipient_id=recipient_id,
            read=bool(read),
            created_at=self._clock(),
        )
        rec = self._table.insert_record(notification_to_record(notification))
        logger.info(
            "Notification created id=%s type=%s task_id=%s recipient=%s",
            notification.id,
            ntype.value,
            task_id,
            recipient_id,
        )
        return notification_from_record(rec)

    def create_from_draft(self, draft: NotificationDraft) -> Notification:
        return self.create_notification(
            message=draft.message,
            type=draft.type,
            task_id=draft.task_id,
            recipient_id=draft.recipient_id,
        )

    def mark_as_read(self, notification_id: str) -> bool:
        """Returns False when the id does not exist."""
        return self._table.update_record(notification_id, {"read": True}) is not None

    def mark_all_as_read(self, recipient_id: str | None = None) -> int:
        """Mark every unread notification (optionally one recipient's) as read; returns how many."""
        changed = 0
        for n in self.list_notifications(recipient_id):
            if n.read:
                continue
            if self._table.update_record(n.id, {"read": True}) is not None:
                changed += 1
        logger.debug("Marked %d notifications as read recipient=%s", changed, recipient_id)
        return changed

    def unread_count(self, recipient_id: str | None = None) -> int:
        return sum(1 for n in self.list_notifications(recipient_id) if not n.read)

    def has_notification(self, type: NotificationType | str, task_id: str) -> bool:
        ntype = NotificationType(type)
        return any(
            n.type == ntype and n.task_id == task_id for n in self.list_notifications()
        )
