# src/taskboard/notifications/notification_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class NotificationType(StrEnum):
    ASSIGNMENT = "assignment"
    REMINDER = "reminder"
    MENTION = "mention"
    COMPLETION = "completion"


@dataclass(slots=True, frozen=True)
class Notification:
    id: str
    message: str
    type: NotificationType
    created_at: datetime
    read: bool = False
    task_id: str | None = None
    recipient_id: str | None = None


@dataclass(slots=True, frozen=True)
class NotificationDraft:
    """A notification that a rule wants created; the store assigns id and timestamp."""

    message: str
    type: NotificationType
    task_id: str | None = None
    recipient_id: str | None = None
