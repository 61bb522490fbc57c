# src/taskboard/storage/mapping.py

"""
Bidirectional mapping between backend records and domain models.

Backend records use snake_case keys and ISO-8601 strings for timestamps
(e.g. "assigned_to", "due_date", "avatar_url"). Optional keys may be missing
or null; both map to None. Required keys that are missing fall back to the
same defaults the enums use (status -> todo, priority -> medium, role -> member).
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from ..core.ports import Record
from ..notifications.notification_models import Notification, NotificationType
from ..tasks.task_models import Priority, Task, TaskStatus
from ..users.user_models import Role, User, default_name_for


def ensure_aware(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def parse_ts(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return ensure_aware(raw)
    if isinstance(raw, (int, float)):
        return datetime.fromtimestamp(float(raw), tz=UTC)
    text = str(raw).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_aware(datetime.fromisoformat(text))


def format_ts(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return ensure_aware(dt).isoformat()


def _opt_str(raw: Any) -> str | None:
    if raw is None:
        return None
    s = str(raw)
    return s if s != "" else None


# ---- tasks ----


def task_from_record(rec: Record) -> Task:
    created_at = parse_ts(rec.get("created_at")) or datetime.fromtimestamp(0, tz=UTC)
    updated_at = parse_ts(rec.get("updated_at")) or created_at
    tags = rec.get("tags") or ()
    return Task(
        id=str(rec["id"]),
        title=str(rec.get("title") or ""),
        description=_opt_str(rec.get("description")),
        status=TaskStatus.from_db(rec.get("status")),
        priority=Priority.from_db(rec.get("priority")),
        assigned_to=_opt_str(rec.get("assigned_to")),
        created_by=str(rec.get("created_by") or ""),
        due_date=parse_ts(rec.get("due_date")),
        created_at=created_at,
        updated_at=updated_at,
        tags=tuple(str(t) for t in tags),
    )


def task_to_record(task: Task) -> Record:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "status": task.status.value,
        "priority": task.priority.value,
        "assigned_to": task.assigned_to,
        "created_by": task.created_by,
        "due_date": format_ts(task.due_date),
        "created_at": format_ts(task.created_at),
        "updated_at": format_ts(task.updated_at),
        "tags": list(task.tags),
    }


# Domain field name -> record key, for partial updates.
TASK_FIELD_TO_KEY: dict[str, str] = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "assigned_to": "assigned_to",
    "due_date": "due_date",
    "tags": "tags",
    "updated_at": "updated_at",
}


def task_changes_to_record(changes: dict[str, Any]) -> Record:
    """Map already-validated domain changes to backend keys/encodings."""
    out: Record = {}
    for name, value in changes.items():
        key = TASK_FIELD_TO_KEY[name]
        if isinstance(value, datetime):
            out[key] = format_ts(value)
        elif isinstance(value, (TaskStatus, Priority)):
            out[key] = value.value
        elif name == "tags":
            out[key] = list(value or ())
        else:
            out[key] = value
    return out


# ---- profiles ----


def user_from_profile(rec: Record, *, email: str | None = None) -> User:
    """
    Build a User from a profile record.

    `email` (typically from the session) wins over the profile's own email,
    since hosted profile tables often do not carry it.
    """
    resolved_email = email or _opt_str(rec.get("email")) or ""
    name = _opt_str(rec.get("name")) or default_name_for(resolved_email)
    return User(
        id=str(rec["id"]),
        name=name,
        email=resolved_email,
        avatar=_opt_str(rec.get("avatar_url")),
        role=Role.from_db(rec.get("role")),
    )


def user_to_profile(user: User) -> Record:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "avatar_url": user.avatar,
        "role": user.role.value,
    }


# ---- notifications ----


def notification_from_record(rec: Record) -> Notification:
    try:
        ntype = NotificationType(rec.get("type") or "")
    except ValueError:
        ntype = NotificationType.MENTION
    return Notification(
        id=str(rec["id"]),
        message=str(rec.get("message") or ""),
        type=ntype,
        task_id=_opt_str(rec.get("task_id")),
        recipient_id=_opt_str(rec.get("recipient_id")),
        read=bool(rec.get("read") or False),
        created_at=parse_ts(rec.get("created_at")) or datetime.fromtimestamp(0, tz=UTC),
    )


def notification_to_record(n: Notification) -> Record:
    return {
        "id": n.id,
        "message": n.message,
        "type": n.type.value,
        "task_id": n.task_id,
        "recipient_id": n.recipient_id,
        "read": n.read,
        "created_at": format_ts(n.created_at),
    }
