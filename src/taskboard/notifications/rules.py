# src/taskboard/notifications/rules.py

from __future__ import annotations

"""
Notification side-effect rules.

Rules are pure: (task before, task after, actor name) -> drafts.
No storage access here; TaskStore persists whatever the rules return.

- create with an assignee                    -> ASSIGNMENT to the assignee
- update that sets a new, non-empty assignee -> ASSIGNMENT to the new assignee
- update that moves status into COMPLETED    -> COMPLETION to the task creator

Both update rules may fire for the same change; assignment comes first.
"""

from .notification_models import NotificationDraft, NotificationType
from ..tasks.task_models import Task, TaskStatus


def assignment_on_create(task: Task, actor_name: str) -> NotificationDraft | None:
    if not task.assigned_to:
        return None
    return NotificationDraft(
        message=f"{actor_name} assigned you a new task: {task.title}",
        type=NotificationType.ASSIGNMENT,
        task_id=task.id,
        recipient_id=task.assigned_to,
    )


def assignment_on_update(before: Task, after: Task, actor_name: str) -> NotificationDraft | None:
    if not after.assigned_to or after.assigned_to == before.assigned_to:
        return None
    return NotificationDraft(
        message=f"{actor_name} assigned you a task: {after.title}",
        type=NotificationType.ASSIGNMENT,
        task_id=after.id,
        recipient_id=after.assigned_to,
    )


def completion_on_update(before: Task, after: Task, actor_name: str) -> NotificationDraft | None:
    if before.status == TaskStatus.COMPLETED or after.status != TaskStatus.COMPLETED:
        return None
    return NotificationDraft(
        message=f"{actor_name} completed the task: {after.title}",
        type=NotificationType.COMPLETION,
        task_id=after.id,
        recipient_id=after.created_by or None,
    )


def evaluate_task_change(
    before: Task | None,
    after: Task,
    actor_name: str,
) -> list[NotificationDraft]:
    """All drafts triggered by one create (before=None) or update."""
    if before is None:
        drafts = [assignment_on_create(after, actor_name)]
    else:
        drafts = [
            assignment_on_update(before, after, actor_name),
            completion_on_update(before, after, actor_name),
        ]
    return [d for d in drafts if d is not None]
