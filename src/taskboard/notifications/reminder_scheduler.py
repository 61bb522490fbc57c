# src/taskboard/notifications/reminder_scheduler.py

from __future__ import annotations

"""
Due-date reminders.

A small polling loop that:
- lists tasks that are assigned, not completed and due within the lead window,
- skips tasks that already have a reminder,
- stores one REMINDER notification per remaining task (recipient: the assignee).

Building the message is a pure function (build_reminder); the loop only
decides when to run a sweep.
"""

import asyncio
import contextlib
import logging
from datetime import datetime, timedelta

from ..core.ports import Clock
from ..tasks.task_models import Task
from ..tasks.task_store import TaskStore
from .notification_models import NotificationDraft, NotificationType
from .notification_store import NotificationStore

logger = logging.getLogger(__name__)


def _when_phrase(due: datetime, now: datetime) -> str:
    due_day = due.astimezone(now.tzinfo).date()
    today = now.date()
    if due_day == today:
        return "today"
    if due_day == today + timedelta(days=1):
        return "tomorrow"
    return f"on {due_day.isoformat()}"


def build_reminder(task: Task, now: datetime, *, lead: timedelta) -> NotificationDraft | None:
    """
    Reminder for a task due in [now, now + lead], or None if it does not qualify.

    Overdue tasks are not reminded: the overdue views already cover them.
    """
    if task.is_completed or not task.assigned_to or task.due_date is None:
        return None
    if not (now <= task.due_date <= now + lead):
        return None
    return NotificationDraft(
        message=f'Task "{task.title}" is due {_when_phrase(task.due_date, now)}',
        type=NotificationType.REMINDER,
        task_id=task.id,
        recipient_id=task.assigned_to,
    )


def sweep_reminders(
    tasks: TaskStore,
    notifications: NotificationStore,
    *,
    now: datetime,
    lead_hours: float = 24.0,
) -> int:
    """One pass. Returns the number of reminders created."""
    lead = timedelta(hours=max(0.0, float(lead_hours)))
    already = {
        n.task_id for n in notifications.list_notifications() if n.type == NotificationType.REMINDER
    }

    created = 0
    for task in tasks.list_tasks():
        if task.id in already:
            continue
        draft = build_reminder(task, now, lead=lead)
        if draft is None:
            continue
        notifications.create_from_draft(draft)
        already.add(task.id)
        created += 1

    if created:
        logger.info("Reminder sweep created %d reminders", created)
    return created


async def run_reminder_scheduler(
        tasks: TaskStore,
        notifications: NotificationStore,
        *,
        clock: Clock,
        interval_seconds: float = 60.0,
        lead_hours: float = 24.0,
        lock: contextlib.AbstractContextManager | None = None,
) -> None:
    """
    Simple polling scheduler.

    Every interval_seconds run sweep_reminders(). A failing sweep is logged and
    retried on the next tick. `lock` (if given) is held for the duration of a
    sweep so it does not interleave with console mutations. To stop the
    scheduler, cancel the coroutine/task.
    """
    sleep_s = max(0.5, float(interval_seconds))

    while True:
        try:
            with lock if lock is not None else contextlib.nullcontext():
                sweep_reminders(tasks, notifications, now=clock(), lead_hours=lead_hours)
        except Exception:
            logger.exception("Reminder sweep failed")

        await asyncio.sleep(sleep_s)
