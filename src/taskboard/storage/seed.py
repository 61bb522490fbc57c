# src/taskboard/storage/seed.py

"""
Demo data for a fresh backend.

Seeds three users, five tasks and three notifications, with due dates relative
to `now` (yesterday / tomorrow / next week), and only when the backend has no
tasks and no profiles yet. Records are written straight to the tables, so no
notification rules run.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from ..core.ports import Backend, Record
from .mapping import format_ts

logger = logging.getLogger(__name__)


def _avatar(name: str, color: str) -> str:
    return f"https://ui-avatars.com/api/?name={name.replace(' ', '+')}&background={color}&color=fff"


def demo_profiles(now: datetime) -> list[Record]:
    ts = format_ts(now - timedelta(days=30))
    return [
        {"id": "1", "name": "John Doe", "email": "john@example.com",
         "avatar_url": _avatar("John Doe", "0D8ABC"), "role": "admin", "created_at": ts},
        {"id": "2", "name": "Jane Smith", "email": "jane@example.com",
         "avatar_url": _avatar("Jane Smith", "7C3AED"), "role": "member", "created_at": ts},
        {"id": "3", "name": "Alex Johnson", "email": "alex@example.com",
         "avatar_url": _avatar("Alex Johnson", "EF4444"), "role": "member", "created_at": ts},
    ]


def demo_tasks(now: datetime) -> list[Record]:
    yesterday = format_ts(now - timedelta(days=1))
    tomorrow = format_ts(now + timedelta(days=1))
    next_week = format_ts(now + timedelta(days=7))
    three_days_ago = format_ts(now - timedelta(days=3))
    five_days_ago = format_ts(now - timedelta(days=5))
    today = format_ts(now)

    def task(**fields) -> Record:
        return {"description": None, "tags": [], **fields}

    return [
        task(id="1", title="Design new user dashboard",
             description="Create wireframes and high-fidelity designs for the new user dashboard.",
             status="in-progress", priority="high", assigned_to="1", created_by="2",
             due_date=tomorrow, created_at=yesterday, updated_at=today, tags=["design", "frontend"]),
        task(id="2", title="Implement user authentication",
             description="Set up JWT authentication for user login and registration.",
             status="todo", priority="high", assigned_to="1", created_by="2",
             due_date=next_week, created_at=yesterday, updated_at=yesterday, tags=["backend", "security"]),
        task(id="3", title="Fix pagination bug",
             description="The pagination component is not working correctly on mobile devices.",
             status="review", priority="medium", assigned_to="2", created_by="1",
             due_date=yesterday, created_at=three_days_ago, updated_at=yesterday, tags=["bug", "frontend"]),
        task(id="4", title="Update documentation",
             description="Update the API documentation with new endpoints.",
             status="todo", priority="low", assigned_to="3", created_by="1",
             due_date=next_week, created_at=yesterday, updated_at=yesterday, tags=["documentation"]),
        task(id="5", title="Optimize database queries",
             description="Improve database performance by optimizing slow queries.",
             status="completed", priority="medium", assigned_to="2", created_by="3",
             due_date=yesterday, created_at=five_days_ago, updated_at=yesterday, tags=["backend", "database"]),
    ]


def demo_notifications(now: datetime) -> list[Record]:
    return [
        {"id": "1", "message": "Jane assigned you a new task: Design new user dashboard",
         "type": "assignment", "task_id": "1", "recipient_id": "1", "read": False,
         "created_at": format_ts(now - timedelta(hours=1))},
        {"id": "2", "message": 'Task "Fix pagination bug" is due tomorrow',
         "type": "reminder", "task_id": "3", "recipient_id": "2", "read": False,
         "created_at": format_ts(now - timedelta(hours=3))},
        {"id": "3", "message": "Alex completed the task: Optimize database queries",
         "type": "completion", "task_id": "5", "recipient_id": "3", "read": True,
         "created_at": format_ts(now - timedelta(hours=12))},
    ]


def seed_demo_data(backend: Backend, now: datetime) -> bool:
    """Returns True if data was written."""
    if backend.tasks.list_records() or backend.profiles.list_records():
        logger.debug("Backend not empty; skipping demo seed")
        return False

    for rec in demo_profiles(now):
        backend.profiles.insert_record(rec)
    for rec in demo_tasks(now):
        backend.tasks.insert_record(rec)
    for rec in demo_notifications(now):
        backend.notifications.insert_record(rec)

    logger.info("Seeded demo data (3 users, 5 tasks, 3 notifications)")
    return True
