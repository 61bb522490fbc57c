# src/taskboard/tasks/task_views.py

"""
Derived views over task collections.

Everything here is a pure function of its inputs (no store access, no clock):
callers pass the reference instant explicitly.

Calendar days are taken in the time zone of `as_of`, so the same instant can
land in "today" for one user and "overdue" for another.
"""

from __future__ import annotations

import calendar
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from ..errors import ValidationError
from ..storage.mapping import ensure_aware
from ..users.user_models import User
from .task_models import Priority, Task, TaskStatus


@dataclass(slots=True, frozen=True)
class DueBuckets:
    overdue: list[Task]
    today: list[Task]
    this_week: list[Task]


@dataclass(slots=True, frozen=True)
class SummaryCounts:
    total: int
    completed: int
    in_progress: int
    overdue: int
    completion_rate: int


@dataclass(slots=True, frozen=True)
class MemberSummary:
    user: User
    total: int
    completed: int
    completion_rate: int
    overdue: int


def group_by_status(tasks: Iterable[Task]) -> dict[TaskStatus, int]:
    """Count per status; statuses with no tasks are left out."""
    return dict(Counter(t.status for t in tasks))


def completion_rate(tasks: Sequence[Task]) -> int:
    """Percentage of completed tasks, rounded half-up; 0 for an empty collection."""
    total = len(tasks)
    if total == 0:
        return 0
    completed = sum(1 for t in tasks if t.is_completed)
    return (200 * completed + total) // (2 * total)


def _day_of(dt: datetime, as_of: datetime) -> date:
    return ensure_aware(dt).astimezone(as_of.tzinfo).date()


def _week_end(today: date, week_start: int) -> date:
    start = today - timedelta(days=(today.weekday() - week_start) % 7)
    return start + timedelta(days=6)


def bucket_by_due_date(
    tasks: Iterable[Task],
    as_of: datetime,
    week_start: int = calendar.MONDAY,
) -> DueBuckets:
    """
    Split dated tasks into overdue / today / rest-of-this-week.

    - overdue:   due on a day before today, and not completed
    - today:     due today (completed or not)
    - this_week: due after today, up to the last day of as_of's week

    A task lands in at most one bucket; undated tasks and tasks due after this
    week land in none.
    """
    as_of = ensure_aware(as_of)
    today = as_of.date()
    week_end = _week_end(today, week_start)

    overdue: list[Task] = []
    due_today: list[Task] = []
    this_week: list[Task] = []

    for t in tasks:
        if t.due_date is None:
            continue
        day = _day_of(t.due_date, as_of)
        if day < today:
            if not t.is_completed:
                overdue.append(t)
        elif day == today:
            due_today.append(t)
        elif day <= week_end:
            this_week.append(t)

    return DueBuckets(overdue=overdue, today=due_today, this_week=this_week)


def summary_counts(tasks: Sequence[Task], as_of: datetime) -> SummaryCounts:
    as_of = ensure_aware(as_of)
    today = as_of.date()
    overdue = sum(
        1
        for t in tasks
        if t.due_date is not None and not t.is_completed and _day_of(t.due_date, as_of) < today
    )
    return SummaryCounts(
        total=len(tasks),
        completed=sum(1 for t in tasks if t.is_completed),
        in_progress=sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS),
        overdue=overdue,
        completion_rate=completion_rate(tasks),
    )


def _parse_filter(enum_cls, field: str, value):
    try:
        return enum_cls(value)
    except ValueError as e:
        raise ValidationError(field, f"unknown {field} {value!r}") from e


def filter_tasks(
    tasks: Iterable[Task],
    *,
    query: str | None = None,
    status: TaskStatus | str | None = None,
    priority: Priority | str | None = None,
) -> list[Task]:
    """
    List filter: case-insensitive substring match on title/description, plus
    exact status/priority. None (or "all") disables a filter.
    """
    needle = (query or "").strip().lower()
    want_status = None if status in (None, "all") else _parse_filter(TaskStatus, "status", status)
    want_priority = None if priority in (None, "all") else _parse_filter(Priority, "priority", priority)

    out: list[Task] = []
    for t in tasks:
        if needle and needle not in t.title.lower() and needle not in (t.description or "").lower():
            continue
        if want_status is not None and t.status != want_status:
            continue
        if want_priority is not None and t.priority != want_priority:
            continue
        out.append(t)
    return out


def sort_by_due_date(tasks: Iterable[Task]) -> list[Task]:
    """Due date ascending; undated tasks last (in their original order)."""
    items = list(tasks)
    dated = [t for t in items if t.due_date is not None]
    dated.sort(key=lambda t: ensure_aware(t.due_date))  # type: ignore[arg-type]
    return dated + [t for t in items if t.due_date is None]


def team_summary(users: Iterable[User], tasks: Iterable[Task], as_of: datetime) -> list[MemberSummary]:
    """
    Per-member workload: assigned count, completion rate and overdue count.

    Overdue here uses the instant rule (due before as_of), like the store's
    overdue query. Tasks assigned to unknown users are not reported.
    """
    as_of = ensure_aware(as_of)
    by_user: dict[str, list[Task]] = {}
    for t in tasks:
        if t.assigned_to:
            by_user.setdefault(t.assigned_to, []).append(t)

    out: list[MemberSummary] = []
    for user in users:
        mine = by_user.get(user.id, [])
        out.append(
            MemberSummary(
                user=user,
                total=len(mine),
                completed=sum(1 for t in mine if t.is_completed),
                completion_rate=completion_rate(mine),
                overdue=sum(
                    1 for t in mine if t.due_date is not None and t.due_date < as_of and not t.is_completed
                ),
            )
        )
    return out
