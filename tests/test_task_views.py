# tests/test_task_views.py

from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone

import pytest

from taskboard.errors import ValidationError
from taskboard.tasks.task_models import Priority, Task, TaskStatus
from taskboard.tasks.task_views import (
    bucket_by_due_date,
    completion_rate,
    filter_tasks,
    group_by_status,
    sort_by_due_date,
    summary_counts,
    team_summary,
)
from taskboard.users.user_models import User

from .conftest import NOW


def make_task(
    task_id: str,
    *,
    due: datetime | None = None,
    status: TaskStatus = TaskStatus.TODO,
    assigned_to: str | None = "u1",
    title: str | None = None,
    description: str | None = None,
    priority: Priority = Priority.MEDIUM,
) -> Task:
    return Task(
        id=task_id,
        title=title or f"Task {task_id}",
        description=description,
        status=status,
        priority=priority,
        created_by="u1",
        created_at=NOW - timedelta(days=10),
        updated_at=NOW - timedelta(days=10),
        assigned_to=assigned_to,
        due_date=due,
    )


def test_completion_rate_empty_and_rounding() -> None:
    assert completion_rate([]) == 0
    done = make_task("d", status=TaskStatus.COMPLETED)
    todo = make_task("t")
    assert completion_rate([done, todo, todo]) == 33
    assert completion_rate([done, done, todo]) == 67
    assert completion_rate([done, todo]) == 50
    # 1/8 = 12.5% rounds half-up
    assert completion_rate([done] + [todo] * 7) == 13


def test_completion_rate_non_decreasing_when_adding_completed() -> None:
    base = [make_task("a"), make_task("b", status=TaskStatus.COMPLETED), make_task("c")]
    prev = completion_rate(base)
    for i in range(10):
        base.append(make_task(f"x{i}", status=TaskStatus.COMPLETED))
        cur = completion_rate(base)
        assert cur >= prev
        prev = cur
    assert prev <= 100


def test_group_by_status_counts_only_present_statuses() -> None:
    counts = group_by_status(
        [
            make_task("1"),
            make_task("2"),
            make_task("3", status=TaskStatus.REVIEW),
        ]
    )
    assert counts == {TaskStatus.TODO: 2, TaskStatus.REVIEW: 1}


def test_bucket_by_due_date_partitions() -> None:
    overdue = make_task("overdue", due=NOW - timedelta(days=1))
    overdue_done = make_task("overdue-done", due=NOW - timedelta(days=1), status=TaskStatus.COMPLETED)
    earlier_today = make_task("today-early", due=NOW.replace(hour=1))
    today_done = make_task("today-done", due=NOW.replace(hour=23), status=TaskStatus.COMPLETED)
    sunday = make_task("sunday", due=datetime(2024, 5, 19, 18, 0, tzinfo=NOW.tzinfo))
    next_monday = make_task("next-monday", due=datetime(2024, 5, 20, 9, 0, tzinfo=NOW.tzinfo))
    undated = make_task("undated")

    all_tasks = [overdue, overdue_done, earlier_today, today_done, sunday, next_monday, undated]
    buckets = bucket_by_due_date(all_tasks, NOW)

    assert [t.id for t in buckets.overdue] == ["overdue"]
    # due earlier today is "today", not overdue
    assert [t.id for t in buckets.today] == ["today-early", "today-done"]
    assert [t.id for t in buckets.this_week] == ["sunday"]

    seen = [t.id for t in buckets.overdue + buckets.today + buckets.this_week]
    assert len(seen) == len(set(seen))


def test_bucket_week_start_is_configurable() -> None:
    # Sunday-start week: Wed 2024-05-15 belongs to 12..18, so Sunday the 19th is next week.
    sunday = make_task("sunday", due=datetime(2024, 5, 19, 9, 0, tzinfo=NOW.tzinfo))
    saturday = make_task("saturday", due=datetime(2024, 5, 18, 9, 0, tzinfo=NOW.tzinfo))

    buckets = bucket_by_due_date([sunday, saturday], NOW, week_start=calendar.SUNDAY)

    assert [t.id for t in buckets.this_week] == ["saturday"]


def test_bucket_uses_as_of_time_zone_for_calendar_days() -> None:
    # 23:30 UTC on the 15th is already the 16th in UTC+2.
    task = make_task("late", due=datetime(2024, 5, 15, 23, 30, tzinfo=NOW.tzinfo))
    plus_two = timezone(timedelta(hours=2))

    utc_view = bucket_by_due_date([task], NOW)
    local_view = bucket_by_due_date([task], NOW.astimezone(plus_two))

    assert [t.id for t in utc_view.today] == ["late"]
    assert [t.id for t in local_view.this_week] == ["late"]


def test_summary_counts() -> None:
    tasks = [
        make_task("1", status=TaskStatus.IN_PROGRESS, due=NOW - timedelta(days=2)),
        make_task("2", status=TaskStatus.COMPLETED, due=NOW - timedelta(days=2)),
        make_task("3", status=TaskStatus.TODO, due=NOW + timedelta(days=2)),
        make_task("4", status=TaskStatus.TODO, due=NOW - timedelta(hours=1)),
    ]

    counts = summary_counts(tasks, NOW)

    assert counts.total == 4
    assert counts.completed == 1
    assert counts.in_progress == 1
    # task 4 is due earlier today: not overdue by calendar day
    assert counts.overdue == 1
    assert counts.completion_rate == 25


def test_summary_counts_empty() -> None:
    counts = summary_counts([], NOW)
    assert (counts.total, counts.completed, counts.overdue, counts.completion_rate) == (0, 0, 0, 0)


@pytest.mark.parametrize(
    ("kwargs", "expected"),
    [
        ({}, ["a", "b", "c"]),
        ({"query": "LOGIN"}, ["a"]),
        ({"query": "mobile"}, ["b"]),
        ({"status": "completed"}, ["c"]),
        ({"status": "all", "priority": "high"}, ["a"]),
        ({"query": "page", "priority": Priority.LOW}, []),
    ],
)
def test_filter_tasks(kwargs, expected) -> None:
    tasks = [
        make_task("a", title="Fix login", priority=Priority.HIGH),
        make_task("b", title="Pagination", description="Broken on mobile"),
        make_task("c", title="Docs", status=TaskStatus.COMPLETED),
    ]
    assert [t.id for t in filter_tasks(tasks, **kwargs)] == expected


def test_sort_by_due_date_puts_undated_last() -> None:
    tasks = [
        make_task("none-1"),
        make_task("late", due=NOW + timedelta(days=3)),
        make_task("early", due=NOW - timedelta(days=1)),
        make_task("none-2"),
    ]
    assert [t.id for t in sort_by_due_date(iter(tasks))] == ["early", "late", "none-1", "none-2"]


def test_team_summary() -> None:
    alice = User(id="u1", name="Alice", email="alice@example.com")
    bob = User(id="u2", name="Bob", email="bob@example.com")
    tasks = [
        make_task("1", assigned_to="u1", status=TaskStatus.COMPLETED, due=NOW - timedelta(days=1)),
        make_task("2", assigned_to="u1", due=NOW - timedelta(hours=1)),
        make_task("3", assigned_to="u1", due=NOW + timedelta(days=1)),
        make_task("4", assigned_to="ghost"),
        make_task("5", assigned_to=None),
    ]

    rows = team_summary([alice, bob], tasks, NOW)

    assert [r.user.id for r in rows] == ["u1", "u2"]
    a, b = rows
    assert (a.total, a.completed, a.completion_rate, a.overdue) == (3, 1, 33, 1)
    assert (b.total, b.completed, b.completion_rate, b.overdue) == (0, 0, 0, 0)


@pytest.mark.parametrize(("kwargs", "field"), [({"status": "archived"}, "status"), ({"priority": "urgent"}, "priority")])
def test_filter_tasks_rejects_unknown_values(kwargs, field) -> None:
    with pytest.raises(ValidationError) as exc:
        filter_tasks([make_task("a")], **kwargs)
    assert exc.value.field == field
