# src/taskboard/cli/commands.py

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Callable, Iterable
from datetime import date, datetime, time
from typing import cast

from ..core.state import AppState
from ..errors import CollaboratorError, ValidationError
from ..tasks.task_models import Priority, Task, TaskStatus
from ..tasks.task_views import (
    bucket_by_due_date,
    filter_tasks,
    group_by_status,
    sort_by_due_date,
    summary_counts,
    team_summary,
)

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Validation and collaborator failures become user-facing replies; the
        operation can simply be re-issued.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except ValidationError as e:
            return f"Invalid {e.field}: {e.message}"
        except CollaboratorError as e:
            logger.warning("Command /%s failed: %s", name, e)
            return f"Storage error ({e.collaborator}): {e.message}. Try again."

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _require_user(handler: CommandHandler) -> CommandHandler:
    wants_emit = len(inspect.signature(handler).parameters) >= 3

    @functools.wraps(handler)
    def wrapper(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
        if state.session.current_user is None:
            return "You are not logged in. Use /login <email>."
        if wants_emit:
            return cast(CommandHandler3, handler)(state, args, emit)
        return cast(CommandHandler2, handler)(state, args)

    return wrapper


def _short(task_id: str) -> str:
    return task_id[:8]


def format_task(state: AppState, task: Task) -> str:
    assignee = state.users.display_name(task.assigned_to) if task.assigned_to else "unassigned"
    due = task.due_date.astimezone(state.now().tzinfo).date().isoformat() if task.due_date else "no due date"
    tags = f" [{', '.join(task.tags)}]" if task.tags else ""
    return (
        f"  {_short(task.id):<8} {task.title} "
        f"({task.status.label}, {task.priority.value}) -> {assignee}, {due}{tags}"
    )


def _format_list(state: AppState, title: str, tasks: Iterable[Task], empty: str = "No tasks found") -> str:
    items = list(tasks)
    if not items:
        return f"{title}:\n  {empty}"
    return "\n".join([f"{title} ({len(items)}):", *(format_task(state, t) for t in items)])


def _find_task(state: AppState, ref: str) -> Task | None:
    """Exact id, or a unique id prefix (the console shows 8-char prefixes)."""
    task = state.tasks.get_task(ref)
    if task is not None:
        return task
    matches = [t for t in state.tasks.list_tasks() if t.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


def _parse_due(state: AppState, raw: str) -> datetime:
    try:
        day = date.fromisoformat(raw)
    except ValueError as e:
        raise ValidationError("due_date", f"expected YYYY-MM-DD, got {raw!r}") from e
    return datetime.combine(day, time(0, 0), tzinfo=state.now().tzinfo)


# ---- session commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_login(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /login <email>"
    session = state.identity.sign_in(args[0])
    if session is None:
        return f"No account for {args[0]}."
    user = state.session.current_user
    if user is None:
        return f"Signed in as {args[0]}, but no profile exists for this account."
    return f"Logged in as {user.name} ({user.role.value}). Welcome back, {user.name}!"


def cmd_logout(state: AppState, args: list[str]) -> str:
    if state.session.current_user is None:
        return "You are not logged in."
    state.identity.sign_out()
    return "You have been logged out."


def cmd_whoami(state: AppState, args: list[str]) -> str:
    user = state.session.current_user
    if user is None:
        return "Not logged in."
    unread = state.notifications.unread_count(user.id)
    return f"{user.name} <{user.email}> role={user.role.value} unread={unread}"


def cmd_users(state: AppState, args: list[str]) -> str:
    users = state.users.list_users()
    if not users:
        return "No users."
    lines = [f"Users ({len(users)}):"]
    for u in users:
        lines.append(f"  {u.id:<8} {u.name} <{u.email}> {u.role.value}")
    return "\n".join(lines)


# ---- task lists ----


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks                        -> all tasks
    /tasks <words>                -> search title/description
    /tasks status=<s> priority=<p> -> filter
    """
    status = priority = None
    words: list[str] = []
    for a in args:
        if a.startswith("status="):
            status = a.split("=", 1)[1]
        elif a.startswith("priority="):
            priority = a.split("=", 1)[1]
        else:
            words.append(a)
    tasks = filter_tasks(state.tasks.list_tasks(), query=" ".join(words), status=status, priority=priority)
    return _format_list(state, "All Tasks", tasks)


@_require_user
def cmd_mine(state: AppState, args: list[str]) -> str:
    uid = cast(str, state.current_user_id)
    return _format_list(state, "My Tasks", state.tasks.tasks_assigned_to(uid), "No tasks assigned to you")


@_require_user
def cmd_created(state: AppState, args: list[str]) -> str:
    uid = cast(str, state.current_user_id)
    return _format_list(state, "Created by me", state.tasks.tasks_created_by(uid))


@_require_user
def cmd_upcoming(state: AppState, args: list[str]) -> str:
    uid = cast(str, state.current_user_id)
    week_start = getattr(state.settings, "week_start", 0)
    buckets = bucket_by_due_date(state.tasks.tasks_assigned_to(uid), state.now(), week_start=week_start)
    return "\n".join(
        [
            _format_list(state, "Overdue", sort_by_due_date(buckets.overdue), "No overdue tasks"),
            _format_list(state, "Today", buckets.today, "No tasks due today"),
            _format_list(state, "This Week", sort_by_due_date(buckets.this_week), "No tasks due this week"),
        ]
    )


@_require_user
def cmd_dashboard(state: AppState, args: list[str]) -> str:
    uid = cast(str, state.current_user_id)
    mine = state.tasks.tasks_assigned_to(uid)
    counts = summary_counts(mine, state.now())
    by_status = group_by_status(mine)

    lines = [
        "Dashboard:",
        f"  Total Tasks: {counts.total} ({counts.completion_rate}% completion rate)",
        f"  In Progress: {counts.in_progress}",
        f"  Completed:   {counts.completed}",
        f"  Overdue:     {counts.overdue}",
        "  By status: "
        + (", ".join(f"{s.label}={n}" for s, n in by_status.items()) or "no tasks"),
    ]
    overdue = state.tasks.overdue_tasks_for(uid, state.now())
    lines.append(_format_list(state, "Overdue Tasks", overdue, "No overdue tasks"))
    return "\n".join(lines)


def cmd_team(state: AppState, args: list[str]) -> str:
    rows = team_summary(state.users.list_users(), state.tasks.list_tasks(), state.now())
    if not rows:
        return "No team members."
    lines = ["Team:"]
    for r in rows:
        lines.append(
            f"  {r.user.name:<16} {r.user.role.value:<8} tasks={r.total:<3} "
            f"done={r.completion_rate:>3}% overdue={r.overdue}"
        )
    return "\n".join(lines)


# ---- task mutations ----


@_require_user
def cmd_new(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /new <title words> [@assignee-email] [!low|!medium|!high] [due:YYYY-MM-DD] [#tag]
    """
    title_words: list[str] = []
    assigned_to: str | None = None
    priority: str = Priority.MEDIUM.value
    due: datetime | None = None
    tags: list[str] = []

    for a in args:
        if a.startswith("@") and len(a) > 1:
            user = state.users.find_by_email(a[1:])
            if user is None:
                return f"No user with email {a[1:]}."
            assigned_to = user.id
        elif a.startswith("!") and len(a) > 1:
            priority = a[1:].lower()
        elif a.startswith("due:"):
            due = _parse_due(state, a[4:])
        elif a.startswith("#") and len(a) > 1:
            tags.append(a[1:])
        else:
            title_words.append(a)

    uid = cast(str, state.current_user_id)
    task = state.tasks.create_task(
        title=" ".join(title_words),
        created_by=uid,
        acting_user_id=uid,
        priority=priority,
        assigned_to=assigned_to,
        due_date=due,
        tags=tags,
    )
    if emit is not None and task.assigned_to and task.assigned_to != uid:
        emit(f"Notified {state.users.display_name(task.assigned_to)}.")
    return "Task created:\n" + format_task(state, task)


@_require_user
def cmd_status(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /status <task-id> <todo|in-progress|review|completed>"
    task = _find_task(state, args[0])
    if task is None:
        return f"Task {args[0]} not found."
    updated = state.tasks.update_task(task.id, acting_user_id=state.current_user_id, status=args[1])
    if updated is None:
        return f"Task {args[0]} not found."
    return "Task updated:\n" + format_task(state, updated)


@_require_user
def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <task-id>"
    return cmd_status(state, [args[0], TaskStatus.COMPLETED.value])


@_require_user
def cmd_assign(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /assign <task-id> <email|none>"
    task = _find_task(state, args[0])
    if task is None:
        return f"Task {args[0]} not found."

    assignee: str | None = None
    if args[1].lower() != "none":
        user = state.users.find_by_email(args[1])
        if user is None:
            return f"No user with email {args[1]}."
        assignee = user.id

    updated = state.tasks.update_task(task.id, acting_user_id=state.current_user_id, assigned_to=assignee)
    if updated is None:
        return f"Task {args[0]} not found."
    return "Task updated:\n" + format_task(state, updated)


@_require_user
def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <task-id>"
    task = _find_task(state, args[0])
    if task is None or not state.tasks.delete_task(task.id, acting_user_id=state.current_user_id):
        return f"Task {args[0]} not found."
    return f"Task deleted: {task.title}"


# ---- notifications ----


@_require_user
def cmd_notifications(state: AppState, args: list[str]) -> str:
    uid = state.current_user_id
    items = state.notifications.list_notifications(uid)
    if not items:
        return "No notifications."
    unread = sum(1 for n in items if not n.read)
    lines = [f"Notifications ({unread} unread):"]
    for n in items:
        mark = " " if n.read else "*"
        when = n.created_at.astimezone(state.now().tzinfo).strftime("%Y-%m-%d %H:%M")
        lines.append(f" {mark} {_short(n.id):<8} [{n.type.value}] {n.message} ({when})")
    return "\n".join(lines)


@_require_user
def cmd_read(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /read <notification-id|all>"
    if args[0].lower() == "all":
        n = state.notifications.mark_all_as_read(state.current_user_id)
        return f"Marked {n} notifications as read."

    ref = args[0]
    uid = state.current_user_id
    exact = state.notifications.get_notification(ref)
    if exact is not None and exact.recipient_id == uid:
        matches = [exact]
    else:
        matches = [n for n in state.notifications.list_notifications(uid) if n.id.startswith(ref)]
    if len(matches) != 1 or not state.notifications.mark_as_read(matches[0].id):
        return f"Notification {ref} not found."
    return "Marked as read."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("login", cmd_login, help_text="Sign in: /login <email>.")
registry.register("logout", cmd_logout, help_text="Sign out.")
registry.register("whoami", cmd_whoami, help_text="Show the signed-in user.")
registry.register("users", cmd_users, help_text="List team members.")
registry.register("tasks", cmd_tasks, help_text="All tasks: /tasks [words] [status=..] [priority=..].")
registry.register("mine", cmd_mine, help_text="Tasks assigned to me.")
registry.register("created", cmd_created, help_text="Tasks I created.")
registry.register("upcoming", cmd_upcoming, help_text="My overdue / today / this-week tasks.")
registry.register("dashboard", cmd_dashboard, help_text="My summary counts and status breakdown.", aliases=["dash"])
registry.register("team", cmd_team, help_text="Per-member completion and overdue counts.")
registry.register(
    "new", cmd_new, help_text="Create: /new <title> [@email] [!priority] [due:YYYY-MM-DD] [#tag]."
)
registry.register("status", cmd_status, help_text="Set status: /status <id> <status>.")
registry.register("done", cmd_done, help_text="Complete a task: /done <id>.")
registry.register("assign", cmd_assign, help_text="Reassign: /assign <id> <email|none>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.")
registry.register("notifications", cmd_notifications, help_text="My notifications.", aliases=["n"])
registry.register("read", cmd_read, help_text="Mark read: /read <id|all>.")
