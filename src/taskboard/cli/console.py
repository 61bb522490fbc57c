# src/taskboard/cli/console.py

from __future__ import annotations

import logging
import sys
from datetime import datetime

from ..core.state import AppState
from .commands import registry as command_registry

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    try:
        if sys.stdout.isatty():
            sys.stdout.write("\033[1A\033[2K\r")
            sys.stdout.write(line + "\n")
            sys.stdout.flush()
        else:
            print(line)
    except OSError:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _unread_for_current(state: AppState) -> int:
    uid = state.current_user_id
    if uid is None:
        return 0
    return state.notifications.unread_count(uid)


def run_console_loop(state: AppState) -> None:
    logger.info("Console started (backend=%s).", getattr(state.settings, "backend", "?"))
    _print_ts("[CONSOLE] Use /login <email> to sign in, /help for commands, /exit to quit.\n")

    lock = getattr(state, "lock", None)
    last_unread = 0

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            user_input = input(">>> ").strip()
            _rewrite_prev_line(f"[{_ts_local()}] >>> {user_input}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            if lock:
                with lock:
                    response = command_registry.handle(state, user_input, emit=emit)
                    unread = _unread_for_current(state)
            else:
                response = command_registry.handle(state, user_input, emit=emit)
                unread = _unread_for_current(state)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."
            unread = last_unread

        if response is None:
            response = "Commands start with '/'. Use /help to list them."

        _print_ts(response)

        # Reminders arrive from the background thread between commands.
        if unread > last_unread:
            _print_ts(f"[{unread} unread notifications] Use /notifications to view them.")
        last_unread = unread

    logger.info("Console finished.")
