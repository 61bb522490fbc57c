# src/taskboard/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the reminder sweep in a background thread (optional),
- the console REPL in the main thread.
"""

from __future__ import annotations

import logging
import signal

from ..cli.background import ReminderBackgroundRunner, start_reminders_in_background
from ..cli.bootstrap import create_initial_state, shutdown_state
from ..cli.console import run_console_loop
from ..config import get_settings
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/taskboard")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "taskboard"))

    # reuse same settings object
    state = create_initial_state(settings=settings)

    reminder_runner: ReminderBackgroundRunner | None = start_reminders_in_background(state)

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        raise KeyboardInterrupt

    try:
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError, AttributeError):
        logger.debug("SIGTERM handler not installed.", exc_info=True)

    try:
        run_console_loop(state)
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        if reminder_runner is not None:
            reminder_runner.stop()
            reminder_runner.join(timeout=10.0)

        shutdown_state(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
