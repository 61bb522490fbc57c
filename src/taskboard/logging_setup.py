# src/taskboard/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

_REMINDER_LOGGERS = "taskboard.notifications.reminder_"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console filter for the REPL, which prints command replies itself.

    taskboard records need WARNING+; the reminder sweep (background thread)
    and everything else, captured warnings included, need ERROR+.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("taskboard.") and not record.name.startswith(_REMINDER_LOGGERS):
            return record.levelno >= logging.WARNING
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskboard",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Filtered stderr handler plus `<log_dir>/taskboard.log` with every record.

    Replaces any handlers already on the root logger. Returns the log file path.
    """
    log_file = Path(log_dir) / "taskboard.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)

    root.addHandler(console)
    root.addHandler(file_handler)

    # warnings.warn(...) -> 'py.warnings'
    logging.captureWarnings(True)
    return log_file
