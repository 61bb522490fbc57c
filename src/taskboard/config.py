# src/taskboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Every consumer also accepts an injected settings object (tests use SimpleNamespace).
"""

from __future__ import annotations

import calendar
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKBOARD"

BACKENDS = ("sqlite", "memory")

_WEEKDAYS = {name.lower(): i for i, name in enumerate(calendar.day_name)}


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_weekday(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return _WEEKDAYS.get(raw.strip().lower(), default)


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Storage ----
    backend: str
    data_dir: Path
    db_path: Path
    seed_demo_data: bool

    # ---- Calendar ----
    timezone: str
    week_start: int

    # ---- Reminders ----
    reminders_enabled: bool
    reminder_lead_hours: float
    reminder_interval_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskboard") or "taskboard"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        backend = _env(_k("BACKEND"), "sqlite").strip().lower()
        if backend not in BACKENDS:
            backend = "sqlite"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskboard"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "taskboard.sqlite3")
        seed_demo_data = _env_bool(_k("SEED_DEMO_DATA"), True)

        timezone = _env(_k("TIMEZONE"), "UTC").strip() or "UTC"
        week_start = _env_weekday(_k("WEEK_START"), calendar.MONDAY)

        reminders_enabled = _env_bool(_k("REMINDERS_ENABLED"), True)
        reminder_lead_hours = _env_float(_k("REMINDER_LEAD_HOURS"), 24.0)
        reminder_interval_seconds = _env_float(_k("REMINDER_INTERVAL_SECONDS"), 60.0)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            backend=backend,
            data_dir=data_dir,
            db_path=db_path,
            seed_demo_data=seed_demo_data,
            timezone=timezone,
            week_start=week_start,
            reminders_enabled=reminders_enabled,
            reminder_lead_hours=reminder_lead_hours,
            reminder_interval_seconds=reminder_interval_seconds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
