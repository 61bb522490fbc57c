# src/taskboard/storage/sqlite_backend.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..core.ports import Record
from ..errors import CollaboratorError

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class _TableSpec:
    name: str
    # column name -> SQL declaration used both for CREATE and for migrations
    columns: dict[str, str]
    json_columns: frozenset[str] = frozenset()
    bool_columns: frozenset[str] = frozenset()
    indexes: tuple[tuple[str, str], ...] = ()


TASKS = _TableSpec(
    name="tasks",
    columns={
        "title": "TEXT NOT NULL DEFAULT ''",
        "description": "TEXT",
        "status": "TEXT NOT NULL DEFAULT 'todo'",
        "priority": "TEXT NOT NULL DEFAULT 'medium'",
        "assigned_to": "TEXT",
        "created_by": "TEXT NOT NULL DEFAULT ''",
        "due_date": "TEXT",
        "created_at": "TEXT NOT NULL DEFAULT ''",
        "updated_at": "TEXT NOT NULL DEFAULT ''",
        "tags": "TEXT NOT NULL DEFAULT '[]'",
    },
    json_columns=frozenset({"tags"}),
    indexes=(
        ("idx_tasks_assigned_to", "assigned_to"),
        ("idx_tasks_created_by", "created_by"),
    ),
)

PROFILES = _TableSpec(
    name="profiles",
    columns={
        "name": "TEXT",
        "email": "TEXT",
        "avatar_url": "TEXT",
        "role": "TEXT NOT NULL DEFAULT 'member'",
        "created_at": "TEXT",
    },
    indexes=(("idx_profiles_email", "email"),),
)

NOTIFICATIONS = _TableSpec(
    name="notifications",
    columns={
        "message": "TEXT NOT NULL DEFAULT ''",
        "type": "TEXT NOT NULL DEFAULT 'assignment'",
        "task_id": "TEXT",
        "recipient_id": "TEXT",
        "read": "INTEGER NOT NULL DEFAULT 0",
        "created_at": "TEXT NOT NULL DEFAULT ''",
    },
    bool_columns=frozenset({"read"}),
    indexes=(("idx_notifications_task", "task_id"),),
)


class SQLiteTable:
    """
    One backend table in a shared SQLite file.

    Each call opens its own short-lived connection. sqlite3 errors surface as
    CollaboratorError with the driver's message preserved.
    """

    def __init__(self, db_path: Path, spec: _TableSpec) -> None:
        self._db_path = db_path
        self._spec = spec

    @contextlib.contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        except sqlite3.Error as e:
            raise CollaboratorError("sqlite", str(e)) from e
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.exception("SQLite call failed table=%s", self._spec.name)
            raise CollaboratorError("sqlite", str(e)) from e
        finally:
            conn.close()

    def ensure_schema(self) -> None:
        spec = self._spec
        with self._conn() as conn:
            cols_sql = ",\n".join(f"{c} {decl}" for c, decl in spec.columns.items())
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {spec.name} (
                    id TEXT PRIMARY KEY,
                    {cols_sql}
                )
                """
            )

            # Migrations (safe): add missing columns.
            existing = {row["name"] for row in conn.execute(f"PRAGMA table_info({spec.name})")}
            for col, decl in spec.columns.items():
                if col in existing:
                    continue
                conn.execute(f"ALTER TABLE {spec.name} ADD COLUMN {col} {decl}")
                logger.info("SQLite migration: added column %s.%s", spec.name, col)

            for index_name, col in spec.indexes:
                conn.execute(f"CREATE INDEX IF NOT EXISTS {index_name} ON {spec.name}({col})")

    # ---- encoding ----

    def _encode(self, key: str, value: Any) -> Any:
        if key in self._spec.json_columns:
            return json.dumps(list(value or []), ensure_ascii=False)
        if key in self._spec.bool_columns:
            return 1 if value else 0
        return value

    def _decode_row(self, row: sqlite3.Row) -> Record:
        out: Record = {}
        for key in row.keys():
            value = row[key]
            if key in self._spec.json_columns:
                try:
                    parsed = json.loads(value) if value else []
                except json.JSONDecodeError:
                    logger.warning("Bad JSON in %s.%s id=%s", self._spec.name, key, row["id"])
                    parsed = []
                value = parsed if isinstance(parsed, list) else []
            elif key in self._spec.bool_columns:
                value = bool(value)
            out[key] = value
        return out

    def _known(self, record: Record) -> Record:
        known = {k: v for k, v in record.items() if k in self._spec.columns}
        dropped = set(record) - set(known) - {"id"}
        if dropped:
            logger.debug("Ignoring unknown %s keys: %s", self._spec.name, sorted(dropped))
        return known

    # ---- RecordTable ----

    def list_records(self) -> list[Record]:
        with self._conn() as conn:
            rows = conn.execute(f"SELECT * FROM {self._spec.name} ORDER BY rowid ASC").fetchall()
            return [self._decode_row(r) for r in rows]

    def get_record(self, record_id: str) -> Record | None:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT * FROM {self._spec.name} WHERE id = ?", (str(record_id),)
            ).fetchone()
            return self._decode_row(row) if row else None

    def insert_record(self, record: Record) -> Record:
        if not record.get("id"):
            raise CollaboratorError("sqlite", f"{self._spec.name}: record id is required")

        fields = self._known(record)
        cols = ["id", *fields]
        params = [str(record["id"]), *(self._encode(k, v) for k, v in fields.items())]
        placeholders = ", ".join("?" for _ in cols)

        with self._conn() as conn:
            conn.execute(
                f"INSERT INTO {self._spec.name}({', '.join(cols)}) VALUES ({placeholders})",
                params,
            )
        stored = self.get_record(str(record["id"]))
        if stored is None:
            raise CollaboratorError("sqlite", f"{self._spec.name}: inserted row vanished")
        return stored

    def update_record(self, record_id: str, changes: Record) -> Record | None:
        fields = self._known(changes)
        if fields:
            assignments = ", ".join(f"{k} = ?" for k in fields)
            params = [*(self._encode(k, v) for k, v in fields.items()), str(record_id)]
            with self._conn() as conn:
                cur = conn.execute(
                    f"UPDATE {self._spec.name} SET {assignments} WHERE id = ?", params
                )
                if cur.rowcount == 0:
                    return None
        return self.get_record(record_id)

    def delete_record(self, record_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {self._spec.name} WHERE id = ?", (str(record_id),))
            return cur.rowcount == 1

    def count(self) -> int:
        with self._conn() as conn:
            (n,) = conn.execute(f"SELECT COUNT(*) FROM {self._spec.name}").fetchone()
            return int(n)


class SQLiteBackend:
    """
    SQLite persistence collaborator (tasks, profiles, notifications in one file).

    The schema is migration-safe:
    - create tables if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed
    """

    def __init__(self, db_path: str | Path = "taskboard.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        self._tasks = SQLiteTable(self._db_path, TASKS)
        self._profiles = SQLiteTable(self._db_path, PROFILES)
        self._notifications = SQLiteTable(self._db_path, NOTIFICATIONS)
        for table in (self._tasks, self._profiles, self._notifications):
            table.ensure_schema()

        logger.info(
            "SQLiteBackend ready db=%s tasks=%s profiles=%s notifications=%s",
            self._db_path,
            self._tasks.count(),
            self._profiles.count(),
            self._notifications.count(),
        )

    @property
    def tasks(self) -> SQLiteTable:
        return self._tasks

    @property
    def profiles(self) -> SQLiteTable:
        return self._profiles

    @property
    def notifications(self) -> SQLiteTable:
        return self._notifications

    def close(self) -> None:
        """Shutdown hook (no persistent connections to close)."""
        return
