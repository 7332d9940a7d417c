"""
Storage backends abstract the relational store from the tracker core.

The core only ever talks to a ``Storage``: a write (``execute``) that
reports the last inserted row id and the number of changed rows, and two
reads (``query_all``/``query_one``) that return rows as dictionaries. The
SQLite implementation owns the schema for the ``habits`` and
``habit_completions`` tables and is used both for the on-disk database
and, with ``:memory:``, for tests.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .errors import StorageError

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

SCHEMA = """
CREATE TABLE IF NOT EXISTS habits (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    icon TEXT NOT NULL,
    category TEXT NOT NULL DEFAULT 'general',
    custom_emoji TEXT,
    goal_type TEXT NOT NULL DEFAULT 'binary'
        CHECK (goal_type IN ('binary', 'count', 'time')),
    target_count INTEGER,
    target_time_minutes INTEGER,
    reminder_enabled INTEGER NOT NULL DEFAULT 0,
    reminder_time TEXT,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS habit_completions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    habit_id INTEGER NOT NULL,
    date TEXT NOT NULL,
    count INTEGER,
    time_minutes INTEGER,
    notes TEXT,
    completed_at TEXT NOT NULL,
    UNIQUE (habit_id, date),
    FOREIGN KEY (habit_id) REFERENCES habits(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_habit_completions_date ON habit_completions(date);
CREATE INDEX IF NOT EXISTS idx_habits_category ON habits(category);
CREATE INDEX IF NOT EXISTS idx_habits_created_at ON habits(created_at);
"""


@dataclass(frozen=True)
class ExecuteResult:
    last_insert_id: Optional[int]
    changes: int


class Storage:
    """Interface for relational storage backends."""

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecuteResult:
        raise NotImplementedError

    async def query_all(self, sql: str, params: Sequence[Any] = ()) -> List[Row]:
        raise NotImplementedError

    async def query_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Row]:
        raise NotImplementedError

    async def migrate(self) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError


class SqliteStorage(Storage):
    """SQLite-backed storage holding a single connection.

    All statements go through that one connection, so writes issued by the
    single client session are serialised by SQLite itself. Driver errors
    are re-raised as ``StorageError``.
    """

    def __init__(self, path: str = ":memory:") -> None:
        if path != ":memory:":
            Path(path).expanduser().parent.mkdir(parents=True, exist_ok=True)
        self._path = path
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecuteResult:
        try:
            with self._conn:
                cursor = self._conn.execute(sql, tuple(params))
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        return ExecuteResult(last_insert_id=cursor.lastrowid, changes=cursor.rowcount)

    async def query_all(self, sql: str, params: Sequence[Any] = ()) -> List[Row]:
        try:
            rows = self._conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        return [dict(row) for row in rows]

    async def query_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Row]:
        try:
            row = self._conn.execute(sql, tuple(params)).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        return dict(row) if row is not None else None

    async def migrate(self) -> None:
        try:
            self._conn.executescript(SCHEMA)
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        logger.info("Database schema ready at %s", self._path)

    async def close(self) -> None:
        self._conn.close()
