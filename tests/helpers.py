"""Shared fixtures for the test suite."""

from datetime import date
from typing import Any, Sequence

from habit_tracker.errors import StorageError
from habit_tracker.schemas import HabitView
from habit_tracker.storage import ExecuteResult, SqliteStorage, Storage


class BrokenStorage(Storage):
    """Storage whose every call fails, as if the database were unreachable."""

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecuteResult:
        raise StorageError("database is locked")

    async def query_all(self, sql: str, params: Sequence[Any] = ()):
        raise StorageError("database is locked")

    async def query_one(self, sql: str, params: Sequence[Any] = ()):
        raise StorageError("database is locked")


class FlakyStorage(SqliteStorage):
    """In-memory SQLite storage whose writes can be made to fail."""

    def __init__(self) -> None:
        super().__init__(":memory:")
        self.fail_writes = False

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecuteResult:
        if self.fail_writes:
            raise StorageError("disk I/O error")
        return await super().execute(sql, params)


def make_view(
    habit_id: int,
    name: str,
    completed: bool = False,
    streak: int = 0,
    icon: str = "📋",
    **extra: Any,
) -> HabitView:
    return HabitView(
        id=habit_id,
        name=name,
        icon=icon,
        created_at="2024-01-01",
        updated_at="2024-01-01",
        is_completed_today=completed,
        streak=streak,
        **extra,
    )


JAN_1 = date(2024, 1, 1)
