"""
The completion ledger owns every write to ``habit_completions``.

A habit has at most one completion row per local calendar day. Binary
habits create or delete that row; count habits accumulate ``count`` on it
and drop the row entirely when the count falls back to zero; time habits
store the minutes spent. Because the mere existence of a row is read as
"progress was made that day" by the streak calculator and the binary
completion test, a row is never left behind with a zero count.

Each operation exists in two forms. ``<operation>_result`` returns a
``Result`` carrying the outcome or an ``ErrorKind``; the plain operation
adapts it to the sentinel value callers expect (``None``, ``False``, ``0``
or an empty list) when the storage layer fails.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from . import dates
from .dates import DateLike
from .errors import ErrorKind, Result, StorageError
from .schemas import Completion
from .storage import Row, Storage

logger = logging.getLogger(__name__)


def _to_completion(row: Row) -> Completion:
    return Completion(**row)


class CompletionLedger:
    """Append, update and delete rules for per-day completion rows."""

    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    @staticmethod
    def _failure(action: str, exc: StorageError) -> Result:
        logger.error("%s failed: %s", action, exc)
        return Result.failure(ErrorKind.STORAGE, str(exc))

    async def _find(self, habit_id: int, day: str) -> Optional[Row]:
        return await self._storage.query_one(
            "SELECT * FROM habit_completions WHERE habit_id = ? AND date = ?",
            (habit_id, day),
        )

    # -- binary ---------------------------------------------------------

    async def mark_completed_result(
        self, habit_id: int, on: Optional[DateLike] = None
    ) -> Result[int]:
        day = dates.format_date(dates.resolve(on))
        try:
            result = await self._storage.execute(
                "INSERT OR IGNORE INTO habit_completions (habit_id, date, completed_at) "
                "VALUES (?, ?, ?)",
                (habit_id, day, dates.now_timestamp()),
            )
            if result.changes:
                logger.debug("Marked habit %s completed on %s", habit_id, day)
                return Result.success(result.last_insert_id)
            # The row already exists; report its id rather than a new one.
            existing = await self._find(habit_id, day)
        except StorageError as exc:
            return self._failure("Mark habit completed", exc)
        if existing is None:
            return Result.failure(ErrorKind.STORAGE, "completion row vanished")
        return Result.success(existing["id"])

    async def mark_completed(
        self, habit_id: int, on: Optional[DateLike] = None
    ) -> Optional[int]:
        return (await self.mark_completed_result(habit_id, on)).unwrap_or(None)

    async def unmark_completed_result(
        self, habit_id: int, on: Optional[DateLike] = None
    ) -> Result[bool]:
        day = dates.format_date(dates.resolve(on))
        try:
            await self._storage.execute(
                "DELETE FROM habit_completions WHERE habit_id = ? AND date = ?",
                (habit_id, day),
            )
        except StorageError as exc:
            return self._failure("Unmark habit completed", exc)
        logger.debug("Unmarked habit %s on %s", habit_id, day)
        return Result.success(True)

    async def unmark_completed(self, habit_id: int, on: Optional[DateLike] = None) -> bool:
        return (await self.unmark_completed_result(habit_id, on)).unwrap_or(False)

    # -- count ----------------------------------------------------------

    async def increment_count_result(
        self, habit_id: int, on: Optional[DateLike] = None
    ) -> Result[int]:
        day = dates.format_date(dates.resolve(on))
        try:
            await self._storage.execute(
                "INSERT INTO habit_completions (habit_id, date, count, completed_at) "
                "VALUES (?, ?, 1, ?) "
                "ON CONFLICT (habit_id, date) DO UPDATE SET "
                "count = COALESCE(count, 0) + 1, completed_at = excluded.completed_at",
                (habit_id, day, dates.now_timestamp()),
            )
            row = await self._find(habit_id, day)
        except StorageError as exc:
            return self._failure("Increment habit count", exc)
        if row is None:
            return Result.failure(ErrorKind.STORAGE, "completion row vanished")
        logger.debug("Habit %s count on %s is now %s", habit_id, day, row["count"])
        return Result.success(row["count"])

    async def increment_count(self, habit_id: int, on: Optional[DateLike] = None) -> int:
        return (await self.increment_count_result(habit_id, on)).unwrap_or(0)

    async def decrement_count_result(
        self, habit_id: int, on: Optional[DateLike] = None
    ) -> Result[int]:
        day = dates.format_date(dates.resolve(on))
        try:
            existing = await self._find(habit_id, day)
            if existing is None:
                return Result.success(0)
            current = existing["count"]
            if not current:
                # Rows marked through the binary path carry no count.
                return Result.success(0)
            if current > 1:
                await self._storage.execute(
                    "UPDATE habit_completions SET count = ?, completed_at = ? "
                    "WHERE habit_id = ? AND date = ?",
                    (current - 1, dates.now_timestamp(), habit_id, day),
                )
                return Result.success(current - 1)
            await self._storage.execute(
                "DELETE FROM habit_completions WHERE habit_id = ? AND date = ?",
                (habit_id, day),
            )
        except StorageError as exc:
            return self._failure("Decrement habit count", exc)
        logger.debug("Habit %s count on %s reached zero, row removed", habit_id, day)
        return Result.success(0)

    async def decrement_count(self, habit_id: int, on: Optional[DateLike] = None) -> int:
        return (await self.decrement_count_result(habit_id, on)).unwrap_or(0)

    async def get_count_for_date(self, habit_id: int, on: Optional[DateLike] = None) -> int:
        day = dates.format_date(dates.resolve(on))
        try:
            row = await self._find(habit_id, day)
        except StorageError as exc:
            self._failure("Get habit count", exc)
            return 0
        return (row or {}).get("count") or 0

    # -- time -----------------------------------------------------------

    async def record_time_result(
        self,
        habit_id: int,
        minutes: int,
        on: Optional[DateLike] = None,
        notes: Optional[str] = None,
    ) -> Result[int]:
        if minutes <= 0:
            return Result.failure(ErrorKind.VALIDATION, f"minutes must be positive, got {minutes}")
        day = dates.format_date(dates.resolve(on))
        try:
            await self._storage.execute(
                "INSERT INTO habit_completions (habit_id, date, time_minutes, notes, completed_at) "
                "VALUES (?, ?, ?, ?, ?) "
                "ON CONFLICT (habit_id, date) DO UPDATE SET "
                "time_minutes = excluded.time_minutes, "
                "notes = COALESCE(excluded.notes, notes), "
                "completed_at = excluded.completed_at",
                (habit_id, day, minutes, notes, dates.now_timestamp()),
            )
            row = await self._find(habit_id, day)
        except StorageError as exc:
            return self._failure("Record habit time", exc)
        if row is None:
            return Result.failure(ErrorKind.STORAGE, "completion row vanished")
        logger.debug("Recorded %s minutes for habit %s on %s", minutes, habit_id, day)
        return Result.success(row["id"])

    async def record_time(
        self,
        habit_id: int,
        minutes: int,
        on: Optional[DateLike] = None,
        notes: Optional[str] = None,
    ) -> Optional[int]:
        return (await self.record_time_result(habit_id, minutes, on, notes)).unwrap_or(None)

    # -- reads ----------------------------------------------------------

    async def get_for_date_result(self, on: Optional[DateLike] = None) -> Result[List[Completion]]:
        day = dates.format_date(dates.resolve(on))
        try:
            rows = await self._storage.query_all(
                "SELECT * FROM habit_completions WHERE date = ?", (day,)
            )
        except StorageError as exc:
            return self._failure("Get completions for date", exc)
        return Result.success([_to_completion(row) for row in rows])

    async def get_for_date(self, on: Optional[DateLike] = None) -> List[Completion]:
        return (await self.get_for_date_result(on)).unwrap_or([])

    async def get_for_habit_and_date(
        self, habit_id: int, on: Optional[DateLike] = None
    ) -> Optional[Completion]:
        day = dates.format_date(dates.resolve(on))
        try:
            row = await self._find(habit_id, day)
        except StorageError as exc:
            self._failure("Get completion", exc)
            return None
        return _to_completion(row) if row is not None else None

    async def get_all_for_habit_result(self, habit_id: int) -> Result[List[Completion]]:
        try:
            rows = await self._storage.query_all(
                "SELECT * FROM habit_completions WHERE habit_id = ? ORDER BY date DESC",
                (habit_id,),
            )
        except StorageError as exc:
            return self._failure("Get completions for habit", exc)
        return Result.success([_to_completion(row) for row in rows])

    async def get_all_for_habit(self, habit_id: int) -> List[Completion]:
        return (await self.get_all_for_habit_result(habit_id)).unwrap_or([])

    async def total_completions_for_habit(self, habit_id: int) -> int:
        """Units of progress across all days; a day without a count is one unit."""
        try:
            row = await self._storage.query_one(
                "SELECT SUM(COALESCE(count, 1)) AS total FROM habit_completions "
                "WHERE habit_id = ?",
                (habit_id,),
            )
        except StorageError as exc:
            self._failure("Get total completions", exc)
            return 0
        return (row or {}).get("total") or 0
