"""
Repositories abstract the habit definitions from the storage backend.

``HabitRepository`` performs the CRUD work on the ``habits`` table through
any ``Storage`` implementation. Field validation happens before a write is
attempted: pydantic checks the individual fields and ``validate_habit``
enforces the rule that count and time goals carry a positive target.
Storage failures are logged and turned into sentinel return values, the
same contract the completion ledger follows.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from . import categories, dates
from .dates import DateLike
from .errors import ErrorKind, HabitValidationError, Result, StorageError
from .schemas import GoalType, Habit, HabitCreate, HabitUpdate
from .storage import Storage

logger = logging.getLogger(__name__)


def validate_habit(habit: HabitCreate) -> None:
    """Reject goal types whose target is missing or not positive."""
    if not habit.name or not habit.name.strip():
        raise HabitValidationError("Habit name cannot be empty.")
    if habit.goal_type == GoalType.COUNT and not (habit.target_count and habit.target_count > 0):
        raise HabitValidationError("Count goals need a target count greater than zero.")
    if habit.goal_type == GoalType.TIME and not (
        habit.target_time_minutes and habit.target_time_minutes > 0
    ):
        raise HabitValidationError("Time goals need a target time greater than zero.")


def _goal_columns(habit: HabitCreate) -> tuple:
    """Targets stored for the selected goal type; the others are cleared."""
    target_count = habit.target_count if habit.goal_type == GoalType.COUNT else None
    target_time = habit.target_time_minutes if habit.goal_type == GoalType.TIME else None
    return target_count, target_time


class HabitRepository:
    """CRUD operations for habit definitions."""

    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    async def _write(self, action: str, sql: str, params: tuple) -> Result[int]:
        try:
            result = await self._storage.execute(sql, params)
        except StorageError as exc:
            logger.error("%s failed: %s", action, exc)
            return Result.failure(ErrorKind.STORAGE, str(exc))
        return Result.success(result.changes)

    async def create_habit_result(
        self, habit: HabitCreate, created_at: Optional[DateLike] = None
    ) -> Result[int]:
        validate_habit(habit)
        target_count, target_time = _goal_columns(habit)
        now = dates.now_timestamp()
        if created_at is None:
            created = now
        elif isinstance(created_at, str):
            created = created_at
        else:
            created = created_at.isoformat()
        try:
            result = await self._storage.execute(
                "INSERT INTO habits (name, icon, category, custom_emoji, goal_type, "
                "target_count, target_time_minutes, reminder_enabled, reminder_time, "
                "is_active, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 1, ?, ?)",
                (
                    habit.name,
                    habit.icon or categories.icon_for(habit.category),
                    habit.category,
                    habit.custom_emoji or None,
                    habit.goal_type.value,
                    target_count,
                    target_time,
                    int(habit.reminder_enabled),
                    habit.reminder_time,
                    created,
                    now,
                ),
            )
        except StorageError as exc:
            logger.error("Insert habit failed: %s", exc)
            return Result.failure(ErrorKind.STORAGE, str(exc))
        logger.info("Created habit %s (%s)", result.last_insert_id, habit.name)
        return Result.success(result.last_insert_id)

    async def create_habit(
        self, habit: HabitCreate, created_at: Optional[DateLike] = None
    ) -> Optional[int]:
        """Insert a habit and return its id, or ``None`` if storage failed.

        Raises ``HabitValidationError`` for invalid goal targets.
        """
        return (await self.create_habit_result(habit, created_at)).unwrap_or(None)

    async def update_habit_result(self, habit_id: int, habit: HabitUpdate) -> Result[int]:
        validate_habit(habit)
        target_count, target_time = _goal_columns(habit)
        result = await self._write(
            "Update habit",
            "UPDATE habits SET name = ?, icon = ?, category = ?, custom_emoji = ?, "
            "goal_type = ?, target_count = ?, target_time_minutes = ?, "
            "reminder_enabled = ?, reminder_time = ?, updated_at = ? WHERE id = ?",
            (
                habit.name,
                habit.icon or categories.icon_for(habit.category),
                habit.category,
                habit.custom_emoji or None,
                habit.goal_type.value,
                target_count,
                target_time,
                int(habit.reminder_enabled),
                habit.reminder_time,
                dates.now_timestamp(),
                habit_id,
            ),
        )
        if result.ok and not result.value:
            return Result.failure(ErrorKind.NOT_FOUND, f"Habit {habit_id} not found")
        return result

    async def update_habit(self, habit_id: int, habit: HabitUpdate) -> bool:
        return (await self.update_habit_result(habit_id, habit)).ok

    async def _set_active(self, habit_id: int, active: bool) -> bool:
        result = await self._write(
            "Reactivate habit" if active else "Deactivate habit",
            "UPDATE habits SET is_active = ?, updated_at = ? WHERE id = ?",
            (int(active), dates.now_timestamp(), habit_id),
        )
        return result.ok

    async def deactivate_habit(self, habit_id: int) -> bool:
        """Soft delete: hide the habit from date views, keep its history."""
        return await self._set_active(habit_id, False)

    async def reactivate_habit(self, habit_id: int) -> bool:
        return await self._set_active(habit_id, True)

    async def delete_habit(self, habit_id: int) -> bool:
        """Hard delete; completions go with it through the cascade."""
        result = await self._write(
            "Delete habit", "DELETE FROM habits WHERE id = ?", (habit_id,)
        )
        if result.ok:
            logger.info("Deleted habit %s", habit_id)
        return result.ok

    async def get_habit(self, habit_id: int) -> Optional[Habit]:
        try:
            row = await self._storage.query_one("SELECT * FROM habits WHERE id = ?", (habit_id,))
        except StorageError as exc:
            logger.error("Get habit failed: %s", exc)
            return None
        return Habit(**row) if row else None

    async def list_habits(self, include_inactive: bool = False) -> List[Habit]:
        sql = "SELECT * FROM habits"
        if not include_inactive:
            sql += " WHERE is_active = 1"
        sql += " ORDER BY created_at DESC, id DESC"
        try:
            rows = await self._storage.query_all(sql)
        except StorageError as exc:
            logger.error("List habits failed: %s", exc)
            return []
        return [Habit(**row) for row in rows]

    async def list_habits_for_date(self, on: Optional[DateLike] = None) -> List[Habit]:
        """Active habits that already existed on the given local day.

        The creation timestamp is converted to a local date in Python rather
        than with SQL date functions, which would read it as UTC.
        """
        day = dates.resolve(on)
        return [
            habit
            for habit in await self.list_habits()
            if dates.to_local_date(habit.created_at) <= day
        ]

    async def earliest_habit_date(self) -> Optional[date]:
        """Creation day of the oldest habit, used to bound date navigation."""
        habits = await self.list_habits(include_inactive=True)
        if not habits:
            return None
        return min(dates.to_local_date(habit.created_at) for habit in habits)
