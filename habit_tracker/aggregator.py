"""
Habit aggregation: joins habit definitions with a day's completions.

``HabitAggregator`` composes ``HabitView`` objects for a date, keeps them in
a ``HabitListState`` owned by the caller, and routes user actions (toggle,
increment, record time, CRUD) to the ledger and repository. The state is
only changed after storage confirms a write; the affected view is then
re-read so it always reflects what was persisted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from . import dates
from .dates import DateLike
from .errors import Result
from .ledger import CompletionLedger
from .repository import HabitRepository
from .schemas import Completion, DailyTotal, GoalType, Habit, HabitCreate, HabitUpdate, HabitView
from .streaks import calculate_streak, longest_streak

logger = logging.getLogger(__name__)


def resolve_target_count(habit: Habit) -> Optional[int]:
    if habit.target_count:
        return habit.target_count
    if habit.goal_type == GoalType.COUNT:
        return 1
    return None


def build_view(
    habit: Habit,
    completion: Optional[Completion],
    streak: int = 0,
    longest: int = 0,
    total_completions: int = 0,
) -> HabitView:
    """Compose the view of ``habit`` for the day ``completion`` belongs to."""
    current_count = completion.count if completion and completion.count else None
    current_time = completion.time_minutes if completion and completion.time_minutes else None
    target = resolve_target_count(habit)

    if habit.goal_type == GoalType.COUNT:
        completed = (current_count or 0) >= (target or 1)
    elif habit.goal_type == GoalType.TIME:
        completed = bool(habit.target_time_minutes) and (current_time or 0) >= habit.target_time_minutes
    else:
        completed = completion is not None

    return HabitView(
        **habit.model_dump(),
        is_completed_today=completed,
        streak=streak,
        current_count=current_count,
        resolved_target_count=target,
        current_time_minutes=current_time,
        longest_streak=max(longest, streak),
        total_completions=total_completions,
    )


@dataclass
class HabitListState:
    """Habit views loaded for one day, owned by whoever drives the UI."""

    habits: List[HabitView] = field(default_factory=list)
    selected_date: Optional[date] = None
    earliest_habit_date: Optional[date] = None
    error: Optional[str] = None

    def find(self, habit_id: int) -> Optional[HabitView]:
        for habit in self.habits:
            if habit.id == habit_id:
                return habit
        return None

    def replace(self, view: HabitView) -> None:
        self.habits = [view if h.id == view.id else h for h in self.habits]

    def clear_error(self) -> None:
        self.error = None


class HabitAggregator:
    def __init__(
        self,
        repository: HabitRepository,
        ledger: CompletionLedger,
        state: Optional[HabitListState] = None,
    ) -> None:
        self.repository = repository
        self.ledger = ledger
        self.state = state if state is not None else HabitListState()

    # -- views ----------------------------------------------------------

    async def _compose(
        self, habit: Habit, day: date, completion: Optional[Completion]
    ) -> HabitView:
        streak = await calculate_streak(self.ledger, habit.id, day)
        history = await self.ledger.get_all_for_habit(habit.id)
        total = await self.ledger.total_completions_for_habit(habit.id)
        return build_view(
            habit,
            completion,
            streak=streak,
            longest=longest_streak(c.date for c in history),
            total_completions=total,
        )

    async def _habit_on(
        self, habit_id: int, day: date, include_inactive: bool = False
    ) -> Optional[Habit]:
        """The habit if it is visible on ``day``: created by then and active."""
        habit = await self.repository.get_habit(habit_id)
        if habit is None or dates.to_local_date(habit.created_at) > day:
            return None
        if not habit.is_active and not include_inactive:
            return None
        return habit

    async def get_habit_view(
        self, habit_id: int, on: Optional[DateLike] = None, include_inactive: bool = False
    ) -> Optional[HabitView]:
        day = dates.resolve(on)
        habit = await self._habit_on(habit_id, day, include_inactive)
        if habit is None:
            return None
        completion = await self.ledger.get_for_habit_and_date(habit_id, day)
        return await self._compose(habit, day, completion)

    async def get_habits_for_date(self, on: Optional[DateLike] = None) -> List[HabitView]:
        """Views of the active habits that existed on ``on`` (default today)."""
        day = dates.resolve(on)
        habits = await self.repository.list_habits_for_date(day)
        by_habit: Dict[int, Completion] = {
            c.habit_id: c for c in await self.ledger.get_for_date(day)
        }
        return [await self._compose(habit, day, by_habit.get(habit.id)) for habit in habits]

    async def load_habits_for_date(self, on: Optional[DateLike] = None) -> List[HabitView]:
        day = dates.resolve(on)
        self.state.error = None
        self.state.habits = await self.get_habits_for_date(day)
        self.state.selected_date = day
        self.state.earliest_habit_date = await self.repository.earliest_habit_date()
        return self.state.habits

    async def refresh(self) -> List[HabitView]:
        return await self.load_habits_for_date(self.state.selected_date)

    async def _after_write(
        self, habit_id: int, day: date, result: Result, failure_message: str
    ) -> bool:
        if not result.ok:
            logger.warning("%s for habit %s: %s", failure_message, habit_id, result.message)
            self.state.error = failure_message
            return False
        if self.state.selected_date == day and self.state.find(habit_id) is not None:
            view = await self.get_habit_view(habit_id, day)
            if view is not None:
                self.state.replace(view)
        return True

    # -- completion actions ---------------------------------------------

    async def toggle_completion(self, habit_id: int, on: Optional[DateLike] = None) -> bool:
        """Flip a habit's state for the day.

        Binary habits are marked or unmarked. Count habits below their
        target gain one unit; at or above the target the day is reset to
        zero by removing the row. Time habits are unmarked when their
        target is met and otherwise recorded as meeting it.
        """
        day = dates.resolve(on)
        view = await self.get_habit_view(habit_id, day)
        if view is None:
            return False

        if view.goal_type == GoalType.COUNT:
            if (view.current_count or 0) >= (view.resolved_target_count or 1):
                result = await self.ledger.unmark_completed_result(habit_id, day)
            else:
                result = await self.ledger.increment_count_result(habit_id, day)
        elif view.goal_type == GoalType.TIME:
            if view.is_completed_today:
                result = await self.ledger.unmark_completed_result(habit_id, day)
            else:
                result = await self.ledger.record_time_result(
                    habit_id, view.target_time_minutes or 0, day
                )
        elif view.is_completed_today:
            result = await self.ledger.unmark_completed_result(habit_id, day)
        else:
            result = await self.ledger.mark_completed_result(habit_id, day)

        return await self._after_write(habit_id, day, result, "Failed to update habit")

    async def mark_completed(self, habit_id: int, on: Optional[DateLike] = None) -> bool:
        day = dates.resolve(on)
        if await self._habit_on(habit_id, day) is None:
            return False
        result = await self.ledger.mark_completed_result(habit_id, day)
        return await self._after_write(habit_id, day, result, "Failed to mark habit as completed")

    async def unmark_completed(self, habit_id: int, on: Optional[DateLike] = None) -> bool:
        day = dates.resolve(on)
        if await self._habit_on(habit_id, day) is None:
            return False
        result = await self.ledger.unmark_completed_result(habit_id, day)
        return await self._after_write(habit_id, day, result, "Failed to unmark habit as completed")

    async def _is_goal(self, habit_id: int, goal_type: GoalType, day: date) -> bool:
        habit = await self._habit_on(habit_id, day)
        return habit is not None and habit.goal_type == goal_type

    async def increment_count(self, habit_id: int, on: Optional[DateLike] = None) -> bool:
        day = dates.resolve(on)
        if not await self._is_goal(habit_id, GoalType.COUNT, day):
            return False
        result = await self.ledger.increment_count_result(habit_id, day)
        return await self._after_write(habit_id, day, result, "Failed to increment habit count")

    async def decrement_count(self, habit_id: int, on: Optional[DateLike] = None) -> bool:
        day = dates.resolve(on)
        if not await self._is_goal(habit_id, GoalType.COUNT, day):
            return False
        result = await self.ledger.decrement_count_result(habit_id, day)
        return await self._after_write(habit_id, day, result, "Failed to decrement habit count")

    async def reset_count(self, habit_id: int, on: Optional[DateLike] = None) -> bool:
        """Clear a count habit's progress for the day."""
        day = dates.resolve(on)
        if not await self._is_goal(habit_id, GoalType.COUNT, day):
            return False
        result = await self.ledger.unmark_completed_result(habit_id, day)
        return await self._after_write(habit_id, day, result, "Failed to reset habit count")

    async def record_time(
        self,
        habit_id: int,
        minutes: int,
        on: Optional[DateLike] = None,
        notes: Optional[str] = None,
    ) -> bool:
        day = dates.resolve(on)
        if not await self._is_goal(habit_id, GoalType.TIME, day):
            return False
        result = await self.ledger.record_time_result(habit_id, minutes, day, notes)
        return await self._after_write(habit_id, day, result, "Failed to record habit time")

    # -- habit management -----------------------------------------------

    async def _reload_if(self, success: bool, failure_message: str) -> bool:
        if success:
            await self.refresh()
        else:
            self.state.error = failure_message
        return success

    async def add_habit(self, habit: HabitCreate, created_at: Optional[DateLike] = None) -> bool:
        habit_id = await self.repository.create_habit(habit, created_at)
        return await self._reload_if(habit_id is not None, "Failed to add habit")

    async def update_habit(self, habit_id: int, habit: HabitUpdate) -> bool:
        success = await self.repository.update_habit(habit_id, habit)
        return await self._reload_if(success, "Failed to update habit")

    async def deactivate_habit(self, habit_id: int) -> bool:
        success = await self.repository.deactivate_habit(habit_id)
        return await self._reload_if(success, "Failed to archive habit")

    async def reactivate_habit(self, habit_id: int) -> bool:
        success = await self.repository.reactivate_habit(habit_id)
        return await self._reload_if(success, "Failed to restore habit")

    async def delete_habit(self, habit_id: int) -> bool:
        success = await self.repository.delete_habit(habit_id)
        return await self._reload_if(success, "Failed to delete habit")

    # -- history --------------------------------------------------------

    async def get_weekly_data(self, end: Optional[DateLike] = None) -> List[DailyTotal]:
        """Completed and total habits for each of the seven days ending at ``end``."""
        last = dates.resolve(end)
        week: List[DailyTotal] = []
        for offset in range(6, -1, -1):
            day = dates.add_days(last, -offset)
            habits = await self.repository.list_habits_for_date(day)
            by_habit = {c.habit_id: c for c in await self.ledger.get_for_date(day)}
            completed = sum(
                1 for habit in habits if build_view(habit, by_habit.get(habit.id)).is_completed_today
            )
            week.append(
                DailyTotal(date=day, weekday=day.strftime("%a"), completed=completed, total=len(habits))
            )
        return week
