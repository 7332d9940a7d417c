"""
Entry point for the Habit Tracker API.

This module exposes the habit aggregator and the statistics functions to
a local front end over HTTP: listing a day's habits, creating and editing
habits, toggling and counting completions, recording time, and reading
the statistics screens. The SQLite database location comes from the
``HABIT_DB_PATH`` environment variable (see ``config.py``).

Storage failures inside the core come back as sentinel values; they are
reported here as a generic, retryable 503 error.
"""

from datetime import date
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .aggregator import HabitAggregator
from .categories import CATEGORIES
from .config import configure_logging, get_settings
from .errors import HabitValidationError
from .ledger import CompletionLedger
from .repository import HabitRepository
from .schemas import (
    Category,
    CategoryStat,
    Completion,
    DailyTotal,
    GoalType,
    HabitCreate,
    HabitStats,
    HabitTrend,
    HabitUpdate,
    HabitView,
    TimeEntry,
)
from .stats import calculate_habit_stats, calculate_habit_trends, category_stats
from .storage import SqliteStorage, Storage

RETRY_MESSAGE = "Could not save your change. Please try again."


def build_aggregator(storage: Storage) -> HabitAggregator:
    """Wire the repository and ledger around one storage backend."""
    return HabitAggregator(HabitRepository(storage), CompletionLedger(storage))


app = FastAPI(title="Habit Tracker API")

# The front end is served locally; restrict origins if that changes
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event() -> None:
    """Open the database and attach the aggregator to the application state."""
    settings = get_settings()
    configure_logging(settings)
    storage = SqliteStorage(settings.db_path)
    await storage.migrate()
    app.state.storage = storage
    app.state.aggregator = build_aggregator(storage)


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await app.state.storage.close()


def get_aggregator() -> HabitAggregator:
    """Dependency to retrieve the aggregator instance."""
    return app.state.aggregator


async def _require_view(
    aggregator: HabitAggregator,
    habit_id: int,
    on: Optional[date] = None,
    include_inactive: bool = False,
) -> HabitView:
    view = await aggregator.get_habit_view(habit_id, on, include_inactive)
    if view is None:
        raise HTTPException(status_code=404, detail=f"Habit with id {habit_id} not found")
    return view


def _require_goal(view: HabitView, goal_type: GoalType) -> None:
    if view.goal_type != goal_type:
        raise HTTPException(
            status_code=400, detail=f"Habit {view.id} is not a {goal_type.value} goal"
        )


async def _after_action(
    aggregator: HabitAggregator,
    success: bool,
    habit_id: int,
    on: Optional[date],
    include_inactive: bool = False,
) -> HabitView:
    if not success:
        raise HTTPException(status_code=503, detail=RETRY_MESSAGE)
    return await _require_view(aggregator, habit_id, on, include_inactive)


@app.get("/habits", response_model=List[HabitView])
async def list_habits(
    on: Optional[date] = None, aggregator: HabitAggregator = Depends(get_aggregator)
) -> List[HabitView]:
    """Return the active habits that existed on a day (default today)."""
    return await aggregator.load_habits_for_date(on)


@app.post("/habits", response_model=HabitView)
async def create_habit(
    habit: HabitCreate, aggregator: HabitAggregator = Depends(get_aggregator)
) -> HabitView:
    """Create a new habit."""
    try:
        habit_id = await aggregator.repository.create_habit(habit)
    except HabitValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    if habit_id is None:
        raise HTTPException(status_code=503, detail=RETRY_MESSAGE)
    return await _require_view(aggregator, habit_id)


@app.put("/habits/{habit_id}", response_model=HabitView)
async def update_habit(
    habit_id: int, habit: HabitUpdate, aggregator: HabitAggregator = Depends(get_aggregator)
) -> HabitView:
    await _require_view(aggregator, habit_id, include_inactive=True)
    try:
        success = await aggregator.update_habit(habit_id, habit)
    except HabitValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return await _after_action(aggregator, success, habit_id, None, include_inactive=True)


@app.delete("/habits/{habit_id}")
async def delete_habit(
    habit_id: int, aggregator: HabitAggregator = Depends(get_aggregator)
) -> dict:
    """Delete a habit and its history. Unknown ids are accepted."""
    if not await aggregator.delete_habit(habit_id):
        raise HTTPException(status_code=503, detail=RETRY_MESSAGE)
    return {"deleted": True, "habit_id": habit_id}


@app.post("/habits/{habit_id}/deactivate", response_model=HabitView)
async def deactivate_habit(
    habit_id: int, aggregator: HabitAggregator = Depends(get_aggregator)
) -> HabitView:
    await _require_view(aggregator, habit_id, include_inactive=True)
    success = await aggregator.deactivate_habit(habit_id)
    return await _after_action(aggregator, success, habit_id, None, include_inactive=True)


@app.post("/habits/{habit_id}/reactivate", response_model=HabitView)
async def reactivate_habit(
    habit_id: int, aggregator: HabitAggregator = Depends(get_aggregator)
) -> HabitView:
    await _require_view(aggregator, habit_id, include_inactive=True)
    success = await aggregator.reactivate_habit(habit_id)
    return await _after_action(aggregator, success, habit_id, None, include_inactive=True)


@app.post("/habits/{habit_id}/toggle", response_model=HabitView)
async def toggle_habit(
    habit_id: int, on: Optional[date] = None, aggregator: HabitAggregator = Depends(get_aggregator)
) -> HabitView:
    """Flip a habit's completion for a day, following its goal type."""
    await _require_view(aggregator, habit_id, on)
    success = await aggregator.toggle_completion(habit_id, on)
    return await _after_action(aggregator, success, habit_id, on)


@app.post("/habits/{habit_id}/increment", response_model=HabitView)
async def increment_habit(
    habit_id: int, on: Optional[date] = None, aggregator: HabitAggregator = Depends(get_aggregator)
) -> HabitView:
    _require_goal(await _require_view(aggregator, habit_id, on), GoalType.COUNT)
    success = await aggregator.increment_count(habit_id, on)
    return await _after_action(aggregator, success, habit_id, on)


@app.post("/habits/{habit_id}/decrement", response_model=HabitView)
async def decrement_habit(
    habit_id: int, on: Optional[date] = None, aggregator: HabitAggregator = Depends(get_aggregator)
) -> HabitView:
    _require_goal(await _require_view(aggregator, habit_id, on), GoalType.COUNT)
    success = await aggregator.decrement_count(habit_id, on)
    return await _after_action(aggregator, success, habit_id, on)


@app.post("/habits/{habit_id}/time", response_model=HabitView)
async def record_habit_time(
    habit_id: int, entry: TimeEntry, aggregator: HabitAggregator = Depends(get_aggregator)
) -> HabitView:
    """Record the minutes spent on a time goal for a day."""
    _require_goal(await _require_view(aggregator, habit_id, entry.date), GoalType.TIME)
    success = await aggregator.record_time(habit_id, entry.minutes, entry.date, entry.notes)
    return await _after_action(aggregator, success, habit_id, entry.date)


@app.get("/completions/{on}", response_model=List[Completion])
async def get_completions(
    on: date, aggregator: HabitAggregator = Depends(get_aggregator)
) -> List[Completion]:
    return await aggregator.ledger.get_for_date(on)


@app.get("/stats", response_model=HabitStats)
async def get_stats(
    on: Optional[date] = None, aggregator: HabitAggregator = Depends(get_aggregator)
) -> HabitStats:
    return calculate_habit_stats(await aggregator.get_habits_for_date(on))


@app.get("/stats/trends", response_model=List[HabitTrend])
async def get_trends(
    on: Optional[date] = None, aggregator: HabitAggregator = Depends(get_aggregator)
) -> List[HabitTrend]:
    return calculate_habit_trends(await aggregator.get_habits_for_date(on))


@app.get("/stats/categories", response_model=List[CategoryStat])
async def get_category_stats(
    on: Optional[date] = None, aggregator: HabitAggregator = Depends(get_aggregator)
) -> List[CategoryStat]:
    return category_stats(await aggregator.get_habits_for_date(on))


@app.get("/stats/weekly", response_model=List[DailyTotal])
async def get_weekly(
    end: Optional[date] = None, aggregator: HabitAggregator = Depends(get_aggregator)
) -> List[DailyTotal]:
    """Completed versus total habits for the seven days ending at ``end``."""
    return await aggregator.get_weekly_data(end)


@app.get("/categories", response_model=List[Category])
async def list_categories() -> List[Category]:
    return CATEGORIES
