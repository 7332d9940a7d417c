"""
Pydantic schemas for the habit tracker.

These models describe habit definitions, per-day completion rows, the
composite views handed to the presentation layer and the statistics
computed over them. Keeping them separate from the storage code means the
core logic can be tested against plain Python objects.
"""

from datetime import date as dt_date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

CUSTOM_EMOJI_MAX_LENGTH = 4


class GoalType(str, Enum):
    """How a habit's daily completion is measured."""

    BINARY = "binary"
    COUNT = "count"
    TIME = "time"


class HabitCreate(BaseModel):
    """Schema for creating a new habit."""

    name: str = Field(..., description="Display name of the habit.")
    icon: Optional[str] = Field(
        None, description="Display glyph. Resolved from the category when omitted."
    )
    category: str = Field("general", description="Classification tag.")
    custom_emoji: Optional[str] = Field(None, max_length=CUSTOM_EMOJI_MAX_LENGTH)
    goal_type: GoalType = GoalType.BINARY
    target_count: Optional[int] = Field(
        None, gt=0, description="Units per day; required for count goals."
    )
    target_time_minutes: Optional[int] = Field(
        None, gt=0, description="Minutes per day; required for time goals."
    )
    reminder_enabled: bool = False
    reminder_time: Optional[str] = Field(None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Habit name cannot be empty.")
        return value


class HabitUpdate(HabitCreate):
    """Full replacement of a habit's editable fields."""


class Habit(BaseModel):
    """A stored habit definition."""

    id: int
    name: str
    icon: str
    category: str = "general"
    custom_emoji: Optional[str] = None
    goal_type: GoalType = GoalType.BINARY
    target_count: Optional[int] = None
    target_time_minutes: Optional[int] = None
    reminder_enabled: bool = False
    reminder_time: Optional[str] = None
    is_active: bool = True
    created_at: str
    updated_at: str

    class Config:
        from_attributes = True


class Completion(BaseModel):
    """Progress registered for one habit on one local calendar day."""

    id: int
    habit_id: int
    date: dt_date
    count: Optional[int] = None
    time_minutes: Optional[int] = None
    notes: Optional[str] = None
    completed_at: str


class HabitView(Habit):
    """A habit combined with its completion state for a given day."""

    is_completed_today: bool = False
    streak: int = Field(0, ge=0)
    current_count: Optional[int] = None
    resolved_target_count: Optional[int] = None
    current_time_minutes: Optional[int] = None
    longest_streak: int = Field(0, ge=0)
    total_completions: int = Field(0, ge=0)


class TimeEntry(BaseModel):
    """Schema for recording minutes spent on a time-goal habit."""

    minutes: int = Field(..., gt=0)
    date: Optional[dt_date] = None
    notes: Optional[str] = None


class HabitStats(BaseModel):
    total_habits: int
    completed_today: int
    completion_rate: int
    total_completions: int
    average_streak: int
    longest_streak: int
    most_consistent_habit: str
    needs_attention: List[str]


class HabitTrend(BaseModel):
    habit_id: int
    habit_name: str
    current_streak: int
    longest_streak: int
    completion_rate: int = Field(
        ..., description="Streak-based proxy over a 30 day window, capped at 100."
    )
    total_completions: int
    last_completed: str


class CategoryStat(BaseModel):
    category: str
    count: int
    completed: int


class DailyTotal(BaseModel):
    date: dt_date
    weekday: str
    completed: int
    total: int


class Category(BaseModel):
    id: str
    name: str
    icon: str
    description: str
    color: str
