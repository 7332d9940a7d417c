"""
Statistics over habit views.

Everything here is a pure function of a list of ``HabitView`` objects
already composed by the aggregator; nothing reads storage. Percentages and
averages are rounded half up so that 2.5 becomes 3, as users expect on a
progress screen.
"""

import math
import re
from typing import Callable, Dict, List, Sequence, Tuple

from .schemas import CategoryStat, HabitStats, HabitTrend, HabitView

NO_HABITS = "No habits yet"
NEEDS_ATTENTION_LIMIT = 3
TREND_WINDOW_DAYS = 30


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def completion_rate(habits: Sequence[HabitView]) -> int:
    if not habits:
        return 0
    completed = sum(1 for h in habits if h.is_completed_today)
    return round_half_up(100 * completed / len(habits))


def average_streak(habits: Sequence[HabitView]) -> int:
    if not habits:
        return 0
    return round_half_up(sum(h.streak for h in habits) / len(habits))


def most_consistent_habit(habits: Sequence[HabitView]) -> str:
    """Name of the habit with the highest streak; the earliest one wins ties."""
    if not habits:
        return NO_HABITS
    best = habits[0]
    for habit in habits[1:]:
        if habit.streak > best.streak:
            best = habit
    return best.name


def needs_attention(habits: Sequence[HabitView]) -> List[str]:
    return [h.name for h in habits if not h.is_completed_today][:NEEDS_ATTENTION_LIMIT]


def trend_completion_rate(streak: int) -> int:
    """Streak as a share of a 30 day window, capped at 100.

    This is an approximation from the current streak, not a count of the
    days actually completed in the window.
    """
    return min(100, round_half_up(100 * streak / TREND_WINDOW_DAYS))


def calculate_habit_stats(habits: Sequence[HabitView]) -> HabitStats:
    return HabitStats(
        total_habits=len(habits),
        completed_today=sum(1 for h in habits if h.is_completed_today),
        completion_rate=completion_rate(habits),
        total_completions=sum(h.total_completions for h in habits),
        average_streak=average_streak(habits),
        longest_streak=max((max(h.longest_streak, h.streak) for h in habits), default=0),
        most_consistent_habit=most_consistent_habit(habits),
        needs_attention=needs_attention(habits),
    )


def calculate_habit_trends(habits: Sequence[HabitView]) -> List[HabitTrend]:
    trends = [
        HabitTrend(
            habit_id=h.id,
            habit_name=h.name,
            current_streak=h.streak,
            longest_streak=max(h.longest_streak, h.streak),
            completion_rate=trend_completion_rate(h.streak),
            total_completions=h.total_completions,
            last_completed="Today" if h.is_completed_today else "Not today",
        )
        for h in habits
    ]
    return sorted(trends, key=lambda t: t.current_streak, reverse=True)


# Category classification

Rule = Tuple[Callable[[HabitView], bool], str]


def _matches(icons: Sequence[str], keywords: Sequence[str]) -> Callable[[HabitView], bool]:
    def predicate(habit: HabitView) -> bool:
        glyphs = (habit.icon or "") + (habit.custom_emoji or "")
        name = habit.name.lower()
        if any(i in glyphs for i in icons):
            return True
        # Keywords match at the start of a word, so "run" misses "brunch".
        return any(re.search(r"\b" + re.escape(k), name) for k in keywords)

    return predicate


CATEGORY_BUCKETS = ("Exercise", "Learning", "Health", "Wellness", "Other")

CATEGORY_RULES: List[Rule] = [
    (_matches(("🏃", "💪", "🏋", "🚴", "🏊"),
              ("run", "workout", "exercise", "gym", "push-up", "pushup", "walk", "cycl", "swim")),
     "Exercise"),
    (_matches(("🧠", "📚", "📖", "✏"),
              ("read", "study", "learn", "book", "course", "language")),
     "Learning"),
    (_matches(("💧", "🥗", "😴", "🏥", "💊"),
              ("water", "drink", "sleep", "vitamin", "diet", "floss", "health")),
     "Health"),
    (_matches(("🧘", "⭐", "🌟", "🙏"),
              ("meditat", "journal", "gratitude", "breath", "mindful", "yoga", "stretch")),
     "Wellness"),
]


def classify_category(habit: HabitView, rules: Sequence[Rule] = CATEGORY_RULES) -> str:
    """First matching bucket in rule order, ``Other`` when nothing matches."""
    for predicate, bucket in rules:
        if predicate(habit):
            return bucket
    return "Other"


def category_stats(habits: Sequence[HabitView]) -> List[CategoryStat]:
    buckets: Dict[str, List[HabitView]] = {name: [] for name in CATEGORY_BUCKETS}
    for habit in habits:
        buckets[classify_category(habit)].append(habit)
    return [
        CategoryStat(
            category=name,
            count=len(members),
            completed=sum(1 for h in members if h.is_completed_today),
        )
        for name, members in buckets.items()
        if members
    ]
