"""
Streak calculation.

A day counts towards a streak when the habit has a completion row for it,
whatever the goal type. A count habit with one of eight units logged still
extends its streak; goal attainment is only considered by the per-day
completion flag.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from . import dates
from .dates import DateLike
from .ledger import CompletionLedger


async def calculate_streak(
    ledger: CompletionLedger, habit_id: int, reference: Optional[DateLike] = None
) -> int:
    """Count consecutive days with a completion, walking back from ``reference``.

    ``reference`` itself is included. The walk stops at the first day
    without a row for the habit, so it is bounded by the habit's age.
    """
    start = dates.resolve(reference)
    streak = 0
    while True:
        day = dates.add_days(start, -streak)
        completions = await ledger.get_for_date(day)
        if not any(c.habit_id == habit_id for c in completions):
            return streak
        streak += 1


def longest_streak(days: Iterable[date]) -> int:
    """Length of the longest run of consecutive calendar days."""
    longest = current = 0
    previous: Optional[date] = None
    for day in sorted(set(days)):
        if previous is not None and dates.add_days(previous, 1) == day:
            current += 1
        else:
            current = 1
        longest = max(longest, current)
        previous = day
    return longest
