"""
Local calendar date helpers.

Every date the tracker reasons about is a calendar day in the device's
local timezone. Completions are keyed by that day, streaks walk backwards
over it, and "today" is resolved from the local clock. This module is the
single place where timestamps are turned into local days so that UTC and
local conventions are never mixed.

``datetime.date`` is used as the value type: it carries no time or zone
and supports day arithmetic and ordering directly.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Union

DateLike = Union[date, datetime, str]


def today() -> date:
    """Return the current calendar date in the local timezone."""
    return datetime.now().astimezone().date()


def now_timestamp() -> str:
    """Local wall-clock timestamp used for ``created_at``/``completed_at``."""
    return datetime.now().astimezone().replace(microsecond=0).isoformat()


def to_local_date(value: DateLike) -> date:
    """Convert a date, datetime or ISO string into a local calendar date.

    Timezone-aware timestamps are converted to the local zone before the
    day is taken; naive timestamps are assumed to already be local.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    # fromisoformat on older interpreters does not accept a trailing Z
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_local_date(datetime.fromisoformat(text))


def format_date(value: date) -> str:
    """Storage format for a calendar date (``YYYY-MM-DD``)."""
    return value.isoformat()


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def resolve(on: Optional[DateLike]) -> date:
    """Default an optional date argument to today."""
    if on is None:
        return today()
    return to_local_date(on)
