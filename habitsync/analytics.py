"""
Streak and range statistics.

Everything here is a pure function over sets of completion dates; callers
load the dates from the device store or the server DB. A date belongs to the
set iff a completion row exists for it.
"""
from __future__ import annotations

import datetime as dt
from typing import Iterable


def current_streak(days: set[dt.date], as_of: dt.date) -> int:
    """Consecutive completed days walking backward from `as_of` (inclusive).

    Zero when `as_of` itself has no completion.
    """
    streak = 0
    cursor = as_of
    while cursor in days:
        streak += 1
        cursor -= dt.timedelta(days=1)
    return streak


def last_n_days(days: set[dt.date], n: int, as_of: dt.date) -> list[bool]:
    """Completion flags over [as_of-(n-1), as_of], oldest first."""
    if n <= 0:
        return []
    start = as_of - dt.timedelta(days=n - 1)
    return [(start + dt.timedelta(days=i)) in days for i in range(n)]


def date_range(start: dt.date, end: dt.date) -> list[dt.date]:
    return [start + dt.timedelta(days=i) for i in range(days_in_range(start, end))]


def days_in_range(start: dt.date, end: dt.date) -> int:
    """Inclusive day count; 0 when the range is inverted."""
    return max(0, (end - start).days + 1)


def completion_rate(count: int, days: int) -> float:
    return count / days if days > 0 else 0.0


def completion_percent(total_completions: int, active_habits: int, days: int) -> float:
    """Share of possible habit-days completed, as a percentage capped at 100."""
    possible = active_habits * days
    if possible <= 0:
        return 0.0
    return min(100.0, total_completions / possible * 100)


def average_mood(values: Iterable[int]) -> float | None:
    """Mean of the recorded values; days without an entry are not zeros."""
    values = [v for v in values if v is not None]
    if not values:
        return None
    return sum(values) / len(values)
