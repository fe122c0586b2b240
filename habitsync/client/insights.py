from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

from habitsync import analytics
from habitsync.client import repo
from habitsync.client.store import LocalStore


@dataclass(frozen=True)
class HabitStat:
    id: str
    name: str
    color: str | None
    completion_count: int
    completion_rate: float
    current_streak: int


@dataclass(frozen=True)
class MoodPoint:
    date: dt.date
    mood: int | None


@dataclass(frozen=True)
class Summary:
    completion_percent: float
    avg_mood: float | None
    best_streak: int
    habits: list[HabitStat]


def current_streak(store: LocalStore, habit_id: str, as_of: dt.date) -> int:
    # Walk back one day at a time; each step only needs the day before.
    streak = 0
    cursor = as_of
    while repo.has_completion(store, habit_id, cursor):
        streak += 1
        cursor -= dt.timedelta(days=1)
    return streak


def last_n_days(store: LocalStore, habit_id: str, n: int, as_of: dt.date) -> list[bool]:
    if n <= 0:
        return []
    start = as_of - dt.timedelta(days=n - 1)
    return analytics.last_n_days(repo.completion_days(store, habit_id, start, as_of), n, as_of)


def habit_stats(
    store: LocalStore,
    start: dt.date,
    end: dt.date,
    today: dt.date | None = None,
) -> list[HabitStat]:
    """Per-habit stats over [start, end]; streaks only count days inside the range."""
    days = analytics.days_in_range(start, end)
    reference = min(end, today or dt.date.today())
    stats = []
    for habit in repo.list_habits(store, include_archived=False):
        done_days = repo.completion_days(store, habit.id, start, end)
        count = len(done_days)
        stats.append(
            HabitStat(
                id=habit.id,
                name=habit.name,
                color=habit.color,
                completion_count=count,
                completion_rate=analytics.completion_rate(count, days),
                current_streak=analytics.current_streak(done_days, reference),
            )
        )
    return stats


def mood_series(store: LocalStore, start: dt.date, end: dt.date) -> list[MoodPoint]:
    """One point per day in range; `mood` is None where nothing was logged."""
    by_day = repo.mood_values(store, start, end)
    return [MoodPoint(date=d, mood=by_day.get(d)) for d in analytics.date_range(start, end)]


def summary(store: LocalStore, start: dt.date, end: dt.date, today: dt.date | None = None) -> Summary:
    stats = habit_stats(store, start, end, today)
    days = analytics.days_in_range(start, end)
    total = sum(s.completion_count for s in stats)
    avg = analytics.average_mood(p.mood for p in mood_series(store, start, end))
    return Summary(
        completion_percent=analytics.completion_percent(total, len(stats), days),
        avg_mood=round(avg, 2) if avg is not None else None,
        best_streak=max((s.current_streak for s in stats), default=0),
        habits=stats,
    )
