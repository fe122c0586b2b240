import datetime as dt

import pytest

from habitsync import analytics
from habitsync.client import insights, repo

D = dt.date(2024, 1, 15)


def _days(*offsets):
    return {D - dt.timedelta(days=o) for o in offsets}


def test_current_streak_counts_back_from_as_of():
    assert analytics.current_streak(_days(0, 1, 2), D) == 3
    assert analytics.current_streak(_days(0, 1, 2, 4), D) == 3


def test_current_streak_is_zero_when_as_of_missing():
    assert analytics.current_streak(_days(1, 2, 3), D) == 0
    assert analytics.current_streak(set(), D) == 0


def test_last_n_days_oldest_first():
    assert analytics.last_n_days(_days(0, 2), 3, D) == [True, False, True]
    assert analytics.last_n_days(_days(0), 0, D) == []


def test_range_helpers():
    assert analytics.days_in_range(D, D) == 1
    assert analytics.days_in_range(D, D - dt.timedelta(days=1)) == 0
    assert analytics.date_range(D - dt.timedelta(days=2), D) == sorted(_days(0, 1, 2))


def test_rates_and_percent():
    assert analytics.completion_rate(3, 7) == pytest.approx(0.4286, abs=1e-4)
    assert analytics.completion_rate(3, 0) == 0.0
    assert analytics.completion_percent(3, 1, 7) == pytest.approx(42.86, abs=1e-2)
    assert analytics.completion_percent(20, 1, 7) == 100.0
    assert analytics.completion_percent(0, 0, 7) == 0.0


def test_average_mood_ignores_missing_days():
    assert analytics.average_mood([4, None, 2]) == 3
    assert analytics.average_mood([]) is None


def test_completion_round_trip_in_local_store(local_store):
    habit = repo.create_habit(local_store, "Read")

    repo.set_completion(local_store, habit.id, D, True)
    assert insights.last_n_days(local_store, habit.id, 3, D) == [False, False, True]

    repo.set_completion(local_store, habit.id, D, False)
    assert insights.last_n_days(local_store, habit.id, 3, D) == [False, False, False]
    assert repo.completions_for_date(local_store, D) == []


def test_local_streak(local_store):
    habit = repo.create_habit(local_store, "Walk")
    for offset in (0, 1, 2, 4):
        repo.set_completion(local_store, habit.id, D - dt.timedelta(days=offset), True)

    assert insights.current_streak(local_store, habit.id, D) == 3
    assert insights.current_streak(local_store, habit.id, D - dt.timedelta(days=3)) == 0


def test_local_summary(local_store):
    start = D - dt.timedelta(days=6)
    habit = repo.create_habit(local_store, "Stretch")
    archived = repo.create_habit(local_store, "Old")
    repo.archive_habit(local_store, archived.id)
    for offset in (0, 1, 3):
        repo.set_completion(local_store, habit.id, D - dt.timedelta(days=offset), True)
    repo.set_completion(local_store, archived.id, D, True)
    repo.set_mood(local_store, D, 4)
    repo.set_mood(local_store, D - dt.timedelta(days=2), 3)

    [stat] = insights.habit_stats(local_store, start, D)
    assert stat.id == habit.id
    assert stat.completion_count == 3
    assert stat.completion_rate == pytest.approx(0.4286, abs=1e-4)
    assert stat.current_streak == 2

    series = insights.mood_series(local_store, start, D)
    assert len(series) == 7
    assert [p.mood for p in series if p.mood is not None] == [3, 4]
    assert series[0].mood is None

    summary = insights.summary(local_store, start, D)
    assert summary.completion_percent == pytest.approx(42.86, abs=1e-2)
    assert summary.avg_mood == 3.5
    assert summary.best_streak == 2


def test_local_summary_streaks_stay_inside_range(local_store):
    start = D - dt.timedelta(days=2)
    habit = repo.create_habit(local_store, "Floss")
    for offset in range(6):
        repo.set_completion(local_store, habit.id, D - dt.timedelta(days=offset), True)

    [stat] = insights.habit_stats(local_store, start, D, today=D)
    assert stat.completion_count == 3
    assert stat.current_streak == 3


def test_local_summary_future_end_uses_today(local_store):
    habit = repo.create_habit(local_store, "Floss")
    for offset in (0, 1):
        repo.set_completion(local_store, habit.id, D - dt.timedelta(days=offset), True)

    summary = insights.summary(local_store, D - dt.timedelta(days=6), D + dt.timedelta(days=3), today=D)
    assert summary.best_streak == 2
