from __future__ import annotations

import datetime as dt

from sqlalchemy.orm import Session

from habitsync import analytics, crud
from habitsync.schemas.insights import HabitStatOut, InsightsSummaryOut


def build_summary(
    db: Session,
    user_id: int,
    start: dt.date,
    end: dt.date,
    today: dt.date | None = None,
) -> InsightsSummaryOut:
    days = analytics.days_in_range(start, end)
    today = today or dt.date.today()
    # A future `to` must not zero every streak.
    reference = min(end, today)

    habits = crud.list_habits(db, user_id, include_archived=False)
    stats: list[HabitStatOut] = []
    for habit in habits:
        done_days = crud.completion_days(db, user_id, habit.id, start, end)
        stats.append(
            HabitStatOut(
                id=habit.id,
                name=habit.name,
                color=habit.color,
                completion_count=len(done_days),
                completion_rate=analytics.completion_rate(len(done_days), days),
                current_streak=analytics.current_streak(done_days, reference),
            )
        )

    avg = analytics.average_mood(crud.list_mood_values(db, user_id, start, end))
    total = sum(s.completion_count for s in stats)
    return InsightsSummaryOut(
        from_=start,
        to=end,
        avg_mood=round(avg, 2) if avg is not None else None,
        completion_percent=analytics.completion_percent(total, len(habits), days),
        best_streak=max((s.current_streak for s in stats), default=0),
        habits=stats,
    )
