from __future__ import annotations

import datetime as dt
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class HabitStatOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    color: str | None
    completion_count: int
    completion_rate: float
    current_streak: int


class InsightsSummaryOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    from_: dt.date = Field(alias="from")
    to: dt.date
    avg_mood: float | None
    completion_percent: float
    best_streak: int
    habits: list[HabitStatOut]
