from __future__ import annotations

import datetime as dt
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CompletionIn(_CamelModel):
    habit_id: str = Field(min_length=1, max_length=64)
    done: bool


class CheckinIn(_CamelModel):
    date: dt.date
    mood: int | None = Field(default=None, ge=1, le=5)
    notes: str | None = Field(default=None, max_length=2000)
    completions: list[CompletionIn] | None = None


class CompletionOut(_CamelModel):
    habit_id: str
    done: bool = True


class CheckinOut(_CamelModel):
    date: dt.date
    mood: int | None = None
    notes: str | None = None
    completions: list[CompletionOut] = Field(default_factory=list)
