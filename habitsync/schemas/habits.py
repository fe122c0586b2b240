from __future__ import annotations

import datetime as dt
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class HabitOut(_CamelModel):
    id: str
    name: str
    color: str | None = None
    is_archived: bool = False
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class HabitListOut(BaseModel):
    habits: list[HabitOut]


class HabitEnvelope(BaseModel):
    habit: HabitOut


class HabitCreate(_CamelModel):
    id: str | None = Field(default=None, min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=120)
    color: str | None = Field(default=None, max_length=32)

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v


class HabitUpdate(_CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    color: str | None = Field(default=None, max_length=32)
    is_archived: bool | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str | None) -> str | None:
        if v is None:
            raise ValueError("name must not be null")
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

    @field_validator("is_archived")
    @classmethod
    def _archived(cls, v: bool | None) -> bool | None:
        if v is None:
            raise ValueError("isArchived must not be null")
        return v
