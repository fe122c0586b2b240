"""
Sync wire schemas.

One envelope (`SyncOpIn`), many op-specific payload shapes: the payload is a
tagged union keyed by the envelope's `type`, each variant with its own model.
Both the device (before enqueueing) and the server (before applying) validate
through `parse_payload`.

    POST /sync   SyncRequest → SyncResponse
"""
from __future__ import annotations

import datetime as dt
import enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel


DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
ID_MAX_LEN = 64


class OpType(str, enum.Enum):
    completion_set = "completion.set"
    mood_set = "mood.set"
    habit_create = "habit.create"
    habit_update = "habit.update"


class UnknownOpTypeError(ValueError):
    def __init__(self, op_type: str):
        self.op_type = op_type
        super().__init__(f"Unknown op type: {op_type}")


# ---------------------------------------------------------------------------
# Payload variants
# ---------------------------------------------------------------------------

class OpPayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        """camelCase dict with only the fields that were provided."""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


class _DatedPayload(OpPayload):
    date: StrictStr = Field(pattern=DATE_PATTERN)

    @field_validator("date")
    @classmethod
    def _real_date(cls, v: str) -> str:
        dt.date.fromisoformat(v)
        return v

    @property
    def day(self) -> dt.date:
        return dt.date.fromisoformat(self.date)


class CompletionSetPayload(_DatedPayload):
    habit_id: StrictStr = Field(min_length=1, max_length=ID_MAX_LEN)
    done: StrictBool


class MoodSetPayload(_DatedPayload):
    mood: StrictInt = Field(ge=1, le=5)
    notes: StrictStr | None = Field(default=None, max_length=2000)


class HabitCreatePayload(OpPayload):
    client_habit_id: StrictStr = Field(min_length=1, max_length=ID_MAX_LEN)
    name: StrictStr = Field(min_length=1, max_length=120)
    color: StrictStr | None = Field(default=None, max_length=32)


class HabitUpdatePayload(OpPayload):
    habit_id: StrictStr = Field(min_length=1, max_length=ID_MAX_LEN)
    name: StrictStr | None = Field(default=None, min_length=1, max_length=120)
    color: StrictStr | None = Field(default=None, max_length=32)
    is_archived: StrictBool | None = None

    @field_validator("name", "is_archived")
    @classmethod
    def _not_null_when_given(cls, v):
        # Only runs for explicitly provided values; null would blank a required column.
        if v is None:
            raise ValueError("must not be null")
        return v

    def changes(self) -> dict[str, Any]:
        """Attribute-name → value for the fields present in the payload."""
        return self.model_dump(exclude_unset=True, exclude={"habit_id"})


PAYLOAD_MODELS: dict[str, type[OpPayload]] = {
    OpType.completion_set.value: CompletionSetPayload,
    OpType.mood_set.value: MoodSetPayload,
    OpType.habit_create.value: HabitCreatePayload,
    OpType.habit_update.value: HabitUpdatePayload,
}


def parse_payload(op_type: str | OpType, payload: Any) -> OpPayload:
    """Validate `payload` against the variant selected by `op_type`.

    Raises UnknownOpTypeError for an unrecognized type and pydantic's
    ValidationError for a malformed payload.
    """
    key = op_type.value if isinstance(op_type, OpType) else op_type
    model = PAYLOAD_MODELS.get(key)
    if model is None:
        raise UnknownOpTypeError(str(key))
    if isinstance(payload, OpPayload):
        payload = payload.to_wire()
    return model.model_validate(payload)


def format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"]) or "payload"
        parts.append(f"{field}: {error['msg']}")
    return "; ".join(parts)


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------

class SyncOpIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: StrictStr = Field(min_length=1, max_length=ID_MAX_LEN, description="Client-generated idempotency key.")
    # Free string: an unknown type fails that op, not the request.
    type: StrictStr = Field(min_length=1, max_length=32)
    payload: dict[str, Any]
    created_at: dt.datetime | None = Field(default=None, alias="createdAt")


class SyncRequest(BaseModel):
    ops: list[SyncOpIn]


class FailedOp(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    op_id: str = Field(alias="opId")
    code: str
    message: str


class SyncResponse(BaseModel):
    applied: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    failed: list[FailedOp] = Field(default_factory=list)


class SyncReply(BaseModel):
    """Device-side view of a /sync reply. All three lists must be present."""

    applied: list[str]
    skipped: list[str]
    failed: list[FailedOp]


def parse_sync_reply(body: Any) -> SyncReply:
    """Raises ValueError when the body is not a complete sync result."""
    try:
        return SyncReply.model_validate(body)
    except ValidationError as exc:
        raise ValueError(f"Malformed sync response: {format_validation_error(exc)}") from exc
