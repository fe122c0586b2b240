import pytest
from pydantic import ValidationError

from habitsync.schemas.sync import (
    CompletionSetPayload,
    HabitUpdatePayload,
    OpType,
    UnknownOpTypeError,
    parse_payload,
)


def test_parse_payload_selects_variant():
    payload = parse_payload("completion.set", {"date": "2024-01-15", "habitId": "h1", "done": False})
    assert isinstance(payload, CompletionSetPayload)
    assert payload.day.isoformat() == "2024-01-15"
    assert payload.done is False


def test_unknown_type():
    with pytest.raises(UnknownOpTypeError):
        parse_payload("habit.delete", {})


def test_strict_types():
    with pytest.raises(ValidationError):
        parse_payload(OpType.mood_set, {"date": "2024-01-15", "mood": "3"})
    with pytest.raises(ValidationError):
        parse_payload(OpType.habit_create, {"clientHabitId": "h1", "name": ""})


def test_habit_update_changes_only_given_fields():
    payload = parse_payload(OpType.habit_update, {"habitId": "h1", "color": None})
    assert isinstance(payload, HabitUpdatePayload)
    assert payload.changes() == {"color": None}
    assert payload.to_wire() == {"habitId": "h1", "color": None}
