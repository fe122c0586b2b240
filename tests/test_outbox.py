import datetime as dt

import pytest
from pydantic import ValidationError

from habitsync.client.outbox import Outbox
from habitsync.schemas.sync import OpType, UnknownOpTypeError


NOW = dt.datetime(2024, 1, 15, 12, 0, 0)


def _mood(day="2024-01-15", mood=3):
    return {"date": day, "mood": mood}


@pytest.fixture()
def outbox(local_store):
    return Outbox(local_store, max_attempts=3, backoff_base_sec=2, backoff_max_sec=10)


def test_pending_is_fifo(outbox):
    ids = [outbox.enqueue(OpType.mood_set, _mood(mood=m)) for m in (1, 2, 3)]

    pending = outbox.pending()
    assert [op.op_id for op in pending] == ids
    assert [op.payload["mood"] for op in pending] == [1, 2, 3]
    assert all(op.attempts == 0 for op in pending)


def test_pending_respects_limit(outbox):
    ids = [outbox.enqueue(OpType.mood_set, _mood()) for _ in range(5)]
    assert [op.op_id for op in outbox.pending(limit=2)] == ids[:2]


def test_enqueue_validates_before_writing(outbox):
    with pytest.raises(ValidationError):
        outbox.enqueue(OpType.mood_set, _mood(mood=7))
    with pytest.raises(UnknownOpTypeError):
        outbox.enqueue("habit.delete", {"habitId": "h1"})
    assert outbox.count() == 0


def test_wire_format_uses_camel_case(outbox):
    outbox.enqueue(OpType.completion_set, {"date": "2024-01-15", "habitId": "h1", "done": True})
    wire = outbox.pending()[0].to_wire()

    assert wire["type"] == "completion.set"
    assert wire["payload"] == {"date": "2024-01-15", "habitId": "h1", "done": True}
    assert wire["createdAt"].endswith("Z")


def test_ack_removes_only_given_ids(outbox):
    first = outbox.enqueue(OpType.mood_set, _mood())
    second = outbox.enqueue(OpType.mood_set, _mood())

    assert outbox.ack([first, "unknown"]) == 1
    assert outbox.ack([]) == 0
    assert [op.op_id for op in outbox.pending()] == [second]


def test_fail_backs_off_then_dead_letters(outbox):
    op_id = outbox.enqueue(OpType.mood_set, _mood())

    op = outbox.fail(op_id, "HABIT_NOT_FOUND: nope", now=NOW)
    assert op.attempts == 1
    assert op.last_error == "HABIT_NOT_FOUND: nope"
    assert op.next_attempt_at == NOW + dt.timedelta(seconds=2)
    assert outbox.pending(now=NOW) == []
    assert [o.op_id for o in outbox.pending(now=NOW + dt.timedelta(seconds=2))] == [op_id]

    op = outbox.fail(op_id, "again", now=NOW)
    assert op.next_attempt_at == NOW + dt.timedelta(seconds=4)

    op = outbox.fail(op_id, "last", now=NOW)
    assert op.attempts == 3
    assert op.dead_at == NOW
    assert outbox.pending(now=NOW + dt.timedelta(days=1)) == []
    assert [o.op_id for o in outbox.dead_letters()] == [op_id]
    assert outbox.count() == 0
    assert outbox.count(include_dead=True) == 1


def test_backoff_is_capped(outbox):
    assert outbox.backoff_delay(0) == 0
    assert outbox.backoff_delay(1) == 2
    assert outbox.backoff_delay(3) == 8
    assert outbox.backoff_delay(10) == 10


def test_unbounded_immediate_retry_when_disabled(local_store):
    outbox = Outbox(local_store, max_attempts=0, backoff_base_sec=0, backoff_max_sec=0)
    op_id = outbox.enqueue(OpType.mood_set, _mood())

    for _ in range(25):
        outbox.fail(op_id, "still failing", now=NOW)

    op = outbox.get(op_id)
    assert op.attempts == 25
    assert op.dead_at is None
    assert [o.op_id for o in outbox.pending(now=NOW)] == [op_id]


def test_terminal_failure_dead_letters_immediately(outbox):
    op_id = outbox.enqueue(OpType.mood_set, _mood())
    op = outbox.fail(op_id, "INVALID_PAYLOAD: bad", terminal=True, now=NOW)

    assert op.attempts == 1
    assert op.dead_at == NOW


def test_fail_unknown_id_returns_none(outbox):
    assert outbox.fail("missing", "x") is None


def test_requeue_restores_dead_letter(outbox):
    op_id = outbox.enqueue(OpType.mood_set, _mood())
    outbox.fail(op_id, "bad", terminal=True, now=NOW)

    assert outbox.requeue(op_id) is True
    op = outbox.get(op_id)
    assert op.attempts == 0
    assert op.dead_at is None
    assert [o.op_id for o in outbox.pending(now=NOW)] == [op_id]
    assert outbox.requeue("missing") is False


def test_replace_mints_new_id_and_keeps_position(outbox):
    first = outbox.enqueue(OpType.mood_set, _mood(mood=1))
    second = outbox.enqueue(OpType.mood_set, _mood(mood=2))
    outbox.fail(first, "INVALID_PAYLOAD: bad", terminal=True, now=NOW)

    new_id = outbox.replace(first, _mood(mood=4))

    assert new_id not in (first, second)
    assert outbox.get(first) is None
    pending = outbox.pending(now=NOW)
    assert [op.op_id for op in pending] == [new_id, second]
    assert pending[0].payload["mood"] == 4
    assert pending[0].attempts == 0


def test_replace_validates_payload(outbox):
    op_id = outbox.enqueue(OpType.mood_set, _mood())
    with pytest.raises(ValidationError):
        outbox.replace(op_id, _mood(mood=0))
    assert outbox.get(op_id) is not None
