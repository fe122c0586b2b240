"""
Idempotent batch apply for device outbox operations.

Public API
----------
apply_batch(db, user_id, ops)   → SyncResponse

Ops run strictly in array order so a later op may depend on an earlier one
(`habit.create` followed by `completion.set` on the new habit). Each op
commits on its own; there is no batch-wide transaction and the loop never
stops early.

Per op:
    ledger hit          → skipped (no validation, no effect)
    unknown type        → failed UNKNOWN_OP_TYPE
    malformed payload   → failed INVALID_PAYLOAD   (ledger untouched)
    domain effect       → commit, then ledger write → applied
    unexpected error    → rollback, failed APPLY_FAILED (ledger untouched)
"""
from __future__ import annotations

import logging
from typing import Callable

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from habitsync import crud
from habitsync.errors import (
    APPLY_FAILED,
    HABIT_ID_CONFLICT,
    HABIT_NOT_FOUND,
    INVALID_PAYLOAD,
    UNKNOWN_OP_TYPE,
    OpFailure,
)
from habitsync.models.habit import Habit
from habitsync.schemas.sync import (
    CompletionSetPayload,
    FailedOp,
    HabitCreatePayload,
    HabitUpdatePayload,
    MoodSetPayload,
    OpPayload,
    OpType,
    SyncOpIn,
    SyncResponse,
    UnknownOpTypeError,
    format_validation_error,
    parse_payload,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Effects, one per op type. Each commits its own change.
# ---------------------------------------------------------------------------

def _require_habit(db: Session, user_id: int, habit_id: str):
    habit = crud.get_habit(db, user_id, habit_id)
    if habit is None:
        raise OpFailure(HABIT_NOT_FOUND, f"Habit {habit_id} not found")
    return habit


def _apply_completion_set(db: Session, user_id: int, p: CompletionSetPayload) -> None:
    _require_habit(db, user_id, p.habit_id)
    crud.set_completion(db, user_id, p.habit_id, p.day, p.done)


def _apply_mood_set(db: Session, user_id: int, p: MoodSetPayload) -> None:
    changes = {"notes": p.notes} if "notes" in p.model_fields_set else {}
    crud.upsert_mood(db, user_id, p.day, mood=p.mood, **changes)


def _apply_habit_create(db: Session, user_id: int, p: HabitCreatePayload) -> None:
    # An existing row means an earlier attempt created it but crashed before
    # the ledger write; treat as already applied.
    existing = db.get(Habit, p.client_habit_id)
    if existing is not None:
        if existing.user_id != user_id:
            raise OpFailure(HABIT_ID_CONFLICT, f"Habit id {p.client_habit_id} is already taken")
        return
    crud.create_habit(db, user_id, p.client_habit_id, name=p.name, color=p.color)


def _apply_habit_update(db: Session, user_id: int, p: HabitUpdatePayload) -> None:
    _require_habit(db, user_id, p.habit_id)
    crud.update_habit(db, user_id, p.habit_id, p.changes())


_EFFECTS: dict[str, Callable[[Session, int, OpPayload], None]] = {
    OpType.completion_set.value: _apply_completion_set,
    OpType.mood_set.value: _apply_mood_set,
    OpType.habit_create.value: _apply_habit_create,
    OpType.habit_update.value: _apply_habit_update,
}


# ---------------------------------------------------------------------------
# Single op
# ---------------------------------------------------------------------------

def _apply_one(db: Session, user_id: int, op: SyncOpIn) -> str:
    """Returns "applied" or "skipped"; raises OpFailure for per-op failures."""
    if crud.get_sync_op(db, user_id, op.id) is not None:
        return "skipped"

    try:
        payload = parse_payload(op.type, op.payload)
    except UnknownOpTypeError as exc:
        raise OpFailure(UNKNOWN_OP_TYPE, str(exc)) from exc
    except ValidationError as exc:
        raise OpFailure(INVALID_PAYLOAD, format_validation_error(exc)) from exc

    _EFFECTS[op.type](db, user_id, payload)

    try:
        crud.record_sync_op(db, user_id, op.id, op.type, op.created_at)
    except IntegrityError:
        # Another device recorded the same op id between our lookup and write.
        db.rollback()
        logger.info("Ledger already holds op %s for user %s", op.id, user_id)
        return "skipped"
    return "applied"


# ---------------------------------------------------------------------------
# Public: batch
# ---------------------------------------------------------------------------

def apply_batch(db: Session, user_id: int, ops: list[SyncOpIn]) -> SyncResponse:
    result = SyncResponse()

    for op in ops:
        try:
            outcome = _apply_one(db, user_id, op)
        except OpFailure as exc:
            db.rollback()
            logger.info("Sync op %s (%s) failed: %s", op.id, op.type, exc)
            result.failed.append(FailedOp(op_id=op.id, code=exc.code, message=exc.message))
            continue
        except Exception as exc:  # noqa: BLE001
            db.rollback()
            logger.exception("Sync op %s (%s) could not be applied", op.id, op.type)
            result.failed.append(
                FailedOp(op_id=op.id, code=APPLY_FAILED, message=str(exc) or type(exc).__name__)
            )
            continue

        if outcome == "skipped":
            result.skipped.append(op.id)
        else:
            result.applied.append(op.id)

    logger.info(
        "Sync batch for user %s: applied=%s skipped=%s failed=%s",
        user_id,
        len(result.applied),
        len(result.skipped),
        len(result.failed),
    )
    return result
