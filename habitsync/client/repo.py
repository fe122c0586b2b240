"""
Device-side repositories.

Every mutation writes the local change and its outbox op in the same local
transaction, so the UI sees the change immediately and the server receives
it on the next sync.
"""
from __future__ import annotations

import datetime as dt
import uuid

from sqlalchemy import and_, delete, select

from habitsync.client.models import LocalCompletion, LocalHabit, LocalMoodEntry
from habitsync.client.outbox import enqueue_op
from habitsync.client.store import LocalStore
from habitsync.models.base import utcnow
from habitsync.schemas.sync import (
    CompletionSetPayload,
    HabitCreatePayload,
    HabitUpdatePayload,
    MoodSetPayload,
    OpType,
)


# ---------------------------------------------------------------------------
# Habits
# ---------------------------------------------------------------------------

def list_habits(store: LocalStore, include_archived: bool = False) -> list[LocalHabit]:
    with store.session() as db:
        q = select(LocalHabit)
        if not include_archived:
            q = q.where(LocalHabit.is_archived.is_(False))
        return list(db.execute(q.order_by(LocalHabit.created_at.asc(), LocalHabit.id.asc())).scalars())


def get_habit(store: LocalStore, habit_id: str) -> LocalHabit | None:
    with store.session() as db:
        return db.get(LocalHabit, habit_id)


def create_habit(
    store: LocalStore,
    name: str,
    color: str | None = None,
    habit_id: str | None = None,
) -> LocalHabit:
    habit_id = habit_id or str(uuid.uuid4())
    now = utcnow()
    with store.session() as db:
        payload = HabitCreatePayload(client_habit_id=habit_id, name=name, color=color)
        habit = LocalHabit(
            id=habit_id,
            name=name,
            color=color,
            is_archived=False,
            created_at=now,
            updated_at=now,
        )
        db.add(habit)
        enqueue_op(db, OpType.habit_create, payload)
    return habit


_UNSET = object()


def update_habit(
    store: LocalStore,
    habit_id: str,
    *,
    name=_UNSET,
    color=_UNSET,
    is_archived=_UNSET,
) -> LocalHabit | None:
    """Partial update; only the given fields are changed and sent."""
    fields = {
        k: v
        for k, v in (("name", name), ("color", color), ("is_archived", is_archived))
        if v is not _UNSET
    }
    with store.session() as db:
        habit = db.get(LocalHabit, habit_id)
        if habit is None:
            return None
        payload = HabitUpdatePayload(habit_id=habit_id, **fields)
        for k, v in fields.items():
            setattr(habit, k, v)
        habit.updated_at = utcnow()
        db.add(habit)
        enqueue_op(db, OpType.habit_update, payload)
    return habit


def archive_habit(store: LocalStore, habit_id: str) -> LocalHabit | None:
    return update_habit(store, habit_id, is_archived=True)


# ---------------------------------------------------------------------------
# Completions
# ---------------------------------------------------------------------------

def set_completion(store: LocalStore, habit_id: str, day: dt.date, done: bool) -> str:
    """Insert (done) or delete (not done) the completion row; returns the op id."""
    with store.session() as db:
        payload = CompletionSetPayload(date=day.isoformat(), habit_id=habit_id, done=done)
        existing = db.execute(
            select(LocalCompletion).where(
                and_(LocalCompletion.habit_id == habit_id, LocalCompletion.day == day)
            )
        ).scalar_one_or_none()
        if done and existing is None:
            db.add(LocalCompletion(habit_id=habit_id, day=day))
        elif not done:
            db.execute(
                delete(LocalCompletion).where(
                    and_(LocalCompletion.habit_id == habit_id, LocalCompletion.day == day)
                )
            )
        return enqueue_op(db, OpType.completion_set, payload)


def completions_for_date(store: LocalStore, day: dt.date) -> list[LocalCompletion]:
    with store.session() as db:
        return list(
            db.execute(
                select(LocalCompletion).where(LocalCompletion.day == day).order_by(LocalCompletion.id.asc())
            ).scalars()
        )


def completion_days(store: LocalStore, habit_id: str, start: dt.date, end: dt.date) -> set[dt.date]:
    with store.session() as db:
        rows = db.execute(
            select(LocalCompletion.day).where(
                and_(
                    LocalCompletion.habit_id == habit_id,
                    LocalCompletion.day >= start,
                    LocalCompletion.day <= end,
                )
            )
        ).scalars()
        return set(rows)


def has_completion(store: LocalStore, habit_id: str, day: dt.date) -> bool:
    with store.session() as db:
        row = db.execute(
            select(LocalCompletion.id).where(
                and_(LocalCompletion.habit_id == habit_id, LocalCompletion.day == day)
            )
        ).first()
        return row is not None


# ---------------------------------------------------------------------------
# Mood
# ---------------------------------------------------------------------------

def set_mood(store: LocalStore, day: dt.date, mood: int, notes: str | None = None) -> str:
    with store.session() as db:
        payload = MoodSetPayload(date=day.isoformat(), mood=mood, notes=notes)
        entry = db.execute(select(LocalMoodEntry).where(LocalMoodEntry.day == day)).scalar_one_or_none()
        if entry is None:
            db.add(LocalMoodEntry(day=day, mood=mood, notes=notes))
        else:
            entry.mood = mood
            entry.notes = notes
            db.add(entry)
        return enqueue_op(db, OpType.mood_set, payload)


def mood_for_date(store: LocalStore, day: dt.date) -> LocalMoodEntry | None:
    with store.session() as db:
        return db.execute(select(LocalMoodEntry).where(LocalMoodEntry.day == day)).scalar_one_or_none()


def mood_values(store: LocalStore, start: dt.date, end: dt.date) -> dict[dt.date, int]:
    with store.session() as db:
        rows = db.execute(
            select(LocalMoodEntry.day, LocalMoodEntry.mood).where(
                and_(LocalMoodEntry.day >= start, LocalMoodEntry.day <= end)
            )
        ).all()
        return {day: mood for day, mood in rows}
