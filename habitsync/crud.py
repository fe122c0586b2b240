from __future__ import annotations

import datetime as dt

from sqlalchemy import select, and_
from sqlalchemy.orm import Session

from habitsync.models.base import utcnow
from habitsync.models.habit import Habit, HabitCompletion, MoodEntry
from habitsync.models.sync import SyncOp
from habitsync.models.user import User
from habitsync.security import hash_credential, issue_credential


# ---------------------------------------------------------------------------
# Users / credentials
# ---------------------------------------------------------------------------

def get_or_create_user(db: Session, external_id: str, display_name: str | None = None) -> User:
    user = db.execute(select(User).where(User.external_id == str(external_id))).scalar_one_or_none()
    if user:
        return user
    user = User(external_id=str(external_id), display_name=display_name)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def rotate_user_api_key(db: Session, user_id: int) -> str:
    user = db.get(User, user_id)
    if not user:
        raise ValueError(f"User {user_id} not found")
    issued = issue_credential()
    user.api_key_hash = issued.digest
    user.api_key_prefix = issued.prefix
    user.api_key_last_rotated_at = utcnow()
    db.add(user)
    db.commit()
    return issued.raw


def get_user_by_api_key(db: Session, raw_key: str) -> User | None:
    return db.execute(select(User).where(User.api_key_hash == hash_credential(raw_key))).scalar_one_or_none()


# ---------------------------------------------------------------------------
# Habits
# ---------------------------------------------------------------------------

def list_habits(db: Session, user_id: int, include_archived: bool = False) -> list[Habit]:
    q = select(Habit).where(Habit.user_id == user_id)
    if not include_archived:
        q = q.where(Habit.is_archived.is_(False))
    return list(db.execute(q.order_by(Habit.created_at.asc(), Habit.id.asc())).scalars())


def get_habit(db: Session, user_id: int, habit_id: str) -> Habit | None:
    return db.execute(
        select(Habit).where(and_(Habit.id == habit_id, Habit.user_id == user_id))
    ).scalar_one_or_none()


def create_habit(
    db: Session,
    user_id: int,
    habit_id: str,
    *,
    name: str,
    color: str | None = None,
) -> Habit:
    habit = Habit(id=habit_id, user_id=user_id, name=name, color=color, is_archived=False)
    db.add(habit)
    db.commit()
    db.refresh(habit)
    return habit


def update_habit(db: Session, user_id: int, habit_id: str, changes: dict) -> Habit | None:
    habit = get_habit(db, user_id, habit_id)
    if not habit:
        return None
    if not changes:
        return habit
    for k, v in changes.items():
        setattr(habit, k, v)
    habit.updated_at = utcnow()
    db.add(habit)
    db.commit()
    db.refresh(habit)
    return habit


def archive_habit(db: Session, user_id: int, habit_id: str) -> Habit | None:
    return update_habit(db, user_id, habit_id, {"is_archived": True})


# ---------------------------------------------------------------------------
# Completions (row existence == done)
# ---------------------------------------------------------------------------

def set_completion(db: Session, user_id: int, habit_id: str, day: dt.date, done: bool) -> None:
    existing = db.execute(
        select(HabitCompletion).where(
            and_(
                HabitCompletion.user_id == user_id,
                HabitCompletion.habit_id == habit_id,
                HabitCompletion.day == day,
            )
        )
    ).scalar_one_or_none()
    if done and existing is None:
        db.add(HabitCompletion(user_id=user_id, habit_id=habit_id, day=day))
    elif not done and existing is not None:
        db.delete(existing)
    db.commit()


def list_completions_for_day(db: Session, user_id: int, day: dt.date) -> list[HabitCompletion]:
    return list(
        db.execute(
            select(HabitCompletion)
            .where(and_(HabitCompletion.user_id == user_id, HabitCompletion.day == day))
            .order_by(HabitCompletion.id.asc())
        ).scalars()
    )


def completion_days(
    db: Session, user_id: int, habit_id: str, start: dt.date, end: dt.date
) -> set[dt.date]:
    rows = db.execute(
        select(HabitCompletion.day).where(
            and_(
                HabitCompletion.user_id == user_id,
                HabitCompletion.habit_id == habit_id,
                HabitCompletion.day >= start,
                HabitCompletion.day <= end,
            )
        )
    ).scalars()
    return set(rows)


# ---------------------------------------------------------------------------
# Mood
# ---------------------------------------------------------------------------

def get_mood(db: Session, user_id: int, day: dt.date) -> MoodEntry | None:
    return db.execute(
        select(MoodEntry).where(and_(MoodEntry.user_id == user_id, MoodEntry.day == day))
    ).scalar_one_or_none()


KEEP_NOTES = object()


def upsert_mood(db: Session, user_id: int, day: dt.date, *, mood: int, notes=KEEP_NOTES) -> MoodEntry:
    """Insert or overwrite the day's mood. Notes change only when passed."""
    entry = get_mood(db, user_id, day)
    if entry is None:
        entry = MoodEntry(user_id=user_id, day=day, mood=mood, notes=None if notes is KEEP_NOTES else notes)
    else:
        entry.mood = mood
        if notes is not KEEP_NOTES:
            entry.notes = notes
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def update_mood_notes(db: Session, user_id: int, day: dt.date, notes: str | None) -> MoodEntry | None:
    entry = get_mood(db, user_id, day)
    if entry is None:
        return None
    entry.notes = notes
    db.add(entry)
    db.commit()
    return entry


def list_mood_values(db: Session, user_id: int, start: dt.date, end: dt.date) -> list[int]:
    return list(
        db.execute(
            select(MoodEntry.mood).where(
                and_(MoodEntry.user_id == user_id, MoodEntry.day >= start, MoodEntry.day <= end)
            )
        ).scalars()
    )


# ---------------------------------------------------------------------------
# Idempotency ledger
# ---------------------------------------------------------------------------

def get_sync_op(db: Session, user_id: int, op_id: str) -> SyncOp | None:
    return db.execute(
        select(SyncOp).where(and_(SyncOp.user_id == user_id, SyncOp.op_id == op_id))
    ).scalar_one_or_none()


def record_sync_op(
    db: Session,
    user_id: int,
    op_id: str,
    op_type: str,
    client_created_at: dt.datetime | None = None,
) -> SyncOp:
    if client_created_at is not None and client_created_at.tzinfo is not None:
        client_created_at = client_created_at.astimezone(dt.timezone.utc).replace(tzinfo=None)
    entry = SyncOp(user_id=user_id, op_id=op_id, op_type=op_type, client_created_at=client_created_at)
    db.add(entry)
    db.commit()
    return entry
