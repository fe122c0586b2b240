import datetime as dt
from sqlalchemy import Boolean, Date, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from habitsync.models.base import utcnow

from .base import LocalBase


class LocalHabit(LocalBase):
    __tablename__ = "habits"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(120))
    color: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
    # LWW clock compared against the server copy on pull.
    updated_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True, default=utcnow)


class LocalCompletion(LocalBase):
    """Existence of a row means the habit is done for `day`."""

    __tablename__ = "habit_completions"
    __table_args__ = (
        UniqueConstraint("habit_id", "day", name="uq_local_completions_habit_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    habit_id: Mapped[str] = mapped_column(String(64), index=True)
    day: Mapped[dt.date] = mapped_column(Date, index=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)


class LocalMoodEntry(LocalBase):
    __tablename__ = "mood_entries"
    __table_args__ = (
        UniqueConstraint("day", name="uq_local_mood_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    day: Mapped[dt.date] = mapped_column(Date, index=True)
    mood: Mapped[int] = mapped_column(Integer)
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
