import datetime as dt
from sqlalchemy import DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from habitsync.models.base import utcnow

from .base import LocalBase


class OutboxOp(LocalBase):
    __tablename__ = "outbox"
    __table_args__ = (
        UniqueConstraint("op_id", name="uq_outbox_op_id"),
        Index("ix_outbox_created_at_id", "created_at", "id"),
    )

    # Insertion sequence; breaks created_at ties so FIFO is stable.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Client-generated UUID, the server-side idempotency key.
    op_id: Mapped[str] = mapped_column(String(64))
    type: Mapped[str] = mapped_column(String(32))
    payload_json: Mapped[str] = mapped_column(Text)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
    attempts: Mapped[int] = mapped_column(Integer, default=0)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Retry policy state
    next_attempt_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    dead_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True, index=True)
