import datetime as dt
from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow


class SyncOp(Base):
    """Idempotency ledger: one row per (user, op_id) whose effect has committed.

    Rows are never deleted. Presence turns a resubmitted op into a no-op;
    absence lets a retry re-execute the effect.
    """

    __tablename__ = "sync_ops"
    __table_args__ = (
        UniqueConstraint("user_id", "op_id", name="uq_sync_ops_user_op"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    op_id: Mapped[str] = mapped_column(String(64), index=True)
    op_type: Mapped[str] = mapped_column(String(32))

    client_created_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)

    user = relationship("User", back_populates="sync_ops")
