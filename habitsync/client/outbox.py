"""
Device outbox: durable FIFO of mutations awaiting confirmed delivery.

Each record carries a client-generated UUID that the server uses as its
idempotency key, so a record can be resent any number of times. Records
leave the queue when the server reports them applied or skipped (`ack`).
Failures bump `attempts` and schedule the next try with bounded exponential
backoff; past `OUTBOX_MAX_ATTEMPTS`, or on a failure that can never succeed,
the record is dead-lettered and stops occupying sync rounds.
"""
from __future__ import annotations

import datetime as dt
import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Iterable

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.orm import Session

from habitsync.client.models import OutboxOp
from habitsync.client.store import LocalStore
from habitsync.models.base import utcnow
from habitsync.schemas.sync import OpPayload, OpType, parse_payload
from habitsync.settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedOp:
    """Detached snapshot of an outbox row."""
    op_id: str
    type: str
    payload: dict[str, Any]
    created_at: dt.datetime
    attempts: int
    last_error: str | None
    next_attempt_at: dt.datetime | None
    dead_at: dt.datetime | None

    @classmethod
    def from_row(cls, row: OutboxOp) -> "QueuedOp":
        return cls(
            op_id=row.op_id,
            type=row.type,
            payload=json.loads(row.payload_json),
            created_at=row.created_at,
            attempts=row.attempts,
            last_error=row.last_error,
            next_attempt_at=row.next_attempt_at,
            dead_at=row.dead_at,
        )

    def to_wire(self) -> dict[str, Any]:
        return {
            "id": self.op_id,
            "type": self.type,
            "payload": self.payload,
            "createdAt": self.created_at.isoformat() + "Z",
        }


def _type_value(op_type: str | OpType) -> str:
    return op_type.value if isinstance(op_type, OpType) else op_type


def enqueue_op(db: Session, op_type: str | OpType, payload: dict | OpPayload) -> str:
    """Add an op inside the caller's transaction; the caller commits.

    Raises UnknownOpTypeError / pydantic.ValidationError before anything is written.
    """
    type_value = _type_value(op_type)
    validated = parse_payload(type_value, payload)
    op_id = str(uuid.uuid4())
    db.add(
        OutboxOp(
            op_id=op_id,
            type=type_value,
            payload_json=json.dumps(validated.to_wire()),
            attempts=0,
        )
    )
    db.flush()
    return op_id


class Outbox:
    def __init__(
        self,
        store: LocalStore,
        *,
        max_attempts: int | None = None,
        backoff_base_sec: float | None = None,
        backoff_max_sec: float | None = None,
    ) -> None:
        self.store = store
        self.max_attempts = settings.OUTBOX_MAX_ATTEMPTS if max_attempts is None else max_attempts
        self.backoff_base_sec = (
            settings.OUTBOX_BACKOFF_BASE_SEC if backoff_base_sec is None else backoff_base_sec
        )
        self.backoff_max_sec = settings.OUTBOX_BACKOFF_MAX_SEC if backoff_max_sec is None else backoff_max_sec

    # === Queue operations ===

    def enqueue(self, op_type: str | OpType, payload: dict | OpPayload) -> str:
        with self.store.session() as db:
            op_id = enqueue_op(db, op_type, payload)
        logger.debug("Enqueued %s op %s", _type_value(op_type), op_id)
        return op_id

    def pending(self, limit: int = 100, now: dt.datetime | None = None) -> list[QueuedOp]:
        """Oldest-first ops that are not dead-lettered and are due for a try."""
        now = now or utcnow()
        with self.store.session() as db:
            rows = db.execute(
                select(OutboxOp)
                .where(
                    and_(
                        OutboxOp.dead_at.is_(None),
                        or_(OutboxOp.next_attempt_at.is_(None), OutboxOp.next_attempt_at <= now),
                    )
                )
                .order_by(OutboxOp.created_at.asc(), OutboxOp.id.asc())
                .limit(limit)
            ).scalars()
            return [QueuedOp.from_row(r) for r in rows]

    def ack(self, op_ids: Iterable[str]) -> int:
        ids = list(op_ids)
        if not ids:
            return 0
        with self.store.session() as db:
            result = db.execute(delete(OutboxOp).where(OutboxOp.op_id.in_(ids)))
            return result.rowcount or 0

    def fail(
        self,
        op_id: str,
        error: str,
        *,
        terminal: bool = False,
        now: dt.datetime | None = None,
    ) -> QueuedOp | None:
        now = now or utcnow()
        with self.store.session() as db:
            row = self._get_row(db, op_id)
            if row is None:
                return None
            row.attempts = (row.attempts or 0) + 1
            row.last_error = error
            if terminal or (self.max_attempts and row.attempts >= self.max_attempts):
                row.dead_at = now
                row.next_attempt_at = None
                logger.warning("Outbox op %s dead-lettered after %s attempt(s): %s", op_id, row.attempts, error)
            else:
                delay = self.backoff_delay(row.attempts)
                row.next_attempt_at = now + dt.timedelta(seconds=delay) if delay > 0 else None
            db.add(row)
            db.flush()
            return QueuedOp.from_row(row)

    def backoff_delay(self, attempts: int) -> float:
        if attempts <= 0 or self.backoff_base_sec <= 0:
            return 0.0
        return min(self.backoff_base_sec * 2 ** (attempts - 1), self.backoff_max_sec)

    # === Dead letters / repair ===

    def dead_letters(self) -> list[QueuedOp]:
        with self.store.session() as db:
            rows = db.execute(
                select(OutboxOp)
                .where(OutboxOp.dead_at.is_not(None))
                .order_by(OutboxOp.created_at.asc(), OutboxOp.id.asc())
            ).scalars()
            return [QueuedOp.from_row(r) for r in rows]

    def requeue(self, op_id: str) -> bool:
        """Put a dead-lettered or backed-off op back in line under the same id."""
        with self.store.session() as db:
            row = self._get_row(db, op_id)
            if row is None:
                return False
            row.attempts = 0
            row.dead_at = None
            row.next_attempt_at = None
            db.add(row)
            return True

    def replace(self, op_id: str, payload: dict | OpPayload) -> str | None:
        """Swap a rejected op for a corrected one under a fresh id.

        The server never ledgers an INVALID_PAYLOAD op, but the same id with a
        different payload would still be a different intent, so a new id is
        minted. The row itself is reused, so the queue position is unchanged.
        """
        with self.store.session() as db:
            row = self._get_row(db, op_id)
            if row is None:
                return None
            validated = parse_payload(row.type, payload)
            new_id = str(uuid.uuid4())
            row.op_id = new_id
            row.payload_json = json.dumps(validated.to_wire())
            row.attempts = 0
            row.last_error = None
            row.dead_at = None
            row.next_attempt_at = None
            db.add(row)
        logger.info("Outbox op %s replaced by %s", op_id, new_id)
        return new_id

    # === Reads ===

    def get(self, op_id: str) -> QueuedOp | None:
        with self.store.session() as db:
            row = self._get_row(db, op_id)
            return QueuedOp.from_row(row) if row else None

    def count(self, include_dead: bool = False) -> int:
        with self.store.session() as db:
            q = select(func.count()).select_from(OutboxOp)
            if not include_dead:
                q = q.where(OutboxOp.dead_at.is_(None))
            return int(db.execute(q).scalar_one())

    @staticmethod
    def _get_row(db: Session, op_id: str) -> OutboxOp | None:
        return db.execute(select(OutboxOp).where(OutboxOp.op_id == op_id)).scalar_one_or_none()
