"""
Device sync engine.

`sync_now` drains one batch of the outbox to the server and reconciles the
per-op results; `pull_habits` fetches the server's habits and merges them
through the conflict resolver. Both are caller-driven (screen focus, right
after a local mutation); nothing here schedules itself.
"""
from __future__ import annotations

import datetime as dt
import logging
import threading
from dataclasses import dataclass

import httpx

from habitsync.client.api import ApiClient, ApiError
from habitsync.client.conflict import MergeStats, merge_server_habits
from habitsync.client.outbox import Outbox
from habitsync.client.store import LocalStore
from habitsync.errors import PERMANENT_OP_CODES
from habitsync.schemas.habits import HabitListOut
from habitsync.schemas.sync import parse_sync_reply
from habitsync.settings import settings

logger = logging.getLogger(__name__)

SYNC_IN_PROGRESS = "sync already in progress"


@dataclass
class SyncResult:
    applied_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.failed_count == 0

    def status_message(self) -> str | None:
        """Aggregate text for the UI; no per-entity detail."""
        if self.error:
            return self.error
        if self.failed_count:
            return f"{self.failed_count} operation(s) failed"
        return None


class SyncEngine:
    def __init__(
        self,
        store: LocalStore,
        *,
        outbox: Outbox | None = None,
        api: ApiClient | None = None,
        http: httpx.Client | None = None,
        batch_size: int | None = None,
    ) -> None:
        self.store = store
        self.outbox = outbox or Outbox(store)
        self.api = api or ApiClient(http=http)
        self.batch_size = batch_size or settings.SYNC_BATCH_SIZE
        # One sync in flight per device, so the same batch is never sent twice concurrently.
        self._in_flight = threading.Lock()

    def sync_now(self, credential: str, now: dt.datetime | None = None) -> SyncResult:
        if not self._in_flight.acquire(blocking=False):
            return SyncResult(error=SYNC_IN_PROGRESS)
        try:
            return self._sync_batch(credential, now)
        finally:
            self._in_flight.release()

    def _sync_batch(self, credential: str, now: dt.datetime | None) -> SyncResult:
        ops = self.outbox.pending(self.batch_size, now=now)
        if not ops:
            return SyncResult()

        try:
            body = self.api.post_sync(credential, [op.to_wire() for op in ops])
            response = parse_sync_reply(body)
        except (httpx.HTTPError, ApiError, ValueError) as exc:
            # Nothing was acknowledged; every op stays queued untouched.
            message = str(exc) or type(exc).__name__
            logger.warning("Sync of %s op(s) failed before reconciliation: %s", len(ops), message)
            return SyncResult(failed_count=len(ops), error=message)

        self.outbox.ack([*response.applied, *response.skipped])
        for failed in response.failed:
            self.outbox.fail(
                failed.op_id,
                f"{failed.code}: {failed.message}",
                terminal=failed.code in PERMANENT_OP_CODES,
                now=now,
            )

        result = SyncResult(
            applied_count=len(response.applied),
            skipped_count=len(response.skipped),
            failed_count=len(response.failed),
        )
        logger.info(
            "Synced batch of %s: applied=%s skipped=%s failed=%s",
            len(ops),
            result.applied_count,
            result.skipped_count,
            result.failed_count,
        )
        return result

    def pull_habits(self, credential: str) -> MergeStats:
        body = self.api.get_habits(credential, include_archived=True)
        habits = HabitListOut.model_validate(body).habits
        return merge_server_habits(self.store, habits)

    def close(self) -> None:
        self.api.close()
