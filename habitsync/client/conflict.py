"""
Pull-path merge of server habits into the device store.

Whole-record last-writer-wins on `updated_at`: the server copy replaces the
local one only when strictly newer. A missing local row counts as -inf, so
new server habits are always inserted. Ties keep local, because the device
may hold edits still waiting in the outbox.
"""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Iterable

from habitsync.client.models import LocalHabit
from habitsync.client.store import LocalStore
from habitsync.models.base import utcnow
from habitsync.schemas.habits import HabitOut

logger = logging.getLogger(__name__)

_EPOCH = dt.datetime(1970, 1, 1)


@dataclass
class MergeStats:
    inserted: int = 0
    updated: int = 0
    kept_local: int = 0


def _naive_utc(value: dt.datetime | None) -> dt.datetime | None:
    if value is None:
        return None
    if value.tzinfo is not None:
        return value.astimezone(dt.timezone.utc).replace(tzinfo=None)
    return value


def server_wins(server_updated_at: dt.datetime | None, local_updated_at: dt.datetime | None, local_exists: bool) -> bool:
    if not local_exists:
        return True
    server = _naive_utc(server_updated_at) or _EPOCH
    local = _naive_utc(local_updated_at) or _EPOCH
    return server > local


def merge_server_habits(store: LocalStore, habits: Iterable[HabitOut | dict]) -> MergeStats:
    stats = MergeStats()
    with store.session() as db:
        for item in habits:
            remote = item if isinstance(item, HabitOut) else HabitOut.model_validate(item)
            local = db.get(LocalHabit, remote.id)
            server_ts = _naive_utc(remote.updated_at)

            if not server_wins(server_ts, local.updated_at if local else None, local is not None):
                stats.kept_local += 1
                continue

            if local is None:
                db.add(
                    LocalHabit(
                        id=remote.id,
                        name=remote.name,
                        color=remote.color,
                        is_archived=remote.is_archived,
                        created_at=_naive_utc(remote.created_at) or utcnow(),
                        updated_at=server_ts or _EPOCH,
                    )
                )
                stats.inserted += 1
            else:
                local.name = remote.name
                local.color = remote.color
                local.is_archived = remote.is_archived
                local.updated_at = server_ts
                db.add(local)
                stats.updated += 1

    logger.info(
        "Merged server habits: inserted=%s updated=%s kept_local=%s",
        stats.inserted,
        stats.updated,
        stats.kept_local,
    )
    return stats
