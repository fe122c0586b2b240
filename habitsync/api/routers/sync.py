from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from habitsync.api.deps import get_current_user, require_api_key
from habitsync.db import get_db
from habitsync.errors import BatchTooLargeError
from habitsync.schemas.sync import SyncRequest, SyncResponse
from habitsync.services.sync_apply import apply_batch
from habitsync.settings import settings

router = APIRouter(prefix="/sync", tags=["sync"], dependencies=[Depends(require_api_key)])


@router.post("", response_model=SyncResponse, summary="Apply a batch of outbox operations (idempotent)")
def sync(payload: SyncRequest, db: Session = Depends(get_db), user=Depends(get_current_user)):
    """
    Ops are applied in array order, each committing on its own.
    Resubmitting an op id that already applied returns it under `skipped`.
    """
    if len(payload.ops) > settings.SYNC_MAX_OPS:
        raise BatchTooLargeError(max_ops=settings.SYNC_MAX_OPS, received=len(payload.ops))
    return apply_batch(db, user.id, payload.ops)
