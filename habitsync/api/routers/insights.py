from __future__ import annotations

import datetime as dt
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from habitsync.api.deps import get_current_user, require_api_key
from habitsync.db import get_db
from habitsync.errors import RequestValidationFailed
from habitsync.schemas.insights import InsightsSummaryOut
from habitsync.services.insights import build_summary

router = APIRouter(prefix="/insights", tags=["insights"], dependencies=[Depends(require_api_key)])


@router.get("/summary", response_model=InsightsSummaryOut)
def summary(
    start: dt.date = Query(..., alias="from", description="YYYY-MM-DD"),
    end: dt.date = Query(..., alias="to", description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    if start > end:
        raise RequestValidationFailed("from must be before or equal to to")
    return build_summary(db, user.id, start, end)
