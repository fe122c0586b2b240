from __future__ import annotations

import datetime as dt
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from habitsync.api.deps import get_current_user, require_api_key
from habitsync.db import get_db
from habitsync.schemas.checkins import CheckinIn, CheckinOut, CompletionOut
from habitsync import crud

router = APIRouter(prefix="/checkins", tags=["checkins"], dependencies=[Depends(require_api_key)])


def _checkin_out(db: Session, user_id: int, day: dt.date) -> CheckinOut:
    mood = crud.get_mood(db, user_id, day)
    completions = crud.list_completions_for_day(db, user_id, day)
    return CheckinOut(
        date=day,
        mood=mood.mood if mood else None,
        notes=mood.notes if mood else None,
        completions=[CompletionOut(habit_id=c.habit_id) for c in completions],
    )


@router.post("", response_model=CheckinOut)
def upsert_checkin(payload: CheckinIn, db: Session = Depends(get_db), user=Depends(get_current_user)):
    day = payload.date
    if payload.mood is not None:
        changes = {"notes": payload.notes} if "notes" in payload.model_fields_set else {}
        crud.upsert_mood(db, user.id, day, mood=payload.mood, **changes)
    elif payload.notes is not None:
        crud.update_mood_notes(db, user.id, day, payload.notes)

    for item in payload.completions or []:
        if crud.get_habit(db, user.id, item.habit_id) is None:
            continue
        crud.set_completion(db, user.id, item.habit_id, day, item.done)

    return _checkin_out(db, user.id, day)


@router.get("/{day}", response_model=CheckinOut)
def get_checkin(day: dt.date, db: Session = Depends(get_db), user=Depends(get_current_user)):
    return _checkin_out(db, user.id, day)
