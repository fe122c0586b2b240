from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from habitsync.api.deps import get_current_user, require_api_key
from habitsync.db import get_db
from habitsync.errors import HabitNotFoundError, RequestValidationFailed
from habitsync.models.habit import Habit
from habitsync.schemas.habits import HabitCreate, HabitEnvelope, HabitListOut, HabitOut, HabitUpdate
from habitsync import crud

router = APIRouter(prefix="/habits", tags=["habits"], dependencies=[Depends(require_api_key)])


@router.get("", response_model=HabitListOut)
def list_habits(
    include_archived: bool = Query(default=False, alias="includeArchived"),
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    habits = crud.list_habits(db, user.id, include_archived=include_archived)
    return HabitListOut(habits=[HabitOut.model_validate(h) for h in habits])


@router.post("", response_model=HabitEnvelope, status_code=201)
def create_habit(payload: HabitCreate, db: Session = Depends(get_db), user=Depends(get_current_user)):
    habit_id = payload.id or str(uuid.uuid4())
    if db.get(Habit, habit_id) is not None:
        raise RequestValidationFailed("Habit id already exists", details={"habit_id": habit_id})
    habit = crud.create_habit(db, user.id, habit_id, name=payload.name, color=payload.color)
    return HabitEnvelope(habit=HabitOut.model_validate(habit))


@router.patch("/{habit_id}", response_model=HabitEnvelope)
def patch_habit(
    habit_id: str,
    payload: HabitUpdate,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    habit = crud.update_habit(db, user.id, habit_id, payload.model_dump(exclude_unset=True))
    if not habit:
        raise HabitNotFoundError(habit_id)
    return HabitEnvelope(habit=HabitOut.model_validate(habit))


@router.delete("/{habit_id}", response_model=HabitEnvelope)
def archive_habit(habit_id: str, db: Session = Depends(get_db), user=Depends(get_current_user)):
    habit = crud.archive_habit(db, user.id, habit_id)
    if not habit:
        raise HabitNotFoundError(habit_id)
    return HabitEnvelope(habit=HabitOut.model_validate(habit))
