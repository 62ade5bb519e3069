"""Shift planning routes."""
from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app import crud
from app.auth import User
from app.database import get_session
from app.dependencies import get_current_user
from app.permissions import Capability, require_capability
from app.schemas import (
    DeletedCount,
    ShiftAutoGenerate,
    ShiftCreate,
    ShiftGenerationResult,
    ShiftRange,
    ShiftRead,
    ShiftUpdate,
)

router = APIRouter(prefix="/shifts", tags=["Shifts"])


@router.get("", response_model=List[ShiftRead])
def list_shifts(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    user_id: Optional[int] = Query(None),
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    return crud.list_shifts(db, start_date=start_date, end_date=end_date, user_id=user_id)


@router.get("/{shift_id}", response_model=ShiftRead)
def get_shift(
    shift_id: int,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    return crud.get_shift(db, shift_id)


@router.post("", response_model=ShiftRead, status_code=201)
def create_shift(
    payload: ShiftCreate,
    db: Session = Depends(get_session),
    manager: User = Depends(require_capability(Capability.MANAGE_SHIFTS)),
):
    return crud.create_shift(db, payload, actor_id=manager.id)


@router.post("/auto-generate", response_model=ShiftGenerationResult)
def auto_generate_shifts(
    payload: ShiftAutoGenerate,
    db: Session = Depends(get_session),
    manager: User = Depends(require_capability(Capability.MANAGE_SHIFTS)),
):
    """Fill one or more weeks from a weekday/slot template."""
    return crud.generate_weekly_shifts(db, payload, actor_id=manager.id)


@router.post("/clear", response_model=DeletedCount)
def clear_shifts(
    payload: ShiftRange,
    db: Session = Depends(get_session),
    manager: User = Depends(require_capability(Capability.MANAGE_SHIFTS)),
):
    return DeletedCount(deleted=crud.delete_shifts_in_range(db, payload.start_date, payload.end_date))


@router.patch("/{shift_id}", response_model=ShiftRead)
def update_shift(
    shift_id: int,
    payload: ShiftUpdate,
    db: Session = Depends(get_session),
    manager: User = Depends(require_capability(Capability.MANAGE_SHIFTS)),
):
    return crud.update_shift(db, crud.get_shift(db, shift_id), payload)


@router.delete("/{shift_id}", status_code=204)
def delete_shift(
    shift_id: int,
    db: Session = Depends(get_session),
    manager: User = Depends(require_capability(Capability.MANAGE_SHIFTS)),
) -> Response:
    crud.delete_shift(db, crud.get_shift(db, shift_id))
    return Response(status_code=204)
