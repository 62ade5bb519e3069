"""User administration routes."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app import crud
from app.auth import User
from app.database import get_session
from app.permissions import Capability, require_capability
from app.schemas import UserCreate, UserRead, UserUpdate

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserRead])
def list_users(
    role: Optional[str] = Query(None),
    active: Optional[bool] = Query(None),
    db: Session = Depends(get_session),
    user: User = Depends(require_capability(Capability.VIEW_USERS)),
):
    return crud.list_users(db, role=role.upper() if role else None, active=active)


@router.post("", response_model=UserRead, status_code=201)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_session),
    admin: User = Depends(require_capability(Capability.MANAGE_USERS)),
):
    return crud.create_user(db, payload, actor_id=admin.id)


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int,
    db: Session = Depends(get_session),
    user: User = Depends(require_capability(Capability.VIEW_USERS)),
):
    return crud.get_user(db, user_id)


@router.patch("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_session),
    admin: User = Depends(require_capability(Capability.MANAGE_USERS)),
):
    return crud.update_user(db, crud.get_user(db, user_id), payload, actor_id=admin.id)


@router.delete("/{user_id}", response_model=UserRead)
def deactivate_user(
    user_id: int,
    db: Session = Depends(get_session),
    admin: User = Depends(require_capability(Capability.MANAGE_USERS)),
):
    """Users are deactivated rather than removed so their sales keep an owner."""
    return crud.deactivate_user(db, crud.get_user(db, user_id), actor_id=admin.id)
