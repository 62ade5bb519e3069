"""Creator routes."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app import crud
from app.auth import User
from app.database import get_session
from app.dependencies import get_current_user
from app.permissions import Capability, require_capability
from app.schemas import CreatorCreate, CreatorRead, CreatorUpdate

router = APIRouter(prefix="/creators", tags=["Creators"])


@router.get("", response_model=List[CreatorRead])
def list_creators(
    active: Optional[bool] = Query(None),
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    return crud.list_creators(db, active=active)


@router.get("/{creator_id}", response_model=CreatorRead)
def get_creator(
    creator_id: int,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    return crud.get_creator(db, creator_id)


@router.post("", response_model=CreatorRead, status_code=201)
def create_creator(
    payload: CreatorCreate,
    db: Session = Depends(get_session),
    admin: User = Depends(require_capability(Capability.MANAGE_CREATORS)),
):
    return crud.create_creator(db, payload, actor_id=admin.id)


@router.patch("/{creator_id}", response_model=CreatorRead)
def update_creator(
    creator_id: int,
    payload: CreatorUpdate,
    db: Session = Depends(get_session),
    admin: User = Depends(require_capability(Capability.MANAGE_CREATORS)),
):
    return crud.update_creator(db, crud.get_creator(db, creator_id), payload, actor_id=admin.id)


@router.delete("/{creator_id}", status_code=204)
def delete_creator(
    creator_id: int,
    db: Session = Depends(get_session),
    admin: User = Depends(require_capability(Capability.MANAGE_CREATORS)),
) -> Response:
    crud.delete_creator(db, crud.get_creator(db, creator_id), actor_id=admin.id)
    return Response(status_code=204)
