"""Chatter payout records."""
from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app import crud
from app.auth import User
from app.context import RequestContext, get_request_context
from app.database import get_session
from app.errors import ForbiddenError
from app.permissions import Capability, require_capability
from app.schemas import PaymentCreate, PaymentRead, PaymentUpdate

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get("", response_model=List[PaymentRead])
def list_payments(
    user_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    if not ctx.can(Capability.VIEW_ALL_PAYMENTS):
        user_id = ctx.user_id
    return crud.list_payments(db, user_id=user_id, start_date=start_date, end_date=end_date)


@router.get("/{payment_id}", response_model=PaymentRead)
def get_payment(
    payment_id: int,
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    payment = crud.get_payment(db, payment_id)
    if payment.user_id != ctx.user_id and not ctx.can(Capability.VIEW_ALL_PAYMENTS):
        raise ForbiddenError("You can only view your own payments")
    return payment


@router.post("", response_model=PaymentRead, status_code=201)
def create_payment(
    payload: PaymentCreate,
    db: Session = Depends(get_session),
    admin: User = Depends(require_capability(Capability.MANAGE_PAYMENTS)),
):
    return crud.create_payment(db, payload, actor_id=admin.id)


@router.patch("/{payment_id}", response_model=PaymentRead)
def update_payment(
    payment_id: int,
    payload: PaymentUpdate,
    db: Session = Depends(get_session),
    admin: User = Depends(require_capability(Capability.MANAGE_PAYMENTS)),
):
    return crud.update_payment(db, crud.get_payment(db, payment_id), payload, actor_id=admin.id)


@router.delete("/{payment_id}", status_code=204)
def delete_payment(
    payment_id: int,
    db: Session = Depends(get_session),
    admin: User = Depends(require_capability(Capability.MANAGE_PAYMENTS)),
) -> Response:
    crud.delete_payment(db, crud.get_payment(db, payment_id), actor_id=admin.id)
    return Response(status_code=204)
