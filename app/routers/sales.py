"""Sale logging routes."""
from __future__ import annotations

import math
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app import crud
from app.context import RequestContext, get_request_context
from app.core.periods import month_period
from app.core.sale_rules import can_edit, edit_deadline, edit_state
from app.database import get_session
from app.errors import ForbiddenError, ValidationError
from app.models import Sale
from app.permissions import Capability
from app.schemas import SaleCreate, SaleFilters, SalePage, SaleRead, SaleStats, SaleUpdate

router = APIRouter(prefix="/sales", tags=["Sales"])


def serialize_sale(sale: Sale, ctx: RequestContext, now: datetime | None = None) -> SaleRead:
    """Attach the owner edit state, which is evaluated on every read."""

    now = now or datetime.now()
    return SaleRead(
        id=sale.id,
        user_id=sale.user_id,
        user_name=sale.user.name if sale.user else None,
        creator_id=sale.creator_id,
        creator_name=sale.creator.name if sale.creator else None,
        amount=sale.amount,
        base_amount=sale.base_amount,
        sale_type=sale.sale_type,
        status=sale.status,
        note=sale.note,
        sale_date=sale.sale_date,
        created_at=sale.created_at,
        edit_state=edit_state(sale.sale_date, now),
        editable_until=edit_deadline(sale.sale_date),
        can_edit=can_edit(ctx.user.role, sale.user_id, ctx.user_id, sale.sale_date, now),
    )


def _visible_sale(db: Session, sale_id: int, ctx: RequestContext) -> Sale:
    sale = crud.get_sale(db, sale_id)
    if sale.user_id != ctx.user_id and not ctx.can(Capability.VIEW_ALL_SALES):
        raise ForbiddenError("You can only view your own sales")
    return sale


@router.post("", response_model=SaleRead, status_code=201)
def create_sale(
    payload: SaleCreate,
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    ctx.require(Capability.LOG_OWN_SALES)
    if payload.user_id is not None and payload.user_id != ctx.user_id:
        ctx.require(Capability.LOG_SALES_FOR_OTHERS)
    return serialize_sale(crud.create_sale(db, payload, ctx.user), ctx)


@router.get("", response_model=SalePage)
def list_sales(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    creator_id: Optional[int] = Query(None),
    sale_type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    user_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=crud.MAX_PAGE_SIZE),
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    """Paginated sale list; chatters only ever see their own rows."""
    if not ctx.can(Capability.VIEW_ALL_SALES):
        user_id = ctx.user_id
    try:
        filters = SaleFilters(
            start_date=start_date,
            end_date=end_date,
            creator_id=creator_id,
            sale_type=sale_type,
            status=status,
            user_id=user_id,
        )
    except PydanticValidationError as exc:
        raise ValidationError(
            "Invalid sale filters", errors=exc.errors(include_url=False, include_context=False)
        ) from exc
    items, total = crud.list_sales(db, filters, page=page, limit=limit)
    now = datetime.now()
    return SalePage(
        items=[serialize_sale(sale, ctx, now) for sale in items],
        total=total,
        page=page,
        limit=limit,
        pages=math.ceil(total / limit) if total else 0,
    )


@router.get("/stats", response_model=SaleStats)
def sales_stats(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    """Counts and amounts per sale type and status for a month."""
    today = date.today()
    year = year or today.year
    month = month or today.month
    user_id = None if ctx.can(Capability.VIEW_ALL_SALES) else ctx.user_id
    stats = crud.sale_stats(db, month_period(year, month), user_id=user_id)
    return SaleStats(year=year, month=month, **stats)


@router.get("/{sale_id}", response_model=SaleRead)
def get_sale(
    sale_id: int,
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    return serialize_sale(_visible_sale(db, sale_id, ctx), ctx)


@router.patch("/{sale_id}", response_model=SaleRead)
def update_sale(
    sale_id: int,
    payload: SaleUpdate,
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    sale = _visible_sale(db, sale_id, ctx)
    if payload.user_id is not None and payload.user_id != sale.user_id:
        ctx.require(Capability.REASSIGN_SALES)
    return serialize_sale(crud.update_sale(db, sale, payload, ctx.user), ctx)


@router.delete("/{sale_id}", status_code=204)
def delete_sale(
    sale_id: int,
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
) -> Response:
    ctx.require(Capability.DELETE_SALES)
    crud.delete_sale(db, crud.get_sale(db, sale_id), actor_id=ctx.user_id)
    return Response(status_code=204)
