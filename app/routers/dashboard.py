"""Chatter and admin dashboards."""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app import crud
from app.context import RequestContext, get_request_context
from app.core.periods import month_period
from app.database import get_session
from app.errors import ForbiddenError
from app.permissions import Capability
from app.schemas import AdminRecap, ChatterDashboard, ChatterDetail, SaleStats
from app.services import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


def _year_month(year: Optional[int], month: Optional[int]) -> tuple[int, int]:
    today = date.today()
    return year or today.year, month or today.month


@router.get("/chatter", response_model=ChatterDashboard)
def chatter_dashboard(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    """Daily sales and earnings for the current user's month."""
    ctx.require(Capability.VIEW_OWN_DASHBOARD)
    year, month = _year_month(year, month)
    return DashboardService(db).chatter_dashboard(ctx.user, year, month)


@router.get("/chatter/{user_id}", response_model=ChatterDetail)
def chatter_detail(
    user_id: int,
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    if user_id != ctx.user_id and not ctx.can(Capability.VIEW_ANY_DASHBOARD):
        raise ForbiddenError("You can only view your own earnings")
    year, month = _year_month(year, month)
    return DashboardService(db).chatter_detail(crud.get_user(db, user_id), year, month)


@router.get("/admin", response_model=AdminRecap)
def admin_recap(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    cumulative: bool = Query(False),
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    """Chatter retribution and creator financials for a month, or the whole year when cumulative."""
    ctx.require(Capability.VIEW_ADMIN_RECAP)
    year, month = _year_month(year, month)
    return DashboardService(db).admin_recap(year, month, cumulative=cumulative)


@router.get("/sales-stats", response_model=SaleStats)
def sales_stats(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    year, month = _year_month(year, month)
    user_id = None if ctx.can(Capability.VIEW_ALL_SALES) else ctx.user_id
    stats = crud.sale_stats(db, month_period(year, month), user_id=user_id)
    return SaleStats(year=year, month=month, **stats)
