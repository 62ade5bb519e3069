"""Analytics routes: month-over-month, leaderboard and per-creator revenue."""
from __future__ import annotations

from datetime import date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.context import RequestContext, get_request_context
from app.database import get_session
from app.permissions import Capability
from app.schemas import CreatorDailyRevenue, LeaderboardEntry, MonthComparison
from app.services import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["Analytics"])


def _default_date_range() -> tuple[date, date]:
    today = date.today()
    return today - timedelta(days=30), today


def _scope(ctx: RequestContext) -> int | None:
    return None if ctx.can(Capability.VIEW_ALL_ANALYTICS) else ctx.user_id


@router.get("/month-over-month", response_model=MonthComparison)
def month_over_month(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    today = date.today()
    return AnalyticsService(db).month_over_month(year or today.year, month or today.month, user_id=_scope(ctx))


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
def leaderboard(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    start_default, end_default = _default_date_range()
    return AnalyticsService(db).leaderboard(
        start_date or start_default,
        end_date or end_default,
        limit=limit,
        user_id=_scope(ctx),
    )


@router.get("/creator-daily", response_model=List[CreatorDailyRevenue])
def creator_daily_revenue(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    start_default, end_default = _default_date_range()
    return AnalyticsService(db).daily_revenue_by_creator(
        start_date or start_default, end_date or end_default, user_id=_scope(ctx)
    )


@router.get("/years", response_model=List[int])
def available_years(
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    return AnalyticsService(db).available_years(user_id=_scope(ctx))
