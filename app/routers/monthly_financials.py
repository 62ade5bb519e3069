"""Monthly revenue and cost entry per creator."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from app import crud
from app.auth import User
from app.core.compensation import cost_snapshot
from app.database import get_session
from app.models import MonthlyFinancial
from app.permissions import Capability, require_capability
from app.schemas import MonthlyFinancialRead, MonthlyFinancialUpsert

router = APIRouter(prefix="/monthly-financials", tags=["Monthly financials"])


def _serialize(financial: MonthlyFinancial | None, creator_id: int, year: int, month: int, creator_name: str | None = None):
    snapshot = cost_snapshot(financial)
    return MonthlyFinancialRead(
        id=financial.id if financial is not None else None,
        creator_id=creator_id,
        creator_name=creator_name,
        year=year,
        month=month,
        gross_revenue=snapshot.gross_revenue,
        marketing_costs=snapshot.marketing_costs,
        tool_costs=snapshot.tool_costs,
        other_costs=snapshot.other_costs,
        custom_costs=[{"name": line.name, "amount": line.amount} for line in snapshot.custom_costs],
        custom_costs_total=snapshot.custom_costs_total,
        total_costs=snapshot.total_costs,
        notes=financial.notes if financial is not None else None,
    )


@router.get("", response_model=List[MonthlyFinancialRead])
def list_monthly_financials(
    creator_id: Optional[int] = Query(None),
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_session),
    admin: User = Depends(require_capability(Capability.VIEW_FINANCIALS)),
):
    return [
        _serialize(row, row.creator_id, row.year, row.month, row.creator.name if row.creator else None)
        for row in crud.list_monthly_financials(db, creator_id=creator_id, year=year, month=month)
    ]


@router.get("/{creator_id}/{year}/{month}", response_model=MonthlyFinancialRead)
def get_monthly_financial(
    creator_id: int,
    year: int,
    month: int = Path(..., ge=1, le=12),
    db: Session = Depends(get_session),
    admin: User = Depends(require_capability(Capability.VIEW_FINANCIALS)),
):
    """A month with nothing entered yet reads as all zeros."""
    creator = crud.get_creator(db, creator_id)
    financial = crud.get_monthly_financial(db, creator_id, year, month)
    return _serialize(financial, creator_id, year, month, creator.name)


@router.put("", response_model=MonthlyFinancialRead)
def upsert_monthly_financial(
    payload: MonthlyFinancialUpsert,
    db: Session = Depends(get_session),
    admin: User = Depends(require_capability(Capability.MANAGE_FINANCIALS)),
):
    financial = crud.upsert_monthly_financial(db, payload, actor_id=admin.id)
    return _serialize(
        financial, financial.creator_id, financial.year, financial.month, financial.creator.name
    )
