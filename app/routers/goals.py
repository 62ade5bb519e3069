"""Sales, commission and revenue goals."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app import crud
from app.auth import User
from app.context import RequestContext, get_request_context
from app.database import get_session
from app.errors import ForbiddenError
from app.models import Goal
from app.permissions import Capability, require_capability
from app.schemas import GoalCreate, GoalProgressRead, GoalRead, GoalUpdate
from app.services import GoalService

router = APIRouter(prefix="/goals", tags=["Goals"])


def _visible_to(goal: Goal, ctx: RequestContext) -> bool:
    """Chatters see global and creator goals plus their own user goals."""
    if ctx.can(Capability.MANAGE_GOALS) or ctx.can(Capability.VIEW_ALL_SALES):
        return True
    return goal.user_id is None or goal.user_id == ctx.user_id


def _visible_goal(db: Session, goal_id: int, ctx: RequestContext) -> Goal:
    goal = crud.get_goal(db, goal_id)
    if not _visible_to(goal, ctx):
        raise ForbiddenError("You cannot view this goal")
    return goal


@router.get("", response_model=List[GoalRead])
def list_goals(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=0, le=12),
    type: Optional[str] = Query(None),
    user_id: Optional[int] = Query(None),
    creator_id: Optional[int] = Query(None),
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    goals = crud.list_goals(
        db,
        year=year,
        month=month,
        goal_type=type.upper() if type else None,
        user_id=user_id,
        creator_id=creator_id,
    )
    return [goal for goal in goals if _visible_to(goal, ctx)]


@router.get("/progress", response_model=List[GoalProgressRead])
def goals_progress(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=0, le=12),
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    """Progress for every goal matching the filters that the caller may see."""
    goals = [goal for goal in crud.list_goals(db, year=year, month=month) if _visible_to(goal, ctx)]
    return GoalService(db).progress_for(goals, chatter_view=not ctx.can(Capability.MANAGE_GOALS))


@router.get("/{goal_id}", response_model=GoalRead)
def get_goal(
    goal_id: int,
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    return _visible_goal(db, goal_id, ctx)


@router.get("/{goal_id}/progress", response_model=GoalProgressRead)
def goal_progress(
    goal_id: int,
    db: Session = Depends(get_session),
    ctx: RequestContext = Depends(get_request_context),
):
    goal = _visible_goal(db, goal_id, ctx)
    return GoalService(db).progress(goal, chatter_view=not ctx.can(Capability.MANAGE_GOALS))


@router.post("", response_model=GoalRead, status_code=201)
def create_goal(
    payload: GoalCreate,
    db: Session = Depends(get_session),
    admin: User = Depends(require_capability(Capability.MANAGE_GOALS)),
):
    return crud.create_goal(db, payload, actor_id=admin.id)


@router.patch("/{goal_id}", response_model=GoalRead)
def update_goal(
    goal_id: int,
    payload: GoalUpdate,
    db: Session = Depends(get_session),
    admin: User = Depends(require_capability(Capability.MANAGE_GOALS)),
):
    return crud.update_goal(db, crud.get_goal(db, goal_id), payload, actor_id=admin.id)


@router.delete("/{goal_id}", status_code=204)
def delete_goal(
    goal_id: int,
    db: Session = Depends(get_session),
    admin: User = Depends(require_capability(Capability.MANAGE_GOALS)),
) -> Response:
    crud.delete_goal(db, crud.get_goal(db, goal_id), actor_id=admin.id)
    return Response(status_code=204)
