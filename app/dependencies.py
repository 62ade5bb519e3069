"""Shared FastAPI dependencies."""
from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.auth import User
from app.database import get_session
from app.errors import UnauthorizedError

SESSION_COOKIE = "user_id"


def get_current_user(request: Request, db: Session = Depends(get_session)) -> User:
    """Dependency to get current authenticated user."""
    user_id = request.cookies.get(SESSION_COOKIE)

    if not user_id:
        raise UnauthorizedError()

    try:
        user_id = int(user_id)
    except (ValueError, TypeError):
        raise UnauthorizedError("Invalid session")

    user = db.get(User, user_id)

    if not user or not user.is_active:
        raise UnauthorizedError("User not found")

    return user
