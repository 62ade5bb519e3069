"""Authentication routes and session management."""
from __future__ import annotations

import logging
import os

from fastapi import APIRouter, Depends, Form, Response
from sqlalchemy.orm import Session

from app import crud
from app.auth import User
from app.database import get_session
from app.dependencies import SESSION_COOKIE, get_current_user
from app.errors import UnauthorizedError
from app.schemas import UserRead

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])

__all__ = ["router", "get_current_user"]


def _secure_cookies() -> bool:
    return os.getenv("AGENCY_SECURE_COOKIES", "0") == "1"


@router.post("/login", response_model=UserRead)
def login(
    response: Response,
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_session),
):
    """Check credentials and set the session cookie."""
    user = crud.get_user_by_email(db, email)

    if not user or not user.verify_password(password):
        logger.warning("Failed login for %s", email)
        raise UnauthorizedError("Invalid email or password")
    if not user.is_active:
        logger.warning("Login refused for inactive user %s", email)
        raise UnauthorizedError("Account is deactivated")

    response.set_cookie(
        key=SESSION_COOKIE,
        value=str(user.id),
        httponly=True,
        path="/",
        secure=_secure_cookies(),
        samesite="lax",
        max_age=86400,  # 24 hours
    )
    logger.info("User %s logged in", user.email)
    return user


@router.post("/logout", status_code=204)
def logout() -> Response:
    """Clear the session cookie."""
    response = Response(status_code=204)
    response.delete_cookie(SESSION_COOKIE, path="/")
    return response


@router.get("/me", response_model=UserRead)
def me(user: User = Depends(get_current_user)):
    return user
