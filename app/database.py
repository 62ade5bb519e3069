"""Database configuration for the agency web application."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

DEFAULT_SQLITE_PATH = Path("data/agency.db")

DEFAULT_ADMIN_EMAIL = "admin@agency.local"
DEFAULT_ADMIN_PASSWORD = "admin"


def _normalize_url(url: str) -> str:
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


def _sqlite_fallback_url() -> str:
    DEFAULT_SQLITE_PATH.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{DEFAULT_SQLITE_PATH}"


def _create_engine(url: str):
    """Create a SQLAlchemy engine for the given URL, handling sqlite connect args."""
    if url.startswith("sqlite:///") and ":memory:" not in url:
        Path(url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, future=True, pool_pre_ping=True)


DATABASE_URL = _normalize_url(os.getenv("AGENCY_DATABASE_URL", f"sqlite:///{DEFAULT_SQLITE_PATH}"))

# Local development falls back to the SQLite file when the configured database
# is unreachable; any other environment fails at startup.
try:
    engine = _create_engine(DATABASE_URL)
    with engine.connect():
        pass
except SQLAlchemyError as exc:  # pragma: no cover - environment dependent
    env = os.getenv("ENVIRONMENT", "development").lower()
    logger.error("Could not connect to database at %r: %s", DATABASE_URL, exc)
    if env != "development":
        raise
    DATABASE_URL = _sqlite_fallback_url()
    logger.warning("Falling back to SQLite for local development at %s", DATABASE_URL)
    engine = _create_engine(DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

Base = declarative_base()


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency that yields a database session."""

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def ensure_admin(session: Session, email: str | None = None, password: str | None = None):
    """Create the bootstrap admin account when no admin exists yet."""

    from app.auth import User
    from app.core.constants import ROLE_ADMIN

    existing = session.execute(select(User).where(User.role == ROLE_ADMIN)).scalars().first()
    if existing is not None:
        return existing

    email = email or os.getenv("AGENCY_ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL)
    password = password or os.getenv("AGENCY_ADMIN_PASSWORD", DEFAULT_ADMIN_PASSWORD)
    admin = User.create_user(email=email, name="Administrator", password=password, role=ROLE_ADMIN)
    session.add(admin)
    session.commit()
    logger.info("Created bootstrap admin user %s", email)
    return admin


def init_db() -> None:
    """Ensure database tables exist and the bootstrap admin user is present."""

    from app import auth, models  # noqa: F401  (import ensures model metadata is registered)

    Base.metadata.create_all(bind=engine, checkfirst=True)

    session = SessionLocal()
    try:
        ensure_admin(session)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Could not create the bootstrap admin user")
        raise
    finally:
        session.close()
