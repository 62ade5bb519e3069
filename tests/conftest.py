from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth import User
from app.core.constants import COMPENSATION_PERCENTAGE, ROLE_CHATTER
from app.database import Base, get_session
from app.dependencies import get_current_user
from app.main import app
from app.models import Creator, Sale


@pytest.fixture()
def db_session():
    engine = create_engine(
        "sqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def make_user(db_session):
    counter = {"n": 0}

    def _make_user(name=None, role=ROLE_CHATTER, commission_percent=None, fixed_salary=None, is_active=True):
        counter["n"] += 1
        name = name or f"User {counter['n']}"
        user = User.create_user(
            email=f"{name.lower().replace(' ', '.')}@agency.test",
            name=name,
            password="secret",
            role=role,
            commission_percent=Decimal(str(commission_percent)) if commission_percent is not None else None,
            fixed_salary=Decimal(str(fixed_salary)) if fixed_salary is not None else None,
        )
        user.is_active = is_active
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def make_creator(db_session):
    def _make_creator(
        name="Creator",
        compensation_type=COMPENSATION_PERCENTAGE,
        revenue_share_percent="50",
        fixed_salary_cost=None,
    ):
        creator = Creator(
            name=name,
            compensation_type=compensation_type,
            revenue_share_percent=Decimal(revenue_share_percent) if revenue_share_percent is not None else None,
            fixed_salary_cost=Decimal(fixed_salary_cost) if fixed_salary_cost is not None else None,
        )
        db_session.add(creator)
        db_session.commit()
        return creator

    return _make_creator


@pytest.fixture()
def client(db_session):
    def override_session():
        try:
            yield db_session
        finally:
            db_session.rollback()

    app.dependency_overrides[get_session] = override_session

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_session, None)
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture()
def act_as(client):
    """Switch the authenticated user for subsequent requests."""

    def _act_as(user):
        app.dependency_overrides[get_current_user] = lambda: user
        return client

    return _act_as


@pytest.fixture()
def make_sale(db_session):
    def _make_sale(user, creator, amount, sale_date, sale_type="PPV", base_amount="0", status="OFFLINE"):
        sale = Sale(
            user_id=user.id,
            creator_id=creator.id,
            amount=Decimal(str(amount)),
            base_amount=Decimal(str(base_amount)),
            sale_type=sale_type,
            status=status,
            sale_date=sale_date,
        )
        db_session.add(sale)
        db_session.commit()
        return sale

    return _make_sale
