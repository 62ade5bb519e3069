"""Database access helpers."""
from __future__ import annotations

import json
import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from app.auth import User
from app.core.compensation import validate_creator_compensation
from app.core.constants import (
    COMPENSATION_PERCENTAGE,
    COMPENSATION_SALARY,
    SALE_TYPE_BASE,
    SHIFT_SLOTS,
)
from app.core.goals import validate_goal
from app.core.periods import Period, date_range_period, week_start
from app.core.sale_rules import can_edit, classify_status
from app.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models import (
    AuditLog,
    Creator,
    Goal,
    MonthlyCustomCost,
    MonthlyFinancial,
    Payment,
    Sale,
    Shift,
)
from app.schemas import (
    CreatorCreate,
    CreatorUpdate,
    GoalCreate,
    GoalUpdate,
    MonthlyFinancialUpsert,
    PaymentCreate,
    PaymentUpdate,
    SaleCreate,
    SaleFilters,
    SaleUpdate,
    ShiftAutoGenerate,
    ShiftCreate,
    ShiftUpdate,
    UserCreate,
    UserUpdate,
)

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
REQUIRED_USER_FIELDS = ("name", "role", "is_active")


def log_admin_action(db: Session, user_id: int | None, action: str, details: dict | None = None) -> None:
    payload = AuditLog(
        user_id=user_id,
        action=action,
        details=json.dumps(details or {}, default=str),
    )
    db.add(payload)
    db.commit()


def _naive_local(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


# --- Users -------------------------------------------------------------------


def list_users(db: Session, role: str | None = None, active: bool | None = None) -> Sequence[User]:
    stmt = select(User)
    if role:
        stmt = stmt.where(User.role == role)
    if active is not None:
        stmt = stmt.where(User.is_active == active)
    stmt = stmt.order_by(User.name)
    return db.execute(stmt).scalars().all()


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    stmt = select(User).where(User.email == email.strip().lower())
    return db.execute(stmt).scalars().first()


def create_user(db: Session, payload: UserCreate, actor_id: int | None = None) -> User:
    if get_user_by_email(db, payload.email) is not None:
        raise ConflictError("A user with this email already exists")
    user = User.create_user(
        email=payload.email,
        name=payload.name,
        password=payload.password,
        role=payload.role,
        commission_percent=payload.commission_percent,
        fixed_salary=payload.fixed_salary,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (%s)", user.email, user.role)
    log_admin_action(db, actor_id, "user.create", {"user_id": user.id, "role": user.role})
    return user


def update_user(db: Session, user: User, payload: UserUpdate, actor_id: int | None = None) -> User:
    changes = payload.model_dump(exclude_unset=True)
    password = changes.pop("password", None)
    for key, value in changes.items():
        if value is None and key in REQUIRED_USER_FIELDS:
            continue
        setattr(user, key, value)
    if password:
        user.password_hash = User.hash_password(password)
    db.add(user)
    db.commit()
    db.refresh(user)
    log_admin_action(db, actor_id, "user.update", {"user_id": user.id, "fields": sorted(changes)})
    return user


def deactivate_user(db: Session, user: User, actor_id: int | None = None) -> User:
    user.is_active = False
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Deactivated user %s", user.email)
    log_admin_action(db, actor_id, "user.deactivate", {"user_id": user.id})
    return user


# --- Creators ----------------------------------------------------------------


def list_creators(db: Session, active: bool | None = None) -> Sequence[Creator]:
    stmt = select(Creator)
    if active is not None:
        stmt = stmt.where(Creator.is_active == active)
    return db.execute(stmt.order_by(Creator.name)).scalars().all()


def get_creator(db: Session, creator_id: int) -> Creator:
    creator = db.get(Creator, creator_id)
    if creator is None:
        raise NotFoundError("Creator not found")
    return creator


def _ensure_unique_creator_name(db: Session, name: str, exclude_id: int | None = None) -> None:
    stmt = select(Creator.id).where(func.lower(Creator.name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(Creator.id != exclude_id)
    if db.execute(stmt).first() is not None:
        raise ConflictError(f"A creator named '{name}' already exists")


def _clear_unused_compensation(creator: Creator) -> None:
    if creator.compensation_type == COMPENSATION_PERCENTAGE:
        creator.fixed_salary_cost = None
    elif creator.compensation_type == COMPENSATION_SALARY:
        creator.revenue_share_percent = None


def create_creator(db: Session, payload: CreatorCreate, actor_id: int | None = None) -> Creator:
    _ensure_unique_creator_name(db, payload.name)
    creator = Creator(**payload.model_dump())
    _clear_unused_compensation(creator)
    validate_creator_compensation(
        creator.compensation_type, creator.revenue_share_percent, creator.fixed_salary_cost
    )
    db.add(creator)
    db.commit()
    db.refresh(creator)
    logger.info("Created creator %s (%s)", creator.name, creator.compensation_type)
    log_admin_action(db, actor_id, "creator.create", {"creator_id": creator.id})
    return creator


def update_creator(db: Session, creator: Creator, payload: CreatorUpdate, actor_id: int | None = None) -> Creator:
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key in ("revenue_share_percent", "fixed_salary_cost")
    }
    if changes.get("name"):
        _ensure_unique_creator_name(db, changes["name"], exclude_id=creator.id)

    merged = {
        "compensation_type": changes.get("compensation_type", creator.compensation_type),
        "revenue_share_percent": changes.get("revenue_share_percent", creator.revenue_share_percent),
        "fixed_salary_cost": changes.get("fixed_salary_cost", creator.fixed_salary_cost),
    }
    if merged["compensation_type"] == COMPENSATION_PERCENTAGE:
        merged["fixed_salary_cost"] = None
    elif merged["compensation_type"] == COMPENSATION_SALARY:
        merged["revenue_share_percent"] = None
    validate_creator_compensation(**merged)

    changes.update(merged)
    for key, value in changes.items():
        setattr(creator, key, value)
    db.add(creator)
    db.commit()
    db.refresh(creator)
    log_admin_action(db, actor_id, "creator.update", {"creator_id": creator.id, "fields": sorted(changes)})
    return creator


def delete_creator(db: Session, creator: Creator, actor_id: int | None = None) -> None:
    sale_count = db.execute(
        select(func.count()).select_from(Sale).where(Sale.creator_id == creator.id)
    ).scalar_one()
    if sale_count:
        raise ConflictError(f"Creator has {sale_count} sale(s) and cannot be deleted")
    creator_id = creator.id
    db.delete(creator)
    db.commit()
    logger.info("Deleted creator %s", creator_id)
    log_admin_action(db, actor_id, "creator.delete", {"creator_id": creator_id})


# --- Sales -------------------------------------------------------------------


def sales_in_period(
    db: Session,
    period: Period,
    user_id: int | None = None,
    creator_id: int | None = None,
) -> Sequence[Sale]:
    """Sales whose business date falls inside ``period``, with owner and creator loaded."""

    stmt = (
        select(Sale)
        .options(selectinload(Sale.user), selectinload(Sale.creator))
        .where(Sale.sale_date >= period.start, Sale.sale_date <= period.end)
    )
    if user_id is not None:
        stmt = stmt.where(Sale.user_id == user_id)
    if creator_id is not None:
        stmt = stmt.where(Sale.creator_id == creator_id)
    return db.execute(stmt.order_by(Sale.sale_date)).scalars().all()


def get_sale(db: Session, sale_id: int) -> Sale:
    sale = db.get(Sale, sale_id)
    if sale is None:
        raise NotFoundError("Sale not found")
    return sale


def _check_sale_amounts(sale: Sale) -> None:
    amount = Decimal(sale.amount)
    base_amount = Decimal(sale.base_amount or 0)
    if sale.sale_type == SALE_TYPE_BASE and amount == 0 and base_amount > 0:
        return
    if amount <= 0:
        raise ValidationError(
            "Amount must be positive, or if BASE type is selected, either amount or baseAmount must be positive"
        )


def _check_owner_sale_date(sale_date: datetime, actor: User, latest: datetime, message: str) -> None:
    """Chatters may not date a sale later than ``latest``."""
    if actor.is_manager():
        return
    if sale_date > latest:
        raise ValidationError(message)


def _active_user(db: Session, user_id: int) -> User:
    user = get_user(db, user_id)
    if not user.is_active:
        raise ValidationError("Sales cannot be attributed to an inactive user")
    return user


def create_sale(db: Session, payload: SaleCreate, actor: User, now: datetime | None = None) -> Sale:
    """Record a sale; its ONLINE/OFFLINE status is decided here once and stored."""

    now = now or datetime.now()
    owner_id = payload.user_id if payload.user_id is not None else actor.id
    if owner_id != actor.id and not actor.is_manager():
        raise ForbiddenError("Only managers and admins can log sales for another user")
    _active_user(db, owner_id)
    get_creator(db, payload.creator_id)

    was_backdated = payload.sale_date is not None
    sale_date = _naive_local(payload.sale_date) if was_backdated else now
    _check_owner_sale_date(sale_date, actor, now, "Sale date cannot be in the future")

    sale = Sale(
        user_id=owner_id,
        creator_id=payload.creator_id,
        amount=payload.amount,
        base_amount=payload.base_amount,
        sale_type=payload.sale_type,
        note=payload.note,
        sale_date=sale_date,
        status=classify_status(sale_date, was_backdated, now),
        created_at=now,
    )
    db.add(sale)
    db.commit()
    db.refresh(sale)
    logger.info(
        "Sale %s created for user %s by %s (%s, %s)",
        sale.id, owner_id, actor.id, sale.sale_type, sale.status,
    )
    return sale


def list_sales(
    db: Session,
    filters: SaleFilters,
    page: int = 1,
    limit: int = 20,
) -> tuple[Sequence[Sale], int]:
    stmt = select(Sale).options(selectinload(Sale.user), selectinload(Sale.creator))
    if filters.start_date or filters.end_date:
        period = date_range_period(filters.start_date or date.min, filters.end_date or date.max)
        stmt = stmt.where(Sale.sale_date >= period.start, Sale.sale_date <= period.end)
    if filters.creator_id is not None:
        stmt = stmt.where(Sale.creator_id == filters.creator_id)
    if filters.sale_type:
        stmt = stmt.where(Sale.sale_type == filters.sale_type)
    if filters.status:
        stmt = stmt.where(Sale.status == filters.status)
    if filters.user_id is not None:
        stmt = stmt.where(Sale.user_id == filters.user_id)

    total = db.execute(select(func.count()).select_from(stmt.order_by(None).subquery())).scalar_one()
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    page = max(1, page)
    stmt = stmt.order_by(Sale.sale_date.desc(), Sale.id.desc()).offset((page - 1) * limit).limit(limit)
    return db.execute(stmt).scalars().all(), total


def update_sale(
    db: Session,
    sale: Sale,
    payload: SaleUpdate,
    actor: User,
    now: datetime | None = None,
) -> Sale:
    """Apply an edit; status stays as captured at creation even if the date moves."""

    now = now or datetime.now()
    if not can_edit(actor.role, sale.user_id, actor.id, sale.sale_date, now):
        if sale.user_id != actor.id:
            raise ForbiddenError("You can only edit your own sales")
        raise ForbiddenError("The 24-hour edit window for this sale has closed")

    changes = payload.model_dump(exclude_unset=True)
    new_owner = changes.pop("user_id", None)
    if new_owner is not None and new_owner != sale.user_id:
        if not actor.is_manager():
            raise ForbiddenError("Only managers and admins can reassign sales")
        _active_user(db, new_owner)
        logger.info("Sale %s reassigned from user %s to %s by %s", sale.id, sale.user_id, new_owner, actor.id)
        sale.user_id = new_owner
    if changes.get("creator_id") is not None:
        get_creator(db, changes["creator_id"])
    if changes.get("sale_date") is not None:
        changes["sale_date"] = _naive_local(changes["sale_date"])
        _check_owner_sale_date(
            changes["sale_date"], actor, min(sale.sale_date, now), "Sale date can only be moved earlier"
        )

    for key, value in changes.items():
        if value is None and key != "note":
            continue
        setattr(sale, key, value)
    _check_sale_amounts(sale)

    db.add(sale)
    db.commit()
    db.refresh(sale)
    logger.info("Sale %s updated by %s", sale.id, actor.id)
    return sale


def delete_sale(db: Session, sale: Sale, actor_id: int | None = None) -> None:
    sale_id = sale.id
    db.delete(sale)
    db.commit()
    logger.info("Sale %s deleted by %s", sale_id, actor_id)
    log_admin_action(db, actor_id, "sale.delete", {"sale_id": sale_id})


def sale_stats(db: Session, period: Period, user_id: int | None = None) -> dict:
    """Count and amount per sale type and per status over ``period``."""

    conditions = [Sale.sale_date >= period.start, Sale.sale_date <= period.end]
    if user_id is not None:
        conditions.append(Sale.user_id == user_id)

    def _grouped(column) -> list[dict]:
        rows = db.execute(
            select(column, func.count(Sale.id), func.coalesce(func.sum(Sale.amount), 0))
            .where(*conditions)
            .group_by(column)
            .order_by(column)
        ).all()
        return [{"key": key, "count": count, "amount": Decimal(str(amount))} for key, count, amount in rows]

    totals = db.execute(
        select(
            func.count(Sale.id),
            func.coalesce(func.sum(Sale.amount), 0),
            func.coalesce(func.sum(Sale.base_amount), 0),
        ).where(*conditions)
    ).one()
    return {
        "count": totals[0],
        "total_amount": Decimal(str(totals[1])),
        "total_base": Decimal(str(totals[2])),
        "by_type": _grouped(Sale.sale_type),
        "by_status": _grouped(Sale.status),
    }


def sale_years(db: Session, user_id: int | None = None) -> list[int]:
    stmt = select(Sale.sale_date)
    if user_id is not None:
        stmt = stmt.where(Sale.user_id == user_id)
    return sorted({value.year for value in db.execute(stmt).scalars().all()}, reverse=True)


# --- Monthly financials ------------------------------------------------------


def list_monthly_financials(
    db: Session,
    creator_id: int | None = None,
    year: int | None = None,
    month: int | None = None,
) -> Sequence[MonthlyFinancial]:
    stmt = select(MonthlyFinancial).options(
        selectinload(MonthlyFinancial.custom_costs), selectinload(MonthlyFinancial.creator)
    )
    if creator_id is not None:
        stmt = stmt.where(MonthlyFinancial.creator_id == creator_id)
    if year is not None:
        stmt = stmt.where(MonthlyFinancial.year == year)
    if month is not None:
        stmt = stmt.where(MonthlyFinancial.month == month)
    stmt = stmt.order_by(MonthlyFinancial.year.desc(), MonthlyFinancial.month.desc(), MonthlyFinancial.creator_id)
    return db.execute(stmt).scalars().all()


def get_monthly_financial(db: Session, creator_id: int, year: int, month: int) -> MonthlyFinancial | None:
    stmt = (
        select(MonthlyFinancial)
        .options(selectinload(MonthlyFinancial.custom_costs))
        .where(
            MonthlyFinancial.creator_id == creator_id,
            MonthlyFinancial.year == year,
            MonthlyFinancial.month == month,
        )
    )
    return db.execute(stmt).scalars().first()


def financials_for_period(db: Session, period: Period, creator_id: int | None = None) -> Sequence[MonthlyFinancial]:
    """Monthly rows whose (year, month) falls inside ``period``."""

    start_key = period.start.year * 12 + period.start.month
    end_key = period.end.year * 12 + period.end.month
    stmt = (
        select(MonthlyFinancial)
        .options(selectinload(MonthlyFinancial.custom_costs))
        .where(
            MonthlyFinancial.year * 12 + MonthlyFinancial.month >= start_key,
            MonthlyFinancial.year * 12 + MonthlyFinancial.month <= end_key,
        )
    )
    if creator_id is not None:
        stmt = stmt.where(MonthlyFinancial.creator_id == creator_id)
    return db.execute(stmt).scalars().all()


def upsert_monthly_financial(
    db: Session, payload: MonthlyFinancialUpsert, actor_id: int | None = None
) -> MonthlyFinancial:
    """Create or overwrite the row for (creator, year, month); custom cost lines are replaced."""

    get_creator(db, payload.creator_id)
    financial = get_monthly_financial(db, payload.creator_id, payload.year, payload.month)
    if financial is None:
        financial = MonthlyFinancial(creator_id=payload.creator_id, year=payload.year, month=payload.month)
        db.add(financial)

    financial.gross_revenue = payload.gross_revenue
    financial.marketing_costs = payload.marketing_costs
    financial.tool_costs = payload.tool_costs
    financial.other_costs = payload.other_costs
    financial.notes = payload.notes
    financial.custom_costs = [
        MonthlyCustomCost(name=line.name.strip(), amount=line.amount) for line in payload.custom_costs
    ]
    db.commit()
    db.refresh(financial)
    logger.info(
        "Monthly financials saved for creator %s %04d-%02d", payload.creator_id, payload.year, payload.month
    )
    log_admin_action(
        db,
        actor_id,
        "financial.upsert",
        {"creator_id": payload.creator_id, "year": payload.year, "month": payload.month},
    )
    return financial


# --- Payments ----------------------------------------------------------------


def list_payments(
    db: Session,
    user_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> Sequence[Payment]:
    stmt = select(Payment).options(selectinload(Payment.user))
    if user_id is not None:
        stmt = stmt.where(Payment.user_id == user_id)
    if start_date is not None:
        stmt = stmt.where(Payment.payment_date >= start_date)
    if end_date is not None:
        stmt = stmt.where(Payment.payment_date <= end_date)
    stmt = stmt.order_by(Payment.payment_date.desc(), Payment.id.desc())
    return db.execute(stmt).scalars().all()


def get_payment(db: Session, payment_id: int) -> Payment:
    payment = db.get(Payment, payment_id)
    if payment is None:
        raise NotFoundError("Payment not found")
    return payment


def total_payments(db: Session, period: Period, user_id: int | None = None) -> Decimal:
    stmt = select(func.coalesce(func.sum(Payment.amount), 0)).where(
        Payment.payment_date >= period.start.date(),
        Payment.payment_date <= period.end.date(),
    )
    if user_id is not None:
        stmt = stmt.where(Payment.user_id == user_id)
    return Decimal(str(db.execute(stmt).scalar_one()))


def create_payment(db: Session, payload: PaymentCreate, actor_id: int | None = None) -> Payment:
    get_user(db, payload.user_id)
    payment = Payment(**payload.model_dump())
    db.add(payment)
    db.commit()
    db.refresh(payment)
    logger.info("Payment %s of %s recorded for user %s", payment.id, payment.amount, payment.user_id)
    log_admin_action(db, actor_id, "payment.create", {"payment_id": payment.id, "amount": payment.amount})
    return payment


def update_payment(db: Session, payment: Payment, payload: PaymentUpdate, actor_id: int | None = None) -> Payment:
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("user_id") is not None:
        get_user(db, changes["user_id"])
    for key, value in changes.items():
        if value is None and key != "note":
            continue
        setattr(payment, key, value)
    db.add(payment)
    db.commit()
    db.refresh(payment)
    logger.info("Payment %s updated", payment.id)
    log_admin_action(db, actor_id, "payment.update", {"payment_id": payment.id, "fields": sorted(changes)})
    return payment


def delete_payment(db: Session, payment: Payment, actor_id: int | None = None) -> None:
    payment_id = payment.id
    db.delete(payment)
    db.commit()
    logger.info("Payment %s deleted", payment_id)
    log_admin_action(db, actor_id, "payment.delete", {"payment_id": payment_id})


# --- Goals -------------------------------------------------------------------


def list_goals(
    db: Session,
    year: int | None = None,
    month: int | None = None,
    goal_type: str | None = None,
    user_id: int | None = None,
    creator_id: int | None = None,
) -> Sequence[Goal]:
    stmt = select(Goal).options(selectinload(Goal.creator), selectinload(Goal.user))
    if year is not None:
        stmt = stmt.where(Goal.year == year)
    if month is not None:
        stmt = stmt.where(Goal.month == month)
    if goal_type:
        stmt = stmt.where(Goal.type == goal_type)
    if user_id is not None:
        stmt = stmt.where(Goal.user_id == user_id)
    if creator_id is not None:
        stmt = stmt.where(Goal.creator_id == creator_id)
    stmt = stmt.order_by(Goal.year.desc(), Goal.month.desc(), Goal.id)
    return db.execute(stmt).scalars().all()


def get_goal(db: Session, goal_id: int) -> Goal:
    goal = db.get(Goal, goal_id)
    if goal is None:
        raise NotFoundError("Goal not found")
    return goal


def _check_goal_scope(db: Session, goal: Goal) -> None:
    validate_goal(goal.user_id, goal.creator_id, goal.target, goal.month, goal.type)
    if goal.user_id is not None:
        get_user(db, goal.user_id)
    if goal.creator_id is not None:
        get_creator(db, goal.creator_id)


def create_goal(db: Session, payload: GoalCreate, actor_id: int | None = None) -> Goal:
    goal = Goal(**payload.model_dump())
    _check_goal_scope(db, goal)
    db.add(goal)
    db.commit()
    db.refresh(goal)
    logger.info("Goal %s created (%s, %s scope)", goal.id, goal.type, goal.scope)
    log_admin_action(db, actor_id, "goal.create", {"goal_id": goal.id})
    return goal


def update_goal(db: Session, goal: Goal, payload: GoalUpdate, actor_id: int | None = None) -> Goal:
    changes = payload.model_dump(exclude_unset=True)
    for key, value in changes.items():
        if value is None and key not in ("user_id", "creator_id", "bonus_amount"):
            continue
        setattr(goal, key, value)
    _check_goal_scope(db, goal)
    db.add(goal)
    db.commit()
    db.refresh(goal)
    logger.info("Goal %s updated", goal.id)
    log_admin_action(db, actor_id, "goal.update", {"goal_id": goal.id, "fields": sorted(changes)})
    return goal


def delete_goal(db: Session, goal: Goal, actor_id: int | None = None) -> None:
    goal_id = goal.id
    db.delete(goal)
    db.commit()
    logger.info("Goal %s deleted", goal_id)
    log_admin_action(db, actor_id, "goal.delete", {"goal_id": goal_id})


# --- Shifts ------------------------------------------------------------------


def list_shifts(
    db: Session,
    start_date: date | None = None,
    end_date: date | None = None,
    user_id: int | None = None,
) -> Sequence[Shift]:
    stmt = select(Shift).options(selectinload(Shift.user))
    if start_date is not None:
        stmt = stmt.where(Shift.date >= start_date)
    if end_date is not None:
        stmt = stmt.where(Shift.date <= end_date)
    if user_id is not None:
        stmt = stmt.where(Shift.user_id == user_id)
    return db.execute(stmt.order_by(Shift.date, Shift.start_time)).scalars().all()


def get_shift(db: Session, shift_id: int) -> Shift:
    shift = db.get(Shift, shift_id)
    if shift is None:
        raise NotFoundError("Shift not found")
    return shift


def _find_shift(db: Session, user_id: int, shift_date: date, start_time: str) -> Shift | None:
    stmt = select(Shift).where(
        Shift.user_id == user_id, Shift.date == shift_date, Shift.start_time == start_time
    )
    return db.execute(stmt).scalars().first()


def create_shift(db: Session, payload: ShiftCreate, actor_id: int | None = None) -> Shift:
    get_user(db, payload.user_id)
    if _find_shift(db, payload.user_id, payload.date, payload.start_time) is not None:
        raise ConflictError("Shift already exists for this user, date, and time")
    shift = Shift(
        user_id=payload.user_id,
        date=payload.date,
        start_time=payload.start_time,
        end_time=payload.end_time,
        created_by=actor_id,
    )
    db.add(shift)
    db.commit()
    db.refresh(shift)
    return shift


def update_shift(db: Session, shift: Shift, payload: ShiftUpdate) -> Shift:
    changes = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    if "user_id" in changes:
        get_user(db, changes["user_id"])
    target_user = changes.get("user_id", shift.user_id)
    target_date = changes.get("date", shift.date)
    target_start = changes.get("start_time", shift.start_time)
    clash = _find_shift(db, target_user, target_date, target_start)
    if clash is not None and clash.id != shift.id:
        raise ConflictError("Shift already exists for this user, date, and time")

    for key, value in changes.items():
        setattr(shift, key, value)
    shift.end_time = SHIFT_SLOTS[shift.start_time]
    db.add(shift)
    db.commit()
    db.refresh(shift)
    return shift


def delete_shift(db: Session, shift: Shift) -> None:
    db.delete(shift)
    db.commit()


def delete_shifts_in_range(db: Session, start_date: date, end_date: date) -> int:
    if end_date < start_date:
        raise ValidationError("End date must be on or after start date.")
    shifts = db.execute(
        select(Shift).where(Shift.date >= start_date, Shift.date <= end_date)
    ).scalars().all()
    for shift in shifts:
        db.delete(shift)
    db.commit()
    logger.info("Cleared %d shift(s) between %s and %s", len(shifts), start_date, end_date)
    return len(shifts)


def generate_weekly_shifts(db: Session, payload: ShiftAutoGenerate, actor_id: int | None = None) -> dict[str, int]:
    """Materialize a weekday template for one or more consecutive weeks.

    The week always starts on the Monday of ``week_start_date``. Existing
    (user, date, start) shifts are skipped unless ``overwrite_existing`` is set.
    """

    user_ids = {user_id for slots in payload.template.values() for ids in slots.values() for user_id in ids}
    for user_id in user_ids:
        get_user(db, user_id)

    monday = week_start(payload.week_start_date)
    created = skipped = replaced = 0
    for week in range(payload.weeks):
        for weekday, slots in sorted(payload.template.items()):
            shift_date = monday + timedelta(weeks=week, days=weekday)
            for start_time, ids in slots.items():
                for user_id in ids:
                    existing = _find_shift(db, user_id, shift_date, start_time)
                    if existing is not None:
                        if not payload.overwrite_existing:
                            skipped += 1
                            continue
                        db.delete(existing)
                        db.flush()
                        replaced += 1
                    db.add(
                        Shift(
                            user_id=user_id,
                            date=shift_date,
                            start_time=start_time,
                            end_time=SHIFT_SLOTS[start_time],
                            created_by=actor_id,
                        )
                    )
                    created += 1
    db.commit()
    logger.info(
        "Generated shifts from %s for %d week(s): %d created, %d skipped, %d replaced",
        monday, payload.weeks, created, skipped, replaced,
    )
    return {"created": created, "skipped": skipped, "replaced": replaced}
