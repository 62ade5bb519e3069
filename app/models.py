"""SQLAlchemy models for the agency application."""
from __future__ import annotations

from datetime import date, datetime
from datetime import date as calendar_date
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.auth import User
from app.core.constants import (
    COMPENSATION_PERCENTAGE,
    COMPENSATION_TYPE_ENUM,
    DEFAULT_ONLYFANS_COMMISSION_PERCENT,
    GOAL_TYPE_ENUM,
    PAYMENT_METHOD_ENUM,
    SALE_STATUS_ENUM,
    SALE_TYPE_ENUM,
    SHIFT_SLOTS,
)
from app.database import Base


def _in_list(column: str, values) -> str:
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"{column} IN ({quoted})"


class Creator(Base):
    __tablename__ = "creators"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    compensation_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=COMPENSATION_PERCENTAGE
    )
    revenue_share_percent: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    fixed_salary_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    onlyfans_commission_percent: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=DEFAULT_ONLYFANS_COMMISSION_PERCENT
    )
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now, nullable=False
    )

    sales: Mapped[list["Sale"]] = relationship(back_populates="creator")
    monthly_financials: Mapped[list["MonthlyFinancial"]] = relationship(
        back_populates="creator", cascade="all, delete-orphan"
    )
    goals: Mapped[list["Goal"]] = relationship(back_populates="creator", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint(_in_list("compensation_type", COMPENSATION_TYPE_ENUM), name="ck_creators_compensation_valid"),
        CheckConstraint(
            "revenue_share_percent IS NULL OR (revenue_share_percent >= 0 AND revenue_share_percent <= 100)",
            name="ck_creators_share_range",
        ),
        CheckConstraint(
            "fixed_salary_cost IS NULL OR fixed_salary_cost >= 0",
            name="ck_creators_salary_nonnegative",
        ),
    )


class Sale(Base):
    __tablename__ = "sales"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    creator_id: Mapped[int] = mapped_column(ForeignKey("creators.id"), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    base_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    sale_type: Mapped[str] = mapped_column(String(20), nullable=False)
    # Captured once at creation; never recomputed.
    status: Mapped[str] = mapped_column(String(10), nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    sale_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now, nullable=False
    )

    user: Mapped[User] = relationship(back_populates="sales")
    creator: Mapped[Creator] = relationship(back_populates="sales")

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_sales_amount_nonnegative"),
        CheckConstraint("base_amount >= 0", name="ck_sales_base_nonnegative"),
        CheckConstraint(_in_list("sale_type", SALE_TYPE_ENUM), name="ck_sales_type_valid"),
        CheckConstraint(_in_list("status", SALE_STATUS_ENUM), name="ck_sales_status_valid"),
        Index("idx_sales_user_date", "user_id", "sale_date"),
        Index("idx_sales_creator_date", "creator_id", "sale_date"),
    )


class MonthlyFinancial(Base):
    __tablename__ = "monthly_financials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    creator_id: Mapped[int] = mapped_column(
        ForeignKey("creators.id", ondelete="CASCADE"), nullable=False, index=True
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    gross_revenue: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    marketing_costs: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    tool_costs: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    other_costs: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now, nullable=False
    )

    creator: Mapped[Creator] = relationship(back_populates="monthly_financials")
    custom_costs: Mapped[list["MonthlyCustomCost"]] = relationship(
        back_populates="financial",
        cascade="all, delete-orphan",
        order_by="MonthlyCustomCost.id",
    )

    __table_args__ = (
        UniqueConstraint("creator_id", "year", "month", name="uq_monthly_financial_creator_period"),
        CheckConstraint("month >= 1 AND month <= 12", name="ck_monthly_financials_month_range"),
        CheckConstraint(
            "marketing_costs >= 0 AND tool_costs >= 0 AND other_costs >= 0",
            name="ck_monthly_financials_costs_nonnegative",
        ),
    )


class MonthlyCustomCost(Base):
    __tablename__ = "monthly_custom_costs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    financial_id: Mapped[int] = mapped_column(
        ForeignKey("monthly_financials.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    financial: Mapped[MonthlyFinancial] = relationship(back_populates="custom_costs")

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_custom_costs_amount_nonnegative"),
    )


class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now, nullable=False
    )

    user: Mapped[User] = relationship(back_populates="payments")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        CheckConstraint(_in_list("payment_method", PAYMENT_METHOD_ENUM), name="ck_payments_method_valid"),
    )


class Goal(Base):
    __tablename__ = "goals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # At most one of user_id / creator_id; neither means a global goal.
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True
    )
    creator_id: Mapped[int | None] = mapped_column(
        ForeignKey("creators.id", ondelete="CASCADE"), nullable=True, index=True
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    target: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bonus_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now, nullable=False
    )

    user: Mapped[User | None] = relationship()
    creator: Mapped[Creator | None] = relationship(back_populates="goals")

    @property
    def scope(self) -> str:
        if self.user_id is not None:
            return "USER"
        if self.creator_id is not None:
            return "CREATOR"
        return "GLOBAL"

    __table_args__ = (
        CheckConstraint("target > 0", name="ck_goals_target_positive"),
        CheckConstraint("month >= 0 AND month <= 12", name="ck_goals_month_range"),
        CheckConstraint("NOT (user_id IS NOT NULL AND creator_id IS NOT NULL)", name="ck_goals_single_scope"),
        CheckConstraint(_in_list("type", GOAL_TYPE_ENUM), name="ck_goals_type_valid"),
    )


class Shift(Base):
    __tablename__ = "shifts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # attribute name shadows the type
    date: Mapped[calendar_date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)

    user: Mapped[User] = relationship(back_populates="shifts", foreign_keys=[user_id])

    __table_args__ = (
        UniqueConstraint("user_id", "date", "start_time", name="uq_shift_user_date_start"),
        CheckConstraint(_in_list("start_time", SHIFT_SLOTS), name="ck_shifts_start_valid"),
        CheckConstraint(_in_list("end_time", SHIFT_SLOTS.values()), name="ck_shifts_end_valid"),
    )


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
