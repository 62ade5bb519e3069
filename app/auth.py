"""Authentication and user accounts."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import bcrypt
from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.constants import PRIVILEGED_ROLES, ROLE_ADMIN, ROLE_CHATTER, ROLE_MANAGER
from app.database import Base


class User(Base):
    """Chatter, chatter manager or admin account."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default=ROLE_CHATTER, nullable=False)
    commission_percent: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    fixed_salary: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now, nullable=False
    )

    sales: Mapped[list["Sale"]] = relationship(back_populates="user")
    payments: Mapped[list["Payment"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    shifts: Mapped[list["Shift"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", foreign_keys="Shift.user_id"
    )

    __table_args__ = (
        CheckConstraint(
            f"role IN ('{ROLE_ADMIN}', '{ROLE_MANAGER}', '{ROLE_CHATTER}')",
            name="ck_users_role_valid",
        ),
        CheckConstraint(
            "commission_percent IS NULL OR (commission_percent >= 0 AND commission_percent <= 100)",
            name="ck_users_commission_range",
        ),
        CheckConstraint("fixed_salary IS NULL OR fixed_salary >= 0", name="ck_users_salary_nonnegative"),
    )

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using bcrypt."""
        salt = bcrypt.gensalt()
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""
        return bcrypt.checkpw(password.encode("utf-8"), self.password_hash.encode("utf-8"))

    @classmethod
    def create_user(
        cls,
        email: str,
        name: str,
        password: str,
        role: str = ROLE_CHATTER,
        commission_percent: Decimal | None = None,
        fixed_salary: Decimal | None = None,
    ) -> User:
        """Create a new user with hashed password."""
        return cls(
            email=email.strip().lower(),
            name=name,
            password_hash=cls.hash_password(password),
            role=role,
            commission_percent=commission_percent,
            fixed_salary=fixed_salary,
        )

    def is_manager(self) -> bool:
        """Admins and chatter managers."""
        return self.role in PRIVILEGED_ROLES
