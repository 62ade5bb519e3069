"""Capability-based authorization checked once at the API boundary."""
from __future__ import annotations

from enum import Enum
from typing import FrozenSet

from fastapi import Depends

from app.auth import User
from app.core.constants import ROLE_ADMIN, ROLE_CHATTER, ROLE_MANAGER
from app.dependencies import get_current_user
from app.errors import ForbiddenError


class Capability(str, Enum):
    VIEW_OWN_DASHBOARD = "dashboard:own"
    VIEW_ANY_DASHBOARD = "dashboard:any"
    VIEW_ADMIN_RECAP = "dashboard:admin"
    LOG_OWN_SALES = "sales:log_own"
    LOG_SALES_FOR_OTHERS = "sales:log_others"
    VIEW_ALL_SALES = "sales:view_all"
    REASSIGN_SALES = "sales:reassign"
    DELETE_SALES = "sales:delete"
    VIEW_USERS = "users:view"
    MANAGE_USERS = "users:manage"
    MANAGE_CREATORS = "creators:manage"
    MANAGE_FINANCIALS = "financials:manage"
    VIEW_FINANCIALS = "financials:view"
    MANAGE_PAYMENTS = "payments:manage"
    VIEW_ALL_PAYMENTS = "payments:view_all"
    MANAGE_GOALS = "goals:manage"
    MANAGE_SHIFTS = "shifts:manage"
    VIEW_ALL_ANALYTICS = "analytics:view_all"


_CHATTER: FrozenSet[Capability] = frozenset(
    {
        Capability.VIEW_OWN_DASHBOARD,
        Capability.LOG_OWN_SALES,
    }
)

_MANAGER: FrozenSet[Capability] = _CHATTER | frozenset(
    {
        Capability.VIEW_USERS,
        Capability.LOG_SALES_FOR_OTHERS,
        Capability.VIEW_ALL_SALES,
        Capability.REASSIGN_SALES,
        Capability.DELETE_SALES,
        Capability.VIEW_ALL_PAYMENTS,
        Capability.MANAGE_SHIFTS,
        Capability.VIEW_ALL_ANALYTICS,
    }
)

ROLE_CAPABILITIES: dict[str, FrozenSet[Capability]] = {
    ROLE_CHATTER: _CHATTER,
    ROLE_MANAGER: _MANAGER,
    ROLE_ADMIN: frozenset(Capability),
}


class Authorization:
    """The fixed set of operations a role may perform."""

    def __init__(self, role: str, capabilities: FrozenSet[Capability]):
        self.role = role
        self.capabilities = capabilities

    @classmethod
    def for_user(cls, user: User) -> "Authorization":
        return cls(user.role, ROLE_CAPABILITIES.get(user.role, frozenset()))

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def require(self, capability: Capability) -> None:
        if not self.can(capability):
            raise ForbiddenError()


def require_capability(capability: Capability):
    """Build a dependency that rejects the request unless the current user holds ``capability``."""

    def _dependency(user: User = Depends(get_current_user)) -> User:
        Authorization.for_user(user).require(capability)
        return user

    return _dependency
