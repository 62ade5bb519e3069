"""Sale status classification and the owner edit window."""
from __future__ import annotations

from datetime import datetime, timedelta

from app.core.constants import PRIVILEGED_ROLES, SALE_STATUS_OFFLINE, SALE_STATUS_ONLINE

EDIT_WINDOW = timedelta(hours=24)
REAL_TIME_TOLERANCE = timedelta(minutes=5)

EDITABLE_BY_OWNER = "EDITABLE_BY_OWNER"
LOCKED_FOR_OWNER = "LOCKED_FOR_OWNER"


def classify_status(sale_date: datetime, was_backdated: bool, now: datetime | None = None) -> str:
    """Return ONLINE for sales entered live, OFFLINE for backdated or late entries.

    The result is stored on the sale at creation time and never recomputed.
    """

    if was_backdated:
        return SALE_STATUS_OFFLINE
    now = now or datetime.now()
    elapsed = now - sale_date
    if timedelta(0) <= elapsed <= REAL_TIME_TOLERANCE:
        return SALE_STATUS_ONLINE
    return SALE_STATUS_OFFLINE


def edit_deadline(sale_date: datetime) -> datetime:
    return sale_date + EDIT_WINDOW


def within_edit_window(sale_date: datetime, now: datetime | None = None) -> bool:
    now = now or datetime.now()
    # 24h00m00s exactly is still editable
    return now - sale_date <= EDIT_WINDOW


def can_edit(
    actor_role: str,
    sale_owner_id: int | None,
    actor_id: int | None,
    sale_date: datetime,
    now: datetime | None = None,
) -> bool:
    """Managers and admins may always edit; chatters only their own sales inside the window."""

    if actor_role in PRIVILEGED_ROLES:
        return True
    if sale_owner_id is None or sale_owner_id != actor_id:
        return False
    return within_edit_window(sale_date, now)


def edit_state(sale_date: datetime, now: datetime | None = None) -> str:
    if within_edit_window(sale_date, now):
        return EDITABLE_BY_OWNER
    return LOCKED_FOR_OWNER
