from datetime import datetime, timedelta

from app.core.constants import ROLE_ADMIN, ROLE_CHATTER, ROLE_MANAGER
from app.core.sale_rules import (
    EDITABLE_BY_OWNER,
    LOCKED_FOR_OWNER,
    can_edit,
    classify_status,
    edit_deadline,
    edit_state,
    within_edit_window,
)

NOW = datetime(2026, 3, 15, 12, 0, 0)


def test_backdated_sale_is_offline():
    assert classify_status(NOW - timedelta(days=10), was_backdated=True, now=NOW) == "OFFLINE"


def test_live_sale_is_online():
    assert classify_status(NOW, was_backdated=False, now=NOW) == "ONLINE"


def test_backdate_flag_wins_even_for_current_timestamp():
    assert classify_status(NOW, was_backdated=True, now=NOW) == "OFFLINE"


def test_unflagged_sale_far_in_the_past_is_offline():
    assert classify_status(NOW - timedelta(hours=2), was_backdated=False, now=NOW) == "OFFLINE"


def test_unflagged_sale_in_the_future_is_offline():
    assert classify_status(NOW + timedelta(minutes=1), was_backdated=False, now=NOW) == "OFFLINE"


def test_edit_window_boundary_is_inclusive():
    sale_date = NOW - timedelta(hours=24)
    assert within_edit_window(sale_date, NOW) is True
    assert edit_state(sale_date, NOW) == EDITABLE_BY_OWNER


def test_edit_window_closes_one_second_after_24_hours():
    sale_date = NOW - timedelta(hours=24, seconds=1)
    assert within_edit_window(sale_date, NOW) is False
    assert edit_state(sale_date, NOW) == LOCKED_FOR_OWNER


def test_edit_deadline_is_24_hours_after_sale_date():
    assert edit_deadline(NOW) == datetime(2026, 3, 16, 12, 0, 0)


def test_owner_can_edit_inside_window_only():
    recent = NOW - timedelta(hours=3)
    old = NOW - timedelta(days=2)
    assert can_edit(ROLE_CHATTER, 7, 7, recent, NOW) is True
    assert can_edit(ROLE_CHATTER, 7, 7, old, NOW) is False


def test_chatter_cannot_edit_someone_elses_sale():
    assert can_edit(ROLE_CHATTER, 7, 8, NOW, NOW) is False


def test_managers_and_admins_edit_regardless_of_age():
    old = NOW - timedelta(days=90)
    assert can_edit(ROLE_MANAGER, 7, 8, old, NOW) is True
    assert can_edit(ROLE_ADMIN, 7, 8, old, NOW) is True
