from types import SimpleNamespace

import pytest

from app.context import RequestTracker
from app.core.constants import ROLE_ADMIN, ROLE_CHATTER, ROLE_MANAGER
from app.errors import ForbiddenError
from app.permissions import Authorization, Capability


def _auth(role):
    return Authorization.for_user(SimpleNamespace(role=role))


def test_chatter_capabilities_are_limited():
    chatter = _auth(ROLE_CHATTER)
    assert chatter.can(Capability.LOG_OWN_SALES)
    assert chatter.can(Capability.VIEW_OWN_DASHBOARD)
    assert not chatter.can(Capability.VIEW_ALL_SALES)
    assert not chatter.can(Capability.MANAGE_CREATORS)
    with pytest.raises(ForbiddenError):
        chatter.require(Capability.DELETE_SALES)


def test_manager_manages_sales_but_not_finances():
    manager = _auth(ROLE_MANAGER)
    assert manager.can(Capability.REASSIGN_SALES)
    assert manager.can(Capability.LOG_SALES_FOR_OTHERS)
    assert manager.can(Capability.MANAGE_SHIFTS)
    assert not manager.can(Capability.MANAGE_FINANCIALS)
    assert not manager.can(Capability.MANAGE_PAYMENTS)
    assert not manager.can(Capability.VIEW_ADMIN_RECAP)


def test_admin_has_every_capability():
    admin = _auth(ROLE_ADMIN)
    assert all(admin.can(capability) for capability in Capability)


def test_unknown_role_has_nothing():
    assert not _auth("GUEST").can(Capability.LOG_OWN_SALES)


def test_request_tracker_counts_nested_requests():
    tracker = RequestTracker()
    assert tracker.in_flight == 0
    with tracker.track():
        with tracker.track():
            assert tracker.in_flight == 2
        assert tracker.in_flight == 1
    assert tracker.in_flight == 0


def test_request_tracker_releases_on_error():
    tracker = RequestTracker()
    with pytest.raises(RuntimeError):
        with tracker.track():
            raise RuntimeError("boom")
    assert tracker.in_flight == 0
