"""Per-request application context and the in-flight request counter."""
from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from fastapi import Depends, Request

from app.auth import User
from app.dependencies import get_current_user
from app.permissions import Authorization, Capability


class RequestTracker:
    """Counts requests currently being handled."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @contextmanager
    def track(self) -> Iterator[None]:
        with self._lock:
            self._in_flight += 1
        try:
            yield
        finally:
            with self._lock:
                self._in_flight -= 1


tracker = RequestTracker()


@dataclass
class RequestContext:
    user: User
    authorization: Authorization
    tracker: RequestTracker

    def can(self, capability: Capability) -> bool:
        return self.authorization.can(capability)

    def require(self, capability: Capability) -> None:
        self.authorization.require(capability)

    @property
    def user_id(self) -> int:
        return self.user.id


def get_request_context(request: Request, user: User = Depends(get_current_user)) -> RequestContext:
    """FastAPI dependency bundling the acting user with their capabilities."""

    return RequestContext(
        user=user,
        authorization=Authorization.for_user(user),
        tracker=getattr(request.app.state, "tracker", tracker),
    )
