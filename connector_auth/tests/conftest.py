"""
Shared fixtures for connector auth unit tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from connector_auth.app.trust import TrustedHostRegistry


class FakeClock:
    """Settable clock for trust and token expiry tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock():
    """Clock frozen at a fixed instant."""
    return FakeClock(datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def registry(clock):
    """Trusted host registry driven by the fake clock."""
    return TrustedHostRegistry(clock=clock)
