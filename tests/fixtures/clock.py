"""Controllable clock and shared constants for lifecycle tests."""

from datetime import UTC, datetime, timedelta

RESOURCE = "/teams/T1/channels"
TARGET_URL = "https://host/api/notifications"
START_TIME = datetime(2026, 1, 5, 9, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, now: datetime = START_TIME) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now
