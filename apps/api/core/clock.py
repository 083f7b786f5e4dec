"""
Injectable clock.

Streak anchoring and report-cache freshness depend on "now". Services take a
Clock instead of reading the wall clock so tests can pin time.
"""
from datetime import date, datetime, timedelta, timezone


class Clock:
    """Source of the current instant (timezone-aware UTC)."""

    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock pinned to a given instant. Naive datetimes are read as UTC."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, **delta) -> None:
        self._instant = self._instant + timedelta(**delta)


def get_clock() -> Clock:
    """FastAPI dependency; overridden in tests."""
    return SystemClock()
