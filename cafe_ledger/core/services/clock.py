"""
Injectable clock and business-day arithmetic.

Ledger code never calls ``datetime.now()`` directly so tests can pin the
closing instant and the outlet's "today".
"""

from abc import ABC, abstractmethod
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo


class Clock(ABC):
    """Source of the current instant (always timezone-aware UTC)."""

    @abstractmethod
    def now(self) -> datetime:
        pass


class SystemClock(Clock):
    """Wall clock."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FixedClock(Clock):
    """Clock pinned to an instant; ``advance`` moves it forward."""

    def __init__(self, moment: datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=UTC)
        self._moment = moment.astimezone(UTC)

    def now(self) -> datetime:
        return self._moment

    def advance(self, **kwargs: float) -> datetime:
        self._moment = self._moment + timedelta(**kwargs)
        return self._moment

    def set(self, moment: datetime) -> None:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=UTC)
        self._moment = moment.astimezone(UTC)


def local_date(moment: datetime, tz_name: str) -> date:
    """Calendar date of an instant in the given timezone."""
    return moment.astimezone(ZoneInfo(tz_name)).date()


def business_day_bounds(day: date, tz_name: str) -> tuple[datetime, datetime]:
    """UTC [start, end) of a local calendar day. DST-safe (days may be 23h or 25h)."""
    tz = ZoneInfo(tz_name)
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)
