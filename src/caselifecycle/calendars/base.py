"""
Holiday calendar base.

Business-day arithmetic for rules expressed in business days (for example,
OCF-18 deemed approval after 10 business days). Calendars are pluggable so a
different jurisdiction's rule pack can bring its own holidays.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Protocol, runtime_checkable


@runtime_checkable
class HolidayCalendar(Protocol):
    """Anything that can answer holiday and business-day questions."""

    def is_holiday(self, d: date) -> bool:
        ...

    def is_business_day(self, d: date) -> bool:
        ...

    def add_business_days(self, start: date, days: int) -> date:
        ...


@dataclass
class BaseCalendar(ABC):
    """
    Shared business-day logic.

    Subclasses decide what a holiday is; weekends come from ``weekend_days``
    (0=Monday, 6=Sunday).
    """

    weekend_days: frozenset[int] = field(default_factory=lambda: frozenset({5, 6}))

    @abstractmethod
    def is_holiday(self, d: date) -> bool:
        ...

    def is_weekend(self, d: date) -> bool:
        return d.weekday() in self.weekend_days

    def is_business_day(self, d: date) -> bool:
        return not self.is_weekend(d) and not self.is_holiday(d)

    def add_business_days(self, start: date, days: int) -> date:
        """
        Step ``days`` business days away from ``start``.

        The start date itself is never counted. Negative values step
        backwards.
        """
        step = timedelta(days=1 if days > 0 else -1)
        remaining = abs(days)
        current = start
        while remaining:
            current += step
            if self.is_business_day(current):
                remaining -= 1
        return current

    def business_days_between(self, start: date, end: date) -> int:
        """Business days in (start, end]."""
        count = 0
        current = start + timedelta(days=1)
        while current <= end:
            if self.is_business_day(current):
                count += 1
            current += timedelta(days=1)
        return count

    def next_business_day(self, d: date) -> date:
        """``d`` itself if it is a business day, otherwise the next one."""
        while not self.is_business_day(d):
            d += timedelta(days=1)
        return d


@dataclass
class NoHolidayCalendar(BaseCalendar):
    """Weekends only. Useful for tests."""

    def is_holiday(self, d: date) -> bool:
        return False


@dataclass
class FixedHolidayCalendar(BaseCalendar):
    """Holidays supplied as an explicit set of dates."""

    holidays: frozenset[date] = field(default_factory=frozenset)

    def is_holiday(self, d: date) -> bool:
        return d in self.holidays

    @classmethod
    def from_dates(cls, *dates: date) -> FixedHolidayCalendar:
        return cls(holidays=frozenset(dates))
