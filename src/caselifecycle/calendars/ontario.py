"""
Ontario statutory holiday calendar.

Holidays observed for court and tribunal business-day counting:
New Year's Day, Family Day, Good Friday, Victoria Day, Canada Day,
Civic Holiday (optional), Labour Day, Thanksgiving, Christmas Day and
Boxing Day. Fixed-date holidays that land on a weekend move to the
following weekday(s).
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Optional

from .base import BaseCalendar


def nth_weekday(year: int, month: int, weekday: int, n: int) -> date:
    """The nth ``weekday`` (0=Monday) of a month."""
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset, weeks=n - 1)


def easter_sunday(year: int) -> date:
    """Western Easter (Anonymous Gregorian algorithm)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def victoria_day(year: int) -> date:
    """Last Monday strictly before May 25."""
    may_24 = date(year, 5, 24)
    return may_24 - timedelta(days=may_24.weekday())


@lru_cache(maxsize=128)
def ontario_holidays(
    year: int,
    include_civic_holiday: bool = True,
    family_day_since: int = 2008,
) -> Mapping[date, str]:
    """
    Ontario holidays for a year (cached), keyed by date.

    Substitute days for weekend fixed-date holidays are included with an
    "(Observed)" suffix. The returned mapping is read-only.
    """
    named: dict[date, str] = {
        easter_sunday(year) - timedelta(days=2): "Good Friday",
        victoria_day(year): "Victoria Day",
        nth_weekday(year, 9, 0, 1): "Labour Day",
        nth_weekday(year, 10, 0, 2): "Thanksgiving Day",
    }
    if year >= family_day_since:
        named[nth_weekday(year, 2, 0, 3)] = "Family Day"
    if include_civic_holiday:
        named[nth_weekday(year, 8, 0, 1)] = "Civic Holiday"

    fixed = [
        (date(year, 1, 1), "New Year's Day"),
        (date(year, 7, 1), "Canada Day"),
        (date(year, 12, 25), "Christmas Day"),
        (date(year, 12, 26), "Boxing Day"),
    ]
    named.update({actual: name for actual, name in fixed})
    for actual, name in fixed:
        if actual.weekday() >= 5:
            # Substitute on the first weekday not already taken, so a
            # weekend Christmas pushes Boxing Day's substitute to Tuesday.
            substitute = actual + timedelta(days=1)
            while substitute.weekday() >= 5 or substitute in named:
                substitute += timedelta(days=1)
            named[substitute] = f"{name} (Observed)"
    return MappingProxyType(named)


@dataclass
class OntarioCalendar(BaseCalendar):
    """
    Ontario (Employment Standards Act) holidays with weekend substitution.

    Holiday tables come from the module-level cache; instances carry only
    their settings and are never mutated.
    """

    include_civic_holiday: bool = True
    family_day_since: int = 2008

    def holidays_for_year(self, year: int) -> Mapping[date, str]:
        """Map of holiday date to name, including substitute days."""
        return ontario_holidays(year, self.include_civic_holiday, self.family_day_since)

    def is_holiday(self, d: date) -> bool:
        return d in self.holidays_for_year(d.year)

    def holiday_name(self, d: date) -> Optional[str]:
        return self.holidays_for_year(d.year).get(d)


ONTARIO_CALENDAR = OntarioCalendar()


def is_ontario_business_day(d: date) -> bool:
    return ONTARIO_CALENDAR.is_business_day(d)


def add_ontario_business_days(start: date, days: int) -> date:
    return ONTARIO_CALENDAR.add_business_days(start, days)
