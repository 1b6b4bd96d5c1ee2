"""
Case Lifecycle Calendars

Holiday calendars for business-day deadline rules.

Usage:
    from caselifecycle.calendars import OntarioCalendar

    calendar = OntarioCalendar()
    approval = calendar.add_business_days(date(2024, 12, 20), 10)
"""
from __future__ import annotations

from .base import (
    BaseCalendar,
    FixedHolidayCalendar,
    HolidayCalendar,
    NoHolidayCalendar,
)
from .ontario import (
    ONTARIO_CALENDAR,
    OntarioCalendar,
    add_ontario_business_days,
    easter_sunday,
    is_ontario_business_day,
    ontario_holidays,
)

CALENDARS: dict[str, type[BaseCalendar]] = {
    "ontario": OntarioCalendar,
    "weekends_only": NoHolidayCalendar,
}

__all__ = [
    "HolidayCalendar",
    "BaseCalendar",
    "NoHolidayCalendar",
    "FixedHolidayCalendar",
    "OntarioCalendar",
    "ONTARIO_CALENDAR",
    "CALENDARS",
    "easter_sunday",
    "is_ontario_business_day",
    "add_ontario_business_days",
    "ontario_holidays",
]
