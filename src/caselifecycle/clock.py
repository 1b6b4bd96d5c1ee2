"""
Injected clocks.

Every "relative to now" decision in the engine (trigger windows, priority
escalation, overdue scans, trailing treatment gaps) reads time through a
Clock so that callers and tests control it. The timeline calculator never
reads a clock.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Protocol, Union, runtime_checkable

from .exceptions import InvalidArgumentError

Instant = Union[date, datetime]

_ONE_DAY = timedelta(days=1)


@runtime_checkable
class Clock(Protocol):
    """Source of the current instant."""

    def now(self) -> datetime:
        ...


@dataclass(frozen=True)
class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


@dataclass(frozen=True)
class FixedClock:
    """A clock pinned to one instant. Used by tests and replays."""

    instant: datetime

    def now(self) -> datetime:
        return self.instant

    @classmethod
    def on(cls, d: date) -> FixedClock:
        """Clock reading midnight UTC on the given date."""
        return cls(datetime.combine(d, time.min, tzinfo=timezone.utc))


def as_datetime(value: Instant, tzinfo=None) -> datetime:
    """
    Normalize a date or datetime to a datetime.

    Plain dates become midnight. When ``tzinfo`` is given, naive values
    adopt it so they can be compared with an aware "now".
    """
    if isinstance(value, datetime):
        if value.tzinfo is None and tzinfo is not None:
            return value.replace(tzinfo=tzinfo)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=tzinfo)
    raise InvalidArgumentError(
        message=f"Expected a date or datetime, got {type(value).__name__}",
        details={"value": repr(value)},
    )


def as_date(value: Instant) -> date:
    """Calendar date of a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidArgumentError(
        message=f"Expected a date or datetime, got {type(value).__name__}",
        details={"value": repr(value)},
    )


def days_until(target: date, now: Instant) -> int:
    """
    Whole days from ``now`` until midnight of ``target``, rounded up.

    A deadline due tomorrow reads 1 whether "now" is early or late today.
    Negative when the target is already past.
    """
    now_dt = as_datetime(now)
    target_dt = as_datetime(target, tzinfo=now_dt.tzinfo)
    return math.ceil((target_dt - now_dt) / _ONE_DAY)


def days_past(target: date, now: Instant) -> int:
    """
    Whole days ``now`` is past midnight of ``target``, rounded up.

    Any part of a day past the due date counts as a day overdue.
    """
    now_dt = as_datetime(now)
    target_dt = as_datetime(target, tzinfo=now_dt.tzinfo)
    return math.ceil((now_dt - target_dt) / _ONE_DAY)


def days_since(start: date, now: Instant) -> int:
    """Whole days elapsed from midnight of ``start`` until ``now``, rounded down."""
    now_dt = as_datetime(now)
    start_dt = as_datetime(start, tzinfo=now_dt.tzinfo)
    return math.floor((now_dt - start_dt) / _ONE_DAY)
