"""
Case Lifecycle Treatment Models

Treatment events are supplied by the caller (append-only); gaps are derived
and recomputed on every scan.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from .deadline import event_date
from .enums import TreatmentKind


@dataclass(frozen=True)
class TreatmentEvent:
    """One attended treatment or medical record entry."""
    date: date
    kind: TreatmentKind
    provider_name: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", event_date(self.date, "date"))


@dataclass(frozen=True)
class MedicalProvider:
    """
    A treating provider as tracked on the case file.

    ``gap_detected`` is set by the caller once a gap alert has been raised
    for this provider; it suppresses further gap tasks.
    """
    id: str
    name: str
    last_record_date: Optional[date] = None
    gap_detected: bool = False

    def __post_init__(self) -> None:
        if self.last_record_date is not None:
            object.__setattr__(
                self, "last_record_date", event_date(self.last_record_date, "last_record_date"),
            )


@dataclass(frozen=True)
class Gap:
    """
    An interval without treatment longer than the threshold.

    ``open_ended`` gaps run from the last event to "now" and have
    ``end_date`` set to the scan date.
    """
    case_id: str
    start_date: date
    end_date: date
    duration_days: int
    provider_name: Optional[str] = None
    open_ended: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "case_id": self.case_id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "duration_days": self.duration_days,
            "provider_name": self.provider_name,
            "open_ended": self.open_ended,
        }
