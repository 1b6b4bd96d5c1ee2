"""
Case Lifecycle Deadline Models

Key components:
- DeadlineRule: immutable rule-table entry (anchor + offset)
- SecondaryDates: named case events that secondary rules anchor on
- CaseFile: the per-case input to timeline computation
- Deadline: a concrete, computed deadline for one case

A Deadline's due date is derived purely from its anchor and its rule; it is
never edited on its own. Re-evaluate the rule to move it.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..clock import Instant, days_past, days_until
from ..exceptions import InvalidArgumentError
from .enums import AnchorSelector, DeadlineKind, DeadlineStatus, OffsetDirection


# Namespace for deterministic deadline identifiers
DEADLINE_NAMESPACE = uuid.UUID("5b0f3c1e-8d0a-4f57-9a44-2c7a4d1e6b90")

# Secondary anchor keys (besides "received:<FORM>" / "expiry:<FORM>")
CLIENT_BIRTH_DATE = "client_birth_date"
STATEMENT_OF_CLAIM_ISSUED = "statement_of_claim_issued"
PRETRIAL_CONFERENCE = "pretrial_conference"

RECEIVED_PREFIX = "received:"
EXPIRY_PREFIX = "expiry:"


def event_date(value: Any, name: str) -> date:
    """
    Calendar date of a case event.

    Raises:
        InvalidArgumentError: ``value`` is neither a date nor a datetime
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidArgumentError(
        message=f"{name} must be a date, got {type(value).__name__}",
        details={"field": name, "value": repr(value)},
    )


# =============================================================================
# Deadline Rule
# =============================================================================

@dataclass(frozen=True)
class DeadlineRule:
    """
    One entry of the deadline rule table.

    Attributes:
        id: Unique rule identifier within a pack
        kind: Deadline kind produced by this rule
        anchor_selector: Where the anchor date comes from
        anchor_key: Secondary date key, or referenced DeadlineKind value
        offset_days: Calendar (or business) days from the anchor
        offset_months: Months from the anchor (day-of-month preserved)
        direction: Before or after the anchor
        critical: Missing it harms the client's claim
        business_days: Count offset_days on the business-day calendar
        tolls_for_minors: Date would be subject to minority tolling
        description: Human-readable description copied onto deadlines
    """
    id: str
    kind: DeadlineKind
    anchor_selector: AnchorSelector
    description: str
    offset_days: Optional[int] = None
    offset_months: Optional[int] = None
    direction: OffsetDirection = OffsetDirection.AFTER
    anchor_key: Optional[str] = None
    critical: bool = False
    business_days: bool = False
    tolls_for_minors: bool = False
    enabled: bool = True

    def __post_init__(self) -> None:
        if (self.offset_days is None) == (self.offset_months is None):
            raise InvalidArgumentError(
                message=f"Rule '{self.id}' must set exactly one of offset_days/offset_months",
                details={"rule_id": self.id},
            )
        offset = self.offset_days if self.offset_days is not None else self.offset_months
        if offset < 0:
            raise InvalidArgumentError(
                message=f"Rule '{self.id}' offset must be non-negative; use direction",
                details={"rule_id": self.id, "offset": offset},
            )
        if self.business_days and self.offset_days is None:
            raise InvalidArgumentError(
                message=f"Rule '{self.id}' business_days requires offset_days",
                details={"rule_id": self.id},
            )
        if self.anchor_selector != AnchorSelector.PRIMARY_ANCHOR and not self.anchor_key:
            raise InvalidArgumentError(
                message=f"Rule '{self.id}' anchor selector {self.anchor_selector.value} needs anchor_key",
                details={"rule_id": self.id},
            )

    @property
    def sign(self) -> int:
        return -1 if self.direction == OffsetDirection.BEFORE else 1

    @property
    def display_offset(self) -> str:
        """e.g. '30 days before', '24 months after', '10 business days after'."""
        if self.offset_months is not None:
            amount = f"{self.offset_months} months"
        elif self.business_days:
            amount = f"{self.offset_days} business days"
        else:
            amount = f"{self.offset_days} days"
        return f"{amount} {self.direction.value}"


# =============================================================================
# Case Inputs
# =============================================================================

@dataclass(frozen=True)
class SecondaryDates:
    """
    Named case events that secondary rules anchor on.

    ``received_dates`` and ``expiry_dates`` are keyed by form or document
    name (e.g. "OCF1", "OCF3", "LAT_DENIAL") and are addressed in rules as
    ``received:<name>`` and ``expiry:<name>``.
    """
    client_birth_date: Optional[date] = None
    statement_of_claim_issued_date: Optional[date] = None
    pretrial_conference_date: Optional[date] = None
    received_dates: Mapping[str, date] = field(default_factory=dict)
    expiry_dates: Mapping[str, date] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Datetimes collapse to their calendar date; anything else is rejected.
        for name in ("client_birth_date", "statement_of_claim_issued_date", "pretrial_conference_date"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, event_date(value, name))
        for name in ("received_dates", "expiry_dates"):
            dates = getattr(self, name)
            if not isinstance(dates, Mapping):
                raise InvalidArgumentError(
                    message=f"{name} must be a mapping of name to date",
                    details={"field": name, "value": repr(dates)},
                )
            object.__setattr__(self, name, {
                key: event_date(value, f"{name}[{key}]") for key, value in dates.items()
            })

    def lookup(self, key: str) -> Optional[date]:
        """Resolve an anchor key; None when the event has not happened."""
        if key == CLIENT_BIRTH_DATE:
            return self.client_birth_date
        if key == STATEMENT_OF_CLAIM_ISSUED:
            return self.statement_of_claim_issued_date
        if key == PRETRIAL_CONFERENCE:
            return self.pretrial_conference_date
        if key.startswith(RECEIVED_PREFIX):
            return self.received_dates.get(key[len(RECEIVED_PREFIX):])
        if key.startswith(EXPIRY_PREFIX):
            return self.expiry_dates.get(key[len(EXPIRY_PREFIX):])
        return None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> SecondaryDates:
        """Build from a plain dict using the field names above."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise InvalidArgumentError(
                message=f"Secondary dates must be a mapping, got {type(data).__name__}",
                details={"value": repr(data)},
            )
        unknown = set(data) - {
            "client_birth_date",
            "statement_of_claim_issued_date",
            "pretrial_conference_date",
            "received_dates",
            "expiry_dates",
        }
        if unknown:
            raise InvalidArgumentError(
                message=f"Unknown secondary date fields: {sorted(unknown)}",
                details={"fields": sorted(unknown)},
            )
        return cls(
            client_birth_date=data.get("client_birth_date"),
            statement_of_claim_issued_date=data.get("statement_of_claim_issued_date"),
            pretrial_conference_date=data.get("pretrial_conference_date"),
            received_dates=data.get("received_dates") or {},
            expiry_dates=data.get("expiry_dates") or {},
        )


@dataclass(frozen=True)
class CaseFile:
    """The slice of a case record the engine needs."""
    case_id: str
    title: str
    date_of_loss: date
    secondary: SecondaryDates = field(default_factory=SecondaryDates)


# =============================================================================
# Deadline
# =============================================================================

def deadline_id(case_id: str, rule_id: str, anchor_used: date) -> str:
    """Stable identifier: same case, rule and anchor always give the same id."""
    return str(uuid.uuid5(DEADLINE_NAMESPACE, f"{case_id}|{rule_id}|{anchor_used.isoformat()}"))


@dataclass
class Deadline:
    """
    A computed deadline for a specific case.

    Created in bulk by the TimelineCalculator. ``status`` is the only field
    callers are expected to change.
    """
    id: str
    case_id: str
    kind: DeadlineKind
    description: str
    due_date: date
    anchor_used: date
    rule_id: str
    anchor_selector: AnchorSelector
    status: DeadlineStatus = DeadlineStatus.ACTIVE
    critical: bool = False
    auto_generated: bool = True

    @property
    def is_open(self) -> bool:
        return self.status in {DeadlineStatus.ACTIVE, DeadlineStatus.OVERDUE}

    def days_until_due(self, now: Instant) -> int:
        """Days until due, rounded up; negative once past."""
        return days_until(self.due_date, now)

    def days_overdue(self, now: Instant) -> int:
        """Days past due, rounded up; 0 while not yet due."""
        return max(0, days_past(self.due_date, now))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "case_id": self.case_id,
            "kind": self.kind.value,
            "description": self.description,
            "due_date": self.due_date.isoformat(),
            "anchor_used": self.anchor_used.isoformat(),
            "rule_id": self.rule_id,
            "anchor_selector": self.anchor_selector.value,
            "status": self.status.value,
            "critical": self.critical,
            "auto_generated": self.auto_generated,
        }
