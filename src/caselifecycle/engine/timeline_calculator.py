"""
Case Lifecycle Timeline Calculator

Derives the deadline timeline for a case from its date of loss and any
secondary event dates, using an injected rule table and holiday calendar.

Key features:
- Three anchor selectors (date of loss, named case event, earlier deadline)
- Calendar-day, business-day and calendar-month offsets, before or after
- Month arithmetic clamps to the end of shorter months
- Rules whose anchor is missing are skipped, never raised
- Output sorted by due date; ties keep rule declaration order

The calculator never reads a clock: the same inputs always give the same
timeline, with the same deadline ids.
"""
from __future__ import annotations

import calendar as _calendar
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Mapping, Optional, Union

from ..calendars import HolidayCalendar, OntarioCalendar
from ..exceptions import InvalidArgumentError, TimelineCalculationError
from ..models import (
    CLIENT_BIRTH_DATE,
    AnchorSelector,
    CaseFile,
    Deadline,
    DeadlineKind,
    DeadlineRule,
    DeadlineRuleTable,
    SecondaryDates,
    deadline_id,
    event_date,
)

logger = logging.getLogger(__name__)

AGE_OF_MAJORITY_YEARS = 18

SecondaryInput = Union[SecondaryDates, Mapping[str, Any], None]


# =============================================================================
# Date Arithmetic
# =============================================================================

def add_months(start: date, months: int) -> date:
    """
    Shift ``start`` by whole calendar months.

    The day of month is kept where possible and clamped to the last day of
    the target month otherwise (Jan 31 + 1 month -> Feb 28/29).
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = _calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def is_minor_on(birth_date: date, on: date) -> bool:
    """True if someone born on ``birth_date`` is under 18 on ``on``."""
    return add_months(birth_date, AGE_OF_MAJORITY_YEARS * 12) > on


# =============================================================================
# Timeline Result
# =============================================================================

@dataclass
class TimelineResult:
    """
    Deadlines computed for one case plus the rules that did not resolve.

    ``skipped`` holds rule ids whose anchor was absent; disabled rules are
    not listed.
    """
    case_id: str
    deadlines: list[Deadline] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    def by_kind(self, kind: DeadlineKind) -> Optional[Deadline]:
        return next((d for d in self.deadlines if d.kind == kind), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "case_id": self.case_id,
            "deadlines": [d.to_dict() for d in self.deadlines],
            "skipped": list(self.skipped),
        }


# =============================================================================
# Timeline Calculator
# =============================================================================

@dataclass
class TimelineCalculator:
    """
    Computes case deadlines from a rule table.

    Usage:
        pack = load_default_pack()
        calculator = TimelineCalculator(pack.rule_table, pack.build_calendar())

        deadlines = calculator.compute_timeline(
            case_id="case-001",
            primary_anchor_date=date(2024, 1, 1),
            secondary_dates={"received_dates": {"OCF1": date(2024, 1, 10)}},
        )
    """

    rule_table: DeadlineRuleTable

    # Calendar for business-day offsets
    calendar: HolidayCalendar = field(default_factory=OntarioCalendar)

    def compute_timeline(
        self,
        case_id: str,
        primary_anchor_date: date,
        secondary_dates: SecondaryInput = None,
    ) -> list[Deadline]:
        """
        Compute the deadline timeline for a case.

        Args:
            case_id: Case identifier copied onto every deadline
            primary_anchor_date: Date of loss
            secondary_dates: SecondaryDates, or a dict with the same fields

        Returns:
            Deadlines sorted ascending by due date

        Raises:
            InvalidArgumentError: Missing case id or primary anchor
        """
        return self.resolve_dates(case_id, primary_anchor_date, secondary_dates).deadlines

    def compute_for_case(self, case: CaseFile) -> list[Deadline]:
        """Compute the timeline for a CaseFile."""
        return self.resolve(case).deadlines

    def resolve(self, case: CaseFile) -> TimelineResult:
        """Compute the timeline for a CaseFile, reporting skipped rules."""
        return self.resolve_dates(case.case_id, case.date_of_loss, case.secondary)

    def resolve_dates(
        self,
        case_id: str,
        primary_anchor_date: date,
        secondary_dates: SecondaryInput = None,
    ) -> TimelineResult:
        if not case_id:
            raise InvalidArgumentError(message="case_id is required")
        primary = self._require_date(primary_anchor_date, case_id)
        secondary = self._coerce_secondary(secondary_dates, case_id)

        birth_date = secondary.lookup(CLIENT_BIRTH_DATE)
        client_is_minor = birth_date is not None and is_minor_on(birth_date, primary)

        result = TimelineResult(case_id=case_id)
        resolved_by_kind: dict[DeadlineKind, Deadline] = {}
        ordered: list[tuple[date, int, Deadline]] = []

        for index, rule in enumerate(self.rule_table):
            if not rule.enabled:
                continue

            anchor = self._anchor_for(rule, primary, secondary, resolved_by_kind)
            if anchor is None:
                logger.debug(
                    "Skipping rule %s for case %s: anchor %s not available",
                    rule.id, case_id, rule.anchor_key,
                )
                result.skipped.append(rule.id)
                continue

            try:
                due = self.apply_offset(rule, anchor)
            except (OverflowError, ValueError) as e:
                raise TimelineCalculationError(
                    message=f"Rule '{rule.id}' produced an out-of-range date: {e}",
                    details={"rule_id": rule.id, "anchor": anchor.isoformat()},
                    case_id=case_id,
                )

            deadline = Deadline(
                id=deadline_id(case_id, rule.id, anchor),
                case_id=case_id,
                kind=rule.kind,
                description=rule.description,
                due_date=due,
                anchor_used=anchor,
                rule_id=rule.id,
                anchor_selector=rule.anchor_selector,
                critical=rule.critical or (rule.tolls_for_minors and client_is_minor),
            )
            resolved_by_kind.setdefault(rule.kind, deadline)
            ordered.append((due, index, deadline))

        ordered.sort(key=lambda item: (item[0], item[1]))
        result.deadlines = [d for _, _, d in ordered]
        return result

    def apply_offset(self, rule: DeadlineRule, anchor: date) -> date:
        """Due date for ``rule`` measured from ``anchor``."""
        if rule.offset_months is not None:
            return add_months(anchor, rule.sign * rule.offset_months)
        if rule.business_days:
            return self.calendar.add_business_days(anchor, rule.sign * rule.offset_days)
        return anchor + timedelta(days=rule.sign * rule.offset_days)

    def _anchor_for(
        self,
        rule: DeadlineRule,
        primary: date,
        secondary: SecondaryDates,
        resolved_by_kind: dict[DeadlineKind, Deadline],
    ) -> Optional[date]:
        if rule.anchor_selector == AnchorSelector.PRIMARY_ANCHOR:
            return primary
        if rule.anchor_selector == AnchorSelector.SECONDARY_EVENT_DATE:
            return secondary.lookup(rule.anchor_key)
        # OTHER_DEADLINE_EXPIRY
        try:
            kind = DeadlineKind(rule.anchor_key)
        except ValueError:
            return None
        referenced = resolved_by_kind.get(kind)
        return referenced.due_date if referenced else None

    @staticmethod
    def _require_date(value: Any, case_id: str) -> date:
        try:
            return event_date(value, "primary_anchor_date")
        except InvalidArgumentError as e:
            e.case_id = case_id
            raise

    @staticmethod
    def _coerce_secondary(value: SecondaryInput, case_id: str) -> SecondaryDates:
        if isinstance(value, SecondaryDates):
            return value
        try:
            return SecondaryDates.from_mapping(value)
        except InvalidArgumentError as e:
            e.case_id = case_id
            raise
