"""
Case Lifecycle Treatment Gap Detector

Finds intervals without treatment longer than a threshold, either in a
chronological event list or per provider from the last record date, and
turns them into follow-up tasks for the law clerk.

Gaps are derived on every scan; nothing here is stored.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from ..clock import Clock, Instant, SystemClock, as_date, as_datetime, days_past, days_since
from ..exceptions import InvalidArgumentError
from ..models import (
    Gap,
    MedicalProvider,
    StaffRole,
    Task,
    TaskCategory,
    TaskMetadata,
    TaskPriority,
    TreatmentEvent,
    TriggerReason,
)
from .task_generator import task_id

logger = logging.getLogger(__name__)

DEFAULT_GAP_THRESHOLD_DAYS = 14

# Gaps longer than this are high priority
HIGH_PRIORITY_GAP_DAYS = 30


def _check_threshold(threshold_days: int) -> None:
    if threshold_days < 0:
        raise InvalidArgumentError(
            message="threshold_days must be non-negative",
            details={"threshold_days": threshold_days},
        )


@dataclass
class TreatmentGapDetector:
    """
    Detects treatment gaps and builds alert tasks.

    Usage:
        detector = TreatmentGapDetector(threshold_days=14, clock=clock)
        gaps = detector.detect_gaps(events, case_id="case-001")
        tasks = detector.build_gap_tasks(gaps, "Smith v. Jones", requested_by="u-17")
    """

    threshold_days: int = DEFAULT_GAP_THRESHOLD_DAYS
    clock: Clock = field(default_factory=SystemClock)

    def __post_init__(self) -> None:
        _check_threshold(self.threshold_days)

    def _now(self, now: Optional[Instant]) -> datetime:
        return as_datetime(now if now is not None else self.clock.now())

    def detect_gaps(
        self,
        events: Iterable[TreatmentEvent],
        now: Optional[Instant] = None,
        case_id: str = "",
        threshold_days: Optional[int] = None,
    ) -> list[Gap]:
        """
        Gaps between consecutive events, plus a trailing open-ended gap from
        the last event to ``now``.

        A gap is reported when its whole-day length is strictly greater than
        the threshold. Each gap is attributed to the provider seen at its
        start.
        """
        threshold = self.threshold_days if threshold_days is None else threshold_days
        _check_threshold(threshold)
        current = self._now(now)

        ordered = sorted(events, key=lambda e: e.date)
        gaps: list[Gap] = []

        for previous, following in zip(ordered, ordered[1:]):
            days_between = (following.date - previous.date).days
            if days_between > threshold:
                gaps.append(Gap(
                    case_id=case_id,
                    start_date=previous.date,
                    end_date=following.date,
                    duration_days=days_between,
                    provider_name=previous.provider_name,
                ))

        if ordered:
            last = ordered[-1]
            trailing = days_since(last.date, current)
            if trailing > threshold:
                gaps.append(Gap(
                    case_id=case_id,
                    start_date=last.date,
                    end_date=as_date(current),
                    duration_days=trailing,
                    provider_name=last.provider_name,
                    open_ended=True,
                ))

        return gaps

    def build_gap_tasks(
        self,
        gaps: Iterable[Gap],
        case_title: str,
        requested_by: str,
        flagged_providers: Iterable[str] = (),
        now: Optional[Instant] = None,
    ) -> list[Task]:
        """
        One follow-up task per gap.

        Gaps for providers in ``flagged_providers`` (already alerted) are
        suppressed.
        """
        current = self._now(now)
        flagged = set(flagged_providers)
        tasks: list[Task] = []

        for gap in gaps:
            if gap.provider_name is not None and gap.provider_name in flagged:
                logger.debug(
                    "Suppressing gap task for %s on case %s: already flagged",
                    gap.provider_name, gap.case_id,
                )
                continue
            tasks.append(self._gap_task(gap, case_title, requested_by, current))

        return tasks

    def scan_providers(
        self,
        providers: Iterable[MedicalProvider],
        case_id: str,
        case_title: str,
        requested_by: str,
        threshold_days: Optional[int] = None,
        now: Optional[Instant] = None,
    ) -> list[Task]:
        """
        Gap tasks from each provider's last record date.

        Providers with no records yet, or already marked ``gap_detected``,
        are skipped. Elapsed days are rounded up.
        """
        threshold = self.threshold_days if threshold_days is None else threshold_days
        _check_threshold(threshold)
        current = self._now(now)
        tasks: list[Task] = []

        for provider in providers:
            if provider.last_record_date is None or provider.gap_detected:
                continue
            elapsed = days_past(provider.last_record_date, current)
            if elapsed <= threshold:
                continue
            gap = Gap(
                case_id=case_id,
                start_date=provider.last_record_date,
                end_date=as_date(current),
                duration_days=elapsed,
                provider_name=provider.name,
                open_ended=True,
            )
            tasks.append(self._gap_task(gap, case_title, requested_by, current))

        return tasks

    def _gap_task(
        self,
        gap: Gap,
        case_title: str,
        requested_by: str,
        current: datetime,
    ) -> Task:
        provider = gap.provider_name or "Unknown Provider"
        if gap.open_ended:
            description = (
                f"No records from {provider} in {gap.duration_days} days. "
                f"Client should resume treatment to document ongoing issues."
            )
        else:
            description = (
                f"No treatment from {provider} between {gap.start_date.isoformat()} "
                f"and {gap.end_date.isoformat()} ({gap.duration_days} days). "
                f"Confirm the reason with the client."
            )
        return Task(
            id=task_id(
                TriggerReason.TREATMENT_GAP.value,
                gap.case_id,
                provider,
                gap.start_date.isoformat(),
            ),
            case_id=gap.case_id,
            title=f"Treatment Gap Detected - {provider}",
            description=f"{case_title}: {description}",
            assigned_to_role=StaffRole.LAW_CLERK,
            created_by=requested_by,
            created_at=current,
            priority=(
                TaskPriority.HIGH if gap.duration_days > HIGH_PRIORITY_GAP_DAYS
                else TaskPriority.MEDIUM
            ),
            category=TaskCategory.CLIENT_COMMUNICATION,
            metadata=TaskMetadata(
                trigger_reason=TriggerReason.TREATMENT_GAP,
                provider_name=gap.provider_name,
                gap_days=gap.duration_days,
                gap_start_date=gap.start_date,
            ),
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def detect_gaps(
    events: Iterable[TreatmentEvent],
    threshold_days: int = DEFAULT_GAP_THRESHOLD_DAYS,
    now: Optional[Instant] = None,
    case_id: str = "",
) -> list[Gap]:
    """Detect gaps with a one-off detector."""
    return TreatmentGapDetector(threshold_days=threshold_days).detect_gaps(
        events, now=now, case_id=case_id,
    )


def build_gap_tasks(
    gaps: Iterable[Gap],
    case_title: str,
    requested_by: str,
    flagged_providers: Iterable[str] = (),
    now: Optional[Instant] = None,
) -> list[Task]:
    return TreatmentGapDetector().build_gap_tasks(
        gaps, case_title, requested_by, flagged_providers=flagged_providers, now=now,
    )


def scan_providers(
    providers: Iterable[MedicalProvider],
    case_id: str,
    case_title: str,
    requested_by: str,
    threshold_days: int = DEFAULT_GAP_THRESHOLD_DAYS,
    now: Optional[Instant] = None,
) -> list[Task]:
    return TreatmentGapDetector(threshold_days=threshold_days).scan_providers(
        providers, case_id, case_title, requested_by, now=now,
    )
