"""
Case Lifecycle Workflow Task Generator

Turns deadlines into work: trigger-window tasks from the template catalog,
a fixed intake task on case creation, urgent tasks for overdue critical
deadlines and email reminders ahead of critical due dates.

Every "relative to now" decision reads an injected Clock, or an explicit
``now`` argument, never the system time directly. Task and reminder ids are
derived from their inputs so repeated runs produce the same ids.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence

from ..clock import Clock, Instant, SystemClock, as_datetime
from ..exceptions import InvalidArgumentError
from ..models import (
    CaseFile,
    Deadline,
    DeadlineStatus,
    ReminderSpec,
    StaffRole,
    Task,
    TaskCategory,
    TaskMetadata,
    TaskPriority,
    TaskTemplate,
    TaskTemplateCatalog,
    TriggerKind,
    TriggerReason,
)
from .timeline_calculator import TimelineCalculator

logger = logging.getLogger(__name__)

# Namespace for deterministic task and reminder identifiers
TASK_NAMESPACE = uuid.UUID("9e7c2a4b-31f6-4d8e-b5a0-7f1d3c6e2b48")

DEFAULT_REMINDER_LEAD_DAYS: tuple[int, ...] = (7, 3, 1)

OVERDUE_TITLE_PREFIX = "OVERDUE:"


def task_id(*parts: str) -> str:
    return str(uuid.uuid5(TASK_NAMESPACE, "|".join(parts)))


def escalate_priority(default: TaskPriority, days_until_due: int) -> TaskPriority:
    """
    Priority for a task whose deadline is ``days_until_due`` away.

    Inside two weeks the urgency band replaces the template default.
    """
    if days_until_due <= 3:
        return TaskPriority.CRITICAL
    if days_until_due <= 7:
        return TaskPriority.HIGH
    if days_until_due <= 14:
        return TaskPriority.MEDIUM
    return default


# =============================================================================
# Workflow Task Generator
# =============================================================================

@dataclass
class WorkflowTaskGenerator:
    """
    Generates tasks and reminders from deadlines.

    Usage:
        generator = WorkflowTaskGenerator(
            template_catalog=pack.template_catalog,
            timeline_calculator=calculator,
            clock=FixedClock.on(date(2024, 1, 3)),
        )
        tasks = generator.generate_initial_case_tasks(case, requested_by="u-17")
    """

    template_catalog: TaskTemplateCatalog
    timeline_calculator: Optional[TimelineCalculator] = None
    clock: Clock = field(default_factory=SystemClock)
    reminder_lead_days: tuple[int, ...] = DEFAULT_REMINDER_LEAD_DAYS

    def _now(self, now: Optional[Instant]) -> datetime:
        return as_datetime(now if now is not None else self.clock.now())

    # -------------------------------------------------------------------------
    # Trigger-window tasks
    # -------------------------------------------------------------------------

    def generate_from_deadlines(
        self,
        deadlines: Iterable[Deadline],
        case_id: str,
        case_title: str,
        requested_by: str,
        now: Optional[Instant] = None,
    ) -> list[Task]:
        """
        Create tasks for deadlines that have entered their template's window.

        Only active, auto-generated deadlines are considered. A deadline is
        picked up once ``days_until_due <= template.lead_days``.
        """
        current = self._now(now)
        tasks: list[Task] = []

        for deadline in deadlines:
            if deadline.status != DeadlineStatus.ACTIVE or not deadline.auto_generated:
                continue

            template = self.template_catalog.for_deadline(deadline.kind)
            if template is None:
                logger.debug(
                    "No task template for deadline kind %s (deadline %s)",
                    deadline.kind.value, deadline.id,
                )
                continue

            days_until_due = deadline.days_until_due(current)
            if days_until_due > template.lead_days:
                continue

            tasks.append(Task(
                id=task_id(TriggerReason.DEADLINE_WINDOW.value, case_id, deadline.id, template.id),
                case_id=case_id,
                title=f"{template.name} - {case_title}",
                description=(
                    f"{template.description}\n\n"
                    f"Deadline: {deadline.description}\n"
                    f"Due: {deadline.due_date.isoformat()}"
                ),
                assigned_to_role=template.default_assignee_role,
                created_by=requested_by,
                created_at=current,
                due_date=deadline.due_date,
                priority=escalate_priority(template.default_priority, days_until_due),
                category=template.category,
                metadata=TaskMetadata(
                    trigger_reason=TriggerReason.DEADLINE_WINDOW,
                    template_id=template.id,
                    deadline_id=deadline.id,
                    deadline_kind=deadline.kind,
                ),
            ))

        return tasks

    # -------------------------------------------------------------------------
    # Case opening
    # -------------------------------------------------------------------------

    def generate_initial_case_tasks(
        self,
        case_data: CaseFile,
        requested_by: str,
        now: Optional[Instant] = None,
    ) -> list[Task]:
        """
        Tasks for a newly created case: intake first, then any deadline
        tasks already inside their window.
        """
        if self.timeline_calculator is None:
            raise InvalidArgumentError(
                message="generate_initial_case_tasks needs a timeline calculator",
                case_id=case_data.case_id,
            )
        current = self._now(now)
        deadlines = self.timeline_calculator.compute_for_case(case_data)

        intake = Task(
            id=task_id(TriggerReason.CASE_OPEN.value, case_data.case_id, "intake"),
            case_id=case_data.case_id,
            title=f"Complete Intake - {case_data.title}",
            description="Gather initial case information and client details",
            assigned_to_role=StaffRole.LEGAL_ASSISTANT,
            created_by=requested_by,
            created_at=current,
            priority=TaskPriority.HIGH,
            category=TaskCategory.ADMINISTRATIVE,
            metadata=TaskMetadata(trigger_reason=TriggerReason.CASE_OPEN),
        )

        return [intake] + self.generate_from_deadlines(
            deadlines, case_data.case_id, case_data.title, requested_by, now=current,
        )

    def generate_case_open_tasks(
        self,
        case_data: CaseFile,
        requested_by: str,
        now: Optional[Instant] = None,
    ) -> list[Task]:
        """One task per on_case_open template in the catalog."""
        current = self._now(now)
        return [
            self._from_template(template, case_data, requested_by, current)
            for template in self.template_catalog.by_trigger(TriggerKind.ON_CASE_OPEN)
        ]

    def _from_template(
        self,
        template: TaskTemplate,
        case_data: CaseFile,
        requested_by: str,
        current: datetime,
    ) -> Task:
        return Task(
            id=task_id(TriggerReason.CASE_OPEN.value, case_data.case_id, template.id),
            case_id=case_data.case_id,
            title=f"{template.name} - {case_data.title}",
            description=template.description,
            assigned_to_role=template.default_assignee_role,
            created_by=requested_by,
            created_at=current,
            priority=template.default_priority,
            category=template.category,
            metadata=TaskMetadata(
                trigger_reason=TriggerReason.CASE_OPEN,
                template_id=template.id,
            ),
        )

    # -------------------------------------------------------------------------
    # Overdue alerts
    # -------------------------------------------------------------------------

    def check_overdue_deadlines(
        self,
        deadlines: Iterable[Deadline],
        case_id: str,
        case_title: str,
        requested_by: str,
        now: Optional[Instant] = None,
        already_alerted: Iterable[str] = (),
    ) -> list[Task]:
        """
        One critical task per overdue critical deadline.

        Each task carries ``idempotency_key = "overdue:<deadline_id>"``.
        Deadline ids in ``already_alerted`` are skipped; callers that track
        alerts themselves can leave it empty.
        """
        current = self._now(now)
        alerted = set(already_alerted)
        tasks: list[Task] = []

        for deadline in deadlines:
            if not deadline.critical:
                continue
            if deadline.status not in {DeadlineStatus.ACTIVE, DeadlineStatus.OVERDUE}:
                continue
            days_overdue = deadline.days_overdue(current)
            if days_overdue <= 0:
                continue
            if deadline.id in alerted:
                logger.debug("Overdue alert for deadline %s already raised", deadline.id)
                continue

            tasks.append(Task(
                id=task_id(TriggerReason.OVERDUE_DEADLINE.value, case_id, deadline.id),
                case_id=case_id,
                title=f"{OVERDUE_TITLE_PREFIX} {deadline.description}",
                description=(
                    f"This critical deadline for {case_title} is {days_overdue} day(s) "
                    f"overdue. Immediate action required."
                ),
                assigned_to_role=StaffRole.LAWYER,
                created_by=requested_by,
                created_at=current,
                due_date=deadline.due_date,
                priority=TaskPriority.CRITICAL,
                category=TaskCategory.OCF_FORMS if deadline.kind.is_ocf else TaskCategory.COURT,
                metadata=TaskMetadata(
                    trigger_reason=TriggerReason.OVERDUE_DEADLINE,
                    deadline_id=deadline.id,
                    deadline_kind=deadline.kind,
                    days_overdue=days_overdue,
                    idempotency_key=f"overdue:{deadline.id}",
                ),
            ))

        return tasks

    # -------------------------------------------------------------------------
    # Email reminders
    # -------------------------------------------------------------------------

    def generate_email_reminders(
        self,
        deadlines: Iterable[Deadline],
        case_title: str,
        recipient: str,
        lead_days_list: Optional[Sequence[int]] = None,
        now: Optional[Instant] = None,
    ) -> list[ReminderSpec]:
        """
        Reminders for critical active deadlines, one per lead day with
        ``0 < days_until_due <= lead_day``.
        """
        lead_days = tuple(lead_days_list) if lead_days_list is not None else self.reminder_lead_days
        if any(d < 0 for d in lead_days):
            raise InvalidArgumentError(
                message="Reminder lead days must be non-negative",
                details={"lead_days": list(lead_days)},
            )
        current = self._now(now)
        reminders: list[ReminderSpec] = []

        for deadline in deadlines:
            if deadline.status != DeadlineStatus.ACTIVE or not deadline.critical:
                continue
            days_until_due = deadline.days_until_due(current)
            for lead in lead_days:
                if not 0 < days_until_due <= lead:
                    continue
                reminders.append(ReminderSpec(
                    id=task_id("reminder", deadline.id, str(lead)),
                    deadline_id=deadline.id,
                    case_id=deadline.case_id,
                    recipient=recipient,
                    subject=f"Critical Deadline: {deadline.description}",
                    body=(
                        "This is a reminder that the following deadline is approaching:\n\n"
                        f"Case: {case_title}\n"
                        f"Deadline: {deadline.description}\n"
                        f"Due Date: {deadline.due_date.isoformat()}\n"
                        f"Days Remaining: {days_until_due}\n\n"
                        "Please take action to ensure this deadline is met."
                    ),
                    scheduled_date=deadline.due_date - timedelta(days=lead),
                    lead_days=lead,
                ))

        return reminders
