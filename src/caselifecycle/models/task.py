"""
Case Lifecycle Task Models

Key components:
- TaskTemplate: immutable blueprint from the template catalog
- TaskMetadata: provenance recorded on generated tasks
- Task: a unit of work handed to the task board
- ReminderSpec: a scheduled email reminder for a critical deadline

The engine only ever creates tasks; once handed off, the task board owns
them.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from ..exceptions import InvalidArgumentError
from .enums import (
    DeadlineKind,
    StaffRole,
    TaskCategory,
    TaskPriority,
    TaskStatus,
    TriggerKind,
    TriggerReason,
)


# =============================================================================
# Task Template
# =============================================================================

@dataclass(frozen=True)
class TaskTemplate:
    """
    A task blueprint.

    ``deadline_kind`` and ``lead_days`` are required for ON_DEADLINE
    templates: the task is only generated once the deadline is within
    ``lead_days``.
    """
    id: str
    name: str
    description: str
    category: TaskCategory
    default_assignee_role: StaffRole
    default_priority: TaskPriority
    trigger_kind: TriggerKind
    deadline_kind: Optional[DeadlineKind] = None
    lead_days: Optional[int] = None
    estimated_hours: Optional[Decimal] = None

    def __post_init__(self) -> None:
        if self.trigger_kind == TriggerKind.ON_DEADLINE:
            if self.deadline_kind is None or self.lead_days is None:
                raise InvalidArgumentError(
                    message=f"Template '{self.id}' is on_deadline but lacks deadline_kind/lead_days",
                    details={"template_id": self.id},
                )
        if self.lead_days is not None and self.lead_days < 0:
            raise InvalidArgumentError(
                message=f"Template '{self.id}' lead_days must be non-negative",
                details={"template_id": self.id, "lead_days": self.lead_days},
            )

    def matches(self, kind: DeadlineKind) -> bool:
        return self.trigger_kind == TriggerKind.ON_DEADLINE and self.deadline_kind == kind


# =============================================================================
# Task
# =============================================================================

@dataclass(frozen=True)
class TaskMetadata:
    """Why and from what a task was generated."""
    trigger_reason: TriggerReason
    auto_generated: bool = True
    template_id: Optional[str] = None
    deadline_id: Optional[str] = None
    deadline_kind: Optional[DeadlineKind] = None
    days_overdue: Optional[int] = None
    provider_name: Optional[str] = None
    gap_days: Optional[int] = None
    gap_start_date: Optional[date] = None
    idempotency_key: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "trigger_reason": self.trigger_reason.value,
            "auto_generated": self.auto_generated,
        }
        optional = {
            "template_id": self.template_id,
            "deadline_id": self.deadline_id,
            "deadline_kind": self.deadline_kind.value if self.deadline_kind else None,
            "days_overdue": self.days_overdue,
            "provider_name": self.provider_name,
            "gap_days": self.gap_days,
            "gap_start_date": self.gap_start_date.isoformat() if self.gap_start_date else None,
            "idempotency_key": self.idempotency_key,
        }
        result.update({k: v for k, v in optional.items() if v is not None})
        return result


@dataclass
class Task:
    """A generated or manually created task."""
    id: str
    case_id: str
    title: str
    description: str
    assigned_to_role: StaffRole
    created_by: str
    created_at: datetime
    priority: TaskPriority
    category: TaskCategory
    metadata: TaskMetadata
    due_date: Optional[date] = None
    status: TaskStatus = TaskStatus.PENDING

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "case_id": self.case_id,
            "title": self.title,
            "description": self.description,
            "assigned_to_role": self.assigned_to_role.value,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "status": self.status.value,
            "priority": self.priority.value,
            "category": self.category.value,
            "metadata": self.metadata.to_dict(),
        }


# =============================================================================
# Reminder
# =============================================================================

@dataclass(frozen=True)
class ReminderSpec:
    """An email reminder to be scheduled by the caller's mailer."""
    id: str
    deadline_id: str
    case_id: str
    recipient: str
    subject: str
    body: str
    scheduled_date: date
    lead_days: int
    sent: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "deadline_id": self.deadline_id,
            "case_id": self.case_id,
            "recipient": self.recipient,
            "subject": self.subject,
            "body": self.body,
            "scheduled_date": self.scheduled_date.isoformat(),
            "lead_days": self.lead_days,
            "sent": self.sent,
        }
