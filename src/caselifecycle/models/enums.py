"""
Case Lifecycle Enumerations

All enums inherit from (str, Enum) for JSON serialization compatibility.
Values match the identifiers used in rule packs.
"""
from __future__ import annotations

from enum import Enum


# =============================================================================
# Deadlines
# =============================================================================

class DeadlineKind(str, Enum):
    """Statutory, regulatory and procedural deadlines tracked per case."""
    # Accident benefits (SABS) milestones measured from the date of loss
    SABS_NOTICE = "sabs_notice"
    SABS_3_WEEK = "sabs_3_week"
    SABS_1_MONTH = "sabs_1_month"
    SABS_3_MONTH = "sabs_3_month"
    SABS_4_MONTH = "sabs_4_month"
    SABS_5_MONTH = "sabs_5_month"
    SABS_6_MONTH = "sabs_6_month"
    SABS_9_MONTH = "sabs_9_month"
    SABS_12_MONTH = "sabs_12_month"

    # OCF forms
    OCF1_DEADLINE = "ocf1_deadline"
    OCF3_EXPIRY = "ocf3_expiry"
    OCF3_RENEWAL = "ocf3_renewal"
    OCF18_DEEMED_APPROVAL = "ocf18_deemed_approval"

    # Tort and tribunal
    TORT_NOTICE = "tort_notice"
    LIMITATION_PERIOD = "limitation_period"
    LAT_LIMITATION = "lat_limitation"
    RULE48_DISMISSAL = "rule48_dismissal"
    PRETRIAL_BRIEF = "pretrial_brief"
    EXPERT_REPORT = "expert_report"
    RESPONDING_REPORT = "responding_report"

    @property
    def is_ocf(self) -> bool:
        return self.value.startswith("ocf")


class DeadlineStatus(str, Enum):
    """Lifecycle of a deadline. Transitions are owned by callers and scanners."""
    ACTIVE = "active"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    WAIVED = "waived"


class AnchorSelector(str, Enum):
    """Where a rule takes its anchor date from."""
    PRIMARY_ANCHOR = "primary_anchor"                # Date of loss
    SECONDARY_EVENT_DATE = "secondary_event_date"    # Named case event
    OTHER_DEADLINE_EXPIRY = "other_deadline_expiry"  # Earlier deadline's due date


class OffsetDirection(str, Enum):
    BEFORE = "before"
    AFTER = "after"


# =============================================================================
# Tasks
# =============================================================================

class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    """Task priority. Ordered by urgency via ``rank``."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    TaskPriority.LOW: 0,
    TaskPriority.MEDIUM: 1,
    TaskPriority.HIGH: 2,
    TaskPriority.CRITICAL: 3,
}


class TaskCategory(str, Enum):
    OCF_FORMS = "ocf_forms"
    DISCOVERY = "discovery"
    PLEADINGS = "pleadings"
    MEDICAL_RECORDS = "medical_records"
    UNDERTAKINGS = "undertakings"
    SETTLEMENT = "settlement"
    LAT = "lat"
    COURT = "court"
    CLIENT_COMMUNICATION = "client_communication"
    ADMINISTRATIVE = "administrative"
    OTHER = "other"


class StaffRole(str, Enum):
    """Firm roles that tasks are assigned to, most senior first."""
    LAWYER = "lawyer"
    LAW_CLERK = "law_clerk"
    PARALEGAL = "paralegal"
    LEGAL_ASSISTANT = "legal_assistant"
    ACCIDENT_BENEFITS_COORDINATOR = "accident_benefits_coordinator"


class TriggerKind(str, Enum):
    """What causes a task template to fire."""
    ON_CASE_OPEN = "on_case_open"
    ON_DEADLINE = "on_deadline"
    ON_FORM_EVENT = "on_form_event"
    MANUAL = "manual"


class TriggerReason(str, Enum):
    """Recorded on generated tasks to explain where they came from."""
    CASE_OPEN = "case_open"
    DEADLINE_WINDOW = "deadline_window"
    OVERDUE_DEADLINE = "overdue_deadline"
    TREATMENT_GAP = "treatment_gap"
    MANUAL = "manual"


# =============================================================================
# Treatment
# =============================================================================

class TreatmentKind(str, Enum):
    PHYSIO = "physio"
    CHIRO = "chiro"
    GP = "gp"
    SPECIALIST = "specialist"
    MASSAGE = "massage"
    OTHER = "other"


# =============================================================================
# Settlement
# =============================================================================

class OfferKind(str, Enum):
    """Which side made the offer."""
    PLAINTIFF = "plaintiff"
    DEFENDANT = "defendant"


class OfferStatus(str, Enum):
    OPEN = "open"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COUNTERED = "countered"
