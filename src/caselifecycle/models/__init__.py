"""
Case Lifecycle Models

Domain models for deadlines, tasks, treatment gaps and settlements.

Usage:
    from caselifecycle.models import (
        DeadlineKind, DeadlineRule, Deadline, CaseFile, SecondaryDates,
        TaskTemplate, Task, TreatmentEvent, Gap, NetSettlementResult,
    )
"""
from __future__ import annotations

from .catalog import DeadlineRuleTable, TaskTemplateCatalog
from .deadline import (
    CLIENT_BIRTH_DATE,
    EXPIRY_PREFIX,
    PRETRIAL_CONFERENCE,
    RECEIVED_PREFIX,
    STATEMENT_OF_CLAIM_ISSUED,
    CaseFile,
    Deadline,
    DeadlineRule,
    SecondaryDates,
    deadline_id,
    event_date,
)
from .enums import (
    AnchorSelector,
    DeadlineKind,
    DeadlineStatus,
    OfferKind,
    OfferStatus,
    OffsetDirection,
    StaffRole,
    TaskCategory,
    TaskPriority,
    TaskStatus,
    TreatmentKind,
    TriggerKind,
    TriggerReason,
)
from .settlement import (
    BreakdownLine,
    NetSettlementResult,
    SabsTortInteraction,
    SettlementOffer,
)
from .task import ReminderSpec, Task, TaskMetadata, TaskTemplate
from .treatment import Gap, MedicalProvider, TreatmentEvent

__all__ = [
    # Enums
    "AnchorSelector",
    "DeadlineKind",
    "DeadlineStatus",
    "OfferKind",
    "OfferStatus",
    "OffsetDirection",
    "StaffRole",
    "TaskCategory",
    "TaskPriority",
    "TaskStatus",
    "TreatmentKind",
    "TriggerKind",
    "TriggerReason",
    # Deadlines
    "DeadlineRule",
    "Deadline",
    "CaseFile",
    "SecondaryDates",
    "deadline_id",
    "event_date",
    "CLIENT_BIRTH_DATE",
    "STATEMENT_OF_CLAIM_ISSUED",
    "PRETRIAL_CONFERENCE",
    "RECEIVED_PREFIX",
    "EXPIRY_PREFIX",
    # Catalogs
    "DeadlineRuleTable",
    "TaskTemplateCatalog",
    # Tasks
    "TaskTemplate",
    "TaskMetadata",
    "Task",
    "ReminderSpec",
    # Treatment
    "TreatmentEvent",
    "MedicalProvider",
    "Gap",
    # Settlement
    "SettlementOffer",
    "BreakdownLine",
    "NetSettlementResult",
    "SabsTortInteraction",
]
