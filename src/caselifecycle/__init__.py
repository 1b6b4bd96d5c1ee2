"""
Case Lifecycle - Rules Engine for Personal Injury Case Files

Computes the deadline timeline of an Ontario motor vehicle accident file,
turns deadlines into staff tasks and reminders, flags gaps in treatment and
works out what a settlement leaves the client.

Core Principle: pure computation. Every output is a plain value handed back
to the caller; nothing is stored and nothing is sent.

Key Features:
- Deadline rule table loaded from a YAML pack (SABS, OCF, tort, LAT, court)
- Business-day offsets on the Ontario statutory holiday calendar
- Trigger-window task generation with priority escalation
- Overdue alerts and email reminders for critical deadlines
- Treatment gap detection per event history or per provider
- Net settlement and SABS/tort interaction

Quick Start:
    from datetime import date
    from caselifecycle import CaseFile, FixedClock, build_engine

    engine = build_engine(clock=FixedClock.on(date(2024, 1, 3)))
    case = CaseFile(case_id="case-001", title="Smith v. Jones", date_of_loss=date(2024, 1, 1))

    deadlines = engine.timeline_calculator.compute_for_case(case)
    tasks = engine.task_generator.generate_initial_case_tasks(case, requested_by="u-17")

Version: 0.1.0
"""
from __future__ import annotations

__version__ = "0.1.0"

# =============================================================================
# Core Models (Re-exported for convenience)
# =============================================================================
from .models import (
    AnchorSelector,
    CaseFile,
    Deadline,
    DeadlineKind,
    DeadlineRule,
    DeadlineRuleTable,
    DeadlineStatus,
    Gap,
    MedicalProvider,
    NetSettlementResult,
    OffsetDirection,
    ReminderSpec,
    SabsTortInteraction,
    SecondaryDates,
    SettlementOffer,
    StaffRole,
    Task,
    TaskCategory,
    TaskPriority,
    TaskTemplate,
    TaskTemplateCatalog,
    TreatmentEvent,
    TreatmentKind,
    TriggerKind,
)

# =============================================================================
# Engine Components
# =============================================================================
from .engine import (
    TimelineCalculator,
    TreatmentGapDetector,
    WorkflowTaskGenerator,
    compare_sabs_tort_interaction,
    compute_net_settlement,
    compute_offer_net,
    compute_timelines,
    detect_gaps,
)

# =============================================================================
# Infrastructure
# =============================================================================
from .calendars import OntarioCalendar
from .clock import Clock, FixedClock, SystemClock
from .config import Engine, EngineSettings, build_engine, configure_logging
from .exceptions import (
    CaseLifecycleError,
    InvalidArgumentError,
    InvalidCalendarError,
    PackLoadError,
    PackValidationError,
    PackVersionMismatch,
    TimelineCalculationError,
)
from .packs import LoadedPack, load_default_pack, load_pack

__all__ = [
    "__version__",
    # Models
    "AnchorSelector",
    "CaseFile",
    "Deadline",
    "DeadlineKind",
    "DeadlineRule",
    "DeadlineRuleTable",
    "DeadlineStatus",
    "Gap",
    "MedicalProvider",
    "NetSettlementResult",
    "OffsetDirection",
    "ReminderSpec",
    "SabsTortInteraction",
    "SecondaryDates",
    "SettlementOffer",
    "StaffRole",
    "Task",
    "TaskCategory",
    "TaskPriority",
    "TaskTemplate",
    "TaskTemplateCatalog",
    "TreatmentEvent",
    "TreatmentKind",
    "TriggerKind",
    # Engine
    "TimelineCalculator",
    "WorkflowTaskGenerator",
    "TreatmentGapDetector",
    "compute_net_settlement",
    "compute_offer_net",
    "compare_sabs_tort_interaction",
    "compute_timelines",
    "detect_gaps",
    # Infrastructure
    "OntarioCalendar",
    "Clock",
    "FixedClock",
    "SystemClock",
    "Engine",
    "EngineSettings",
    "build_engine",
    "configure_logging",
    "LoadedPack",
    "load_default_pack",
    "load_pack",
    # Exceptions
    "CaseLifecycleError",
    "InvalidArgumentError",
    "InvalidCalendarError",
    "PackLoadError",
    "PackValidationError",
    "PackVersionMismatch",
    "TimelineCalculationError",
]
