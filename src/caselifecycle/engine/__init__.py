"""
Case Lifecycle Engine

Core computation layer.

Components:
- TimelineCalculator: Deadlines from the date of loss and case events
- WorkflowTaskGenerator: Tasks, overdue alerts and reminders from deadlines
- TreatmentGapDetector: Treatment gaps and follow-up tasks
- compute_net_settlement: Net settlement to client
- compute_timelines: Parallel timelines for bulk imports

Usage:
    from caselifecycle.engine import TimelineCalculator, WorkflowTaskGenerator
    from caselifecycle.packs import load_default_pack

    pack = load_default_pack()
    calculator = TimelineCalculator(pack.rule_table, pack.build_calendar())
    generator = WorkflowTaskGenerator(pack.template_catalog, calculator)

    deadlines = calculator.compute_for_case(case)
    tasks = generator.generate_from_deadlines(deadlines, case.case_id, case.title, "u-17")
"""
from __future__ import annotations

from .batch import compute_timelines
from .gap_detector import (
    DEFAULT_GAP_THRESHOLD_DAYS,
    TreatmentGapDetector,
    build_gap_tasks,
    detect_gaps,
    scan_providers,
)
from .settlement_calculator import (
    compare_sabs_tort_interaction,
    compute_net_settlement,
    compute_offer_net,
)
from .task_generator import (
    DEFAULT_REMINDER_LEAD_DAYS,
    OVERDUE_TITLE_PREFIX,
    WorkflowTaskGenerator,
    escalate_priority,
)
from .timeline_calculator import (
    TimelineCalculator,
    TimelineResult,
    add_months,
    is_minor_on,
)

__all__ = [
    # Timeline
    "TimelineCalculator",
    "TimelineResult",
    "add_months",
    "is_minor_on",
    # Tasks
    "WorkflowTaskGenerator",
    "escalate_priority",
    "DEFAULT_REMINDER_LEAD_DAYS",
    "OVERDUE_TITLE_PREFIX",
    # Gaps
    "TreatmentGapDetector",
    "detect_gaps",
    "build_gap_tasks",
    "scan_providers",
    "DEFAULT_GAP_THRESHOLD_DAYS",
    # Settlement
    "compute_net_settlement",
    "compute_offer_net",
    "compare_sabs_tort_interaction",
    # Batch
    "compute_timelines",
]
