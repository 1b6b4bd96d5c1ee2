"""
Pytest configuration and fixtures for case lifecycle tests.

Provides helper factories and common fixtures matching actual model definitions.
"""
import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from caselifecycle.calendars import NoHolidayCalendar, OntarioCalendar
from caselifecycle.clock import FixedClock
from caselifecycle.engine import (
    TimelineCalculator,
    TreatmentGapDetector,
    WorkflowTaskGenerator,
)
from caselifecycle.models import (
    AnchorSelector,
    CaseFile,
    Deadline,
    DeadlineKind,
    DeadlineRule,
    DeadlineRuleTable,
    DeadlineStatus,
    MedicalProvider,
    OffsetDirection,
    SecondaryDates,
    StaffRole,
    TaskCategory,
    TaskPriority,
    TaskTemplate,
    TaskTemplateCatalog,
    TreatmentEvent,
    TreatmentKind,
    TriggerKind,
    deadline_id,
)
from caselifecycle.packs import load_default_pack


# =============================================================================
# Factory Helpers
# =============================================================================

def make_rule(
    id: str = "notice",
    kind: DeadlineKind = DeadlineKind.SABS_NOTICE,
    anchor_selector: AnchorSelector = AnchorSelector.PRIMARY_ANCHOR,
    offset_days: int = None,
    offset_months: int = None,
    direction: OffsetDirection = OffsetDirection.AFTER,
    anchor_key: str = None,
    critical: bool = False,
    business_days: bool = False,
    tolls_for_minors: bool = False,
    description: str = None,
    enabled: bool = True,
) -> DeadlineRule:
    """Create a DeadlineRule; defaults to 7 days after the primary anchor."""
    if offset_days is None and offset_months is None:
        offset_days = 7
    return DeadlineRule(
        id=id,
        kind=kind,
        anchor_selector=anchor_selector,
        description=description or f"{id} deadline",
        offset_days=offset_days,
        offset_months=offset_months,
        direction=direction,
        anchor_key=anchor_key,
        critical=critical,
        business_days=business_days,
        tolls_for_minors=tolls_for_minors,
        enabled=enabled,
    )


def make_rule_table(*rules: DeadlineRule) -> DeadlineRuleTable:
    return DeadlineRuleTable(rules=tuple(rules), name="test")


def make_deadline(
    due_date: date,
    kind: DeadlineKind = DeadlineKind.SABS_NOTICE,
    case_id: str = "case-001",
    rule_id: str = "notice",
    critical: bool = False,
    status: DeadlineStatus = DeadlineStatus.ACTIVE,
    auto_generated: bool = True,
    description: str = None,
) -> Deadline:
    """Create a Deadline as if the calculator had produced it."""
    return Deadline(
        id=deadline_id(case_id, rule_id, due_date),
        case_id=case_id,
        kind=kind,
        description=description or f"{kind.value} deadline",
        due_date=due_date,
        anchor_used=due_date,
        rule_id=rule_id,
        anchor_selector=AnchorSelector.PRIMARY_ANCHOR,
        status=status,
        critical=critical,
        auto_generated=auto_generated,
    )


def make_template(
    id: str = "prepare-notice",
    name: str = "Prepare Notice",
    deadline_kind: DeadlineKind = DeadlineKind.SABS_NOTICE,
    lead_days: int = 7,
    default_priority: TaskPriority = TaskPriority.MEDIUM,
    category: TaskCategory = TaskCategory.OCF_FORMS,
    role: StaffRole = StaffRole.PARALEGAL,
    trigger_kind: TriggerKind = TriggerKind.ON_DEADLINE,
    description: str = "Draft and send the notice",
) -> TaskTemplate:
    """Create a TaskTemplate; defaults to an on_deadline template."""
    on_deadline = trigger_kind == TriggerKind.ON_DEADLINE
    return TaskTemplate(
        id=id,
        name=name,
        description=description,
        category=category,
        default_assignee_role=role,
        default_priority=default_priority,
        trigger_kind=trigger_kind,
        deadline_kind=deadline_kind if on_deadline else None,
        lead_days=lead_days if on_deadline else None,
        estimated_hours=Decimal("1"),
    )


def make_catalog(*templates: TaskTemplate) -> TaskTemplateCatalog:
    return TaskTemplateCatalog(templates=tuple(templates), name="test")


def make_case_file(
    case_id: str = "case-001",
    title: str = "Smith v. Jones",
    date_of_loss: date = date(2024, 1, 1),
    **secondary,
) -> CaseFile:
    """Create a CaseFile; keyword arguments become SecondaryDates fields."""
    return CaseFile(
        case_id=case_id,
        title=title,
        date_of_loss=date_of_loss,
        secondary=SecondaryDates(**secondary),
    )


def make_event(
    d: date,
    provider_name: str = "Main Street Physio",
    kind: TreatmentKind = TreatmentKind.PHYSIO,
) -> TreatmentEvent:
    return TreatmentEvent(date=d, kind=kind, provider_name=provider_name)


def make_provider(
    name: str = "Main Street Physio",
    last_record_date: date = None,
    gap_detected: bool = False,
    id: str = None,
) -> MedicalProvider:
    return MedicalProvider(
        id=id or name.lower().replace(" ", "-"),
        name=name,
        last_record_date=last_record_date,
        gap_detected=gap_detected,
    )


def midnight(d: date) -> datetime:
    """UTC midnight on ``d``."""
    return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def default_pack():
    """The bundled Ontario personal injury pack."""
    return load_default_pack()


@pytest.fixture
def ontario_calendar():
    return OntarioCalendar()


@pytest.fixture
def weekday_calendar():
    """Weekends only, no holidays."""
    return NoHolidayCalendar()


@pytest.fixture
def pack_calculator(default_pack):
    """Timeline calculator over the bundled pack."""
    return TimelineCalculator(rule_table=default_pack.rule_table, calendar=OntarioCalendar())


@pytest.fixture
def fixed_clock():
    """Clock pinned to 2024-01-03 00:00 UTC."""
    return FixedClock.on(date(2024, 1, 3))


@pytest.fixture
def pack_generator(default_pack, pack_calculator, fixed_clock):
    return WorkflowTaskGenerator(
        template_catalog=default_pack.template_catalog,
        timeline_calculator=pack_calculator,
        clock=fixed_clock,
    )


@pytest.fixture
def gap_detector(fixed_clock):
    return TreatmentGapDetector(threshold_days=14, clock=fixed_clock)
