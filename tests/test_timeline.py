"""
Tests for the Timeline Calculator.

Tests cover:
- Offsets in days, business days and months, before and after
- Secondary and chained anchors, and skipped rules
- Ordering, idempotence and minor flagging
- The bundled Ontario pack end to end
"""
import pytest
from datetime import date, datetime

from caselifecycle.canon import timeline_fingerprint
from caselifecycle.engine import TimelineCalculator, add_months, is_minor_on
from caselifecycle.exceptions import InvalidArgumentError
from caselifecycle.models import (
    AnchorSelector,
    DeadlineKind,
    OffsetDirection,
    SecondaryDates,
)

from tests.conftest import make_case_file, make_rule, make_rule_table


# =============================================================================
# Month Arithmetic
# =============================================================================

class TestAddMonths:
    """Tests for calendar-month offsets."""

    def test_keeps_day_of_month(self):
        assert add_months(date(2024, 1, 15), 3) == date(2024, 4, 15)

    def test_clamps_to_leap_february(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_clamps_to_common_february(self):
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_crosses_year(self):
        assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)

    def test_negative_months(self):
        assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)

    def test_leap_day_plus_year(self):
        assert add_months(date(2024, 2, 29), 12) == date(2025, 2, 28)


class TestIsMinor:

    def test_under_eighteen(self):
        assert is_minor_on(date(2010, 5, 1), date(2024, 1, 1)) is True

    def test_eighteenth_birthday_is_adult(self):
        assert is_minor_on(date(2006, 1, 1), date(2024, 1, 1)) is False

    def test_day_before_eighteenth_birthday(self):
        assert is_minor_on(date(2006, 1, 2), date(2024, 1, 1)) is True


# =============================================================================
# Timeline Calculator
# =============================================================================

class TestTimelineCalculator:
    """Tests for rule resolution with small hand-built tables."""

    def test_primary_anchor_seven_days(self, weekday_calendar):
        """DOL 2024-01-01 plus 7 days after is due 2024-01-08."""
        calculator = TimelineCalculator(
            rule_table=make_rule_table(make_rule(id="notice", offset_days=7)),
            calendar=weekday_calendar,
        )

        deadlines = calculator.compute_timeline("case-001", date(2024, 1, 1))

        assert len(deadlines) == 1
        deadline = deadlines[0]
        assert deadline.due_date == date(2024, 1, 8)
        assert deadline.anchor_used == date(2024, 1, 1)
        assert deadline.case_id == "case-001"
        assert deadline.rule_id == "notice"
        assert deadline.auto_generated is True

    def test_offset_before_anchor(self, weekday_calendar):
        calculator = TimelineCalculator(
            rule_table=make_rule_table(make_rule(
                id="brief",
                kind=DeadlineKind.PRETRIAL_BRIEF,
                anchor_selector=AnchorSelector.SECONDARY_EVENT_DATE,
                anchor_key="pretrial_conference",
                offset_days=5,
                direction=OffsetDirection.BEFORE,
            )),
            calendar=weekday_calendar,
        )

        deadlines = calculator.compute_timeline(
            "case-001", date(2024, 1, 1),
            {"pretrial_conference_date": date(2025, 3, 10)},
        )

        assert deadlines[0].due_date == date(2025, 3, 5)
        assert deadlines[0].anchor_used == date(2025, 3, 10)

    def test_month_offset(self, weekday_calendar):
        calculator = TimelineCalculator(
            rule_table=make_rule_table(make_rule(
                id="limitation",
                kind=DeadlineKind.LIMITATION_PERIOD,
                offset_months=24,
            )),
            calendar=weekday_calendar,
        )

        deadlines = calculator.compute_timeline("case-001", date(2024, 2, 29))

        assert deadlines[0].due_date == date(2026, 2, 28)

    def test_business_days_skip_weekends(self, weekday_calendar):
        """Friday 2024-12-20 + 10 business days, weekends only."""
        calculator = TimelineCalculator(
            rule_table=make_rule_table(make_rule(
                id="ocf18",
                kind=DeadlineKind.OCF18_DEEMED_APPROVAL,
                anchor_selector=AnchorSelector.SECONDARY_EVENT_DATE,
                anchor_key="received:OCF18",
                offset_days=10,
                business_days=True,
            )),
            calendar=weekday_calendar,
        )

        deadlines = calculator.compute_timeline(
            "case-001", date(2024, 1, 1),
            SecondaryDates(received_dates={"OCF18": date(2024, 12, 20)}),
        )

        assert deadlines[0].due_date == date(2025, 1, 3)

    def test_business_days_skip_ontario_holidays(self, ontario_calendar):
        """Christmas, Boxing Day and New Year's Day are not counted."""
        calculator = TimelineCalculator(
            rule_table=make_rule_table(make_rule(
                id="ocf18",
                kind=DeadlineKind.OCF18_DEEMED_APPROVAL,
                anchor_selector=AnchorSelector.SECONDARY_EVENT_DATE,
                anchor_key="received:OCF18",
                offset_days=10,
                business_days=True,
            )),
            calendar=ontario_calendar,
        )

        deadlines = calculator.compute_timeline(
            "case-001", date(2024, 1, 1),
            SecondaryDates(received_dates={"OCF18": date(2024, 12, 20)}),
        )

        assert deadlines[0].due_date == date(2025, 1, 8)

    def test_missing_secondary_anchor_is_skipped(self, weekday_calendar):
        """A rule whose event has not happened yields nothing and no error."""
        calculator = TimelineCalculator(
            rule_table=make_rule_table(
                make_rule(id="notice", offset_days=7),
                make_rule(
                    id="ocf1",
                    kind=DeadlineKind.OCF1_DEADLINE,
                    anchor_selector=AnchorSelector.SECONDARY_EVENT_DATE,
                    anchor_key="received:OCF1",
                    offset_days=30,
                ),
            ),
            calendar=weekday_calendar,
        )

        result = calculator.resolve(make_case_file())

        assert [d.rule_id for d in result.deadlines] == ["notice"]
        assert result.skipped == ["ocf1"]

    def test_resolve_dates_accepts_plain_dict(self, weekday_calendar):
        calculator = TimelineCalculator(
            rule_table=make_rule_table(
                make_rule(
                    id="ocf1",
                    kind=DeadlineKind.OCF1_DEADLINE,
                    anchor_selector=AnchorSelector.SECONDARY_EVENT_DATE,
                    anchor_key="received:OCF1",
                    offset_days=30,
                ),
            ),
            calendar=weekday_calendar,
        )

        result = calculator.resolve_dates(
            "case-001", date(2024, 1, 1), {"received_dates": {"OCF1": date(2024, 1, 10)}},
        )

        assert result.skipped == []
        assert result.by_kind(DeadlineKind.OCF1_DEADLINE).due_date == date(2024, 2, 9)
        assert result.to_dict()["deadlines"][0]["anchor_used"] == "2024-01-10"

    def test_chained_rule_uses_earlier_due_date(self, weekday_calendar):
        calculator = TimelineCalculator(
            rule_table=make_rule_table(
                make_rule(
                    id="ocf3-expiry",
                    kind=DeadlineKind.OCF3_EXPIRY,
                    anchor_selector=AnchorSelector.SECONDARY_EVENT_DATE,
                    anchor_key="expiry:OCF3",
                    offset_days=0,
                ),
                make_rule(
                    id="ocf3-renewal",
                    kind=DeadlineKind.OCF3_RENEWAL,
                    anchor_selector=AnchorSelector.OTHER_DEADLINE_EXPIRY,
                    anchor_key="ocf3_expiry",
                    offset_days=30,
                    direction=OffsetDirection.BEFORE,
                ),
            ),
            calendar=weekday_calendar,
        )

        result = calculator.resolve(make_case_file(expiry_dates={"OCF3": date(2024, 6, 30)}))

        renewal = result.by_kind(DeadlineKind.OCF3_RENEWAL)
        assert renewal is not None
        assert renewal.due_date == date(2024, 5, 31)
        assert renewal.anchor_used == date(2024, 6, 30)
        assert [d.kind for d in result.deadlines] == [
            DeadlineKind.OCF3_RENEWAL,
            DeadlineKind.OCF3_EXPIRY,
        ]

    def test_chained_rule_skipped_when_reference_missing(self, weekday_calendar):
        calculator = TimelineCalculator(
            rule_table=make_rule_table(
                make_rule(
                    id="ocf3-expiry",
                    kind=DeadlineKind.OCF3_EXPIRY,
                    anchor_selector=AnchorSelector.SECONDARY_EVENT_DATE,
                    anchor_key="expiry:OCF3",
                    offset_days=0,
                ),
                make_rule(
                    id="ocf3-renewal",
                    kind=DeadlineKind.OCF3_RENEWAL,
                    anchor_selector=AnchorSelector.OTHER_DEADLINE_EXPIRY,
                    anchor_key="ocf3_expiry",
                    offset_days=30,
                    direction=OffsetDirection.BEFORE,
                ),
            ),
            calendar=weekday_calendar,
        )

        result = calculator.resolve(make_case_file())

        assert result.deadlines == []
        assert result.skipped == ["ocf3-expiry", "ocf3-renewal"]

    def test_disabled_rule_ignored(self, weekday_calendar):
        calculator = TimelineCalculator(
            rule_table=make_rule_table(make_rule(id="notice", enabled=False)),
            calendar=weekday_calendar,
        )

        result = calculator.resolve(make_case_file())

        assert result.deadlines == []
        assert result.skipped == []

    def test_sorted_by_due_date(self, weekday_calendar):
        calculator = TimelineCalculator(
            rule_table=make_rule_table(
                make_rule(id="late", kind=DeadlineKind.TORT_NOTICE, offset_days=120),
                make_rule(id="early", kind=DeadlineKind.SABS_NOTICE, offset_days=7),
                make_rule(id="middle", kind=DeadlineKind.SABS_1_MONTH, offset_days=30),
            ),
            calendar=weekday_calendar,
        )

        deadlines = calculator.compute_timeline("case-001", date(2024, 1, 1))

        assert [d.rule_id for d in deadlines] == ["early", "middle", "late"]

    def test_ties_keep_declaration_order(self, weekday_calendar):
        calculator = TimelineCalculator(
            rule_table=make_rule_table(
                make_rule(id="b-second", kind=DeadlineKind.SABS_1_MONTH, offset_days=30),
                make_rule(id="a-first", kind=DeadlineKind.OCF1_DEADLINE, offset_days=30),
            ),
            calendar=weekday_calendar,
        )

        deadlines = calculator.compute_timeline("case-001", date(2024, 1, 1))

        assert [d.rule_id for d in deadlines] == ["b-second", "a-first"]

    def test_minor_marks_tolling_rule_critical(self, weekday_calendar):
        """The date is unchanged; only the critical flag is raised."""
        calculator = TimelineCalculator(
            rule_table=make_rule_table(make_rule(
                id="limitation",
                kind=DeadlineKind.LIMITATION_PERIOD,
                offset_months=24,
                tolls_for_minors=True,
            )),
            calendar=weekday_calendar,
        )

        adult = calculator.compute_for_case(make_case_file(client_birth_date=date(1990, 1, 1)))
        minor = calculator.compute_for_case(make_case_file(client_birth_date=date(2010, 5, 1)))

        assert adult[0].critical is False
        assert minor[0].critical is True
        assert minor[0].due_date == adult[0].due_date == date(2026, 1, 1)

    def test_minor_does_not_affect_other_rules(self, weekday_calendar):
        calculator = TimelineCalculator(
            rule_table=make_rule_table(make_rule(id="notice")),
            calendar=weekday_calendar,
        )

        deadlines = calculator.compute_for_case(
            make_case_file(client_birth_date=date(2010, 5, 1))
        )

        assert deadlines[0].critical is False

    def test_datetime_anchor_uses_calendar_date(self, weekday_calendar):
        calculator = TimelineCalculator(
            rule_table=make_rule_table(make_rule(id="notice")),
            calendar=weekday_calendar,
        )

        deadlines = calculator.compute_timeline("case-001", datetime(2024, 1, 1, 23, 30))

        assert deadlines[0].due_date == date(2024, 1, 8)


class TestTimelineErrors:

    def test_empty_case_id(self, weekday_calendar):
        calculator = TimelineCalculator(make_rule_table(make_rule()), weekday_calendar)
        with pytest.raises(InvalidArgumentError):
            calculator.compute_timeline("", date(2024, 1, 1))

    def test_missing_primary_anchor(self, weekday_calendar):
        calculator = TimelineCalculator(make_rule_table(make_rule()), weekday_calendar)
        with pytest.raises(InvalidArgumentError) as exc_info:
            calculator.compute_timeline("case-001", None)
        assert exc_info.value.case_id == "case-001"

    def test_string_primary_anchor(self, weekday_calendar):
        calculator = TimelineCalculator(make_rule_table(make_rule()), weekday_calendar)
        with pytest.raises(InvalidArgumentError):
            calculator.compute_timeline("case-001", "2024-01-01")

    def test_datetime_secondary_dates_use_calendar_date(self, pack_calculator):
        deadlines = pack_calculator.compute_timeline(
            "case-001",
            datetime(2024, 1, 1, 9, 30),
            {"received_dates": {"OCF1": datetime(2024, 1, 10, 14)}},
        )

        ocf1 = next(d for d in deadlines if d.kind == DeadlineKind.OCF1_DEADLINE)
        assert ocf1.due_date == date(2024, 2, 9)
        assert ocf1.anchor_used == date(2024, 1, 10)
        assert all(type(d.due_date) is date for d in deadlines)

    @pytest.mark.parametrize("secondary", [
        {"received_dates": {"OCF1": "2024-01-10"}},
        {"expiry_dates": {"OCF3": 20240701}},
        {"pretrial_conference_date": "next spring"},
        {"received_dates": ["OCF1"]},
        ["received_dates"],
    ])
    def test_malformed_secondary_dates(self, pack_calculator, secondary):
        with pytest.raises(InvalidArgumentError) as exc_info:
            pack_calculator.compute_timeline("case-001", date(2024, 1, 1), secondary)
        assert exc_info.value.case_id == "case-001"

    def test_datetime_case_file_through_case_tasks(self, pack_generator):
        case = make_case_file(
            date_of_loss=datetime(2024, 1, 1, 8),
            received_dates={"OCF18": datetime(2024, 1, 2, 16, 45)},
        )

        tasks = pack_generator.generate_initial_case_tasks(case, requested_by="u-17")

        assert tasks[0].title == "Complete Intake - Smith v. Jones"
        assert all(t.due_date is None or type(t.due_date) is date for t in tasks)

    def test_string_date_rejected_when_building_case(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            make_case_file(received_dates={"OCF18": "2024-12-20"})
        assert exc_info.value.details["field"] == "received_dates[OCF18]"

    def test_unknown_secondary_field(self, weekday_calendar):
        calculator = TimelineCalculator(make_rule_table(make_rule()), weekday_calendar)
        with pytest.raises(InvalidArgumentError) as exc_info:
            calculator.compute_timeline("case-001", date(2024, 1, 1), {"trial_date": date(2025, 1, 1)})
        assert exc_info.value.code == "CL_INVALID_ARGUMENT"


# =============================================================================
# Determinism
# =============================================================================

class TestDeterminism:

    def test_idempotent(self, pack_calculator):
        case = make_case_file(
            received_dates={"OCF1": date(2024, 1, 10), "OCF18": date(2024, 2, 2)},
            statement_of_claim_issued_date=date(2025, 6, 1),
        )

        first = pack_calculator.compute_for_case(case)
        second = pack_calculator.compute_for_case(case)

        assert first == second
        assert [d.id for d in first] == [d.id for d in second]
        assert timeline_fingerprint(first) == timeline_fingerprint(second)

    def test_monotonic_due_dates(self, pack_calculator):
        case = make_case_file(
            received_dates={"OCF1": date(2024, 1, 10), "LAT_DENIAL": date(2024, 3, 1)},
            expiry_dates={"OCF3": date(2024, 8, 15)},
            pretrial_conference_date=date(2026, 4, 20),
            statement_of_claim_issued_date=date(2025, 6, 1),
        )

        deadlines = pack_calculator.compute_for_case(case)
        due_dates = [d.due_date for d in deadlines]

        assert due_dates == sorted(due_dates)

    def test_different_anchor_different_ids(self, pack_calculator):
        a = pack_calculator.compute_timeline("case-001", date(2024, 1, 1))
        b = pack_calculator.compute_timeline("case-001", date(2024, 1, 2))
        assert {d.id for d in a}.isdisjoint({d.id for d in b})


# =============================================================================
# Bundled Pack
# =============================================================================

class TestOntarioPackTimeline:
    """The bundled pack for a DOL of 2024-01-01."""

    def test_primary_deadlines(self, pack_calculator):
        result = pack_calculator.resolve(make_case_file())
        due = {d.kind: d.due_date for d in result.deadlines}

        assert due[DeadlineKind.SABS_NOTICE] == date(2024, 1, 8)
        assert due[DeadlineKind.SABS_3_WEEK] == date(2024, 1, 22)
        assert due[DeadlineKind.SABS_1_MONTH] == date(2024, 1, 31)
        assert due[DeadlineKind.SABS_3_MONTH] == date(2024, 4, 1)
        assert due[DeadlineKind.SABS_12_MONTH] == date(2025, 1, 1)
        assert due[DeadlineKind.TORT_NOTICE] == date(2024, 4, 30)
        assert due[DeadlineKind.LIMITATION_PERIOD] == date(2026, 1, 1)

    def test_only_primary_rules_without_case_events(self, pack_calculator):
        result = pack_calculator.resolve(make_case_file())

        assert len(result.deadlines) == 11
        assert "ocf1-deadline" in result.skipped
        assert "pretrial-brief" in result.skipped

    def test_pretrial_deadlines(self, pack_calculator):
        result = pack_calculator.resolve(
            make_case_file(pretrial_conference_date=date(2025, 3, 10))
        )

        assert result.by_kind(DeadlineKind.PRETRIAL_BRIEF).due_date == date(2025, 3, 5)
        assert result.by_kind(DeadlineKind.EXPERT_REPORT).due_date == date(2024, 12, 10)
        assert result.by_kind(DeadlineKind.RESPONDING_REPORT).due_date == date(2025, 1, 9)

    def test_rule48_five_years_from_claim(self, pack_calculator):
        result = pack_calculator.resolve(
            make_case_file(statement_of_claim_issued_date=date(2025, 6, 1))
        )

        assert result.by_kind(DeadlineKind.RULE48_DISMISSAL).due_date == date(2030, 6, 1)

    def test_critical_flags_from_pack(self, pack_calculator):
        result = pack_calculator.resolve(make_case_file())

        assert result.by_kind(DeadlineKind.SABS_NOTICE).critical is True
        assert result.by_kind(DeadlineKind.SABS_3_WEEK).critical is False
        assert result.by_kind(DeadlineKind.LIMITATION_PERIOD).critical is True
