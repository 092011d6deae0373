"""
Tests for monthly payroll generation.

Validates:
- the fixed-rule arithmetic (30-day divisor, late residue, half days, overtime)
- late-to-absent conversion has the same deduction effect as an absence
- regeneration replaces rather than duplicates, with identical figures
- batch isolation: missing structures are skipped, failures do not stop the batch
"""
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from agency_payroll.attendance.aggregator import AttendanceSummary, summarize_records
from agency_payroll.errors import InvalidInput, NotFound
from agency_payroll.salary import engine as payroll_engine
from agency_payroll.salary.engine import (
    PayrollSettings,
    calculate_payroll,
    count_working_days,
    current_salary_structure,
    generate_payroll,
)
from agency_payroll.salary.models import PayrollRecord, SalaryAdjustment

MONEY_FIELDS = (
    "basic_salary", "total_allowances", "overtime_amount", "absent_deduction", "half_day_deduction",
    "late_deduction", "loan_deduction", "other_deductions", "gross_salary", "net_salary",
    "total_present_days", "total_absent_days", "total_late_days", "total_half_days",
    "total_overtime_hours", "working_days", "status",
)


def structure(basic="30000", house="0", medical="0", travel="0", food="0", other="0"):
    s = SimpleNamespace(basic_salary=basic)
    s.allowance_components = lambda: [house, medical, travel, food, other]
    return s


def summary_of(*statuses, overtime_enabled=False):
    return summarize_records(
        [SimpleNamespace(id=None, status=s, check_in=None, check_out=None) for s in statuses],
        overtime_enabled=overtime_enabled,
    )


# =============================================================================
# Pure arithmetic
# =============================================================================


class TestCalculatePayroll:

    def test_clean_month_pays_basic_plus_allowances(self):
        f = calculate_payroll(
            structure("25000", house="5000", medical="1200.50", travel="800", food="600", other="99.99"),
            AttendanceSummary(present_days=26),
            PayrollSettings(),
        )
        assert f.total_allowances == "7700.49"
        assert f.gross_salary == "32700.49"
        assert f.net_salary == "32700.49"
        assert f.total_deductions == "0.00"

    def test_two_absences_and_one_late(self):
        f = calculate_payroll(structure("30000"), summary_of("absent", "absent", "late"), PayrollSettings())
        assert Decimal(f.daily_rate) == 1000
        assert f.absent_deduction == "2000.00"
        assert f.late_deduction == "333.33"
        assert f.net_salary == "27666.67"

    def test_four_lates_convert_one_and_keep_one(self):
        s = summary_of("late", "late", "late", "late")
        assert s.absent_days == 1
        f = calculate_payroll(structure("30000"), s, PayrollSettings())
        assert f.absent_deduction == "1000.00"
        assert f.late_deduction == "333.33"
        assert f.net_salary == "28666.67"

    def test_three_lates_equal_one_absence(self):
        via_lates = calculate_payroll(structure("30000"), summary_of("late", "late", "late"), PayrollSettings())
        via_absence = calculate_payroll(structure("30000"), summary_of("absent"), PayrollSettings())
        assert via_lates.total_deductions == via_absence.total_deductions
        assert via_lates.net_salary == via_absence.net_salary
        assert via_lates.late_deduction == "0.00"

    def test_half_days(self):
        f = calculate_payroll(structure("30000"), summary_of("half-day", "half-day", "half-day"), PayrollSettings())
        assert f.half_day_deduction == "1500.00"
        assert f.net_salary == "28500.00"

    def test_thirty_day_divisor_regardless_of_month(self):
        f = calculate_payroll(structure("31000"), summary_of("absent"), PayrollSettings())
        assert f.absent_deduction == "1033.33"

    def test_overtime_paid_when_enabled(self):
        f = calculate_payroll(
            structure("24000"),
            AttendanceSummary(present_days=20, overtime_hours=4.0),
            PayrollSettings(overtime_enabled=True),
        )
        # daily 800, hourly 100, 1.5x for 4h
        assert Decimal(f.hourly_rate) == 100
        assert f.overtime_amount == "600.00"
        assert f.net_salary == "24600.00"

    def test_overtime_paid_on_exact_hours(self):
        f = calculate_payroll(
            structure("30000"),
            AttendanceSummary(present_days=20, overtime_hours=1 / 3),
            PayrollSettings(overtime_enabled=True),
        )
        # hourly 125 x 1.5 x 20 minutes; rounding the hours first would pay 61.88
        assert f.overtime_amount == "62.50"
        assert f.overtime_hours == "0.33"
        assert f.net_salary == "30062.50"

    def test_overtime_ignored_when_disabled(self):
        f = calculate_payroll(
            structure("24000"),
            AttendanceSummary(present_days=20, overtime_hours=4.0),
            PayrollSettings(overtime_enabled=False),
        )
        assert f.overtime_amount == "0.00"
        assert f.overtime_hours == "0.00"
        assert f.net_salary == "24000.00"

    def test_figures_are_decimal_strings(self):
        f = calculate_payroll(structure("30000"), summary_of("absent"), PayrollSettings())
        for value in (f.gross_salary, f.net_salary, f.absent_deduction, f.late_deduction):
            assert isinstance(value, str)


class TestWorkingDays:

    def test_excludes_weekly_off_days(self):
        # March 2025 has four Fridays
        assert count_working_days(2025, 3, ("Friday",)) == 27

    def test_two_off_days(self):
        # June 2025: 4 Saturdays and 5 Sundays
        assert count_working_days(2025, 6, ("Saturday", "Sunday")) == 21

    def test_no_off_days(self):
        assert count_working_days(2024, 2, ()) == 29


# =============================================================================
# Batch generation
# =============================================================================


class TestGeneratePayroll:

    def test_creates_one_record_per_active_employee(self, db, make_employee, give_structure, mark):
        a, b = make_employee(), make_employee()
        give_structure(a, basic="30000")
        give_structure(b, basic="45000", house="5000")
        mark(a, date(2025, 3, 3), "absent")
        mark(a, date(2025, 3, 4), "absent")
        mark(a, date(2025, 3, 5), "late")

        result = generate_payroll(db, 3, 2025, generated_by=7)

        assert result.count == 2
        assert result.message == "2 employees processed"
        rec_a = db.query(PayrollRecord).filter_by(employee_id=a.id).one()
        assert rec_a.net_salary == Decimal("27666.67")
        assert rec_a.total_absent_days == 2
        assert rec_a.total_late_days == 1
        assert rec_a.total_present_days == 1
        assert rec_a.other_deductions == Decimal("2000.00")
        assert rec_a.generated_by == 7
        assert rec_a.status == "draft"
        rec_b = db.query(PayrollRecord).filter_by(employee_id=b.id).one()
        assert rec_b.net_salary == Decimal("50000.00")

    def test_employee_without_structure_is_skipped(self, db, make_employee, give_structure):
        paid, unpaid = make_employee(), make_employee()
        give_structure(paid)

        result = generate_payroll(db, 3, 2025)

        assert result.count == 1
        assert result.skipped == [unpaid.id]
        assert db.query(PayrollRecord).count() == 1

    def test_inactive_employees_are_not_processed(self, db, make_employee, give_structure):
        give_structure(make_employee(status="inactive"))
        assert generate_payroll(db, 3, 2025).count == 0

    def test_regeneration_replaces_with_identical_figures(self, db, make_employee, give_structure, mark):
        emp = make_employee()
        give_structure(emp, basic="27500", travel="1250.75")
        for d, s in [(3, "late"), (4, "late"), (5, "late"), (6, "late"), (7, "half-day"), (10, "absent")]:
            mark(emp, date(2025, 3, d), s)

        generate_payroll(db, 3, 2025)
        first = db.query(PayrollRecord).filter_by(employee_id=emp.id).one()
        before = {f: getattr(first, f) for f in MONEY_FIELDS}

        generate_payroll(db, 3, 2025)
        db.expire_all()
        rows = db.query(PayrollRecord).filter_by(employee_id=emp.id, month=3, year=2025).all()

        assert len(rows) == 1
        assert {f: getattr(rows[0], f) for f in MONEY_FIELDS} == before

    def test_regeneration_drops_old_adjustments(self, db, make_employee, give_structure):
        emp = make_employee()
        give_structure(emp)
        generate_payroll(db, 3, 2025)
        rec = db.query(PayrollRecord).one()
        db.add(SalaryAdjustment(payroll_id=rec.id, type="bonus", amount=Decimal("500"), reason="x"))
        db.commit()

        generate_payroll(db, 3, 2025)

        assert db.query(SalaryAdjustment).count() == 0
        assert db.query(PayrollRecord).one().net_salary == Decimal("30000.00")

    def test_other_periods_are_untouched(self, db, make_employee, give_structure):
        emp = make_employee()
        give_structure(emp)
        generate_payroll(db, 2, 2025)
        generate_payroll(db, 3, 2025)
        generate_payroll(db, 3, 2025)
        assert db.query(PayrollRecord).count() == 2

    def test_scoped_to_one_employee(self, db, make_employee, give_structure):
        a, b = make_employee(), make_employee()
        give_structure(a)
        give_structure(b)
        result = generate_payroll(db, 3, 2025, employee_id=b.id)
        assert result.count == 1
        assert db.query(PayrollRecord).one().employee_id == b.id

    def test_unknown_employee_scope(self, db):
        with pytest.raises(NotFound):
            generate_payroll(db, 3, 2025, employee_id=999)

    @pytest.mark.parametrize("month,year", [(0, 2025), (13, 2025), (3, 10)])
    def test_invalid_period(self, db, month, year):
        with pytest.raises(InvalidInput):
            generate_payroll(db, month, year)

    def test_one_failure_does_not_stop_the_batch(self, db, make_employee, give_structure, monkeypatch):
        a, b, c = make_employee(), make_employee(), make_employee()
        for e in (a, b, c):
            give_structure(e)

        real = payroll_engine.build_payroll_record

        def flaky(db_, employee, *args, **kwargs):
            if employee.id == b.id:
                raise RuntimeError("boom")
            return real(db_, employee, *args, **kwargs)

        monkeypatch.setattr(payroll_engine, "build_payroll_record", flaky)
        result = generate_payroll(db, 3, 2025)

        assert result.count == 2
        assert result.failed == [b.id]
        assert {r.employee_id for r in db.query(PayrollRecord).all()} == {a.id, c.id}

    def test_overtime_flag_is_passed_in(self, db, make_employee, give_structure, mark):
        emp = make_employee()
        give_structure(emp, basic="24000")
        mark(emp, date(2025, 3, 3), "present", datetime(2025, 3, 3, 9), datetime(2025, 3, 3, 19))

        generate_payroll(db, 3, 2025, settings=PayrollSettings(overtime_enabled=False))
        assert db.query(PayrollRecord).one().overtime_amount == Decimal("0.00")

        generate_payroll(db, 3, 2025, settings=PayrollSettings(overtime_enabled=True))
        rec = db.query(PayrollRecord).one()
        assert rec.total_overtime_hours == Decimal("2.00")
        assert rec.overtime_amount == Decimal("300.00")
        assert rec.net_salary == Decimal("24300.00")


class TestCurrentStructure:

    def test_latest_structure_effective_in_period_wins(self, db, make_employee, give_structure):
        emp = make_employee()
        give_structure(emp, basic="20000", effective_from=date(2024, 1, 1))
        give_structure(emp, basic="25000", effective_from=date(2025, 3, 15))
        give_structure(emp, basic="99999", effective_from=date(2025, 4, 1))

        assert current_salary_structure(db, emp.id, 2, 2025).basic_salary == Decimal("20000.00")
        assert current_salary_structure(db, emp.id, 3, 2025).basic_salary == Decimal("25000.00")

    def test_structure_starting_after_period_counts_as_missing(self, db, make_employee, give_structure):
        emp = make_employee()
        give_structure(emp, effective_from=date(2025, 6, 1))
        assert generate_payroll(db, 3, 2025).skipped == [emp.id]
