# agency_payroll/salary/engine.py
"""
Monthly payroll generation.

Turns an employee's current salary structure and one month of aggregated
attendance into a PayrollRecord. The rules are fixed:

* daily rate = basic / 30 (always 30, whatever the calendar month has)
* hourly rate = daily rate / 8
* absences cost one daily rate each, after every 3 lates became 1 absence
* the remaining 0-2 lates cost a third of a daily rate each
* half days cost half a daily rate each
* overtime pays 1.5x the hourly rate, only when overtime is enabled

Generation for a period is destructive: an existing record for the same
employee/month/year is deleted (with its adjustments) before the new one is
inserted, so running it twice yields the same figures rather than duplicates.
"""
import logging
import threading
from calendar import day_name, monthrange
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from agency_payroll.attendance.aggregator import (
    AttendanceSummary,
    FULL_DAY_HOURS,
    LATES_PER_ABSENCE,
    aggregate_attendance,
    first_last_day,
)
from agency_payroll.employees.models import Employee
from agency_payroll.errors import InvalidInput, MissingSalaryStructure, NotFound
from agency_payroll.salary.models import PayrollRecord, SalaryStructure
from agency_payroll.utils.decimal_math import (
    add,
    divide,
    line_total,
    multiply,
    quantize_money,
    subtract,
    sum_amounts,
    to_decimal,
)

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30
OVERTIME_MULTIPLIER = "1.5"
HALF_DAY_FACTOR = "0.5"


@dataclass(frozen=True)
class PayrollSettings:
    """HR configuration a generation batch runs with. Read once per batch by the caller."""
    overtime_enabled: bool = False
    weekly_off_days: Tuple[str, ...] = ("Friday",)


@dataclass(frozen=True)
class PayrollFigures:
    basic_salary: str
    total_allowances: str
    daily_rate: str
    hourly_rate: str
    absent_deduction: str
    late_deduction: str
    half_day_deduction: str
    overtime_amount: str
    gross_salary: str
    total_deductions: str
    net_salary: str
    overtime_hours: str


@dataclass
class GenerationResult:
    count: int = 0
    skipped: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f"{self.count} employees processed"


# ---------------------------------------------------------------------
# Pure calculation
# ---------------------------------------------------------------------
def calculate_payroll(structure, attendance: AttendanceSummary, settings: PayrollSettings) -> PayrollFigures:
    basic = quantize_money(structure.basic_salary)
    total_allowances = quantize_money(sum_amounts(structure.allowance_components()))

    daily_rate = divide(basic, DAYS_PER_MONTH)
    hourly_rate = divide(daily_rate, FULL_DAY_HOURS)

    absent_deduction = quantize_money(multiply(daily_rate, attendance.absent_days))
    late_deduction = quantize_money(
        divide(multiply(daily_rate, attendance.late_days % LATES_PER_ABSENCE), LATES_PER_ABSENCE)
    )
    half_day_deduction = quantize_money(multiply(daily_rate, HALF_DAY_FACTOR, attendance.half_days))

    # paid on the exact hours; only the stored hour count is rounded
    if settings.overtime_enabled:
        hours = quantize_money(attendance.overtime_hours)
        overtime_amount = line_total(attendance.overtime_hours, multiply(hourly_rate, OVERTIME_MULTIPLIER))
    else:
        hours = "0.00"
        overtime_amount = "0.00"

    gross = quantize_money(add(basic, total_allowances))
    total_deductions = quantize_money(add(absent_deduction, late_deduction, half_day_deduction))
    net = quantize_money(add(subtract(gross, total_deductions), overtime_amount))

    return PayrollFigures(
        basic_salary=basic,
        total_allowances=total_allowances,
        daily_rate=daily_rate,
        hourly_rate=hourly_rate,
        absent_deduction=absent_deduction,
        late_deduction=late_deduction,
        half_day_deduction=half_day_deduction,
        overtime_amount=overtime_amount,
        gross_salary=gross,
        total_deductions=total_deductions,
        net_salary=net,
        overtime_hours=hours,
    )


def count_working_days(year: int, month: int, weekly_off_days: Sequence[str] = ("Friday",)) -> int:
    off = {d.strip().lower() for d in weekly_off_days if d and d.strip()}
    days = 0
    for day in range(1, monthrange(year, month)[1] + 1):
        if day_name[date(year, month, day).weekday()].lower() not in off:
            days += 1
    return days


def validate_period(month: int, year: int):
    if not isinstance(month, int) or not 1 <= month <= 12:
        raise InvalidInput(f"Invalid month: {month!r}")
    if not isinstance(year, int) or not 1900 <= year <= 9999:
        raise InvalidInput(f"Invalid year: {year!r}")


# ---------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------
_period_locks = {}
_period_locks_guard = threading.Lock()


@contextmanager
def period_lock(month: int, year: int):
    """Serialise regenerations of one period within this process."""
    with _period_locks_guard:
        lock = _period_locks.setdefault((month, year), threading.Lock())
    with lock:
        yield


def current_salary_structure(db: Session, employee_id: int, month: int, year: int) -> Optional[SalaryStructure]:
    _, last = first_last_day(year, month)
    return (
        db.query(SalaryStructure)
        .filter(
            SalaryStructure.employee_id == employee_id,
            SalaryStructure.effective_from <= last,
        )
        .order_by(SalaryStructure.effective_from.desc(), SalaryStructure.id.desc())
        .first()
    )


def build_payroll_record(
    db: Session,
    employee: Employee,
    month: int,
    year: int,
    settings: PayrollSettings,
    generated_by: Optional[int] = None,
) -> PayrollRecord:
    structure = current_salary_structure(db, employee.id, month, year)
    if structure is None:
        raise MissingSalaryStructure(employee.id)

    attendance = aggregate_attendance(db, employee.id, month, year, overtime_enabled=settings.overtime_enabled)
    figures = calculate_payroll(structure, attendance, settings)

    return PayrollRecord(
        employee_id=employee.id,
        month=month,
        year=year,
        basic_salary=to_decimal(figures.basic_salary),
        total_allowances=to_decimal(figures.total_allowances),
        overtime_amount=to_decimal(figures.overtime_amount),
        absent_deduction=to_decimal(figures.absent_deduction),
        half_day_deduction=to_decimal(figures.half_day_deduction),
        late_deduction=to_decimal(figures.late_deduction),
        loan_deduction=to_decimal("0.00"),
        other_deductions=to_decimal(add(figures.absent_deduction, figures.half_day_deduction)),
        gross_salary=to_decimal(figures.gross_salary),
        net_salary=to_decimal(figures.net_salary),
        total_present_days=attendance.present_days,
        total_absent_days=attendance.absent_days,
        total_late_days=attendance.late_days,
        total_half_days=attendance.half_days,
        total_overtime_hours=to_decimal(figures.overtime_hours),
        working_days=count_working_days(year, month, settings.weekly_off_days),
        status="draft",
        generated_by=generated_by,
        generated_at=datetime.utcnow(),
    )


def replace_payroll_record(
    db: Session,
    employee: Employee,
    month: int,
    year: int,
    settings: PayrollSettings,
    generated_by: Optional[int] = None,
) -> PayrollRecord:
    """Delete any record for the period, then insert the freshly computed one."""
    # compute first so a missing structure leaves an existing record alone
    record = build_payroll_record(db, employee, month, year, settings, generated_by)

    existing = (
        db.query(PayrollRecord)
        .filter_by(employee_id=employee.id, month=month, year=year)
        .all()
    )
    for old in existing:
        db.delete(old)
    if existing:
        db.flush()

    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def generate_payroll(
    db: Session,
    month: int,
    year: int,
    settings: Optional[PayrollSettings] = None,
    generated_by: Optional[int] = None,
    employee_id: Optional[int] = None,
) -> GenerationResult:
    validate_period(month, year)
    settings = settings or PayrollSettings()

    query = db.query(Employee).filter(Employee.status == "active")
    if employee_id is not None:
        if db.get(Employee, employee_id) is None:
            raise NotFound(f"Employee {employee_id} not found")
        query = query.filter(Employee.id == employee_id)
    employees = query.order_by(Employee.id).all()

    logger.info("Generating payroll for %s employees for %s-%02d", len(employees), year, month)
    result = GenerationResult()

    with period_lock(month, year):
        for emp in employees:
            try:
                record = replace_payroll_record(db, emp, month, year, settings, generated_by)
            except MissingSalaryStructure:
                logger.warning("Skipping employee %s: no salary structure for %s-%02d", emp.id, year, month)
                result.skipped.append(emp.id)
                continue
            except Exception:
                db.rollback()
                logger.exception("Failed to generate payroll for employee %s", emp.id)
                result.failed.append(emp.id)
                continue
            logger.debug("Payroll %s for employee %s: net=%s", record.id, emp.id, record.net_salary)
            result.count += 1

    logger.info(
        "Payroll %s-%02d: %s generated, %s skipped, %s failed",
        year, month, result.count, len(result.skipped), len(result.failed),
    )
    return result
