# agency_payroll/attendance/aggregator.py
import logging
from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional, Tuple

from sqlalchemy.orm import Session

from agency_payroll.attendance.models import AttendanceRecord

logger = logging.getLogger(__name__)

FULL_DAY_HOURS = 8
LATES_PER_ABSENCE = 3


@dataclass(frozen=True)
class AttendanceSummary:
    present_days: int = 0
    absent_days: int = 0          # recorded absences plus converted lates
    late_days: int = 0            # raw count of late arrivals
    half_days: int = 0
    overtime_hours: float = 0.0
    recorded_absent_days: int = 0
    converted_absences: int = 0   # floor(late_days / 3)
    residual_late_days: int = 0   # late_days % 3, pro-rated at deduction time


def first_last_day(year: int, month: int) -> Tuple[date, date]:
    first = date(year, month, 1)
    last = date(year, month, monthrange(year, month)[1])
    return first, last


def _as_datetime(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


def worked_hours(check_in, check_out) -> Optional[float]:
    """Elapsed hours between check-in and check-out, or None when unusable."""
    start = _as_datetime(check_in)
    end = _as_datetime(check_out)
    if start is None or end is None:
        return None
    try:
        seconds = (end - start).total_seconds()
    except TypeError:
        # naive vs aware timestamps
        return None
    if seconds <= 0:
        return None
    return seconds / 3600


def overtime_hours(records: Iterable) -> float:
    total = 0.0
    for r in records:
        hours = worked_hours(getattr(r, "check_in", None), getattr(r, "check_out", None))
        if hours is None:
            if getattr(r, "check_in", None) is not None and getattr(r, "check_out", None) is not None:
                logger.warning("Skipping unusable check-in/check-out on attendance %s", getattr(r, "id", None))
            continue
        if hours > FULL_DAY_HOURS:
            total += hours - FULL_DAY_HOURS
    return total


def summarize_records(records: Iterable, overtime_enabled: bool = False) -> AttendanceSummary:
    """
    Reduce one month of attendance rows to day counts.

    late and half-day rows still count as worked days. Every three lates become
    one extra absence; the remainder is kept for the partial late deduction.
    Statuses outside present/absent/late/half-day are ignored.
    """
    records = list(records)
    present = absent = late = half = 0

    for r in records:
        status = (getattr(r, "status", None) or "").strip().lower()
        if status == "present":
            present += 1
        elif status == "absent":
            absent += 1
        elif status == "late":
            present += 1
            late += 1
        elif status == "half-day":
            present += 1
            half += 1
        else:
            logger.debug("Ignoring attendance %s with status %r", getattr(r, "id", None), status)

    converted = late // LATES_PER_ABSENCE

    hours = overtime_hours(records)
    if not overtime_enabled:
        if hours > 0:
            logger.warning("Overtime disabled; %.2f recorded overtime hours are not counted", hours)
        hours = 0.0

    return AttendanceSummary(
        present_days=present,
        absent_days=absent + converted,
        late_days=late,
        half_days=half,
        overtime_hours=hours,
        recorded_absent_days=absent,
        converted_absences=converted,
        residual_late_days=late % LATES_PER_ABSENCE,
    )


def load_month_records(db: Session, employee_id: int, month: int, year: int):
    first, last = first_last_day(year, month)
    return (
        db.query(AttendanceRecord)
        .filter(
            AttendanceRecord.employee_id == employee_id,
            AttendanceRecord.date >= first,
            AttendanceRecord.date <= last,
        )
        .order_by(AttendanceRecord.date)
        .all()
    )


def aggregate_attendance(db: Session, employee_id: int, month: int, year: int, overtime_enabled: bool = False) -> AttendanceSummary:
    records = load_month_records(db, employee_id, month, year)
    summary = summarize_records(records, overtime_enabled=overtime_enabled)
    logger.debug(
        "Attendance %s for %s/%s: present=%s absent=%s late=%s half=%s overtime=%.2f",
        employee_id, month, year, summary.present_days, summary.absent_days,
        summary.late_days, summary.half_days, summary.overtime_hours,
    )
    return summary
