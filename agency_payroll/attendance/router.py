# agency_payroll/attendance/router.py
from datetime import date, datetime
from typing import Any, Dict
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from agency_payroll.attendance.aggregator import aggregate_attendance, worked_hours
from agency_payroll.attendance.models import AttendanceRecord
from agency_payroll.auth.dependencies import get_current_user_payload, get_user_id, require_role
from agency_payroll.database import get_db
from agency_payroll.employees.models import Employee
from agency_payroll.hr.settings import get_hr_settings, late_cutoff
from agency_payroll.schemas.attendance_schema import AttendanceEntry, AttendanceOut, AttendanceSummaryOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attendance", tags=["attendance"])


# -----------------------------
# Helpers
# -----------------------------
def _employee_for_user(db: Session, user_id: int) -> Employee:
    emp = db.query(Employee).filter(Employee.user_id == user_id).first()
    if not emp:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No employee record linked to this user")
    return emp


def _format_duration(hours):
    """Return human friendly duration 'Hh Mm' from hours"""
    if hours is None:
        return None
    s = int(round(hours * 3600))
    h, m = s // 3600, (s % 3600) // 60
    return f"{h}h {m}m" if h else f"{m}m"


def arrival_status(hr, now: datetime) -> str:
    return "late" if now > late_cutoff(hr, now.date()) else "present"


# -----------------------------
# Check in
# -----------------------------
@router.post("/checkin", response_model=dict)
def check_in(
    db: Session = Depends(get_db),
    payload: Dict[str, Any] = Depends(get_current_user_payload),
):
    emp = _employee_for_user(db, get_user_id(payload))
    now_dt = datetime.now()
    today = now_dt.date()

    att = db.query(AttendanceRecord).filter(
        AttendanceRecord.employee_id == emp.id, AttendanceRecord.date == today
    ).first()

    if att and att.check_in:
        return {"success": False, "message": "Already checked-in", "attendance": AttendanceOut.model_validate(att).model_dump(mode="json")}

    arrival = arrival_status(get_hr_settings(db), now_dt)
    if not att:
        att = AttendanceRecord(employee_id=emp.id, date=today, check_in=now_dt, status=arrival)
        db.add(att)
    else:
        att.check_in = now_dt
        att.status = arrival
    db.commit()
    db.refresh(att)

    logger.info("Employee %s checked in at %s as %s (attendance id=%s)", emp.id, now_dt.isoformat(), arrival, att.id)
    return {"success": True, "message": "Checked in successfully", "attendance": AttendanceOut.model_validate(att).model_dump(mode="json")}


# -----------------------------
# Check out
# -----------------------------
@router.post("/checkout", response_model=dict)
def check_out(
    db: Session = Depends(get_db),
    payload: Dict[str, Any] = Depends(get_current_user_payload),
):
    emp = _employee_for_user(db, get_user_id(payload))
    now_dt = datetime.now()

    att = db.query(AttendanceRecord).filter(
        AttendanceRecord.employee_id == emp.id, AttendanceRecord.date == now_dt.date()
    ).first()

    if not att:
        raise HTTPException(status_code=404, detail="No attendance record found for today. Please check in first.")
    if not att.check_in:
        raise HTTPException(status_code=400, detail="Cannot check out without checking in first.")
    if att.check_out:
        return {"success": False, "message": "Already checked out", "attendance": AttendanceOut.model_validate(att).model_dump(mode="json")}

    att.check_out = now_dt
    db.commit()
    db.refresh(att)

    hours = worked_hours(att.check_in, att.check_out)
    logger.info("Employee %s checked out at %s (attendance id=%s) worked: %s",
                emp.id, now_dt.isoformat(), att.id, _format_duration(hours))
    return {
        "success": True,
        "message": "Checked out successfully",
        "attendance": AttendanceOut.model_validate(att).model_dump(mode="json"),
        "worked_human": _format_duration(hours),
    }


# -----------------------------
# Manual entry / correction (HR)
# -----------------------------
@router.put("/{employee_id}/{day}", response_model=AttendanceOut)
def upsert_attendance(
    employee_id: int,
    day: date,
    body: AttendanceEntry,
    db: Session = Depends(get_db),
    payload: Dict[str, Any] = Depends(require_role(["admin", "hr"])),
):
    if db.get(Employee, employee_id) is None:
        raise HTTPException(status_code=404, detail="Employee not found")

    att = db.query(AttendanceRecord).filter(
        AttendanceRecord.employee_id == employee_id, AttendanceRecord.date == day
    ).first()
    if att is None:
        att = AttendanceRecord(employee_id=employee_id, date=day)
        db.add(att)

    att.status = body.status
    att.check_in = body.check_in
    att.check_out = body.check_out
    att.notes = body.notes
    db.commit()
    db.refresh(att)

    logger.info("Attendance for employee %s on %s set to %s by %s", employee_id, day, body.status, get_user_id(payload))
    return att


# -----------------------------
# Monthly summary
# -----------------------------
@router.get("/{employee_id}/summary", response_model=AttendanceSummaryOut)
def monthly_summary(
    employee_id: int,
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1900, le=9999),
    db: Session = Depends(get_db),
    payload: Dict[str, Any] = Depends(require_role(["admin", "hr"])),
):
    if db.get(Employee, employee_id) is None:
        raise HTTPException(status_code=404, detail="Employee not found")

    hr = get_hr_settings(db)
    s = aggregate_attendance(db, employee_id, month, year, overtime_enabled=bool(hr.overtime_enabled))
    return AttendanceSummaryOut(
        employee_id=employee_id,
        month=month,
        year=year,
        present_days=s.present_days,
        absent_days=s.absent_days,
        late_days=s.late_days,
        half_days=s.half_days,
        overtime_hours=round(s.overtime_hours, 2),
        converted_absences=s.converted_absences,
        residual_late_days=s.residual_late_days,
    )
