# agency_payroll/schemas/attendance_schema.py
from pydantic import BaseModel
from datetime import date, datetime
from typing import Literal, Optional

AttendanceStatus = Literal["present", "absent", "late", "half-day"]


class AttendanceOut(BaseModel):
    id: int
    employee_id: int
    date: date
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    status: str
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class AttendanceEntry(BaseModel):
    status: AttendanceStatus
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    notes: Optional[str] = None


class AttendanceSummaryOut(BaseModel):
    employee_id: int
    month: int
    year: int
    present_days: int
    absent_days: int
    late_days: int
    half_days: int
    overtime_hours: float
    converted_absences: int
    residual_late_days: int
