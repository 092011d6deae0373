# agency_payroll/attendance/models.py

from sqlalchemy import Column, Integer, Date, DateTime, String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from agency_payroll.database import Base

ATTENDANCE_STATUSES = ("present", "absent", "late", "half-day")


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    check_in = Column(DateTime, nullable=True)
    check_out = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default="present")   # present / absent / late / half-day
    notes = Column(Text, nullable=True)

    employee = relationship("Employee", back_populates="attendance_records")

    def __repr__(self):
        return f"<AttendanceRecord id={self.id} employee_id={self.employee_id} date={self.date} status={self.status}>"
