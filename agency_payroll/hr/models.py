# agency_payroll/hr/models.py
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from agency_payroll.database import Base


class HRSettings(Base):
    __tablename__ = "hr_settings"

    id = Column(Integer, primary_key=True, index=True)
    overtime_enabled = Column(Boolean, nullable=False, default=False)
    office_start_time = Column(String(5), nullable=False, default="09:00")
    grace_period_minutes = Column(Integer, nullable=False, default=10)
    # comma separated day names, e.g. "Friday" or "Saturday,Sunday"
    weekly_off_days = Column(String(100), nullable=False, default="Friday")
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<HRSettings id={self.id} overtime_enabled={self.overtime_enabled}>"
