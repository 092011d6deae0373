# agency_payroll/schemas/hr_schema.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class HRSettingsOut(BaseModel):
    id: int
    overtime_enabled: bool
    office_start_time: str
    grace_period_minutes: int
    weekly_off_days: str
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class HRSettingsUpdate(BaseModel):
    overtime_enabled: Optional[bool] = None
    office_start_time: Optional[str] = Field(None, pattern=r"^\d{1,2}:\d{2}$")
    grace_period_minutes: Optional[int] = Field(None, ge=0)
    weekly_off_days: Optional[str] = None
