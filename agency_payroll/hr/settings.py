# agency_payroll/hr/settings.py
import logging
from datetime import datetime, time, timedelta

from sqlalchemy.orm import Session

from agency_payroll.errors import InvalidInput
from agency_payroll.hr.models import HRSettings
from agency_payroll.salary.engine import PayrollSettings

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("overtime_enabled", "office_start_time", "grace_period_minutes", "weekly_off_days")


def get_hr_settings(db: Session) -> HRSettings:
    """Return the single settings row, creating it with defaults on first use."""
    settings = db.query(HRSettings).order_by(HRSettings.id).first()
    if settings is None:
        settings = HRSettings()
        db.add(settings)
        db.commit()
        db.refresh(settings)
        logger.info("Created default HR settings (id=%s)", settings.id)
    return settings


def parse_office_time(value: str) -> time:
    try:
        hours, minutes = str(value).strip().split(":")[:2]
        return time(int(hours), int(minutes))
    except (TypeError, ValueError):
        raise InvalidInput(f"Invalid office start time {value!r}; expected HH:MM") from None


def update_hr_settings(db: Session, changes: dict) -> HRSettings:
    settings = get_hr_settings(db)
    for key, value in changes.items():
        if key not in EDITABLE_FIELDS or value is None:
            continue
        if key == "office_start_time":
            parse_office_time(value)
        if key == "grace_period_minutes" and int(value) < 0:
            raise InvalidInput("Grace period cannot be negative")
        if key == "weekly_off_days" and isinstance(value, (list, tuple)):
            value = ",".join(v.strip() for v in value if v and v.strip())
        setattr(settings, key, value)
    db.commit()
    db.refresh(settings)
    logger.info("HR settings updated: %s", {k: v for k, v in changes.items() if k in EDITABLE_FIELDS})
    return settings


def load_payroll_settings(db: Session) -> PayrollSettings:
    hr = get_hr_settings(db)
    off_days = tuple(d.strip() for d in (hr.weekly_off_days or "").split(",") if d.strip())
    return PayrollSettings(overtime_enabled=bool(hr.overtime_enabled), weekly_off_days=off_days)


def late_cutoff(hr: HRSettings, day) -> datetime:
    start = datetime.combine(day, parse_office_time(hr.office_start_time))
    return start + timedelta(minutes=hr.grace_period_minutes or 0)
