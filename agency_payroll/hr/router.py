# agency_payroll/hr/router.py
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from agency_payroll.auth.dependencies import require_role
from agency_payroll.database import get_db
from agency_payroll.hr.settings import get_hr_settings, update_hr_settings
from agency_payroll.schemas.hr_schema import HRSettingsOut, HRSettingsUpdate
from agency_payroll.utils.http_errors import engine_errors_as_http

router = APIRouter(prefix="/hr", tags=["hr"])


@router.get("/settings", response_model=HRSettingsOut)
def read_settings(
    db: Session = Depends(get_db),
    payload: Dict[str, Any] = Depends(require_role(["admin", "hr"])),
):
    return get_hr_settings(db)


@router.patch("/settings", response_model=HRSettingsOut)
@engine_errors_as_http
def patch_settings(
    body: HRSettingsUpdate,
    db: Session = Depends(get_db),
    payload: Dict[str, Any] = Depends(require_role(["admin", "hr"])),
):
    return update_hr_settings(db, body.model_dump(exclude_unset=True))
