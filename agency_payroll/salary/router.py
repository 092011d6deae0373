# agency_payroll/salary/router.py
from typing import Any, Dict, List
import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from agency_payroll.auth.dependencies import get_user_id, require_role
from agency_payroll.database import get_db
from agency_payroll.errors import NotFound
from agency_payroll.hr.settings import load_payroll_settings
from agency_payroll.salary.adjustments import (
    add_adjustment,
    delete_adjustment,
    list_adjustments,
    signed_amount,
    update_payroll_status,
)
from agency_payroll.salary.engine import generate_payroll
from agency_payroll.salary.models import PayrollRecord
from agency_payroll.schemas.payroll_schema import (
    AdjustmentCreate,
    AdjustmentOut,
    GeneratePayrollRequest,
    GeneratePayrollResponse,
    PayrollOut,
    PayrollStatusUpdate,
)
from agency_payroll.utils.http_errors import engine_errors_as_http

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payroll", tags=["payroll"])

hr_only = require_role(["admin", "hr"])


def _adjustment_out(adj) -> AdjustmentOut:
    return AdjustmentOut(
        id=adj.id,
        payroll_id=adj.payroll_id,
        type=adj.type,
        amount=adj.amount,
        signed_amount=signed_amount(adj),
        reason=adj.reason,
        created_by=adj.created_by,
        created_at=adj.created_at,
    )


# ------------------------- GENERATE -------------------------
@router.post("/generate", response_model=GeneratePayrollResponse)
@engine_errors_as_http
def generate(
    body: GeneratePayrollRequest,
    db: Session = Depends(get_db),
    payload: Dict[str, Any] = Depends(hr_only),
):
    # HR settings are read once and passed in; the calculator never looks them up
    settings = load_payroll_settings(db)
    result = generate_payroll(
        db,
        body.month,
        body.year,
        settings=settings,
        generated_by=get_user_id(payload),
        employee_id=body.employee_id,
    )
    return GeneratePayrollResponse(
        count=result.count,
        skipped=result.skipped,
        failed=result.failed,
        message=result.message,
    )


# ------------------------- READ -------------------------
@router.get("", response_model=List[PayrollOut])
def list_payroll(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1900, le=9999),
    db: Session = Depends(get_db),
    payload: Dict[str, Any] = Depends(hr_only),
):
    return (
        db.query(PayrollRecord)
        .filter(PayrollRecord.month == month, PayrollRecord.year == year)
        .order_by(PayrollRecord.employee_id)
        .all()
    )


@router.get("/{payroll_id}", response_model=PayrollOut)
@engine_errors_as_http
def get_payroll(
    payroll_id: int,
    db: Session = Depends(get_db),
    payload: Dict[str, Any] = Depends(hr_only),
):
    record = db.get(PayrollRecord, payroll_id)
    if record is None:
        raise NotFound(f"Payroll record {payroll_id} not found")
    return record


# ------------------------- STATUS -------------------------
@router.patch("/{payroll_id}/status", response_model=PayrollOut)
@engine_errors_as_http
def change_status(
    payroll_id: int,
    body: PayrollStatusUpdate,
    db: Session = Depends(get_db),
    payload: Dict[str, Any] = Depends(hr_only),
):
    return update_payroll_status(db, payroll_id, body.status)


# ------------------------- ADJUSTMENTS -------------------------
@router.get("/{payroll_id}/adjustments", response_model=List[AdjustmentOut])
@engine_errors_as_http
def get_adjustments(
    payroll_id: int,
    db: Session = Depends(get_db),
    payload: Dict[str, Any] = Depends(hr_only),
):
    return [_adjustment_out(a) for a in list_adjustments(db, payroll_id)]


@router.post("/{payroll_id}/adjustments", response_model=AdjustmentOut, status_code=status.HTTP_201_CREATED)
@engine_errors_as_http
def create_adjustment(
    payroll_id: int,
    body: AdjustmentCreate,
    db: Session = Depends(get_db),
    payload: Dict[str, Any] = Depends(hr_only),
):
    adj = add_adjustment(db, payroll_id, body.type, body.amount, body.reason, actor=get_user_id(payload))
    return _adjustment_out(adj)


@router.delete("/{payroll_id}/adjustments/{adjustment_id}", status_code=status.HTTP_204_NO_CONTENT)
@engine_errors_as_http
def remove_adjustment(
    payroll_id: int,
    adjustment_id: int,
    db: Session = Depends(get_db),
    payload: Dict[str, Any] = Depends(hr_only),
):
    delete_adjustment(db, payroll_id, adjustment_id)
