# agency_payroll/schemas/payroll_schema.py
from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from agency_payroll.schemas.common import Money

PayrollStatus = Literal["draft", "generated", "paid"]


class GeneratePayrollRequest(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1900, le=9999)
    employee_id: Optional[int] = None


class GeneratePayrollResponse(BaseModel):
    count: int
    skipped: List[int] = []
    failed: List[int] = []
    message: str


class PayrollOut(BaseModel):
    id: int
    employee_id: int
    month: int
    year: int
    basic_salary: Money
    total_allowances: Money
    overtime_amount: Money
    absent_deduction: Money
    half_day_deduction: Money
    late_deduction: Money
    loan_deduction: Money
    other_deductions: Money
    gross_salary: Money
    net_salary: Money
    total_present_days: int
    total_absent_days: int
    total_late_days: int
    total_half_days: int
    total_overtime_hours: Money
    working_days: int
    status: str
    generated_by: Optional[int] = None
    generated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PayrollStatusUpdate(BaseModel):
    status: PayrollStatus


class AdjustmentCreate(BaseModel):
    # checked against the adjustment types by the engine (InvalidType -> 400)
    type: str
    amount: Union[str, int, float]
    reason: str = Field(..., min_length=1)


class AdjustmentOut(BaseModel):
    id: int
    payroll_id: int
    type: str
    amount: Money
    signed_amount: str
    reason: str
    created_by: Optional[int] = None
    created_at: datetime
