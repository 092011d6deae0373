# agency_payroll/finance/router.py
from datetime import date
from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from agency_payroll.auth.dependencies import require_role
from agency_payroll.database import get_db
from agency_payroll.finance.ledger import compute_general_ledger, display_entries
from agency_payroll.schemas.ledger_schema import GeneralLedgerOut, LedgerEntryOut
from agency_payroll.utils.http_errors import engine_errors_as_http

router = APIRouter(prefix="/finance", tags=["finance"])


@router.get("/ledger", response_model=GeneralLedgerOut)
@engine_errors_as_http
def general_ledger(
    category: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    type: Literal["all", "income", "expense", "payroll"] = "all",
    search: str = "",
    db: Session = Depends(get_db),
    payload: Dict[str, Any] = Depends(require_role(["admin", "hr", "accounts"])),
):
    ledger = compute_general_ledger(db, category=category, start_date=start_date, end_date=end_date)
    # totals always cover the full ledger; search/type only narrow the listed rows
    rows = display_entries(ledger, search=search, entry_type=type)
    return GeneralLedgerOut(
        entries=[LedgerEntryOut.model_validate(e) for e in rows],
        total_debits=ledger.total_debits,
        total_credits=ledger.total_credits,
        final_balance=ledger.final_balance,
    )
