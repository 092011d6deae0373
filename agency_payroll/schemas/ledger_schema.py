# agency_payroll/schemas/ledger_schema.py
from datetime import datetime
from typing import List

from pydantic import BaseModel


class LedgerEntryOut(BaseModel):
    id: str
    date: datetime
    type: str
    description: str
    category: str
    debit: str
    credit: str
    balance: str

    model_config = {"from_attributes": True}


class GeneralLedgerOut(BaseModel):
    entries: List[LedgerEntryOut]
    total_debits: str
    total_credits: str
    final_balance: str
