# agency_payroll/finance/ledger.py
"""
General ledger view over income, expenses and paid payroll.

Nothing here is persisted. Each call reads the source rows, maps them to
debit/credit entries, orders them by date and walks them once to attach a
running balance. A malformed amount on any row aborts the whole computation:
a partially wrong balance column is worse than none.
"""
import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Iterable, List, Optional

from sqlalchemy import false
from sqlalchemy.orm import Session

from agency_payroll.errors import InconsistentLedgerData, InvalidAmount
from agency_payroll.finance.models import Expense, Income
from agency_payroll.salary.models import PayrollRecord
from agency_payroll.utils.decimal_math import quantize_money, subtract, sum_amounts

logger = logging.getLogger(__name__)

ENTRY_TYPES = ("income", "expense", "payroll")
_TYPE_ORDER = {t: i for i, t in enumerate(ENTRY_TYPES)}


@dataclass(frozen=True)
class LedgerEntry:
    id: str
    date: datetime
    type: str
    description: str
    category: str
    debit: str
    credit: str
    balance: str = "0.00"


@dataclass(frozen=True)
class GeneralLedger:
    entries: List[LedgerEntry]
    total_debits: str
    total_credits: str
    final_balance: str


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise InconsistentLedgerData(f"Invalid ledger date: {value!r}")


def _money(value, kind: str, row_id) -> str:
    try:
        return quantize_money(value)
    except InvalidAmount as exc:
        raise InconsistentLedgerData(f"Malformed amount on {kind} {row_id}: {exc}") from exc


# ---------------------------------------------------------------------
# Mapping source rows
# ---------------------------------------------------------------------
def income_entry(row) -> LedgerEntry:
    return LedgerEntry(
        id=f"income-{row.id}",
        date=_as_datetime(row.date),
        type="income",
        description=row.source,
        category=row.category,
        debit=_money(row.amount, "income", row.id),
        credit="0.00",
    )


def expense_entry(row) -> LedgerEntry:
    return LedgerEntry(
        id=f"expense-{row.id}",
        date=_as_datetime(row.date),
        type="expense",
        description=row.title,
        category=row.category,
        debit="0.00",
        credit=_money(row.amount, "expense", row.id),
    )


def payroll_entry(row) -> LedgerEntry:
    try:
        period_start = datetime(int(row.year), int(row.month), 1)
    except (TypeError, ValueError) as exc:
        raise InconsistentLedgerData(f"Invalid pay period on payroll {row.id}") from exc
    return LedgerEntry(
        id=f"payroll-{row.id}",
        date=period_start,
        type="payroll",
        description=f"Payroll {row.month}/{row.year}",
        category="Payroll",
        debit="0.00",
        credit=_money(row.net_salary, "payroll", row.id),
    )


def _sort_key(entry: LedgerEntry):
    return entry.date, _TYPE_ORDER.get(entry.type, len(_TYPE_ORDER)), entry.id


def build_ledger(incomes: Iterable, expenses: Iterable, payrolls: Iterable) -> GeneralLedger:
    entries = [income_entry(r) for r in incomes]
    entries += [expense_entry(r) for r in expenses]
    entries += [payroll_entry(r) for r in payrolls if r.status == "paid"]

    entries.sort(key=_sort_key)

    running = "0"
    with_balance = []
    for entry in entries:
        running = subtract(sum_amounts([running, entry.debit]), entry.credit)
        with_balance.append(replace(entry, balance=quantize_money(running)))

    total_debits = quantize_money(sum_amounts(e.debit for e in with_balance))
    total_credits = quantize_money(sum_amounts(e.credit for e in with_balance))
    final_balance = quantize_money(subtract(total_debits, total_credits))

    return GeneralLedger(
        entries=with_balance,
        total_debits=total_debits,
        total_credits=total_credits,
        final_balance=final_balance,
    )


# ---------------------------------------------------------------------
# Database entry point
# ---------------------------------------------------------------------
def compute_general_ledger(
    db: Session,
    category: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> GeneralLedger:
    income_q = db.query(Income)
    expense_q = db.query(Expense)
    payroll_q = db.query(PayrollRecord).filter(PayrollRecord.status == "paid")

    if category:
        income_q = income_q.filter(Income.category == category)
        expense_q = expense_q.filter(Expense.category == category)
        if category != "Payroll":
            payroll_q = payroll_q.filter(false())

    if start_date is not None:
        start = _as_datetime(start_date)
        income_q = income_q.filter(Income.date >= start)
        expense_q = expense_q.filter(Expense.date >= start)
        # payroll entries are dated on the 1st of their pay month
        first_month = start.month if (start.day, start.time()) == (1, datetime.min.time()) else start.month + 1
        payroll_q = payroll_q.filter(
            (PayrollRecord.year > start.year)
            | ((PayrollRecord.year == start.year) & (PayrollRecord.month >= first_month))
        )
    if end_date is not None:
        # inclusive of the whole end day
        end = datetime(end_date.year, end_date.month, end_date.day, 23, 59, 59, 999999)
        income_q = income_q.filter(Income.date <= end)
        expense_q = expense_q.filter(Expense.date <= end)
        payroll_q = payroll_q.filter(
            (PayrollRecord.year < end.year)
            | ((PayrollRecord.year == end.year) & (PayrollRecord.month <= end.month))
        )

    try:
        ledger = build_ledger(income_q.all(), expense_q.all(), payroll_q.all())
    except InconsistentLedgerData:
        logger.exception("General ledger computation aborted")
        raise

    logger.info(
        "General ledger: %s entries, debits=%s credits=%s balance=%s",
        len(ledger.entries), ledger.total_debits, ledger.total_credits, ledger.final_balance,
    )
    return ledger


def display_entries(ledger: GeneralLedger, search: str = "", entry_type: Optional[str] = None) -> List[LedgerEntry]:
    """Newest first, filtered by free text over description/category and by type."""
    needle = (search or "").strip().lower()
    rows = sorted(ledger.entries, key=_sort_key, reverse=True)
    return [
        e for e in rows
        if (not needle or needle in (e.description or "").lower() or needle in (e.category or "").lower())
        and (not entry_type or entry_type == "all" or e.type == entry_type)
    ]
