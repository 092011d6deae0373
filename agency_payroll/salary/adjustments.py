# agency_payroll/salary/adjustments.py
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from agency_payroll.errors import InvalidAmount, InvalidInput, InvalidStatus, InvalidType, NotFound
from agency_payroll.salary.models import ADJUSTMENT_TYPES, PAYROLL_STATUSES, PayrollRecord, SalaryAdjustment
from agency_payroll.utils.decimal_math import (
    add,
    format_currency,
    is_negative,
    max_amount,
    parse_currency,
    quantize_money,
    subtract,
    sum_amounts,
    to_decimal,
)

logger = logging.getLogger(__name__)


def _get_payroll(db: Session, payroll_id: int) -> PayrollRecord:
    payroll = db.get(PayrollRecord, payroll_id)
    if payroll is None:
        raise NotFound(f"Payroll record {payroll_id} not found")
    return payroll


def signed_total(adjustments: Iterable) -> str:
    """Bonuses add; penalties, loan deductions, advances and 'other' subtract."""
    bonuses = []
    deductions = []
    for adj in adjustments:
        if adj.type == "bonus":
            bonuses.append(adj.amount)
        else:
            deductions.append(adj.amount)
    return subtract(sum_amounts(bonuses), sum_amounts(deductions))


def base_net_salary(payroll: PayrollRecord) -> str:
    return add(subtract(payroll.gross_salary, payroll.late_deduction), payroll.overtime_amount)


def recompute_net_salary(db: Session, payroll: PayrollRecord) -> PayrollRecord:
    """
    Re-derive net salary from the current adjustment rows. Never applies a
    delta, so repeated add/delete cycles cannot drift.
    """
    adjustments = (
        db.query(SalaryAdjustment)
        .filter(SalaryAdjustment.payroll_id == payroll.id)
        .all()
    )
    total = signed_total(adjustments)
    new_net = quantize_money(add(base_net_salary(payroll), total))

    negated = subtract("0", total)
    payroll.other_deductions = to_decimal(quantize_money(max_amount("0", negated)))
    payroll.net_salary = to_decimal(new_net)
    return payroll


def list_adjustments(db: Session, payroll_id: int) -> List[SalaryAdjustment]:
    _get_payroll(db, payroll_id)
    return (
        db.query(SalaryAdjustment)
        .filter(SalaryAdjustment.payroll_id == payroll_id)
        .order_by(SalaryAdjustment.created_at.desc(), SalaryAdjustment.id.desc())
        .all()
    )


def add_adjustment(
    db: Session,
    payroll_id: int,
    type: str,
    amount,
    reason: str,
    actor: Optional[int] = None,
) -> SalaryAdjustment:
    payroll = _get_payroll(db, payroll_id)

    adj_type = (type or "").strip().lower()
    if adj_type not in ADJUSTMENT_TYPES:
        raise InvalidType(f"Invalid adjustment type {type!r}; expected one of {', '.join(ADJUSTMENT_TYPES)}")

    # the sign comes from the type; callers may send deductions as negatives
    # or formatted figures such as "BDT 1,250.50"
    value = to_decimal(parse_currency(amount))
    magnitude = quantize_money(abs(value))
    if to_decimal(magnitude) == 0:
        raise InvalidAmount("Adjustment amount must be greater than zero")

    if not reason or not str(reason).strip():
        raise InvalidInput("A reason is required for every adjustment")

    try:
        adjustment = SalaryAdjustment(
            payroll_id=payroll.id,
            type=adj_type,
            amount=to_decimal(magnitude),
            reason=str(reason).strip(),
            created_by=actor,
            created_at=datetime.utcnow(),
        )
        db.add(adjustment)
        db.flush()
        recompute_net_salary(db, payroll)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Adding %s adjustment to payroll %s failed", adj_type, payroll_id)
        raise

    db.refresh(adjustment)
    logger.info(
        "Adjustment %s (%s %s) added to payroll %s by %s; net salary now %s",
        adjustment.id, adj_type, magnitude, payroll.id, actor, format_currency(payroll.net_salary),
    )
    return adjustment


def delete_adjustment(db: Session, payroll_id: int, adjustment_id: int) -> None:
    payroll = _get_payroll(db, payroll_id)
    adjustment = (
        db.query(SalaryAdjustment)
        .filter(SalaryAdjustment.id == adjustment_id, SalaryAdjustment.payroll_id == payroll_id)
        .first()
    )
    if adjustment is None:
        raise NotFound(f"Adjustment {adjustment_id} not found on payroll {payroll_id}")

    try:
        db.delete(adjustment)
        db.flush()
        recompute_net_salary(db, payroll)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Deleting adjustment %s from payroll %s failed", adjustment_id, payroll_id)
        raise

    logger.info(
        "Adjustment %s removed from payroll %s; net salary now %s",
        adjustment_id, payroll_id, format_currency(payroll.net_salary),
    )


def update_payroll_status(db: Session, payroll_id: int, status: str) -> PayrollRecord:
    payroll = _get_payroll(db, payroll_id)

    new_status = (status or "").strip().lower()
    if new_status not in PAYROLL_STATUSES:
        raise InvalidStatus(f"Invalid payroll status {status!r}; expected one of {', '.join(PAYROLL_STATUSES)}")

    previous = payroll.status
    if PAYROLL_STATUSES.index(new_status) < PAYROLL_STATUSES.index(previous or "draft"):
        # not enforced, but worth a trace when a paid record is reopened
        logger.warning("Payroll %s moved backwards from %s to %s", payroll_id, previous, new_status)

    payroll.status = new_status
    if new_status == "paid":
        if payroll.paid_at is None:
            payroll.paid_at = datetime.utcnow()
    else:
        payroll.paid_at = None

    db.commit()
    db.refresh(payroll)
    logger.info("Payroll %s status %s -> %s", payroll_id, previous, new_status)
    return payroll


def is_deduction(adjustment) -> bool:
    return adjustment.type != "bonus"


def signed_amount(adjustment) -> str:
    amount = quantize_money(adjustment.amount)
    if is_deduction(adjustment) and not is_negative(amount):
        return subtract("0", amount)
    return amount
