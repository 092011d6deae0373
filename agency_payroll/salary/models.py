# agency_payroll/salary/models.py
from datetime import datetime

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from agency_payroll.database import Base

PAYROLL_STATUSES = ("draft", "generated", "paid")
ADJUSTMENT_TYPES = ("bonus", "penalty", "loan_deduction", "advance", "other")

MONEY = Numeric(12, 2)


class SalaryStructure(Base):
    __tablename__ = "salary_structures"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    basic_salary = Column(MONEY, nullable=False)
    house_allowance = Column(MONEY, nullable=False, default=0)
    medical_allowance = Column(MONEY, nullable=False, default=0)
    travel_allowance = Column(MONEY, nullable=False, default=0)
    food_allowance = Column(MONEY, nullable=False, default=0)
    other_allowances = Column(MONEY, nullable=False, default=0)
    effective_from = Column(Date, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    employee = relationship("Employee", back_populates="salary_structures")

    def allowance_components(self):
        return [
            self.house_allowance,
            self.medical_allowance,
            self.travel_allowance,
            self.food_allowance,
            self.other_allowances,
        ]

    def __repr__(self):
        return f"<SalaryStructure id={self.id} employee_id={self.employee_id} effective_from={self.effective_from}>"


class PayrollRecord(Base):
    __tablename__ = "payroll_records"
    __table_args__ = (
        UniqueConstraint("employee_id", "month", "year", name="uq_payroll_employee_period"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    basic_salary = Column(MONEY, nullable=False)
    total_allowances = Column(MONEY, nullable=False, default=0)
    overtime_amount = Column(MONEY, nullable=False, default=0)
    absent_deduction = Column(MONEY, nullable=False, default=0)
    half_day_deduction = Column(MONEY, nullable=False, default=0)
    late_deduction = Column(MONEY, nullable=False, default=0)
    loan_deduction = Column(MONEY, nullable=False, default=0)
    other_deductions = Column(MONEY, nullable=False, default=0)
    gross_salary = Column(MONEY, nullable=False)
    net_salary = Column(MONEY, nullable=False)

    total_present_days = Column(Integer, nullable=False, default=0)
    total_absent_days = Column(Integer, nullable=False, default=0)
    total_late_days = Column(Integer, nullable=False, default=0)
    total_half_days = Column(Integer, nullable=False, default=0)
    total_overtime_hours = Column(Numeric(7, 2), nullable=False, default=0)
    working_days = Column(Integer, nullable=False, default=0)

    status = Column(String(20), nullable=False, default="draft")   # draft / generated / paid
    generated_by = Column(Integer, nullable=True)
    generated_at = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)

    employee = relationship("Employee", back_populates="payroll_records")
    adjustments = relationship(
        "SalaryAdjustment",
        back_populates="payroll",
        cascade="all, delete-orphan",
        order_by="SalaryAdjustment.id",
    )

    def __repr__(self):
        return f"<PayrollRecord id={self.id} employee_id={self.employee_id} period={self.month}/{self.year} status={self.status}>"


class SalaryAdjustment(Base):
    __tablename__ = "salary_adjustments"

    id = Column(Integer, primary_key=True, index=True)
    payroll_id = Column(Integer, ForeignKey("payroll_records.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(20), nullable=False)   # bonus / penalty / loan_deduction / advance / other
    amount = Column(MONEY, nullable=False)
    reason = Column(Text, nullable=False)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    payroll = relationship("PayrollRecord", back_populates="adjustments")

    def __repr__(self):
        return f"<SalaryAdjustment id={self.id} payroll_id={self.payroll_id} type={self.type} amount={self.amount}>"
