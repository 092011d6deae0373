# agency_payroll/finance/models.py
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, Numeric, String, Text

from agency_payroll.database import Base


class Income(Base):
    __tablename__ = "income"

    id = Column(Integer, primary_key=True, index=True)
    source = Column(String(200), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String(100), nullable=False)
    date = Column(DateTime, nullable=False, default=datetime.utcnow)
    description = Column(Text, nullable=True)
    created_by = Column(Integer, nullable=True)

    def __repr__(self):
        return f"<Income id={self.id} source={self.source} amount={self.amount}>"


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String(100), nullable=False)
    date = Column(DateTime, nullable=False, default=datetime.utcnow)
    description = Column(Text, nullable=True)
    created_by = Column(Integer, nullable=True)

    def __repr__(self):
        return f"<Expense id={self.id} title={self.title} amount={self.amount}>"
