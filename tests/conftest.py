"""
Shared pytest fixtures.

Every test gets its own in-memory SQLite database (StaticPool keeps the single
connection alive across sessions), plus small factories for the rows the
payroll engine reads.
"""
import os

# must be set before agency_payroll.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agency_payroll.attendance.models import AttendanceRecord
from agency_payroll.auth.jwt_handler import create_access_token
from agency_payroll.database import Base, create_tables, get_db
from agency_payroll.employees.models import Employee
from agency_payroll.finance.models import Expense, Income
from agency_payroll.salary.models import SalaryStructure


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def make_employee(db):
    counter = {"n": 0}

    def _make(name=None, status="active", user_id=None):
        counter["n"] += 1
        emp = Employee(
            name=name or f"Employee {counter['n']}",
            employee_code=f"EMP-{counter['n']:03d}",
            email=f"emp{counter['n']}@example.com",
            user_id=user_id,
            status=status,
            joining_date=date(2024, 1, 1),
        )
        db.add(emp)
        db.commit()
        db.refresh(emp)
        return emp

    return _make


@pytest.fixture
def give_structure(db):
    def _give(employee, basic="30000", house="0", medical="0", travel="0", food="0", other="0",
              effective_from=date(2024, 1, 1)):
        s = SalaryStructure(
            employee_id=employee.id,
            basic_salary=Decimal(basic),
            house_allowance=Decimal(house),
            medical_allowance=Decimal(medical),
            travel_allowance=Decimal(travel),
            food_allowance=Decimal(food),
            other_allowances=Decimal(other),
            effective_from=effective_from,
        )
        db.add(s)
        db.commit()
        db.refresh(s)
        return s

    return _give


@pytest.fixture
def mark(db):
    def _mark(employee, day, status, check_in=None, check_out=None):
        rec = AttendanceRecord(
            employee_id=employee.id,
            date=day,
            status=status,
            check_in=check_in,
            check_out=check_out,
        )
        db.add(rec)
        db.commit()
        return rec

    return _mark


@pytest.fixture
def add_income(db):
    def _add(amount, when, source="Client payment", category="Sales"):
        row = Income(source=source, amount=Decimal(amount), category=category, date=when)
        db.add(row)
        db.commit()
        return row

    return _add


@pytest.fixture
def add_expense(db):
    def _add(amount, when, title="Office rent", category="Rent"):
        row = Expense(title=title, amount=Decimal(amount), category=category, date=when)
        db.add(row)
        db.commit()
        return row

    return _add


# =============================================================================
# HTTP
# =============================================================================


@pytest.fixture
def client(session_factory):
    from fastapi.testclient import TestClient

    from agency_payroll.main import app

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def hr_headers():
    token = create_access_token({"sub": "900", "role": "hr", "name": "Hannah HR"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def employee_headers():
    def _headers(user_id):
        token = create_access_token({"sub": str(user_id), "role": "employee"})
        return {"Authorization": f"Bearer {token}"}

    return _headers


