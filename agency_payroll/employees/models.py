# agency_payroll/employees/models.py
from sqlalchemy import Column, Integer, String, Date
from sqlalchemy.orm import relationship

from agency_payroll.database import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    employee_code = Column(String(30), nullable=True, unique=True)
    name = Column(String(100), nullable=False)
    email = Column(String(150), nullable=True)

    user_id = Column(Integer, nullable=True, index=True)
    department_id = Column(Integer, nullable=True)
    designation_id = Column(Integer, nullable=True)
    joining_date = Column(Date, nullable=True)
    # active / inactive; employees are deactivated, never hard-deleted while payroll exists
    status = Column(String(20), nullable=False, default="active")

    salary_structures = relationship(
        "SalaryStructure",
        back_populates="employee",
        cascade="all, delete-orphan",
        order_by="SalaryStructure.effective_from",
    )
    attendance_records = relationship("AttendanceRecord", back_populates="employee", cascade="all, delete-orphan")
    payroll_records = relationship("PayrollRecord", back_populates="employee", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Employee id={self.id} name={self.name} status={self.status}>"
