# agency_payroll/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from agency_payroll.config import DATABASE_URL, SQL_ECHO

engine = create_engine(
    DATABASE_URL,
    echo=SQL_ECHO,
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    # importing the model modules registers every table on Base.metadata
    from agency_payroll.employees import models as _employees  # noqa: F401
    from agency_payroll.attendance import models as _attendance  # noqa: F401
    from agency_payroll.hr import models as _hr  # noqa: F401
    from agency_payroll.salary import models as _salary  # noqa: F401
    from agency_payroll.finance import models as _finance  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
