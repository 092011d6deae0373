# agency_payroll/errors.py
"""
Error taxonomy shared by the payroll and ledger computations.

Routers turn these into HTTP responses; the computation modules never raise
HTTPException themselves.
"""


class PayrollEngineError(Exception):
    """Base class for every error raised by the computation core."""


class InvalidInput(PayrollEngineError):
    pass


class InvalidAmount(InvalidInput):
    """A monetary value could not be parsed as a decimal, or a division by zero."""


class InvalidType(InvalidInput):
    """An adjustment type outside the fixed set."""


class InvalidStatus(InvalidInput):
    """A payroll or attendance status outside the fixed set."""


class NotFound(PayrollEngineError):
    pass


class MissingSalaryStructure(PayrollEngineError):
    """Raised per employee during batch generation; the batch skips and continues."""

    def __init__(self, employee_id):
        super().__init__(f"No salary structure found for employee {employee_id}")
        self.employee_id = employee_id


class InconsistentLedgerData(PayrollEngineError):
    """A ledger source row is malformed; the whole balance computation is aborted."""
