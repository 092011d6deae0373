# agency_payroll/utils/http_errors.py
from functools import wraps
import logging

from fastapi import HTTPException, status

from agency_payroll.errors import InconsistentLedgerData, InvalidInput, NotFound, PayrollEngineError

logger = logging.getLogger(__name__)


def to_http_exception(exc: PayrollEngineError) -> HTTPException:
    if isinstance(exc, NotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Record not found: {exc}")
    if isinstance(exc, InvalidInput):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid input: {exc}")
    if isinstance(exc, InconsistentLedgerData):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Computation aborted: {exc}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# Route wrapper: engine errors become HTTP errors with a message that tells
# "record not found" apart from "invalid input" and "computation aborted"
def engine_errors_as_http(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PayrollEngineError as exc:
            logger.info("%s rejected: %s", func.__name__, exc)
            raise to_http_exception(exc) from exc
    return wrapper
