# agency_payroll/auth/dependencies.py
from typing import Dict, Any, Optional, Callable, Iterable
import logging

from fastapi import Header, HTTPException, Depends, status

from agency_payroll.auth.jwt_handler import decode_jwt

logger = logging.getLogger(__name__)


# -------------------------------------------
# Helper: Extract Bearer token safely
# -------------------------------------------
def _extract_bearer(auth_header: Optional[str]) -> Optional[str]:
    if not auth_header:
        return None

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]


# -------------------------------------------
# Strict JWT-only dependency (API use)
# -------------------------------------------
def get_current_user_payload(authorization: Optional[str] = Header(None)) -> Dict[str, Any]:
    token = _extract_bearer(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing auth token")

    payload = decode_jwt(token)
    if payload is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    return payload


def get_user_id(payload: Dict[str, Any]) -> int:
    for key in ("sub", "user_id", "id"):
        v = payload.get(key)
        if v is None:
            continue
        try:
            return int(v)
        except (TypeError, ValueError):
            logger.warning("Invalid user id in token for key %s: %r", key, v)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid user id in token ({key})")

    logger.warning("Token subject missing: payload keys=%s", list(payload.keys()))
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token subject missing")


# -------------------------------------------
# Role check that returns the token payload
# Usage: Depends(require_role(["admin", "hr"]))
# -------------------------------------------
def require_role(allowed_roles: Iterable[str]) -> Callable:
    allowed = [str(r).lower() for r in allowed_roles]

    def dependency(payload: Dict[str, Any] = Depends(get_current_user_payload)) -> Dict[str, Any]:
        role = payload.get("role")
        if not role or str(role).lower() not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return payload

    return dependency
