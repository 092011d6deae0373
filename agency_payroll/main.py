# agency_payroll/main.py
# Loads .env (via config), configures logging, creates the app and mounts routers.
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agency_payroll.config import CORS_ORIGINS, LOG_LEVEL

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create app immediately (safer for circular imports)
app = FastAPI(title="Agency Payroll & Ledger Engine")

# ---------------------------------------------------------------------
# Import routers AFTER app creation (avoids early eval / circular import)
# ---------------------------------------------------------------------
from agency_payroll.attendance.router import router as attendance_router  # noqa: E402
from agency_payroll.finance.router import router as finance_router  # noqa: E402
from agency_payroll.hr.router import router as hr_router  # noqa: E402
from agency_payroll.salary.router import router as payroll_router  # noqa: E402

# -------------------- Middleware --------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.get("/")
def home():
    return {
        "message": "Agency payroll engine running!",
        "endpoints": {
            "hr_settings": "/hr/settings",
            "attendance": "/attendance/",
            "payroll": "/payroll",
            "ledger": "/finance/ledger",
        },
    }


# ------------------- INCLUDE ROUTERS -------------------
app.include_router(hr_router)
app.include_router(attendance_router)
app.include_router(payroll_router)
app.include_router(finance_router)


@app.on_event("startup")
def _log_routes():
    for r in app.routes:
        if hasattr(r, "path"):
            methods = sorted(getattr(r, "methods", None) or [])
            logger.debug("route %-45s %s", r.path, methods)
