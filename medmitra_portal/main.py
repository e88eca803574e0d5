# medmitra_portal/main.py
import os
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException

from .config import settings
from .database import init_db
from .exceptions import (
    BackendError,
    BackendUnavailable,
    SessionExpired,
    backend_error_handler,
    backend_unavailable_handler,
    form_validation_handler,
    http_exception_handler,
    session_expired_handler,
)
from .jobs.scheduler import start_scheduler, stop_scheduler

# Routers
from .routers.auth import router as auth_router
from .routers.doctor import router as doctor_router
from .routers.encounters import router as encounters_router
from .routers.coordinator import router as coordinator_router
from .routers.patient import router as patient_router
from .routers.admin import router as admin_router
from .routers.ops import router as ops_router

# ──────────────────────────────────────────────────────────────────────────────
# LOGGING
# Levels from the environment:
#   LOG_LEVEL, CLIENT_LOG_LEVEL, SQLA_LOG_LEVEL, UVICORN_LOG_LEVEL
# ──────────────────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# Backend client: one line per failed call and per token refresh
logging.getLogger("medmitra_portal.backend.client").setLevel(
    getattr(logging, os.getenv("CLIENT_LOG_LEVEL", "INFO"), logging.INFO)
)
logging.getLogger("sqlalchemy.engine").setLevel(
    getattr(logging, os.getenv("SQLA_LOG_LEVEL", "WARNING"), logging.WARNING)
)
logging.getLogger("uvicorn.error").setLevel(
    getattr(logging, os.getenv("UVICORN_LOG_LEVEL", "INFO"), logging.INFO)
)
logging.getLogger("apscheduler").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────────────────
# FastAPI App
# ──────────────────────────────────────────────────────────────────────────────
app = FastAPI(title=settings.APP_NAME)

app.add_exception_handler(BackendError, backend_error_handler)
app.add_exception_handler(BackendUnavailable, backend_unavailable_handler)
app.add_exception_handler(SessionExpired, session_expired_handler)
app.add_exception_handler(RequestValidationError, form_validation_handler)
app.add_exception_handler(HTTPException, http_exception_handler)

app.include_router(auth_router)
app.include_router(doctor_router)
app.include_router(encounters_router)
app.include_router(coordinator_router)
app.include_router(patient_router)
app.include_router(admin_router, prefix="/admin")  # admin.py does not repeat /admin
app.include_router(ops_router)

# ──────────────────────────────────────────────────────────────────────────────
# Lifecycle
# ──────────────────────────────────────────────────────────────────────────────
@app.on_event("startup")
def on_startup():
    init_db()
    if settings.SCHEDULER_ENABLED:
        start_scheduler()
    logger.info("Startup complete: %s (%s) -> %s", settings.APP_NAME, settings.ENV, settings.API_BASE_URL)

@app.on_event("shutdown")
def on_shutdown():
    stop_scheduler()
    logger.info("Shutdown complete")

@app.get("/")
def root():
    return {"ok": True, "app": settings.APP_NAME, "env": settings.ENV}
