# medmitra_portal/routers/ops.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db, utcnow
from ..jobs.scheduler import get_scheduler
from ..models import EncounterDraft, PortalSession
from ..services import drafts, sessions

router = APIRouter(prefix="/ops", tags=["ops"])

def _require_admin(x_admin_token: str | None) -> None:
    expected = (settings.ADMIN_TOKEN or "").strip()
    provided = (x_admin_token or "").strip()
    if not expected:
        raise HTTPException(status_code=403, detail="ADMIN_TOKEN is not configured")
    if provided != expected:
        raise HTTPException(status_code=401, detail="Invalid admin token")

@router.get("/health")
def health(db: Session = Depends(get_db)):
    return {
        "ok": True,
        "app": settings.APP_NAME,
        "env": settings.ENV,
        "tz": settings.TIMEZONE,
        "backend": settings.API_BASE_URL,
        "scheduler": get_scheduler() is not None,
        "sessions": db.query(PortalSession).count(),
        "drafts": db.query(EncounterDraft).count(),
        "ts": utcnow().isoformat(),
    }

@router.post("/drafts/purge")
def purge(x_admin_token: str | None = Header(default=None)):
    _require_admin(x_admin_token)
    return {
        "ok": True,
        "flushed": drafts.flush_pending(get_scheduler()),
        "drafts_removed": drafts.purge_stale(),
        "sessions_removed": sessions.purge_expired(),
    }
