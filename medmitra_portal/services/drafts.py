# medmitra_portal/services/drafts.py
"""
Encounter drafts: the doctor's half-filled encounter form, auto-saved while
typing. Saves are debounced; only the last payload inside the debounce
window reaches the database.
"""
from __future__ import annotations
import json
import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler

from ..config import settings
from ..database import SessionLocal, utcnow
from ..models import EncounterDraft, PortalSession
from ..schemas import DraftOut

logger = logging.getLogger(__name__)

_Key = Tuple[str, str]
_PENDING: Dict[_Key, Dict[str, Any]] = {}
_LOCK = threading.Lock()
# Held from taking a pending payload until it is written, and by discard,
# so a discard never lands between the two.
_WRITE_LOCK = threading.Lock()


def _job_id(session_id: str, encounter_id: str) -> str:
    return f"draft:{session_id}:{encounter_id}"


def save_now(session_id: str, encounter_id: str, payload: Dict[str, Any]) -> Optional[datetime]:
    """Upsert the draft. Returns when it was saved, or None if the session is gone."""
    db = SessionLocal()
    try:
        if db.get(PortalSession, session_id) is None:
            logger.info("Dropping draft for encounter %s: session no longer exists", encounter_id)
            return None
        row = db.query(EncounterDraft).filter(
            EncounterDraft.session_id == session_id,
            EncounterDraft.encounter_id == encounter_id,
        ).first()
        if row is None:
            row = EncounterDraft(session_id=session_id, encounter_id=encounter_id)
            db.add(row)
        row.payload = json.dumps(payload)
        row.saved_at = utcnow()
        db.commit()
        return row.saved_at
    finally:
        db.close()


def _write_pending(session_id: str, encounter_id: str) -> None:
    with _WRITE_LOCK:
        with _LOCK:
            payload = _PENDING.pop((session_id, encounter_id), None)
        if payload is None:
            return
        save_now(session_id, encounter_id, payload)
    logger.debug("Draft saved for encounter %s", encounter_id)


def schedule_save(session_id: str, encounter_id: str, payload: Dict[str, Any],
                  scheduler: Optional[BaseScheduler] = None) -> bool:
    """
    Queue `payload` and (re)start the debounce timer for this draft.
    Without a running scheduler the draft is written right away.
    Returns True when the write was deferred.
    """
    if scheduler is None or not scheduler.running or settings.DRAFT_DEBOUNCE_SECONDS <= 0:
        with _WRITE_LOCK:
            with _LOCK:
                _PENDING.pop((session_id, encounter_id), None)
            save_now(session_id, encounter_id, payload)
        return False

    with _LOCK:
        _PENDING[(session_id, encounter_id)] = payload
    scheduler.add_job(
        _write_pending,
        "date",
        run_date=datetime.now(scheduler.timezone) + timedelta(seconds=settings.DRAFT_DEBOUNCE_SECONDS),
        args=[session_id, encounter_id],
        id=_job_id(session_id, encounter_id),
        replace_existing=True,
        misfire_grace_time=60,
    )
    return True


def load(session_id: str, encounter_id: str) -> Optional[DraftOut]:
    with _LOCK:
        pending = _PENDING.get((session_id, encounter_id))
    if pending is not None:
        return DraftOut(encounter_id=encounter_id, payload=pending, pending=True)

    db = SessionLocal()
    try:
        row = db.query(EncounterDraft).filter(
            EncounterDraft.session_id == session_id,
            EncounterDraft.encounter_id == encounter_id,
        ).first()
        if row is None:
            return None
        try:
            payload = json.loads(row.payload or "{}")
        except ValueError:
            logger.warning("Corrupt draft for encounter %s discarded", encounter_id)
            db.delete(row)
            db.commit()
            return None
        return DraftOut(encounter_id=encounter_id, payload=payload, saved_at=row.saved_at)
    finally:
        db.close()


def discard(session_id: str, encounter_id: str, scheduler: Optional[BaseScheduler] = None) -> None:
    if scheduler is not None and scheduler.running:
        try:
            scheduler.remove_job(_job_id(session_id, encounter_id))
        except JobLookupError:
            pass
    with _WRITE_LOCK:
        with _LOCK:
            _PENDING.pop((session_id, encounter_id), None)
        db = SessionLocal()
        try:
            db.query(EncounterDraft).filter(
                EncounterDraft.session_id == session_id,
                EncounterDraft.encounter_id == encounter_id,
            ).delete()
            db.commit()
        finally:
            db.close()


def flush_pending(scheduler: Optional[BaseScheduler] = None) -> int:
    """Write every queued draft now (shutdown, logout)."""
    with _LOCK:
        keys = list(_PENDING)
    for session_id, encounter_id in keys:
        if scheduler is not None and scheduler.running:
            try:
                scheduler.remove_job(_job_id(session_id, encounter_id))
            except JobLookupError:
                pass
        _write_pending(session_id, encounter_id)
    if keys:
        logger.info("Flushed %d pending draft(s)", len(keys))
    return len(keys)


def purge_stale(now: Optional[datetime] = None) -> int:
    cutoff = (now or utcnow()) - timedelta(hours=settings.DRAFT_TTL_HOURS)
    db = SessionLocal()
    try:
        n = db.query(EncounterDraft).filter(EncounterDraft.saved_at < cutoff).delete()
        db.commit()
        return n
    finally:
        db.close()
