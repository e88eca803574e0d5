# medmitra_portal/services/sessions.py
from __future__ import annotations
import json
import logging
import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from ..config import settings
from ..database import SessionLocal, utcnow
from ..models import Portal, PortalSession

logger = logging.getLogger(__name__)


class SessionTokens:
    """
    Tokens of one portal session. Every write opens its own DB session so
    the object can be shared with scheduler threads and the API client.
    """

    def __init__(self, session_id: str, portal: Portal, access_token: str,
                 refresh_token: Optional[str] = None, user: Optional[Dict[str, Any]] = None):
        self.session_id = session_id
        self.portal = Portal(portal)
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.user = user or {}
        self.cleared = False

    @classmethod
    def from_row(cls, row: PortalSession) -> "SessionTokens":
        try:
            user = json.loads(row.user_json or "{}")
        except ValueError:
            user = {}
        return cls(row.id, row.portal, row.access_token, row.refresh_token, user)

    @classmethod
    def load(cls, session_id: Optional[str]) -> Optional["SessionTokens"]:
        if not session_id:
            return None
        db = SessionLocal()
        try:
            row = db.get(PortalSession, session_id)
            if row is None:
                return None
            if _is_expired(row.updated_at):
                db.delete(row)
                db.commit()
                logger.info("Dropped expired %s session %s", row.portal.value, session_id[:8])
                return None
            return cls.from_row(row)
        finally:
            db.close()

    def reload(self) -> None:
        """Pick up a rotation made by another request on this session."""
        db = SessionLocal()
        try:
            row = db.get(PortalSession, self.session_id)
            if row is None:
                self.cleared = True
                return
            self.access_token = row.access_token
            self.refresh_token = row.refresh_token
        finally:
            db.close()

    def rotate(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        db = SessionLocal()
        try:
            row = db.get(PortalSession, self.session_id)
            if row is None:
                return
            row.access_token = access_token
            if refresh_token:
                row.refresh_token = refresh_token
            row.updated_at = utcnow()
            db.commit()
        finally:
            db.close()
        self.access_token = access_token
        if refresh_token:
            self.refresh_token = refresh_token

    def clear(self) -> None:
        delete_session(self.session_id)
        self.cleared = True

    def public(self) -> Dict[str, Any]:
        return {"portal": self.portal.value, "user": self.user}


def _is_expired(updated_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if updated_at is None:
        return False
    now = now or utcnow()
    return updated_at.replace(tzinfo=None) < now - timedelta(hours=settings.SESSION_TTL_HOURS)


def create_session(portal: Portal, access_token: str, refresh_token: Optional[str] = None,
                   user: Optional[Dict[str, Any]] = None) -> SessionTokens:
    session_id = secrets.token_urlsafe(32)
    db = SessionLocal()
    try:
        db.add(PortalSession(
            id=session_id,
            portal=Portal(portal),
            access_token=access_token,
            refresh_token=refresh_token,
            user_json=json.dumps(user or {}),
        ))
        db.commit()
    finally:
        db.close()
    logger.info("Opened %s session %s", Portal(portal).value, session_id[:8])
    return SessionTokens(session_id, portal, access_token, refresh_token, user)


def delete_session(session_id: str) -> None:
    db = SessionLocal()
    try:
        row = db.get(PortalSession, session_id)
        if row is not None:
            db.delete(row)
            db.commit()
    finally:
        db.close()


def purge_expired(now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    cutoff = now - timedelta(hours=settings.SESSION_TTL_HOURS)
    db = SessionLocal()
    try:
        rows = db.query(PortalSession).filter(PortalSession.updated_at < cutoff).all()
        for row in rows:
            db.delete(row)
        db.commit()
        return len(rows)
    finally:
        db.close()
