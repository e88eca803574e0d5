# medmitra_portal/routers/deps.py
from __future__ import annotations
from typing import Optional

import requests
from fastapi import Depends, HTTPException, Request, Response

from ..backend.client import BackendClient
from ..config import settings
from ..models import Portal
from ..services.sessions import SessionTokens


def get_tokens(request: Request) -> Optional[SessionTokens]:
    return SessionTokens.load(request.cookies.get(settings.SESSION_COOKIE_NAME))


def get_http() -> Optional[requests.Session]:
    """HTTP session for backend calls; None lets the client open its own."""
    return None


def get_client(tokens: Optional[SessionTokens] = Depends(get_tokens),
               http: Optional[requests.Session] = Depends(get_http)) -> BackendClient:
    return BackendClient(tokens, http=http)


def get_anonymous_client(http: Optional[requests.Session] = Depends(get_http)) -> BackendClient:
    return BackendClient(None, http=http)


def require_portal(portal: Portal):
    """Dependency: the caller is signed in on `portal`."""
    def _dep(tokens: Optional[SessionTokens] = Depends(get_tokens)) -> SessionTokens:
        if tokens is None:
            raise HTTPException(status_code=401, detail="Not signed in")
        if tokens.portal != portal:
            raise HTTPException(status_code=403, detail=f"This page is for the {portal.value} portal")
        return tokens
    return _dep


def set_session_cookie(response: Response, tokens: SessionTokens) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        tokens.session_id,
        max_age=settings.SESSION_TTL_HOURS * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
