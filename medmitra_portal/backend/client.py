# medmitra_portal/backend/client.py
from __future__ import annotations
import logging
import threading
import zlib
from typing import Any, Dict, Optional

import requests

from ..config import settings
from ..exceptions import BackendError, BackendUnavailable, SessionExpired
from ..models import Portal
from ..services.sessions import SessionTokens

logger = logging.getLogger(__name__)

# Patient self-service prefixes; they take the patient token.
# /patients/global and /patients/<uuid> are doctor calls.
_PATIENT_SELF_PREFIXES = (
    "/patients/me",
    "/patients/appointments",
    "/patients/specialties",
    "/patients/doctors",
    "/patients/hospitals",
)

REFRESH_ENDPOINTS = {
    Portal.doctor: "/refresh-token",
    Portal.coordinator: "/auth/coordinator/refresh-token",
    Portal.admin: "/admin/refresh-token",
    Portal.patient: "/auth/refresh-token",
}

# Striped: a session always maps to the same lock and the pool never grows.
_REFRESH_LOCKS = tuple(threading.Lock() for _ in range(64))


def portal_for_path(path: str) -> Portal:
    """Which portal's bearer token a backend path is called with."""
    if path == "/coordinator" or path.startswith("/coordinator/") or path.startswith("/auth/coordinator/"):
        return Portal.coordinator
    if path == "/admin" or path.startswith("/admin/"):
        return Portal.admin
    if path.startswith("/patients/global"):
        return Portal.doctor
    if path.startswith(_PATIENT_SELF_PREFIXES):
        return Portal.patient
    return Portal.doctor


def is_login_path(path: str) -> bool:
    return "/login" in path


def _refresh_lock(session_id: str) -> threading.Lock:
    return _REFRESH_LOCKS[zlib.crc32(session_id.encode()) % len(_REFRESH_LOCKS)]


def _message_of(resp: requests.Response) -> tuple[str, list]:
    try:
        body = resp.json()
    except ValueError:
        return (resp.text or resp.reason or f"HTTP {resp.status_code}").strip(), []
    if not isinstance(body, dict):
        return str(body), []
    message = body.get("message") or body.get("error") or body.get("detail") or resp.reason or f"HTTP {resp.status_code}"
    errors = body.get("errors") if isinstance(body.get("errors"), list) else []
    return str(message), errors


class BackendClient:
    """
    Thin client for the MedMitra REST API.

    Attaches the bearer token of the portal a path belongs to. On a 401 it
    refreshes the token once (one refresh per session at a time), stores the
    new token, and retries the original request once. A failed refresh clears
    the session and raises SessionExpired with the portal's login path.
    """

    def __init__(self, tokens: Optional[SessionTokens] = None, base_url: Optional[str] = None,
                 timeout: Optional[float] = None, http: Optional[requests.Session] = None):
        self.tokens = tokens
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.BACKEND_TIMEOUT
        self.http = http or requests.Session()
        self.http.headers.setdefault("Content-Type", "application/json")

    # ── tokens ────────────────────────────────────────────────────────────
    def _token_for(self, portal: Portal) -> Optional[str]:
        if self.tokens is None or self.tokens.cleared or self.tokens.portal != portal:
            return None
        return self.tokens.access_token

    def _refresh(self, portal: Portal, stale_token: Optional[str]) -> str:
        tokens = self.tokens
        if tokens is None or tokens.cleared or tokens.portal != portal:
            raise SessionExpired(portal.value, portal.login_path)

        with _refresh_lock(tokens.session_id):
            tokens.reload()
            if tokens.cleared:
                raise SessionExpired(portal.value, portal.login_path)
            if tokens.access_token != stale_token:
                # another request on this session already refreshed
                return tokens.access_token

            body = {"refreshToken": tokens.refresh_token} if tokens.refresh_token else {}
            cookies = {"refreshToken": tokens.refresh_token} if tokens.refresh_token else None
            try:
                resp = self.http.post(
                    self.base_url + REFRESH_ENDPOINTS[portal],
                    json=body,
                    cookies=cookies,
                    timeout=self.timeout,
                )
                resp.raise_for_status()
                data = resp.json()
            except (requests.RequestException, ValueError) as e:
                logger.warning("Token refresh failed for %s session %s: %s", portal.value, tokens.session_id[:8], e)
                tokens.clear()
                raise SessionExpired(portal.value, portal.login_path) from e

            inner = data.get("data") if isinstance(data.get("data"), dict) else {}
            new_token = inner.get("accessToken") or data.get("accessToken")
            if not new_token:
                logger.warning("Refresh response without accessToken for %s session %s", portal.value, tokens.session_id[:8])
                tokens.clear()
                raise SessionExpired(portal.value, portal.login_path)

            new_refresh = inner.get("refreshToken") or data.get("refreshToken") or resp.cookies.get("refreshToken")
            tokens.rotate(new_token, new_refresh)
            logger.info("Refreshed %s token for session %s", portal.value, tokens.session_id[:8])
            return new_token

    # ── transport ─────────────────────────────────────────────────────────
    def _send(self, method: str, path: str, token: Optional[str], params=None, json=None, headers=None) -> requests.Response:
        hdrs = dict(headers or {})
        if token:
            hdrs["Authorization"] = f"Bearer {token}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        try:
            return self.http.request(
                method,
                self.base_url + path,
                params=params or None,
                json=json,
                headers=hdrs,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise BackendUnavailable(f"Backend unavailable: {e}") from e

    def request(self, method: str, path: str, *, params: Optional[dict] = None, json: Any = None,
                raw: bool = False, authenticated: bool = True, portal: Optional[Portal] = None) -> Any:
        # portal overrides the path rules (sign-out of the session's own portal)
        portal = portal or portal_for_path(path)
        token = self._token_for(portal) if authenticated else None
        resp = self._send(method, path, token, params=params, json=json)

        if resp.status_code == 401 and authenticated and not is_login_path(path):
            new_token = self._refresh(portal, token)
            resp = self._send(method, path, new_token, params=params, json=json)

        if resp.status_code >= 400:
            message, errors = _message_of(resp)
            logger.info("%s %s -> %s %s", method, path, resp.status_code, message)
            raise BackendError(resp.status_code, message, errors)

        if raw:
            return resp
        if resp.status_code == 204 or not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError:
            raise BackendError(502, f"Invalid JSON from backend for {path}")

    def get(self, path: str, **kw) -> Any:
        return self.request("GET", path, **kw)

    def post(self, path: str, json: Any = None, **kw) -> Any:
        return self.request("POST", path, json=json if json is not None else {}, **kw)

    def put(self, path: str, json: Any = None, **kw) -> Any:
        return self.request("PUT", path, json=json if json is not None else {}, **kw)

    def patch(self, path: str, json: Any = None, **kw) -> Any:
        return self.request("PATCH", path, json=json if json is not None else {}, **kw)

    def delete(self, path: str, **kw) -> Any:
        return self.request("DELETE", path, **kw)


def unwrap(body: Any, *keys: str, default: Any = None) -> Any:
    """Walk `data` envelopes: unwrap(body, "doctor") -> body["data"]["doctor"]."""
    cur = body.get("data", body) if isinstance(body, dict) else body
    for k in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(k)
        if cur is None:
            return default
    return cur if cur is not None else default
