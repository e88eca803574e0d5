# medmitra_portal/backend/auth.py
"""Sign-in, sign-up and sign-out against the backend, one flavour per portal."""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..exceptions import BackendError, BackendUnavailable, SessionExpired
from ..models import Portal
from .client import BackendClient

logger = logging.getLogger(__name__)

LOGOUT_ENDPOINTS = {
    Portal.doctor: "/logout",
    Portal.coordinator: "/auth/coordinator/logout",
    Portal.admin: "/admin/logout",
    Portal.patient: "/auth/logout",
}

PENDING_VERIFICATION_MESSAGE = (
    "Your account is pending verification. Please contact the administrator "
    "to complete the verification process."
)


@dataclass
class LoginResult:
    portal: Portal
    access_token: Optional[str]
    refresh_token: Optional[str] = None
    user: Dict[str, Any] = field(default_factory=dict)


def _json(resp) -> dict:
    try:
        body = resp.json()
    except ValueError:
        raise BackendError(502, "Invalid response structure from server")
    return body if isinstance(body, dict) else {}


def normalize_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """Fold the snake_case duplicates some endpoints send into camelCase."""
    out = dict(user)
    pairs = {
        "id": "_id",
        "fullName": "full_name",
        "medicalRegistrationId": "medical_registration_id",
        "accountStatus": "account_status",
        "phoneNumber": "phone_number",
        "isVerified": "is_verified",
        "lastLogin": "last_login",
        "hospitalId": "hospital_id",
    }
    for camel, snake in pairs.items():
        if out.get(camel) is None and out.get(snake) is not None:
            out[camel] = out[snake]
        out.pop(snake, None)
    return out

# ── doctor ──────────────────────────────────────────────────────────────────

def login_doctor(client: BackendClient, email: str, password: str) -> LoginResult:
    try:
        resp = client.post("/login", {"email": email, "password": password}, raw=True)
    except BackendError as e:
        if "pending verification" in e.message.lower():
            raise BackendError(e.status_code, PENDING_VERIFICATION_MESSAGE, e.errors) from e
        raise
    data = _json(resp).get("data") or {}
    if not data.get("accessToken") or not data.get("doctor"):
        raise BackendError(502, "Invalid response structure from server")
    return LoginResult(
        portal=Portal.doctor,
        access_token=data["accessToken"],
        refresh_token=data.get("refreshToken") or resp.cookies.get("refreshToken"),
        user=normalize_user(data["doctor"]),
    )


def register_doctor(client: BackendClient, payload: dict) -> dict:
    body = client.post("/register", payload)
    return normalize_user((body.get("data") or {}).get("doctor") or {})


def google_oauth_url(client: BackendClient) -> str:
    return client.get("/auth/google", authenticated=False).get("url", "")


def complete_oauth_registration(client: BackendClient, payload: dict) -> LoginResult:
    body = client.post("/auth/oauth/complete-registration", payload, authenticated=False)
    if not body.get("accessToken"):
        raise BackendError(502, "Invalid response structure from server")
    return LoginResult(Portal.doctor, body["accessToken"], None, normalize_user(body.get("user") or {}))

# ── admin ───────────────────────────────────────────────────────────────────

def _admin_result(resp) -> LoginResult:
    data = _json(resp).get("data") or {}
    if not data.get("accessToken") or not data.get("admin"):
        raise BackendError(502, "Invalid response structure from server")
    return LoginResult(
        portal=Portal.admin,
        access_token=data["accessToken"],
        refresh_token=data.get("refreshToken") or resp.cookies.get("refreshToken"),
        user=normalize_user(data["admin"]),
    )


def login_admin(client: BackendClient, email: str, password: str) -> LoginResult:
    return _admin_result(client.post("/admin/login", {"email": email, "password": password}, raw=True))


def register_admin(client: BackendClient, payload: dict) -> LoginResult:
    return _admin_result(client.post("/admin/register", payload, raw=True, authenticated=False))

# ── coordinator ─────────────────────────────────────────────────────────────

def _coordinator_result(resp) -> LoginResult:
    body = _json(resp)
    data = body.get("data") or {}
    tokens = data.get("tokens") or {}
    if not body.get("success", True) or not tokens.get("accessToken"):
        raise BackendError(502, body.get("message") or "Invalid response structure from server")
    return LoginResult(
        portal=Portal.coordinator,
        access_token=tokens["accessToken"],
        refresh_token=tokens.get("refreshToken"),
        user=normalize_user(data.get("coordinator") or {}),
    )


def login_coordinator(client: BackendClient, email: str, password: str) -> LoginResult:
    return _coordinator_result(client.post("/auth/coordinator/login", {"email": email, "password": password}, raw=True))


def register_coordinator(client: BackendClient, payload: dict) -> LoginResult:
    return _coordinator_result(client.post("/auth/coordinator/register", payload, raw=True, authenticated=False))

# ── patient ─────────────────────────────────────────────────────────────────

def login_patient(client: BackendClient, username: str, password: str) -> LoginResult:
    resp = client.post("/auth/login", {"username": username, "password": password}, raw=True)
    body = _json(resp)
    user = body.get("user")
    if not body.get("accessToken") or not user:
        raise BackendError(502, "Invalid response structure from server")
    if user.get("role") != "patient":
        raise BackendError(403, "Access denied. This account is not a patient account.")
    return LoginResult(
        portal=Portal.patient,
        access_token=body["accessToken"],
        refresh_token=body.get("refreshToken") or resp.cookies.get("refreshToken"),
        user=user,
    )


def register_patient(client: BackendClient, payload: dict) -> LoginResult:
    """Sign-up; the backend may or may not log the patient in right away."""
    resp = client.post("/auth/register", payload, raw=True, authenticated=False)
    body = _json(resp)
    return LoginResult(
        portal=Portal.patient,
        access_token=body.get("accessToken") if body.get("user") else None,
        refresh_token=body.get("refreshToken") or resp.cookies.get("refreshToken"),
        user=body.get("user") or {},
    )

# ── common ──────────────────────────────────────────────────────────────────

def logout(client: BackendClient, portal: Portal) -> None:
    """Tell the backend; the local session is dropped whatever it answers."""
    try:
        client.post(LOGOUT_ENDPOINTS[portal], portal=portal)
    except (BackendError, BackendUnavailable, SessionExpired) as e:
        logger.warning("Backend logout for %s failed: %s", portal.value, e)