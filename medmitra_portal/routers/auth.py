# medmitra_portal/routers/auth.py
from __future__ import annotations
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from ..backend import auth, patients
from ..backend.auth import LoginResult
from ..backend.client import BackendClient
from ..config import settings
from ..forms import (
    AdminRegistrationForm,
    CoordinatorRegistrationForm,
    DoctorRegistrationForm,
    LoginForm,
    PatientLoginForm,
    PatientSignupForm,
)
from ..services import sessions
from ..services.sessions import SessionTokens
from .deps import get_anonymous_client, get_client, get_tokens, set_session_cookie

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────
def _open_session(response: Response, result: LoginResult, previous: Optional[SessionTokens] = None) -> dict:
    # one browser, one portal session
    if previous is not None:
        sessions.delete_session(previous.session_id)
    tokens = sessions.create_session(result.portal, result.access_token, result.refresh_token, result.user)
    set_session_cookie(response, tokens)
    return {"success": True, **tokens.public()}

# ──────────────────────────────────────────────────────────────────────────────
# Doctor
# ──────────────────────────────────────────────────────────────────────────────
@router.post("/doctor/login")
def doctor_login(form: LoginForm, response: Response,
                 client: BackendClient = Depends(get_anonymous_client),
                 previous: Optional[SessionTokens] = Depends(get_tokens)):
    return _open_session(response, auth.login_doctor(client, form.email, form.password), previous)

@router.post("/doctor/register", status_code=201)
def doctor_register(form: DoctorRegistrationForm, client: BackendClient = Depends(get_anonymous_client)):
    doctor = auth.register_doctor(client, form.payload())
    logger.info("Doctor registration submitted for %s", form.email)
    return {
        "success": True,
        "message": "Registration successful. Your account is pending verification.",
        "doctor": doctor,
    }

@router.get("/doctor/oauth/url")
def doctor_oauth_url(client: BackendClient = Depends(get_anonymous_client)):
    return {"url": auth.google_oauth_url(client)}

@router.post("/doctor/oauth/complete")
def doctor_oauth_complete(form: DoctorRegistrationForm, response: Response,
                          client: BackendClient = Depends(get_anonymous_client),
                          previous: Optional[SessionTokens] = Depends(get_tokens)):
    return _open_session(response, auth.complete_oauth_registration(client, form.payload()), previous)

# ──────────────────────────────────────────────────────────────────────────────
# Coordinator / admin
# ──────────────────────────────────────────────────────────────────────────────
@router.post("/coordinator/login")
def coordinator_login(form: LoginForm, response: Response,
                      client: BackendClient = Depends(get_anonymous_client),
                      previous: Optional[SessionTokens] = Depends(get_tokens)):
    return _open_session(response, auth.login_coordinator(client, form.email, form.password), previous)

@router.post("/coordinator/register", status_code=201)
def coordinator_register(form: CoordinatorRegistrationForm, response: Response,
                         client: BackendClient = Depends(get_anonymous_client),
                         previous: Optional[SessionTokens] = Depends(get_tokens)):
    return _open_session(response, auth.register_coordinator(client, form.payload()), previous)

@router.post("/admin/login")
def admin_login(form: LoginForm, response: Response,
                client: BackendClient = Depends(get_anonymous_client),
                previous: Optional[SessionTokens] = Depends(get_tokens)):
    return _open_session(response, auth.login_admin(client, form.email, form.password), previous)

@router.post("/admin/register", status_code=201)
def admin_register(form: AdminRegistrationForm, response: Response,
                   client: BackendClient = Depends(get_anonymous_client),
                   previous: Optional[SessionTokens] = Depends(get_tokens)):
    return _open_session(response, auth.register_admin(client, form.payload()), previous)

# ──────────────────────────────────────────────────────────────────────────────
# Patient
# ──────────────────────────────────────────────────────────────────────────────
@router.post("/patient/login")
def patient_login(form: PatientLoginForm, response: Response,
                  client: BackendClient = Depends(get_anonymous_client),
                  previous: Optional[SessionTokens] = Depends(get_tokens)):
    return _open_session(response, auth.login_patient(client, form.username, form.password), previous)

@router.post("/patient/register", status_code=201)
def patient_register(form: PatientSignupForm, response: Response,
                     client: BackendClient = Depends(get_anonymous_client),
                     previous: Optional[SessionTokens] = Depends(get_tokens)):
    result = auth.register_patient(client, form.payload())
    if not result.access_token:
        # backend wants the patient to sign in first
        return {"success": True, "portal": "patient", "user": result.user, "signedIn": False}
    return {**_open_session(response, result, previous), "signedIn": True}

# ──────────────────────────────────────────────────────────────────────────────
# Common
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/hospitals")
def active_hospitals(client: BackendClient = Depends(get_anonymous_client)):
    """Hospitals offered by the registration forms."""
    return {"hospitals": patients.active_hospitals(client)}

@router.get("/session")
def current_session(tokens: Optional[SessionTokens] = Depends(get_tokens)):
    if tokens is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    return {"success": True, **tokens.public()}

@router.post("/logout")
def logout(response: Response,
           tokens: Optional[SessionTokens] = Depends(get_tokens),
           client: BackendClient = Depends(get_client)):
    if tokens is not None:
        auth.logout(client, tokens.portal)
        sessions.delete_session(tokens.session_id)
        logger.info("Closed %s session %s", tokens.portal.value, tokens.session_id[:8])
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"success": True}
