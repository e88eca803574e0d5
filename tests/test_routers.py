# tests/test_routers.py
from medmitra_portal.config import settings
from medmitra_portal.models import Portal
from medmitra_portal.services.sessions import SessionTokens


def test_root(app_client):
    assert app_client.get("/").json()["app"] == settings.APP_NAME


def test_doctor_login_opens_session(app_client, backend):
    backend.add("POST", "/login", (200, {"success": True, "data": {
        "accessToken": "doc-token",
        "refreshToken": "doc-refresh",
        "doctor": {"_id": "d1", "fullName": "Asha Rao", "email": "asha@clinic.in"},
    }}))

    r = app_client.post("/auth/doctor/login", json={"email": "Asha@Clinic.in", "password": "Secret12"})

    assert r.status_code == 200
    assert r.json()["portal"] == "doctor"
    assert r.json()["user"]["id"] == "d1"
    assert backend.calls[0].body == {"email": "asha@clinic.in", "password": "Secret12"}
    session_id = r.cookies.get(settings.SESSION_COOKIE_NAME)
    tokens = SessionTokens.load(session_id)
    assert tokens.access_token == "doc-token" and tokens.refresh_token == "doc-refresh"
    assert app_client.get("/auth/session").json()["user"]["fullName"] == "Asha Rao"


def test_pending_doctor_gets_verification_message(app_client, backend):
    backend.add("POST", "/login", (403, {"success": False, "message": "Account is pending verification"}))
    r = app_client.post("/auth/doctor/login", json={"email": "a@b.in", "password": "x"})
    assert r.status_code == 403
    assert r.json()["message"].startswith("Your account is pending verification.")


def test_patient_login_rejects_other_roles(app_client, backend):
    backend.add("POST", "/auth/login", (200, {"accessToken": "t", "user": {"id": "u1", "role": "doctor"}}))
    r = app_client.post("/auth/patient/login", json={"username": "ravi", "password": "x"})
    assert r.status_code == 403
    assert r.json() == {"success": False, "message": "Access denied. This account is not a patient account.",
                        "errors": []}


def test_form_errors_use_backend_envelope(app_client, backend):
    r = app_client.post("/auth/coordinator/login", json={"email": "nope", "password": "x"})
    assert r.status_code == 422
    assert r.json() == {"success": False, "message": "Invalid email address",
                        "errors": [{"field": "email", "message": "Invalid email address"}]}
    assert backend.calls == []


def test_portal_routes_need_a_session(app_client):
    r = app_client.get("/doctor/profile")
    assert r.status_code == 401
    assert r.json()["success"] is False


def test_other_portal_session_is_forbidden(app_client, signed_in):
    signed_in(Portal.patient)
    assert app_client.get("/doctor/profile").status_code == 403
    assert app_client.get("/coordinator/dashboard").status_code == 403


def test_expired_session_redirects_to_login(app_client, backend, signed_in):
    signed_in(Portal.coordinator)
    backend.add("GET", "/auth/coordinator/profile", (401, {"message": "expired"}))
    backend.add("POST", "/auth/coordinator/refresh-token", (401, {"message": "expired"}))

    r = app_client.get("/coordinator/profile")

    assert r.status_code == 401
    assert r.json()["redirect"] == "/coordinator/login"
    # the session is gone
    assert app_client.get("/coordinator/profile").status_code == 401


def test_backend_errors_pass_through(app_client, backend, signed_in):
    signed_in(Portal.admin)
    backend.add("POST", "/admin/doctors/d9/verify", (404, {"success": False, "message": "Doctor not found"}))
    r = app_client.post("/admin/doctors/d9/verify")
    assert r.status_code == 404
    assert r.json()["message"] == "Doctor not found"


def test_triage_needs_vitals_or_payment(app_client, backend, signed_in):
    signed_in(Portal.coordinator)
    r = app_client.post("/coordinator/appointments/a1/triage", json={"vitals": {}, "payment": {"amount": 0}})
    assert r.status_code == 400
    assert backend.calls == []

    backend.add("POST", "/coordinator/appointments/encounters/a1/triage", (201, {"data": {"encounterId": "e1"}}))
    r = app_client.post("/coordinator/appointments/a1/triage", json={"vitals": {"bp": "120/80"}})
    assert r.status_code == 200
    assert r.json()["encounterId"] == "e1"
    assert backend.calls[0].body == {"vitals": {"bp": "120/80"}}


def test_draft_round_trip_and_finalize(app_client, backend, signed_in):
    signed_in(Portal.doctor)
    r = app_client.put("/encounters/enc-1/draft", json={"chiefComplaint": "Cough"})
    assert r.json() == {"success": True, "deferred": False}
    assert app_client.get("/encounters/enc-1/draft").json()["payload"] == {"chiefComplaint": "Cough"}

    backend.add("POST", "/encounters/enc-1/finalize", (200, {"data": {"id": "enc-1", "status": "completed"}}))
    r = app_client.post("/encounters/enc-1/finalize", json={"chiefComplaint": "Cough", "patientId": "p1"})
    assert r.status_code == 200
    assert r.json()["status"] == "finalized"
    assert app_client.get("/encounters/enc-1/draft").status_code == 404


def test_finalize_without_patient_is_rejected(app_client, signed_in):
    signed_in(Portal.doctor)
    r = app_client.post("/encounters/enc-1/finalize", json={"chiefComplaint": "Cough"})
    assert r.status_code == 400
    assert r.json()["message"] == "Cannot create prescription: missing patient ID"


def test_preferences_saved_normalized(app_client, backend, signed_in):
    signed_in(Portal.doctor)
    backend.add("PUT", "/doctors/me/preferences", (200, {"success": True}))
    r = app_client.put("/doctor/preferences", json={"vitalsOrder": ["spo2"], "defaultView": "compact"})
    assert r.status_code == 200
    sent = backend.calls[0].body
    assert sent["vitalsOrder"] == ["spo2", "bp", "pulse", "temp", "weight", "height"]
    assert sent["defaultView"] == "compact"


def test_logout_drops_session(app_client, backend, signed_in):
    tokens = signed_in(Portal.patient, access="pt")
    backend.add("POST", "/auth/logout", (200, {"success": True}))
    assert app_client.post("/auth/logout").json() == {"success": True}
    assert backend.calls[0].authorization == "Bearer pt"
    assert SessionTokens.load(tokens.session_id) is None


def test_ops_purge_requires_token(app_client):
    assert app_client.post("/ops/drafts/purge").status_code == 401
    r = app_client.post("/ops/drafts/purge", headers={"X-Admin-Token": "ops-secret"})
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert app_client.get("/ops/health").json()["scheduler"] is False


def test_unreadable_time_slot_is_a_form_error(app_client, backend, signed_in):
    signed_in(Portal.patient)
    r = app_client.post("/patient/appointments", json={
        "hospitalId": "h1", "doctorId": "d1", "date": "2026-03-02", "timeSlot": "soon"})
    assert r.status_code == 422
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Invalid time slot"
    assert backend.calls == []


def test_passwords_are_sent_as_typed(app_client, backend):
    backend.add("POST", "/admin/login", (200, {"data": {"accessToken": "a", "admin": {"id": "a1"}}}))
    app_client.post("/auth/admin/login", json={"email": "  root@medmitra.in ", "password": " Secret12 "})
    assert backend.calls[0].body == {"email": "root@medmitra.in", "password": " Secret12 "}
