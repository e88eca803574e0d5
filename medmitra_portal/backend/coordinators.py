# medmitra_portal/backend/coordinators.py
from __future__ import annotations
from typing import Optional

from .client import BackendClient, unwrap

# ── profile ─────────────────────────────────────────────────────────────────

def get_profile(client: BackendClient) -> dict:
    return unwrap(client.get("/auth/coordinator/profile"), "coordinator", default={})


def update_profile(client: BackendClient, data: dict) -> dict:
    return unwrap(client.put("/auth/coordinator/profile", data), "coordinator", default={})

# ── patients ────────────────────────────────────────────────────────────────

def list_patients(client: BackendClient, *, page: int = 1, limit: int = 20, name=None, uhid=None,
                  phone=None, email=None) -> dict:
    params = {"page": page, "limit": limit, "name": name, "uhid": uhid, "phone": phone, "email": email}
    return unwrap(client.get("/coordinator/patients", params=params), default={})


def get_patient(client: BackendClient, patient_id: str) -> dict:
    return unwrap(client.get(f"/coordinator/patients/{patient_id}"), "patient", default={})


def create_patient(client: BackendClient, data: dict) -> dict:
    return unwrap(client.post("/coordinator/patients", data), "patient", default={})


def update_patient(client: BackendClient, patient_id: str, data: dict) -> dict:
    return unwrap(client.put(f"/coordinator/patients/{patient_id}", data), "patient", default={})


def delete_patient(client: BackendClient, patient_id: str) -> dict:
    return client.delete(f"/coordinator/patients/{patient_id}")


def search_patients(client: BackendClient, query: str, search_by: str = "all") -> list:
    body = client.post("/coordinator/patients/search", {"query": query, "searchBy": search_by})
    return unwrap(body, "results", default=[])

# ── appointments ────────────────────────────────────────────────────────────

def appointments_by_date(client: BackendClient, day: str, doctor_id: Optional[str] = None,
                         status: Optional[str] = None) -> dict:
    params = {"date": day, "doctorId": doctor_id, "status": status}
    return unwrap(client.get("/coordinator/appointments", params=params), default={})


def create_appointment(client: BackendClient, data: dict) -> dict:
    return unwrap(client.post("/coordinator/appointments", data), "appointment", default={})


def update_appointment_status(client: BackendClient, appointment_id: str, status: str) -> dict:
    body = client.patch(f"/coordinator/appointments/{appointment_id}/status", {"status": status})
    return unwrap(body, "appointment", default={})


def cancel_appointment(client: BackendClient, appointment_id: str, reason: Optional[str] = None) -> dict:
    body = client.post(f"/coordinator/appointments/{appointment_id}/cancel", {"reason": reason})
    return unwrap(body, "appointment", default={})


def delete_appointment(client: BackendClient, appointment_id: str) -> dict:
    return client.delete(f"/coordinator/appointments/{appointment_id}")


def upcoming_appointments(client: BackendClient, days: int = 7, limit: int = 50) -> list:
    body = client.get("/coordinator/appointments/upcoming", params={"days": days, "limit": limit})
    return unwrap(body, "appointments", default=[])


def create_triage(client: BackendClient, appointment_id: str, data: dict) -> dict:
    return unwrap(client.post(f"/coordinator/appointments/encounters/{appointment_id}/triage", data), default={})

# ── dashboard ───────────────────────────────────────────────────────────────

def dashboard_overview(client: BackendClient) -> dict:
    return unwrap(client.get("/coordinator/dashboard/overview"), default={})


def top_stats(client: BackendClient) -> dict:
    return unwrap(client.get("/coordinator/dashboard/top-stats"), default={})


def doctors(client: BackendClient, status: Optional[str] = None, specialty: Optional[str] = None) -> dict:
    params = {"status": status, "specialty": specialty}
    return unwrap(client.get("/coordinator/dashboard/doctors", params=params), default={})


def recent_activity(client: BackendClient, limit: int = 10) -> list:
    body = client.get("/coordinator/dashboard/recent-activity", params={"limit": limit})
    return unwrap(body, "activities", default=[])


def appointment_trends(client: BackendClient) -> list:
    return unwrap(client.get("/coordinator/dashboard/appointment-trends"), "trends", default=[])
