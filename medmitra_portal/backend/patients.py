# medmitra_portal/backend/patients.py
"""Patient self-service calls (patient token)."""
from __future__ import annotations
from typing import Optional

from ..schemas import BookingConfirmation, NextAppointment, PatientProfile
from .client import BackendClient, unwrap


def get_profile(client: BackendClient) -> PatientProfile:
    return PatientProfile.model_validate(unwrap(client.get("/patients/me/profile"), default={}))


def update_profile(client: BackendClient, data: dict) -> PatientProfile:
    return PatientProfile.model_validate(unwrap(client.put("/patients/me/profile", data), default={}))


def upcoming_appointments(client: BackendClient, status: Optional[str] = None) -> list:
    params = {"status": status} if status else None
    return unwrap(client.get("/patients/me/appointments", params=params), default=[])


def all_appointments(client: BackendClient) -> list:
    return unwrap(client.get("/patients/me/appointments/all"), default=[])


def next_appointment(client: BackendClient) -> Optional[NextAppointment]:
    data = unwrap(client.get("/patients/me/next-appointment"))
    return NextAppointment.model_validate(data) if data else None


def prescriptions(client: BackendClient) -> list:
    return unwrap(client.get("/patients/me/prescriptions"), default=[])


def activity(client: BackendClient) -> list:
    return unwrap(client.get("/patients/me/activity"), default=[])


def activity_feed(client: BackendClient, limit: int = 5) -> list:
    return unwrap(client.get("/patients/me/activity-feed", params={"limit": limit}), default=[])


def medical_history(client: BackendClient) -> list:
    return unwrap(client.get("/patients/me/medical-history"), default=[])


def medications(client: BackendClient) -> dict:
    return unwrap(client.get("/patients/me/medications"), default={"current": [], "past": [], "totalCount": 0})


def vitals(client: BackendClient, limit: int = 20) -> dict:
    return unwrap(client.get("/patients/me/vitals", params={"limit": limit}), default={})

# ── discovery & booking ─────────────────────────────────────────────────────

def hospitals(client: BackendClient) -> list:
    return unwrap(client.get("/patients/hospitals"), default=[])


def doctors_at_hospital(client: BackendClient, hospital_id: str, specialty: Optional[str] = None) -> list:
    params = {"specialty": specialty} if specialty else None
    return unwrap(client.get(f"/patients/hospitals/{hospital_id}/doctors", params=params), default=[])


def search_doctors(client: BackendClient, query: Optional[str] = None, specialty: Optional[str] = None,
                   hospital_id: Optional[str] = None) -> list:
    params = {"query": query, "specialty": specialty, "hospitalId": hospital_id}
    return unwrap(client.get("/patients/doctors/search", params=params), default=[])


def specialties(client: BackendClient) -> list:
    return unwrap(client.get("/patients/specialties"), default=[])


def doctor_availability(client: BackendClient, doctor_id: str, hospital_id: str, day: Optional[str] = None) -> dict:
    params = {"hospitalId": hospital_id, "date": day}
    return unwrap(client.get(f"/patients/doctors/{doctor_id}/availability", params=params),
                  default={"dates": [], "slots": []})


def book_appointment(client: BackendClient, data: dict) -> BookingConfirmation:
    return BookingConfirmation.model_validate(unwrap(client.post("/patients/appointments", data), default={}))


def active_hospitals(client: BackendClient) -> list:
    """Public list used by the registration forms."""
    return unwrap(client.get("/hospitals/active", authenticated=False), "hospitals", default=[])
