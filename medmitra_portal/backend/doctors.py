# medmitra_portal/backend/doctors.py
from __future__ import annotations
from datetime import date, datetime
from typing import Optional
import zoneinfo

from ..config import settings
from ..schemas import ActionItemsSummary, Doctor, PerformanceStats, TodayAppointment
from .client import BackendClient, unwrap


def _today() -> str:
    return datetime.now(zoneinfo.ZoneInfo(settings.TIMEZONE)).date().isoformat()

# ── profile ─────────────────────────────────────────────────────────────────

def get_profile(client: BackendClient) -> Doctor:
    body = client.get("/profile")
    return Doctor.model_validate(unwrap(body, "doctor", default={}))


def update_profile(client: BackendClient, data: dict) -> Doctor:
    body = client.put("/profile", data)
    return Doctor.model_validate(unwrap(body, "doctor", default={}))


def update_preferences(client: BackendClient, preferences: dict) -> dict:
    body = client.put("/doctors/me/preferences", preferences)
    return unwrap(body, "preferences", default=preferences)

# ── dashboard ───────────────────────────────────────────────────────────────

def get_dashboard(client: BackendClient) -> dict:
    return unwrap(client.get("/doctors/me/dashboard"), default={})


def get_queue(client: BackendClient, day: Optional[date] = None) -> list:
    params = {"date": day.isoformat()} if day else None
    return unwrap(client.get("/doctors/me/queue", params=params), default=[])


def get_todays_appointments(client: BackendClient) -> list[TodayAppointment]:
    rows = unwrap(client.get("/appointments", params={"date": _today()}), default=[])
    return [
        TodayAppointment(
            id=a["appointmentId"],
            time=a["scheduledTime"],
            patient_name=(a.get("patient") or {}).get("name") or "Unknown Patient",
            patient_uhid=(a.get("patient") or {}).get("id"),
            type=a.get("appointmentType"),
            status=a.get("status", ""),
        )
        for a in rows
    ]


def get_action_items_summary(client: BackendClient) -> ActionItemsSummary:
    data = unwrap(client.get("/workbench/summary"), default={})
    return ActionItemsSummary(
        new_results=data.get("newResultsToReview", 0),
        consultation_requests=data.get("pendingConsultationRequests", 0),
        unread_messages=data.get("unreadPatientMessages", 0),
    )


def get_performance_stats(client: BackendClient) -> PerformanceStats:
    data = unwrap(client.get("/practitioners/me/stats", params={"date": _today()}), default={})
    return PerformanceStats(
        patients_seen=data.get("patientsSeen", 0),
        patients_scheduled=data.get("patientsScheduled", 0),
        avg_consult_time_minutes=data.get("averageConsultTimeMinutes", 0),
        pending_documentation=data.get("pendingDocumentationCount", 0),
    )

# ── own coordinators ────────────────────────────────────────────────────────

def list_coordinators(client: BackendClient) -> list:
    return unwrap(client.get("/doctors/coordinators"), "coordinators", default=[])


def create_coordinator(client: BackendClient, data: dict) -> dict:
    return unwrap(client.post("/doctors/coordinators", data), default={})


def set_coordinator_access(client: BackendClient, coordinator_id: str, is_active: bool) -> dict:
    body = client.put(f"/doctors/coordinators/{coordinator_id}/access", {"isActive": is_active})
    return unwrap(body, "coordinator", default={})


def delete_coordinator(client: BackendClient, coordinator_id: str) -> dict:
    return client.delete(f"/doctors/coordinators/{coordinator_id}")

# ── patients ────────────────────────────────────────────────────────────────

def list_patients(client: BackendClient, *, name=None, uhid=None, email=None, phone=None,
                  page: int = 1, limit: int = 20, scope: str = "my") -> dict:
    params = {"name": name, "uhid": uhid, "email": email, "phone": phone,
              "page": page, "limit": limit, "scope": scope}
    return unwrap(client.get("/patients", params=params), default={})


def create_patient(client: BackendClient, data: dict) -> dict:
    return unwrap(client.post("/patients", data), "patient", default={})


def get_patient(client: BackendClient, patient_id: str) -> dict:
    return unwrap(client.get(f"/patients/{patient_id}"), default={})


def update_patient(client: BackendClient, patient_id: str, updates: dict) -> dict:
    return unwrap(client.put(f"/patients/{patient_id}", updates), default={})


def search_patients(client: BackendClient, q: str, page: int = 1, limit: int = 20) -> dict:
    return unwrap(client.get("/patients/search", params={"q": q, "page": page, "limit": limit}), default={})


def enroll_existing_patient(client: BackendClient, patient_id: str) -> dict:
    return unwrap(client.post(f"/patients/{patient_id}/enroll"), default={})


def create_appointment(client: BackendClient, patient_id: str, scheduled_time: str,
                       appointment_type: Optional[str] = None) -> dict:
    data = {"patientId": patient_id, "scheduledTime": scheduled_time}
    if appointment_type:
        data["appointmentType"] = appointment_type
    return unwrap(client.post("/appointments", data), default={})

# ── global MID registry ─────────────────────────────────────────────────────

def search_global_patients(client: BackendClient, q: str, page: int = 1, limit: int = 20) -> dict:
    return unwrap(client.get("/patients/global/search", params={"q": q, "page": page, "limit": limit}), default={})


def enroll_global_patient(client: BackendClient, global_patient_id: str) -> dict:
    return unwrap(client.post(f"/patients/global/{global_patient_id}/enroll"), default={})


def register_global_patient(client: BackendClient, data: dict) -> dict:
    return unwrap(client.post("/patients/global", data), default={})


def get_global_patient(client: BackendClient, mid: str) -> dict:
    return unwrap(client.get(f"/patients/global/{mid}"), default={})


def get_network_status(client: BackendClient, mid: str) -> dict:
    return unwrap(client.get(f"/patients/global/{mid}/network"), default={})
