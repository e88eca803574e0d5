# medmitra_portal/routers/patient.py
from __future__ import annotations
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from ..backend import patients
from ..backend.client import BackendClient
from ..forms import AppointmentBookingForm, ProfileCompletionForm
from ..models import Portal
from ..services import dashboards
from .deps import get_client, require_portal

router = APIRouter(prefix="/patient", tags=["patient"], dependencies=[Depends(require_portal(Portal.patient))])

# ──────────────────────────────────────────────────────────────────────────────
# Home
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/dashboard")
def dashboard(client: BackendClient = Depends(get_client)):
    return dashboards.patient_dashboard(client)

@router.get("/profile")
def profile(client: BackendClient = Depends(get_client)):
    return patients.get_profile(client).dump()

@router.put("/profile")
def update_profile(updates: Dict[str, Any] = Body(...), client: BackendClient = Depends(get_client)):
    return {"success": True, "profile": patients.update_profile(client, updates).dump()}

@router.post("/onboarding")
def complete_profile(form: ProfileCompletionForm, client: BackendClient = Depends(get_client)):
    profile = patients.update_profile(client, form.payload())
    return {"success": True, "profile": profile.dump(), "needsProfileCompletion": profile.needs_profile_completion}

# ──────────────────────────────────────────────────────────────────────────────
# Records
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/appointments")
def appointments(status: Optional[str] = None, client: BackendClient = Depends(get_client)):
    return {"appointments": patients.upcoming_appointments(client, status)}

@router.get("/appointments/all")
def all_appointments(client: BackendClient = Depends(get_client)):
    return {"appointments": patients.all_appointments(client)}

@router.get("/appointments/next")
def next_appointment(client: BackendClient = Depends(get_client)):
    nxt = patients.next_appointment(client)
    return {"appointment": nxt.dump() if nxt else None}

@router.get("/prescriptions")
def prescriptions(client: BackendClient = Depends(get_client)):
    return {"prescriptions": patients.prescriptions(client)}

@router.get("/activity")
def activity(client: BackendClient = Depends(get_client)):
    return {"activity": patients.activity(client)}

@router.get("/activity-feed")
def activity_feed(limit: int = 5, client: BackendClient = Depends(get_client)):
    return {"items": patients.activity_feed(client, limit)}

@router.get("/medical-history")
def medical_history(client: BackendClient = Depends(get_client)):
    return {"history": patients.medical_history(client)}

@router.get("/medications")
def medications(client: BackendClient = Depends(get_client)):
    return patients.medications(client)

@router.get("/vitals")
def vitals(limit: int = 20, client: BackendClient = Depends(get_client)):
    return patients.vitals(client, limit)

# ──────────────────────────────────────────────────────────────────────────────
# Booking
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/hospitals")
def hospitals(client: BackendClient = Depends(get_client)):
    return {"hospitals": patients.hospitals(client)}

@router.get("/hospitals/{hospital_id}/doctors")
def hospital_doctors(hospital_id: str, specialty: Optional[str] = None, client: BackendClient = Depends(get_client)):
    return {"doctors": patients.doctors_at_hospital(client, hospital_id, specialty)}

@router.get("/doctors/search")
def search_doctors(query: Optional[str] = None, specialty: Optional[str] = None,
                   hospital_id: Optional[str] = Query(default=None, alias="hospitalId"),
                   client: BackendClient = Depends(get_client)):
    return {"doctors": patients.search_doctors(client, query, specialty, hospital_id)}

@router.get("/specialties")
def specialties(client: BackendClient = Depends(get_client)):
    return {"specialties": patients.specialties(client)}

@router.get("/doctors/{doctor_id}/availability")
def availability(doctor_id: str, hospital_id: str = Query(..., alias="hospitalId"),
                 day: Optional[str] = Query(default=None, alias="date"),
                 client: BackendClient = Depends(get_client)):
    return patients.doctor_availability(client, doctor_id, hospital_id, day)

@router.post("/appointments", status_code=201)
def book(form: AppointmentBookingForm, client: BackendClient = Depends(get_client)):
    confirmation = patients.book_appointment(client, form.payload())
    return {"success": True, "message": "Appointment booked successfully", "appointment": confirmation.dump()}
