# medmitra_portal/routers/coordinator.py
from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from ..backend import coordinators
from ..backend.client import BackendClient
from ..forms import (
    AppointmentStatusForm,
    CancelForm,
    CoordinatorAppointmentForm,
    CoordinatorPatientForm,
    TriageForm,
)
from ..models import Portal
from ..services import dashboards, patient_search
from ..services.triage import triage_payload
from .deps import get_client, require_portal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/coordinator", tags=["coordinator"],
                   dependencies=[Depends(require_portal(Portal.coordinator))])

# ──────────────────────────────────────────────────────────────────────────────
# Profile & dashboard
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/profile")
def profile(client: BackendClient = Depends(get_client)):
    return {"coordinator": coordinators.get_profile(client)}

@router.put("/profile")
def update_profile(updates: Dict[str, Any] = Body(...), client: BackendClient = Depends(get_client)):
    return {"success": True, "coordinator": coordinators.update_profile(client, updates)}

@router.get("/dashboard")
def dashboard(client: BackendClient = Depends(get_client)):
    return dashboards.coordinator_dashboard(client)

@router.get("/dashboard/doctors")
def dashboard_doctors(status: Optional[str] = None, specialty: Optional[str] = None,
                      client: BackendClient = Depends(get_client)):
    return coordinators.doctors(client, status, specialty)

@router.get("/dashboard/trends")
def appointment_trends(client: BackendClient = Depends(get_client)):
    return {"trends": coordinators.appointment_trends(client)}

# ──────────────────────────────────────────────────────────────────────────────
# Patients
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/patients")
def patients(page: int = 1, limit: int = 20, name: Optional[str] = None, uhid: Optional[str] = None,
             phone: Optional[str] = None, email: Optional[str] = None,
             client: BackendClient = Depends(get_client)):
    return coordinators.list_patients(client, page=page, limit=limit, name=name, uhid=uhid, phone=phone, email=email)

@router.get("/patients/search")
def search_patients(q: str = "", search_by: str = Query(default="all", alias="searchBy"),
                    client: BackendClient = Depends(get_client)):
    return {"results": patient_search.coordinator_search(client, q, search_by)}

@router.post("/patients", status_code=201)
def create_patient(form: CoordinatorPatientForm, client: BackendClient = Depends(get_client)):
    return {"success": True, "patient": coordinators.create_patient(client, form.payload())}

@router.get("/patients/{patient_id}")
def patient(patient_id: str, client: BackendClient = Depends(get_client)):
    return {"patient": coordinators.get_patient(client, patient_id)}

@router.put("/patients/{patient_id}")
def update_patient(patient_id: str, updates: Dict[str, Any] = Body(...), client: BackendClient = Depends(get_client)):
    return {"success": True, "patient": coordinators.update_patient(client, patient_id, updates)}

@router.delete("/patients/{patient_id}")
def delete_patient(patient_id: str, client: BackendClient = Depends(get_client)):
    coordinators.delete_patient(client, patient_id)
    return {"success": True}

# ──────────────────────────────────────────────────────────────────────────────
# Appointments & triage
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/appointments")
def appointments(day: str = Query(..., alias="date"), doctor_id: Optional[str] = Query(default=None, alias="doctorId"),
                 status: Optional[str] = None, client: BackendClient = Depends(get_client)):
    return coordinators.appointments_by_date(client, day, doctor_id, status)

@router.get("/appointments/upcoming")
def upcoming(days: int = 7, limit: int = 50, client: BackendClient = Depends(get_client)):
    return {"appointments": coordinators.upcoming_appointments(client, days, limit)}

@router.post("/appointments", status_code=201)
def create_appointment(form: CoordinatorAppointmentForm, client: BackendClient = Depends(get_client)):
    return {"success": True, "appointment": coordinators.create_appointment(client, form.payload())}

@router.patch("/appointments/{appointment_id}/status")
def update_status(appointment_id: str, form: AppointmentStatusForm, client: BackendClient = Depends(get_client)):
    return {"success": True, "appointment": coordinators.update_appointment_status(client, appointment_id, form.status)}

@router.post("/appointments/{appointment_id}/cancel")
def cancel(appointment_id: str, form: CancelForm, client: BackendClient = Depends(get_client)):
    return {"success": True, "appointment": coordinators.cancel_appointment(client, appointment_id, form.reason)}

@router.delete("/appointments/{appointment_id}")
def delete_appointment(appointment_id: str, client: BackendClient = Depends(get_client)):
    coordinators.delete_appointment(client, appointment_id)
    return {"success": True}

@router.post("/appointments/{appointment_id}/triage")
def record_triage(appointment_id: str, form: TriageForm, client: BackendClient = Depends(get_client)):
    body = triage_payload(form)
    if not body:
        raise HTTPException(status_code=400, detail="Record vitals or a payment before saving triage")
    result = coordinators.create_triage(client, appointment_id, body)
    logger.info("Triage recorded for appointment %s (%s)", appointment_id, ", ".join(sorted(body)))
    return {"success": True, **result}
