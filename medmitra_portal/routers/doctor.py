# medmitra_portal/routers/doctor.py
from __future__ import annotations
from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from ..backend import doctors, encounters
from ..backend.client import BackendClient
from ..forms import (
    CoordinatorAccessForm,
    DoctorAppointmentForm,
    DoctorCoordinatorForm,
    PatientRegistrationForm,
    PreferencesForm,
    TemplateForm,
)
from ..models import Portal
from ..services import dashboards, pad_layout, patient_search
from ..services.triage import parse_queue, queue_stats
from .deps import get_client, require_portal

router = APIRouter(prefix="/doctor", tags=["doctor"], dependencies=[Depends(require_portal(Portal.doctor))])

# ──────────────────────────────────────────────────────────────────────────────
# Profile & pad preferences
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/profile")
def profile(client: BackendClient = Depends(get_client)):
    return {"doctor": doctors.get_profile(client).dump()}

@router.put("/profile")
def update_profile(updates: Dict[str, Any] = Body(...), client: BackendClient = Depends(get_client)):
    return {"success": True, "doctor": doctors.update_profile(client, updates).dump()}

@router.get("/preferences")
def preferences(client: BackendClient = Depends(get_client)):
    return pad_layout.settings_view(doctors.get_profile(client).ui_preferences)

@router.put("/preferences")
def save_preferences(form: PreferencesForm, client: BackendClient = Depends(get_client)):
    body = pad_layout.preferences_payload(form.vitals_order, form.encounter_form_order, form.default_view)
    doctors.update_preferences(client, body)
    return {"success": True, "message": "Preferences saved successfully", "preferences": body}

@router.post("/preferences/reset")
def reset_preferences():
    """Defaults for the settings page; nothing is saved until PUT."""
    return pad_layout.defaults()

@router.get("/pad-layout")
def encounter_pad_layout(client: BackendClient = Depends(get_client)):
    return pad_layout.encounter_layout(doctors.get_profile(client).ui_preferences)

# ──────────────────────────────────────────────────────────────────────────────
# Dashboard
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/dashboard")
def dashboard(client: BackendClient = Depends(get_client)):
    return dashboards.doctor_dashboard(client)

@router.get("/queue")
def queue(day: Optional[date] = Query(default=None, alias="date"), client: BackendClient = Depends(get_client)):
    items = parse_queue(doctors.get_queue(client, day))
    return {"queue": [i.dump() for i in items], "stats": queue_stats(items)}

@router.get("/appointments/today")
def todays_appointments(client: BackendClient = Depends(get_client)):
    return {"appointments": [a.dump() for a in doctors.get_todays_appointments(client)]}

@router.get("/action-items")
def action_items(client: BackendClient = Depends(get_client)):
    return doctors.get_action_items_summary(client).dump()

@router.get("/stats")
def performance(client: BackendClient = Depends(get_client)):
    return doctors.get_performance_stats(client).dump()

@router.post("/appointments", status_code=201)
def book_appointment(form: DoctorAppointmentForm, client: BackendClient = Depends(get_client)):
    appt = doctors.create_appointment(client, form.patient_id, form.scheduled_time.isoformat(), form.appointment_type)
    return {"success": True, "appointment": appt}

# ──────────────────────────────────────────────────────────────────────────────
# Staff (the doctor's own coordinators)
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/coordinators")
def coordinators(client: BackendClient = Depends(get_client)):
    return {"coordinators": doctors.list_coordinators(client)}

@router.post("/coordinators", status_code=201)
def add_coordinator(form: DoctorCoordinatorForm, client: BackendClient = Depends(get_client)):
    return {"success": True, "coordinator": doctors.create_coordinator(client, form.payload())}

@router.patch("/coordinators/{coordinator_id}/access")
def coordinator_access(coordinator_id: str, form: CoordinatorAccessForm, client: BackendClient = Depends(get_client)):
    return {"success": True, "coordinator": doctors.set_coordinator_access(client, coordinator_id, form.is_active)}

@router.delete("/coordinators/{coordinator_id}")
def remove_coordinator(coordinator_id: str, client: BackendClient = Depends(get_client)):
    doctors.delete_coordinator(client, coordinator_id)
    return {"success": True}

# ──────────────────────────────────────────────────────────────────────────────
# Patients
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/patients")
def patients(name: Optional[str] = None, uhid: Optional[str] = None, email: Optional[str] = None,
             phone: Optional[str] = None, page: int = 1, limit: int = 20, scope: str = "my",
             client: BackendClient = Depends(get_client)):
    return doctors.list_patients(client, name=name, uhid=uhid, email=email, phone=phone,
                                 page=page, limit=limit, scope=scope)

@router.post("/patients", status_code=201)
def register_patient(form: PatientRegistrationForm, client: BackendClient = Depends(get_client)):
    return {"success": True, "patient": doctors.create_patient(client, form.payload())}

@router.get("/patients/search")
def search_patients(q: str = "", page: int = 1, limit: int = 20, client: BackendClient = Depends(get_client)):
    return patient_search.doctor_search(client, q, page, limit)

@router.get("/patients/{patient_id}")
def patient(patient_id: str, client: BackendClient = Depends(get_client)):
    return doctors.get_patient(client, patient_id)

@router.put("/patients/{patient_id}")
def update_patient(patient_id: str, updates: Dict[str, Any] = Body(...), client: BackendClient = Depends(get_client)):
    return {"success": True, "patient": doctors.update_patient(client, patient_id, updates)}

@router.post("/patients/{patient_id}/enroll")
def enroll_patient(patient_id: str, client: BackendClient = Depends(get_client)):
    return {"success": True, **doctors.enroll_existing_patient(client, patient_id)}

@router.get("/patients/{patient_id}/prescriptions")
def patient_prescriptions(patient_id: str, page: int = 1, limit: int = 20, client: BackendClient = Depends(get_client)):
    return encounters.prescriptions_for_patient(client, patient_id, page, limit)

# ── global MID registry ──────────────────────────────────────────────────────
@router.get("/global/search")
def global_search(q: str = "", page: int = 1, limit: int = 20, client: BackendClient = Depends(get_client)):
    return patient_search.global_search(client, q, page, limit)

@router.post("/global", status_code=201)
def register_global(data: Dict[str, Any] = Body(...), client: BackendClient = Depends(get_client)):
    return {"success": True, **doctors.register_global_patient(client, data)}

@router.post("/global/{global_patient_id}/enroll")
def enroll_global(global_patient_id: str, client: BackendClient = Depends(get_client)):
    return {"success": True, **patient_search.enroll(client, global_patient_id)}

@router.get("/global/{mid}")
def registry_record(mid: str, client: BackendClient = Depends(get_client)):
    return patient_search.registry_record(client, mid)

@router.get("/history/{global_patient_id}")
def unified_history(global_patient_id: str, hospital_id: str = Query(..., alias="hospitalId"),
                    client: BackendClient = Depends(get_client)):
    return patient_search.history(client, global_patient_id, hospital_id)

# ──────────────────────────────────────────────────────────────────────────────
# Templates & prescriptions
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/templates")
def templates(page: int = 1, limit: int = 50, client: BackendClient = Depends(get_client)):
    return {"templates": [t.dump() for t in encounters.list_templates(client, page, limit)]}

@router.post("/templates", status_code=201)
def create_template(form: TemplateForm, client: BackendClient = Depends(get_client)):
    return {"success": True, "template": encounters.create_template(client, form.payload())}

@router.get("/templates/{template_id}")
def template(template_id: str, client: BackendClient = Depends(get_client)):
    return encounters.get_template(client, template_id).dump()

@router.put("/templates/{template_id}")
def update_template(template_id: str, form: TemplateForm, client: BackendClient = Depends(get_client)):
    return {"success": True, "template": encounters.update_template(client, template_id, form.payload())}

@router.delete("/templates/{template_id}")
def delete_template(template_id: str, client: BackendClient = Depends(get_client)):
    encounters.delete_template(client, template_id)
    return {"success": True}

@router.get("/prescriptions/{prescription_id}")
def prescription(prescription_id: str, client: BackendClient = Depends(get_client)):
    return encounters.get_prescription(client, prescription_id)

@router.put("/prescriptions/{prescription_id}")
def update_prescription(prescription_id: str, data: Dict[str, Any] = Body(...),
                        client: BackendClient = Depends(get_client)):
    return {"success": True, "prescription": encounters.update_prescription(client, prescription_id, data)}

@router.get("/prescriptions/{prescription_id}/pdf")
def prescription_pdf(prescription_id: str, client: BackendClient = Depends(get_client)):
    pdf = encounters.download_prescription_pdf(client, prescription_id)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="prescription-{prescription_id}.pdf"'},
    )
