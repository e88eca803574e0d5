# medmitra_portal/routers/encounters.py
from __future__ import annotations
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from ..backend import doctors, encounters
from ..backend.client import BackendClient
from ..forms import ApplyTemplateForm, ChatQuestion, DiagnosisQuery, FinalizeForm
from ..jobs.scheduler import get_scheduler
from ..models import Portal
from ..services import ai_assist, drafts, encounter_form
from ..services.sessions import SessionTokens
from .deps import get_client, require_portal

doctor_only = require_portal(Portal.doctor)

router = APIRouter(prefix="/encounters", tags=["encounters"])

# ──────────────────────────────────────────────────────────────────────────────
# Encounter pad
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/search")
def search(patient_id: Optional[str] = Query(default=None, alias="patientId"),
           status: Optional[str] = None,
           date_from: Optional[str] = Query(default=None, alias="dateFrom"),
           date_to: Optional[str] = Query(default=None, alias="dateTo"),
           page: int = 1, limit: int = 20,
           tokens: SessionTokens = Depends(doctor_only),
           client: BackendClient = Depends(get_client)):
    return encounters.search(client, patientId=patient_id, status=status, dateFrom=date_from,
                             dateTo=date_to, page=page, limit=limit)

@router.get("/{appointment_id}/bundle")
def bundle(appointment_id: str, tokens: SessionTokens = Depends(doctor_only),
           client: BackendClient = Depends(get_client)):
    """Bundle for the pad, with the draft this session left for it, if any."""
    b = encounters.get_bundle(client, appointment_id)
    draft = drafts.load(tokens.session_id, b.encounter.id)
    return {"bundle": b.dump(), "draft": draft.model_dump(mode="json") if draft else None}

@router.post("/{encounter_id}/apply-template")
def apply_template(encounter_id: str, form: ApplyTemplateForm, tokens: SessionTokens = Depends(doctor_only),
                   client: BackendClient = Depends(get_client)):
    template = encounters.get_template(client, form.template_id)
    return {"form": encounter_form.apply_template(form.form, template).payload()}

@router.post("/{encounter_id}/finalize")
def finalize(encounter_id: str, form: FinalizeForm, tokens: SessionTokens = Depends(doctor_only),
             client: BackendClient = Depends(get_client)):
    try:
        outcome = encounter_form.finalize_encounter(
            client,
            form,
            encounter_id=encounter_id,
            patient_id=form.patient_id,
            appointment_id=form.appointment_id,
            session_id=tokens.session_id,
            scheduler=get_scheduler(),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return outcome.as_dict()

@router.get("/{encounter_id}/prescriptions")
def prescriptions(encounter_id: str, tokens: SessionTokens = Depends(doctor_only),
                  client: BackendClient = Depends(get_client)):
    return {"prescriptions": encounters.prescriptions_for_encounter(client, encounter_id)}

# ──────────────────────────────────────────────────────────────────────────────
# Drafts
# ──────────────────────────────────────────────────────────────────────────────
@router.put("/{encounter_id}/draft")
def save_draft(encounter_id: str, payload: Dict[str, Any] = Body(...),
               tokens: SessionTokens = Depends(doctor_only)):
    deferred = drafts.schedule_save(tokens.session_id, encounter_id, payload, get_scheduler())
    return {"success": True, "deferred": deferred}

@router.get("/{encounter_id}/draft")
def get_draft(encounter_id: str, tokens: SessionTokens = Depends(doctor_only)):
    draft = drafts.load(tokens.session_id, encounter_id)
    if draft is None:
        raise HTTPException(status_code=404, detail="No draft for this encounter")
    return draft.model_dump(mode="json")

@router.delete("/{encounter_id}/draft")
def discard_draft(encounter_id: str, tokens: SessionTokens = Depends(doctor_only)):
    drafts.discard(tokens.session_id, encounter_id, get_scheduler())
    return {"success": True}

# ──────────────────────────────────────────────────────────────────────────────
# AI assist
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/ai/summary/{patient_id}")
def clinical_summary(patient_id: str, tokens: SessionTokens = Depends(doctor_only),
                     client: BackendClient = Depends(get_client)):
    patient = doctors.get_patient(client, patient_id)
    history = patient.get("medicalHistory") or patient.get("encounters") or []
    return ai_assist.clinical_summary(patient_id, history)

@router.post("/ai/diagnosis")
def diagnosis_suggestions(form: DiagnosisQuery, tokens: SessionTokens = Depends(doctor_only)):
    return {"suggestions": ai_assist.diagnosis_suggestions(form.symptoms)}

@router.post("/{appointment_id}/chat")
def chat(appointment_id: str, form: ChatQuestion, tokens: SessionTokens = Depends(doctor_only),
         client: BackendClient = Depends(get_client)):
    return ai_assist.chat(encounters.get_bundle(client, appointment_id), form.question)
