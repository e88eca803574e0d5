# medmitra_portal/services/encounter_form.py
"""
Encounter documentation: templates, the finalize flow and the prescription
that goes with it.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional, Union

from apscheduler.schedulers.base import BaseScheduler
from dateutil import parser as dtparser

from ..backend import encounters
from ..backend.client import BackendClient
from ..exceptions import BackendError, BackendUnavailable
from ..forms import EncounterForm, PrescribedTest
from ..schemas import PrescriptionTemplate
from . import drafts

logger = logging.getLogger(__name__)

PRESCRIPTION_EXISTS_MESSAGE = (
    "A prescription already exists for this encounter. "
    "Please update the existing prescription instead."
)
FINALIZE_FAILED_MESSAGE = "Failed to finalize encounter. Please try again."
PRESCRIPTION_FAILED_MESSAGE = (
    "Encounter finalized, but prescription creation failed. "
    "You can create the prescription separately."
)


@dataclass
class FinalizeOutcome:
    status: str  # finalized | finalized_with_prescription | finalized_without_prescription
    message: str
    encounter: Dict[str, Any] = field(default_factory=dict)
    prescription: Optional[Dict[str, Any]] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "status": self.status,
            "message": self.message,
            "encounter": self.encounter,
            "prescription": self.prescription,
        }


def apply_template(form: EncounterForm, template: Optional[PrescriptionTemplate]) -> EncounterForm:
    """Copy of `form` with the template's advice, tests and custom notes filled in."""
    if template is None:
        return form
    updates: Dict[str, Any] = {}
    notes = form.notes
    for section in template.elements.sections:
        if section.type == "advice":
            updates["advice"] = section.content or ""
        elif section.type == "tests":
            if section.content:
                updates["tests"] = [PrescribedTest(name=section.title or "Test", instructions=section.content)]
        elif section.type == "custom":
            notes = "\n".join(p for p in (notes, section.content) if p)
            updates["notes"] = notes
        # medications: headers only, nothing to prefill
    updates["template_id"] = template.id
    return form.model_copy(update=updates)


def has_prescription_content(form: EncounterForm) -> bool:
    return bool(
        form.advice.strip()
        or form.notes.strip()
        or any(t.name.strip() for t in form.tests)
        or any(m.name.strip() for m in form.medications)
    )


def finalize_payload(form: EncounterForm, appointment_id: Optional[str] = None) -> Dict[str, Any]:
    body = {
        "chiefComplaint": form.chief_complaint,
        "presentingSymptoms": form.presenting_symptoms,
        "diagnosis": [d.payload() for d in form.diagnosis],
        "medications": [m.dump() for m in form.medications],
        "vitalSigns": form.vital_signs.payload(),
        "doctorRemarks": form.doctor_remarks,
        "followUpInstructions": form.follow_up_instructions,
    }
    if appointment_id:
        body["appointmentId"] = appointment_id
    return body


def prescription_payload(form: EncounterForm, encounter_id: str, patient_id: str) -> Dict[str, Any]:
    content: Dict[str, Any] = {
        "medications": [m.dump() for m in form.medications if m.name.strip()],
        "tests": [t.dump() for t in form.tests if t.name.strip()],
    }
    if form.advice:
        content["advice"] = form.advice
    if form.follow_up_instructions:
        content["followUp"] = form.follow_up_instructions
    if form.notes:
        content["notes"] = form.notes
    body: Dict[str, Any] = {"encounterId": encounter_id, "patientId": patient_id, "content": content}
    if form.template_id:
        body["templateId"] = form.template_id
    return body


def finalize_encounter(client: BackendClient, form: EncounterForm, *, encounter_id: Optional[str],
                       patient_id: Optional[str], appointment_id: Optional[str] = None,
                       session_id: Optional[str] = None,
                       scheduler: Optional[BaseScheduler] = None) -> FinalizeOutcome:
    """
    Finalize the encounter, then create its prescription if the form has any.
    Raises ValueError for missing ids and BackendError when finalizing fails.
    """
    if not encounter_id:
        raise ValueError("Cannot finalize encounter: missing encounter ID")
    if not patient_id:
        raise ValueError("Cannot create prescription: missing patient ID")

    try:
        encounter = encounters.finalize(client, encounter_id, finalize_payload(form, appointment_id))
    except BackendError as e:
        logger.warning("Finalize of encounter %s failed: %s %s", encounter_id, e.status_code, e.message)
        if e.status_code == 409:
            raise BackendError(409, PRESCRIPTION_EXISTS_MESSAGE, e.errors) from e
        raise BackendError(e.status_code, FINALIZE_FAILED_MESSAGE, e.errors) from e

    if session_id:
        drafts.discard(session_id, encounter_id, scheduler)

    if not has_prescription_content(form):
        return FinalizeOutcome("finalized", "Encounter finalized successfully!", encounter)

    try:
        prescription = encounters.create_prescription(client, prescription_payload(form, encounter_id, patient_id))
    except (BackendError, BackendUnavailable) as e:
        logger.warning("Encounter %s finalized but prescription failed: %s", encounter_id, e)
        return FinalizeOutcome("finalized_without_prescription", PRESCRIPTION_FAILED_MESSAGE, encounter)

    return FinalizeOutcome(
        "finalized_with_prescription",
        "Encounter finalized and prescription created successfully!",
        encounter,
        prescription,
    )


def patient_age(dob: Union[str, date, datetime, None], today: Optional[date] = None) -> Optional[int]:
    """Whole years since `dob` (days / 365.25), never negative. None when unknown."""
    if not dob:
        return None
    if isinstance(dob, str):
        try:
            dob = dtparser.parse(dob)
        except (ValueError, OverflowError):
            return None
    if isinstance(dob, datetime):
        dob = dob.date()
    days = ((today or date.today()) - dob).days
    return max(0, int(days // 365.25))
