# tests/test_encounter_form.py
from datetime import date

import pytest

from medmitra_portal.exceptions import BackendError
from medmitra_portal.forms import EncounterForm, EncounterFormState
from medmitra_portal.models import Portal
from medmitra_portal.schemas import PrescriptionTemplate
from medmitra_portal.services import drafts
from medmitra_portal.services.encounter_form import (
    PRESCRIPTION_EXISTS_MESSAGE,
    apply_template,
    finalize_encounter,
    has_prescription_content,
    patient_age,
    prescription_payload,
)

TEMPLATE = PrescriptionTemplate.model_validate({
    "id": "tpl-1",
    "name": "Viral fever",
    "elements": {"sections": [
        {"type": "advice", "title": "Advice", "content": "Plenty of fluids"},
        {"type": "tests", "title": "CBC", "content": "Fasting not required"},
        {"type": "custom", "title": "Diet", "content": "Light meals"},
        {"type": "medications", "title": "Medicines"},
    ]},
})


def test_apply_template():
    form = EncounterFormState(notes="Seen with mother")
    out = apply_template(form, TEMPLATE)
    assert out.advice == "Plenty of fluids"
    assert [(t.name, t.instructions) for t in out.tests] == [("CBC", "Fasting not required")]
    assert out.notes == "Seen with mother\nLight meals"
    assert out.template_id == "tpl-1"
    assert out.medications == []


def test_apply_template_skips_empty_sections():
    tpl = PrescriptionTemplate.model_validate({
        "id": "t2", "name": "Blank",
        "elements": {"sections": [{"type": "tests", "title": "X"}, {"type": "custom", "title": "Y"}]},
    })
    out = apply_template(EncounterFormState(), tpl)
    assert out.tests == [] and out.notes == ""


def test_has_prescription_content():
    assert not has_prescription_content(EncounterForm(chiefComplaint="Cough", advice="  ",
                                                      medications=[{"name": " "}]))
    assert has_prescription_content(EncounterForm(chiefComplaint="Cough", medications=[{"name": "Paracetamol"}]))
    assert has_prescription_content(EncounterForm(chiefComplaint="Cough", notes="Review in a week"))


def test_prescription_payload_filters_and_omits_blanks():
    form = EncounterForm(
        chiefComplaint="Fever",
        medications=[{"name": "Paracetamol", "dosage": "500mg"}, {"name": ""}],
        tests=[{"name": "CBC"}],
        templateId="tpl-1",
    )
    body = prescription_payload(form, "enc-1", "pat-1")
    assert body["encounterId"] == "enc-1" and body["patientId"] == "pat-1"
    assert body["templateId"] == "tpl-1"
    assert [m["name"] for m in body["content"]["medications"]] == ["Paracetamol"]
    assert body["content"]["tests"] == [{"name": "CBC", "instructions": ""}]
    for key in ("advice", "followUp", "notes"):
        assert key not in body["content"]


@pytest.fixture
def doctor(make_session, client_for):
    tokens = make_session(Portal.doctor)
    return tokens, client_for(tokens)


def test_finalize_with_prescription_discards_draft(backend, doctor):
    tokens, client = doctor
    drafts.save_now(tokens.session_id, "enc-1", {"chiefComplaint": "Fever"})
    backend.add("POST", "/encounters/enc-1/finalize", (200, {"success": True, "data": {"id": "enc-1"}}))
    backend.add("POST", "/prescriptions", (201, {"data": {"prescription": {"id": "rx-1"}}}))
    form = EncounterForm(chiefComplaint="Fever", medications=[{"name": "Paracetamol"}], advice="Rest")

    outcome = finalize_encounter(client, form, encounter_id="enc-1", patient_id="pat-1",
                                 appointment_id="apt-1", session_id=tokens.session_id)

    assert outcome.status == "finalized_with_prescription"
    assert outcome.prescription == {"id": "rx-1"}
    sent = backend.calls_to("POST", "/encounters/enc-1/finalize")[0].body
    assert sent["appointmentId"] == "apt-1" and sent["chiefComplaint"] == "Fever"
    assert drafts.load(tokens.session_id, "enc-1") is None


def test_finalize_without_content_skips_prescription(backend, doctor):
    _, client = doctor
    backend.add("POST", "/encounters/enc-1/finalize", (200, {"data": {}}))
    outcome = finalize_encounter(client, EncounterForm(chiefComplaint="Checkup"),
                                 encounter_id="enc-1", patient_id="pat-1")
    assert outcome.status == "finalized"
    assert backend.calls_to("POST", "/prescriptions") == []


def test_prescription_failure_is_a_warning(backend, doctor):
    _, client = doctor
    backend.add("POST", "/encounters/enc-1/finalize", (200, {"data": {}}))
    backend.add("POST", "/prescriptions", (500, {"message": "boom"}))
    outcome = finalize_encounter(client, EncounterForm(chiefComplaint="Fever", advice="Rest"),
                                 encounter_id="enc-1", patient_id="pat-1")
    assert outcome.status == "finalized_without_prescription"
    assert "prescription creation failed" in outcome.message


def test_conflict_reports_existing_prescription(backend, doctor):
    _, client = doctor
    backend.add("POST", "/encounters/enc-1/finalize", (409, {"message": "Conflict"}))
    with pytest.raises(BackendError) as exc:
        finalize_encounter(client, EncounterForm(chiefComplaint="Fever"), encounter_id="enc-1", patient_id="p")
    assert exc.value.status_code == 409
    assert exc.value.message == PRESCRIPTION_EXISTS_MESSAGE


@pytest.mark.parametrize("encounter_id,patient_id,message", [
    (None, "p", "missing encounter ID"),
    ("e", "", "missing patient ID"),
])
def test_finalize_requires_ids(doctor, encounter_id, patient_id, message):
    _, client = doctor
    with pytest.raises(ValueError, match=message):
        finalize_encounter(client, EncounterForm(chiefComplaint="x"), encounter_id=encounter_id, patient_id=patient_id)


def test_patient_age():
    today = date(2026, 3, 2)
    assert patient_age("1990-03-03", today) == 35
    assert patient_age("1990-03-01", today) == 36
    assert patient_age("2030-01-01", today) == 0
    assert patient_age(None) is None
    assert patient_age("not a date") is None
