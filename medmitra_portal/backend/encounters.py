# medmitra_portal/backend/encounters.py
from __future__ import annotations

from ..schemas import EncounterBundle, PrescriptionTemplate
from .client import BackendClient, unwrap

# ── encounters ──────────────────────────────────────────────────────────────

def get_bundle(client: BackendClient, appointment_id: str) -> EncounterBundle:
    body = client.get(f"/encounters/{appointment_id}/bundle")
    return EncounterBundle.model_validate(unwrap(body, "bundle", default={}))


def finalize(client: BackendClient, encounter_id: str, data: dict) -> dict:
    return unwrap(client.post(f"/encounters/{encounter_id}/finalize", data), default={})


def search(client: BackendClient, **filters) -> dict:
    return unwrap(client.get("/encounters/search", params=filters), default={})


def unified_history(client: BackendClient, global_patient_id: str, hospital_id: str) -> dict:
    body = client.get(f"/encounters/history/{global_patient_id}", params={"hospitalId": hospital_id})
    return unwrap(body, default={})

# ── prescriptions ───────────────────────────────────────────────────────────

def create_prescription(client: BackendClient, data: dict) -> dict:
    return unwrap(client.post("/prescriptions", data), "prescription", default={})


def get_prescription(client: BackendClient, prescription_id: str) -> dict:
    return unwrap(client.get(f"/prescriptions/{prescription_id}"), "prescription", default={})


def update_prescription(client: BackendClient, prescription_id: str, data: dict) -> dict:
    return unwrap(client.put(f"/prescriptions/{prescription_id}", data), "prescription", default={})


def prescriptions_for_encounter(client: BackendClient, encounter_id: str) -> list:
    data = unwrap(client.get(f"/prescriptions/encounter/{encounter_id}"), default={})
    return data.get("prescriptions") or data.get("results") or []


def prescriptions_for_patient(client: BackendClient, patient_id: str, page: int = 1, limit: int = 20) -> dict:
    body = client.get(f"/prescriptions/patient/{patient_id}", params={"page": page, "limit": limit})
    return unwrap(body, default={})


def download_prescription_pdf(client: BackendClient, prescription_id: str) -> bytes:
    resp = client.get(f"/prescriptions/{prescription_id}/download", raw=True)
    return resp.content

# ── templates ───────────────────────────────────────────────────────────────

def list_templates(client: BackendClient, page: int = 1, limit: int = 50) -> list[PrescriptionTemplate]:
    data = unwrap(client.get("/prescription-templates", params={"page": page, "limit": limit}), default={})
    return [PrescriptionTemplate.model_validate(t) for t in data.get("results") or []]


def get_template(client: BackendClient, template_id: str) -> PrescriptionTemplate:
    body = client.get(f"/prescription-templates/{template_id}")
    return PrescriptionTemplate.model_validate(unwrap(body, "template", default={}))


def create_template(client: BackendClient, data: dict) -> dict:
    return unwrap(client.post("/prescription-templates", data), "template", default={})


def update_template(client: BackendClient, template_id: str, data: dict) -> dict:
    return unwrap(client.put(f"/prescription-templates/{template_id}", data), "template", default={})


def delete_template(client: BackendClient, template_id: str) -> dict:
    return client.delete(f"/prescription-templates/{template_id}")
