# medmitra_portal/services/pad_layout.py
"""
Doctor "configure pad" preferences: in which order the encounter form shows
its sections and vitals, and the default density of the view.
"""
from __future__ import annotations
from typing import Dict, Iterable, List, Optional

from ..schemas import UIPreferences

SECTION_LABELS: Dict[str, str] = {
    "vitals": "Vital Signs",
    "symptoms": "Symptoms & History",
    "diagnosis": "Diagnosis",
    "medications": "Medications",
    "notes": "Clinical Notes",
    "remarks": "Doctor's Remarks",
    "prescription": "Prescription",
}

# Widgets a doctor can drag around on the preferences page
CONFIGURABLE_SECTIONS = ["vitals", "symptoms", "diagnosis", "medications", "notes"]
DEFAULT_SECTION_ORDER = ["vitals", "diagnosis", "medications", "remarks", "prescription"]

# id -> (label, encounter form field, placeholder)
VITALS: Dict[str, tuple] = {
    "bp": ("Blood Pressure", "bloodPressure", "120/80 mmHg"),
    "pulse": ("Pulse Rate", "heartRate", "72 bpm"),
    "temp": ("Temperature", "temperature", "98.6°F"),
    "weight": ("Weight", "weight", "kg"),
    "height": ("Height", "height", "cm"),
    "spo2": ("O2 Saturation", "oxygenSaturation", "98%"),
    "respiratory": ("Respiratory Rate", "respiratoryRate", "16/min"),
}
CONFIGURABLE_VITALS = ["bp", "pulse", "temp", "weight", "height", "spo2"]
DEFAULT_VITALS_ORDER = list(CONFIGURABLE_VITALS)

DEFAULT_VIEW = "detailed"


def normalize_order(preferred: Optional[Iterable[str]], catalogue: List[str]) -> List[str]:
    """
    Preferred ids first (unknown ids and repeats dropped), then whatever the
    catalogue has that the preference left out, in catalogue order.
    """
    seen = []
    for item in preferred or []:
        if item in catalogue and item not in seen:
            seen.append(item)
    return seen + [c for c in catalogue if c not in seen]


def settings_view(prefs: Optional[UIPreferences]) -> dict:
    """What the preferences page edits."""
    prefs = prefs or UIPreferences()
    return {
        "vitalsOrder": normalize_order(prefs.vitals_order, CONFIGURABLE_VITALS),
        "encounterFormOrder": normalize_order(prefs.encounter_form_order, CONFIGURABLE_SECTIONS),
        "defaultView": prefs.default_view or DEFAULT_VIEW,
    }


def defaults() -> dict:
    return settings_view(None)


def encounter_layout(prefs: Optional[UIPreferences]) -> dict:
    """
    Layout the encounter pad renders. A stored order is used as is (ids the
    pad cannot render are skipped); an empty one falls back to the default.
    """
    prefs = prefs or UIPreferences()
    sections = [s for s in (prefs.encounter_form_order or DEFAULT_SECTION_ORDER) if s in SECTION_LABELS]
    vitals = [v for v in (prefs.vitals_order or DEFAULT_VITALS_ORDER) if v in VITALS]
    return {
        "defaultView": prefs.default_view or DEFAULT_VIEW,
        "sections": [{"id": s, "label": SECTION_LABELS[s]} for s in sections],
        "vitals": [
            {"id": v, "label": VITALS[v][0], "field": VITALS[v][1], "placeholder": VITALS[v][2]}
            for v in vitals
        ],
    }


def preferences_payload(vitals_order: Optional[List[str]], encounter_form_order: Optional[List[str]],
                        default_view: Optional[str]) -> dict:
    """Body for PUT /doctors/me/preferences, normalized like the settings page saves it."""
    return {
        "vitalsOrder": normalize_order(vitals_order, CONFIGURABLE_VITALS),
        "encounterFormOrder": normalize_order(encounter_form_order, CONFIGURABLE_SECTIONS),
        "defaultView": default_view or DEFAULT_VIEW,
    }
