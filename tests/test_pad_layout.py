# tests/test_pad_layout.py
from medmitra_portal.schemas import UIPreferences
from medmitra_portal.services import pad_layout


def test_normalize_order_keeps_preference_then_catalogue():
    order = pad_layout.normalize_order(["spo2", "bogus", "bp", "spo2"], pad_layout.CONFIGURABLE_VITALS)
    assert order == ["spo2", "bp", "pulse", "temp", "weight", "height"]


def test_settings_view_defaults():
    assert pad_layout.defaults() == {
        "vitalsOrder": ["bp", "pulse", "temp", "weight", "height", "spo2"],
        "encounterFormOrder": ["vitals", "symptoms", "diagnosis", "medications", "notes"],
        "defaultView": "detailed",
    }


def test_encounter_layout_falls_back_to_default_order():
    layout = pad_layout.encounter_layout(UIPreferences())
    assert [s["id"] for s in layout["sections"]] == ["vitals", "diagnosis", "medications", "remarks", "prescription"]
    assert layout["sections"][3]["label"] == "Doctor's Remarks"
    assert layout["vitals"][0] == {"id": "bp", "label": "Blood Pressure", "field": "bloodPressure",
                                   "placeholder": "120/80 mmHg"}


def test_encounter_layout_uses_stored_order():
    prefs = UIPreferences(encounter_form_order=["medications", "vitals"], vitals_order=["temp", "respiratory"],
                          default_view="compact")
    layout = pad_layout.encounter_layout(prefs)
    assert [s["id"] for s in layout["sections"]] == ["medications", "vitals"]
    assert [v["id"] for v in layout["vitals"]] == ["temp", "respiratory"]
    assert layout["defaultView"] == "compact"


def test_preferences_payload_is_normalized():
    body = pad_layout.preferences_payload(["temp"], ["notes", "vitals"], None)
    assert body["vitalsOrder"][0] == "temp"
    assert body["encounterFormOrder"] == ["notes", "vitals", "symptoms", "diagnosis", "medications"]
    assert body["defaultView"] == "detailed"
