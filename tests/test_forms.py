# tests/test_forms.py
import pytest
from pydantic import ValidationError

from medmitra_portal.exceptions import form_errors
from medmitra_portal.forms import (
    AppointmentBookingForm,
    CoordinatorPatientForm,
    DoctorRegistrationForm,
    EncounterForm,
    EncounterFormState,
    LoginForm,
    PatientRegistrationForm,
    PatientSignupForm,
)

DOCTOR = {
    "fullName": "Asha Rao",
    "email": "Asha@Clinic.IN",
    "medicalRegistrationId": "MCI-12345",
    "specialty": "Cardiology",
}


def _messages(exc_info):
    return [e["message"] for e in form_errors(exc_info.value)]


@pytest.mark.parametrize("password,message", [
    ("Ab1", "Password must be at least 6 characters long"),
    ("abcdef1", "Password must contain at least one uppercase letter"),
    ("ABCDEF1", "Password must contain at least one lowercase letter"),
    ("Abcdefg", "Password must contain at least one number"),
])
def test_doctor_password_rules(password, message):
    with pytest.raises(ValidationError) as exc:
        DoctorRegistrationForm(**DOCTOR, password=password)
    assert _messages(exc) == [message]


def test_doctor_password_may_be_empty_and_email_is_lowercased():
    form = DoctorRegistrationForm(**DOCTOR, password="")
    assert form.password == ""
    assert form.email == "asha@clinic.in"
    assert form.payload()["medicalRegistrationId"] == "MCI-12345"


def test_login_reports_camel_case_fields():
    with pytest.raises(ValidationError) as exc:
        LoginForm(email="not-an-email", password="")
    errors = form_errors(exc.value)
    assert {"field": "email", "message": "Invalid email address"} in errors
    assert {"field": "password", "message": "Password is required"} in errors


def test_patient_registration_allergies_and_optional_email():
    form = PatientRegistrationForm(
        fullName="Ravi Kumar",
        phone="9876543210",
        email="",
        dateOfBirth="1990-04-01",
        gender="Male",
        allergies="penicillin, dust ,, ",
    )
    body = form.payload()
    assert body["allergies"] == ["penicillin", "dust"]
    assert "email" not in body
    assert body["dateOfBirth"] == "1990-04-01"


def test_patient_registration_short_phone():
    with pytest.raises(ValidationError) as exc:
        PatientRegistrationForm(fullName="Ravi Kumar", phone="12345", dateOfBirth="1990-04-01", gender="Male")
    assert _messages(exc) == ["Valid phone number is required"]


def test_patient_signup_adds_role():
    form = PatientSignupForm(username="ravi", email="ravi@x.in", phone="9876543210", password="Secret12")
    assert form.payload()["role"] == "patient"


def test_blood_group_enum():
    with pytest.raises(ValidationError):
        CoordinatorPatientForm(fullName="Meera", bloodGroup="C+")
    assert CoordinatorPatientForm(fullName="Meera", bloodGroup="AB-").blood_group == "AB-"


def test_encounter_form_defaults_and_required_complaint():
    form = EncounterForm(chiefComplaint="Headache for 3 days")
    assert form.medications == [] and form.tests == [] and form.advice == ""
    with pytest.raises(ValidationError) as exc:
        EncounterForm(chiefComplaint="  ")
    assert _messages(exc) == ["Chief complaint is required"]


def test_encounter_test_needs_a_name():
    with pytest.raises(ValidationError) as exc:
        EncounterForm(chiefComplaint="Fever", tests=[{"name": " ", "instructions": "fasting"}])
    errors = form_errors(exc.value)
    assert errors == [{"field": "tests.0.name", "message": "Test name required"}]


def test_draft_state_allows_empty_complaint():
    assert EncounterFormState().chief_complaint == ""


def test_booking_builds_scheduled_time_from_slot():
    form = AppointmentBookingForm(hospitalId="h1", doctorId="d1", date="2026-03-02", timeSlot="10:30",
                                  reason="Follow-up")
    assert form.payload() == {
        "doctorId": "d1",
        "hospitalId": "h1",
        "scheduledTime": "2026-03-02T10:30:00",
        "notes": "Follow-up",
    }


def test_booking_accepts_iso_slot():
    form = AppointmentBookingForm(hospitalId="h1", doctorId="d1", date="2026-03-02",
                                  timeSlot="2026-03-02T04:30:00+00:00")
    assert form.scheduled_time() == "2026-03-02T04:30:00+00:00"
