# medmitra_portal/forms.py
"""
Validation for what portal users submit before it is forwarded to the
backend. Messages match what the web forms show.
"""
import re
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from dateutil import parser as dtparser
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .schemas import LabTestLine, MedicationLine, TriagePayment, TriageVitals

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

Gender = Literal["Male", "Female", "Other", "Prefer not to say"]
BloodGroup = Literal["A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"]


_UNSTRIPPED = frozenset({"password"})


class Form(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _strip(cls, v, info):
        # passwords go to the backend exactly as typed
        if info.field_name in _UNSTRIPPED:
            return v
        if isinstance(v, str):
            return v.strip()
        if isinstance(v, list):
            return [x.strip() if isinstance(x, str) else x for x in v]
        return v

    def payload(self) -> Dict[str, Any]:
        """JSON body for the backend (camelCase, unset optionals dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def _length(value: str, lo: int, hi: Optional[int], lo_msg: str, hi_msg: str = "") -> str:
    if len(value) < lo:
        raise ValueError(lo_msg)
    if hi is not None and len(value) > hi:
        raise ValueError(hi_msg)
    return value


def _email(value: str) -> str:
    if not _EMAIL_RE.match(value or ""):
        raise ValueError("Invalid email address")
    return value.lower()

# ── auth ────────────────────────────────────────────────────────────────────

class LoginForm(Form):
    """Doctor, coordinator and admin sign in with email + password."""
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _check_email(cls, v):
        return _email(v)

    @field_validator("password")
    @classmethod
    def _check_password(cls, v):
        return _length(v, 1, None, "Password is required")


class PatientLoginForm(Form):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def _check_username(cls, v):
        return _length(v, 1, None, "Username is required")

    @field_validator("password")
    @classmethod
    def _check_password(cls, v):
        return _length(v, 1, None, "Password is required")


def check_password_strength(v: str) -> str:
    if len(v) < 6:
        raise ValueError("Password must be at least 6 characters long")
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", v):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", v):
        raise ValueError("Password must contain at least one number")
    return v


class DoctorRegistrationForm(Form):
    full_name: str
    email: str
    medical_registration_id: str
    specialty: str
    hospital_id: Optional[str] = None
    # empty means "generate one server side" (OAuth sign-ups)
    password: Optional[str] = ""

    @field_validator("full_name")
    @classmethod
    def _check_name(cls, v):
        return _length(v, 2, 100, "Full name must be at least 2 characters",
                       "Full name must be at most 100 characters")

    @field_validator("email")
    @classmethod
    def _check_email(cls, v):
        return _email(v)

    @field_validator("medical_registration_id")
    @classmethod
    def _check_registration(cls, v):
        return _length(v, 5, 50, "Medical registration ID must be at least 5 characters",
                       "Medical registration ID must be at most 50 characters")

    @field_validator("specialty")
    @classmethod
    def _check_specialty(cls, v):
        return _length(v, 2, 100, "Specialty must be at least 2 characters",
                       "Specialty must be at most 100 characters")

    @field_validator("password")
    @classmethod
    def _check_password(cls, v):
        if not v:
            return ""
        return check_password_strength(v)


class AdminRegistrationForm(Form):
    full_name: str
    email: str
    password: str

    @field_validator("full_name")
    @classmethod
    def _check_name(cls, v):
        return _length(v, 2, 100, "Full name must be at least 2 characters",
                       "Full name must be at most 100 characters")

    @field_validator("email")
    @classmethod
    def _check_email(cls, v):
        return _email(v)

    @field_validator("password")
    @classmethod
    def _check_password(cls, v):
        return check_password_strength(v)


class CoordinatorRegistrationForm(Form):
    full_name: str
    email: str
    phone_number: Optional[str] = None
    password: str
    hospital_id: str

    @field_validator("full_name")
    @classmethod
    def _check_name(cls, v):
        return _length(v, 2, 100, "Full name must be at least 2 characters",
                       "Full name must be at most 100 characters")

    @field_validator("email")
    @classmethod
    def _check_email(cls, v):
        return _email(v)

    @field_validator("password")
    @classmethod
    def _check_password(cls, v):
        return check_password_strength(v)

    @field_validator("hospital_id")
    @classmethod
    def _check_hospital(cls, v):
        return _length(v, 1, None, "Hospital is required")


class PatientSignupForm(Form):
    """Self sign-up on the patient portal (common auth controller)."""
    username: str
    email: str
    phone: str
    password: str

    @field_validator("username")
    @classmethod
    def _check_username(cls, v):
        return _length(v, 3, 50, "Username must be at least 3 characters",
                       "Username must be at most 50 characters")

    @field_validator("email")
    @classmethod
    def _check_email(cls, v):
        return _email(v)

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, v):
        return _length(v, 10, None, "Valid phone number is required")

    @field_validator("password")
    @classmethod
    def _check_password(cls, v):
        return check_password_strength(v)

    def payload(self) -> Dict[str, Any]:
        return {**super().payload(), "role": "patient"}

# ── patients ────────────────────────────────────────────────────────────────

class AddressForm(Form):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class PatientRegistrationForm(Form):
    full_name: str
    phone: str
    email: Optional[str] = ""
    date_of_birth: str
    gender: Gender
    blood_type: Optional[str] = None
    # comma separated in the form, a list for the backend
    allergies: Optional[str] = None
    address: Optional[AddressForm] = None

    @field_validator("full_name")
    @classmethod
    def _check_name(cls, v):
        return _length(v, 2, None, "Full name is required")

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, v):
        return _length(v, 10, None, "Valid phone number is required")

    @field_validator("email")
    @classmethod
    def _check_email(cls, v):
        return _email(v) if v else ""

    @field_validator("date_of_birth")
    @classmethod
    def _check_dob(cls, v):
        return _length(v, 1, None, "Date of birth is required")

    def allergy_list(self) -> List[str]:
        return [a.strip() for a in (self.allergies or "").split(",") if a.strip()]

    def payload(self) -> Dict[str, Any]:
        body = super().payload()
        body["allergies"] = self.allergy_list()
        if not self.email:
            body.pop("email", None)
        return body


class CoordinatorPatientForm(Form):
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[Gender] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    blood_group: Optional[BloodGroup] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def _check_name(cls, v):
        return _length(v, 2, None, "Full name is required")

    @field_validator("email")
    @classmethod
    def _check_email(cls, v):
        return _email(v) if v else None

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, v):
        return _length(v, 10, None, "Valid phone number is required") if v else None


class ProfileCompletionForm(Form):
    """Patient onboarding: what the backend needs to drop needsProfileCompletion."""
    full_name: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: str
    gender: Gender
    blood_type: Optional[str] = None
    allergies: List[str] = []
    chronic_conditions: List[str] = []

    @field_validator("date_of_birth")
    @classmethod
    def _check_dob(cls, v):
        return _length(v, 1, None, "Date of birth is required")

# ── encounter ───────────────────────────────────────────────────────────────

class DiagnosisEntry(Form):
    code: str = ""
    description: str
    confidence: str = "High"


class VitalSigns(Form):
    blood_pressure: str = ""
    heart_rate: str = ""
    temperature: str = ""
    respiratory_rate: str = ""
    oxygen_saturation: str = ""
    weight: str = ""
    height: str = ""


class PrescribedTest(LabTestLine):
    @field_validator("name")
    @classmethod
    def _check_name(cls, v):
        if not v.strip():
            raise ValueError("Test name required")
        return v


class EncounterForm(Form):
    chief_complaint: str
    presenting_symptoms: List[str] = []
    diagnosis: List[DiagnosisEntry] = []
    medications: List[MedicationLine] = []
    vital_signs: VitalSigns = VitalSigns()
    doctor_remarks: str = ""
    follow_up_instructions: str = ""
    # prescription part
    template_id: Optional[str] = None
    advice: str = ""
    tests: List[PrescribedTest] = []
    notes: str = ""

    @field_validator("chief_complaint")
    @classmethod
    def _check_complaint(cls, v):
        return _length(v, 1, None, "Chief complaint is required")

# ── scheduling ──────────────────────────────────────────────────────────────

def _parse_slot(slot: str, day: date) -> datetime:
    if "T" in slot:
        return dtparser.isoparse(slot)
    return datetime.combine(day, dtparser.parse(slot).time())


class AppointmentBookingForm(Form):
    hospital_id: str
    doctor_id: str
    date: date
    time_slot: str
    reason: Optional[str] = None
    appointment_type: Optional[str] = None

    @field_validator("hospital_id")
    @classmethod
    def _check_hospital(cls, v):
        return _length(v, 1, None, "Hospital is required")

    @field_validator("doctor_id")
    @classmethod
    def _check_doctor(cls, v):
        return _length(v, 1, None, "Doctor is required")

    @field_validator("time_slot")
    @classmethod
    def _check_slot(cls, v):
        _length(v, 1, None, "Time slot is required")
        try:
            _parse_slot(v, date.today())
        except (ValueError, OverflowError):
            raise ValueError("Invalid time slot")
        return v

    def scheduled_time(self) -> str:
        """Slots come either as full ISO timestamps or as HH:MM on `date`."""
        return _parse_slot(self.time_slot, self.date).isoformat()

    def payload(self) -> Dict[str, Any]:
        body = {
            "doctorId": self.doctor_id,
            "hospitalId": self.hospital_id,
            "scheduledTime": self.scheduled_time(),
        }
        if self.appointment_type:
            body["appointmentType"] = self.appointment_type
        if self.reason:
            body["notes"] = self.reason
        return body


class CoordinatorAppointmentForm(Form):
    practitioner_id: str
    patient_id: str
    scheduled_time: datetime
    appointment_type: Optional[str] = None
    status: Optional[str] = None

    @field_validator("practitioner_id")
    @classmethod
    def _check_doctor(cls, v):
        return _length(v, 1, None, "Doctor is required")

    @field_validator("patient_id")
    @classmethod
    def _check_patient(cls, v):
        return _length(v, 1, None, "Patient is required")


class AppointmentStatusForm(Form):
    status: Literal["Waiting", "In-Consultation", "Documentation-Pending", "Completed", "Cancelled", "No-Show"]


class TriageForm(Form):
    vitals: TriageVitals = TriageVitals()
    payment: Optional[TriagePayment] = None


class DoctorCoordinatorForm(Form):
    full_name: str
    email: str
    phone_number: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def _check_name(cls, v):
        return _length(v, 2, 100, "Full name must be at least 2 characters",
                       "Full name must be at most 100 characters")

    @field_validator("email")
    @classmethod
    def _check_email(cls, v):
        return _email(v)


class TemplateForm(Form):
    name: str
    header: Optional[str] = None
    footer: Optional[str] = None
    elements: Dict[str, Any] = Field(default_factory=lambda: {"sections": []})

    @field_validator("name")
    @classmethod
    def _check_name(cls, v):
        return _length(v, 1, 100, "Template name is required", "Template name must be at most 100 characters")


class EncounterFormState(EncounterForm):
    """The form as it is while still being filled in (drafts, template preview)."""
    chief_complaint: str = ""

    @field_validator("chief_complaint")
    @classmethod
    def _check_complaint(cls, v):
        return v


class FinalizeForm(EncounterForm):
    patient_id: Optional[str] = None
    appointment_id: Optional[str] = None


class DoctorAppointmentForm(Form):
    patient_id: str
    scheduled_time: datetime
    appointment_type: Optional[str] = None

    @field_validator("patient_id")
    @classmethod
    def _check_patient(cls, v):
        return _length(v, 1, None, "Patient is required")


class CancelForm(Form):
    reason: Optional[str] = None


class CoordinatorAccessForm(Form):
    is_active: bool

# ── doctor settings & assist ────────────────────────────────────────────────

class PreferencesForm(Form):
    vitals_order: List[str] = []
    encounter_form_order: List[str] = []
    default_view: Optional[Literal["compact", "detailed", "minimal"]] = None


class ApplyTemplateForm(Form):
    template_id: str
    form: EncounterFormState = EncounterFormState()


class DiagnosisQuery(Form):
    symptoms: str = ""


class ChatQuestion(Form):
    question: str

    @field_validator("question")
    @classmethod
    def _check_question(cls, v):
        return _length(v, 1, 2000, "Question is required", "Question must be at most 2000 characters")
