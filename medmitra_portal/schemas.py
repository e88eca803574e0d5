# medmitra_portal/schemas.py
"""
Shapes of the MedMitra backend responses the portal reads.

The backend answers in camelCase but some endpoints (Supabase-backed ones)
still return snake_case; models accept both and ignore unknown fields.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Dto(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def dump(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


AccountStatus = Literal["pending_verification", "active", "suspended", "inactive"]

# ── people ──────────────────────────────────────────────────────────────────

class Address(Dto):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = Field(default=None, validation_alias=AliasChoices("zipCode", "zip_code", "zip"))
    country: Optional[str] = None


class UIPreferences(Dto):
    vitals_order: List[str] = []
    default_view: Optional[Literal["compact", "detailed", "minimal"]] = None
    encounter_form_order: List[str] = []


class Qualification(Dto):
    degree: str
    institution: Optional[str] = None
    year: Optional[int] = None


class Doctor(Dto):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    full_name: Optional[str] = None
    email: str
    specialty: Optional[str] = None
    medical_registration_id: Optional[str] = None
    account_status: Optional[AccountStatus] = None
    phone_number: Optional[str] = None
    experience: Optional[int] = None
    is_verified: Optional[bool] = None
    qualifications: List[Qualification] = []
    ui_preferences: Optional[UIPreferences] = Field(
        default=None, validation_alias=AliasChoices("ui_preferences", "uiPreferences"))
    last_login: Optional[str] = None


class PatientProfile(Dto):
    id: str
    full_name: str
    uhid: Optional[str] = None
    mid: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    blood_type: Optional[str] = None
    allergies: List[str] = []
    address: Optional[Address] = None
    needs_profile_completion: bool = False

# ── doctor workbench ────────────────────────────────────────────────────────

class QueuePatient(Dto):
    id: Optional[str] = None
    full_name: str = "Unknown Patient"
    uhid: Optional[str] = None
    mid: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None


class DashboardQueueItem(Dto):
    appointment_id: str
    scheduled_time: str
    appointment_type: Optional[str] = None
    status: str
    # raw backend value; queue_stats buckets unknown ones as "scheduled"
    triage_status: Optional[str] = "scheduled"
    patient: QueuePatient
    vitals: Optional[Dict[str, Any]] = None
    triage_recorded_at: Optional[str] = None
    payment_status: Optional[str] = None
    payment_amount: Optional[float] = None
    encounter_status: Optional[str] = None
    encounter_id: Optional[str] = None


class TodayAppointment(Dto):
    id: str
    time: str
    patient_name: str
    patient_uhid: Optional[str] = None
    type: Optional[str] = None
    status: str


class ActionItemsSummary(Dto):
    new_results: int = 0
    consultation_requests: int = 0
    unread_messages: int = 0


class PerformanceStats(Dto):
    patients_seen: int = 0
    patients_scheduled: int = 0
    avg_consult_time_minutes: float = 0
    pending_documentation: int = 0

# ── encounters & prescriptions ──────────────────────────────────────────────

class MedicationLine(Dto):
    name: str = ""
    dosage: str = ""
    frequency: str = ""
    duration: str = ""
    instructions: str = ""


class LabTestLine(Dto):
    name: str = ""
    instructions: str = ""


class TemplateSection(Dto):
    type: Literal["medications", "advice", "tests", "custom"]
    title: str = ""
    content: Optional[str] = None


class TemplateElements(Dto):
    sections: List[TemplateSection] = []


class PrescriptionTemplate(Dto):
    id: str
    name: str
    doctor_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("doctor_id", "doctorId"))
    header: Optional[str] = None
    footer: Optional[str] = None
    elements: TemplateElements = TemplateElements()


class BundlePatientDemographics(Dto):
    age: Optional[int] = None
    gender: Optional[str] = None
    allergies: List[str] = []


class BundlePatient(Dto):
    id: str
    name: str
    uhid: Optional[str] = None
    demographics: BundlePatientDemographics = BundlePatientDemographics()


class AIAnalysis(Dto):
    summary: str = ""
    recommendations: List[str] = []
    confidence: float = 0
    processing_time_ms: Optional[int] = None


class EncounterRef(Dto):
    id: str
    status: str
    appointment_id: Optional[str] = None


class EncounterBundle(Dto):
    encounter: EncounterRef
    patient: BundlePatient
    medical_history: List[Dict[str, Any]] = []
    ai_analysis: Optional[AIAnalysis] = None
    encounter_form: Dict[str, Any] = {}

# ── coordinator ─────────────────────────────────────────────────────────────

class TriageVitals(Dto):
    bp: Optional[str] = None
    pulse: Optional[float] = None
    temp: Optional[float] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    spo2: Optional[float] = None

    def is_empty(self) -> bool:
        return not any(v not in (None, "", 0) for v in self.model_dump().values())


class TriagePayment(Dto):
    amount: Union[float, str] = 0
    method: Literal["Cash", "UPI", "Card", "Insurance"] = "Cash"
    status: Literal["pending", "paid", "failed"] = "paid"
    transaction_id: Optional[str] = None

    def amount_value(self) -> float:
        try:
            return float(self.amount or 0)
        except (TypeError, ValueError):
            return 0.0

# ── patient portal ──────────────────────────────────────────────────────────

class NextAppointment(Dto):
    appointment_id: str
    scheduled_time: str
    appointment_type: Optional[str] = None
    status: Optional[str] = None
    doctor: Dict[str, Any] = {}
    hospital: Dict[str, Any] = {}


class BookingConfirmation(Dto):
    appointment_id: str
    scheduled_time: str
    appointment_type: Optional[str] = None
    status: str
    doctor: Dict[str, Any] = {}
    hospital: Dict[str, Any] = {}


class DraftOut(BaseModel):
    encounter_id: str
    payload: Dict[str, Any]
    saved_at: Optional[datetime] = None
    pending: bool = False
