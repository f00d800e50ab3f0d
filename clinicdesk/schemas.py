# clinicdesk/schemas.py
from datetime import datetime, date, time, timezone
from typing import Annotated, Any, Dict, Generic, List, Optional, TypeVar
from enum import Enum

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, EmailStr, model_validator

from .models import (
    UserRole, AppointmentStatus, TriagePriority, InsuranceStatus, PaymentStatus,
    PaymentMethod, DiagnosticTestType, DiagnosticTestStatus,
)

T = TypeVar("T")


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken to be UTC so they compare with aware ones
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


# --- Base Schemas ---
class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# --- Result envelope ---
class ErrorKind(str, Enum):
    not_found = "not_found"
    validation_failed = "validation_failed"
    unauthorized = "unauthorized"


class ServiceResult(BaseModel, Generic[T]):
    """Tagged success/failure returned by every service operation."""
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, data: T = None) -> "ServiceResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def not_found(cls, message: str) -> "ServiceResult[T]":
        return cls(success=False, error=message, error_kind=ErrorKind.not_found)

    @classmethod
    def invalid(cls, message: str) -> "ServiceResult[T]":
        return cls(success=False, error=message, error_kind=ErrorKind.validation_failed)

    @classmethod
    def unauthorized(cls, message: str) -> "ServiceResult[T]":
        return cls(success=False, error=message, error_kind=ErrorKind.unauthorized)


class PaginatedResponse(BaseModel, Generic[T]):
    data: List[T]
    total: int
    page: int
    page_size: int
    total_pages: int


# --- User Schemas ---
class User(BaseSchema):
    id: str
    email: EmailStr
    first_name: str
    last_name: str
    role: UserRole
    phone: str = ""
    department: Optional[str] = None
    specialization: Optional[str] = None
    is_active: bool = True
    created_at: UtcDatetime
    last_login: Optional[UtcDatetime] = None
    permissions: List[str] = Field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    user: User
    token: str


# --- Patient Schemas ---
class Address(BaseSchema):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""


class EmergencyContact(BaseSchema):
    name: str = ""
    relationship: str = ""
    phone: str = ""


class Medication(BaseSchema):
    id: str
    name: str
    dosage: str
    frequency: str
    prescribed_by: str
    start_date: date
    end_date: Optional[date] = None
    is_active: bool = True


class Surgery(BaseSchema):
    id: str
    procedure: str
    surgery_date: date
    surgeon: str
    hospital: str
    notes: Optional[str] = None


class SocialHistory(BaseSchema):
    smoking: bool = False
    alcohol: bool = False
    drugs: bool = False
    notes: Optional[str] = None


class MedicalHistory(BaseSchema):
    allergies: List[str] = Field(default_factory=list)
    medications: List[Medication] = Field(default_factory=list)
    conditions: List[str] = Field(default_factory=list)
    surgeries: List[Surgery] = Field(default_factory=list)
    family_history: List[str] = Field(default_factory=list)
    social_history: SocialHistory = Field(default_factory=SocialHistory)


class Insurance(BaseSchema):
    id: str
    provider: str
    policy_number: str
    group_number: Optional[str] = None
    subscriber_id: str
    subscriber_name: str
    relationship: str = "Self"
    is_primary: bool = False
    status: InsuranceStatus = InsuranceStatus.pending
    effective_date: date
    expiration_date: Optional[date] = None
    copay: Optional[float] = None
    deductible: Optional[float] = None
    coinsurance: Optional[float] = None
    balance: Optional[float] = Field(None, description="Remaining coverage in currency units")


class Patient(BaseSchema):
    id: str
    first_name: str
    last_name: str
    date_of_birth: date
    gender: str
    phone: str
    email: Optional[EmailStr] = None
    address: Address = Field(default_factory=Address)
    emergency_contact: EmergencyContact = Field(default_factory=EmergencyContact)
    medical_history: MedicalHistory = Field(default_factory=MedicalHistory)
    insurance: List[Insurance] = Field(default_factory=list)
    created_at: UtcDatetime
    updated_at: UtcDatetime

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class InsuranceEnrollment(BaseModel):
    provider: str = Field(..., min_length=1)
    policy_number: str = Field(..., min_length=1)
    group_number: Optional[str] = None
    subscriber_id: str = Field(..., min_length=1)
    balance: Optional[float] = Field(None, ge=0)


class PatientRegistrationForm(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    date_of_birth: date
    gender: str = Field(..., max_length=20)
    phone: str = Field(..., min_length=3, max_length=30)
    email: Optional[EmailStr] = None
    address: Address = Field(default_factory=Address)
    emergency_contact: EmergencyContact = Field(default_factory=EmergencyContact)
    insurance: Optional[InsuranceEnrollment] = None


class PatientUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(None, min_length=1, max_length=255)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, min_length=3, max_length=30)
    email: Optional[EmailStr] = None
    address: Optional[Address] = None
    emergency_contact: Optional[EmergencyContact] = None
    medical_history: Optional[MedicalHistory] = None
    insurance: Optional[List[Insurance]] = None


# --- Catalog Schemas ---
class Practitioner(BaseSchema):
    id: str
    title: str = ""
    first_name: str
    last_name: str
    specialties: List[str] = Field(default_factory=list)
    license_number: str = ""
    email: Optional[EmailStr] = None
    phone: str = ""
    is_available: bool = True
    max_concurrent_patients: int = 1

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.title, self.first_name, self.last_name) if part)


class ServiceItem(BaseSchema):
    id: str
    code: str
    name: str
    description: str = ""
    category: str = ""
    price: float = Field(..., ge=0)
    duration: Optional[int] = None
    is_active: bool = True


class DiagnosisCode(BaseSchema):
    id: str
    code: str
    description: str
    category: str = ""
    is_active: bool = True


# --- Appointment Schemas ---
class Appointment(BaseSchema):
    id: str
    patient_id: str
    practitioner_id: str
    scheduled_date: date
    scheduled_time: time
    duration: Optional[int] = Field(30, description="Length in minutes")
    appointment_type: str = "consultation"
    status: AppointmentStatus = AppointmentStatus.scheduled
    check_in_time: Optional[UtcDatetime] = None
    triage_time: Optional[UtcDatetime] = None
    treatment_start_time: Optional[UtcDatetime] = None
    treatment_end_time: Optional[UtcDatetime] = None
    notes: Optional[str] = None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class AppointmentCreate(BaseModel):
    patient_id: str
    practitioner_id: str
    scheduled_date: date
    scheduled_time: time
    duration: int = Field(30, gt=0, le=480)
    appointment_type: str = "consultation"
    notes: Optional[str] = None


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class CheckInForm(BaseModel):
    patient_id: str
    chief_complaint: str = ""
    symptoms: List[str] = Field(default_factory=list)
    pain_level: int = Field(0, ge=0, le=10)
    has_insurance_changed: bool = False
    has_contact_info_changed: bool = False
    has_medications_changed: bool = False


# --- Triage Schemas ---
class VitalSigns(BaseSchema):
    id: Optional[str] = None
    patient_id: Optional[str] = None
    temperature: Optional[float] = Field(None, description="Fahrenheit")
    blood_pressure_systolic: Optional[int] = None
    blood_pressure_diastolic: Optional[int] = None
    heart_rate: Optional[int] = None
    respiratory_rate: Optional[int] = None
    oxygen_saturation: Optional[float] = None
    weight: Optional[float] = Field(None, description="Pounds")
    height: Optional[float] = Field(None, description="Inches")
    bmi: Optional[float] = None
    recorded_by: Optional[str] = None
    recorded_at: Optional[UtcDatetime] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def derive_bmi(self):
        if self.bmi is None and self.weight and self.height:
            self.bmi = round(703 * self.weight / (self.height ** 2), 1)
        return self


class TriageAssessmentCreate(BaseModel):
    patient_id: str
    appointment_id: str
    priority: TriagePriority
    chief_complaint: str = Field(..., min_length=1)
    symptoms: List[str] = Field(default_factory=list)
    pain_level: int = Field(0, ge=0, le=10)
    vital_signs: Optional[VitalSigns] = None
    assessment_notes: str = ""
    triage_nurse: Optional[str] = None
    estimated_wait_time: Optional[int] = Field(None, ge=0)


class TriageAssessment(BaseSchema):
    id: str
    patient_id: str
    appointment_id: str
    priority: TriagePriority
    chief_complaint: str
    symptoms: List[str] = Field(default_factory=list)
    pain_level: int = Field(0, ge=0, le=10)
    vital_signs: Optional[VitalSigns] = None
    assessment_notes: str = ""
    triage_nurse: str
    assessed_at: UtcDatetime
    estimated_wait_time: int


# --- Queue Schemas ---
class QueueItem(BaseSchema):
    id: str
    patient_id: str
    appointment_id: str
    priority: TriagePriority
    status: AppointmentStatus
    check_in_time: UtcDatetime
    estimated_wait_time: int
    assigned_practitioner: Optional[str] = None
    # Derived on every read, never persisted
    current_wait_time: int = 0
    position: int = 0
    estimated_appointment_time: Optional[UtcDatetime] = None
    practitioner_name: Optional[str] = None


QUEUE_DERIVED_FIELDS = {"current_wait_time", "position", "estimated_appointment_time", "practitioner_name"}


class QueueAddRequest(BaseModel):
    appointment_id: str
    priority: TriagePriority = TriagePriority.non_urgent


class QueuePriorityUpdate(BaseModel):
    priority: TriagePriority


# --- Billing Schemas ---
class InvoiceLineItem(BaseModel):
    """A billable line as submitted; totals and coverage are computed server-side."""
    service_id: str
    service_name: str = ""
    cpt_code: str = ""
    quantity: int = Field(1, gt=0)
    unit_price: float = Field(..., ge=0)


class InvoiceService(BaseSchema):
    service_id: str
    service_name: str = ""
    cpt_code: str = ""
    quantity: int
    unit_price: float
    total_price: float
    insurance_covered: float = 0.0
    patient_portion: float = 0.0


class Payment(BaseSchema):
    id: str
    invoice_id: str
    amount: float
    method: PaymentMethod
    transaction_id: Optional[str] = None
    processed_at: UtcDatetime
    processed_by: str
    notes: Optional[str] = None


class Invoice(BaseSchema):
    id: str
    patient_id: str
    appointment_id: Optional[str] = None
    invoice_number: str
    issue_date: date
    due_date: date
    services: List[InvoiceService] = Field(default_factory=list)
    subtotal: float
    tax: float = 0.0
    total: float
    insurance_coverage: float = 0.0
    patient_responsibility: float
    status: PaymentStatus = PaymentStatus.pending
    payments: List[Payment] = Field(default_factory=list)
    created_at: UtcDatetime
    updated_at: UtcDatetime

    @property
    def amount_paid(self) -> float:
        return sum(p.amount for p in self.payments)


class InvoiceCreate(BaseModel):
    patient_id: Optional[str] = None
    appointment_id: Optional[str] = None
    services: List[InvoiceLineItem] = Field(default_factory=list)


class InvoiceUpdate(BaseModel):
    services: List[InvoiceLineItem] = Field(default_factory=list)


class PaymentCreate(BaseModel):
    amount: float
    method: PaymentMethod
    notes: Optional[str] = None


class PaymentForm(BaseModel):
    invoice_id: str
    amount: float
    method: PaymentMethod
    card_number: Optional[str] = Field(None, exclude=True)
    expiry_date: Optional[str] = Field(None, exclude=True)
    cvv: Optional[str] = Field(None, exclude=True)
    cardholder_name: Optional[str] = None
    phone_number: Optional[str] = Field(None, description="For M-Pesa payments")
    notes: Optional[str] = None


class InsuranceVerificationRequest(BaseModel):
    patient_id: str
    insurance_id: str


class BenefitCoverage(BaseModel):
    covered: bool
    copay: Optional[float] = None
    coinsurance: Optional[float] = None


class InsuranceVerification(BaseModel):
    is_active: bool
    coverage_percentage: float
    copay: float
    deductible: float
    deductible_met: float
    remaining_balance: Optional[float] = None
    effective_date: date
    expiration_date: Optional[date] = None
    benefits: Dict[str, BenefitCoverage] = Field(default_factory=dict)


# --- Consultation / Treatment Schemas ---
class Prescription(BaseSchema):
    id: Optional[str] = None
    medication_name: str
    dosage: str
    frequency: str
    duration: str = ""
    quantity: int = 0
    refills: int = 0
    instructions: str = ""
    prescribed_by: Optional[str] = None
    prescribed_at: Optional[UtcDatetime] = None


class ConsultationNotes(BaseModel):
    patient_id: str
    appointment_id: str
    subjective: str = ""
    objective: str = ""
    assessment: str = ""
    plan: str = ""
    diagnosis: List[str] = Field(default_factory=list)
    follow_up_needed: bool = False
    follow_up_timeframe: Optional[str] = None
    lab_tests: List[str] = Field(default_factory=list)
    imaging: List[str] = Field(default_factory=list)
    medications: List[Prescription] = Field(default_factory=list)


class ConsultationStart(BaseModel):
    appointment: Appointment
    triage: Optional[TriageAssessment] = None
    notes: ConsultationNotes


class TreatmentRecord(BaseSchema):
    id: str
    appointment_id: str
    patient_id: str
    practitioner_id: str
    subjective: str = ""
    objective: str = ""
    assessment: str
    plan: str
    diagnoses: List[str] = Field(default_factory=list)
    prescriptions: List[Prescription] = Field(default_factory=list)
    lab_tests: List[str] = Field(default_factory=list)
    imaging: List[str] = Field(default_factory=list)
    follow_up_required: bool = False
    follow_up_timeframe: Optional[str] = None
    treatment_notes: str = ""
    created_at: UtcDatetime


# --- Diagnostic Schemas ---
class DiagnosticTest(BaseSchema):
    id: str
    patient_id: str
    appointment_id: str
    name: str
    type: DiagnosticTestType
    status: DiagnosticTestStatus = DiagnosticTestStatus.ordered
    ordered_by: str
    ordered_date: date
    clinical_info: Optional[str] = None
    performed_by: Optional[str] = None
    performed_date: Optional[date] = None
    result: Optional[str] = None
    notes: Optional[str] = None
    attachment_url: Optional[str] = None


class DiagnosticTestCreate(BaseModel):
    patient_id: str
    appointment_id: str
    name: str = Field(..., min_length=1)
    type: DiagnosticTestType
    clinical_info: Optional[str] = None


class DiagnosticResultForm(BaseModel):
    result: str = ""
    notes: Optional[str] = None
    attachment_url: Optional[str] = None
    performed_by: Optional[str] = None
    performed_date: Optional[date] = None


# --- Audit Schemas ---
class AuditLogEntry(BaseSchema):
    id: str
    user_id: str
    action: str
    resource: str
    resource_id: str
    details: Dict[str, Any] = Field(default_factory=dict)
    timestamp: UtcDatetime
    ip_address: str = "127.0.0.1"
    user_agent: Optional[str] = None


# --- Dashboard Schemas ---
class DashboardMetrics(BaseModel):
    total_patients: int
    patients_in_queue: int
    average_wait_time: int
    daily_revenue: float
    pending_payments: float
    completed_appointments: int
    critical_patients: int
    available_practitioners: int


class HealthStatus(BaseModel):
    status: str
    app_name: str
    version: str
    environment: str
    collections: Dict[str, int] = Field(default_factory=dict)
