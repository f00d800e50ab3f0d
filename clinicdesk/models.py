# clinicdesk/models.py
from sqlalchemy import Column, String, DateTime, JSON, Index
from sqlalchemy.sql import func
from .database import Base
import enum


class UserRole(str, enum.Enum):
    admin = "admin"
    practitioner = "practitioner"
    triage_nurse = "triage_nurse"
    billing_staff = "billing_staff"
    receptionist = "receptionist"
    patient = "patient"
    lab_technician = "lab_technician"


class AppointmentStatus(str, enum.Enum):
    scheduled = "scheduled"
    checked_in = "checked_in"
    in_triage = "in_triage"
    waiting = "waiting"
    in_treatment = "in_treatment"
    completed = "completed"
    cancelled = "cancelled"
    no_show = "no_show"

    @property
    def is_terminal(self) -> bool:
        return self in (AppointmentStatus.completed, AppointmentStatus.cancelled)


class TriagePriority(str, enum.Enum):
    critical = "critical"
    urgent = "urgent"
    semi_urgent = "semi_urgent"
    non_urgent = "non_urgent"


class InsuranceStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"
    pending = "pending"
    expired = "expired"


class PaymentStatus(str, enum.Enum):
    pending = "pending"
    paid = "paid"
    partial = "partial"
    overdue = "overdue"
    cancelled = "cancelled"


class PaymentMethod(str, enum.Enum):
    m_pesa = "m_pesa"
    card = "card"
    cash = "cash"
    insurance = "insurance"


class DiagnosticTestType(str, enum.Enum):
    lab = "lab"
    imaging = "imaging"


class DiagnosticTestStatus(str, enum.Enum):
    ordered = "ordered"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class Collection(str, enum.Enum):
    """Names of the collections held by the persisted store."""
    users = "users"
    patients = "patients"
    practitioners = "practitioners"
    service_items = "service_items"
    diagnosis_codes = "diagnosis_codes"
    appointments = "appointments"
    queue = "queue"
    invoices = "invoices"
    triage_assessments = "triage_assessments"
    vital_signs = "vital_signs"
    treatment_records = "treatment_records"
    diagnostic_tests = "diagnostic_tests"
    audit_log = "audit_log"


class StoredCollection(Base):
    """One row per collection; the whole list is held as a single JSON document."""
    __tablename__ = "collections"
    __table_args__ = (
        Index('idx_collections_updated_at', 'updated_at'),
    )

    name = Column(String(64), primary_key=True)
    payload = Column(JSON, nullable=False, default=list)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
