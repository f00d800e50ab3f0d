# clinicdesk/presentation.py
"""Display labels and formatting for the UI layer.

Domain values stay enums; anything human-readable is looked up here.
"""
from typing import Dict

from .models import (
    UserRole, AppointmentStatus, TriagePriority, InsuranceStatus, PaymentStatus,
    PaymentMethod, DiagnosticTestType, DiagnosticTestStatus,
)

ROLE_LABELS = {
    UserRole.admin: "Administrator",
    UserRole.practitioner: "Practitioner",
    UserRole.triage_nurse: "Triage Nurse",
    UserRole.billing_staff: "Billing Staff",
    UserRole.receptionist: "Receptionist",
    UserRole.patient: "Patient",
    UserRole.lab_technician: "Lab Technician",
}

APPOINTMENT_STATUS_LABELS = {
    AppointmentStatus.scheduled: "Scheduled",
    AppointmentStatus.checked_in: "Checked In",
    AppointmentStatus.in_triage: "In Triage",
    AppointmentStatus.waiting: "Waiting",
    AppointmentStatus.in_treatment: "In Treatment",
    AppointmentStatus.completed: "Completed",
    AppointmentStatus.cancelled: "Cancelled",
    AppointmentStatus.no_show: "No Show",
}

PRIORITY_LABELS = {
    TriagePriority.critical: "Critical",
    TriagePriority.urgent: "Urgent",
    TriagePriority.semi_urgent: "Semi-Urgent",
    TriagePriority.non_urgent: "Non-Urgent",
}

INSURANCE_STATUS_LABELS = {
    InsuranceStatus.active: "Active",
    InsuranceStatus.inactive: "Inactive",
    InsuranceStatus.pending: "Pending",
    InsuranceStatus.expired: "Expired",
}

PAYMENT_STATUS_LABELS = {
    PaymentStatus.pending: "Pending",
    PaymentStatus.paid: "Paid",
    PaymentStatus.partial: "Partially Paid",
    PaymentStatus.overdue: "Overdue",
    PaymentStatus.cancelled: "Cancelled",
}

PAYMENT_METHOD_LABELS = {
    PaymentMethod.m_pesa: "M-Pesa",
    PaymentMethod.card: "Card",
    PaymentMethod.cash: "Cash",
    PaymentMethod.insurance: "Insurance",
}

TEST_TYPE_LABELS = {
    DiagnosticTestType.lab: "Laboratory",
    DiagnosticTestType.imaging: "Imaging",
}

TEST_STATUS_LABELS = {
    DiagnosticTestStatus.ordered: "Ordered",
    DiagnosticTestStatus.in_progress: "In Progress",
    DiagnosticTestStatus.completed: "Completed",
    DiagnosticTestStatus.cancelled: "Cancelled",
}

LABEL_TABLES = {
    "user_role": ROLE_LABELS,
    "appointment_status": APPOINTMENT_STATUS_LABELS,
    "triage_priority": PRIORITY_LABELS,
    "insurance_status": INSURANCE_STATUS_LABELS,
    "payment_status": PAYMENT_STATUS_LABELS,
    "payment_method": PAYMENT_METHOD_LABELS,
    "diagnostic_test_type": TEST_TYPE_LABELS,
    "diagnostic_test_status": TEST_STATUS_LABELS,
}


def all_labels() -> Dict[str, Dict[str, str]]:
    return {name: {k.value: v for k, v in table.items()} for name, table in LABEL_TABLES.items()}


def format_currency(amount: float) -> str:
    """Kenyan Shillings with two decimals, e.g. `KSh 15,000.00`."""
    return f"KSh {amount:,.2f}"
