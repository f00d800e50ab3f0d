# clinicdesk/seed.py - Demo data for a fresh clinic database
import logging
from datetime import datetime, time, timedelta
from typing import Callable, Dict, List, Type

from pydantic import BaseModel

from . import schemas
from .audit import utc_now
from .models import Collection
from .store import CollectionStore

logger = logging.getLogger(__name__)

EPOCH = "2024-01-01T00:00:00Z"


def _users(now: datetime) -> List[dict]:
    staff = [
        ("user-1", "admin@clinic.com", "Sarah", "Johnson", "admin", None, ["all"]),
        ("user-2", "nurse@clinic.com", "Maria", "Rodriguez", "triage_nurse", None, ["triage", "patient_view", "vitals"]),
        ("user-3", "dr.smith@clinic.com", "Michael", "Smith", "practitioner", "Internal Medicine", ["treatment", "prescribe", "billing_codes", "patient_full"]),
        ("user-4", "billing@clinic.com", "Jennifer", "Chen", "billing_staff", None, ["billing", "payments", "insurance", "reports"]),
        ("user-5", "reception@clinic.com", "Lisa", "Williams", "receptionist", None, ["checkin", "scheduling", "basic_payments"]),
        ("user-6", "john.doe@email.com", "John", "Doe", "patient", None, ["patient_portal"]),
        ("user-7", "labtech@clinic.com", "David", "Kim", "lab_technician", None, ["lab_tests", "patient_view"]),
        ("user-8", "radiologist@clinic.com", "Emily", "Anderson", "practitioner", "Radiology", ["imaging", "patient_view", "diagnostic_reports"]),
        ("user-9", "dr.davis@clinic.com", "Sarah", "Davis", "practitioner", "Emergency Medicine", ["treatment", "prescribe", "patient_full"]),
    ]
    return [
        {
            "id": user_id,
            "email": email,
            "first_name": first,
            "last_name": last,
            "role": role,
            "phone": f"(555) 100-{1001 + index}",
            "specialization": specialization,
            "is_active": True,
            "created_at": EPOCH,
            "last_login": None,
            "permissions": permissions,
        }
        for index, (user_id, email, first, last, role, specialization, permissions) in enumerate(staff)
    ]


def _patients(now: datetime) -> List[dict]:
    return [
        {
            "id": "patient-1",
            "first_name": "John",
            "last_name": "Doe",
            "date_of_birth": "1985-03-15",
            "gender": "Male",
            "phone": "(555) 678-9012",
            "email": "john.doe@email.com",
            "address": {"street": "123 Main St", "city": "Springfield", "state": "IL", "zip_code": "62701"},
            "emergency_contact": {"name": "Jane Doe", "relationship": "Spouse", "phone": "(555) 678-9013"},
            "medical_history": {
                "allergies": ["Penicillin", "Shellfish"],
                "medications": [{
                    "id": "med-1", "name": "Lisinopril", "dosage": "10mg", "frequency": "Once daily",
                    "prescribed_by": "Dr. Smith", "start_date": "2023-01-15", "is_active": True,
                }],
                "conditions": ["Hypertension", "Type 2 Diabetes"],
                "surgeries": [{
                    "id": "surg-1", "procedure": "Appendectomy", "surgery_date": "2010-05-20",
                    "surgeon": "Dr. Johnson", "hospital": "Springfield General",
                    "notes": "Routine procedure, no complications",
                }],
                "family_history": ["Heart Disease (Father)", "Diabetes (Mother)"],
                "social_history": {"smoking": False, "alcohol": True, "drugs": False, "notes": "Occasional social drinking"},
            },
            "insurance": [{
                "id": "ins-1", "provider": "Blue Cross Blue Shield", "policy_number": "BCBS123456789",
                "group_number": "GRP001", "subscriber_id": "SUB123456", "subscriber_name": "John Doe",
                "relationship": "Self", "is_primary": True, "status": "active", "effective_date": "2024-01-01",
                "copay": 25, "deductible": 1500, "coinsurance": 20, "balance": 50000.00,
            }],
            "created_at": EPOCH,
            "updated_at": now,
        },
        {
            "id": "patient-2",
            "first_name": "Emily",
            "last_name": "Johnson",
            "date_of_birth": "1992-07-22",
            "gender": "Female",
            "phone": "(555) 789-0123",
            "email": "emily.johnson@email.com",
            "address": {"street": "456 Oak Ave", "city": "Springfield", "state": "IL", "zip_code": "62702"},
            "emergency_contact": {"name": "Robert Johnson", "relationship": "Father", "phone": "(555) 789-0124"},
            "medical_history": {
                "allergies": ["Latex"],
                "conditions": ["Asthma"],
                "family_history": ["Asthma (Mother)"],
            },
            "insurance": [{
                "id": "ins-2", "provider": "Aetna", "policy_number": "AET987654321",
                "subscriber_id": "SUB987654", "subscriber_name": "Emily Johnson",
                "relationship": "Self", "is_primary": True, "status": "active", "effective_date": "2024-01-01",
                "copay": 30, "deductible": 2000, "coinsurance": 25, "balance": 25000.00,
            }],
            "created_at": "2024-02-15T00:00:00Z",
            "updated_at": now,
        },
        {
            "id": "patient-3",
            "first_name": "Robert",
            "last_name": "Wilson",
            "date_of_birth": "1978-11-08",
            "gender": "Male",
            "phone": "(555) 890-1234",
            "email": "robert.wilson@email.com",
            "address": {"street": "789 Pine St", "city": "Springfield", "state": "IL", "zip_code": "62703"},
            "emergency_contact": {"name": "Susan Wilson", "relationship": "Spouse", "phone": "(555) 890-1235"},
            "medical_history": {
                "medications": [{
                    "id": "med-2", "name": "Metformin", "dosage": "500mg", "frequency": "Twice daily",
                    "prescribed_by": "Dr. Smith", "start_date": "2023-06-01", "is_active": True,
                }],
                "conditions": ["Type 2 Diabetes", "High Cholesterol"],
                "family_history": ["Diabetes (Father)", "Heart Disease (Mother)"],
                "social_history": {"smoking": True, "alcohol": True, "drugs": False, "notes": "Trying to quit smoking"},
            },
            "insurance": [{
                "id": "ins-3", "provider": "Cigna", "policy_number": "CIG456789123",
                "subscriber_id": "SUB456789", "subscriber_name": "Robert Wilson",
                "relationship": "Self", "is_primary": True, "status": "active", "effective_date": "2024-01-01",
                "copay": 20, "deductible": 1000, "coinsurance": 15, "balance": 0.00,
            }],
            "created_at": "2024-03-01T00:00:00Z",
            "updated_at": now,
        },
    ]


def _practitioners(now: datetime) -> List[dict]:
    return [
        {
            "id": "prac-1", "title": "Dr.", "first_name": "Michael", "last_name": "Smith",
            "specialties": ["Internal Medicine", "Family Practice"], "license_number": "IL123456",
            "email": "dr.smith@clinic.com", "phone": "(555) 345-6789",
            "is_available": True, "max_concurrent_patients": 4,
        },
        {
            "id": "prac-2", "title": "Dr.", "first_name": "Sarah", "last_name": "Davis",
            "specialties": ["Emergency Medicine", "Urgent Care"], "license_number": "IL789012",
            "email": "dr.davis@clinic.com", "phone": "(555) 456-7890",
            "is_available": True, "max_concurrent_patients": 3,
        },
    ]


def _service_items(now: datetime) -> List[dict]:
    # Prices in KES
    return [
        {"id": "service-1", "code": "99213", "name": "Office Visit - Established Patient",
         "description": "Established patient office visit, moderate complexity", "category": "Office Visits",
         "price": 19500.00, "duration": 30},
        {"id": "service-2", "code": "99214", "name": "Office Visit - Detailed",
         "description": "Established patient office visit, detailed examination", "category": "Office Visits",
         "price": 26000.00, "duration": 45},
        {"id": "service-3", "code": "80053", "name": "Comprehensive Metabolic Panel",
         "description": "Blood chemistry panel with 14 tests", "category": "Laboratory", "price": 9750.00},
        {"id": "service-4", "code": "93000", "name": "Electrocardiogram",
         "description": "12-lead ECG with interpretation", "category": "Diagnostic", "price": 16250.00, "duration": 15},
        {"id": "service-5", "code": "90471", "name": "Immunization Administration",
         "description": "Administration of vaccine/toxoid", "category": "Immunizations", "price": 3250.00, "duration": 10},
    ]


def _diagnosis_codes(now: datetime) -> List[dict]:
    return [
        {"id": "diag-1", "code": "I10", "description": "Essential hypertension", "category": "Cardiovascular"},
        {"id": "diag-2", "code": "E11.9", "description": "Type 2 diabetes mellitus without complications", "category": "Endocrine"},
        {"id": "diag-3", "code": "J45.9", "description": "Asthma, unspecified", "category": "Respiratory"},
        {"id": "diag-4", "code": "Z00.00", "description": "Encounter for general adult medical examination without abnormal findings", "category": "Preventive"},
    ]


def _appointments(now: datetime) -> List[dict]:
    today = now.date()
    return [
        {
            "id": "appt-1", "patient_id": "patient-1", "practitioner_id": "prac-1",
            "scheduled_date": today, "scheduled_time": time(9, 0), "duration": 30,
            "appointment_type": "Follow-up", "status": "in_treatment",
            "check_in_time": now - timedelta(minutes=60), "triage_time": now - timedelta(minutes=55),
            "treatment_start_time": now - timedelta(minutes=30),
            "notes": "Diabetes follow-up", "created_at": now - timedelta(days=3), "updated_at": now,
        },
        {
            "id": "appt-2", "patient_id": "patient-2", "practitioner_id": "prac-2",
            "scheduled_date": today, "scheduled_time": time(10, 30), "duration": 45,
            "appointment_type": "Urgent Care", "status": "waiting",
            "check_in_time": now - timedelta(minutes=25), "triage_time": now - timedelta(minutes=20),
            "created_at": now - timedelta(hours=2), "updated_at": now,
        },
        {
            "id": "appt-3", "patient_id": "patient-3", "practitioner_id": "prac-1",
            "scheduled_date": today, "scheduled_time": time(11, 0), "duration": 30,
            "appointment_type": "Annual Physical", "status": "checked_in",
            "check_in_time": now - timedelta(minutes=5),
            "created_at": now - timedelta(days=2), "updated_at": now,
        },
    ]


def _vital_signs(now: datetime) -> List[dict]:
    return [
        {
            "id": "vitals-1", "patient_id": "patient-1", "temperature": 98.6,
            "blood_pressure_systolic": 140, "blood_pressure_diastolic": 90, "heart_rate": 78,
            "respiratory_rate": 16, "oxygen_saturation": 98, "weight": 180, "height": 70,
            "recorded_by": "user-2", "recorded_at": now - timedelta(minutes=55), "notes": "BP slightly elevated",
        },
        {
            "id": "vitals-2", "patient_id": "patient-2", "temperature": 99.2,
            "blood_pressure_systolic": 110, "blood_pressure_diastolic": 70, "heart_rate": 95,
            "respiratory_rate": 20, "oxygen_saturation": 96, "weight": 135, "height": 65,
            "recorded_by": "user-2", "recorded_at": now - timedelta(minutes=20), "notes": "Slightly elevated temp and HR",
        },
    ]


def _triage_assessments(now: datetime) -> List[dict]:
    vitals = _vital_signs(now)
    return [
        {
            "id": "triage-1", "patient_id": "patient-1", "appointment_id": "appt-1", "priority": "semi_urgent",
            "chief_complaint": "Follow-up for diabetes management",
            "symptoms": ["Increased thirst", "Frequent urination"], "pain_level": 2,
            "vital_signs": vitals[0], "assessment_notes": "Stable diabetic patient for routine follow-up",
            "triage_nurse": "user-2", "assessed_at": now - timedelta(minutes=55), "estimated_wait_time": 30,
        },
        {
            "id": "triage-2", "patient_id": "patient-2", "appointment_id": "appt-2", "priority": "urgent",
            "chief_complaint": "Difficulty breathing",
            "symptoms": ["Shortness of breath", "Wheezing", "Chest tightness"], "pain_level": 6,
            "vital_signs": vitals[1], "assessment_notes": "Possible asthma exacerbation, needs prompt attention",
            "triage_nurse": "user-2", "assessed_at": now - timedelta(minutes=20), "estimated_wait_time": 15,
        },
    ]


def _queue(now: datetime) -> List[dict]:
    return [
        {
            "id": "queue-1", "patient_id": "patient-2", "appointment_id": "appt-2", "priority": "urgent",
            "status": "waiting", "check_in_time": now - timedelta(minutes=25),
            "estimated_wait_time": 15, "assigned_practitioner": "prac-2",
        },
        {
            "id": "queue-2", "patient_id": "patient-3", "appointment_id": "appt-3", "priority": "non_urgent",
            "status": "checked_in", "check_in_time": now - timedelta(minutes=5),
            "estimated_wait_time": 45, "assigned_practitioner": "prac-1",
        },
    ]


def _invoices(now: datetime) -> List[dict]:
    issued = now - timedelta(days=1)
    return [{
        "id": "inv-1", "patient_id": "patient-1", "appointment_id": "appt-1",
        "invoice_number": f"INV-{issued.year}-001",
        "issue_date": issued.date(), "due_date": (issued + timedelta(days=30)).date(),
        "services": [
            {"service_id": "service-1", "service_name": "Office Visit - Established Patient", "cpt_code": "99213",
             "quantity": 1, "unit_price": 19500.00, "total_price": 19500.00,
             "insurance_covered": 15600.00, "patient_portion": 3900.00},
            {"service_id": "service-3", "service_name": "Comprehensive Metabolic Panel", "cpt_code": "80053",
             "quantity": 1, "unit_price": 9750.00, "total_price": 9750.00,
             "insurance_covered": 7800.00, "patient_portion": 1950.00},
        ],
        "subtotal": 29250.00, "tax": 0.00, "total": 29250.00,
        "insurance_coverage": 23400.00, "patient_responsibility": 5850.00,
        "status": "paid",
        "payments": [{
            "id": "pay-1", "invoice_id": "inv-1", "amount": 5850.00, "method": "m_pesa",
            "transaction_id": "TXN123456789", "processed_at": issued + timedelta(minutes=30),
            "processed_by": "user-4", "notes": "Patient copay and deductible - M-Pesa payment",
        }],
        "created_at": issued, "updated_at": issued + timedelta(minutes=30),
    }]


SEEDERS: Dict[Collection, tuple] = {
    Collection.users: (_users, schemas.User),
    Collection.patients: (_patients, schemas.Patient),
    Collection.practitioners: (_practitioners, schemas.Practitioner),
    Collection.service_items: (_service_items, schemas.ServiceItem),
    Collection.diagnosis_codes: (_diagnosis_codes, schemas.DiagnosisCode),
    Collection.appointments: (_appointments, schemas.Appointment),
    Collection.vital_signs: (_vital_signs, schemas.VitalSigns),
    Collection.triage_assessments: (_triage_assessments, schemas.TriageAssessment),
    Collection.queue: (_queue, schemas.QueueItem),
    Collection.invoices: (_invoices, schemas.Invoice),
}


def _validated(records: List[dict], model: Type[BaseModel], exclude=None) -> List[dict]:
    return [model.model_validate(r).model_dump(mode="json", exclude=exclude) for r in records]


def initialize_mock_data(store: CollectionStore, clock: Callable[[], datetime] = utc_now) -> List[str]:
    """Write demo data into every collection that is still empty.

    Collections that already hold data are left untouched. Returns the names
    of the collections that were seeded.
    """
    now = clock()
    seeded = []
    for collection, (build, model) in SEEDERS.items():
        if not store.is_empty(collection):
            continue
        exclude = schemas.QUEUE_DERIVED_FIELDS if model is schemas.QueueItem else None
        store.save(collection, _validated(build(now), model, exclude))
        seeded.append(collection.value)

    if seeded:
        logger.info(f"Seeded collections: {', '.join(seeded)}")
    return seeded


def main():
    from .core.logging import setup_logging
    from .database import SessionLocal, create_tables
    from .store import SQLAlchemyStore

    setup_logging()
    create_tables()
    seeded = initialize_mock_data(SQLAlchemyStore(SessionLocal))
    print(f"Seeded {len(seeded)} collection(s): {', '.join(seeded) or 'nothing to do'}")


if __name__ == "__main__":
    main()
