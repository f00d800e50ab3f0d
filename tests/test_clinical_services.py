# tests/test_clinical_services.py
from datetime import date, time

import pytest

from clinicdesk import schemas
from clinicdesk.models import (
    AppointmentStatus, Collection, DiagnosticTestStatus, DiagnosticTestType, TriagePriority,
)
from clinicdesk.services.appointment_service import AppointmentService
from clinicdesk.services.auth_service import AuthService, issue_token, user_id_from_token
from clinicdesk.services.consultation_service import ConsultationService
from clinicdesk.services.dashboard_service import DashboardService
from clinicdesk.services.diagnostic_service import DiagnosticService
from clinicdesk.services.patient_service import PatientService
from clinicdesk.services.queue_service import QueueService
from clinicdesk.services.triage_service import TriageService

from conftest import FIXED_NOW


def queue_ids(store):
    return [r["appointment_id"] for r in store.load(Collection.queue)]


def audit_actions(store):
    return [e["action"] for e in store.load(Collection.audit_log)]


# --- Auth ---

@pytest.mark.asyncio
async def test_login_issues_mock_token(make_service, store):
    auth = make_service(AuthService)
    result = await auth.login("nurse@clinic.com", "password123")
    assert result.success
    assert result.data.token == f"mock-jwt-token-user-2-{int(FIXED_NOW.timestamp() * 1000)}"
    assert result.data.user.last_login == FIXED_NOW
    assert "LOGIN" in audit_actions(store)


@pytest.mark.asyncio
async def test_login_rejects_bad_credentials(make_service):
    auth = make_service(AuthService)
    assert (await auth.login("nurse@clinic.com", "nope")).error_kind == schemas.ErrorKind.unauthorized
    assert (await auth.login("nobody@clinic.com", "password123")).error_kind == schemas.ErrorKind.unauthorized


@pytest.mark.asyncio
async def test_token_round_trip(make_service):
    auth = make_service(AuthService)
    token = issue_token("user-4", 1700000000000)
    assert user_id_from_token(token) == "user-4"
    assert await auth.validate_token(token)
    assert not await auth.validate_token("Bearer something-else")
    assert auth.get_user_for_token(token).email == "billing@clinic.com"
    assert auth.get_user_for_token(issue_token("user-99", 1)) is None


# --- Patients ---

@pytest.mark.asyncio
async def test_patient_search_and_pagination(make_service):
    patients = make_service(PatientService)

    page = (await patients.get_patients(page=1, page_size=2)).data
    assert (page.total, page.total_pages, len(page.data)) == (3, 2, 2)

    by_name = (await patients.get_patients(search="WILSON")).data
    assert [p.id for p in by_name.data] == ["patient-3"]

    by_phone = (await patients.get_patients(search="789-0123")).data
    assert [p.id for p in by_phone.data] == ["patient-2"]


@pytest.mark.asyncio
async def test_view_patient_is_audited(make_service, store):
    patients = make_service(PatientService)
    assert (await patients.get_patient_by_id("patient-1")).data.full_name == "John Doe"
    assert "VIEW" in audit_actions(store)
    assert (await patients.get_patient_by_id("patient-404")).error_kind == schemas.ErrorKind.not_found


@pytest.mark.asyncio
async def test_register_patient_with_insurance(make_service):
    patients = make_service(PatientService)
    form = schemas.PatientRegistrationForm(
        first_name="Amina",
        last_name="Otieno",
        date_of_birth=date(1990, 5, 1),
        gender="Female",
        phone="(555) 222-3333",
        insurance=schemas.InsuranceEnrollment(
            provider="NHIF", policy_number="NHIF-1", subscriber_id="SUB-1", balance=12000,
        ),
    )
    patient = (await patients.create_patient(form)).data
    insurance = patient.insurance[0]
    assert insurance.is_primary and insurance.status == "active"
    assert insurance.subscriber_name == "Amina Otieno"
    assert insurance.balance == 12000


@pytest.mark.asyncio
async def test_update_patient_merges_fields(make_service):
    patients = make_service(PatientService)
    updated = (await patients.update_patient("patient-2", schemas.PatientUpdate(phone="(555) 000-0000"))).data
    assert updated.phone == "(555) 000-0000"
    assert updated.first_name == "Emily"
    assert updated.updated_at == FIXED_NOW


# --- Appointments ---

@pytest.mark.asyncio
async def test_create_appointment_validates_references(make_service):
    appointments = make_service(AppointmentService)
    form = schemas.AppointmentCreate(
        patient_id="patient-1", practitioner_id="prac-2",
        scheduled_date=date(2025, 3, 15), scheduled_time=time(14, 0),
    )
    created = (await appointments.create_appointment(form)).data
    assert created.status == AppointmentStatus.scheduled

    bad = form.model_copy(update={"practitioner_id": "prac-404"})
    assert (await appointments.create_appointment(bad)).error_kind == schemas.ErrorKind.not_found


@pytest.mark.asyncio
async def test_filter_appointments(make_service):
    appointments = make_service(AppointmentService)
    todays = (await appointments.get_appointments(on_date=FIXED_NOW.date())).data
    assert len(todays) == 3
    for_prac_1 = (await appointments.get_appointments(practitioner_id="prac-1")).data
    assert {a.id for a in for_prac_1} == {"appt-1", "appt-3"}
    waiting = (await appointments.get_appointments(status=AppointmentStatus.waiting)).data
    assert [a.id for a in waiting] == ["appt-2"]


@pytest.mark.asyncio
async def test_check_in_queues_patient_as_non_urgent(make_service, store):
    appointments = make_service(AppointmentService)
    result = await appointments.check_in_patient("appt-1", schemas.CheckInForm(patient_id="patient-1"))
    assert result.success
    assert result.data.status == AppointmentStatus.checked_in
    assert result.data.check_in_time == FIXED_NOW

    queued = next(r for r in store.load(Collection.queue) if r["appointment_id"] == "appt-1")
    assert queued["priority"] == "non_urgent"
    assert "CHECK_IN" in audit_actions(store)


@pytest.mark.asyncio
async def test_repeat_check_in_keeps_a_single_queue_item(make_service, store):
    appointments = make_service(AppointmentService)
    # appt-2 is already queued as urgent
    assert (await appointments.check_in_patient("appt-2", schemas.CheckInForm(patient_id="patient-2"))).success
    assert (await appointments.check_in_patient("appt-2", schemas.CheckInForm(patient_id="patient-2"))).success

    queued = [r for r in store.load(Collection.queue) if r["appointment_id"] == "appt-2"]
    assert len(queued) == 1
    assert queued[0]["priority"] == "urgent"
    assert queued[0]["status"] == "checked_in"


@pytest.mark.asyncio
async def test_status_change_stamps_times_and_syncs_queue(make_service, store):
    appointments = make_service(AppointmentService)

    triaged = (await appointments.update_appointment_status("appt-3", AppointmentStatus.in_triage)).data
    assert triaged.triage_time == FIXED_NOW
    queued = next(r for r in store.load(Collection.queue) if r["appointment_id"] == "appt-3")
    assert queued["status"] == "in_triage"

    treated = (await appointments.update_appointment_status("appt-3", AppointmentStatus.in_treatment)).data
    assert treated.treatment_start_time == FIXED_NOW

    for status in (AppointmentStatus.no_show, AppointmentStatus.cancelled):
        await appointments.update_appointment_status("appt-2", status)
        assert "appt-2" not in queue_ids(store)


@pytest.mark.asyncio
async def test_status_change_for_unknown_appointment(make_service):
    appointments = make_service(AppointmentService)
    result = await appointments.update_appointment_status("appt-404", AppointmentStatus.completed)
    assert result.error_kind == schemas.ErrorKind.not_found


# --- Triage ---

@pytest.mark.asyncio
async def test_assessment_updates_queue_and_records_vitals(make_service, store):
    triage = make_service(TriageService)
    form = schemas.TriageAssessmentCreate(
        patient_id="patient-3",
        appointment_id="appt-3",
        priority=TriagePriority.critical,
        chief_complaint="Chest pain",
        symptoms=["Chest pain", "Sweating"],
        pain_level=8,
        vital_signs=schemas.VitalSigns(weight=200, height=70, heart_rate=110),
    )
    assessment = (await triage.create_assessment(form)).data
    assert assessment.estimated_wait_time == 5
    assert assessment.triage_nurse == "user-1"
    assert assessment.vital_signs.bmi == 28.7

    listed = (await QueueService(store, clock=lambda: FIXED_NOW).list()).data
    assert listed[0].appointment_id == "appt-3"
    assert listed[0].priority == TriagePriority.critical
    assert listed[0].status == AppointmentStatus.waiting

    appointment = next(a for a in store.load(Collection.appointments) if a["id"] == "appt-3")
    assert appointment["status"] == "waiting"

    vitals = (await triage.get_vitals_for_patient("patient-3")).data
    assert vitals[0].heart_rate == 110


@pytest.mark.asyncio
async def test_assessment_lookup(make_service):
    triage = make_service(TriageService)
    assert (await triage.get_assessment_by_appointment("appt-2")).data.priority == TriagePriority.urgent
    assert (await triage.get_assessment_by_appointment("appt-3")).error_kind == schemas.ErrorKind.not_found


@pytest.mark.asyncio
async def test_assessment_for_unknown_appointment(make_service):
    triage = make_service(TriageService)
    form = schemas.TriageAssessmentCreate(
        patient_id="patient-3", appointment_id="appt-404",
        priority=TriagePriority.urgent, chief_complaint="Cough",
    )
    assert (await triage.create_assessment(form)).error_kind == schemas.ErrorKind.not_found


# --- Consultation ---

@pytest.mark.asyncio
async def test_start_consultation_prefills_from_triage(make_service, store):
    consultations = make_service(ConsultationService)
    started = (await consultations.start_consultation("appt-2")).data

    assert started.appointment.status == AppointmentStatus.in_treatment
    assert started.notes.subjective.startswith("Chief Complaint: Difficulty breathing")
    assert "Pain Level: 6/10" in started.notes.subjective


@pytest.mark.asyncio
async def test_complete_requires_assessment_and_plan(make_service):
    consultations = make_service(ConsultationService)
    notes = schemas.ConsultationNotes(patient_id="patient-2", appointment_id="appt-2", assessment="Asthma")
    result = await consultations.complete_consultation(notes)
    assert result.error_kind == schemas.ErrorKind.validation_failed


@pytest.mark.asyncio
async def test_complete_consultation_records_and_orders_tests(make_service, store):
    consultations = make_service(ConsultationService)
    notes = schemas.ConsultationNotes(
        patient_id="patient-2",
        appointment_id="appt-2",
        assessment="Acute asthma exacerbation",
        plan="Nebulised salbutamol, review in one week",
        diagnosis=["J45.9"],
        follow_up_needed=True,
        follow_up_timeframe="1 week",
        lab_tests=["Full Blood Count"],
        imaging=["Chest X-Ray"],
        medications=[schemas.Prescription(medication_name="Albuterol Inhaler", dosage="90mcg", frequency="As needed")],
    )
    record = (await consultations.complete_consultation(notes)).data
    assert record.practitioner_id == "prac-2"
    assert record.prescriptions[0].prescribed_at == FIXED_NOW

    tests = store.load(Collection.diagnostic_tests)
    assert {(t["name"], t["type"]) for t in tests} == {("Full Blood Count", "lab"), ("Chest X-Ray", "imaging")}

    appointment = next(a for a in store.load(Collection.appointments) if a["id"] == "appt-2")
    assert appointment["status"] == "completed"
    assert "appt-2" not in queue_ids(store)

    history = (await consultations.get_records_for_patient("patient-2")).data
    assert [r.id for r in history] == [record.id]


# --- Diagnostics ---

@pytest.mark.asyncio
async def test_diagnostic_lifecycle(make_service):
    diagnostics = make_service(DiagnosticService)
    form = schemas.DiagnosticTestCreate(patient_id="patient-1", appointment_id="appt-1", name="HbA1c", type=DiagnosticTestType.lab)
    test = (await diagnostics.order_test(form)).data
    assert test.status == DiagnosticTestStatus.ordered

    started = (await diagnostics.start_test(test.id)).data
    assert started.status == DiagnosticTestStatus.in_progress

    no_result = await diagnostics.complete_test(test.id, schemas.DiagnosticResultForm(result="  "))
    assert no_result.error_kind == schemas.ErrorKind.validation_failed

    done = (await diagnostics.complete_test(test.id, schemas.DiagnosticResultForm(result="7.1%"))).data
    assert done.status == DiagnosticTestStatus.completed
    assert done.performed_date == FIXED_NOW.date()

    assert (await diagnostics.cancel_test(test.id)).error_kind == schemas.ErrorKind.validation_failed
    assert (await diagnostics.start_test("test-404")).error_kind == schemas.ErrorKind.not_found

    labs = (await diagnostics.list_tests(test_type=DiagnosticTestType.lab, status=DiagnosticTestStatus.completed)).data
    assert [t.id for t in labs] == [test.id]


# --- Dashboard ---

@pytest.mark.asyncio
async def test_dashboard_metrics(make_service, store):
    dashboard = make_service(DashboardService)
    metrics = (await dashboard.get_metrics()).data

    assert metrics.total_patients == 3
    assert metrics.patients_in_queue == 2
    assert metrics.average_wait_time == 15
    assert metrics.critical_patients == 0
    assert metrics.available_practitioners == 2
    assert metrics.completed_appointments == 0
    # The seeded invoice was issued yesterday and is fully paid
    assert metrics.daily_revenue == 0
    assert metrics.pending_payments == 0
