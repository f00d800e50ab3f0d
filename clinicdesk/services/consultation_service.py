# clinicdesk/services/consultation_service.py
import logging
from typing import List, Optional

from .. import schemas
from ..models import AppointmentStatus, Collection, DiagnosticTestType
from .appointment_service import AppointmentService
from .base import BaseService, new_id
from .diagnostic_service import DiagnosticService

logger = logging.getLogger(__name__)


def subjective_from_triage(triage: Optional[schemas.TriageAssessment]) -> str:
    if triage is None:
        return ""
    return (
        f"Chief Complaint: {triage.chief_complaint}\n"
        f"Symptoms: {', '.join(triage.symptoms)}\n"
        f"Pain Level: {triage.pain_level}/10"
    )


class ConsultationService(BaseService):
    """Specialist consultation: open the visit, write the SOAP note, close it out."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.appointments = AppointmentService(self.store, audit=self.audit, clock=self.clock)
        self.diagnostics = DiagnosticService(self.store, audit=self.audit, clock=self.clock)

    def _latest_triage(self, appointment_id: str) -> Optional[schemas.TriageAssessment]:
        matches = [
            a for a in self._load(Collection.triage_assessments, schemas.TriageAssessment)
            if a.appointment_id == appointment_id
        ]
        return max(matches, key=lambda a: a.assessed_at) if matches else None

    async def start_consultation(self, appointment_id: str) -> schemas.ServiceResult[schemas.ConsultationStart]:
        await self._simulate_latency()

        started = await self.appointments.update_appointment_status(appointment_id, AppointmentStatus.in_treatment)
        if not started.success:
            return schemas.ServiceResult(success=False, error=started.error, error_kind=started.error_kind)

        appointment = started.data
        triage = self._latest_triage(appointment_id)
        notes = schemas.ConsultationNotes(
            patient_id=appointment.patient_id,
            appointment_id=appointment.id,
            subjective=subjective_from_triage(triage),
        )
        return schemas.ServiceResult.ok(schemas.ConsultationStart(appointment=appointment, triage=triage, notes=notes))

    async def complete_consultation(self, notes: schemas.ConsultationNotes) -> schemas.ServiceResult[schemas.TreatmentRecord]:
        """Persist the treatment record, order requested tests and complete the appointment."""
        await self._simulate_latency()

        if not notes.assessment.strip() or not notes.plan.strip():
            return schemas.ServiceResult.invalid("Assessment and plan are required to complete a consultation")

        appointment = self._find(Collection.appointments, schemas.Appointment, notes.appointment_id)
        if appointment is None:
            return schemas.ServiceResult.not_found("Appointment not found")

        now = self.clock()
        prescriber = self.audit.actor_id or appointment.practitioner_id
        prescriptions = [
            p.model_copy(update={
                "id": p.id or new_id("rx"),
                "prescribed_by": p.prescribed_by or prescriber,
                "prescribed_at": p.prescribed_at or now,
            })
            for p in notes.medications
        ]
        record = schemas.TreatmentRecord(
            id=new_id("treatment"),
            appointment_id=appointment.id,
            patient_id=notes.patient_id,
            practitioner_id=appointment.practitioner_id,
            subjective=notes.subjective,
            objective=notes.objective,
            assessment=notes.assessment,
            plan=notes.plan,
            diagnoses=notes.diagnosis,
            prescriptions=prescriptions,
            lab_tests=notes.lab_tests,
            imaging=notes.imaging,
            follow_up_required=notes.follow_up_needed,
            follow_up_timeframe=notes.follow_up_timeframe if notes.follow_up_needed else None,
            treatment_notes=notes.plan,
            created_at=now,
        )
        records = self._load(Collection.treatment_records, schemas.TreatmentRecord)
        records.append(record)
        self._save(Collection.treatment_records, records)

        self.diagnostics.order_many(notes.patient_id, appointment.id, notes.lab_tests, DiagnosticTestType.lab)
        self.diagnostics.order_many(notes.patient_id, appointment.id, notes.imaging, DiagnosticTestType.imaging)

        await self.appointments.update_appointment_status(appointment.id, AppointmentStatus.completed)

        self.audit.log("CREATE", "treatment_record", record.id, {
            "appointment_id": appointment.id,
            "diagnoses": record.diagnoses,
            "tests_ordered": len(notes.lab_tests) + len(notes.imaging),
        })
        logger.info(f"Consultation for appointment {appointment.id} completed")
        return schemas.ServiceResult.ok(record)

    async def get_records_for_patient(self, patient_id: str) -> schemas.ServiceResult[List[schemas.TreatmentRecord]]:
        await self._simulate_latency()
        records = [r for r in self._load(Collection.treatment_records, schemas.TreatmentRecord) if r.patient_id == patient_id]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return schemas.ServiceResult.ok(records)
