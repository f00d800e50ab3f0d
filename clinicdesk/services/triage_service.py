# clinicdesk/services/triage_service.py
import logging
from typing import List

from .. import schemas
from ..models import AppointmentStatus, Collection
from . import queue_engine
from .base import BaseService, new_id
from .queue_service import QueueService

logger = logging.getLogger(__name__)


class TriageService(BaseService):

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.queue = QueueService(self.store, audit=self.audit, clock=self.clock)

    def _record_vitals(self, form: schemas.TriageAssessmentCreate, nurse: str) -> schemas.VitalSigns:
        now = self.clock()
        vitals = form.vital_signs.model_copy(update={
            "id": form.vital_signs.id or new_id("vitals"),
            "patient_id": form.patient_id,
            "recorded_by": form.vital_signs.recorded_by or nurse,
            "recorded_at": form.vital_signs.recorded_at or now,
        })
        stored = self._load(Collection.vital_signs, schemas.VitalSigns)
        stored.append(vitals)
        self._save(Collection.vital_signs, stored)
        return vitals

    async def create_assessment(self, form: schemas.TriageAssessmentCreate) -> schemas.ServiceResult[schemas.TriageAssessment]:
        await self._simulate_latency()

        appointments = self._load(Collection.appointments, schemas.Appointment)
        appointment = next((a for a in appointments if a.id == form.appointment_id), None)
        if appointment is None:
            return schemas.ServiceResult.not_found(f"Appointment {form.appointment_id} not found")

        now = self.clock()
        nurse = form.triage_nurse or self.audit.actor_id or "system"
        vitals = self._record_vitals(form, nurse) if form.vital_signs else None

        assessment = schemas.TriageAssessment(
            id=new_id("triage"),
            patient_id=form.patient_id,
            appointment_id=form.appointment_id,
            priority=form.priority,
            chief_complaint=form.chief_complaint,
            symptoms=form.symptoms,
            pain_level=form.pain_level,
            vital_signs=vitals,
            assessment_notes=form.assessment_notes,
            triage_nurse=nurse,
            assessed_at=now,
            estimated_wait_time=(
                form.estimated_wait_time
                if form.estimated_wait_time is not None
                else queue_engine.estimated_wait_time(form.priority)
            ),
        )
        assessments = self._load(Collection.triage_assessments, schemas.TriageAssessment)
        assessments.append(assessment)
        self._save(Collection.triage_assessments, assessments)

        appointment.status = AppointmentStatus.waiting
        if appointment.triage_time is None:
            appointment.triage_time = now
        appointment.updated_at = now
        self._save(Collection.appointments, appointments)

        reprioritised = await self.queue.update_priority(form.appointment_id, form.priority)
        if reprioritised.success:
            await self.queue.update_status(form.appointment_id, AppointmentStatus.waiting)
        else:
            # Walk-ins assessed before check-in join the queue here
            logger.info(f"Appointment {form.appointment_id} was not queued; adding it as {assessment.priority.value}")
            await self.queue.add(form.appointment_id, form.priority)

        self.audit.log("CREATE", "triage_assessment", assessment.id, {
            "appointment_id": form.appointment_id,
            "priority": assessment.priority.value,
        })
        return schemas.ServiceResult.ok(assessment)

    async def get_assessment_by_appointment(self, appointment_id: str) -> schemas.ServiceResult[schemas.TriageAssessment]:
        await self._simulate_latency()

        matches = [
            a for a in self._load(Collection.triage_assessments, schemas.TriageAssessment)
            if a.appointment_id == appointment_id
        ]
        if not matches:
            return schemas.ServiceResult.not_found("Triage assessment not found")
        return schemas.ServiceResult.ok(max(matches, key=lambda a: a.assessed_at))

    async def get_vitals_for_patient(self, patient_id: str) -> schemas.ServiceResult[List[schemas.VitalSigns]]:
        await self._simulate_latency()

        vitals = [v for v in self._load(Collection.vital_signs, schemas.VitalSigns) if v.patient_id == patient_id]
        vitals.sort(key=lambda v: v.recorded_at or self.clock(), reverse=True)
        return schemas.ServiceResult.ok(vitals)
