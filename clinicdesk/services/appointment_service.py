# clinicdesk/services/appointment_service.py
import logging
from datetime import date
from typing import List, Optional

from .. import schemas
from ..models import AppointmentStatus, Collection, TriagePriority
from .base import BaseService, new_id
from .queue_service import QueueService

logger = logging.getLogger(__name__)

# Statuses that take the appointment out of the waiting room
LEAVES_QUEUE = {AppointmentStatus.completed, AppointmentStatus.cancelled, AppointmentStatus.no_show}


class AppointmentService(BaseService):

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.queue = QueueService(self.store, audit=self.audit, clock=self.clock)

    async def get_appointments(
        self,
        on_date: Optional[date] = None,
        practitioner_id: Optional[str] = None,
        status: Optional[AppointmentStatus] = None,
    ) -> schemas.ServiceResult[List[schemas.Appointment]]:
        await self._simulate_latency()

        appointments = self._load(Collection.appointments, schemas.Appointment)
        if on_date:
            appointments = [a for a in appointments if a.scheduled_date == on_date]
        if practitioner_id:
            appointments = [a for a in appointments if a.practitioner_id == practitioner_id]
        if status:
            appointments = [a for a in appointments if a.status == status]
        appointments.sort(key=lambda a: (a.scheduled_date, a.scheduled_time))
        return schemas.ServiceResult.ok(appointments)

    async def get_appointment(self, appointment_id: str) -> schemas.ServiceResult[schemas.Appointment]:
        await self._simulate_latency()
        appointment = self._find(Collection.appointments, schemas.Appointment, appointment_id)
        if appointment is None:
            return schemas.ServiceResult.not_found("Appointment not found")
        return schemas.ServiceResult.ok(appointment)

    async def create_appointment(self, form: schemas.AppointmentCreate) -> schemas.ServiceResult[schemas.Appointment]:
        await self._simulate_latency()

        if self._find(Collection.patients, schemas.Patient, form.patient_id) is None:
            return schemas.ServiceResult.not_found(f"Patient {form.patient_id} not found")
        if self._find(Collection.practitioners, schemas.Practitioner, form.practitioner_id) is None:
            return schemas.ServiceResult.not_found(f"Practitioner {form.practitioner_id} not found")

        now = self.clock()
        appointment = schemas.Appointment(
            id=new_id("appt"),
            **form.model_dump(),
            status=AppointmentStatus.scheduled,
            created_at=now,
            updated_at=now,
        )
        appointments = self._load(Collection.appointments, schemas.Appointment)
        appointments.append(appointment)
        self._save(Collection.appointments, appointments)

        self.audit.log("CREATE", "appointment", appointment.id, {
            "patient_id": form.patient_id,
            "practitioner_id": form.practitioner_id,
            "scheduled_date": form.scheduled_date.isoformat(),
        })
        return schemas.ServiceResult.ok(appointment)

    async def update_appointment_status(self, appointment_id: str, status: AppointmentStatus) -> schemas.ServiceResult[schemas.Appointment]:
        """Move an appointment along the visit workflow and keep the queue in step."""
        await self._simulate_latency()

        appointments = self._load(Collection.appointments, schemas.Appointment)
        appointment = next((a for a in appointments if a.id == appointment_id), None)
        if appointment is None:
            return schemas.ServiceResult.not_found("Appointment not found")

        now = self.clock()
        previous = appointment.status
        appointment.status = status
        if status == AppointmentStatus.in_triage and appointment.triage_time is None:
            appointment.triage_time = now
        elif status == AppointmentStatus.in_treatment and appointment.treatment_start_time is None:
            appointment.treatment_start_time = now
        elif status == AppointmentStatus.completed:
            appointment.treatment_end_time = now
        appointment.updated_at = now
        self._save(Collection.appointments, appointments)

        # A missing queue item is fine here; not every appointment was queued
        if status in LEAVES_QUEUE:
            await self.queue.remove(appointment_id)
        else:
            await self.queue.update_status(appointment_id, status)

        self.audit.log("UPDATE_STATUS", "appointment", appointment_id, {
            "from": previous.value,
            "to": AppointmentStatus(status).value,
        })
        return schemas.ServiceResult.ok(appointment)

    async def check_in_patient(self, appointment_id: str, form: schemas.CheckInForm) -> schemas.ServiceResult[schemas.Appointment]:
        """Mark the patient as arrived and put them in the queue as non-urgent.

        The appointment write and the queue write are separate; if the second
        fails the appointment stays checked in without a queue item.
        """
        await self._simulate_latency()

        appointments = self._load(Collection.appointments, schemas.Appointment)
        appointment = next((a for a in appointments if a.id == appointment_id), None)
        if appointment is None:
            return schemas.ServiceResult.not_found("Appointment not found")

        now = self.clock()
        appointment.status = AppointmentStatus.checked_in
        appointment.check_in_time = now
        appointment.updated_at = now
        self._save(Collection.appointments, appointments)

        # A repeat check-in keeps the existing queue item and its priority
        queued = await self.queue.update_status(appointment_id, AppointmentStatus.checked_in)
        if not queued.success:
            queued = await self.queue.add(appointment_id, TriagePriority.non_urgent)
        if not queued.success:
            logger.error(f"Checked in {appointment_id} but could not queue it: {queued.error}")

        self.audit.log("CHECK_IN", "appointment", appointment_id, form.model_dump(mode="json"))
        return schemas.ServiceResult.ok(appointment)
