# clinicdesk/services/dashboard_service.py
from .. import schemas
from ..models import AppointmentStatus, Collection, PaymentStatus, TriagePriority
from .base import BaseService
from .queue_service import QueueService


class DashboardService(BaseService):

    async def get_metrics(self) -> schemas.ServiceResult[schemas.DashboardMetrics]:
        await self._simulate_latency()

        today = self.clock().date()
        queue = QueueService(self.store, audit=self.audit, clock=self.clock).snapshot()
        appointments = self._load(Collection.appointments, schemas.Appointment)
        invoices = self._load(Collection.invoices, schemas.Invoice)
        practitioners = self._load(Collection.practitioners, schemas.Practitioner)

        completed_today = [
            a for a in appointments
            if a.scheduled_date == today and a.status == AppointmentStatus.completed
        ]
        daily_revenue = sum(i.total for i in invoices if i.issue_date == today)
        pending_payments = sum(
            i.patient_responsibility - i.amount_paid
            for i in invoices
            if i.status in (PaymentStatus.pending, PaymentStatus.partial)
        )
        average_wait = sum(q.current_wait_time for q in queue) / len(queue) if queue else 0

        return schemas.ServiceResult.ok(schemas.DashboardMetrics(
            total_patients=len(self.store.load(Collection.patients)),
            patients_in_queue=len(queue),
            average_wait_time=round(average_wait),
            daily_revenue=daily_revenue,
            pending_payments=pending_payments,
            completed_appointments=len(completed_today),
            critical_patients=len([q for q in queue if q.priority == TriagePriority.critical]),
            available_practitioners=len([p for p in practitioners if p.is_available]),
        ))
