# clinicdesk/services/queue_service.py
import logging
from typing import Dict, List, Optional

from .. import schemas
from ..models import AppointmentStatus, Collection, TriagePriority
from . import queue_engine
from .base import BaseService, new_id

logger = logging.getLogger(__name__)


class QueueService(BaseService):
    """Triage queue: priority ordering plus live wait-time projection."""

    def _stored_items(self) -> List[schemas.QueueItem]:
        return self._load(Collection.queue, schemas.QueueItem)

    def _write(self, items: List[schemas.QueueItem]) -> None:
        ordered = queue_engine.sort_queue(items)
        self.store.save(Collection.queue, [queue_engine.to_record(item) for item in ordered])

    def _appointments(self) -> Dict[str, schemas.Appointment]:
        return {a.id: a for a in self._load(Collection.appointments, schemas.Appointment)}

    def _projected(self, items: List[schemas.QueueItem]) -> List[schemas.QueueItem]:
        names = {p.id: p.display_name for p in self._load(Collection.practitioners, schemas.Practitioner)}
        return queue_engine.project_queue(items, self._appointments(), names.get, self.clock())

    def _projected_item(self, items: List[schemas.QueueItem], item_id: str) -> Optional[schemas.QueueItem]:
        for item in self._projected(items):
            if item.id == item_id:
                return item
        return None

    async def add(
        self,
        appointment_id: str,
        priority: TriagePriority = TriagePriority.non_urgent,
    ) -> schemas.ServiceResult[schemas.QueueItem]:
        await self._simulate_latency()

        appointment = self._find(Collection.appointments, schemas.Appointment, appointment_id)
        if appointment is None:
            return schemas.ServiceResult.not_found(f"Appointment {appointment_id} not found")

        item = schemas.QueueItem(
            id=new_id("queue"),
            patient_id=appointment.patient_id,
            appointment_id=appointment.id,
            priority=priority,
            status=appointment.status,
            check_in_time=appointment.check_in_time or self.clock(),
            estimated_wait_time=queue_engine.estimated_wait_time(priority),
            assigned_practitioner=appointment.practitioner_id,
        )
        items = self._stored_items()
        items.append(item)
        self._write(items)

        self.audit.log("ADD_TO_QUEUE", "queue", item.id, {
            "appointment_id": appointment_id,
            "priority": TriagePriority(priority).value,
        })
        logger.info(f"Queued appointment {appointment_id} as {TriagePriority(priority).value}")
        return schemas.ServiceResult.ok(self._projected_item(items, item.id))

    async def update_priority(self, appointment_id: str, priority: TriagePriority) -> schemas.ServiceResult[schemas.QueueItem]:
        await self._simulate_latency()

        items = self._stored_items()
        target = next((i for i in items if i.appointment_id == appointment_id), None)
        if target is None:
            return schemas.ServiceResult.not_found(f"No queue item for appointment {appointment_id}")

        previous = target.priority
        target.priority = priority
        target.estimated_wait_time = queue_engine.estimated_wait_time(priority)
        self._write(items)

        self.audit.log("UPDATE_PRIORITY", "queue", target.id, {
            "appointment_id": appointment_id,
            "from": previous.value,
            "to": TriagePriority(priority).value,
        })
        return schemas.ServiceResult.ok(self._projected_item(items, target.id))

    async def update_status(self, appointment_id: str, status: AppointmentStatus) -> schemas.ServiceResult[schemas.QueueItem]:
        await self._simulate_latency()

        items = self._stored_items()
        target = next((i for i in items if i.appointment_id == appointment_id), None)
        if target is None:
            return schemas.ServiceResult.not_found(f"No queue item for appointment {appointment_id}")

        target.status = status
        self._write(items)
        return schemas.ServiceResult.ok(self._projected_item(items, target.id))

    async def remove(self, appointment_id: str) -> schemas.ServiceResult[None]:
        await self._simulate_latency()

        # Stored order is kept as-is for the survivors
        records = self.store.load(Collection.queue)
        remaining = [r for r in records if r.get("appointment_id") != appointment_id]
        if len(remaining) == len(records):
            return schemas.ServiceResult.not_found(f"No queue item for appointment {appointment_id}")

        self.store.save(Collection.queue, remaining)
        self.audit.log("REMOVE_FROM_QUEUE", "queue", appointment_id, {"removed": len(records) - len(remaining)})
        return schemas.ServiceResult.ok()

    async def list(self) -> schemas.ServiceResult[List[schemas.QueueItem]]:
        await self._simulate_latency()
        return schemas.ServiceResult.ok(self._projected(self._stored_items()))

    def snapshot(self) -> List[schemas.QueueItem]:
        """Projected queue without the simulated latency, for aggregate views."""
        return self._projected(self._stored_items())
