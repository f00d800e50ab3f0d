# clinicdesk/services/queue_engine.py
"""Ordering and wait-time projection for the triage queue.

The queue is kept in a strict total order: priority rank first, then
check-in time. Derived fields (position, current wait, estimated start,
practitioner name) are computed here on every read and never stored.
"""
import math
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from .. import schemas
from ..models import TriagePriority

PRIORITY_RANK: Dict[TriagePriority, int] = {
    TriagePriority.critical: 0,
    TriagePriority.urgent: 1,
    TriagePriority.semi_urgent: 2,
    TriagePriority.non_urgent: 3,
}

# Base wait per priority, minutes
BASE_WAIT_MINUTES: Dict[TriagePriority, int] = {
    TriagePriority.critical: 5,
    TriagePriority.urgent: 15,
    TriagePriority.semi_urgent: 30,
    TriagePriority.non_urgent: 45,
}

DEFAULT_APPOINTMENT_MINUTES = 30
BUFFER_MINUTES = 5


def priority_rank(priority: TriagePriority) -> int:
    return PRIORITY_RANK[TriagePriority(priority)]


def estimated_wait_time(priority: TriagePriority) -> int:
    return BASE_WAIT_MINUTES[TriagePriority(priority)]


def sort_queue(items: List[schemas.QueueItem]) -> List[schemas.QueueItem]:
    """Stable sort by (priority rank, check-in time); equal keys keep input order."""
    return sorted(items, key=lambda item: (priority_rank(item.priority), item.check_in_time))


def assign_positions(items: List[schemas.QueueItem]) -> List[schemas.QueueItem]:
    for index, item in enumerate(items):
        item.position = index + 1
    return items


def current_wait_minutes(check_in_time: datetime, now: datetime) -> int:
    return math.floor((now - check_in_time).total_seconds() / 60)


def estimate_appointment_time(
    ordered: List[schemas.QueueItem],
    index: int,
    appointments: Dict[str, schemas.Appointment],
    now: datetime,
) -> Optional[datetime]:
    """Project when the item at `index` of the sorted queue will be seen.

    Only earlier, non-terminal items assigned to the same practitioner count;
    each one contributes its appointment duration plus a fixed buffer.
    """
    item = ordered[index]
    appointment = appointments.get(item.appointment_id)
    if not item.assigned_practitioner or appointment is None:
        return None

    own_duration = appointment.duration or DEFAULT_APPOINTMENT_MINUTES
    total_minutes = 0
    for ahead in ordered[:index]:
        if ahead.assigned_practitioner != item.assigned_practitioner:
            continue
        if ahead.status.is_terminal:
            continue
        ahead_appointment = appointments.get(ahead.appointment_id)
        duration = ahead_appointment.duration if ahead_appointment and ahead_appointment.duration else own_duration
        total_minutes += duration + BUFFER_MINUTES

    return now + timedelta(minutes=total_minutes)


def project_queue(
    items: List[schemas.QueueItem],
    appointments: Dict[str, schemas.Appointment],
    practitioner_name: Callable[[str], Optional[str]],
    now: datetime,
) -> List[schemas.QueueItem]:
    """Sort the queue and fill in every derived field."""
    ordered = assign_positions(sort_queue([item.model_copy() for item in items]))
    for index, item in enumerate(ordered):
        item.current_wait_time = current_wait_minutes(item.check_in_time, now)
        item.estimated_appointment_time = estimate_appointment_time(ordered, index, appointments, now)
        item.practitioner_name = practitioner_name(item.assigned_practitioner) if item.assigned_practitioner else None
    return ordered


def to_record(item: schemas.QueueItem) -> dict:
    """Serialise a queue item for storage, dropping the derived fields."""
    return item.model_dump(mode="json", exclude=schemas.QUEUE_DERIVED_FIELDS)
