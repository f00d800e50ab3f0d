# tests/test_queue_service.py
from datetime import timedelta

import pytest

from clinicdesk import schemas
from clinicdesk.models import AppointmentStatus, Collection, TriagePriority
from clinicdesk.services.queue_service import QueueService

from conftest import FIXED_NOW


@pytest.fixture
def queue(make_service):
    return make_service(QueueService)


@pytest.mark.asyncio
async def test_list_returns_seeded_queue_in_priority_order(queue):
    result = await queue.list()
    assert result.success

    items = result.data
    assert [i.appointment_id for i in items] == ["appt-2", "appt-3"]
    assert [i.position for i in items] == [1, 2]
    assert items[0].current_wait_time == 25
    assert items[0].practitioner_name == "Dr. Sarah Davis"


@pytest.mark.asyncio
async def test_add_unknown_appointment_is_not_found(queue):
    result = await queue.add("appt-missing", TriagePriority.urgent)
    assert not result.success
    assert result.error_kind == schemas.ErrorKind.not_found


@pytest.mark.asyncio
async def test_add_inherits_appointment_fields(queue, store):
    result = await queue.add("appt-1", TriagePriority.critical)
    assert result.success

    item = result.data
    assert item.assigned_practitioner == "prac-1"
    assert item.status == AppointmentStatus.in_treatment
    assert item.check_in_time == FIXED_NOW - timedelta(minutes=60)
    assert item.estimated_wait_time == 5
    assert item.position == 1

    actions = [e["action"] for e in store.load(Collection.audit_log)]
    assert "ADD_TO_QUEUE" in actions


@pytest.mark.asyncio
async def test_stored_queue_has_no_derived_fields(queue, store):
    await queue.add("appt-1", TriagePriority.urgent)
    for record in store.load(Collection.queue):
        assert not schemas.QUEUE_DERIVED_FIELDS & set(record)


@pytest.mark.asyncio
async def test_update_priority_reorders(queue):
    result = await queue.update_priority("appt-3", TriagePriority.critical)
    assert result.success
    assert result.data.position == 1
    assert result.data.estimated_wait_time == 5

    listed = (await queue.list()).data
    assert [i.appointment_id for i in listed] == ["appt-3", "appt-2"]


@pytest.mark.asyncio
async def test_update_priority_without_item_is_not_found(queue):
    result = await queue.update_priority("appt-1", TriagePriority.urgent)
    assert result.error_kind == schemas.ErrorKind.not_found


@pytest.mark.asyncio
async def test_update_status_mirrors_appointment(queue):
    result = await queue.update_status("appt-3", AppointmentStatus.in_triage)
    assert result.success
    assert result.data.status == AppointmentStatus.in_triage


@pytest.mark.asyncio
async def test_remove_keeps_remaining_order(queue, store):
    await queue.add("appt-1", TriagePriority.non_urgent)
    before = [r["appointment_id"] for r in store.load(Collection.queue)]

    result = await queue.remove("appt-2")
    assert result.success
    after = [r["appointment_id"] for r in store.load(Collection.queue)]
    assert after == [a for a in before if a != "appt-2"]

    listed = (await queue.list()).data
    assert [i.position for i in listed] == [1, 2]


@pytest.mark.asyncio
async def test_remove_missing_item_is_not_found(queue):
    result = await queue.remove("appt-1")
    assert not result.success
    assert result.error_kind == schemas.ErrorKind.not_found


@pytest.mark.asyncio
async def test_relisting_is_idempotent(queue):
    first = (await queue.list()).data
    second = (await queue.list()).data
    assert [(i.appointment_id, i.position, i.priority) for i in first] == \
        [(i.appointment_id, i.position, i.priority) for i in second]


@pytest.mark.asyncio
async def test_same_practitioner_estimates_stack(queue):
    # appt-3 (prac-1, non-urgent) is already queued; appt-1 joins ahead of it as urgent
    await queue.add("appt-1", TriagePriority.urgent)
    listed = {i.appointment_id: i for i in (await queue.list()).data}

    assert listed["appt-1"].estimated_appointment_time == FIXED_NOW
    assert listed["appt-3"].estimated_appointment_time == FIXED_NOW + timedelta(minutes=30 + 5)
    # prac-2's patient is not held up by prac-1's queue
    assert listed["appt-2"].estimated_appointment_time == FIXED_NOW
