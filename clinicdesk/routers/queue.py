# clinicdesk/routers/queue.py
from typing import List

from fastapi import APIRouter, Depends, status

from .. import schemas, security
from ..dependencies import service_factory, unwrap
from ..services.queue_service import QueueService

router = APIRouter(
    prefix="/queue",
    tags=["Queue"],
    dependencies=[Depends(security.require_staff)],
    responses={404: {"description": "Not found"}},
)

get_queue_service = service_factory(QueueService)


@router.get("", response_model=List[schemas.QueueItem])
async def read_queue(service: QueueService = Depends(get_queue_service)):
    """The waiting room in treatment order, with live wait estimates."""
    return unwrap(await service.list())


@router.post("", response_model=schemas.QueueItem, status_code=status.HTTP_201_CREATED, dependencies=[Depends(security.require_front_desk)])
async def add_to_queue(request: schemas.QueueAddRequest, service: QueueService = Depends(get_queue_service)):
    return unwrap(await service.add(request.appointment_id, request.priority))


@router.patch("/{appointment_id}/priority", response_model=schemas.QueueItem, dependencies=[Depends(security.require_triage)])
async def update_priority(appointment_id: str, update: schemas.QueuePriorityUpdate, service: QueueService = Depends(get_queue_service)):
    return unwrap(await service.update_priority(appointment_id, update.priority))


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(security.require_front_desk)])
async def remove_from_queue(appointment_id: str, service: QueueService = Depends(get_queue_service)):
    unwrap(await service.remove(appointment_id))
