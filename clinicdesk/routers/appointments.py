# clinicdesk/routers/appointments.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from .. import schemas, security
from ..dependencies import service_factory, unwrap
from ..models import AppointmentStatus
from ..services.appointment_service import AppointmentService

router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
    dependencies=[Depends(security.require_staff)],
    responses={404: {"description": "Not found"}},
)

get_appointment_service = service_factory(AppointmentService)


@router.get("", response_model=List[schemas.Appointment])
async def list_appointments(
    on_date: Optional[date] = Query(None, alias="date"),
    practitioner_id: Optional[str] = None,
    appointment_status: Optional[AppointmentStatus] = Query(None, alias="status"),
    service: AppointmentService = Depends(get_appointment_service),
):
    return unwrap(await service.get_appointments(on_date=on_date, practitioner_id=practitioner_id, status=appointment_status))


@router.post("", response_model=schemas.Appointment, status_code=status.HTTP_201_CREATED)
async def create_appointment(form: schemas.AppointmentCreate, service: AppointmentService = Depends(get_appointment_service)):
    return unwrap(await service.create_appointment(form))


@router.get("/{appointment_id}", response_model=schemas.Appointment)
async def read_appointment(appointment_id: str, service: AppointmentService = Depends(get_appointment_service)):
    return unwrap(await service.get_appointment(appointment_id))


@router.patch("/{appointment_id}/status", response_model=schemas.Appointment)
async def update_appointment_status(
    appointment_id: str,
    update: schemas.AppointmentStatusUpdate,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Advance the visit workflow; the queue item follows the appointment."""
    return unwrap(await service.update_appointment_status(appointment_id, update.status))


@router.post("/{appointment_id}/check-in", response_model=schemas.Appointment, dependencies=[Depends(security.require_front_desk)])
async def check_in(appointment_id: str, form: schemas.CheckInForm, service: AppointmentService = Depends(get_appointment_service)):
    return unwrap(await service.check_in_patient(appointment_id, form))
