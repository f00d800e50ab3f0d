# clinicdesk/routers/consultations.py
from typing import List

from fastapi import APIRouter, Depends, status

from .. import schemas, security
from ..dependencies import service_factory, unwrap
from ..services.consultation_service import ConsultationService

router = APIRouter(
    prefix="/consultations",
    tags=["Consultations"],
    dependencies=[Depends(security.require_clinician)],
    responses={404: {"description": "Not found"}},
)

get_consultation_service = service_factory(ConsultationService)


@router.post("/{appointment_id}/start", response_model=schemas.ConsultationStart)
async def start_consultation(appointment_id: str, service: ConsultationService = Depends(get_consultation_service)):
    """
    Put the appointment in treatment and return notes pre-filled from triage.
    """
    return unwrap(await service.start_consultation(appointment_id))


@router.post("/complete", response_model=schemas.TreatmentRecord, status_code=status.HTTP_201_CREATED)
async def complete_consultation(notes: schemas.ConsultationNotes, service: ConsultationService = Depends(get_consultation_service)):
    """
    Save the treatment record, order any requested lab or imaging tests and
    mark the appointment completed. Assessment and plan are mandatory.
    """
    return unwrap(await service.complete_consultation(notes))


@router.get("/patient/{patient_id}", response_model=List[schemas.TreatmentRecord])
async def read_patient_records(patient_id: str, service: ConsultationService = Depends(get_consultation_service)):
    return unwrap(await service.get_records_for_patient(patient_id))
