# clinicdesk/routers/triage.py
from typing import List

from fastapi import APIRouter, Depends, status

from .. import schemas, security
from ..dependencies import service_factory, unwrap
from ..services.triage_service import TriageService

router = APIRouter(
    prefix="/triage",
    tags=["Triage"],
    dependencies=[Depends(security.get_current_user)],
    responses={404: {"description": "Not found"}},
)

get_triage_service = service_factory(TriageService)


@router.post(
    "/assessments",
    response_model=schemas.TriageAssessment,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(security.require_triage)],
)
async def create_assessment(form: schemas.TriageAssessmentCreate, service: TriageService = Depends(get_triage_service)):
    """Record a triage assessment and re-prioritise the patient in the queue."""
    return unwrap(await service.create_assessment(form))


@router.get("/assessments/{appointment_id}", response_model=schemas.TriageAssessment, dependencies=[Depends(security.require_staff)])
async def read_assessment(appointment_id: str, service: TriageService = Depends(get_triage_service)):
    return unwrap(await service.get_assessment_by_appointment(appointment_id))


@router.get("/vitals/{patient_id}", response_model=List[schemas.VitalSigns], dependencies=[Depends(security.require_staff)])
async def read_vitals(patient_id: str, service: TriageService = Depends(get_triage_service)):
    return unwrap(await service.get_vitals_for_patient(patient_id))
