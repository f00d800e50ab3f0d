# clinicdesk/routers/patients.py
from fastapi import APIRouter, Depends, Query, status

from .. import schemas, security
from ..dependencies import service_factory, unwrap
from ..services.patient_service import PatientService

router = APIRouter(
    prefix="/patients",
    tags=["Patients"],
    dependencies=[Depends(security.require_staff)],
    responses={404: {"description": "Not found"}},
)

get_patient_service = service_factory(PatientService)


@router.get("", response_model=schemas.PaginatedResponse[schemas.Patient])
async def list_patients(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    search: str = "",
    service: PatientService = Depends(get_patient_service),
):
    """Search patients by name, email or phone."""
    return unwrap(await service.get_patients(page=page, page_size=page_size, search=search))


@router.post("", response_model=schemas.Patient, status_code=status.HTTP_201_CREATED)
async def register_patient(form: schemas.PatientRegistrationForm, service: PatientService = Depends(get_patient_service)):
    return unwrap(await service.create_patient(form))


@router.get("/{patient_id}", response_model=schemas.Patient)
async def read_patient(patient_id: str, service: PatientService = Depends(get_patient_service)):
    return unwrap(await service.get_patient_by_id(patient_id))


@router.patch("/{patient_id}", response_model=schemas.Patient)
async def update_patient(patient_id: str, updates: schemas.PatientUpdate, service: PatientService = Depends(get_patient_service)):
    return unwrap(await service.update_patient(patient_id, updates))
