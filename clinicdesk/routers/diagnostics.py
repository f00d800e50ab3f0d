# clinicdesk/routers/diagnostics.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from .. import schemas, security
from ..dependencies import service_factory, unwrap
from ..models import DiagnosticTestStatus, DiagnosticTestType
from ..services.diagnostic_service import DiagnosticService

router = APIRouter(
    prefix="/diagnostics",
    tags=["Diagnostics"],
    dependencies=[Depends(security.require_diagnostics)],
    responses={404: {"description": "Not found"}},
)

get_diagnostic_service = service_factory(DiagnosticService)


@router.get("", response_model=List[schemas.DiagnosticTest])
async def list_tests(
    test_type: Optional[DiagnosticTestType] = Query(None, alias="type"),
    test_status: Optional[DiagnosticTestStatus] = Query(None, alias="status"),
    patient_id: Optional[str] = None,
    service: DiagnosticService = Depends(get_diagnostic_service),
):
    return unwrap(await service.list_tests(test_type=test_type, status=test_status, patient_id=patient_id))


@router.post("", response_model=schemas.DiagnosticTest, status_code=status.HTTP_201_CREATED)
async def order_test(form: schemas.DiagnosticTestCreate, service: DiagnosticService = Depends(get_diagnostic_service)):
    return unwrap(await service.order_test(form))


@router.post("/{test_id}/start", response_model=schemas.DiagnosticTest)
async def start_test(test_id: str, service: DiagnosticService = Depends(get_diagnostic_service)):
    return unwrap(await service.start_test(test_id))


@router.post("/{test_id}/complete", response_model=schemas.DiagnosticTest)
async def complete_test(test_id: str, form: schemas.DiagnosticResultForm, service: DiagnosticService = Depends(get_diagnostic_service)):
    return unwrap(await service.complete_test(test_id, form))


@router.post("/{test_id}/cancel", response_model=schemas.DiagnosticTest)
async def cancel_test(test_id: str, service: DiagnosticService = Depends(get_diagnostic_service)):
    return unwrap(await service.cancel_test(test_id))
