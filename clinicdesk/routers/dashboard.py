# clinicdesk/routers/dashboard.py
from typing import List

from fastapi import APIRouter, Depends

from .. import schemas, security
from ..dependencies import service_factory, unwrap
from ..services.catalog_service import CatalogService
from ..services.dashboard_service import DashboardService

router = APIRouter(
    tags=["Dashboard"],
    dependencies=[Depends(security.require_staff)],
)

get_dashboard_service = service_factory(DashboardService)
get_catalog_service = service_factory(CatalogService)


@router.get("/dashboard/metrics", response_model=schemas.DashboardMetrics)
async def read_metrics(service: DashboardService = Depends(get_dashboard_service)):
    return unwrap(await service.get_metrics())


@router.get("/catalog/practitioners", response_model=List[schemas.Practitioner])
async def list_practitioners(available_only: bool = False, service: CatalogService = Depends(get_catalog_service)):
    return unwrap(await service.get_practitioners(available_only=available_only))


@router.get("/catalog/services", response_model=List[schemas.ServiceItem])
async def list_service_items(active_only: bool = True, service: CatalogService = Depends(get_catalog_service)):
    return unwrap(await service.get_service_items(active_only=active_only))


@router.get("/catalog/diagnosis-codes", response_model=List[schemas.DiagnosisCode])
async def list_diagnosis_codes(active_only: bool = True, service: CatalogService = Depends(get_catalog_service)):
    return unwrap(await service.get_diagnosis_codes(active_only=active_only))
