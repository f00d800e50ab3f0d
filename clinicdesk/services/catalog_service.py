# clinicdesk/services/catalog_service.py
from typing import List, Optional

from .. import schemas
from ..models import Collection
from .base import BaseService


class CatalogService(BaseService):
    """Read-only reference data: practitioners, billable services, diagnosis codes."""

    def practitioners(self) -> List[schemas.Practitioner]:
        return self._load(Collection.practitioners, schemas.Practitioner)

    def practitioner(self, practitioner_id: str) -> Optional[schemas.Practitioner]:
        return self._find(Collection.practitioners, schemas.Practitioner, practitioner_id)

    def practitioner_name(self, practitioner_id: str) -> Optional[str]:
        practitioner = self.practitioner(practitioner_id)
        return practitioner.display_name if practitioner else None

    async def get_practitioners(self, available_only: bool = False) -> schemas.ServiceResult[List[schemas.Practitioner]]:
        await self._simulate_latency()
        practitioners = self.practitioners()
        if available_only:
            practitioners = [p for p in practitioners if p.is_available]
        return schemas.ServiceResult.ok(practitioners)

    async def get_service_items(self, active_only: bool = True) -> schemas.ServiceResult[List[schemas.ServiceItem]]:
        await self._simulate_latency()
        items = self._load(Collection.service_items, schemas.ServiceItem)
        if active_only:
            items = [i for i in items if i.is_active]
        return schemas.ServiceResult.ok(items)

    async def get_diagnosis_codes(self, active_only: bool = True) -> schemas.ServiceResult[List[schemas.DiagnosisCode]]:
        await self._simulate_latency()
        codes = self._load(Collection.diagnosis_codes, schemas.DiagnosisCode)
        if active_only:
            codes = [c for c in codes if c.is_active]
        return schemas.ServiceResult.ok(codes)
