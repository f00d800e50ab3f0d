# clinicdesk/services/patient_service.py
import math
from typing import List

from .. import schemas
from ..models import Collection, InsuranceStatus
from .base import BaseService, new_id


def _matches(patient: schemas.Patient, search: str) -> bool:
    needle = search.lower()
    return (
        needle in patient.first_name.lower()
        or needle in patient.last_name.lower()
        or (patient.email is not None and needle in patient.email.lower())
        or search in patient.phone
    )


class PatientService(BaseService):

    async def get_patients(self, page: int = 1, page_size: int = 10, search: str = "") -> schemas.ServiceResult[schemas.PaginatedResponse[schemas.Patient]]:
        """Page through patients, optionally filtered by name, email or phone."""
        await self._simulate_latency()

        patients = self._load(Collection.patients, schemas.Patient)
        if search:
            patients = [p for p in patients if _matches(p, search)]

        page = max(page, 1)
        page_size = max(page_size, 1)
        total = len(patients)
        start = (page - 1) * page_size
        return schemas.ServiceResult.ok(schemas.PaginatedResponse[schemas.Patient](
            data=patients[start:start + page_size],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size),
        ))

    async def get_patient_by_id(self, patient_id: str) -> schemas.ServiceResult[schemas.Patient]:
        await self._simulate_latency()

        patient = self._find(Collection.patients, schemas.Patient, patient_id)
        if patient is None:
            return schemas.ServiceResult.not_found("Patient not found")

        self.audit.log("VIEW", "patient", patient_id)
        return schemas.ServiceResult.ok(patient)

    async def create_patient(self, form: schemas.PatientRegistrationForm) -> schemas.ServiceResult[schemas.Patient]:
        await self._simulate_latency()

        now = self.clock()
        insurance: List[schemas.Insurance] = []
        if form.insurance is not None:
            insurance.append(schemas.Insurance(
                id=new_id("ins"),
                provider=form.insurance.provider,
                policy_number=form.insurance.policy_number,
                group_number=form.insurance.group_number,
                subscriber_id=form.insurance.subscriber_id,
                subscriber_name=f"{form.first_name} {form.last_name}",
                relationship="Self",
                is_primary=True,
                status=InsuranceStatus.active,
                effective_date=now.date(),
                balance=form.insurance.balance,
            ))

        patient = schemas.Patient(
            id=new_id("patient"),
            first_name=form.first_name,
            last_name=form.last_name,
            date_of_birth=form.date_of_birth,
            gender=form.gender,
            phone=form.phone,
            email=form.email,
            address=form.address,
            emergency_contact=form.emergency_contact,
            insurance=insurance,
            created_at=now,
            updated_at=now,
        )
        patients = self._load(Collection.patients, schemas.Patient)
        patients.append(patient)
        self._save(Collection.patients, patients)

        self.audit.log("CREATE", "patient", patient.id, {"first_name": form.first_name, "last_name": form.last_name})
        return schemas.ServiceResult.ok(patient)

    async def update_patient(self, patient_id: str, updates: schemas.PatientUpdate) -> schemas.ServiceResult[schemas.Patient]:
        await self._simulate_latency()

        patients = self._load(Collection.patients, schemas.Patient)
        index = next((i for i, p in enumerate(patients) if p.id == patient_id), None)
        if index is None:
            return schemas.ServiceResult.not_found("Patient not found")

        changes = updates.model_dump(exclude_unset=True)
        merged = patients[index].model_dump()
        merged.update(changes)
        merged["updated_at"] = self.clock()
        patients[index] = schemas.Patient.model_validate(merged)
        self._save(Collection.patients, patients)

        self.audit.log("UPDATE", "patient", patient_id, {"fields": sorted(changes)})
        return schemas.ServiceResult.ok(patients[index])
