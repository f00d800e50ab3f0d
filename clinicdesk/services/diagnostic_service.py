# clinicdesk/services/diagnostic_service.py
from typing import Dict, List, Optional, Set

from .. import schemas
from ..models import Collection, DiagnosticTestStatus, DiagnosticTestType
from .base import BaseService, new_id

# Allowed source statuses for each target status
TRANSITIONS: Dict[DiagnosticTestStatus, Set[DiagnosticTestStatus]] = {
    DiagnosticTestStatus.in_progress: {DiagnosticTestStatus.ordered},
    DiagnosticTestStatus.completed: {DiagnosticTestStatus.ordered, DiagnosticTestStatus.in_progress},
    DiagnosticTestStatus.cancelled: {DiagnosticTestStatus.ordered, DiagnosticTestStatus.in_progress},
}


class DiagnosticService(BaseService):
    """Lab and imaging orders and their results."""

    def _new_test(self, patient_id: str, appointment_id: str, name: str, test_type: DiagnosticTestType,
                  clinical_info: Optional[str] = None) -> schemas.DiagnosticTest:
        return schemas.DiagnosticTest(
            id=new_id("test"),
            patient_id=patient_id,
            appointment_id=appointment_id,
            name=name,
            type=test_type,
            status=DiagnosticTestStatus.ordered,
            ordered_by=self.audit.actor_id or "system",
            ordered_date=self.clock().date(),
            clinical_info=clinical_info,
        )

    def order_many(self, patient_id: str, appointment_id: str, names: List[str], test_type: DiagnosticTestType) -> List[schemas.DiagnosticTest]:
        """Order several tests of one type at once, without latency or per-test audit."""
        if not names:
            return []
        tests = self._load(Collection.diagnostic_tests, schemas.DiagnosticTest)
        ordered = [self._new_test(patient_id, appointment_id, name, test_type) for name in names]
        tests.extend(ordered)
        self._save(Collection.diagnostic_tests, tests)
        return ordered

    async def order_test(self, form: schemas.DiagnosticTestCreate) -> schemas.ServiceResult[schemas.DiagnosticTest]:
        await self._simulate_latency()

        if self._find(Collection.patients, schemas.Patient, form.patient_id) is None:
            return schemas.ServiceResult.not_found(f"Patient {form.patient_id} not found")

        test = self._new_test(form.patient_id, form.appointment_id, form.name, form.type, form.clinical_info)
        tests = self._load(Collection.diagnostic_tests, schemas.DiagnosticTest)
        tests.append(test)
        self._save(Collection.diagnostic_tests, tests)

        self.audit.log("ORDER_TEST", "diagnostic_test", test.id, {"name": test.name, "type": test.type.value})
        return schemas.ServiceResult.ok(test)

    async def list_tests(
        self,
        test_type: Optional[DiagnosticTestType] = None,
        status: Optional[DiagnosticTestStatus] = None,
        patient_id: Optional[str] = None,
    ) -> schemas.ServiceResult[List[schemas.DiagnosticTest]]:
        await self._simulate_latency()

        tests = self._load(Collection.diagnostic_tests, schemas.DiagnosticTest)
        if test_type:
            tests = [t for t in tests if t.type == test_type]
        if status:
            tests = [t for t in tests if t.status == status]
        if patient_id:
            tests = [t for t in tests if t.patient_id == patient_id]
        return schemas.ServiceResult.ok(tests)

    async def _transition(self, test_id: str, target: DiagnosticTestStatus, form: Optional[schemas.DiagnosticResultForm] = None):
        tests = self._load(Collection.diagnostic_tests, schemas.DiagnosticTest)
        test = next((t for t in tests if t.id == test_id), None)
        if test is None:
            return schemas.ServiceResult.not_found(f"Diagnostic test {test_id} not found")
        if test.status not in TRANSITIONS[target]:
            return schemas.ServiceResult.invalid(f"Cannot move a {test.status.value} test to {target.value}")

        if target == DiagnosticTestStatus.completed and not (form and form.result.strip()):
            return schemas.ServiceResult.invalid("A result is required to complete a test")

        test.status = target
        if form is not None:
            test.result = form.result
            test.notes = form.notes
            test.attachment_url = form.attachment_url
            test.performed_by = form.performed_by or self.audit.actor_id or "system"
            test.performed_date = form.performed_date or self.clock().date()
        self._save(Collection.diagnostic_tests, tests)

        self.audit.log(f"TEST_{target.value}", "diagnostic_test", test.id)
        return schemas.ServiceResult.ok(test)

    async def start_test(self, test_id: str) -> schemas.ServiceResult[schemas.DiagnosticTest]:
        await self._simulate_latency()
        return await self._transition(test_id, DiagnosticTestStatus.in_progress)

    async def complete_test(self, test_id: str, form: schemas.DiagnosticResultForm) -> schemas.ServiceResult[schemas.DiagnosticTest]:
        await self._simulate_latency()
        return await self._transition(test_id, DiagnosticTestStatus.completed, form)

    async def cancel_test(self, test_id: str) -> schemas.ServiceResult[schemas.DiagnosticTest]:
        await self._simulate_latency()
        return await self._transition(test_id, DiagnosticTestStatus.cancelled)
