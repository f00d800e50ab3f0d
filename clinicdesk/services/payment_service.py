# clinicdesk/services/payment_service.py
import logging
from typing import Optional

from .. import schemas
from ..audit import utc_now
from ..presentation import format_currency
from ..models import Collection, InsuranceStatus
from .base import BaseService
from .billing_service import BillingService

logger = logging.getLogger(__name__)

# Benefit figures returned by the mock verification gateway
DEFAULT_COVERAGE_PERCENTAGE = 80.0
DEFAULT_COPAY = 25.0
DEFAULT_DEDUCTIBLE = 1500.0


class PaymentService(BaseService):
    """Mock payment gateway and insurance eligibility checks."""

    def __init__(self, store, audit=None, payment_delay_ms: int = 0, verification_delay_ms: int = 0, clock=utc_now):
        super().__init__(store, audit=audit, delay_ms=payment_delay_ms, clock=clock)
        self.verification_delay_ms = verification_delay_ms
        self.billing = BillingService(store, audit=self.audit, clock=self.clock)

    async def process_payment(self, form: schemas.PaymentForm, processed_by: Optional[str] = None) -> schemas.ServiceResult[schemas.Payment]:
        await self._simulate_latency()

        transaction_id = f"TXN-{int(self.clock().timestamp() * 1000)}"
        result = await self.billing.record_payment(
            form.invoice_id,
            form.amount,
            form.method,
            processed_by=processed_by or self.audit.actor_id or "system",
            transaction_id=transaction_id,
            notes=form.notes or "Payment processed successfully",
        )
        if not result.success:
            return schemas.ServiceResult(success=False, error=result.error, error_kind=result.error_kind)

        payment = result.data.payments[-1]
        logger.info(f"Payment {payment.transaction_id} of {format_currency(payment.amount)} applied to invoice {form.invoice_id}")
        # Card details are excluded from the dump
        self.audit.log("PROCESS_PAYMENT", "payment", payment.id, form.model_dump(mode="json"))
        return schemas.ServiceResult.ok(payment)

    async def verify_insurance(self, patient_id: str, insurance_id: str) -> schemas.ServiceResult[schemas.InsuranceVerification]:
        await self._simulate_latency(self.verification_delay_ms)

        patient = self._find(Collection.patients, schemas.Patient, patient_id)
        if patient is None:
            return schemas.ServiceResult.not_found(f"Patient {patient_id} not found")
        insurance = next((i for i in patient.insurance if i.id == insurance_id), None)
        if insurance is None:
            return schemas.ServiceResult.not_found(f"Insurance {insurance_id} not found for patient {patient_id}")

        copay = insurance.copay if insurance.copay is not None else DEFAULT_COPAY
        deductible = insurance.deductible if insurance.deductible is not None else DEFAULT_DEDUCTIBLE
        coinsurance = insurance.coinsurance if insurance.coinsurance is not None else 100 - DEFAULT_COVERAGE_PERCENTAGE

        verification = schemas.InsuranceVerification(
            is_active=insurance.status == InsuranceStatus.active,
            coverage_percentage=100 - coinsurance,
            copay=copay,
            deductible=deductible,
            deductible_met=deductible / 2,
            remaining_balance=insurance.balance,
            effective_date=insurance.effective_date,
            expiration_date=insurance.expiration_date,
            benefits={
                "office_visits": schemas.BenefitCoverage(covered=True, copay=copay),
                "diagnostic_tests": schemas.BenefitCoverage(covered=True, coinsurance=coinsurance),
                "prescriptions": schemas.BenefitCoverage(covered=True, copay=10),
            },
        )

        self.audit.log("VERIFY_INSURANCE", "insurance", insurance_id, {"patient_id": patient_id})
        return schemas.ServiceResult.ok(verification)
