# clinicdesk/routers/billing.py
from datetime import datetime
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, status

from .. import schemas, security
from ..audit import AuditLogger
from ..config import Settings
from ..dependencies import get_app_settings, get_audit, get_clock, get_store, service_factory, unwrap
from ..services.billing_service import BillingService
from ..services.payment_service import PaymentService
from ..store import CollectionStore

router = APIRouter(
    tags=["Billing"],
    dependencies=[Depends(security.require_billing)],
    responses={404: {"description": "Not found"}},
)

get_billing_service = service_factory(BillingService)


def get_payment_service(
    audit: AuditLogger = Depends(get_audit),
    current_user: schemas.User = Depends(security.get_current_user),
    store: CollectionStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> PaymentService:
    return PaymentService(
        store,
        audit=audit.bind(current_user.id),
        payment_delay_ms=settings.payment_delay_ms,
        verification_delay_ms=settings.insurance_verification_delay_ms,
        clock=clock,
    )


@router.get("/invoices", response_model=List[schemas.Invoice])
async def list_invoices(patient_id: Optional[str] = None, service: BillingService = Depends(get_billing_service)):
    return unwrap(await service.get_invoices(patient_id))


@router.post("/invoices", response_model=schemas.Invoice, status_code=status.HTTP_201_CREATED)
async def create_invoice(form: schemas.InvoiceCreate, service: BillingService = Depends(get_billing_service)):
    """Bill the given services, splitting each line between insurance and patient."""
    return unwrap(await service.create_invoice(form.services, patient_id=form.patient_id, appointment_id=form.appointment_id))


@router.get("/invoices/{invoice_id}", response_model=schemas.Invoice)
async def read_invoice(invoice_id: str, service: BillingService = Depends(get_billing_service)):
    return unwrap(await service.get_invoice(invoice_id))


@router.put("/invoices/{invoice_id}", response_model=schemas.Invoice)
async def update_invoice(invoice_id: str, form: schemas.InvoiceUpdate, service: BillingService = Depends(get_billing_service)):
    return unwrap(await service.update_invoice(invoice_id, form.services))


@router.post("/invoices/{invoice_id}/payments", response_model=schemas.Invoice)
async def record_payment(
    invoice_id: str,
    payment: schemas.PaymentCreate,
    current_user: schemas.User = Depends(security.get_current_user),
    service: BillingService = Depends(get_billing_service),
):
    return unwrap(await service.record_payment(invoice_id, payment.amount, payment.method, current_user.id, notes=payment.notes))


@router.post("/payments", response_model=schemas.Payment, status_code=status.HTTP_201_CREATED)
async def process_payment(
    form: schemas.PaymentForm,
    current_user: schemas.User = Depends(security.get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    """Run a payment through the mock gateway and record it on the invoice."""
    return unwrap(await service.process_payment(form, processed_by=current_user.id))


@router.post("/insurance/verify", response_model=schemas.InsuranceVerification)
async def verify_insurance(request: schemas.InsuranceVerificationRequest, service: PaymentService = Depends(get_payment_service)):
    return unwrap(await service.verify_insurance(request.patient_id, request.insurance_id))
