# clinicdesk/services/billing_service.py
"""Invoices, insurance proration and payment bookkeeping.

Note: invoicing never draws down the insurance balance. Each invoice (and
each edit of one) prorates against the balance as currently stored, so the
same coverage can be allocated more than once across invoices.
"""
import logging
from datetime import timedelta
from typing import List, Optional, Tuple

from .. import schemas
from ..models import Collection, PaymentMethod, PaymentStatus
from ..presentation import format_currency
from . import proration
from .base import BaseService, new_id

logger = logging.getLogger(__name__)

PAYMENT_TERMS_DAYS = 30
# Half a cent: amounts are prorated unrounded and paid as displayed
PAYMENT_TOLERANCE = 0.005


class BillingService(BaseService):

    def _resolve_patient(
        self, patient_id: Optional[str], appointment_id: Optional[str],
    ) -> Tuple[Optional[schemas.Patient], Optional[schemas.Appointment]]:
        appointment = self._find(Collection.appointments, schemas.Appointment, appointment_id) if appointment_id else None
        if appointment is not None:
            patient_id = appointment.patient_id
        if not patient_id:
            return None, appointment
        return self._find(Collection.patients, schemas.Patient, patient_id), appointment

    def _next_invoice_number(self, invoices: List[schemas.Invoice]) -> str:
        year = self.clock().year
        return f"INV-{year}-{len(invoices) + 1:03d}"

    @staticmethod
    def _apply(invoice: schemas.Invoice, result: proration.ProrationResult) -> None:
        invoice.services = result.services
        invoice.subtotal = result.subtotal
        invoice.tax = result.tax
        invoice.total = result.total
        invoice.insurance_coverage = result.insurance_coverage
        invoice.patient_responsibility = result.patient_responsibility

    async def create_invoice(
        self,
        line_items: List[schemas.InvoiceLineItem],
        patient_id: Optional[str] = None,
        appointment_id: Optional[str] = None,
    ) -> schemas.ServiceResult[schemas.Invoice]:
        await self._simulate_latency()

        if not line_items:
            return schemas.ServiceResult.invalid("An invoice needs at least one service")

        patient, appointment = self._resolve_patient(patient_id, appointment_id)
        if patient is None:
            return schemas.ServiceResult.not_found("Patient not found for invoice")

        result = proration.prorate(line_items, proration.available_balance(patient))
        now = self.clock()
        invoices = self._load(Collection.invoices, schemas.Invoice)
        invoice = schemas.Invoice(
            id=new_id("inv"),
            patient_id=patient.id,
            appointment_id=appointment.id if appointment else None,
            invoice_number=self._next_invoice_number(invoices),
            issue_date=now.date(),
            due_date=(now + timedelta(days=PAYMENT_TERMS_DAYS)).date(),
            services=result.services,
            subtotal=result.subtotal,
            tax=result.tax,
            total=result.total,
            insurance_coverage=result.insurance_coverage,
            patient_responsibility=result.patient_responsibility,
            status=PaymentStatus.pending,
            created_at=now,
            updated_at=now,
        )
        invoices.append(invoice)
        self._save(Collection.invoices, invoices)

        self.audit.log("CREATE", "invoice", invoice.id, {
            "invoice_number": invoice.invoice_number,
            "total": invoice.total,
            "insurance_coverage": invoice.insurance_coverage,
        })
        return schemas.ServiceResult.ok(invoice)

    async def update_invoice(self, invoice_id: str, line_items: List[schemas.InvoiceLineItem]) -> schemas.ServiceResult[schemas.Invoice]:
        await self._simulate_latency()

        invoices = self._load(Collection.invoices, schemas.Invoice)
        invoice = next((i for i in invoices if i.id == invoice_id), None)
        if invoice is None:
            return schemas.ServiceResult.not_found(f"Invoice {invoice_id} not found")
        if not line_items:
            return schemas.ServiceResult.invalid("An invoice needs at least one service")

        patient = self._find(Collection.patients, schemas.Patient, invoice.patient_id)
        balance = proration.available_balance(patient) if patient else 0.0
        self._apply(invoice, proration.prorate(line_items, balance))
        invoice.updated_at = self.clock()
        self._save(Collection.invoices, invoices)

        self.audit.log("UPDATE", "invoice", invoice.id, {"total": invoice.total})
        return schemas.ServiceResult.ok(invoice)

    async def record_payment(
        self,
        invoice_id: str,
        amount: float,
        method: PaymentMethod,
        processed_by: str,
        transaction_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> schemas.ServiceResult[schemas.Invoice]:
        await self._simulate_latency()

        invoices = self._load(Collection.invoices, schemas.Invoice)
        invoice = next((i for i in invoices if i.id == invoice_id), None)
        if invoice is None:
            return schemas.ServiceResult.not_found(f"Invoice {invoice_id} not found")
        if amount <= 0:
            return schemas.ServiceResult.invalid("Payment amount must be positive")

        now = self.clock()
        invoice.payments.append(schemas.Payment(
            id=new_id("pay"),
            invoice_id=invoice.id,
            amount=amount,
            method=method,
            transaction_id=transaction_id,
            processed_at=now,
            processed_by=processed_by,
            notes=notes,
        ))

        paid = invoice.amount_paid
        if paid + PAYMENT_TOLERANCE >= invoice.patient_responsibility:
            invoice.status = PaymentStatus.paid
        elif paid > 0:
            invoice.status = PaymentStatus.partial
        invoice.updated_at = now
        self._save(Collection.invoices, invoices)

        self.audit.log("RECORD_PAYMENT", "invoice", invoice.id, {
            "amount": amount,
            "method": PaymentMethod(method).value,
            "transaction_id": transaction_id,
            "status": invoice.status.value,
        })
        logger.info(f"Recorded {format_currency(amount)} against {invoice.invoice_number}, status {invoice.status.value}")
        return schemas.ServiceResult.ok(invoice)

    async def get_invoices(self, patient_id: Optional[str] = None) -> schemas.ServiceResult[List[schemas.Invoice]]:
        await self._simulate_latency()
        invoices = self._load(Collection.invoices, schemas.Invoice)
        if patient_id:
            invoices = [i for i in invoices if i.patient_id == patient_id]
        return schemas.ServiceResult.ok(invoices)

    async def get_invoice(self, invoice_id: str) -> schemas.ServiceResult[schemas.Invoice]:
        await self._simulate_latency()
        invoice = self._find(Collection.invoices, schemas.Invoice, invoice_id)
        if invoice is None:
            return schemas.ServiceResult.not_found(f"Invoice {invoice_id} not found")
        return schemas.ServiceResult.ok(invoice)
