# clinicdesk/services/proration.py
"""Split an invoice between insurance and patient.

Coverage is capped by the remaining insurance balance and by the bill, then
spread over the line items in proportion to each line's share of the total.
No rounding is applied here; amounts keep full float precision.
"""
from dataclasses import dataclass
from typing import List, Optional

from .. import schemas
from ..models import InsuranceStatus


@dataclass
class ProrationResult:
    services: List[schemas.InvoiceService]
    subtotal: float
    tax: float
    total: float
    insurance_coverage: float
    patient_responsibility: float


def primary_active_insurance(patient: schemas.Patient) -> Optional[schemas.Insurance]:
    for insurance in patient.insurance:
        if insurance.is_primary and insurance.status == InsuranceStatus.active:
            return insurance
    return None


def available_balance(patient: schemas.Patient) -> float:
    """Coverage the patient's insurance can still absorb; 0 without a usable policy."""
    insurance = primary_active_insurance(patient)
    if insurance is None or insurance.balance is None:
        return 0.0
    return max(insurance.balance, 0.0)


def prorate(line_items: List[schemas.InvoiceLineItem], balance: float, tax: float = 0.0) -> ProrationResult:
    priced = [(line, line.unit_price * line.quantity) for line in line_items]
    subtotal = sum(price for _, price in priced)
    total = subtotal + tax

    coverage = min(balance, total) if total > 0 else 0.0

    services = []
    for line, line_total in priced:
        covered = 0.0
        if coverage > 0:
            covered = min(coverage * (line_total / total), line_total)
        services.append(schemas.InvoiceService(
            service_id=line.service_id,
            service_name=line.service_name,
            cpt_code=line.cpt_code,
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_price=line_total,
            insurance_covered=covered,
            patient_portion=line_total - covered,
        ))

    return ProrationResult(
        services=services,
        subtotal=subtotal,
        tax=tax,
        total=total,
        insurance_coverage=coverage,
        patient_responsibility=total - coverage,
    )
