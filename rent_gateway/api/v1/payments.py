"""POST /v1/payments/{payment_id}/... - Record payments and issue invoices"""

import uuid
from fastapi import APIRouter, Depends, HTTPException, Request, status

from rent_gateway.api.v1.schemas import InvoiceResponse, RecordPaymentRequest, RecordPaymentResponse
from rent_gateway.api.dependencies import get_invoice_allocator, get_payment_repository, get_request_id
from rent_gateway.infrastructure.database.repositories import PaymentPeriodRepository
from rent_gateway.domain.gateway import RecordOutcome
from rent_gateway.domain.invoices import InvoiceNumberAllocator, generate_invoice
from rent_gateway.domain.models import PaymentStatus
from rent_gateway.infrastructure.observability.metrics import invoices_generated_counter, payments_recorded_counter
from rent_gateway.infrastructure.observability.logging import log_payment_recorded

router = APIRouter()


@router.post("/payments/{payment_id}/record", response_model=RecordPaymentResponse)
def record_payment(
    payment_id: uuid.UUID,
    body: RecordPaymentRequest,
    request: Request,
    payments: PaymentPeriodRepository = Depends(get_payment_repository),
):
    """
    Mark a pending payment as paid.

    Returns:
        404 if the payment is unknown
        409 if it is already paid
        503 if the store could not save it
    """
    outcome = payments.record_payment_outcome(
        str(payment_id),
        amount_paid=body.amount_paid,
        payment_date=body.payment_date,
        payment_method=body.payment_method,
        payment_reference=body.payment_reference,
        notes=body.notes,
    )
    payments_recorded_counter.labels(outcome=outcome.value).inc()
    log_payment_recorded(get_request_id(request), str(payment_id), str(body.amount_paid), outcome.value)

    if outcome is RecordOutcome.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Payment not found")
    if outcome is RecordOutcome.ALREADY_PAID:
        raise HTTPException(status_code=409, detail="Payment already paid")
    if outcome is RecordOutcome.FAILED:
        raise HTTPException(status_code=503, detail="Could not save payment")

    return RecordPaymentResponse(payment_id=str(payment_id), status=PaymentStatus.PAID)


@router.post("/payments/{payment_id}/invoice", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(
    payment_id: uuid.UUID,
    payments: PaymentPeriodRepository = Depends(get_payment_repository),
    allocator: InvoiceNumberAllocator = Depends(get_invoice_allocator),
):
    """Issue an invoice number for a payment and return the invoice"""
    invoice = generate_invoice(payments, str(payment_id), allocator)
    invoices_generated_counter.labels(outcome="issued" if invoice else "not_found").inc()

    if invoice is None:
        raise HTTPException(status_code=404, detail="Payment not found")

    return InvoiceResponse(
        invoice_number=invoice.invoice_number,
        tenant_name=invoice.tenant_name,
        property_address=invoice.property_address,
        period_start=invoice.period_start,
        period_end=invoice.period_end,
        amount_due=invoice.amount_due,
        due_date=invoice.due_date,
        is_pro_rated=invoice.is_pro_rated,
        created_at=invoice.created_at,
    )
