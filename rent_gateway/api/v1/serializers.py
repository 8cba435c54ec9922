"""Domain -> response schema conversion shared by the v1 routers"""

from typing import List, Sequence

from rent_gateway.api.v1.schemas import BillingPeriodSchema, RentPaymentSchema
from rent_gateway.domain.models import BillingPeriod, RentPayment


def period_schemas(periods: Sequence[BillingPeriod]) -> List[BillingPeriodSchema]:
    return [
        BillingPeriodSchema(
            period_start=p.period_start,
            period_end=p.period_end,
            due_date=p.due_date,
            amount_due=p.amount_due,
            is_pro_rated=p.is_pro_rated,
            pro_rate_days=p.pro_rate_days,
        )
        for p in periods
    ]


def payment_schema(payment: RentPayment) -> RentPaymentSchema:
    return RentPaymentSchema(
        id=payment.id,
        period_start=payment.period_start,
        period_end=payment.period_end,
        due_date=payment.due_date,
        amount_due=payment.amount_due,
        is_pro_rated=payment.is_pro_rated,
        pro_rate_days=payment.pro_rate_days,
        status=payment.status,
        amount_paid=payment.amount_paid,
        payment_date=payment.payment_date,
        payment_method=payment.payment_method,
        payment_reference=payment.payment_reference,
        notes=payment.notes,
        invoice_number=payment.invoice_number,
    )
