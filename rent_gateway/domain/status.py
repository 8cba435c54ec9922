"""Rent status evaluation - current vs overdue for the active billing period"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from rent_gateway.domain.gateway import PaymentPeriodGateway
from rent_gateway.domain.models import PaymentStatus, RentPayment, RentStatus, RentStatusResult

logger = logging.getLogger(__name__)


def evaluate_rent_status(payment: Optional[RentPayment], today: date) -> RentStatusResult:
    """
    Classify the current-period payment against today's date.

    - No payment row: current (lease not started or periods not generated)
    - Paid: current regardless of date
    - Pending and due before today: overdue by the whole days elapsed
    - Pending and due today or later: current
    """
    if payment is None:
        return RentStatusResult(status=RentStatus.CURRENT)

    if payment.status == PaymentStatus.PAID:
        return RentStatusResult(status=RentStatus.CURRENT, current_payment=payment)

    if payment.due_date < today:
        return RentStatusResult(
            status=RentStatus.OVERDUE,
            days_overdue=(today - payment.due_date).days,
            current_payment=payment,
        )

    return RentStatusResult(status=RentStatus.CURRENT, current_payment=payment)


def calculate_rent_status(
    gateway: PaymentPeriodGateway,
    tenant_id: str,
    rent_due_day: int,
    monthly_rent: Decimal,
    lease_start: date,
    lease_end: date,
    today: Optional[date] = None,
) -> RentStatusResult:
    """
    Look up the tenant's current-period payment and classify it.

    Never raises: lookup failures degrade to current so dashboards always render.
    """
    today = today or date.today()

    try:
        payment = gateway.get_current_period_payment(tenant_id, today=today)
    except Exception as e:
        logger.error(f"Rent status lookup failed: {e}", extra={"tenant_id": tenant_id})
        return RentStatusResult(status=RentStatus.CURRENT)

    if payment is None and lease_start <= today < lease_end:
        logger.info(
            "Active lease has no current billing period",
            extra={
                "tenant_id": tenant_id,
                "rent_due_day": rent_due_day,
                "monthly_rent": str(monthly_rent),
            },
        )

    return evaluate_rent_status(payment, today)
