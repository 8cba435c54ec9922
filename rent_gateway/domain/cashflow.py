"""Future cash flow projection from scheduled rent periods"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from rent_gateway.domain.gateway import PaymentPeriodGateway
from rent_gateway.domain.models import CashFlowItem, PaymentStatus

logger = logging.getLogger(__name__)


def calculate_future_cash_flow(
    gateway: PaymentPeriodGateway,
    tenant_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[CashFlowItem]:
    """
    List a tenant's periods due on or after start_date (default today),
    optionally up to end_date, in due date order.

    Returns an empty list when the store cannot be queried.
    """
    start_date = start_date or date.today()

    try:
        payments = gateway.query_future_cash_flow(tenant_id, start_date, end_date)
    except Exception as e:
        logger.error(f"Cash flow query failed: {e}", extra={"tenant_id": tenant_id})
        return []

    return [
        CashFlowItem(
            period_start=p.period_start,
            period_end=p.period_end,
            due_date=p.due_date,
            amount=p.amount_due,
            status=p.status,
        )
        for p in payments
    ]


def outstanding_total(items: Sequence[CashFlowItem]) -> Decimal:
    """Sum of amounts still pending collection"""
    return sum((item.amount for item in items if item.status == PaymentStatus.PENDING), Decimal("0.00"))
