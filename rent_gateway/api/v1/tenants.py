"""GET /v1/tenants/{tenant_id}/... - Payment history, rent status and cash flow"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from rent_gateway.api.v1.schemas import CashFlowItemSchema, CashFlowResponse, PaymentsResponse, RentStatusResponse
from rent_gateway.api.v1.serializers import payment_schema
from rent_gateway.api.dependencies import get_payment_repository, get_tenant_repository
from rent_gateway.infrastructure.database.repositories import PaymentPeriodRepository, TenantRepository
from rent_gateway.domain.cashflow import calculate_future_cash_flow, outstanding_total
from rent_gateway.domain.status import calculate_rent_status
from rent_gateway.infrastructure.observability.metrics import record_rent_status

router = APIRouter()


@router.get("/tenants/{tenant_id}/payments", response_model=PaymentsResponse)
def get_tenant_payments(tenant_id: str, payments: PaymentPeriodRepository = Depends(get_payment_repository)):
    """All rent payments for a tenant in due date order"""
    return PaymentsResponse(
        tenant_id=tenant_id,
        payments=[payment_schema(p) for p in payments.get_payments_for_tenant(tenant_id)],
    )


@router.get("/tenants/{tenant_id}/rent-status", response_model=RentStatusResponse)
def get_rent_status(
    tenant_id: str,
    payments: PaymentPeriodRepository = Depends(get_payment_repository),
    tenants: TenantRepository = Depends(get_tenant_repository),
):
    """
    Classify the tenant's current billing period as current or overdue.

    Returns:
        404 if the tenant has no lease on record
    """
    lease = tenants.get_lease(tenant_id)
    if lease is None:
        raise HTTPException(status_code=404, detail="Lease not found")

    result = calculate_rent_status(
        payments,
        lease.tenant_id,
        lease.rent_due_day,
        lease.monthly_rent,
        lease.lease_start,
        lease.lease_end,
    )
    record_rent_status(result.status.value)

    return RentStatusResponse(
        tenant_id=tenant_id,
        status=result.status,
        days_overdue=result.days_overdue,
        current_payment=payment_schema(result.current_payment) if result.current_payment else None,
    )


@router.get("/tenants/{tenant_id}/cash-flow", response_model=CashFlowResponse)
def get_cash_flow(
    tenant_id: str,
    start_date: Optional[date] = Query(None, description="First due date to include (default today)"),
    end_date: Optional[date] = Query(None, description="Last due date to include"),
    payments: PaymentPeriodRepository = Depends(get_payment_repository),
):
    """Scheduled rent from start_date onwards"""
    items = calculate_future_cash_flow(payments, tenant_id, start_date, end_date)

    return CashFlowResponse(
        tenant_id=tenant_id,
        items=[
            CashFlowItemSchema(
                period_start=item.period_start,
                period_end=item.period_end,
                due_date=item.due_date,
                amount=item.amount,
                status=item.status,
            )
            for item in items
        ],
        outstanding_total=outstanding_total(items),
    )
