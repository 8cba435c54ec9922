"""POST /v1/leases - Generate (and persist) a lease's rent schedule"""

import time
import logging
from decimal import Decimal
from fastapi import APIRouter, Depends, HTTPException, Request, status

from rent_gateway.api.v1.schemas import LeaseRequest, ScheduleResponse
from rent_gateway.api.v1.serializers import period_schemas
from rent_gateway.api.dependencies import get_payment_repository, get_request_id, get_tenant_repository
from rent_gateway.infrastructure.database.repositories import PaymentPeriodRepository, TenantRepository
from rent_gateway.domain.models import Lease
from rent_gateway.domain.periods import generate_lease_schedule
from rent_gateway.domain.exceptions import InvalidLeaseError, UnsupportedFrequencyError
from rent_gateway.infrastructure.observability.metrics import record_periods_generated
from rent_gateway.infrastructure.observability.logging import log_schedule_created

router = APIRouter()


def _lease_from_request(body: LeaseRequest) -> Lease:
    return Lease(
        tenant_id=body.tenant_id,
        property_id=body.property_id,
        lease_start=body.lease_start,
        lease_end=body.lease_end,
        monthly_rent=body.monthly_rent,
        rent_due_day=body.rent_due_day,
        payment_frequency=body.payment_frequency,
    )


def _schedule_or_422(lease: Lease):
    try:
        return generate_lease_schedule(lease)
    except (InvalidLeaseError, UnsupportedFrequencyError) as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/leases/preview", response_model=ScheduleResponse)
def preview_schedule(body: LeaseRequest):
    """Generate a lease's billing periods without saving them"""
    periods = _schedule_or_422(_lease_from_request(body))

    return ScheduleResponse(
        tenant_id=body.tenant_id,
        periods=period_schemas(periods),
        total_due=sum((p.amount_due for p in periods), Decimal("0.00")),
        persisted=False,
    )


@router.post("/leases", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
def create_lease_schedule(
    body: LeaseRequest,
    request: Request,
    payments: PaymentPeriodRepository = Depends(get_payment_repository),
    tenants: TenantRepository = Depends(get_tenant_repository),
):
    """
    Attach lease terms to a tenant and schedule its rent.

    Flow:
    1. Validate lease and generate billing periods
    2. Refuse if the tenant already has a schedule
    3. Check the tenant exists
    4. Store lease terms and insert periods in one commit
    """
    start_time = time.time()
    request_id = get_request_id(request)

    lease = _lease_from_request(body)
    periods = _schedule_or_422(lease)

    if payments.has_periods(lease.tenant_id):
        raise HTTPException(status_code=409, detail="Payment periods already exist for tenant")

    if tenants.get_tenant(lease.tenant_id) is None:
        raise HTTPException(status_code=404, detail="Tenant not found")

    saved = payments.insert_periods(
        lease.tenant_id,
        lease.property_id,
        periods,
        lease.payment_frequency,
        prepare=lambda: tenants.save_lease_terms(lease),
    )
    if not saved:
        logging.error("Could not save payment periods", extra={"request_id": request_id, "tenant_id": lease.tenant_id})
        raise HTTPException(status_code=503, detail="Could not save payment periods")

    record_periods_generated(periods)
    duration_ms = (time.time() - start_time) * 1000
    log_schedule_created(
        request_id,
        lease.tenant_id,
        len(periods),
        sum(1 for p in periods if p.is_pro_rated),
        duration_ms,
    )

    return ScheduleResponse(
        tenant_id=lease.tenant_id,
        periods=period_schemas(periods),
        total_due=sum((p.amount_due for p in periods), Decimal("0.00")),
        persisted=True,
    )
