"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from rent_gateway.domain.models import PaymentFrequency, PaymentStatus, RentStatus


class LeaseRequest(BaseModel):
    """Request body for POST /v1/leases and /v1/leases/preview"""

    tenant_id: str = Field(..., min_length=1, description="Tenant identifier")
    property_id: str = Field(..., min_length=1, description="Property identifier")
    lease_start: date
    lease_end: date = Field(..., description="Exclusive end of the lease")
    monthly_rent: Decimal = Field(..., ge=0, decimal_places=2)
    rent_due_day: int = Field(1, ge=1, le=31, description="Day of month rent is due")
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY


class BillingPeriodSchema(BaseModel):
    """Single generated billing period"""

    period_start: date
    period_end: date
    due_date: date
    amount_due: Decimal
    is_pro_rated: bool
    pro_rate_days: Optional[int] = None


class ScheduleResponse(BaseModel):
    """Response for lease schedule generation"""

    tenant_id: str
    periods: List[BillingPeriodSchema]
    total_due: Decimal
    persisted: bool


class RentPaymentSchema(BillingPeriodSchema):
    """Persisted period with payment details"""

    id: str
    status: PaymentStatus
    amount_paid: Optional[Decimal] = None
    payment_date: Optional[date] = None
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    notes: Optional[str] = None
    invoice_number: Optional[str] = None


class PaymentsResponse(BaseModel):
    """Response for GET /v1/tenants/{tenant_id}/payments"""

    tenant_id: str
    payments: List[RentPaymentSchema]


class RentStatusResponse(BaseModel):
    """Response for GET /v1/tenants/{tenant_id}/rent-status"""

    tenant_id: str
    status: RentStatus
    days_overdue: Optional[int] = None
    current_payment: Optional[RentPaymentSchema] = None


class CashFlowItemSchema(BaseModel):
    period_start: date
    period_end: date
    due_date: date
    amount: Decimal
    status: PaymentStatus


class CashFlowResponse(BaseModel):
    """Response for GET /v1/tenants/{tenant_id}/cash-flow"""

    tenant_id: str
    items: List[CashFlowItemSchema]
    outstanding_total: Decimal


class RecordPaymentRequest(BaseModel):
    """Request body for POST /v1/payments/{payment_id}/record"""

    amount_paid: Decimal = Field(..., gt=0, decimal_places=2)
    payment_date: date
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    notes: Optional[str] = None


class RecordPaymentResponse(BaseModel):
    payment_id: str
    status: PaymentStatus


class InvoiceResponse(BaseModel):
    """Response for POST /v1/payments/{payment_id}/invoice"""

    invoice_number: str
    tenant_name: str
    property_address: str
    period_start: date
    period_end: date
    amount_due: Decimal
    due_date: date
    is_pro_rated: bool
    created_at: datetime
