"""Domain models - immutable dataclasses representing rent scheduling entities"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class PaymentFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"  # reserved
    ANNUAL = "annual"  # reserved


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class RentStatus(str, Enum):
    CURRENT = "current"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class Lease:
    """Occupancy agreement a payment schedule is generated from"""

    tenant_id: str
    property_id: str
    lease_start: date
    lease_end: date  # exclusive
    monthly_rent: Decimal
    rent_due_day: int = 1
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY


@dataclass(frozen=True)
class ProRation:
    amount: Decimal
    days: int


@dataclass(frozen=True)
class BillingPeriod:
    """One rent-collection interval within a lease"""

    period_start: date
    period_end: date  # exclusive
    due_date: date
    amount_due: Decimal
    is_pro_rated: bool
    pro_rate_days: Optional[int] = None


@dataclass(frozen=True)
class RentPayment:
    """Persisted billing period with its payment lifecycle"""

    id: str
    tenant_id: str
    property_id: str
    period_start: date
    period_end: date
    due_date: date
    amount_due: Decimal
    status: PaymentStatus
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    is_pro_rated: bool = False
    pro_rate_days: Optional[int] = None
    amount_paid: Optional[Decimal] = None
    payment_date: Optional[date] = None
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    notes: Optional[str] = None
    invoice_number: Optional[str] = None
    invoice_generated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class RentStatusResult:
    status: RentStatus
    days_overdue: Optional[int] = None
    current_payment: Optional[RentPayment] = None


@dataclass(frozen=True)
class CashFlowItem:
    """Scheduled rent receipt used for forecasting"""

    period_start: date
    period_end: date
    due_date: date
    amount: Decimal
    status: PaymentStatus


@dataclass(frozen=True)
class InvoiceSource:
    """Payment joined with the tenant name and property address"""

    payment: RentPayment
    tenant_name: str
    property_address: str


@dataclass(frozen=True)
class Invoice:
    invoice_number: str
    tenant_name: str
    property_address: str
    period_start: date
    period_end: date
    amount_due: Decimal
    due_date: date
    is_pro_rated: bool
    created_at: datetime
