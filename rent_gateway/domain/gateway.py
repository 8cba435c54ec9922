"""Persistence boundary the rent engine talks to"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol, Sequence

from rent_gateway.domain.models import BillingPeriod, InvoiceSource, PaymentFrequency, RentPayment


class StoreCapability(str, Enum):
    """Whether the rent payment store exists in the backing database"""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class RecordOutcome(str, Enum):
    """Result of marking a payment as paid"""

    RECORDED = "recorded"
    NOT_FOUND = "not_found"
    ALREADY_PAID = "already_paid"
    FAILED = "failed"


class PaymentPeriodGateway(Protocol):
    """
    Storage operations for rent payment periods.

    Read methods return empty results when the store is unavailable.
    Write methods report failure as False instead of raising.
    """

    def capability(self) -> StoreCapability: ...

    def insert_periods(
        self,
        tenant_id: str,
        property_id: str,
        periods: Sequence[BillingPeriod],
        frequency: PaymentFrequency = PaymentFrequency.MONTHLY,
        prepare: Optional[Callable[[], Any]] = None,
    ) -> bool: ...

    def get_payments_for_tenant(self, tenant_id: str) -> List[RentPayment]: ...

    def get_current_period_payment(self, tenant_id: str, today: Optional[date] = None) -> Optional[RentPayment]: ...

    def record_payment(
        self,
        payment_id: str,
        amount_paid: Decimal,
        payment_date: date,
        payment_method: Optional[str] = None,
        payment_reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> bool: ...

    def record_payment_outcome(
        self,
        payment_id: str,
        amount_paid: Decimal,
        payment_date: date,
        payment_method: Optional[str] = None,
        payment_reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> RecordOutcome: ...

    def query_future_cash_flow(
        self, tenant_id: str, from_date: date, to_date: Optional[date] = None
    ) -> List[RentPayment]: ...

    def fetch_payment_for_invoice(self, payment_id: str) -> Optional[InvoiceSource]: ...

    def last_invoice_sequence(self, stem: str) -> int: ...

    def stamp_invoice(self, payment_id: str, invoice_number: str, generated_at: datetime) -> bool: ...
