"""Data access layer for tenants, leases and rent payment periods"""

import logging
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rent_gateway.config import settings
from rent_gateway.domain.gateway import RecordOutcome, StoreCapability
from rent_gateway.domain.invoices import InvoiceNumberAllocator
from rent_gateway.domain.models import (
    BillingPeriod,
    InvoiceSource,
    Lease,
    PaymentFrequency,
    PaymentStatus,
    RentPayment,
)
from rent_gateway.infrastructure.database.models import Property, Tenant, RentPayment as RentPaymentRow
from rent_gateway.infrastructure.database.retry import run_with_retry
from rent_gateway.infrastructure.observability.metrics import store_unavailable_counter, write_failure_counter
from rent_gateway.utils.date_utils import month_bounds

T = TypeVar("T")

# Capability per database URL, kept for the process lifetime
_capability_cache: Dict[str, StoreCapability] = {}


def reset_capability_cache() -> None:
    """Forget probed capabilities (call after reconfiguring the database)"""
    _capability_cache.clear()


def _as_uuid(value: Any) -> Optional[uuid.UUID]:
    try:
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
    except ValueError:
        return None


def _to_rent_payment(row: RentPaymentRow) -> RentPayment:
    return RentPayment(
        id=str(row.id),
        tenant_id=row.tenant_id,
        property_id=row.property_id,
        period_start=row.period_start,
        period_end=row.period_end,
        due_date=row.due_date,
        amount_due=Decimal(row.amount_due),
        status=PaymentStatus(row.status),
        payment_frequency=PaymentFrequency(row.payment_frequency),
        is_pro_rated=bool(row.is_pro_rated),
        pro_rate_days=row.pro_rate_days,
        amount_paid=Decimal(row.amount_paid) if row.amount_paid is not None else None,
        payment_date=row.payment_date,
        payment_method=row.payment_method,
        payment_reference=row.payment_reference,
        notes=row.notes,
        invoice_number=row.invoice_number,
        invoice_generated_at=row.invoice_generated_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class PaymentPeriodRepository:
    """
    Repository for rent payment periods.

    Reads degrade to empty results when the store is missing or failing.
    Writes are retried on transient errors and report failure as False.
    """

    def __init__(self, db: Session):
        self.db = db

    # -- capability --

    def capability(self) -> StoreCapability:
        """Probe once per database whether the rent payment table exists"""
        bind = self.db.get_bind()
        key = str(bind.engine.url)
        cached = _capability_cache.get(key)
        if cached is not None:
            return cached

        try:
            exists = inspect(bind).has_table(RentPaymentRow.__tablename__)
        except SQLAlchemyError as e:
            # Connection problems are not a definitive answer, so don't cache
            logging.error(f"Payment store capability probe failed: {e}")
            return StoreCapability.UNAVAILABLE

        capability = StoreCapability.AVAILABLE if exists else StoreCapability.UNAVAILABLE
        _capability_cache[key] = capability
        return capability

    def _available(self, operation: str) -> bool:
        if self.capability() is StoreCapability.AVAILABLE:
            return True
        store_unavailable_counter.labels(operation=operation).inc()
        logging.info("Payment store unavailable", extra={"operation": operation})
        return False

    def _read(self, operation: str, query: Callable[[], T], default: T, **context: Any) -> T:
        if not self._available(operation):
            return default
        try:
            return query()
        except SQLAlchemyError as e:
            self.db.rollback()
            logging.error(f"Payment store read {operation} failed: {e}", extra={"operation": operation, **context})
            return default

    def _write(self, operation: str, statement: Callable[[], T], **context: Any) -> Optional[T]:
        if not self._available(operation):
            write_failure_counter.labels(operation=operation).inc()
            return None
        try:
            return run_with_retry(statement, operation, on_retry=self.db.rollback)
        except SQLAlchemyError as e:
            self.db.rollback()
            write_failure_counter.labels(operation=operation).inc()
            logging.error(f"Payment store write {operation} failed: {e}", extra={"operation": operation, **context})
            return None

    # -- writes --

    def insert_periods(
        self,
        tenant_id: str,
        property_id: str,
        periods: Sequence[BillingPeriod],
        frequency: PaymentFrequency = PaymentFrequency.MONTHLY,
        prepare: Optional[Callable[[], Any]] = None,
    ) -> bool:
        """
        Insert generated periods as pending payments, in chronological order.

        prepare stages related changes (e.g. lease terms) in the same session.
        It runs again on every attempt, so a retry commits the whole unit.
        """
        if not periods and prepare is None:
            return True

        def insert() -> bool:
            if prepare is not None:
                prepare()
            self.db.add_all(
                [
                    RentPaymentRow(
                        tenant_id=tenant_id,
                        property_id=property_id,
                        payment_frequency=PaymentFrequency(frequency).value,
                        period_start=period.period_start,
                        period_end=period.period_end,
                        due_date=period.due_date,
                        amount_due=period.amount_due,
                        is_pro_rated=period.is_pro_rated,
                        pro_rate_days=period.pro_rate_days,
                        status=PaymentStatus.PENDING.value,
                    )
                    for period in sorted(periods, key=lambda p: p.period_start)
                ]
            )
            self.db.commit()
            return True

        return bool(self._write("insert_periods", insert, tenant_id=tenant_id))

    def record_payment(
        self,
        payment_id: str,
        amount_paid: Decimal,
        payment_date: date,
        payment_method: Optional[str] = None,
        payment_reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> bool:
        """Mark a pending payment as paid; paid rows are never updated again"""
        outcome = self.record_payment_outcome(
            payment_id, amount_paid, payment_date, payment_method, payment_reference, notes
        )
        return outcome is RecordOutcome.RECORDED

    def record_payment_outcome(
        self,
        payment_id: str,
        amount_paid: Decimal,
        payment_date: date,
        payment_method: Optional[str] = None,
        payment_reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> RecordOutcome:
        """
        Mark a pending payment as paid and say what happened.

        Returns:
            RECORDED, NOT_FOUND (unknown id), ALREADY_PAID, or FAILED when
            the store is unavailable or the write gave up
        """
        payment_uuid = _as_uuid(payment_id)
        if payment_uuid is None:
            return RecordOutcome.NOT_FOUND

        def update() -> RecordOutcome:
            updated = (
                self.db.query(RentPaymentRow)
                .filter(
                    RentPaymentRow.id == payment_uuid,
                    RentPaymentRow.status == PaymentStatus.PENDING.value,
                )
                .update(
                    {
                        RentPaymentRow.amount_paid: amount_paid,
                        RentPaymentRow.payment_date: payment_date,
                        RentPaymentRow.payment_method: payment_method or None,
                        RentPaymentRow.payment_reference: payment_reference or None,
                        RentPaymentRow.notes: notes or None,
                        RentPaymentRow.status: PaymentStatus.PAID.value,
                        RentPaymentRow.updated_at: datetime.now(timezone.utc),
                    },
                    synchronize_session=False,
                )
            )
            self.db.commit()
            if updated:
                return RecordOutcome.RECORDED
            exists = self.db.query(RentPaymentRow.id).filter(RentPaymentRow.id == payment_uuid).first()
            return RecordOutcome.ALREADY_PAID if exists is not None else RecordOutcome.NOT_FOUND

        outcome = self._write("record_payment", update, payment_id=str(payment_id))
        if outcome is None:
            return RecordOutcome.FAILED
        if outcome is not RecordOutcome.RECORDED:
            logging.info(
                "No pending payment to record",
                extra={"payment_id": str(payment_id), "outcome": outcome.value},
            )
        return outcome

    def stamp_invoice(self, payment_id: str, invoice_number: str, generated_at: datetime) -> bool:
        """Write the invoice number onto a payment row (overwrites any previous one)"""
        payment_uuid = _as_uuid(payment_id)
        if payment_uuid is None:
            return False

        def update() -> int:
            updated = (
                self.db.query(RentPaymentRow)
                .filter(RentPaymentRow.id == payment_uuid)
                .update(
                    {
                        RentPaymentRow.invoice_number: invoice_number,
                        RentPaymentRow.invoice_generated_at: generated_at,
                        RentPaymentRow.updated_at: datetime.now(timezone.utc),
                    },
                    synchronize_session=False,
                )
            )
            self.db.commit()
            return updated

        return bool(self._write("stamp_invoice", update, payment_id=str(payment_id)))

    # -- reads --

    def has_periods(self, tenant_id: str) -> bool:
        return self._read(
            "has_periods",
            lambda: self.db.query(RentPaymentRow.id).filter(RentPaymentRow.tenant_id == tenant_id).first() is not None,
            False,
            tenant_id=tenant_id,
        )

    def get_payments_for_tenant(self, tenant_id: str) -> List[RentPayment]:
        """All payments for a tenant, ascending by due date"""

        def query() -> List[RentPayment]:
            rows = (
                self.db.query(RentPaymentRow)
                .filter(RentPaymentRow.tenant_id == tenant_id)
                .order_by(RentPaymentRow.due_date.asc())
                .all()
            )
            return [_to_rent_payment(row) for row in rows]

        return self._read("get_payments_for_tenant", query, [], tenant_id=tenant_id)

    def get_current_period_payment(self, tenant_id: str, today: Optional[date] = None) -> Optional[RentPayment]:
        """
        Payment for the period active in today's calendar month.

        Among periods overlapping the month, the latest one already due wins;
        if none is due yet, the earliest upcoming one is returned.
        """
        today = today or date.today()
        first_day, last_day = month_bounds(today)

        def query() -> Optional[RentPayment]:
            rows = (
                self.db.query(RentPaymentRow)
                .filter(
                    RentPaymentRow.tenant_id == tenant_id,
                    RentPaymentRow.period_start <= last_day,
                    RentPaymentRow.period_end > first_day,
                )
                .order_by(RentPaymentRow.due_date.desc())
                .all()
            )
            if not rows:
                return None
            due = [row for row in rows if row.due_date <= today]
            return _to_rent_payment(due[0] if due else rows[-1])

        return self._read("get_current_period_payment", query, None, tenant_id=tenant_id)

    def query_future_cash_flow(
        self, tenant_id: str, from_date: date, to_date: Optional[date] = None
    ) -> List[RentPayment]:
        """Payments due within [from_date, to_date], ascending by due date"""

        def query() -> List[RentPayment]:
            q = self.db.query(RentPaymentRow).filter(
                RentPaymentRow.tenant_id == tenant_id,
                RentPaymentRow.due_date >= from_date,
            )
            if to_date is not None:
                q = q.filter(RentPaymentRow.due_date <= to_date)
            return [_to_rent_payment(row) for row in q.order_by(RentPaymentRow.due_date.asc()).all()]

        return self._read("query_future_cash_flow", query, [], tenant_id=tenant_id)

    def fetch_payment_for_invoice(self, payment_id: str) -> Optional[InvoiceSource]:
        """Payment joined with tenant name and property address"""
        payment_uuid = _as_uuid(payment_id)
        if payment_uuid is None:
            return None

        def query() -> Optional[InvoiceSource]:
            result = (
                self.db.query(RentPaymentRow, Tenant.name, Property.address)
                .join(Tenant, Tenant.id == RentPaymentRow.tenant_id)
                .join(Property, Property.id == RentPaymentRow.property_id)
                .filter(RentPaymentRow.id == payment_uuid)
                .first()
            )
            if result is None:
                return None
            row, tenant_name, property_address = result
            return InvoiceSource(
                payment=_to_rent_payment(row),
                tenant_name=tenant_name,
                property_address=property_address,
            )

        return self._read("fetch_payment_for_invoice", query, None, payment_id=str(payment_id))

    def last_invoice_sequence(self, stem: str) -> int:
        """Highest sequence already issued under an invoice number stem, 0 if none"""

        def query() -> int:
            numbers = (
                self.db.query(RentPaymentRow.invoice_number)
                .filter(RentPaymentRow.invoice_number.startswith(stem, autoescape=True))
                .all()
            )
            sequences = [InvoiceNumberAllocator.parse_sequence(number) for (number,) in numbers]
            return max((s for s in sequences if s is not None), default=0)

        return self._read("last_invoice_sequence", query, 0)


class TenantRepository:
    """Repository for tenant lease terms"""

    def __init__(self, db: Session):
        self.db = db

    def get_tenant(self, tenant_id: str) -> Optional[Tenant]:
        return self.db.query(Tenant).filter(Tenant.id == tenant_id).first()

    def get_lease(self, tenant_id: str) -> Optional[Lease]:
        """
        Build the tenant's lease from typed columns, falling back to the
        tenant_data document for fields the columns don't hold.

        Returns None when the tenant is unknown, has no lease dates, or its
        lease fields can't be read.
        """
        try:
            tenant = self.get_tenant(tenant_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logging.error(f"Tenant lookup failed: {e}", extra={"tenant_id": tenant_id})
            return None
        if tenant is None:
            return None

        data = tenant.tenant_data or {}
        lease_start = tenant.lease_start or _parse_date(data.get("lease_start_date"), "lease_start_date", tenant_id)
        lease_end = tenant.lease_end or _parse_date(data.get("lease_end_date"), "lease_end_date", tenant_id)
        property_id = tenant.property_id or data.get("property_id")
        if lease_start is None or lease_end is None or property_id is None:
            return None

        if tenant.monthly_rent is not None:
            monthly_rent = Decimal(tenant.monthly_rent)
        else:
            monthly_rent = _parse_decimal(data.get("monthly_rent") or 0, "monthly_rent", tenant_id)
            if monthly_rent is None:
                return None

        return Lease(
            tenant_id=tenant.id,
            property_id=property_id,
            lease_start=lease_start,
            lease_end=lease_end,
            monthly_rent=monthly_rent,
            rent_due_day=tenant.rent_due_day or settings.default_rent_due_day,
        )

    def save_lease_terms(self, lease: Lease) -> bool:
        """
        Stage lease terms on the tenant's typed columns.

        Nothing is committed here; the caller's commit persists the terms
        together with whatever else it writes.
        """
        tenant = self.get_tenant(lease.tenant_id)
        if tenant is None:
            return False

        tenant.property_id = lease.property_id
        tenant.lease_start = lease.lease_start
        tenant.lease_end = lease.lease_end
        tenant.monthly_rent = lease.monthly_rent
        tenant.rent_due_day = lease.rent_due_day
        return True


def _parse_date(value: Any, field: str, tenant_id: str) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logging.error(f"Unreadable {field} in tenant data: {value!r}", extra={"tenant_id": tenant_id})
        return None


def _parse_decimal(value: Any, field: str, tenant_id: str) -> Optional[Decimal]:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        logging.error(f"Unreadable {field} in tenant data: {value!r}", extra={"tenant_id": tenant_id})
        return None
