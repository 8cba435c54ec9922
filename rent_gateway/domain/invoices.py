"""Invoice number allocation and invoice generation for rent payments"""

import logging
from datetime import datetime, timezone
from typing import Optional

from rent_gateway.domain.gateway import PaymentPeriodGateway
from rent_gateway.domain.models import Invoice

logger = logging.getLogger(__name__)

# Concurrent allocations can race to the same number; the store rejects the loser
MAX_ALLOCATION_ATTEMPTS = 2


class InvoiceNumberAllocator:
    """
    Builds invoice numbers of the form INV-{YYYY}{MM}-{tenant[:8]}-{seq}.

    YYYY/MM come from the issue date, not the billing period. The sequence
    continues from the highest number already issued under the same stem,
    so numbers never repeat within a tenant and month.
    """

    def __init__(self, prefix: str = "INV", sequence_width: int = 3):
        self.prefix = prefix
        self.sequence_width = sequence_width

    def stem(self, tenant_id: str, issued_at: datetime) -> str:
        return f"{self.prefix}-{issued_at.year}{issued_at.month:02d}-{str(tenant_id)[:8]}-"

    def allocate(self, tenant_id: str, issued_at: datetime, last_sequence: int) -> str:
        return f"{self.stem(tenant_id, issued_at)}{last_sequence + 1:0{self.sequence_width}d}"

    @staticmethod
    def parse_sequence(invoice_number: str) -> Optional[int]:
        """Trailing sequence of an invoice number, or None if it has none"""
        _, _, tail = invoice_number.rpartition("-")
        return int(tail) if tail.isdigit() else None


def generate_invoice(
    gateway: PaymentPeriodGateway,
    payment_id: str,
    allocator: Optional[InvoiceNumberAllocator] = None,
    now: Optional[datetime] = None,
) -> Optional[Invoice]:
    """
    Allocate an invoice number for a payment and stamp it on the payment row.

    Calling twice re-stamps the row with a fresh number.

    Returns:
        The invoice, or None when the payment is missing or stamping fails
    """
    allocator = allocator or InvoiceNumberAllocator()
    issued_at = now or datetime.now(timezone.utc)

    source = gateway.fetch_payment_for_invoice(payment_id)
    if source is None:
        logger.info("Invoice requested for unknown payment", extra={"payment_id": payment_id})
        return None

    payment = source.payment
    stem = allocator.stem(payment.tenant_id, issued_at)

    invoice_number = None
    for attempt in range(MAX_ALLOCATION_ATTEMPTS):
        candidate = allocator.allocate(payment.tenant_id, issued_at, gateway.last_invoice_sequence(stem))
        if gateway.stamp_invoice(payment_id, candidate, issued_at):
            invoice_number = candidate
            break
        logger.warning(
            "Invoice number stamp rejected",
            extra={"payment_id": payment_id, "invoice_number": candidate, "attempt": attempt + 1},
        )

    if invoice_number is None:
        logger.error("Could not stamp invoice number", extra={"payment_id": payment_id})
        return None

    return Invoice(
        invoice_number=invoice_number,
        tenant_name=source.tenant_name,
        property_address=source.property_address,
        period_start=payment.period_start,
        period_end=payment.period_end,
        amount_due=payment.amount_due,
        due_date=payment.due_date,
        is_pro_rated=payment.is_pro_rated,
        created_at=issued_at,
    )
