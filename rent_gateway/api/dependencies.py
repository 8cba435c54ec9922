"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from rent_gateway.config import settings
from rent_gateway.domain.invoices import InvoiceNumberAllocator
from rent_gateway.infrastructure.database.repositories import PaymentPeriodRepository, TenantRepository
from rent_gateway.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_payment_repository(db: Session = Depends(get_db)) -> PaymentPeriodRepository:
    """Provide the rent payment store for this request"""
    return PaymentPeriodRepository(db)


def get_tenant_repository(db: Session = Depends(get_db)) -> TenantRepository:
    return TenantRepository(db)


def get_invoice_allocator() -> InvoiceNumberAllocator:
    """Provide invoice number allocator with the configured prefix"""
    return InvoiceNumberAllocator(prefix=settings.invoice_prefix)
