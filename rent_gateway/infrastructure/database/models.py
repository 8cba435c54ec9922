"""SQLAlchemy ORM models for tenants, properties and rent payment periods"""

import uuid
from sqlalchemy import (
    Column,
    String,
    Boolean,
    Numeric,
    DateTime,
    Date,
    Integer,
    ForeignKey,
    Text,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class Property(Base):
    """Rental property (owned by the property management tier)"""

    __tablename__ = "property"

    id = Column(Text, primary_key=True, default=_new_id)
    address = Column(Text, nullable=False)
    property_data = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    tenants = relationship("Tenant", back_populates="property")


class Tenant(Base):
    """Tenant with lease terms, partly in typed columns and partly in tenant_data"""

    __tablename__ = "tenant"

    id = Column(Text, primary_key=True, default=_new_id)
    name = Column(Text, nullable=False)
    property_id = Column(Text, ForeignKey("property.id"), nullable=True, index=True)
    lease_start = Column(Date, nullable=True)
    lease_end = Column(Date, nullable=True)
    monthly_rent = Column(Numeric(12, 2), nullable=True)
    rent_due_day = Column(Integer, nullable=True)
    tenant_data = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    property = relationship("Property", back_populates="tenants")
    payments = relationship("RentPayment", back_populates="tenant")


class RentPayment(Base):
    """Billing period with its payment lifecycle (pending -> paid)"""

    __tablename__ = "rent_payment"
    __table_args__ = (
        # Regenerating a schedule must not duplicate periods
        UniqueConstraint("tenant_id", "period_start", name="uq_rent_payment_tenant_period"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Text, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False, index=True)
    property_id = Column(Text, ForeignKey("property.id"), nullable=False)
    payment_frequency = Column(String(16), nullable=False, default="monthly")
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    amount_due = Column(Numeric(12, 2), nullable=False)
    is_pro_rated = Column(Boolean, nullable=False, default=False)
    pro_rate_days = Column(Integer, nullable=True)
    status = Column(String(16), nullable=False, default="pending")
    amount_paid = Column(Numeric(12, 2), nullable=True)
    payment_date = Column(Date, nullable=True)
    payment_method = Column(Text, nullable=True)
    payment_reference = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    invoice_number = Column(Text, nullable=True, unique=True)
    invoice_generated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    tenant = relationship("Tenant", back_populates="payments")
    property = relationship("Property")
