"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Dict, Generator, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session
from rent_gateway.api.main import create_app
from rent_gateway.config import settings
from rent_gateway.domain.gateway import StoreCapability
from rent_gateway.domain.models import InvoiceSource, PaymentStatus, RentPayment
from rent_gateway.infrastructure.database.models import Base, Property, Tenant
from rent_gateway.infrastructure.database.repositories import reset_capability_cache
from rent_gateway.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TENANT_ID = "7f3c2a91-5b4e-4d2a-9c1e-0a8b6d4f2e13"
PROPERTY_ID = "c1d2e3f4-0000-4000-8000-000000000001"


@pytest.fixture(autouse=True)
def fresh_capability_cache():
    """Each test checks payment store capability afresh"""
    reset_capability_cache()
    yield
    reset_capability_cache()


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def tenant(db: Session) -> Tenant:
    """Tenant in a property, without lease terms yet"""
    db.add(Property(id=PROPERTY_ID, address="12 Harbour Street, Leith"))
    row = Tenant(id=TENANT_ID, name="Alex Morgan", property_id=PROPERTY_ID)
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def flaky_commit(db: Session, monkeypatch) -> Callable[[int], None]:
    """Make the session's next N commits fail with a transient OperationalError"""
    monkeypatch.setattr(settings, "write_backoff_base", 0)
    real_commit = db.commit

    def _fail(times: int) -> None:
        remaining = [times]

        def commit():
            if remaining[0] > 0:
                remaining[0] -= 1
                raise OperationalError("COMMIT", {}, Exception("database is locked"))
            real_commit()

        monkeypatch.setattr(db, "commit", commit)

    return _fail


@pytest.fixture
def make_payment() -> Callable[..., RentPayment]:
    """Build RentPayment values with sensible defaults"""

    def _make(
        due_date: date,
        status: PaymentStatus = PaymentStatus.PENDING,
        payment_id: str = "5d0c9a1e-1111-4222-8333-444455556666",
        amount_due: Decimal = Decimal("1200.00"),
        period_end: Optional[date] = None,
    ) -> RentPayment:
        return RentPayment(
            id=payment_id,
            tenant_id=TENANT_ID,
            property_id=PROPERTY_ID,
            period_start=due_date,
            period_end=period_end or date(due_date.year + (due_date.month == 12), due_date.month % 12 + 1, 1),
            due_date=due_date,
            amount_due=amount_due,
            status=status,
        )

    return _make


class FakeGateway:
    """In-memory stand-in for PaymentPeriodRepository used by domain tests"""

    def __init__(self):
        self.current_payment: Optional[RentPayment] = None
        self.future: List[RentPayment] = []
        self.sources: Dict[str, InvoiceSource] = {}
        self.stamped: Dict[str, str] = {}
        self.rejected_stamps = 0
        self.fail_reads = False
        self.calls: List[tuple] = []

    def capability(self) -> StoreCapability:
        return StoreCapability.AVAILABLE

    def get_current_period_payment(self, tenant_id: str, today: Optional[date] = None) -> Optional[RentPayment]:
        self.calls.append(("get_current_period_payment", tenant_id, today))
        if self.fail_reads:
            raise RuntimeError("store offline")
        return self.current_payment

    def query_future_cash_flow(self, tenant_id: str, from_date: date, to_date: Optional[date] = None):
        self.calls.append(("query_future_cash_flow", tenant_id, from_date, to_date))
        if self.fail_reads:
            raise RuntimeError("store offline")
        return [p for p in self.future if p.due_date >= from_date and (to_date is None or p.due_date <= to_date)]

    def fetch_payment_for_invoice(self, payment_id: str) -> Optional[InvoiceSource]:
        return self.sources.get(payment_id)

    def last_invoice_sequence(self, stem: str) -> int:
        sequences = [int(n.rsplit("-", 1)[1]) for n in self.stamped.values() if n.startswith(stem)]
        return max(sequences, default=0)

    def stamp_invoice(self, payment_id: str, invoice_number: str, generated_at: datetime) -> bool:
        if self.rejected_stamps:
            self.rejected_stamps -= 1
            return False
        self.stamped[payment_id] = invoice_number
        return True


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()
