"""Integration tests for API endpoints"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from fastapi.testclient import TestClient
from rent_gateway.infrastructure.database.models import Tenant

TENANT_ID = "7f3c2a91-5b4e-4d2a-9c1e-0a8b6d4f2e13"
PROPERTY_ID = "c1d2e3f4-0000-4000-8000-000000000001"


def lease_body(lease_start: date, months: int = 12, **overrides) -> dict:
    body = {
        "tenant_id": TENANT_ID,
        "property_id": PROPERTY_ID,
        "lease_start": lease_start.isoformat(),
        "lease_end": (lease_start + timedelta(days=30 * months)).isoformat(),
        "monthly_rent": "1200.00",
        "rent_due_day": lease_start.day,
    }
    body.update(overrides)
    return body


@pytest.fixture
def scheduled_from_yesterday(client: TestClient, tenant: Tenant) -> dict:
    """Lease whose first period fell due yesterday and is unpaid"""
    yesterday = date.today() - timedelta(days=1)
    response = client.post("/v1/leases", json=lease_body(yesterday, rent_due_day=min(yesterday.day, 28)))
    assert response.status_code == 201
    return response.json()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"


def test_preview_schedule(client: TestClient):
    """Test POST /v1/leases/preview generates without persisting"""
    response = client.post(
        "/v1/leases/preview",
        json={
            "tenant_id": TENANT_ID,
            "property_id": PROPERTY_ID,
            "lease_start": "2024-06-10",
            "lease_end": "2024-06-20",
            "monthly_rent": "900",
            "rent_due_day": 1,
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["persisted"] is False
    assert len(data["periods"]) == 1
    period = data["periods"][0]
    assert period["period_start"] == "2024-06-10"
    assert period["period_end"] == "2024-06-20"
    assert period["is_pro_rated"] is True
    assert period["pro_rate_days"] == 10
    assert Decimal(period["amount_due"]) == Decimal("300.00")
    assert Decimal(data["total_due"]) == Decimal("300.00")


def test_preview_rejects_inverted_lease(client: TestClient):
    response = client.post(
        "/v1/leases/preview",
        json=lease_body(date(2024, 6, 1), lease_end="2024-05-01"),
    )
    assert response.status_code == 422


def test_preview_rejects_quarterly(client: TestClient):
    response = client.post(
        "/v1/leases/preview",
        json=lease_body(date(2024, 6, 1), payment_frequency="quarterly"),
    )
    assert response.status_code == 422


def test_create_lease_schedule(client: TestClient, tenant: Tenant):
    """Test POST /v1/leases persists periods for the tenant"""
    response = client.post("/v1/leases", json=lease_body(date(2024, 1, 1), lease_end="2025-01-01"))

    assert response.status_code == 201
    data = response.json()
    assert data["persisted"] is True
    assert len(data["periods"]) == 12
    assert Decimal(data["total_due"]) == Decimal("14400.00")

    payments = client.get(f"/v1/tenants/{TENANT_ID}/payments").json()["payments"]
    assert len(payments) == 12
    assert all(p["status"] == "pending" for p in payments)
    assert payments[0]["due_date"] == "2024-01-01"


def test_create_lease_twice_conflicts(client: TestClient, tenant: Tenant):
    body = lease_body(date(2024, 1, 1))
    assert client.post("/v1/leases", json=body).status_code == 201

    response = client.post("/v1/leases", json=body)
    assert response.status_code == 409


def test_create_lease_unknown_tenant(client: TestClient):
    response = client.post("/v1/leases", json=lease_body(date(2024, 1, 1)))
    assert response.status_code == 404


def test_rent_status_overdue(client: TestClient, scheduled_from_yesterday: dict):
    """Test an unpaid period due yesterday is one day overdue"""
    response = client.get(f"/v1/tenants/{TENANT_ID}/rent-status")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "overdue"
    assert data["days_overdue"] == 1
    assert data["current_payment"]["status"] == "pending"


def test_rent_status_due_today(client: TestClient, tenant: Tenant):
    today = date.today()
    client.post("/v1/leases", json=lease_body(today, rent_due_day=min(today.day, 28)))

    data = client.get(f"/v1/tenants/{TENANT_ID}/rent-status").json()

    assert data["status"] == "current"
    assert data["days_overdue"] is None


def test_rent_status_without_lease(client: TestClient, tenant: Tenant):
    response = client.get(f"/v1/tenants/{TENANT_ID}/rent-status")
    assert response.status_code == 404


def test_rent_status_is_repeatable(client: TestClient, scheduled_from_yesterday: dict):
    first = client.get(f"/v1/tenants/{TENANT_ID}/rent-status").json()
    second = client.get(f"/v1/tenants/{TENANT_ID}/rent-status").json()
    assert first == second


def test_record_payment_clears_overdue(client: TestClient, scheduled_from_yesterday: dict):
    """Test recording the overdue payment makes the tenant current"""
    payment = client.get(f"/v1/tenants/{TENANT_ID}/rent-status").json()["current_payment"]

    response = client.post(
        f"/v1/payments/{payment['id']}/record",
        json={
            "amount_paid": payment["amount_due"],
            "payment_date": date.today().isoformat(),
            "payment_method": "bank_transfer",
        },
    )
    assert response.status_code == 200
    assert response.json()["status"] == "paid"

    status_data = client.get(f"/v1/tenants/{TENANT_ID}/rent-status").json()
    assert status_data["status"] == "current"
    assert status_data["current_payment"]["status"] == "paid"

    again = client.post(
        f"/v1/payments/{payment['id']}/record",
        json={"amount_paid": "10.00", "payment_date": date.today().isoformat()},
    )
    assert again.status_code == 409


def test_record_payment_validates_amount(client: TestClient):
    response = client.post(
        "/v1/payments/00000000-0000-0000-0000-000000000000/record",
        json={"amount_paid": "0", "payment_date": "2024-01-01"},
    )
    assert response.status_code == 422


def test_cash_flow(client: TestClient, tenant: Tenant):
    """Test GET /v1/tenants/{id}/cash-flow over an explicit range"""
    client.post("/v1/leases", json=lease_body(date(2024, 1, 1), lease_end="2025-01-01"))

    response = client.get(
        f"/v1/tenants/{TENANT_ID}/cash-flow",
        params={"start_date": "2024-10-01", "end_date": "2024-12-31"},
    )

    assert response.status_code == 200
    data = response.json()
    assert [item["due_date"] for item in data["items"]] == ["2024-10-01", "2024-11-01", "2024-12-01"]
    assert Decimal(data["outstanding_total"]) == Decimal("3600.00")


def test_cash_flow_without_schedule(client: TestClient):
    data = client.get(f"/v1/tenants/{TENANT_ID}/cash-flow").json()

    assert data["items"] == []
    assert Decimal(data["outstanding_total"]) == Decimal("0")


def test_create_invoice(client: TestClient, tenant: Tenant):
    """Test POST /v1/payments/{id}/invoice issues sequential numbers"""
    client.post("/v1/leases", json=lease_body(date(2024, 1, 1), lease_end="2025-01-01"))
    payments = client.get(f"/v1/tenants/{TENANT_ID}/payments").json()["payments"]

    first = client.post(f"/v1/payments/{payments[0]['id']}/invoice")
    second = client.post(f"/v1/payments/{payments[1]['id']}/invoice")

    assert first.status_code == 201
    assert second.status_code == 201
    first_data, second_data = first.json(), second.json()
    stem = f"INV-{date.today():%Y%m}-7f3c2a91-"
    assert first_data["invoice_number"] == f"{stem}001"
    assert second_data["invoice_number"] == f"{stem}002"
    assert first_data["tenant_name"] == "Alex Morgan"
    assert first_data["property_address"] == "12 Harbour Street, Leith"
    assert first_data["period_start"] == "2024-01-01"

    stamped = client.get(f"/v1/tenants/{TENANT_ID}/payments").json()["payments"][0]
    assert stamped["invoice_number"] == first_data["invoice_number"]


def test_create_invoice_not_found(client: TestClient, tenant: Tenant):
    response = client.post("/v1/payments/00000000-0000-0000-0000-000000000000/invoice")
    assert response.status_code == 404


def test_metrics_endpoint(client: TestClient, tenant: Tenant):
    """Test Prometheus metrics endpoint exposes rent metrics"""
    client.post("/v1/leases", json=lease_body(date(2024, 1, 1)))

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "rent_periods_generated_total" in response.text


def test_create_lease_survives_transient_commit_error(client: TestClient, tenant: Tenant, db, flaky_commit):
    """Test a retried schedule write keeps the lease terms with the periods"""
    flaky_commit(1)

    response = client.post("/v1/leases", json=lease_body(date(2024, 1, 1), lease_end="2025-01-01"))
    assert response.status_code == 201

    db.refresh(tenant)
    assert tenant.lease_start == date(2024, 1, 1)
    assert tenant.lease_end == date(2025, 1, 1)
    assert tenant.monthly_rent == Decimal("1200.00")
    assert len(client.get(f"/v1/tenants/{TENANT_ID}/payments").json()["payments"]) == 12
    assert client.get(f"/v1/tenants/{TENANT_ID}/rent-status").status_code == 200


def test_create_lease_write_failure_saves_nothing(client: TestClient, tenant: Tenant, db, flaky_commit):
    """Test a schedule write that keeps failing answers 503 and leaves no lease behind"""
    flaky_commit(10)

    response = client.post("/v1/leases", json=lease_body(date(2024, 1, 1)))
    assert response.status_code == 503

    db.refresh(tenant)
    assert tenant.lease_start is None
    assert client.get(f"/v1/tenants/{TENANT_ID}/payments").json()["payments"] == []


def test_record_payment_unknown_id(client: TestClient, tenant: Tenant):
    response = client.post(
        "/v1/payments/00000000-0000-0000-0000-000000000000/record",
        json={"amount_paid": "100.00", "payment_date": "2024-01-01"},
    )
    assert response.status_code == 404


def test_record_payment_write_failure(client: TestClient, tenant: Tenant, flaky_commit):
    """Test a payment write that keeps failing answers 503 and stays pending"""
    client.post("/v1/leases", json=lease_body(date(2024, 1, 1)))
    payment_id = client.get(f"/v1/tenants/{TENANT_ID}/payments").json()["payments"][0]["id"]
    flaky_commit(10)

    response = client.post(
        f"/v1/payments/{payment_id}/record",
        json={"amount_paid": "1200.00", "payment_date": "2024-01-01"},
    )
    assert response.status_code == 503

    payment = client.get(f"/v1/tenants/{TENANT_ID}/payments").json()["payments"][0]
    assert payment["status"] == "pending"


def test_rent_status_with_unreadable_lease_data(client: TestClient, tenant: Tenant, db):
    """Test a malformed lease date in tenant data reads as no lease"""
    tenant.tenant_data = {"lease_start_date": "01/03/2024", "lease_end_date": "2025-03-01", "monthly_rent": 950}
    db.commit()

    response = client.get(f"/v1/tenants/{TENANT_ID}/rent-status")
    assert response.status_code == 404
