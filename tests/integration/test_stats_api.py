"""Integration tests for the admin dashboard statistics."""

from datetime import timedelta
from decimal import Decimal

import pytest
from libs.common.datetime_utils import utc_now
from services.reports_service.services.stats import month_keys
from services.store_service.models import OrderStatus, PaymentStatus
from tests.factories import OrderFactory, RechargeFactory
from tests.helpers import persist


@pytest.mark.unit
def test_month_keys_cross_year_boundary():
    now = utc_now().replace(year=2026, month=2, day=15)
    assert month_keys(now) == [
        "2025-09",
        "2025-10",
        "2025-11",
        "2025-12",
        "2026-01",
        "2026-02",
    ]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_dashboard_requires_admin(client, customer_headers):
    response = await client.get("/api/stats/admin", headers=customer_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_dashboard_empty_store(client, admin_headers):
    """GET /api/stats/admin: zeroes and six empty months on a fresh install."""
    response = await client.get("/api/stats/admin", headers=admin_headers)
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["stats"]["total_users"] == 1
    assert data["stats"]["total_sales"] == 0.0
    assert data["recent_orders"] == []
    assert data["top_products"] == []
    assert len(data["sales_by_month"]) == 6
    assert data["sales_by_month"][-1]["month"] == utc_now().strftime("%Y-%m")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_dashboard_counts_only_paid_sales(
    client, db_session, admin_headers, customer, affiliate, customer_headers, product
):
    """Refunded orders drop out of the sales figures."""
    placed = await client.post(
        "/api/orders",
        json={"items": [{"product_id": str(product.id), "quantity": 2}]},
        headers=customer_headers,
    )
    assert placed.status_code == 201, placed.text

    old = utc_now() - timedelta(days=400)
    await persist(
        db_session,
        OrderFactory.create(user_id=customer.id, total=Decimal("100.00"), created_at=old),
        OrderFactory.create(
            user_id=customer.id,
            total=Decimal("30.00"),
            status=OrderStatus.REFUNDED,
            payment_status=PaymentStatus.REFUNDED,
        ),
        RechargeFactory.create(user_id=customer.id),
    )

    response = await client.get("/api/stats/admin", headers=admin_headers)
    assert response.status_code == 200, response.text
    data = response.json()
    stats = data["stats"]
    assert stats["total_orders"] == 3
    assert stats["total_sales"] == 108.0
    assert stats["today_sales"] == 8.0
    assert stats["month_sales"] == 8.0
    assert stats["pending_recharges"] == 1
    assert stats["active_affiliates"] == 1
    assert data["sales_by_month"][-1]["amount"] == 8.0
    assert data["top_products"][0]["id"] == str(product.id)
    assert data["top_products"][0]["sold"] == 2
