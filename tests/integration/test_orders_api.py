"""Integration tests for checkout, order history and admin fulfillment."""

import uuid
from decimal import Decimal

import pytest
from libs.common.datetime_utils import utc_now
from services.store_service.models import (
    Commission,
    CommissionStatus,
    DeliveryType,
    Order,
)
from services.store_service.services import orders as order_service
from sqlalchemy import func, select
from tests.factories import OrderFactory, ProductAccountFactory, ProductFactory
from tests.helpers import auth_headers, persist


async def _checkout(client, headers, product, quantity=1):
    return await client.post(
        "/api/orders",
        json={"items": [{"product_id": str(product.id), "quantity": quantity}]},
        headers=headers,
    )


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_manual_checkout(client, db_session, customer, customer_headers, product):
    """POST /api/orders: wallet debited, order waits for manual delivery."""
    response = await _checkout(client, customer_headers, product, quantity=2)
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["order_number"].startswith("LFS-")
    assert data["total"] == 8.0
    assert data["status"] == "PROCESSING"
    assert data["payment_status"] == "PAID"
    assert data["items"][0]["quantity"] == 2
    assert data["items"][0]["delivered"] is False
    assert data["user"]["email"] == customer.email

    await db_session.refresh(customer)
    await db_session.refresh(product)
    assert customer.wallet == Decimal("42.00")
    assert product.stock == 8
    assert product.sold == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_automatic_checkout_delivers_credentials(
    client, db_session, customer_headers
):
    product = await persist(
        db_session,
        ProductFactory.create(delivery_type=DeliveryType.AUTOMATIC, stock=1),
    )
    await persist(
        db_session,
        ProductAccountFactory.create(product_id=product.id, credentials="netflix:1234"),
    )

    response = await _checkout(client, customer_headers, product)
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["status"] == "COMPLETED"
    assert data["items"][0]["delivered"] is True
    assert data["items"][0]["delivery_data"] == "netflix:1234"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_insufficient_balance(client, db_session, customer, customer_headers):
    """402 when the wallet cannot cover the total; nothing is persisted."""
    product = await persist(
        db_session, ProductFactory.create(price_usd=Decimal("60.00"))
    )

    response = await _checkout(client, customer_headers, product)
    assert response.status_code == 402
    assert "Insufficient balance" in response.json()["message"]

    count = await db_session.execute(select(func.count()).select_from(Order))
    assert count.scalar() == 0
    await db_session.refresh(customer)
    await db_session.refresh(product)
    assert customer.wallet == Decimal("50.00")
    assert product.stock == 10


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_empty_items_rejected(client, customer_headers):
    response = await client.post(
        "/api/orders", json={"items": []}, headers=customer_headers
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "items"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_unknown_product(client, customer_headers):
    response = await client.post(
        "/api/orders",
        json={"items": [{"product_id": str(uuid.uuid4()), "quantity": 1}]},
        headers=customer_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_retries_taken_order_number(
    client, db_session, customer, customer_headers, product, monkeypatch
):
    """POST /api/orders: a number taken by a concurrent checkout is retried once."""
    year = utc_now().year
    taken = f"LFS-{year}-0001"
    await persist(db_session, OrderFactory.create(user_id=customer.id, order_number=taken))

    real_next_order_number = order_service.next_order_number
    calls = []

    async def stale_then_fresh(db, now=None):
        calls.append(now)
        if len(calls) == 1:
            return taken
        return await real_next_order_number(db, now)

    monkeypatch.setattr(order_service, "next_order_number", stale_then_fresh)

    response = await _checkout(client, customer_headers, product)
    assert response.status_code == 201, response.text
    assert response.json()["order_number"] == f"LFS-{year}-0002"
    assert len(calls) == 2

    await db_session.refresh(customer)
    await db_session.refresh(product)
    assert customer.wallet == Decimal("46.00")
    assert product.stock == 9
    count = (await db_session.execute(select(func.count()).select_from(Order))).scalar()
    assert count == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_requires_login(client, product):
    response = await client.post(
        "/api/orders",
        json={"items": [{"product_id": str(product.id), "quantity": 1}]},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_referred_checkout_creates_commission(
    client, db_session, affiliate, referred_customer, product
):
    response = await _checkout(client, auth_headers(referred_customer), product)
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["affiliate_id"] == str(affiliate.id)
    assert data["commission_amount"] == 0.4

    commission = (
        await db_session.execute(select(Commission))
    ).scalar_one()
    assert commission.status == CommissionStatus.PENDING
    await db_session.refresh(affiliate)
    assert affiliate.pending_commissions == Decimal("0.40")


# ---------------------------------------------------------------------------
# History / visibility
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_users_see_only_their_orders(
    client, customer_headers, referred_customer, product
):
    await _checkout(client, customer_headers, product)
    other = await _checkout(client, auth_headers(referred_customer), product)

    response = await client.get("/api/orders", headers=customer_headers)
    assert response.status_code == 200
    assert response.json()["total"] == 1

    response = await client.get(
        f"/api/orders/{other.json()['id']}", headers=customer_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_lists_and_searches_orders(
    client, admin_headers, customer_headers, customer, product
):
    placed = await _checkout(client, customer_headers, product)
    order_number = placed.json()["order_number"]

    response = await client.get(
        "/api/orders", params={"search": order_number}, headers=admin_headers
    )
    assert response.status_code == 200
    assert [o["order_number"] for o in response.json()["orders"]] == [order_number]

    response = await client.get(
        "/api/orders", params={"status": "COMPLETED"}, headers=admin_headers
    )
    assert response.json()["total"] == 0


# ---------------------------------------------------------------------------
# Admin fulfillment
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_deliver_item_completes_order(
    client, admin_headers, customer_headers, product
):
    """PUT /api/orders/{id}/items/{item_id}/deliver: last item completes the order."""
    placed = (await _checkout(client, customer_headers, product)).json()
    item_id = placed["items"][0]["id"]

    response = await client.put(
        f"/api/orders/{placed['id']}/items/{item_id}/deliver",
        json={"delivery_data": "user@netflix.com / hunter2"},
        headers=admin_headers,
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["status"] == "COMPLETED"
    assert data["completed_at"] is not None
    assert data["items"][0]["delivery_data"] == "user@netflix.com / hunter2"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_deliver_requires_admin(client, customer_headers, product):
    placed = (await _checkout(client, customer_headers, product)).json()
    response = await client.put(
        f"/api/orders/{placed['id']}/items/{placed['items'][0]['id']}/deliver",
        json={"delivery_data": "x"},
        headers=customer_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cancel_order_refunds(
    client, db_session, admin_headers, customer, customer_headers, product
):
    """PUT /api/orders/{id}/status: CANCELLED refunds and restocks."""
    placed = (await _checkout(client, customer_headers, product, quantity=3)).json()

    response = await client.put(
        f"/api/orders/{placed['id']}/status",
        json={"status": "CANCELLED", "admin_notes": "Out of accounts"},
        headers=admin_headers,
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["status"] == "CANCELLED"
    assert data["payment_status"] == "REFUNDED"
    assert data["admin_notes"] == "Out of accounts"

    await db_session.refresh(customer)
    await db_session.refresh(product)
    assert customer.wallet == Decimal("50.00")
    assert product.stock == 10

    again = await client.put(
        f"/api/orders/{placed['id']}/status",
        json={"status": "REFUNDED"},
        headers=admin_headers,
    )
    assert again.status_code == 400

    await db_session.refresh(customer)
    assert customer.wallet == Decimal("50.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cannot_complete_undelivered_order(
    client, admin_headers, customer_headers, product
):
    placed = (await _checkout(client, customer_headers, product)).json()
    response = await client.put(
        f"/api/orders/{placed['id']}/status",
        json={"status": "COMPLETED"},
        headers=admin_headers,
    )
    assert response.status_code == 400
