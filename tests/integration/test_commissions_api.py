"""Integration tests for affiliate commission review and payout."""

import uuid
from decimal import Decimal

import pytest
from services.wallet_service.models import TransactionType, WalletTransaction
from sqlalchemy import select
from tests.helpers import auth_headers


async def _referred_order(client, buyer, product):
    response = await client.post(
        "/api/orders",
        json={"items": [{"product_id": str(product.id), "quantity": 1}]},
        headers=auth_headers(buyer),
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _only_commission(client, admin_headers):
    response = await client.get("/api/commissions", headers=admin_headers)
    assert response.status_code == 200, response.text
    commissions = response.json()["commissions"]
    assert len(commissions) == 1
    return commissions[0]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_commissions(
    client, admin_headers, affiliate, referred_customer, product
):
    """GET /api/commissions: includes order number and affiliate name."""
    order = await _referred_order(client, referred_customer, product)

    commission = await _only_commission(client, admin_headers)
    assert commission["order_number"] == order["order_number"]
    assert commission["affiliate_name"] == affiliate.name
    assert commission["amount"] == 0.4
    assert commission["status"] == "PENDING"

    response = await client.get(
        "/api/commissions", params={"status": "PAID"}, headers=admin_headers
    )
    assert response.json()["total"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_pay_commission(
    client, db_session, admin_headers, affiliate, referred_customer, product
):
    """PUT /api/commissions/pay/{id}: credits the affiliate exactly once."""
    await _referred_order(client, referred_customer, product)
    commission = await _only_commission(client, admin_headers)

    response = await client.put(
        f"/api/commissions/pay/{commission['id']}", headers=admin_headers
    )
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "PAID"

    await db_session.refresh(affiliate)
    assert affiliate.wallet == Decimal("0.40")
    assert affiliate.pending_commissions == Decimal("0.00")
    assert affiliate.total_commissions == Decimal("0.40")

    again = await client.put(
        f"/api/commissions/pay/{commission['id']}", headers=admin_headers
    )
    assert again.status_code == 400

    entries = (
        await db_session.execute(
            select(WalletTransaction).where(
                WalletTransaction.transaction_type == TransactionType.COMMISSION
            )
        )
    ).scalars().all()
    assert len(entries) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cancel_commission(
    client, db_session, admin_headers, affiliate, referred_customer, product
):
    await _referred_order(client, referred_customer, product)
    commission = await _only_commission(client, admin_headers)

    response = await client.put(
        f"/api/commissions/cancel/{commission['id']}", headers=admin_headers
    )
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "CANCELLED"

    await db_session.refresh(affiliate)
    assert affiliate.pending_commissions == Decimal("0.00")
    assert affiliate.wallet == Decimal("0.00")

    pay = await client.put(
        f"/api/commissions/pay/{commission['id']}", headers=admin_headers
    )
    assert pay.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_pay_unknown_commission(client, admin_headers):
    response = await client.put(
        f"/api/commissions/pay/{uuid.uuid4()}", headers=admin_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_affiliate_sees_own_commissions(
    client, affiliate_headers, referred_customer, product, customer_headers
):
    """GET /api/affiliates/me/commissions: the affiliate's own history."""
    await _referred_order(client, referred_customer, product)

    response = await client.get(
        "/api/affiliates/me/commissions", headers=affiliate_headers
    )
    assert response.status_code == 200, response.text
    assert response.json()["total"] == 1

    response = await client.get("/api/commissions", headers=affiliate_headers)
    assert response.status_code == 403

    response = await client.get(
        "/api/affiliates/me/commissions", headers=customer_headers
    )
    assert response.status_code == 403
