"""Integration tests for wallet recharge requests and their review."""

import uuid
from decimal import Decimal

import pytest
from services.wallet_service.models import (
    RechargeStatus,
    TransactionType,
    WalletTransaction,
)
from sqlalchemy import select
from tests.factories import RechargeFactory
from tests.helpers import persist


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_request_recharge(client, db_session, customer, customer_headers):
    """POST /api/recharges: PENDING request; the wallet is untouched."""
    response = await client.post(
        "/api/recharges",
        json={"amount": 20, "payment_method": "yape", "payment_reference": "OP-123"},
        headers=customer_headers,
    )
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["amount"] == 20.0
    assert data["user"]["email"] == customer.email

    await db_session.refresh(customer)
    assert customer.wallet == Decimal("50.00")


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize("amount", [0, -5, 10000.01])
async def test_request_recharge_invalid_amount(client, customer_headers, amount):
    response = await client.post(
        "/api/recharges", json={"amount": amount}, headers=customer_headers
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_request_recharge_requires_auth(client):
    response = await client.post("/api/recharges", json={"amount": 10})
    assert response.status_code == 401


# ---------------------------------------------------------------------------
# Listing / visibility
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_users_see_only_their_recharges(
    client, db_session, customer, customer_headers, affiliate
):
    mine = RechargeFactory.create(user_id=customer.id)
    theirs = RechargeFactory.create(user_id=affiliate.id)
    await persist(db_session, mine, theirs)

    response = await client.get("/api/recharges", headers=customer_headers)
    assert response.status_code == 200, response.text
    assert [r["id"] for r in response.json()["recharges"]] == [str(mine.id)]

    response = await client.get(f"/api/recharges/{theirs.id}", headers=customer_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_lists_pending_recharges(
    client, db_session, admin_headers, customer, affiliate
):
    """GET /api/recharges?status=PENDING: the admin review queue."""
    await persist(
        db_session,
        RechargeFactory.create(user_id=customer.id),
        RechargeFactory.create(user_id=affiliate.id),
        RechargeFactory.create(user_id=customer.id, status=RechargeStatus.REJECTED),
    )

    response = await client.get(
        "/api/recharges", params={"status": "PENDING"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["total"] == 2


# ---------------------------------------------------------------------------
# Approve / reject
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_approve_recharge_credits_wallet_once(
    client, db_session, admin_user, admin_headers, customer
):
    """PUT /api/recharges/approve/{id}: credits the wallet exactly once."""
    recharge = await persist(
        db_session,
        RechargeFactory.create(user_id=customer.id, amount=Decimal("25.00")),
    )

    response = await client.put(
        f"/api/recharges/approve/{recharge.id}", headers=admin_headers
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["status"] == "APPROVED"
    assert data["approved_by"] == str(admin_user.id)

    await db_session.refresh(customer)
    assert customer.wallet == Decimal("75.00")

    again = await client.put(
        f"/api/recharges/approve/{recharge.id}", headers=admin_headers
    )
    assert again.status_code == 400

    await db_session.refresh(customer)
    assert customer.wallet == Decimal("75.00")
    entries = (
        await db_session.execute(
            select(WalletTransaction).where(WalletTransaction.user_id == customer.id)
        )
    ).scalars().all()
    assert len(entries) == 1
    assert entries[0].transaction_type == TransactionType.RECHARGE
    assert entries[0].idempotency_key == f"recharge-{recharge.id}"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reject_recharge(client, db_session, admin_headers, customer):
    """PUT /api/recharges/reject/{id}: stores the reason, no credit."""
    recharge = await persist(db_session, RechargeFactory.create(user_id=customer.id))

    response = await client.put(
        f"/api/recharges/reject/{recharge.id}",
        json={"reason": "Payment not found"},
        headers=admin_headers,
    )
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "REJECTED"
    assert response.json()["rejection_reason"] == "Payment not found"

    await db_session.refresh(customer)
    assert customer.wallet == Decimal("50.00")

    approve = await client.put(
        f"/api/recharges/approve/{recharge.id}", headers=admin_headers
    )
    assert approve.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_approve_requires_admin(client, db_session, customer, customer_headers):
    recharge = await persist(db_session, RechargeFactory.create(user_id=customer.id))
    response = await client.put(
        f"/api/recharges/approve/{recharge.id}", headers=customer_headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_approve_unknown_recharge(client, admin_headers):
    response = await client.put(
        f"/api/recharges/approve/{uuid.uuid4()}", headers=admin_headers
    )
    assert response.status_code == 404
