"""Recharge flow: a user requests a top-up, an admin approves or rejects it."""

import uuid
from decimal import Decimal
from typing import Optional

from fastapi import HTTPException, status
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from libs.common.money import to_money
from services.wallet_service.models import Recharge, RechargeStatus, TransactionType
from services.wallet_service.services.wallet_ops import credit_wallet
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

MAX_RECHARGE_AMOUNT = Decimal("10000")


async def create_recharge(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    amount: Decimal,
    payment_method: Optional[str] = None,
    payment_reference: Optional[str] = None,
    payment_proof: Optional[str] = None,
) -> Recharge:
    amount = to_money(amount)
    if amount <= 0 or amount > MAX_RECHARGE_AMOUNT:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Amount must be between 0 and {MAX_RECHARGE_AMOUNT}",
        )

    recharge = Recharge(
        user_id=user_id,
        amount=amount,
        status=RechargeStatus.PENDING,
        payment_method=payment_method,
        payment_reference=payment_reference,
        payment_proof=payment_proof,
    )
    db.add(recharge)
    await db.flush()
    logger.info("Recharge %s requested by %s for %s", recharge.id, user_id, amount)
    return recharge


async def _lock_pending(db: AsyncSession, recharge_id: uuid.UUID) -> Recharge:
    result = await db.execute(
        select(Recharge)
        .where(Recharge.id == recharge_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    recharge = result.scalar_one_or_none()
    if not recharge:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Recharge not found"
        )
    if recharge.status != RechargeStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Recharge is already {recharge.status.value}",
        )
    return recharge


async def approve_recharge(
    db: AsyncSession, *, recharge_id: uuid.UUID, admin_id: uuid.UUID
) -> Recharge:
    """Mark APPROVED and credit the wallet exactly once. Does not commit."""
    recharge = await _lock_pending(db, recharge_id)

    await credit_wallet(
        db,
        user_id=recharge.user_id,
        amount=recharge.amount,
        idempotency_key=f"recharge-{recharge.id}",
        transaction_type=TransactionType.RECHARGE,
        description=f"Wallet recharge of ${recharge.amount}",
        reference_type="recharge",
        reference_id=str(recharge.id),
        initiated_by=admin_id,
    )

    recharge.status = RechargeStatus.APPROVED
    recharge.approved_by = admin_id
    recharge.approved_at = utc_now()
    await db.flush()

    logger.info("Recharge %s approved by %s", recharge.id, admin_id)
    return recharge


async def reject_recharge(
    db: AsyncSession, *, recharge_id: uuid.UUID, reason: str
) -> Recharge:
    recharge = await _lock_pending(db, recharge_id)
    recharge.status = RechargeStatus.REJECTED
    recharge.rejected_at = utc_now()
    recharge.rejection_reason = reason.strip()
    await db.flush()

    logger.info("Recharge %s rejected: %s", recharge.id, reason)
    return recharge
