"""Affiliate commission lifecycle: earn on order, pay out, cancel."""

import uuid
from typing import Optional

from fastapi import HTTPException, status
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from libs.common.money import ZERO, commission_for, to_money
from services.accounts_service.models import User, UserRole, UserStatus
from services.accounts_service.services.system_config import get_commission_rate
from services.store_service.models import Commission, CommissionStatus, Order
from services.wallet_service.models import TransactionType
from services.wallet_service.services.wallet_ops import credit_wallet
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def create_commission_for_order(
    db: AsyncSession, order: Order, buyer: User
) -> Optional[Commission]:
    """PENDING commission for the buyer's referrer, if it is an active affiliate."""
    if not buyer.referred_by_id:
        return None

    affiliate = await db.get(User, buyer.referred_by_id)
    if (
        affiliate is None
        or affiliate.role != UserRole.AFFILIATE
        or affiliate.status != UserStatus.ACTIVE
    ):
        return None

    rate = await get_commission_rate(db)
    amount = commission_for(order.total, rate)
    if amount <= ZERO:
        return None

    commission = Commission(
        affiliate_id=affiliate.id,
        order_id=order.id,
        order_total=order.total,
        commission_rate=rate,
        amount=amount,
        status=CommissionStatus.PENDING,
    )
    db.add(commission)

    order.affiliate_id = affiliate.id
    order.commission_amount = amount
    affiliate.pending_commissions = to_money(affiliate.pending_commissions + amount)
    await db.flush()

    logger.info(
        "Commission %s for affiliate %s on order %s",
        amount,
        affiliate.referral_code,
        order.order_number,
    )
    return commission


async def lock_commission(db: AsyncSession, commission_id: uuid.UUID) -> Commission:
    result = await db.execute(
        select(Commission)
        .where(Commission.id == commission_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    commission = result.scalar_one_or_none()
    if not commission:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Commission not found"
        )
    return commission


def _require_pending(commission: Commission) -> None:
    if commission.status != CommissionStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Commission is already {commission.status.value}",
        )


async def pay_commission(
    db: AsyncSession, commission: Commission, *, admin_id: uuid.UUID
) -> Commission:
    """Move the amount from pending to total and credit the affiliate's wallet."""
    _require_pending(commission)

    await credit_wallet(
        db,
        user_id=commission.affiliate_id,
        amount=commission.amount,
        idempotency_key=f"commission-{commission.id}",
        transaction_type=TransactionType.COMMISSION,
        description=f"Affiliate commission for order {commission.order_id}",
        reference_type="commission",
        reference_id=str(commission.id),
        initiated_by=admin_id,
    )

    affiliate = await db.get(User, commission.affiliate_id)
    affiliate.pending_commissions = max(
        ZERO, to_money(affiliate.pending_commissions - commission.amount)
    )
    affiliate.total_commissions = to_money(
        affiliate.total_commissions + commission.amount
    )

    order = await db.get(Order, commission.order_id)
    if order:
        order.commission_paid = True

    commission.status = CommissionStatus.PAID
    commission.paid_at = utc_now()
    await db.flush()

    logger.info("Paid commission %s (%s)", commission.id, commission.amount)
    return commission


async def cancel_commission(db: AsyncSession, commission: Commission) -> Commission:
    _require_pending(commission)

    affiliate = await db.get(User, commission.affiliate_id)
    if affiliate:
        affiliate.pending_commissions = max(
            ZERO, to_money(affiliate.pending_commissions - commission.amount)
        )
    commission.status = CommissionStatus.CANCELLED
    await db.flush()

    logger.info("Cancelled commission %s", commission.id)
    return commission


async def cancel_pending_for_order(
    db: AsyncSession, order: Order
) -> Optional[Commission]:
    """Cancel the order's commission if it has not been paid yet."""
    result = await db.execute(
        select(Commission).where(Commission.order_id == order.id)
    )
    commission = result.scalar_one_or_none()
    if commission is None or commission.status != CommissionStatus.PENDING:
        return None
    return await cancel_commission(db, commission)
