"""Read-only lookups of a user's store and wallet history."""

import uuid

from services.store_service.models import Commission, Order
from services.store_service.schemas import OrderSummary
from services.wallet_service.models import Recharge, WalletTransaction
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession


async def _count(db: AsyncSession, model, *criteria) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(*criteria))
    return result.scalar() or 0


async def count_user_history(db: AsyncSession, user_id: uuid.UUID) -> dict[str, int]:
    """Rows that reference the user and would block deleting it."""
    return {
        "orders": await _count(db, Order, Order.user_id == user_id),
        "recharges": await _count(db, Recharge, Recharge.user_id == user_id),
        "commissions": await _count(
            db, Commission, Commission.affiliate_id == user_id
        ),
        "transactions": await _count(
            db, WalletTransaction, WalletTransaction.user_id == user_id
        ),
    }


async def recent_orders_for_user(
    db: AsyncSession, user_id: uuid.UUID, limit: int = 10
) -> list[dict]:
    result = await db.execute(
        select(Order)
        .where(Order.user_id == user_id)
        .order_by(desc(Order.created_at))
        .limit(limit)
    )
    return [
        OrderSummary.model_validate(order).model_dump(mode="json")
        for order in result.scalars().all()
    ]
