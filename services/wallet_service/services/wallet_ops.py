"""Core wallet operations: atomic debit/credit with idempotency and row-level locking.

These functions stage changes on the caller's session and flush, but never
commit. The caller commits once so the ledger entry and the business change
that caused it (order, recharge, commission) land together or not at all.
"""

import uuid
from decimal import Decimal
from typing import Optional

from fastapi import HTTPException, status
from libs.common.logging import get_logger
from libs.common.money import ZERO, to_money
from services.accounts_service.models import User
from services.wallet_service.models import (
    TransactionDirection,
    TransactionType,
    WalletTransaction,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def _find_by_key(
    db: AsyncSession, idempotency_key: str
) -> Optional[WalletTransaction]:
    result = await db.execute(
        select(WalletTransaction).where(
            WalletTransaction.idempotency_key == idempotency_key
        )
    )
    return result.scalar_one_or_none()


async def lock_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    """SELECT ... FOR UPDATE on the user row, refreshing any cached copy.

    Pending changes are flushed first so the refresh cannot discard them.
    """
    await db.flush()
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


def _validate_amount(amount: Decimal) -> Decimal:
    amount = to_money(amount)
    if amount <= ZERO:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Amount must be greater than 0",
        )
    return amount


# ---------------------------------------------------------------------------
# Debit (atomic)
# ---------------------------------------------------------------------------


async def debit_wallet(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    amount: Decimal,
    idempotency_key: str,
    transaction_type: TransactionType,
    description: str,
    reference_type: Optional[str] = None,
    reference_id: Optional[str] = None,
    initiated_by: Optional[uuid.UUID] = None,
) -> WalletTransaction:
    """Atomically debit a wallet.

    1. Check idempotency: return existing transaction if key exists
    2. SELECT FOR UPDATE on the user row
    3. Validate sufficient balance (402 otherwise)
    4. Create transaction record with balance snapshots
    5. Update the cached balance on the user row
    """
    amount = _validate_amount(amount)

    # 1. Idempotency check
    existing = await _find_by_key(db, idempotency_key)
    if existing:
        logger.info(
            "Idempotent replay for key=%s -> txn=%s", idempotency_key, existing.id
        )
        return existing

    # 2. Lock user row
    user = await lock_user(db, user_id)

    # 3. Validate
    if user.wallet < amount:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail=f"Insufficient balance. You need ${amount} but have ${user.wallet}",
        )

    # 4. Create transaction
    balance_before = user.wallet
    balance_after = to_money(balance_before - amount)

    txn = WalletTransaction(
        user_id=user.id,
        idempotency_key=idempotency_key,
        transaction_type=transaction_type,
        direction=TransactionDirection.DEBIT,
        amount=amount,
        balance_before=balance_before,
        balance_after=balance_after,
        description=description,
        reference_type=reference_type,
        reference_id=reference_id,
        initiated_by=initiated_by,
    )
    db.add(txn)

    # 5. Update balance
    user.wallet = balance_after
    await db.flush()

    logger.info(
        "Debit %s from user %s (key=%s), balance %s->%s",
        amount,
        user.id,
        idempotency_key,
        balance_before,
        balance_after,
    )
    return txn


# ---------------------------------------------------------------------------
# Credit (atomic)
# ---------------------------------------------------------------------------


async def credit_wallet(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    amount: Decimal,
    idempotency_key: str,
    transaction_type: TransactionType,
    description: str,
    reference_type: Optional[str] = None,
    reference_id: Optional[str] = None,
    initiated_by: Optional[uuid.UUID] = None,
) -> WalletTransaction:
    """Atomically credit a wallet. Same pattern as debit but adds balance.

    Inactive accounts can still receive credits (for refunds).
    """
    amount = _validate_amount(amount)

    existing = await _find_by_key(db, idempotency_key)
    if existing:
        logger.info(
            "Idempotent replay for key=%s -> txn=%s", idempotency_key, existing.id
        )
        return existing

    user = await lock_user(db, user_id)

    balance_before = user.wallet
    balance_after = to_money(balance_before + amount)

    txn = WalletTransaction(
        user_id=user.id,
        idempotency_key=idempotency_key,
        transaction_type=transaction_type,
        direction=TransactionDirection.CREDIT,
        amount=amount,
        balance_before=balance_before,
        balance_after=balance_after,
        description=description,
        reference_type=reference_type,
        reference_id=reference_id,
        initiated_by=initiated_by,
    )
    db.add(txn)

    user.wallet = balance_after
    await db.flush()

    logger.info(
        "Credit %s to user %s (key=%s), balance %s->%s",
        amount,
        user.id,
        idempotency_key,
        balance_before,
        balance_after,
    )
    return txn


# ---------------------------------------------------------------------------
# Admin adjustment
# ---------------------------------------------------------------------------


async def adjust_wallet(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    amount: Decimal,
    reason: str,
    admin_id: uuid.UUID,
) -> WalletTransaction:
    """Signed manual correction. Negative amounts debit, but never below zero."""
    amount = to_money(amount)
    if amount == ZERO:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Amount must not be zero",
        )

    key = f"adjust-{user_id}-{uuid.uuid4()}"
    description = f"Admin adjustment: {reason}"
    if amount > ZERO:
        return await credit_wallet(
            db,
            user_id=user_id,
            amount=amount,
            idempotency_key=key,
            transaction_type=TransactionType.ADMIN_ADJUSTMENT,
            description=description,
            reference_type="adjustment",
            initiated_by=admin_id,
        )

    user = await lock_user(db, user_id)
    if user.wallet < -amount:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Adjustment would make the balance negative",
        )
    return await debit_wallet(
        db,
        user_id=user_id,
        amount=-amount,
        idempotency_key=key,
        transaction_type=TransactionType.ADMIN_ADJUSTMENT,
        description=description,
        reference_type="adjustment",
        initiated_by=admin_id,
    )
