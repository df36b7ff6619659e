"""Wallet balance, ledger history and admin adjustments."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.accounts_service.dependencies import get_active_account, require_admin
from services.accounts_service.models import AuditAction, User
from services.accounts_service.services.audit import record_audit
from services.wallet_service.models import TransactionType, WalletTransaction
from services.wallet_service.schemas import (
    AdjustBalanceRequest,
    AdjustBalanceResponse,
    TransactionListResponse,
    TransactionResponse,
    WalletSummaryResponse,
)
from services.wallet_service.services.wallet_ops import adjust_wallet
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(tags=["wallet"])


@router.get("/wallet/me", response_model=WalletSummaryResponse)
async def my_wallet(
    user: User = Depends(get_active_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Current balance and the 10 most recent ledger entries."""
    result = await db.execute(
        select(WalletTransaction)
        .where(WalletTransaction.user_id == user.id)
        .order_by(desc(WalletTransaction.created_at))
        .limit(10)
    )
    return WalletSummaryResponse(
        balance=user.wallet,
        recent_transactions=[
            TransactionResponse.model_validate(t) for t in result.scalars().all()
        ],
    )


@router.get("/wallet/transactions", response_model=TransactionListResponse)
async def my_transactions(
    transaction_type: Optional[TransactionType] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_active_account),
    db: AsyncSession = Depends(get_async_db),
):
    filters = [WalletTransaction.user_id == user.id]
    if transaction_type:
        filters.append(WalletTransaction.transaction_type == transaction_type)

    total = (
        await db.execute(
            select(func.count()).select_from(WalletTransaction).where(*filters)
        )
    ).scalar() or 0
    result = await db.execute(
        select(WalletTransaction)
        .where(*filters)
        .order_by(desc(WalletTransaction.created_at))
        .offset(skip)
        .limit(limit)
    )
    return TransactionListResponse(
        transactions=[
            TransactionResponse.model_validate(t) for t in result.scalars().all()
        ],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.post("/users/{user_id}/wallet/adjust", response_model=AdjustBalanceResponse)
async def adjust_balance(
    user_id: uuid.UUID,
    payload: AdjustBalanceRequest,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Manual credit (positive amount) or debit (negative amount)."""
    txn = await adjust_wallet(
        db,
        user_id=user_id,
        amount=payload.amount,
        reason=payload.reason,
        admin_id=admin.id,
    )
    await record_audit(
        db,
        AuditAction.WALLET_ADJUSTED,
        "user",
        user_id,
        user_id=admin.id,
        details={"amount": str(payload.amount), "reason": payload.reason},
        request=request,
    )
    await db.commit()
    await db.refresh(txn)

    logger.info("Admin %s adjusted wallet of %s by %s", admin.email, user_id, payload.amount)
    return AdjustBalanceResponse(
        balance=txn.balance_after, transaction=TransactionResponse.model_validate(txn)
    )
