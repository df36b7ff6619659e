"""Recharge endpoints: users request top-ups, admins review them."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.accounts_service.dependencies import get_active_account, require_admin
from services.accounts_service.models import AuditAction, User
from services.accounts_service.schemas import UserSummary
from services.accounts_service.services.audit import record_audit
from services.wallet_service.models import Recharge, RechargeStatus
from services.wallet_service.schemas import (
    RechargeCreate,
    RechargeListResponse,
    RechargeReject,
    RechargeResponse,
)
from services.wallet_service.services.recharge_service import (
    approve_recharge,
    create_recharge,
    reject_recharge,
)
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/recharges", tags=["recharges"])


async def _with_users(
    db: AsyncSession, recharges: list[Recharge]
) -> list[RechargeResponse]:
    user_ids = {r.user_id for r in recharges}
    users: dict[uuid.UUID, User] = {}
    if user_ids:
        result = await db.execute(select(User).where(User.id.in_(user_ids)))
        users = {u.id: u for u in result.scalars().all()}

    enriched = []
    for recharge in recharges:
        base = RechargeResponse.model_validate(recharge)
        owner = users.get(recharge.user_id)
        base.user = UserSummary.model_validate(owner) if owner else None
        enriched.append(base)
    return enriched


@router.post("", response_model=RechargeResponse, status_code=status.HTTP_201_CREATED)
async def request_recharge(
    payload: RechargeCreate,
    request: Request,
    user: User = Depends(get_active_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Request a wallet top-up. Credited only after admin approval."""
    recharge = await create_recharge(
        db,
        user_id=user.id,
        amount=payload.amount,
        payment_method=payload.payment_method,
        payment_reference=payload.payment_reference,
        payment_proof=payload.payment_proof,
    )
    await record_audit(
        db,
        AuditAction.RECHARGE_CREATED,
        "recharge",
        recharge.id,
        user_id=user.id,
        details={"amount": str(recharge.amount)},
        request=request,
    )
    await db.commit()
    await db.refresh(recharge)
    return (await _with_users(db, [recharge]))[0]


@router.get("", response_model=RechargeListResponse)
async def list_recharges(
    recharge_status: Optional[RechargeStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    user: User = Depends(get_active_account),
    db: AsyncSession = Depends(get_async_db),
):
    """All recharges for admins, the caller's own for everyone else."""
    query = select(Recharge)
    count_query = select(func.count()).select_from(Recharge)

    filters = []
    if not user.is_admin:
        filters.append(Recharge.user_id == user.id)
    if recharge_status:
        filters.append(Recharge.status == recharge_status)
    if filters:
        query = query.where(*filters)
        count_query = count_query.where(*filters)

    total = (await db.execute(count_query)).scalar() or 0
    result = await db.execute(
        query.order_by(desc(Recharge.created_at)).offset(skip).limit(limit)
    )
    recharges = list(result.scalars().all())
    return RechargeListResponse(
        recharges=await _with_users(db, recharges),
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/{recharge_id}", response_model=RechargeResponse)
async def get_recharge(
    recharge_id: uuid.UUID,
    user: User = Depends(get_active_account),
    db: AsyncSession = Depends(get_async_db),
):
    recharge = await db.get(Recharge, recharge_id)
    if not recharge or (not user.is_admin and recharge.user_id != user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Recharge not found"
        )
    return (await _with_users(db, [recharge]))[0]


@router.put("/approve/{recharge_id}", response_model=RechargeResponse)
async def approve(
    recharge_id: uuid.UUID,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Approve a PENDING recharge and credit the user's wallet."""
    recharge = await approve_recharge(db, recharge_id=recharge_id, admin_id=admin.id)
    await record_audit(
        db,
        AuditAction.RECHARGE_APPROVED,
        "recharge",
        recharge.id,
        user_id=admin.id,
        details={"amount": str(recharge.amount), "user_id": str(recharge.user_id)},
        request=request,
    )
    await db.commit()
    await db.refresh(recharge)
    return (await _with_users(db, [recharge]))[0]


@router.put("/reject/{recharge_id}", response_model=RechargeResponse)
async def reject(
    recharge_id: uuid.UUID,
    payload: RechargeReject,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    recharge = await reject_recharge(db, recharge_id=recharge_id, reason=payload.reason)
    await record_audit(
        db,
        AuditAction.RECHARGE_REJECTED,
        "recharge",
        recharge.id,
        user_id=admin.id,
        details={"reason": recharge.rejection_reason},
        request=request,
    )
    await db.commit()
    await db.refresh(recharge)
    return (await _with_users(db, [recharge]))[0]
