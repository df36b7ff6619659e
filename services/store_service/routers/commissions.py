"""Affiliate commission endpoints."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from libs.db.session import get_async_db
from services.accounts_service.dependencies import require_admin, require_affiliate
from services.accounts_service.models import AuditAction, User
from services.accounts_service.services.audit import record_audit
from services.store_service.models import Commission, CommissionStatus, Order
from services.store_service.schemas import CommissionListResponse, CommissionResponse
from services.store_service.services.commissions import (
    cancel_commission,
    lock_commission,
    pay_commission,
)
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["commissions"])


async def serialize_commissions(
    db: AsyncSession, commissions: list[Commission]
) -> list[CommissionResponse]:
    """Attach order numbers and affiliate names."""
    order_ids = {c.order_id for c in commissions}
    affiliate_ids = {c.affiliate_id for c in commissions}
    numbers: dict[uuid.UUID, str] = {}
    names: dict[uuid.UUID, str] = {}
    if order_ids:
        rows = await db.execute(
            select(Order.id, Order.order_number).where(Order.id.in_(order_ids))
        )
        numbers = dict(rows.all())
    if affiliate_ids:
        rows = await db.execute(
            select(User.id, User.name).where(User.id.in_(affiliate_ids))
        )
        names = dict(rows.all())

    responses = []
    for commission in commissions:
        resp = CommissionResponse.model_validate(commission)
        resp.order_number = numbers.get(commission.order_id)
        resp.affiliate_name = names.get(commission.affiliate_id)
        responses.append(resp)
    return responses


async def _list(
    db: AsyncSession, filters: list, skip: int, limit: int
) -> CommissionListResponse:
    total = (
        await db.execute(select(func.count()).select_from(Commission).where(*filters))
    ).scalar() or 0
    result = await db.execute(
        select(Commission)
        .where(*filters)
        .order_by(desc(Commission.created_at))
        .offset(skip)
        .limit(limit)
    )
    return CommissionListResponse(
        commissions=await serialize_commissions(db, list(result.scalars().all())),
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/commissions", response_model=CommissionListResponse)
async def list_commissions(
    commission_status: Optional[CommissionStatus] = Query(None, alias="status"),
    affiliate_id: Optional[uuid.UUID] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    filters = []
    if commission_status:
        filters.append(Commission.status == commission_status)
    if affiliate_id:
        filters.append(Commission.affiliate_id == affiliate_id)
    return await _list(db, filters, skip, limit)


@router.put("/commissions/pay/{commission_id}", response_model=CommissionResponse)
async def pay(
    commission_id: uuid.UUID,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Pay a PENDING commission into the affiliate's wallet."""
    commission = await lock_commission(db, commission_id)
    await pay_commission(db, commission, admin_id=admin.id)
    await record_audit(
        db,
        AuditAction.COMMISSION_PAID,
        "commission",
        commission.id,
        user_id=admin.id,
        details={
            "amount": str(commission.amount),
            "affiliate_id": str(commission.affiliate_id),
        },
        request=request,
    )
    await db.commit()
    return (await serialize_commissions(db, [commission]))[0]


@router.put("/commissions/cancel/{commission_id}", response_model=CommissionResponse)
async def cancel(
    commission_id: uuid.UUID,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    commission = await lock_commission(db, commission_id)
    await cancel_commission(db, commission)
    await record_audit(
        db,
        AuditAction.COMMISSION_CANCELLED,
        "commission",
        commission.id,
        user_id=admin.id,
        details={"amount": str(commission.amount)},
        request=request,
    )
    await db.commit()
    return (await serialize_commissions(db, [commission]))[0]


@router.get("/affiliates/me/commissions", response_model=CommissionListResponse)
async def my_commissions(
    commission_status: Optional[CommissionStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    affiliate: User = Depends(require_affiliate),
    db: AsyncSession = Depends(get_async_db),
):
    filters = [Commission.affiliate_id == affiliate.id]
    if commission_status:
        filters.append(Commission.status == commission_status)
    return await _list(db, filters, skip, limit)
