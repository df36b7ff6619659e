"""Affiliate program endpoints: admin review and the affiliate's own dashboard."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.accounts_service.dependencies import require_admin, require_affiliate
from services.accounts_service.models import AuditAction, User, UserRole, UserStatus
from services.accounts_service.schemas import (
    AffiliateCommissionEntry,
    AffiliateDashboardResponse,
    AffiliateDetailResponse,
    AffiliateListResponse,
    AffiliateResponse,
    AffiliateUpdate,
    ReferralResponse,
    UserResponse,
)
from services.accounts_service.services.accounts import ensure_referral_code
from services.accounts_service.services.audit import record_audit
from services.store_service.models import Commission, Order
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/affiliates", tags=["affiliates"])


def referral_link(code: Optional[str]) -> Optional[str]:
    if not code:
        return None
    return f"{get_settings().SITE_URL.rstrip('/')}/register?ref={code}"


async def _referral_counts(
    db: AsyncSession, affiliate_ids: list[uuid.UUID]
) -> dict[uuid.UUID, int]:
    if not affiliate_ids:
        return {}
    rows = await db.execute(
        select(User.referred_by_id, func.count())
        .where(User.referred_by_id.in_(affiliate_ids))
        .group_by(User.referred_by_id)
    )
    return dict(rows.all())


async def _commission_entries(
    db: AsyncSession, affiliate_id: uuid.UUID, limit: Optional[int] = None
) -> list[AffiliateCommissionEntry]:
    query = (
        select(Commission, Order.order_number)
        .join(Order, Order.id == Commission.order_id)
        .where(Commission.affiliate_id == affiliate_id)
        .order_by(desc(Commission.created_at))
    )
    if limit:
        query = query.limit(limit)
    rows = await db.execute(query)
    return [
        AffiliateCommissionEntry(
            id=commission.id,
            order_id=commission.order_id,
            order_number=order_number,
            order_total=commission.order_total,
            commission_rate=commission.commission_rate,
            amount=commission.amount,
            status=commission.status.value,
            paid_at=commission.paid_at,
            created_at=commission.created_at,
        )
        for commission, order_number in rows.all()
    ]


def _affiliate_response(user: User, referrals_count: int) -> AffiliateResponse:
    return AffiliateResponse(
        **UserResponse.model_validate(user).model_dump(),
        referrals_count=referrals_count,
    )


async def _get_affiliate_or_404(db: AsyncSession, affiliate_id: uuid.UUID) -> User:
    user = await db.get(User, affiliate_id)
    if not user or user.role != UserRole.AFFILIATE:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Affiliate not found"
        )
    return user


# ---------------------------------------------------------------------------
# Affiliate self-service (declared before /{affiliate_id})
# ---------------------------------------------------------------------------


@router.get("/me", response_model=AffiliateDashboardResponse)
async def my_dashboard(
    affiliate: User = Depends(require_affiliate),
    db: AsyncSession = Depends(get_async_db),
):
    """Referral code, shareable link, counters and recent commissions."""
    counts = await _referral_counts(db, [affiliate.id])
    return AffiliateDashboardResponse(
        referral_code=affiliate.referral_code,
        referral_link=referral_link(affiliate.referral_code),
        referrals_count=counts.get(affiliate.id, 0),
        total_commissions=affiliate.total_commissions,
        pending_commissions=affiliate.pending_commissions,
        recent_commissions=await _commission_entries(db, affiliate.id, limit=10),
    )


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@router.get("", response_model=AffiliateListResponse)
async def list_affiliates(
    affiliate_status: Optional[UserStatus] = Query(None, alias="status"),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(User).where(User.role == UserRole.AFFILIATE)
    if affiliate_status:
        query = query.where(User.status == affiliate_status)
    result = await db.execute(query.order_by(desc(User.created_at)))
    affiliates = list(result.scalars().all())

    counts = await _referral_counts(db, [a.id for a in affiliates])
    return AffiliateListResponse(
        affiliates=[_affiliate_response(a, counts.get(a.id, 0)) for a in affiliates],
        total=len(affiliates),
    )


@router.get("/{affiliate_id}", response_model=AffiliateDetailResponse)
async def get_affiliate(
    affiliate_id: uuid.UUID,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    affiliate = await _get_affiliate_or_404(db, affiliate_id)
    result = await db.execute(
        select(User)
        .where(User.referred_by_id == affiliate.id)
        .order_by(desc(User.created_at))
    )
    referrals = list(result.scalars().all())
    return AffiliateDetailResponse(
        affiliate=_affiliate_response(affiliate, len(referrals)),
        referrals=[ReferralResponse.model_validate(r) for r in referrals],
        commissions=await _commission_entries(db, affiliate.id),
    )


@router.put("/approve/{affiliate_id}", response_model=AffiliateResponse)
async def approve_affiliate(
    affiliate_id: uuid.UUID,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Activate a PENDING affiliate."""
    affiliate = await _get_affiliate_or_404(db, affiliate_id)
    if affiliate.status != UserStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Affiliate is {affiliate.status.value}, not PENDING",
        )

    affiliate.status = UserStatus.ACTIVE
    await ensure_referral_code(db, affiliate)
    await record_audit(
        db,
        AuditAction.AFFILIATE_APPROVED,
        "user",
        affiliate.id,
        user_id=admin.id,
        details={"referral_code": affiliate.referral_code},
        request=request,
    )
    await db.commit()
    await db.refresh(affiliate)

    logger.info("Affiliate %s approved by %s", affiliate.email, admin.email)
    counts = await _referral_counts(db, [affiliate.id])
    return _affiliate_response(affiliate, counts.get(affiliate.id, 0))


@router.put("/{affiliate_id}", response_model=AffiliateResponse)
async def update_affiliate(
    affiliate_id: uuid.UUID,
    payload: AffiliateUpdate,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    affiliate = await _get_affiliate_or_404(db, affiliate_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(affiliate, field, value)

    await record_audit(
        db,
        AuditAction.USER_UPDATED,
        "user",
        affiliate.id,
        user_id=admin.id,
        details={k: getattr(v, "value", v) for k, v in changes.items()},
        request=request,
    )
    await db.commit()
    await db.refresh(affiliate)

    counts = await _referral_counts(db, [affiliate.id])
    return _affiliate_response(affiliate, counts.get(affiliate.id, 0))
