"""Admin user management endpoints."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.accounts_service.dependencies import require_admin
from services.accounts_service.models import AuditAction, User, UserRole, UserStatus
from services.accounts_service.schemas import (
    MessageResponse,
    UserDetailResponse,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from services.accounts_service.services.accounts import (
    count_referrals,
    ensure_referral_code,
)
from services.accounts_service.services.audit import record_audit
from services.accounts_service.services.history import (
    count_user_history,
    recent_orders_for_user,
)
from sqlalchemy import desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/users", tags=["users"])


async def get_user_or_404(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )
    return user


@router.get("", response_model=UserListResponse)
async def list_users(
    role: Optional[UserRole] = None,
    user_status: Optional[UserStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(User)
    count_query = select(func.count()).select_from(User)

    filters = []
    if role:
        filters.append(User.role == role)
    if user_status:
        filters.append(User.status == user_status)
    if search:
        pattern = f"%{search.strip()}%"
        filters.append(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
    if filters:
        query = query.where(*filters)
        count_query = count_query.where(*filters)

    total = (await db.execute(count_query)).scalar() or 0
    result = await db.execute(
        query.order_by(desc(User.created_at)).offset(skip).limit(limit)
    )
    users = result.scalars().all()
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/{user_id}")
async def get_user(
    user_id: uuid.UUID,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """User profile with counters and the 10 most recent orders."""
    user = await get_user_or_404(db, user_id)
    history = await count_user_history(db, user.id)
    detail = UserDetailResponse(
        **UserResponse.model_validate(user).model_dump(),
        orders_count=history["orders"],
        referrals_count=await count_referrals(db, user.id),
    )
    orders = await recent_orders_for_user(db, user.id, limit=10)
    return {"user": detail.model_dump(mode="json"), "orders": orders}


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: uuid.UUID,
    payload: UserUpdate,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    user = await get_user_or_404(db, user_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    if user.id == admin.id and (
        ("role" in changes and changes["role"] != user.role)
        or ("status" in changes and changes["status"] != user.status)
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot change your own role or status",
        )

    for field, value in changes.items():
        setattr(user, field, value)
    if user.role == UserRole.AFFILIATE:
        await ensure_referral_code(db, user)

    await record_audit(
        db,
        AuditAction.USER_UPDATED,
        "user",
        user.id,
        user_id=admin.id,
        details={k: getattr(v, "value", v) for k, v in changes.items()},
        request=request,
    )
    await db.commit()
    await db.refresh(user)
    return user


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: uuid.UUID,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    if user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account",
        )
    user = await get_user_or_404(db, user_id)

    history = await count_user_history(db, user.id)
    if any(history.values()):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User has orders, recharges or commissions. Deactivate the account instead",
        )

    await record_audit(
        db,
        AuditAction.USER_DELETED,
        "user",
        user.id,
        user_id=admin.id,
        details={"email": user.email},
        request=request,
    )
    await db.delete(user)
    await db.commit()
    logger.info("Admin %s deleted user %s", admin.email, user.email)
    return MessageResponse(message="User deleted")
