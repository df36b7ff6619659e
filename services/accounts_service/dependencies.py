"""Route dependencies that resolve the session token to a live user row."""

import uuid
from typing import Optional

from fastapi import Depends, HTTPException, status
from libs.auth.dependencies import get_current_user, get_optional_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.accounts_service.models import User, UserRole, UserStatus
from sqlalchemy.ext.asyncio import AsyncSession


async def _load_user(db: AsyncSession, current_user: AuthUser) -> User:
    try:
        user_id = uuid.UUID(current_user.user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        )
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )
    return user


async def get_current_account(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
) -> User:
    """The caller's user row, whatever its status."""
    return await _load_user(db, current_user)


async def get_active_account(user: User = Depends(get_current_account)) -> User:
    if user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Account is not active"
        )
    return user


async def require_admin(user: User = Depends(get_active_account)) -> User:
    if user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required"
        )
    return user


async def require_affiliate(user: User = Depends(get_active_account)) -> User:
    if user.role != UserRole.AFFILIATE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Affiliate access required"
        )
    return user


async def get_optional_account(
    current_user: Optional[AuthUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_db),
) -> Optional[User]:
    """The caller's active user row, or None for anonymous callers."""
    if current_user is None:
        return None
    try:
        user = await db.get(User, uuid.UUID(current_user.user_id))
    except ValueError:
        return None
    if user is None or user.status != UserStatus.ACTIVE:
        return None
    return user
