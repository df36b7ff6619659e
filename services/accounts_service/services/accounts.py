"""Registration, login and referral code assignment."""

from datetime import timedelta
from typing import Optional

from fastapi import HTTPException, status
from libs.auth.passwords import hash_password, verify_password
from libs.common.datetime_utils import ensure_utc, utc_now
from libs.common.logging import get_logger
from libs.common.money import ZERO
from services.accounts_service.models import User, UserRole, UserStatus
from services.accounts_service.services import system_config
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

REFERRAL_PREFIX = "AFF"
SELF_SERVICE_ROLES = (UserRole.USER, UserRole.AFFILIATE)


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def next_referral_code(db: AsyncSession) -> str:
    """``AFF%03d`` one past the highest number handed out so far."""
    result = await db.execute(
        select(User.referral_code).where(User.referral_code.like(f"{REFERRAL_PREFIX}%"))
    )
    highest = 0
    for code in result.scalars().all():
        suffix = code[len(REFERRAL_PREFIX):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{REFERRAL_PREFIX}{highest + 1:03d}"


async def ensure_referral_code(db: AsyncSession, user: User) -> str:
    if not user.referral_code:
        user.referral_code = await next_referral_code(db)
        await db.flush()
    return user.referral_code


async def register_user(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    password: str,
    role: UserRole = UserRole.USER,
    phone: Optional[str] = None,
    referral_code: Optional[str] = None,
) -> User:
    """Create a USER or AFFILIATE account. Does not commit."""
    if role not in SELF_SERVICE_ROLES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Role must be USER or AFFILIATE",
        )
    if await get_user_by_email(db, email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered"
        )

    referrer = None
    if referral_code:
        result = await db.execute(
            select(User).where(
                User.referral_code == referral_code.strip().upper(),
                User.role == UserRole.AFFILIATE,
            )
        )
        referrer = result.scalar_one_or_none()
        if referrer is None:
            logger.info("Ignoring unknown referral code %s", referral_code)

    user = User(
        name=name.strip(),
        email=normalize_email(email),
        password_hash=hash_password(password),
        phone=phone,
        role=role,
        status=UserStatus.PENDING if role == UserRole.AFFILIATE else UserStatus.ACTIVE,
        wallet=ZERO,
        total_commissions=ZERO,
        pending_commissions=ZERO,
        failed_login_attempts=0,
        referred_by_id=referrer.id if referrer else None,
    )
    if role == UserRole.AFFILIATE:
        user.referral_code = await next_referral_code(db)

    db.add(user)
    await db.flush()
    logger.info("Registered %s account %s", role.value, user.email)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """Check credentials and the lockout window.

    Failed attempts are counted on the user row; the caller must commit even
    when this raises so the counter is persisted.
    """
    user = await get_user_by_email(db, email)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )

    now = utc_now()
    locked_until = ensure_utc(user.locked_until)
    if locked_until and locked_until > now:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Account temporarily locked. Try again later",
        )

    if not verify_password(password, user.password_hash):
        max_attempts = await system_config.get_int(db, system_config.MAX_LOGIN_ATTEMPTS)
        user.failed_login_attempts += 1
        if user.failed_login_attempts >= max_attempts:
            minutes = await system_config.get_int(db, system_config.LOGIN_LOCK_DURATION)
            user.locked_until = now + timedelta(minutes=minutes)
            user.failed_login_attempts = 0
            logger.warning("Locked %s for %d minutes", user.email, minutes)
        await db.flush()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )

    if user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Account is not active"
        )

    user.failed_login_attempts = 0
    user.locked_until = None
    user.last_login_at = now
    await db.flush()
    return user


async def count_referrals(db: AsyncSession, user_id) -> int:
    result = await db.execute(
        select(func.count()).select_from(User).where(User.referred_by_id == user_id)
    )
    return result.scalar() or 0
