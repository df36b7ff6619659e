"""Unit tests for registration, login lockout and referral codes."""

from datetime import timedelta

import pytest
from fastapi import HTTPException
from libs.auth.passwords import verify_password
from libs.common.datetime_utils import ensure_utc, utc_now
from services.accounts_service.models import UserRole, UserStatus
from services.accounts_service.services.accounts import (
    authenticate,
    count_referrals,
    ensure_referral_code,
    next_referral_code,
    register_user,
)
from tests.factories import DEFAULT_PASSWORD, AffiliateFactory, UserFactory


# ---------------------------------------------------------------------------
# Referral codes
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_first_referral_code_is_aff001(db_session):
    assert await next_referral_code(db_session) == "AFF001"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_referral_code_follows_highest_existing(db_session):
    """Codes continue after the highest number, even with gaps."""
    db_session.add_all(
        [
            AffiliateFactory.create(referral_code="AFF001"),
            AffiliateFactory.create(referral_code="AFF007"),
        ]
    )
    await db_session.commit()

    assert await next_referral_code(db_session) == "AFF008"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_ensure_referral_code_keeps_existing(db_session):
    user = AffiliateFactory.create(referral_code="AFF042")
    db_session.add(user)
    await db_session.commit()

    assert await ensure_referral_code(db_session, user) == "AFF042"


# ---------------------------------------------------------------------------
# register_user
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_register_user_is_active_with_hashed_password(db_session):
    user = await register_user(
        db_session, name="Ana", email="  Ana@Example.com ", password="secret1"
    )
    await db_session.commit()

    assert user.email == "ana@example.com"
    assert user.role == UserRole.USER
    assert user.status == UserStatus.ACTIVE
    assert user.referral_code is None
    assert user.password_hash != "secret1"
    assert verify_password("secret1", user.password_hash)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_register_affiliate_is_pending_with_code(db_session):
    user = await register_user(
        db_session,
        name="Partner",
        email="partner@example.com",
        password="secret1",
        role=UserRole.AFFILIATE,
    )
    await db_session.commit()

    assert user.status == UserStatus.PENDING
    assert user.referral_code == "AFF001"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_register_admin_role_rejected(db_session):
    with pytest.raises(HTTPException) as exc_info:
        await register_user(
            db_session,
            name="Sneaky",
            email="sneaky@example.com",
            password="secret1",
            role=UserRole.ADMIN,
        )
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
@pytest.mark.unit
async def test_register_duplicate_email_rejected(db_session):
    db_session.add(UserFactory.create(email="taken@example.com"))
    await db_session.commit()

    with pytest.raises(HTTPException) as exc_info:
        await register_user(
            db_session, name="Again", email="TAKEN@example.com", password="secret1"
        )
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
@pytest.mark.unit
async def test_register_links_referrer(db_session):
    affiliate = AffiliateFactory.create(
        referral_code="AFF003", status=UserStatus.ACTIVE
    )
    db_session.add(affiliate)
    await db_session.commit()

    user = await register_user(
        db_session,
        name="Friend",
        email="friend@example.com",
        password="secret1",
        referral_code="aff003",
    )
    await db_session.commit()

    assert user.referred_by_id == affiliate.id
    assert await count_referrals(db_session, affiliate.id) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_register_unknown_referral_code_ignored(db_session):
    user = await register_user(
        db_session,
        name="Stranger",
        email="stranger@example.com",
        password="secret1",
        referral_code="AFF999",
    )
    await db_session.commit()

    assert user.referred_by_id is None


# ---------------------------------------------------------------------------
# authenticate
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_authenticate_success_resets_counter(db_session):
    user = UserFactory.create(email="login@example.com", failed_login_attempts=3)
    db_session.add(user)
    await db_session.commit()

    result = await authenticate(db_session, "login@example.com", DEFAULT_PASSWORD)

    assert result.id == user.id
    assert result.failed_login_attempts == 0
    assert result.last_login_at is not None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_authenticate_unknown_email_401(db_session):
    with pytest.raises(HTTPException) as exc_info:
        await authenticate(db_session, "nobody@example.com", "whatever")
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
@pytest.mark.unit
async def test_authenticate_locks_after_max_attempts(db_session):
    """The fifth wrong password locks the account; the right one is then refused."""
    user = UserFactory.create(email="victim@example.com")
    db_session.add(user)
    await db_session.commit()

    for _ in range(5):
        with pytest.raises(HTTPException) as exc_info:
            await authenticate(db_session, "victim@example.com", "wrong-password")
        assert exc_info.value.status_code == 401

    assert user.failed_login_attempts == 0
    assert ensure_utc(user.locked_until) > utc_now() + timedelta(minutes=14)

    with pytest.raises(HTTPException) as exc_info:
        await authenticate(db_session, "victim@example.com", DEFAULT_PASSWORD)
    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
@pytest.mark.unit
async def test_authenticate_expired_lock_allows_login(db_session):
    user = UserFactory.create(
        email="patient@example.com",
        locked_until=utc_now() - timedelta(minutes=1),
    )
    db_session.add(user)
    await db_session.commit()

    result = await authenticate(db_session, "patient@example.com", DEFAULT_PASSWORD)
    assert result.locked_until is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_authenticate_pending_affiliate_forbidden(db_session):
    db_session.add(
        AffiliateFactory.create(
            email="waiting@example.com", status=UserStatus.PENDING
        )
    )
    await db_session.commit()

    with pytest.raises(HTTPException) as exc_info:
        await authenticate(db_session, "waiting@example.com", DEFAULT_PASSWORD)
    assert exc_info.value.status_code == 403
