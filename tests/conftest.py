"""Shared fixtures: one committed user per role and token headers for them.

Engine, session and HTTP client fixtures live in the root conftest.py.
"""

from decimal import Decimal

import pytest
import pytest_asyncio
from services.accounts_service.models import UserStatus
from tests.factories import (
    AdminFactory,
    AffiliateFactory,
    ProductFactory,
    UserFactory,
)
from tests.helpers import auth_headers, persist


@pytest_asyncio.fixture
async def admin_user(db_session):
    return await persist(db_session, AdminFactory.create(email="admin@luffy.test"))


@pytest_asyncio.fixture
async def customer(db_session):
    """Active USER with $50.00 in the wallet."""
    return await persist(
        db_session,
        UserFactory.create(email="customer@luffy.test", wallet=Decimal("50.00")),
    )


@pytest_asyncio.fixture
async def affiliate(db_session):
    """Approved affiliate holding referral code AFF001."""
    return await persist(
        db_session,
        AffiliateFactory.create(
            email="affiliate@luffy.test",
            referral_code="AFF001",
            status=UserStatus.ACTIVE,
        ),
    )


@pytest_asyncio.fixture
async def referred_customer(db_session, affiliate):
    """Customer who signed up through AFF001, with $50.00 in the wallet."""
    return await persist(
        db_session,
        UserFactory.create(
            email="referred@luffy.test",
            wallet=Decimal("50.00"),
            referred_by_id=affiliate.id,
        ),
    )


@pytest_asyncio.fixture
async def product(db_session):
    """Active MANUAL product at $4.00 with 10 in stock."""
    return await persist(db_session, ProductFactory.create())


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def affiliate_headers(affiliate):
    return auth_headers(affiliate)
