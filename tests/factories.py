"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    user = UserFactory.create(email="custom@test.com")
    db_session.add(user)
    await db_session.commit()
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from libs.auth.passwords import hash_password

DEFAULT_PASSWORD = "secret123"

# Hashing is slow even at low rounds; hash the shared password once.
_DEFAULT_HASH = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex[:8]}@test.com"


def _password_hash() -> str:
    global _DEFAULT_HASH
    if _DEFAULT_HASH is None:
        _DEFAULT_HASH = hash_password(DEFAULT_PASSWORD)
    return _DEFAULT_HASH


# ---------------------------------------------------------------------------
# Accounts Service
# ---------------------------------------------------------------------------


class UserFactory:
    @staticmethod
    def create(**overrides):
        from services.accounts_service.models import User, UserRole, UserStatus

        defaults = {
            "id": _uuid(),
            "email": _unique_email(),
            "password_hash": _password_hash(),
            "name": "Test User",
            "phone": None,
            "role": UserRole.USER,
            "status": UserStatus.ACTIVE,
            "wallet": Decimal("0.00"),
            "total_commissions": Decimal("0.00"),
            "pending_commissions": Decimal("0.00"),
            "failed_login_attempts": 0,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return User(**defaults)


class AdminFactory:
    @staticmethod
    def create(**overrides):
        from services.accounts_service.models import UserRole

        defaults = {"name": "Test Admin", "role": UserRole.ADMIN}
        defaults.update(overrides)
        return UserFactory.create(**defaults)


class AffiliateFactory:
    @staticmethod
    def create(**overrides):
        from services.accounts_service.models import UserRole

        defaults = {
            "name": "Test Affiliate",
            "role": UserRole.AFFILIATE,
            "referral_code": f"AFF{uuid.uuid4().int % 900 + 100}",
        }
        defaults.update(overrides)
        return UserFactory.create(**defaults)


# ---------------------------------------------------------------------------
# Store Service
# ---------------------------------------------------------------------------


class ProductFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import (
            DeliveryType,
            Product,
            ProductStatus,
        )

        slug = f"product-{uuid.uuid4().hex[:8]}"
        defaults = {
            "id": _uuid(),
            "name": "Netflix Premium",
            "slug": slug,
            "description": "1 screen, 30 days",
            "provider": "Netflix",
            "category": "video",
            "price_usd": Decimal("4.00"),
            "price_pen": Decimal("14.64"),
            "stock": 10,
            "sold": 0,
            "delivery_type": DeliveryType.MANUAL,
            "status": ProductStatus.ACTIVE,
            "featured": False,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Product(**defaults)


class ProductAccountFactory:
    @staticmethod
    def create(product_id=None, **overrides):
        from services.store_service.models import AccountStatus, ProductAccount

        defaults = {
            "id": _uuid(),
            "product_id": product_id or _uuid(),
            "credentials": f"user-{uuid.uuid4().hex[:6]}@mail.com / pass123",
            "status": AccountStatus.AVAILABLE,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return ProductAccount(**defaults)


# ---------------------------------------------------------------------------
# Wallet Service
# ---------------------------------------------------------------------------


class RechargeFactory:
    @staticmethod
    def create(user_id=None, **overrides):
        from services.wallet_service.models import Recharge, RechargeStatus

        defaults = {
            "id": _uuid(),
            "user_id": user_id or _uuid(),
            "amount": Decimal("25.00"),
            "status": RechargeStatus.PENDING,
            "payment_method": "yape",
            "payment_reference": f"OP-{uuid.uuid4().hex[:6]}",
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Recharge(**defaults)


class OrderFactory:
    """A paid order with no items, for tests that only need the header row."""

    @staticmethod
    def create(user_id=None, **overrides):
        from services.store_service.models import Order, OrderStatus, PaymentStatus

        defaults = {
            "id": _uuid(),
            "order_number": f"LFS-{_now().year}-{uuid.uuid4().int % 9000 + 1000}",
            "user_id": user_id or _uuid(),
            "subtotal": Decimal("4.00"),
            "discount": Decimal("0.00"),
            "total": Decimal("4.00"),
            "status": OrderStatus.PROCESSING,
            "payment_status": PaymentStatus.PAID,
            "commission_paid": False,
            "paid_at": _now(),
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Order(**defaults)
