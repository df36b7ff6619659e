#!/usr/bin/env python3
"""
Seed demo data for development.

Creates an admin, customers and affiliates, a small catalog with credential
pools, funded wallets, a couple of orders (one referred, so it earns a
commission) and a pending recharge.

Wallets are funded through approved recharges rather than by writing the
balance directly, so every seeded balance is backed by ledger entries.

Idempotent: does nothing when the demo admin already exists.
"""

import asyncio
import os
import sys
from decimal import Decimal
from pathlib import Path

# Add project root to path
project_root = os.path.dirname(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
)
sys.path.insert(0, project_root)

from dotenv import load_dotenv

load_dotenv(Path(project_root) / os.environ.get("ENV_FILE", ".env"), override=True)

from libs.auth.passwords import hash_password
from libs.common.money import ZERO
from libs.db.config import AsyncSessionLocal
from services.accounts_service.models import AuditAction, User, UserRole, UserStatus
from services.accounts_service.services import system_config
from services.accounts_service.services.accounts import (
    ensure_referral_code,
    get_user_by_email,
    register_user,
)
from services.accounts_service.services.audit import record_audit
from services.store_service.models import DeliveryType
from services.store_service.schemas import OrderItemCreate, ProductCreate
from services.store_service.services.catalog import add_accounts, create_product
from services.store_service.services.orders import deliver_item, place_order
from services.wallet_service.services.recharge_service import (
    approve_recharge,
    create_recharge,
)

# ---------------------------------------------------------------------------
# Demo definitions
# ---------------------------------------------------------------------------

ADMIN_EMAIL = "admin@luffystreaming.com"
ADMIN_PASSWORD = "Admin123!"
USER_PASSWORD = "User123!"
AFFILIATE_PASSWORD = "Affiliate123!"

SEED_USERS = [
    # (email, name, phone, role, password, funded amount, referred by affiliate)
    ("affiliate@luffystreaming.com", "Afiliado Demo", "+51912345678", UserRole.AFFILIATE, AFFILIATE_PASSWORD, "25.00", False),
    ("user@luffystreaming.com", "Usuario Demo", "+51987654321", UserRole.USER, USER_PASSWORD, "50.00", False),
    ("juan.perez@example.com", "Juan Pérez", None, UserRole.USER, USER_PASSWORD, "20.00", True),
    ("maria.garcia@example.com", "María García", None, UserRole.USER, USER_PASSWORD, "15.00", False),
    ("carlos.rodriguez@example.com", "Carlos Rodríguez", None, UserRole.USER, USER_PASSWORD, "30.00", True),
    ("ana.martinez@example.com", "Ana Martínez", None, UserRole.AFFILIATE, AFFILIATE_PASSWORD, None, False),
]

SEED_PRODUCTS = [
    {
        "name": "Netflix Premium",
        "description": "4 pantallas simultáneas, 4K Ultra HD. Duración: 1 mes.",
        "provider": "MISTERSHIFU",
        "category": "Streaming",
        "price_usd": Decimal("3.10"),
        "delivery_type": DeliveryType.AUTOMATIC,
        "featured": True,
        "accounts": [
            "netflix01@luffy.demo / Nf-2931",
            "netflix02@luffy.demo / Nf-8842",
            "netflix03@luffy.demo / Nf-1170",
        ],
    },
    {
        "name": "Disney Plus",
        "description": "Perfil personal, HD. Duración: 1 mes.",
        "provider": "MISTERSHIFU",
        "category": "Streaming",
        "price_usd": Decimal("2.50"),
        "delivery_type": DeliveryType.AUTOMATIC,
        "featured": True,
        "accounts": ["disney01@luffy.demo / Dp-4410", "disney02@luffy.demo / Dp-7723"],
    },
    {
        "name": "Spotify Premium",
        "description": "Activación en tu propia cuenta. Duración: 1 mes.",
        "provider": "LUFFY",
        "category": "Música",
        "price_usd": Decimal("2.00"),
        "stock": 20,
        "delivery_type": DeliveryType.MANUAL,
    },
    {
        "name": "HBO Max",
        "description": "Perfil personal. Duración: 1 mes.",
        "provider": "LUFFY",
        "category": "Streaming",
        "price_usd": Decimal("2.80"),
        "stock": 10,
        "delivery_type": DeliveryType.MANUAL,
    },
]


async def _create_admin(session) -> User:
    admin = User(
        email=ADMIN_EMAIL,
        password_hash=hash_password(ADMIN_PASSWORD),
        name="Administrador",
        role=UserRole.ADMIN,
        status=UserStatus.ACTIVE,
        wallet=ZERO,
        total_commissions=ZERO,
        pending_commissions=ZERO,
        failed_login_attempts=0,
    )
    session.add(admin)
    await session.flush()
    return admin


async def _fund(session, user: User, amount: str, admin: User) -> None:
    recharge = await create_recharge(
        session,
        user_id=user.id,
        amount=Decimal(amount),
        payment_method="yape",
        payment_reference=f"SEED-{user.email.split('@')[0].upper()}",
    )
    await approve_recharge(session, recharge_id=recharge.id, admin_id=admin.id)


async def seed_demo_data():
    print("🌱 Seeding demo data...")

    async with AsyncSessionLocal() as session:
        async with session.begin():
            if await get_user_by_email(session, ADMIN_EMAIL):
                print(f"⏭️  {ADMIN_EMAIL} already exists, skipping seed")
                return

            # Users
            admin = await _create_admin(session)
            print(f"✅ Admin created: {admin.email}")

            affiliate = None
            users: dict[str, User] = {}
            for email, name, phone, role, password, funded, referred in SEED_USERS:
                user = await register_user(
                    session,
                    name=name,
                    email=email,
                    password=password,
                    role=role,
                    phone=phone,
                    referral_code=affiliate.referral_code if referred and affiliate else None,
                )
                if affiliate is None and role == UserRole.AFFILIATE:
                    # The first affiliate is approved; later ones stay PENDING
                    user.status = UserStatus.ACTIVE
                    await ensure_referral_code(session, user)
                    affiliate = user
                if funded:
                    await _fund(session, user, funded, admin)
                users[email] = user
            print(f"✅ {len(users)} users created (affiliate code {affiliate.referral_code})")

            # Catalog
            products = {}
            for entry in SEED_PRODUCTS:
                entry = dict(entry)
                accounts = entry.pop("accounts", [])
                product = await create_product(session, ProductCreate(**entry))
                if accounts:
                    await add_accounts(session, product, accounts)
                products[product.slug] = product
            print(f"✅ {len(products)} products created")

            # Orders: one automatic, one manual from a referred customer
            demo_user = users["user@luffystreaming.com"]
            await place_order(
                session,
                demo_user,
                [OrderItemCreate(product_id=products["netflix-premium"].id, quantity=1)],
            )
            referred = users["juan.perez@example.com"]
            manual_order = await place_order(
                session,
                referred,
                [
                    OrderItemCreate(product_id=products["spotify-premium"].id, quantity=1),
                    OrderItemCreate(product_id=products["disney-plus"].id, quantity=1),
                ],
                notes="Activar en juan.perez@example.com",
            )
            pending = [i for i in manual_order.items if not i.delivered]
            if pending:
                await deliver_item(
                    session, manual_order, pending[0].id, "Spotify activado en tu cuenta"
                )
            print("✅ Orders created (one earns a commission)")

            # Outstanding work for the admin queue
            await create_recharge(
                session,
                user_id=users["maria.garcia@example.com"].id,
                amount=Decimal("10.00"),
                payment_method="plin",
                payment_reference="SEED-PENDING",
            )

            await system_config.set_config_value(
                session, system_config.WHATSAPP_NUMBER, "+51987654321"
            )
            await record_audit(
                session,
                AuditAction.CONFIG_UPDATED,
                "system_config",
                system_config.WHATSAPP_NUMBER,
                user_id=admin.id,
                details={"source": "seed"},
            )

    print("\n🎉 Demo data ready!")
    print(f"Admin:     {ADMIN_EMAIL} / {ADMIN_PASSWORD}")
    print(f"User:      user@luffystreaming.com / {USER_PASSWORD}")
    print(f"Affiliate: affiliate@luffystreaming.com / {AFFILIATE_PASSWORD}")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
