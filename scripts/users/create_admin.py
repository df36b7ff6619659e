import argparse
import asyncio
import getpass
import os
import sys
from pathlib import Path

# Add project root to path to import libs
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from dotenv import load_dotenv

# Load env file selected for the run (defaults to .env when ENV_FILE not set)
# MUST be done before importing libs that use get_settings()
project_root = Path(__file__).resolve().parents[2]
env_file = os.environ.get("ENV_FILE", ".env")
load_dotenv(project_root / env_file, override=True)

from libs.auth.passwords import hash_password
from libs.common.money import ZERO
from libs.db.config import AsyncSessionLocal
from services.accounts_service.models import AuditAction, User, UserRole, UserStatus
from services.accounts_service.services.accounts import (
    get_user_by_email,
    normalize_email,
)
from services.accounts_service.services.audit import record_audit


async def create_admin_user(email: str, password: str, name: str):
    print("🚀 Starting Admin User Creation Script")

    async with AsyncSessionLocal() as session:
        async with session.begin():
            existing = await get_user_by_email(session, email)

            if existing:
                print(f"⚠️ User {existing.email} already exists.")
                changed = []
                if existing.role != UserRole.ADMIN:
                    existing.role = UserRole.ADMIN
                    changed.append("role")
                if existing.status != UserStatus.ACTIVE:
                    existing.status = UserStatus.ACTIVE
                    changed.append("status")
                if changed:
                    await record_audit(
                        session,
                        AuditAction.USER_UPDATED,
                        "user",
                        existing.id,
                        details={"promoted_by": "create_admin script"},
                    )
                    print(f"✅ Updated {', '.join(changed)}; user is now an active admin.")
                else:
                    print("Nothing to do.")
                return

            print("Creating new admin user...")
            admin = User(
                email=normalize_email(email),
                password_hash=hash_password(password),
                name=name,
                role=UserRole.ADMIN,
                status=UserStatus.ACTIVE,
                wallet=ZERO,
                total_commissions=ZERO,
                pending_commissions=ZERO,
                failed_login_attempts=0,
            )
            session.add(admin)
            await session.flush()
            await record_audit(
                session,
                AuditAction.REGISTER,
                "user",
                admin.id,
                user_id=admin.id,
                details={"role": UserRole.ADMIN.value, "source": "create_admin script"},
            )

    print("\n🎉 Admin setup complete!")
    print(f"Email: {normalize_email(email)}")


def main():
    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("--email", default=os.environ.get("ADMIN_EMAIL", "admin@luffystreaming.com"))
    parser.add_argument("--name", default="Administrador")
    parser.add_argument(
        "--password",
        default=os.environ.get("ADMIN_PASSWORD"),
        help="Prompted for when neither this flag nor ADMIN_PASSWORD is set",
    )
    args = parser.parse_args()

    password = args.password or getpass.getpass("Admin password: ")
    if len(password) < 6:
        parser.error("password must be at least 6 characters")

    asyncio.run(create_admin_user(args.email, password, args.name))


if __name__ == "__main__":
    main()
