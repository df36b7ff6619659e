"""Accounts service routers."""

from services.accounts_service.routers.admin import router as admin_router
from services.accounts_service.routers.affiliates import router as affiliates_router
from services.accounts_service.routers.auth import router as auth_router
from services.accounts_service.routers.users import router as users_router

__all__ = [
    "admin_router",
    "affiliates_router",
    "auth_router",
    "users_router",
]
