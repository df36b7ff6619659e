"""Wallet service routers."""

from services.wallet_service.routers.recharges import router as recharges_router
from services.wallet_service.routers.wallet import router as wallet_router

__all__ = [
    "recharges_router",
    "wallet_router",
]
