"""FastAPI application entrypoint for the Luffy Streaming API.

Every service shares one database, so the gateway mounts their routers
in-process under ``/api`` rather than proxying to separate deployments.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.accounts_service.routers import (
    admin_router,
    affiliates_router,
    auth_router,
    users_router,
)
from services.reports_service.routers import stats_router
from services.store_service.routers import (
    admin_catalog_router,
    admin_orders_router,
    catalog_router,
    commissions_router,
    orders_router,
)
from services.wallet_service.routers import recharges_router, wallet_router

API_PREFIX = "/api"


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = get_settings()
    app = FastAPI(
        title="Luffy Streaming API",
        version="0.1.0",
        description="Streaming account store: wallet payments, fulfillment and affiliates.",
    )

    # Add rate limiter state to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    @app.get(f"{API_PREFIX}/health", tags=["system"], include_in_schema=False)
    async def health_check() -> dict[str, str]:
        """Simple readiness endpoint."""
        return {"status": "ok"}

    # Accounts: auth, users, affiliates, config, audit log
    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(users_router, prefix=API_PREFIX)
    app.include_router(affiliates_router, prefix=API_PREFIX)
    app.include_router(admin_router, prefix=API_PREFIX)

    # Wallet: recharges, ledger, adjustments
    app.include_router(recharges_router, prefix=API_PREFIX)
    app.include_router(wallet_router, prefix=API_PREFIX)

    # Store: catalog, orders, fulfillment, commissions
    app.include_router(catalog_router, prefix=API_PREFIX)
    app.include_router(admin_catalog_router, prefix=API_PREFIX)
    app.include_router(orders_router, prefix=API_PREFIX)
    app.include_router(admin_orders_router, prefix=API_PREFIX)
    app.include_router(commissions_router, prefix=API_PREFIX)

    # Reports
    app.include_router(stats_router, prefix=API_PREFIX)

    return app


app = create_app()
