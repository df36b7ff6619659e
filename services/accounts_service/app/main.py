"""FastAPI application for the Accounts Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.accounts_service.routers import (
    admin_router,
    affiliates_router,
    auth_router,
    users_router,
)
from slowapi.errors import RateLimitExceeded


def create_app() -> FastAPI:
    """Create and configure the Accounts Service FastAPI app."""
    app = FastAPI(
        title="Luffy Streaming Accounts Service",
        version="0.1.0",
        description="Authentication, users, affiliates, audit log and system configuration.",
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "accounts"}

    app.include_router(auth_router, prefix="/api")
    app.include_router(users_router, prefix="/api")
    app.include_router(affiliates_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")

    return app


app = create_app()
