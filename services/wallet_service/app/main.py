"""FastAPI application for the Wallet Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.wallet_service.routers import recharges_router, wallet_router


def create_app() -> FastAPI:
    """Create and configure the Wallet Service FastAPI app."""
    app = FastAPI(
        title="Luffy Streaming Wallet Service",
        version="0.1.0",
        description="Wallet ledger, recharges and admin balance adjustments.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "wallet"}

    app.include_router(recharges_router, prefix="/api")
    app.include_router(wallet_router, prefix="/api")

    return app


app = create_app()
