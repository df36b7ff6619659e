"""FastAPI application for the Store Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.store_service.routers import (
    admin_catalog_router,
    admin_orders_router,
    catalog_router,
    commissions_router,
    orders_router,
)


def create_app() -> FastAPI:
    """Create and configure the Store Service FastAPI app."""
    app = FastAPI(
        title="Luffy Streaming Store Service",
        version="0.1.0",
        description="Product catalog, credential pool, orders, fulfillment and commissions.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "store"}

    # Public catalog and customer orders
    app.include_router(catalog_router, prefix="/api")
    app.include_router(orders_router, prefix="/api")

    # Admin routes (products, pool, fulfillment, commissions)
    app.include_router(admin_catalog_router, prefix="/api")
    app.include_router(admin_orders_router, prefix="/api")
    app.include_router(commissions_router, prefix="/api")

    return app


app = create_app()
