"""FastAPI application for the Reports Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.reports_service.routers import stats_router


def create_app() -> FastAPI:
    """Create and configure the Reports Service FastAPI app."""
    app = FastAPI(
        title="Luffy Streaming Reports Service",
        version="0.1.0",
        description="Admin dashboard statistics.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "reports"}

    app.include_router(stats_router, prefix="/api")
    return app


app = create_app()
