"""Reports service routers."""

from services.reports_service.routers.stats import router as stats_router

__all__ = ["stats_router"]
