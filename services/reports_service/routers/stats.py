from fastapi import APIRouter, Depends
from libs.db.session import get_async_db
from services.accounts_service.dependencies import require_admin
from services.accounts_service.models import User
from services.reports_service.schemas import AdminDashboardResponse
from services.reports_service.services.stats import build_dashboard
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["dashboard"])


@router.get("/stats/admin", response_model=AdminDashboardResponse)
async def get_admin_dashboard_stats(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Get statistics for the admin dashboard.
    """
    return await build_dashboard(db)
