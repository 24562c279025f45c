from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.database import get_db
from ...core.security import CurrentUser, get_current_admin
from ...services.admin_stats_service import AdminStatsService

router = APIRouter(prefix="/api/v1/admin/stats", tags=["Admin - Dashboard"])


@router.get("/", response_model=dict)
async def get_dashboard_stats(
    admin: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Dashboard totals. Figures are read independently and may be slightly out of step."""
    service = AdminStatsService(db)
    return await service.get_stats()
