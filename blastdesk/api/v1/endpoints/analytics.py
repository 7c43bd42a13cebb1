from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blastdesk.core.database import get_db
from blastdesk.models import User
from blastdesk.modules.auth.dependencies import get_current_user
from blastdesk.schemas.history import AnalyticsResponse, DashboardResponse
from blastdesk.services import history_service

router = APIRouter()


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Totals and top campaigns over completed blasts"""
    return await history_service.get_analytics(db)


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await history_service.get_dashboard(db)
