from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from blastdesk.core.database import get_db
from blastdesk.models import User
from blastdesk.modules.auth.dependencies import get_current_user
from blastdesk.schemas.misc import ActivityLogResponse
from blastdesk.services.activity_log_service import list_activity

router = APIRouter()


@router.get("", response_model=List[ActivityLogResponse])
async def get_activity_logs(
    limit: Optional[int] = Query(None, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Activity log, newest first"""
    return await list_activity(db, limit)
