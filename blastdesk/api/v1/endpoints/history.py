from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import List

from blastdesk.core.database import get_db
from blastdesk.core.logging_config import logger
from blastdesk.models import User
from blastdesk.modules.auth.dependencies import get_current_user, get_current_super_admin
from blastdesk.schemas.base import MessageResponse
from blastdesk.schemas.history import BlastHistoryResponse
from blastdesk.services import history_service, report_service
from blastdesk.services.activity_log_service import log_activity
from blastdesk.services.backdrop_storage import BackdropStorage, get_backdrop_storage
from blastdesk.services.blast_service import dispatch_scheduled

router = APIRouter()


@router.get("", response_model=List[BlastHistoryResponse])
async def list_history(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    items = await history_service.list_history(db)
    return [history_service.to_response(item) for item in items]


@router.get("/export")
async def export_history(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Export all history rows as CSV"""
    items = await history_service.list_history(db)
    filename = f"blast_history_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}.csv"

    return StreamingResponse(
        iter([report_service.export_history_csv(items)]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.delete("/reset", response_model=MessageResponse)
async def reset_history(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_super_admin)
):
    """Delete all history (SuperAdmin only)"""
    deleted = await history_service.reset_history(db)
    log_activity(db, current_user.username, "History Reset", "All blast history has been deleted.")
    logger.warning(f"[History] {current_user.username} deleted {deleted} history items")
    return {"message": "Blast history has been successfully reset."}


@router.delete("/{history_id}")
async def cancel_scheduled_blast(
    history_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Cancel a blast that has not been sent yet"""
    history = await history_service.cancel_scheduled(db, history_id)
    log_activity(
        db, current_user.username, "Scheduled Blast Cancelled",
        f"Scheduled blast '{history.template_name}' ({history_id}) cancelled"
    )
    return {"deletedID": history_id}


@router.post("/{history_id}/dispatch", response_model=BlastHistoryResponse)
async def dispatch_now(
    history_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: BackdropStorage = Depends(get_backdrop_storage),
    current_user: User = Depends(get_current_user)
):
    """Send a scheduled blast immediately"""
    history = await history_service.get_history(db, history_id)
    await dispatch_scheduled(
        db, history, base_url=str(request.base_url), storage=storage, actor=current_user.username
    )
    return history_service.to_response(history)


@router.get("/{history_id}/report")
async def download_report(
    history_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Campaign report as PDF"""
    history = await history_service.get_history(db, history_id)
    content = report_service.generate_campaign_report(history)

    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{report_service.report_filename(history)}"'}
    )
