from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from blastdesk.core.database import get_db
from blastdesk.models import BlastStatus, User
from blastdesk.modules.auth.dependencies import get_current_user
from blastdesk.schemas.blast import BlastRequest, BlastResponse
from blastdesk.services.backdrop_storage import BackdropStorage, get_backdrop_storage
from blastdesk.services.blast_service import create_blast
from blastdesk.services.history_service import to_response

router = APIRouter()


@router.post("", response_model=BlastResponse)
async def send_blast(
    request: Request,
    payload: BlastRequest,
    db: AsyncSession = Depends(get_db),
    storage: BackdropStorage = Depends(get_backdrop_storage),
    current_user: User = Depends(get_current_user)
):
    """
    Send a blast now, or schedule it when scheduledDate is given.

    Unsubscribe links point back at the host this request was made to.
    """
    history = await create_blast(
        db,
        payload,
        base_url=str(request.base_url),
        storage=storage,
        actor=current_user.username,
    )

    if history.status == BlastStatus.SCHEDULED.value:
        message = "Email blast scheduled successfully"
    elif history.status == BlastStatus.COMPLETED.value:
        message = "Email blast sent successfully"
    else:
        message = "Email blast failed: no emails could be delivered"

    return {"message": message, "history": to_response(history)}
