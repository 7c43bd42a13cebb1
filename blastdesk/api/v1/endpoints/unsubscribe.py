from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import html

from blastdesk.core.database import get_db
from blastdesk.core.exceptions import ValidationError
from blastdesk.core.logging_config import logger
from blastdesk.core.rate_limiter import limiter, UNSUBSCRIBE_LIMIT
from blastdesk.models import UnsubscribedEmail
from blastdesk.schemas.base import MessageResponse
from blastdesk.schemas.blast import UnsubscribeRequest

router = APIRouter()

CONFIRMATION_PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Unsubscribed</title></head>
<body style="font-family: sans-serif; text-align: center; padding: 48px;">
<h2>You have been unsubscribed</h2>
<p>{email} will no longer receive these emails.</p>
</body>
</html>"""


async def unsubscribe_email(db: AsyncSession, email: Optional[str]) -> str:
    """Record an opt-out; repeating it is harmless"""
    if not email or not email.strip():
        raise ValidationError("Email is required", field="email")

    normalized = email.strip().lower()
    if not await db.get(UnsubscribedEmail, normalized):
        db.add(UnsubscribedEmail(email=normalized))
        logger.info(f"[Unsubscribe] {normalized} opted out")
    return normalized


@router.post("", response_model=MessageResponse)
@limiter.limit(UNSUBSCRIBE_LIMIT)
async def unsubscribe(
    request: Request,
    payload: UnsubscribeRequest,
    db: AsyncSession = Depends(get_db)
):
    await unsubscribe_email(db, payload.email)
    return {"message": "Email unsubscribed successfully"}


@router.get("", response_class=HTMLResponse)
@limiter.limit(UNSUBSCRIBE_LIMIT)
async def unsubscribe_link(
    request: Request,
    email: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """Target of the {unsubscribe_link} placeholder in sent emails"""
    normalized = await unsubscribe_email(db, email)
    return HTMLResponse(CONFIRMATION_PAGE.format(email=html.escape(normalized)))
