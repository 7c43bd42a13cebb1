from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from blastdesk.core.database import get_db
from blastdesk.core.exceptions import ValidationError
from blastdesk.core.rate_limiter import limiter, VERIFICATION_LIMIT
from blastdesk.schemas.base import MessageResponse
from blastdesk.schemas.verification import SendVerificationCodeRequest, VerifyCodeRequest
from blastdesk.services import verification_service

router = APIRouter()


@router.post("/send-verification-code", response_model=MessageResponse)
@limiter.limit(VERIFICATION_LIMIT)
async def send_verification_code(
    request: Request,
    payload: SendVerificationCodeRequest,
    db: AsyncSession = Depends(get_db)
):
    """Email a 6-digit code to a sender address (rate limited: 3/min)"""
    if not payload.email or not payload.email.strip():
        raise ValidationError("Email is required", field="email")

    await verification_service.issue_code(db, payload.email.strip())
    return {"message": "Verification code sent"}


@router.post("/verify-code", response_model=MessageResponse)
async def verify_code(
    payload: VerifyCodeRequest,
    db: AsyncSession = Depends(get_db)
):
    """Check a code sent by /send-verification-code"""
    if not payload.email or not payload.code:
        raise ValidationError("Email and code are required")

    await verification_service.check_code(db, payload.email.strip(), payload.code)
    return {"message": "Email verified successfully"}
