"""Sender email verification codes"""

from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from blastdesk.core.config import settings
from blastdesk.core.exceptions import ValidationError, EmailDeliveryError
from blastdesk.core.logging_config import logger
from blastdesk.core.security import generate_verification_code
from blastdesk.models import VerificationCode
from blastdesk.services.email_service import email_service


async def issue_code(db: AsyncSession, email: str) -> VerificationCode:
    """Create or replace the code for an address and mail it"""
    code = generate_verification_code()
    expires_at = datetime.utcnow() + timedelta(minutes=settings.VERIFICATION_CODE_TTL_MINUTES)

    record = await db.get(VerificationCode, email)
    if record:
        record.code = code
        record.expires_at = expires_at
    else:
        record = VerificationCode(email=email, code=code, expires_at=expires_at)
        db.add(record)
    await db.flush()

    sent = await email_service.send_verification_code(email, code)
    if not sent:
        raise EmailDeliveryError("Failed to send verification code", recipient=email)

    logger.info(f"[Verification] Code sent to {email}")
    return record


async def check_code(db: AsyncSession, email: str, code: str) -> None:
    """Consume a code; raises ValidationError describing why it was rejected"""
    record = await db.get(VerificationCode, email)
    if not record:
        raise ValidationError("No verification code found for this email", field="email")

    if record.expires_at < datetime.utcnow():
        await db.delete(record)
        # The expired row must go even though the request fails
        await db.commit()
        raise ValidationError("Verification code has expired", field="code")

    if record.code != code.strip():
        raise ValidationError("Invalid verification code", field="code")

    await db.delete(record)
    logger.info(f"[Verification] {email} verified")
