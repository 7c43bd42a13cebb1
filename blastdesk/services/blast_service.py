"""
Blast Service - personalised bulk email with optional e-card attachments

A blast is recorded as one BlastHistory row. Immediate blasts are sent inside
the request; scheduled blasts are stored with status Scheduled and sent later
by the scheduler (or an explicit dispatch), updating the same row.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from blastdesk.core.config import settings
from blastdesk.core.exceptions import (
    BlastAlreadyDispatchedError,
    ValidationError,
    TemplateNotFoundError,
    EcardGenerationError,
)
from blastdesk.core.logging_config import logger
from blastdesk.models import (
    BlastHistory,
    BlastStatus,
    EmailTemplate,
    GlobalSettings,
    Participant,
    RecipientStatus,
    UnsubscribedEmail,
    GLOBAL_SETTINGS_ID,
)
from blastdesk.schemas.blast import BlastRequest
from blastdesk.services.activity_log_service import log_activity
from blastdesk.services.backdrop_storage import BackdropStorage
from blastdesk.services.ecard_service import EcardLayout, generate_ecard_pdf
from blastdesk.services.email_service import EmailAttachment, email_service


ECARD_FILENAME = "ecard.pdf"

PLACEHOLDERS = {
    "{name}": "name",
    "{email}": "email",
    "{role}": "role",
    "{paEmail}": "pa_email",
}


@dataclass
class DeliveryResult:
    sent: int
    activity: List[Dict[str, Optional[str]]]


def personalize(body: str, participant: Participant) -> str:
    """Replace recipient placeholders; missing values become empty strings"""
    for placeholder, attribute in PLACEHOLDERS.items():
        body = body.replace(placeholder, getattr(participant, attribute, None) or "")
    return body


def build_unsubscribe_link(base_url: str, email: str) -> str:
    return f"{base_url.rstrip('/')}{settings.API_PREFIX}/unsubscribe?email={quote(email, safe='')}"


def to_utc_naive(value: datetime) -> datetime:
    """Stored datetimes are naive UTC"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


async def new_history_id(db: AsyncSession) -> str:
    millis = int(time.time() * 1000)
    while await db.get(BlastHistory, f"hist_{millis}") is not None:
        millis += 1
    return f"hist_{millis}"


async def resolve_wrappers(
    db: AsyncSession,
    header: Optional[str],
    footer: Optional[str]
) -> Tuple[str, str]:
    """Header and footer for a blast, falling back to the stored global settings"""
    if header is not None and footer is not None:
        return header, footer

    stored = await db.get(GlobalSettings, GLOBAL_SETTINGS_ID)
    if header is None:
        header = stored.global_header if stored else ""
    if footer is None:
        footer = stored.global_footer if stored else ""
    return header or "", footer or ""


async def load_recipients(db: AsyncSession, recipient_ids: Sequence[str]) -> List[Participant]:
    """Participants for the given ids, in request order, duplicates dropped"""
    ordered_ids = list(dict.fromkeys(recipient_ids))
    if not ordered_ids:
        return []

    result = await db.execute(select(Participant).where(Participant.id.in_(ordered_ids)))
    by_id = {p.id: p for p in result.scalars().all()}
    return [by_id[pid] for pid in ordered_ids if pid in by_id]


async def load_unsubscribed(db: AsyncSession) -> set:
    result = await db.execute(select(UnsubscribedEmail.email))
    return {email.lower() for email in result.scalars().all()}


async def deliver(
    db: AsyncSession,
    history: BlastHistory,
    template: EmailTemplate,
    recipients: List[Participant],
    base_url: str,
    storage: BackdropStorage
) -> DeliveryResult:
    """
    Send the stored body of `history` to each recipient and fill in the outcome.

    The backdrop is read once up front, so a missing file fails the blast
    before any mail goes out. Individual send or e-card failures mark that
    recipient Bounced and the loop continues.
    """
    backdrop = None
    layout = None
    if template.ecard_backdrop_path:
        backdrop = await storage.read(template.ecard_backdrop_path)
        layout = EcardLayout.from_source(template)

    unsubscribed = await load_unsubscribed(db)
    body = history.body or ""
    activity: List[Dict[str, Optional[str]]] = []
    sent = 0
    started = time.perf_counter()

    for index, recipient in enumerate(recipients):
        entry = {
            "participantId": recipient.id,
            "name": recipient.name,
            "email": recipient.email,
            "status": RecipientStatus.SENT.value,
        }
        activity.append(entry)

        if not recipient.email:
            logger.info(f"[Blast] Skipping recipient with no email: {recipient.name}")
            entry["status"] = RecipientStatus.BOUNCED.value
            continue

        if recipient.email.lower() in unsubscribed:
            logger.info(f"[Blast] Skipping unsubscribed recipient: {recipient.email}")
            entry["status"] = RecipientStatus.UNSUBSCRIBED.value
            continue

        html = personalize(body, recipient).replace(
            "{unsubscribe_link}", build_unsubscribe_link(base_url, recipient.email)
        )

        attachments = []
        if backdrop is not None:
            try:
                pdf_bytes = await asyncio.to_thread(
                    generate_ecard_pdf, recipient.name, recipient.role or "", backdrop, layout
                )
            except EcardGenerationError:
                entry["status"] = RecipientStatus.BOUNCED.value
                continue
            attachments.append(EmailAttachment(ECARD_FILENAME, pdf_bytes))

        ok = await email_service.send_blast_email(
            to_email=recipient.email,
            subject=history.subject or template.subject,
            html_content=html,
            sender_name=history.sender_name,
            attachments=attachments,
        )
        if ok:
            sent += 1
        else:
            entry["status"] = RecipientStatus.BOUNCED.value

        if settings.BLAST_SEND_DELAY_SECONDS > 0 and index < len(recipients) - 1:
            await asyncio.sleep(settings.BLAST_SEND_DELAY_SECONDS)

    history.detailed_recipient_activity = activity
    history.recipient_count = len(recipients)
    history.status = (BlastStatus.COMPLETED if sent > 0 else BlastStatus.FAILED).value
    history.sent_date = datetime.utcnow()
    history.delivery_rate = round(sent / len(recipients) * 100, 2) if recipients else 0.0
    history.open_rate = 0.0
    history.click_rate = 0.0
    history.unsubscribe_rate = 0.0

    logger.log_performance(
        f"blast {history.id}",
        (time.perf_counter() - started) * 1000,
        threshold_ms=60000,
        recipients=len(recipients),
        sent=sent,
    )
    return DeliveryResult(sent=sent, activity=activity)


async def create_blast(
    db: AsyncSession,
    request: BlastRequest,
    base_url: str,
    storage: BackdropStorage,
    actor: Optional[str] = None
) -> BlastHistory:
    """Validate a blast request, then send it now or store it as Scheduled"""
    if not request.template_id or request.recipient_ids is None or request.sender_profile is None:
        raise ValidationError("templateId, recipientIds, and senderProfile are required")

    if not request.sender_profile.verified:
        raise ValidationError("Sender email is not verified", field="senderProfile")

    template = await db.get(EmailTemplate, request.template_id)
    if not template:
        raise TemplateNotFoundError(request.template_id)

    recipients = await load_recipients(db, request.recipient_ids)
    if not recipients:
        raise ValidationError("No matching participants found for recipientIds", field="recipientIds")

    scheduled_date = None
    if request.scheduled_date is not None:
        scheduled_date = to_utc_naive(request.scheduled_date)
        if scheduled_date <= datetime.utcnow():
            raise ValidationError("Scheduled time must be in the future.", field="scheduledDate")

    header, footer = await resolve_wrappers(db, request.global_header, request.global_footer)
    details = request.blast_details

    history = BlastHistory(
        id=await new_history_id(db),
        template_id=template.id,
        template_name=(details.template_name if details else None) or template.name,
        subject=(details.subject if details else None) or template.subject,
        recipient_group=details.department_name if details else None,
        recipient_count=len(recipients),
        sender_name=request.sender_profile.name or settings.DEFAULT_SENDER_NAME,
        body=f"{header}{template.body or ''}{footer}",
        recipient_ids=[r.id for r in recipients],
        detailed_recipient_activity=[],
        delivery_rate=0.0,
        open_rate=0.0,
        click_rate=0.0,
        unsubscribe_rate=0.0,
    )

    if scheduled_date is not None:
        history.status = BlastStatus.SCHEDULED.value
        history.scheduled_date = scheduled_date
        db.add(history)
        log_activity(
            db, actor, "Email Blast",
            f"Blast '{history.template_name}' scheduled for {scheduled_date.isoformat()} "
            f"to {len(recipients)} recipients"
        )
        logger.info(f"[Blast] {history.id} scheduled for {scheduled_date.isoformat()}")
        return history

    result = await deliver(db, history, template, recipients, base_url, storage)
    db.add(history)
    log_activity(
        db, actor, "Email Blast",
        f"Blast '{history.template_name}' sent to {result.sent} of {len(recipients)} recipients"
    )
    logger.info(f"[Blast] {history.id} {history.status}: {result.sent}/{len(recipients)} sent")
    return history


async def claim_scheduled(db: AsyncSession, history: BlastHistory) -> None:
    """
    Move a Scheduled row out of Scheduled before any mail goes out.

    The status flips to Failed in its own committed UPDATE, guarded on the row
    still being Scheduled, so a concurrent dispatch or cancel finds nothing to
    claim. deliver() overwrites the status once sending finishes; if sending
    dies part way the row stays Failed.
    """
    history_id = history.id
    result = await db.execute(
        update(BlastHistory)
        .where(BlastHistory.id == history_id)
        .where(BlastHistory.status == BlastStatus.SCHEDULED.value)
        .values(status=BlastStatus.FAILED.value, sent_date=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise BlastAlreadyDispatchedError(history_id)

    await db.commit()
    await db.refresh(history)


async def dispatch_scheduled(
    db: AsyncSession,
    history: BlastHistory,
    base_url: str,
    storage: BackdropStorage,
    actor: Optional[str] = None
) -> BlastHistory:
    """Send a Scheduled history item now, updating it in place"""
    if history.status != BlastStatus.SCHEDULED.value:
        raise ValidationError("Only scheduled blasts can be dispatched", field="status")

    template = await db.get(EmailTemplate, history.template_id) if history.template_id else None
    if not template:
        raise TemplateNotFoundError(history.template_id or "")

    recipients = await load_recipients(db, history.recipient_ids or [])
    await claim_scheduled(db, history)
    result = await deliver(db, history, template, recipients, base_url, storage)

    log_activity(
        db, actor, "Email Blast",
        f"Scheduled blast '{history.template_name}' sent to {result.sent} of {len(recipients)} recipients"
    )
    logger.info(f"[Blast] Scheduled {history.id} {history.status}: {result.sent}/{len(recipients)} sent")
    return history
