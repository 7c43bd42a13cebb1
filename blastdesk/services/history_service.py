"""History queries, analytics and dashboard counts"""

from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from blastdesk.core.exceptions import HistoryNotFoundError, ValidationError
from blastdesk.models import (
    BlastHistory,
    BlastStatus,
    Department,
    EmailTemplate,
    Participant,
)
from blastdesk.schemas.history import BlastHistoryResponse


TOP_CAMPAIGNS = 5
RECENT_HISTORY = 5


def _clean_activity(items: List[Any]) -> List[Dict[str, Any]]:
    cleaned = []
    for item in items or []:
        if isinstance(item, dict) and item.get("status"):
            cleaned.append({
                "participantId": None if item.get("participantId") is None else str(item["participantId"]),
                "name": item.get("name"),
                "email": item.get("email"),
                "status": str(item["status"]),
            })
    return cleaned


def to_response(history: BlastHistory) -> BlastHistoryResponse:
    """API view of a history row; malformed stored list entries are dropped"""
    return BlastHistoryResponse(
        id=history.id,
        template_id=history.template_id,
        template_name=history.template_name,
        subject=history.subject,
        recipient_group=history.recipient_group,
        recipient_count=history.recipient_count or 0,
        sender_name=history.sender_name,
        sent_date=history.sent_date,
        status=history.status,
        scheduled_date=history.scheduled_date,
        delivery_rate=history.delivery_rate or 0.0,
        open_rate=history.open_rate or 0.0,
        click_rate=history.click_rate or 0.0,
        unsubscribe_rate=history.unsubscribe_rate or 0.0,
        body=history.body,
        recipient_ids=[str(i) for i in history.recipient_ids or [] if i is not None],
        detailed_recipient_activity=_clean_activity(history.detailed_recipient_activity),
    )


async def list_history(db: AsyncSession) -> List[BlastHistory]:
    """All items, newest first; scheduled items sort by their scheduled date"""
    result = await db.execute(select(BlastHistory))
    items = list(result.scalars().all())
    items.sort(key=lambda h: h.order_date or datetime.min, reverse=True)
    return items


async def get_history(db: AsyncSession, history_id: str) -> BlastHistory:
    history = await db.get(BlastHistory, history_id)
    if not history:
        raise HistoryNotFoundError(history_id)
    return history


async def reset_history(db: AsyncSession) -> int:
    result = await db.execute(delete(BlastHistory))
    return result.rowcount or 0


async def cancel_scheduled(db: AsyncSession, history_id: str) -> BlastHistory:
    history = await get_history(db, history_id)
    if history.status != BlastStatus.SCHEDULED.value:
        raise ValidationError("Only scheduled blasts can be cancelled", field="status")

    # Re-checked at delete time; a dispatch may have claimed the row since it was read
    result = await db.execute(
        delete(BlastHistory)
        .where(BlastHistory.id == history_id)
        .where(BlastHistory.status == BlastStatus.SCHEDULED.value)
    )
    if result.rowcount != 1:
        raise ValidationError("Only scheduled blasts can be cancelled", field="status")
    return history


async def get_analytics(db: AsyncSession) -> Dict[str, Any]:
    result = await db.execute(
        select(BlastHistory).where(BlastHistory.status == BlastStatus.COMPLETED.value)
    )
    completed = list(result.scalars().all())

    top = sorted(completed, key=lambda h: h.recipient_count or 0, reverse=True)[:TOP_CAMPAIGNS]
    return {
        "total_campaigns": len(completed),
        "total_emails_sent": sum(h.recipient_count or 0 for h in completed),
        "top_campaigns": [
            {
                "id": h.id,
                "template_name": h.template_name,
                "recipient_count": h.recipient_count or 0,
                "sent_date": h.sent_date,
            }
            for h in top
        ],
    }


async def _count(db: AsyncSession, model, *conditions) -> int:
    query = select(func.count()).select_from(model)
    for condition in conditions:
        query = query.where(condition)
    return (await db.execute(query)).scalar_one()


async def get_dashboard(db: AsyncSession) -> Dict[str, Any]:
    history = await list_history(db)
    return {
        "participants": await _count(db, Participant),
        "departments": await _count(db, Department),
        "templates": await _count(db, EmailTemplate),
        "completed_campaigns": await _count(
            db, BlastHistory, BlastHistory.status == BlastStatus.COMPLETED.value
        ),
        "scheduled_campaigns": await _count(
            db, BlastHistory, BlastHistory.status == BlastStatus.SCHEDULED.value
        ),
        "recent_history": [to_response(h) for h in history[:RECENT_HISTORY]],
    }
