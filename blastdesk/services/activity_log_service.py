"""Activity log: append-only trail of dashboard actions"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from blastdesk.core.logging_config import logger
from blastdesk.models import ActivityLog


SYSTEM_USER = "System"


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def log_activity(db: AsyncSession, user: Optional[str], action: str, details: str) -> ActivityLog:
    """
    Add an activity row to the caller's transaction.

    Nothing is flushed here; the row is committed together with the change it
    describes.
    """
    entry = ActivityLog(
        user=user or SYSTEM_USER,
        action=action,
        details=details,
        timestamp=_iso_now(),
    )
    db.add(entry)
    logger.debug(f"[Activity] {entry.user}: {action} - {details}")
    return entry


async def list_activity(db: AsyncSession, limit: Optional[int] = None) -> List[ActivityLog]:
    query = select(ActivityLog).order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())
    if limit:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())
