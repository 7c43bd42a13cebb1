"""
Blast Scheduler - sends Scheduled blasts once their time has come

Runs as a background task started from the application lifespan. Each pass
opens its own session and commits every blast separately, so one broken blast
does not hold back the others.
"""

import asyncio
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select

from blastdesk.core.config import settings
from blastdesk.core.database import AsyncSessionLocal
from blastdesk.core.exceptions import BlastAlreadyDispatchedError, BlastDeskError
from blastdesk.core.logging_config import logger
from blastdesk.models import BlastHistory, BlastStatus
from blastdesk.services.activity_log_service import SYSTEM_USER, log_activity
from blastdesk.services.backdrop_storage import BackdropStorage, backdrop_storage
from blastdesk.services.blast_service import dispatch_scheduled


class BlastScheduler:
    """Periodic dispatcher for due scheduled blasts"""

    def __init__(
        self,
        interval_seconds: Optional[int] = None,
        base_url: Optional[str] = None,
        storage: Optional[BackdropStorage] = None,
        session_factory=AsyncSessionLocal
    ):
        self.interval_seconds = interval_seconds or settings.BLAST_SCHEDULER_INTERVAL_SECONDS
        self.base_url = base_url or settings.PUBLIC_BASE_URL
        self.storage = storage or backdrop_storage
        self.session_factory = session_factory
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def due_ids(self, now: datetime) -> List[str]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(BlastHistory.id)
                .where(BlastHistory.status == BlastStatus.SCHEDULED.value)
                .where(BlastHistory.scheduled_date <= now)
                .order_by(BlastHistory.scheduled_date)
            )
            return list(result.scalars().all())

    async def run_due(self, now: Optional[datetime] = None) -> int:
        """Dispatch every blast whose scheduled date has passed; returns how many were processed"""
        now = now or datetime.utcnow()
        processed = 0

        for history_id in await self.due_ids(now):
            async with self.session_factory() as session:
                history = await session.get(BlastHistory, history_id)
                if history is None or history.status != BlastStatus.SCHEDULED.value:
                    continue

                try:
                    await dispatch_scheduled(session, history, self.base_url, self.storage, actor=SYSTEM_USER)
                    await session.commit()
                except BlastAlreadyDispatchedError:
                    logger.info(f"[Scheduler] Blast {history_id} already taken by another dispatch")
                    continue
                except BlastDeskError as e:
                    await session.rollback()
                    await self._mark_failed(history_id, e.message)
                processed += 1

        return processed

    async def _mark_failed(self, history_id: str, reason: str) -> None:
        async with self.session_factory() as session:
            history = await session.get(BlastHistory, history_id)
            if history is None or history.status == BlastStatus.COMPLETED.value:
                return
            history.status = BlastStatus.FAILED.value
            history.sent_date = datetime.utcnow()
            history.delivery_rate = 0.0
            log_activity(
                session, SYSTEM_USER, "Email Blast",
                f"Scheduled blast '{history.template_name}' failed: {reason}"
            )
            await session.commit()
        logger.warning(f"[Scheduler] Blast {history_id} failed: {reason}")

    def start(self) -> None:
        """Start the background loop"""
        if self.is_running:
            return

        async def scheduler_loop():
            while True:
                try:
                    count = await self.run_due()
                    if count:
                        logger.info(f"[Scheduler] Dispatched {count} scheduled blast(s)")
                except Exception as e:
                    logger.log_error_with_context(e, context="blast scheduler")
                await asyncio.sleep(self.interval_seconds)

        self._task = asyncio.create_task(scheduler_loop())
        logger.info(f"[Scheduler] Started (interval {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Stop the background loop"""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("[Scheduler] Stopped")


blast_scheduler = BlastScheduler()
