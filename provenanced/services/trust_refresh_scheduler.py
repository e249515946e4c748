"""Trust list refresh scheduler for provenanced.

Drives periodic trust list refreshes using APScheduler, independent of
request traffic.

Architecture:
- Uses APScheduler AsyncIOScheduler with a single interval job
- First run fires immediately at startup without blocking it
- Overlapping runs are coalesced; the cache manager itself allows only one
  refresh in flight
- Lifecycle: start with daemon, stop on shutdown
"""

import logging
from datetime import UTC
from datetime import datetime
from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from provenance_library.trust import TrustListCacheManager

logger = logging.getLogger(__name__)

JOB_ID = "trust-list-refresh"


class TrustRefreshScheduler:
    """Schedules background refreshes of the trust list cache."""

    def __init__(self, manager: TrustListCacheManager, interval: timedelta | None = None) -> None:
        """Initialize refresh scheduler.

        Args:
            manager: Trust list cache manager to refresh
            interval: Time between refreshes (default: the manager's refresh interval)
        """
        self.manager = manager
        self.interval = interval or manager.refresh_interval
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self._running = False

    @property
    def running(self) -> bool:
        """Whether the scheduler has been started."""
        return self._running

    async def start(self) -> None:
        """Start scheduler and register the refresh job.

        Idempotent - safe to call multiple times.
        """
        if self._running:
            logger.warning("Trust refresh scheduler already running")
            return

        if not self.manager.enabled:
            logger.info("Trust list verification is disabled, refresh scheduler not started")
            return

        logger.info(f"Starting trust refresh scheduler (interval: {self.interval})")
        self.scheduler.add_job(
            func=self._run_refresh,
            trigger=IntervalTrigger(seconds=self.interval.total_seconds()),
            id=JOB_ID,
            name="Trust list refresh",
            next_run_time=datetime.now(UTC),
            coalesce=True,
            max_instances=1,
            replace_existing=True,
        )
        self.scheduler.start()
        self._running = True

    async def stop(self) -> None:
        """Stop scheduler.

        Does not wait for a running refresh; the cache manager leaves the
        previous cache intact if a cycle is interrupted.
        """
        if not self._running:
            logger.warning("Trust refresh scheduler not running")
            return

        logger.info("Stopping trust refresh scheduler")
        self.scheduler.shutdown(wait=False)
        self._running = False
        logger.info("Trust refresh scheduler stopped")

    def next_run_time(self) -> datetime | None:
        """Get the next scheduled refresh time, if scheduled."""
        job = self.scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

    async def _run_refresh(self) -> None:
        """Run one scheduled refresh.

        Errors are logged and not re-raised so the job keeps its schedule.
        """
        try:
            success = await self.manager.refresh()
            logger.info(f"Scheduled trust list refresh finished (complete: {success})")
        except Exception as e:
            logger.error(f"Scheduled trust list refresh failed: {e}", exc_info=True)
