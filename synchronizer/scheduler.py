import asyncio
import logging
import threading
from typing import Awaitable, Callable, Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from core.exceptions import SchedulerError

logger = logging.getLogger(__name__)


class CancellationToken:
    """
    Cooperative stop signal shared by a synchronizer and its schedule.
    
    Safe to cancel from any thread; the synchronizer polls it between
    statements.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class RecurringSync:
    """
    Runs a sync coroutine at a fixed period on a single scheduler job.
    
    The first run happens one full period after ``start``. A firing that
    arrives while the previous run is still going is skipped
    (``max_instances=1``), and missed firings collapse into one
    (``coalesce=True``).
    """

    def __init__(
        self,
        job: Callable[[], Awaitable],
        period_seconds: float,
        token: CancellationToken,
        job_id: str = "dbsync_job"
    ):
        if period_seconds <= 0:
            raise SchedulerError(
                "Sync period must be positive",
                context={"period_seconds": period_seconds}
            )
        self.job = job
        self.period_seconds = period_seconds
        self.token = token
        self.job_id = job_id
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.current_pass: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        # Tracked here: shutdown() may complete on a later loop iteration
        return self.scheduler is not None

    async def run_job(self):
        """Job body: one sync pass unless the token has been cancelled"""
        if self.token.cancelled:
            logger.info("Scheduler: sync cancelled, skipping run")
            return
        logger.info("Scheduler: starting sync pass")
        # Shielded so that scheduler shutdown cannot interrupt a statement;
        # the pass itself stops at its next row once the token is cancelled
        self.current_pass = asyncio.ensure_future(self.job())
        try:
            await asyncio.shield(self.current_pass)
        except Exception as e:
            logger.error(f"Scheduler: sync pass failed - {e}")

    async def wait(self):
        """Wait for the pass in flight, if any, to finish"""
        if self.current_pass is None or self.current_pass.done():
            return
        try:
            await self.current_pass
        except Exception as e:
            logger.error(f"Scheduler: sync pass failed - {e}")

    def start(self):
        """Start the scheduler"""
        if self.running:
            raise SchedulerError("Recurring sync already started", context={"job_id": self.job_id})
        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.run_job,
            trigger=IntervalTrigger(seconds=self.period_seconds),
            id=self.job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        self.scheduler.start()
        logger.info(f"Sync scheduler started (every {self.period_seconds}s)")

    def stop(self):
        """Cancel the token and shut the scheduler down"""
        self.token.cancel()
        scheduler, self.scheduler = self.scheduler, None
        if scheduler is not None:
            scheduler.shutdown(wait=False)
            logger.info("Sync scheduler stopped")
