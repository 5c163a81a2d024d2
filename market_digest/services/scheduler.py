"""
Report Scheduler

Owns the run lock and the weekday schedule loop. Both the scheduled
loop and the on-demand endpoint go through `run_now`, so two runs never
overlap.

Usage:
    scheduler = ReportScheduler(settings)
    await scheduler.start()
    result = await scheduler.run_now(RunTrigger.MANUAL)
    await scheduler.stop()
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from market_digest.core.config import Settings, get_settings
from market_digest.core.schedule import get_local_now, next_run_time, seconds_until
from market_digest.schemas.report import RunResult, RunTrigger
from market_digest.services.base import RunInProgressError
from market_digest.services.pipeline import ReportPipeline, build_pipeline

logger = logging.getLogger(__name__)

SERVICE_NAME = "ReportScheduler"


class ReportScheduler:
    """Runs the report pipeline on schedule and on demand."""

    def __init__(
        self,
        settings: Settings,
        pipeline_factory: Callable[[Settings], ReportPipeline] = build_pipeline,
    ):
        self.settings = settings
        self._pipeline_factory = pipeline_factory
        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None
        self._running = False
        self.last_result: Optional[RunResult] = None

    @property
    def is_running(self) -> bool:
        """True while the schedule loop is active."""
        return self._running

    @property
    def run_in_progress(self) -> bool:
        return self._lock.locked()

    def next_run(self, after: Optional[datetime] = None) -> datetime:
        """Next scheduled slot strictly after `after` (default: now)."""
        return next_run_time(
            self.settings.report_time,
            self.settings.weekday_set,
            self.settings.report_timezone,
            now=after,
        )

    async def run_now(self, trigger: RunTrigger = RunTrigger.MANUAL) -> RunResult:
        """
        Run the pipeline once.

        Raises:
            RunInProgressError: If another run holds the lock
        """
        if self._lock.locked():
            raise RunInProgressError(SERVICE_NAME, "A report run is already in progress")

        async with self._lock:
            pipeline = self._pipeline_factory(self.settings)
            try:
                result = await pipeline.run(trigger)
            finally:
                await pipeline.close()

        self.last_result = result
        return result

    async def start(self) -> None:
        """Start the schedule loop."""
        if self._running:
            logger.warning("Report scheduler already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._schedule_loop())
        logger.info("Report scheduler started")

    async def stop(self) -> None:
        """Stop the schedule loop. A run in progress is cancelled."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Report scheduler stopped")

    async def _schedule_loop(self) -> None:
        slot = self.next_run()
        while self._running:
            try:
                delay = seconds_until(slot)
                logger.info(f"Next report run at {slot.isoformat()} (in {delay:.0f}s)")
                await asyncio.sleep(delay)
                await self.run_now(RunTrigger.SCHEDULE)
            except asyncio.CancelledError:
                break
            except RunInProgressError:
                logger.warning("Scheduled run skipped: another run is in progress")
            except Exception as e:
                logger.error(f"Scheduled run failed: {e}")

            # Slots missed while a run was going are skipped, not replayed
            now = get_local_now(self.settings.report_timezone)
            slot = self.next_run(after=max(slot, now))


_report_scheduler: Optional[ReportScheduler] = None


def get_report_scheduler() -> ReportScheduler:
    """Get or create the scheduler singleton."""
    global _report_scheduler
    if _report_scheduler is None:
        _report_scheduler = ReportScheduler(get_settings())
    return _report_scheduler


async def start_report_scheduler() -> ReportScheduler:
    """Start the scheduler singleton."""
    scheduler = get_report_scheduler()
    await scheduler.start()
    return scheduler


async def stop_report_scheduler() -> None:
    """Stop and discard the scheduler singleton."""
    global _report_scheduler
    if _report_scheduler:
        await _report_scheduler.stop()
        _report_scheduler = None
