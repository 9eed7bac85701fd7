"""Periodic sync scheduling."""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

from .exceptions import SyncInProgressError
from .service import SyncService

logger = logging.getLogger(__name__)

MIN_INTERVAL_MINUTES = 5


class SyncScheduler:
    """Runs a full sync on startup and then at a fixed interval.

    Ticks run in one background task, so scheduled runs never overlap. A tick
    that fires while an on-demand sync is running is skipped. Stopping never
    cancels a run in progress.
    """

    def __init__(
        self,
        service: SyncService,
        interval_minutes: int = 30,
        run_on_startup: bool = True,
    ):
        """Initialize scheduler.

        Args:
            service: Sync service to trigger
            interval_minutes: Minutes between runs, raised to at least 5
            run_on_startup: Run a sync as soon as the scheduler starts
        """
        self.service = service
        self.interval_minutes = max(interval_minutes, MIN_INTERVAL_MINUTES)
        self.run_on_startup = run_on_startup

        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self.stats: dict[str, Any] = {
            "ticks": 0,
            "skipped_ticks": 0,
            "failed_ticks": 0,
            "last_run_at": None,
            "last_error": None,
        }

        if interval_minutes < MIN_INTERVAL_MINUTES:
            logger.warning(
                f"Sync interval {interval_minutes}m is below the minimum, "
                f"using {MIN_INTERVAL_MINUTES}m"
            )

    @property
    def interval_seconds(self) -> int:
        """Effective interval between runs in seconds."""
        return self.interval_minutes * 60

    @property
    def is_running(self) -> bool:
        """Check if the scheduler task is active."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background scheduling task."""
        if self.is_running:
            logger.warning("Sync scheduler already running")
            return

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run_loop(), name="sync-scheduler")
        logger.info(
            f"Sync scheduler started (interval: {self.interval_minutes}m)",
            extra={"interval_seconds": self.interval_seconds},
        )

    async def stop(self) -> None:
        """Stop the scheduler; safe to call more than once.

        A sync that is already running is allowed to finish first. Only the
        wait for the next tick is interrupted.
        """
        if self._task is None:
            return

        self._stop_event.set()
        if not self._task.done():
            if self.service.is_sync_in_progress():
                logger.info("Waiting for the running sync to finish")
            # Cancelling stop() must not cancel a run in progress
            await asyncio.shield(self._task)

        self._task = None
        logger.info("Sync scheduler stopped")

    async def _run_loop(self) -> None:
        """Main scheduling loop."""
        if self.run_on_startup:
            await self.run_once()

        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(), timeout=self.interval_seconds
                )
                # Stop event was set
                break
            except TimeoutError:
                await self.run_once()

    async def run_once(self) -> bool:
        """Run one scheduled sync unless a sync is already in progress.

        Failures are logged and do not stop the schedule.

        Returns:
            True if a sync ran to completion
        """
        self.stats["ticks"] += 1

        if self.service.is_sync_in_progress():
            self.stats["skipped_ticks"] += 1
            logger.info("Scheduled sync skipped: sync already in progress")
            return False

        try:
            progress = await self.service.sync_all()
        except SyncInProgressError:
            self.stats["skipped_ticks"] += 1
            logger.info("Scheduled sync skipped: sync already in progress")
            return False
        except Exception as e:
            self.stats["failed_ticks"] += 1
            self.stats["last_error"] = {
                "message": str(e),
                "timestamp": datetime.now(UTC),
            }
            logger.error(f"Scheduled sync failed: {e}")
            return False

        self.stats["last_run_at"] = datetime.now(UTC)
        logger.info(
            f"Scheduled sync finished: {progress.completed} succeeded, "
            f"{progress.failed} failed",
            extra={"job_id": progress.job_id},
        )
        return True
