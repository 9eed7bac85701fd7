"""Progress tracking for full sync runs."""

import asyncio
import copy
from datetime import UTC, datetime

from .exceptions import SyncInProgressError
from .models import SyncProgress, SyncResult


class SyncProgressTracker:
    """Owns the progress of the current or most recent full sync.

    Holds None until the first run starts. Every mutation goes through the
    tracker's lock, so concurrent completions never interleave their updates.
    Readers always get a copy.
    """

    def __init__(self) -> None:
        self._progress: SyncProgress | None = None
        self._lock = asyncio.Lock()

    @property
    def is_in_progress(self) -> bool:
        """Check if a run is currently in progress."""
        return self._progress is not None and self._progress.in_progress

    async def start(self, job_id: str, total: int) -> SyncProgress:
        """Begin a new run, replacing the previous run's progress.

        Raises:
            SyncInProgressError: If another run has not finished yet
        """
        async with self._lock:
            if self._progress is not None and self._progress.in_progress:
                raise SyncInProgressError(self._progress.job_id)
            self._progress = SyncProgress(job_id=job_id, total=total)
            return copy.deepcopy(self._progress)

    async def record(self, result: SyncResult) -> None:
        """Record one repository's result in the running job."""
        async with self._lock:
            if self._progress is None:
                return
            self._progress.results.append(result)
            if result.success:
                self._progress.completed += 1
            else:
                self._progress.failed += 1

    async def finish(self) -> SyncProgress:
        """Mark the running job as finished and return the final snapshot.

        Raises:
            RuntimeError: If no run was ever started
        """
        async with self._lock:
            if self._progress is None:
                raise RuntimeError("No sync run to finish")
            self._progress.in_progress = False
            self._progress.finished_at = datetime.now(UTC)
            return copy.deepcopy(self._progress)

    def snapshot(self) -> SyncProgress | None:
        """Get a copy of the current progress, None if no run ever started."""
        return copy.deepcopy(self._progress)
