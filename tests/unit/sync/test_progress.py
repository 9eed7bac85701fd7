"""
Unit tests for sync progress tracking.

Why: Full syncs report progress while many repositories finish
     concurrently, and only one run may be active at a time.

What: Tests SyncProgressTracker start/record/finish semantics and that
      readers only ever see copies.

How: Drives the tracker directly, including concurrent record calls.
"""

import asyncio

import pytest

from repowatch.sync.exceptions import SyncInProgressError
from repowatch.sync.models import SyncProgress, SyncResult
from repowatch.sync.progress import SyncProgressTracker


def result(repo_id: int, success: bool = True) -> SyncResult:
    """Build a result for repository ``repo_id``."""
    return SyncResult(
        repo_id=repo_id,
        full_name=f"octo/repo-{repo_id}",
        success=success,
        error=None if success else "boom",
    )


class TestSyncProgressTracker:
    """Tests for SyncProgressTracker."""

    def test_no_progress_before_first_run(self) -> None:
        """Nothing is reported until a run starts."""
        tracker = SyncProgressTracker()

        assert tracker.snapshot() is None
        assert tracker.is_in_progress is False

    @pytest.mark.asyncio
    async def test_start_reports_in_progress(self) -> None:
        """A started run is in progress with zero counters."""
        tracker = SyncProgressTracker()

        progress = await tracker.start("job-1", total=4)

        assert progress.job_id == "job-1"
        assert progress.total == 4
        assert progress.processed == 0
        assert progress.in_progress is True
        assert tracker.is_in_progress is True

    @pytest.mark.asyncio
    async def test_second_start_rejected_while_running(self) -> None:
        """Only one run may be active."""
        tracker = SyncProgressTracker()
        await tracker.start("job-1", total=1)

        with pytest.raises(SyncInProgressError) as exc_info:
            await tracker.start("job-2", total=1)

        assert exc_info.value.job_id == "job-1"

    @pytest.mark.asyncio
    async def test_record_counts_success_and_failure(self) -> None:
        """Results are split into completed and failed."""
        tracker = SyncProgressTracker()
        await tracker.start("job-1", total=3)

        await tracker.record(result(1))
        await tracker.record(result(2, success=False))
        await tracker.record(result(3))

        progress = tracker.snapshot()
        assert progress is not None
        assert progress.completed == 2
        assert progress.failed == 1
        assert [r.repo_id for r in progress.results] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_concurrent_records_are_all_counted(self) -> None:
        """
        Why: Repositories finish concurrently during a full sync
        What: Every concurrent record lands in the counters
        How: Gathers fifty record calls and checks the totals
        """
        tracker = SyncProgressTracker()
        await tracker.start("job-1", total=50)

        await asyncio.gather(
            *(tracker.record(result(i, success=i % 5 != 0)) for i in range(50))
        )

        progress = await tracker.finish()
        assert progress.completed == 40
        assert progress.failed == 10
        assert progress.processed == 50
        assert len(progress.results) == 50

    @pytest.mark.asyncio
    async def test_finish_marks_done_and_allows_new_run(self) -> None:
        """A finished run has an end time and a new run may start."""
        tracker = SyncProgressTracker()
        await tracker.start("job-1", total=0)

        finished = await tracker.finish()

        assert finished.in_progress is False
        assert finished.finished_at is not None
        assert tracker.is_in_progress is False

        restarted = await tracker.start("job-2", total=2)
        assert restarted.job_id == "job-2"
        assert restarted.results == []

    @pytest.mark.asyncio
    async def test_finish_without_start_raises(self) -> None:
        """Finishing requires a run."""
        with pytest.raises(RuntimeError):
            await SyncProgressTracker().finish()

    @pytest.mark.asyncio
    async def test_record_without_run_is_ignored(self) -> None:
        """Stray results before any run are dropped."""
        tracker = SyncProgressTracker()

        await tracker.record(result(1))

        assert tracker.snapshot() is None

    @pytest.mark.asyncio
    async def test_snapshot_is_a_copy(self) -> None:
        """Mutating a snapshot does not affect the tracker."""
        tracker = SyncProgressTracker()
        await tracker.start("job-1", total=1)

        snapshot = tracker.snapshot()
        assert snapshot is not None
        snapshot.completed = 99
        snapshot.results.append(result(7))

        current = tracker.snapshot()
        assert current is not None
        assert current.completed == 0
        assert current.results == []


class TestSyncProgress:
    """Tests for SyncProgress serialization."""

    def test_to_dict(self) -> None:
        """Timestamps serialize as ISO strings and results as dicts."""
        progress = SyncProgress(job_id="job-1", total=1, results=[result(1)])

        data = progress.to_dict()

        assert data["job_id"] == "job-1"
        assert data["finished_at"] is None
        assert isinstance(data["started_at"], str)
        assert data["results"][0]["full_name"] == "octo/repo-1"
