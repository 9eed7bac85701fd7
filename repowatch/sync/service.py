"""Sync orchestration.

Syncs one repository end to end (fetch, detect, persist) or every tracked
repository with bounded concurrency, while keeping progress observable.
"""

import asyncio
import logging
import uuid

from repowatch.github.client import GitHubClient
from repowatch.github.rate_limiting import RateLimitStatus

from .change_detection import check_for_updates, detect_version_update
from .directory import RepositoryDirectory, RepositoryRef
from .exceptions import RepositoryNotFoundError, SyncInProgressError
from .models import SyncProgress, SyncResult
from .progress import SyncProgressTracker
from .store import SyncStateStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 3


class SyncService:
    """Coordinates repository syncs.

    Per-repository failures are captured in the returned SyncResult and never
    abort a full run. At most ``max_concurrency`` repositories are synced at
    once to protect the shared GitHub rate limit.
    """

    def __init__(
        self,
        github_client: GitHubClient,
        directory: RepositoryDirectory,
        store: SyncStateStore,
        progress: SyncProgressTracker | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ):
        """Initialize sync service.

        Args:
            github_client: Client used to fetch repository data
            directory: Source of tracked repositories
            store: Sync state persistence
            progress: Progress holder, a fresh one when omitted
            max_concurrency: Repositories synced in parallel by sync_all
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self.github_client = github_client
        self.directory = directory
        self.store = store
        self.progress = progress or SyncProgressTracker()
        self.max_concurrency = max_concurrency

    async def _resolve_repository(self, repo_id: int) -> RepositoryRef:
        repository = await self.directory.find_by_id(repo_id)
        if repository is None:
            raise RepositoryNotFoundError(repo_id)
        return repository

    async def sync_repo(self, repo_id: int) -> SyncResult:
        """Sync a single repository.

        Args:
            repo_id: Repository ID

        Returns:
            Result of the sync; failures are reported, not raised
        """
        try:
            repository = await self._resolve_repository(repo_id)
        except RepositoryNotFoundError as e:
            logger.warning(
                "Sync failed: repository not found", extra={"repo_id": repo_id}
            )
            return SyncResult(
                repo_id=repo_id, full_name="unknown", success=False, error=str(e)
            )
        except Exception as e:
            logger.error(
                f"Sync failed: could not resolve repository {repo_id}: {e}",
                extra={"repo_id": repo_id},
            )
            return SyncResult(
                repo_id=repo_id,
                full_name="unknown",
                success=False,
                error=str(e) or type(e).__name__,
            )

        logger.info(
            f"Sync started for {repository.full_name}",
            extra={"repo_id": repo_id, "repo_name": repository.full_name},
        )

        try:
            data = await self.github_client.fetch_repo_data(
                repository.owner, repository.name
            )
            current = await self.store.get_sync_state(repo_id)

            has_updates = check_for_updates(
                current, data.commit, data.release, data.tag
            )
            version_update = detect_version_update(
                current, data.release, data.tag, data.commit
            )

            await self.store.record_sync(
                repo_id,
                data.commit,
                data.release,
                data.tag,
                version_update,
                has_updates,
            )
        except Exception as e:
            logger.error(
                f"Sync failed for {repository.full_name}: {e}",
                extra={"repo_id": repo_id, "repo_name": repository.full_name},
            )
            return SyncResult(
                repo_id=repo_id,
                full_name=repository.full_name,
                success=False,
                error=str(e) or type(e).__name__,
            )

        logger.info(
            f"Sync completed for {repository.full_name}",
            extra={
                "repo_id": repo_id,
                "repo_name": repository.full_name,
                "has_updates": has_updates,
                "update_type": version_update.type.value if version_update else None,
                "commit_sha": data.commit.short_sha if data.commit else None,
                "release_tag": data.release.tag if data.release else None,
            },
        )

        return SyncResult(
            repo_id=repo_id,
            full_name=repository.full_name,
            success=True,
            has_updates=has_updates,
            commit=data.commit,
            release=data.release,
            tag=data.tag,
        )

    async def sync_all(self) -> SyncProgress:
        """Sync every tracked repository.

        Returns:
            Final progress of the run

        Raises:
            SyncInProgressError: If another full sync is still running
        """
        if self.progress.is_in_progress:
            raise SyncInProgressError(self._current_job_id())

        repositories = await self.directory.find_all()
        job_id = str(uuid.uuid4())
        await self.progress.start(job_id, len(repositories))

        logger.info(
            f"Starting sync for all repositories [{job_id}]",
            extra={"job_id": job_id, "total_repos": len(repositories)},
        )

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def sync_with_limit(repository: RepositoryRef) -> None:
            async with semaphore:
                result = await self.sync_repo(repository.id)
            await self.progress.record(result)

        try:
            await asyncio.gather(*(sync_with_limit(r) for r in repositories))
        finally:
            final = await self.progress.finish()

        logger.info(
            f"Sync completed for all repositories [{job_id}]",
            extra={
                "job_id": job_id,
                "completed": final.completed,
                "failed": final.failed,
                "total": final.total,
            },
        )
        return final

    def _current_job_id(self) -> str | None:
        snapshot = self.progress.snapshot()
        return snapshot.job_id if snapshot else None

    def is_sync_in_progress(self) -> bool:
        """Check if a full sync is running."""
        return self.progress.is_in_progress

    def get_progress(self) -> SyncProgress | None:
        """Get a snapshot of the current or last full sync."""
        return self.progress.snapshot()

    def get_rate_limit_status(self) -> RateLimitStatus:
        """Get the GitHub rate limit headroom last observed."""
        return self.github_client.get_rate_limit_status()

    async def acknowledge(self, repo_id: int, version: str) -> bool:
        """Mark a repository's version as seen by the user."""
        return await self.store.acknowledge(repo_id, version)
