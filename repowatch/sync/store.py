"""Sync state store.

Reads and writes per-repository sync state and the version history log.
Every public method runs in its own database transaction, so one
repository's write never depends on another's.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from repowatch.database import DatabaseConnectionManager
from repowatch.github.models import CommitInfo, ReleaseInfo, TagInfo
from repowatch.models import VersionHistory
from repowatch.repositories import SyncStateRepository, VersionHistoryRepository

from .exceptions import PersistenceError
from .models import CurrentSyncState, VersionUpdate

logger = logging.getLogger(__name__)


class SyncStateStore:
    """Persistence accessor for sync state and version history."""

    def __init__(self, connection_manager: DatabaseConnectionManager):
        self.connection_manager = connection_manager

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        """Session committed on success; database errors become PersistenceError."""
        try:
            async with self.connection_manager.get_session() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(
                f"Sync state {operation} failed: {e}", extra={"operation": operation}
            )
            raise PersistenceError(
                f"Sync state {operation} failed: {e}", operation=operation
            ) from e

    async def get_sync_state(self, repo_id: int) -> CurrentSyncState | None:
        """Get the persisted sync state, None if the repository was never synced."""
        async with self._transaction("read") as session:
            state = await SyncStateRepository(session).get_by_repo_id(repo_id)
            return CurrentSyncState.from_model(state) if state else None

    async def upsert_sync_state(
        self,
        repo_id: int,
        commit: CommitInfo | None,
        release: ReleaseInfo | None,
        tag: TagInfo | None,
        version_update: VersionUpdate | None,
        has_updates: bool,
    ) -> CurrentSyncState:
        """Store the latest observation for a repository.

        Mirror fields and ``last_sync_at`` are always refreshed. The release
        notification flag is only ever raised here, never cleared.

        Args:
            repo_id: Repository ID
            commit: Latest commit, if any
            release: Latest release, if any
            tag: Latest tag, if any
            version_update: Detector decision for this sync
            has_updates: Result of the raw change check

        Returns:
            The stored state
        """
        async with self._transaction("upsert") as session:
            return await self._upsert(
                session, repo_id, commit, release, tag, version_update, has_updates
            )

    async def append_version_history(
        self, repo_id: int, version_update: VersionUpdate | None
    ) -> VersionHistory | None:
        """Log a newly detected release or tag.

        Commits are never logged, and a version already present for the
        repository is not logged twice.

        Returns:
            The new history row, or None when nothing was written
        """
        async with self._transaction("history append") as session:
            return await self._append_history(session, repo_id, version_update)

    async def record_sync(
        self,
        repo_id: int,
        commit: CommitInfo | None,
        release: ReleaseInfo | None,
        tag: TagInfo | None,
        version_update: VersionUpdate | None,
        has_updates: bool,
    ) -> CurrentSyncState:
        """Upsert the sync state and append history in a single transaction."""
        async with self._transaction("record") as session:
            state = await self._upsert(
                session, repo_id, commit, release, tag, version_update, has_updates
            )
            await self._append_history(session, repo_id, version_update)
            return state

    async def acknowledge(self, repo_id: int, version: str) -> bool:
        """Mark a version as seen by the user.

        Sets the acknowledged release, clears the notification flags and
        stamps matching unacknowledged history rows. Repeating the call has
        no further effect.

        Returns:
            True if the repository had a sync state row
        """
        async with self._transaction("acknowledge") as session:
            existed = await SyncStateRepository(session).acknowledge(repo_id, version)
            stamped = await VersionHistoryRepository(session).acknowledge_version(
                repo_id, version
            )

        logger.info(
            f"Acknowledged version {version} for repository {repo_id}",
            extra={"repo_id": repo_id, "existed": existed, "history_rows": stamped},
        )
        return existed

    async def list_version_history(
        self, repo_id: int, limit: int | None = None
    ) -> list[VersionHistory]:
        """Get detected versions for a repository, most recent first."""
        async with self._transaction("history read") as session:
            return await VersionHistoryRepository(session).get_history_for_repo(
                repo_id, limit=limit
            )

    async def _upsert(
        self,
        session: AsyncSession,
        repo_id: int,
        commit: CommitInfo | None,
        release: ReleaseInfo | None,
        tag: TagInfo | None,
        version_update: VersionUpdate | None,
        has_updates: bool,
    ) -> CurrentSyncState:
        should_notify = version_update is not None and version_update.should_notify

        state = await SyncStateRepository(session).upsert_state(
            repo_id,
            last_commit_sha=commit.sha if commit else None,
            last_commit_date=commit.date if commit else None,
            last_commit_message=commit.message if commit else None,
            last_commit_author=commit.author if commit else None,
            last_release_tag=release.tag if release else None,
            last_release_date=release.date if release else None,
            last_release_notes=release.notes if release else None,
            last_tag=tag.tag if tag else None,
            last_tag_date=tag.date if tag else None,
            release_notification_active=should_notify,
            has_updates=has_updates,
            last_sync_at=datetime.now(UTC),
        )
        return CurrentSyncState.from_model(state)

    async def _append_history(
        self,
        session: AsyncSession,
        repo_id: int,
        version_update: VersionUpdate | None,
    ) -> VersionHistory | None:
        if version_update is None or not version_update.should_notify:
            return None

        entry = await VersionHistoryRepository(session).append(
            repo_id,
            version_update.type,
            version_update.value,
            release_notes=version_update.notes,
        )
        if entry is None:
            logger.debug(
                f"Version {version_update.value} already logged for repository {repo_id}"
            )
            return None

        logger.info(
            f"New {version_update.type.value} {version_update.value} "
            f"for repository {repo_id}",
            extra={"repo_id": repo_id, "version_type": version_update.type.value},
        )
        return entry
