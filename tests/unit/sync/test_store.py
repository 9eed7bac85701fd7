"""
Unit tests for the sync state store.

Why: The store is the only writer of sync state and version history, so
     its upsert, notification and deduplication rules decide what the user
     sees.

What: Tests SyncStateStore against a real SQLite database, covering state
      creation, history logging, acknowledgement and error wrapping.

How: Uses the connection_manager and create_repository fixtures to work on
     a throwaway database per test.
"""

from collections.abc import Awaitable, Callable

import pytest

from repowatch.config.models import DatabaseConfig
from repowatch.database import DatabaseConnectionManager
from repowatch.github.models import CommitInfo, ReleaseInfo, TagInfo
from repowatch.models import VersionType
from repowatch.repositories import RepositoryRepository, SyncStateRepository
from repowatch.sync.directory import RepositoryRef
from repowatch.sync.exceptions import PersistenceError
from repowatch.sync.models import VersionUpdate
from repowatch.sync.store import SyncStateStore

CreateRepository = Callable[..., Awaitable[RepositoryRef]]


def release_update(tag: str = "v1.0.0", notes: str | None = "Initial release") -> VersionUpdate:
    """Detector decision for a new release."""
    return VersionUpdate(type=VersionType.RELEASE, value=tag, notes=notes, is_new=True)


class TestSyncStateStore:
    """Tests for SyncStateStore."""

    @pytest.fixture
    def store(self, connection_manager: DatabaseConnectionManager) -> SyncStateStore:
        """Store bound to the test database."""
        return SyncStateStore(connection_manager)

    @pytest.mark.asyncio
    async def test_unsynced_repository_has_no_state(
        self, store: SyncStateStore, create_repository: CreateRepository
    ) -> None:
        """A repository that was never synced has no state row."""
        repo = await create_repository()

        assert await store.get_sync_state(repo.id) is None

    @pytest.mark.asyncio
    async def test_record_sync_creates_state(
        self,
        store: SyncStateStore,
        create_repository: CreateRepository,
        commit_factory: Callable[..., CommitInfo],
        release_factory: Callable[..., ReleaseInfo],
        tag_factory: Callable[..., TagInfo],
    ) -> None:
        """
        Why: The first sync must persist everything that was observed
        What: Mirror fields, flags and sync time are stored
        How: Records a first sync with a new release and reads it back
        """
        repo = await create_repository()
        commit = commit_factory()

        await store.record_sync(
            repo.id,
            commit,
            release_factory(),
            tag_factory(),
            release_update(),
            has_updates=True,
        )

        state = await store.get_sync_state(repo.id)
        assert state is not None
        assert state.last_commit_sha == commit.sha
        assert state.last_release_tag == "v1.0.0"
        assert state.last_tag == "v1.0.0"
        assert state.acknowledged_release is None
        assert state.release_notification_active is True
        assert state.has_updates is True
        assert state.last_sync_at is not None

    @pytest.mark.asyncio
    async def test_missing_values_clear_mirror_fields(
        self,
        store: SyncStateStore,
        create_repository: CreateRepository,
        commit_factory: Callable[..., CommitInfo],
        release_factory: Callable[..., ReleaseInfo],
    ) -> None:
        """Mirror fields reflect the latest observation, absent values included."""
        repo = await create_repository()
        await store.upsert_sync_state(
            repo.id, commit_factory(), release_factory(), None, None, has_updates=True
        )

        state = await store.upsert_sync_state(
            repo.id, commit_factory(), None, None, None, has_updates=False
        )

        assert state.last_release_tag is None
        assert state.has_updates is False

    @pytest.mark.asyncio
    async def test_notification_flag_is_sticky(
        self,
        store: SyncStateStore,
        create_repository: CreateRepository,
        release_factory: Callable[..., ReleaseInfo],
    ) -> None:
        """A raised notification survives later syncs without new versions."""
        repo = await create_repository()
        await store.record_sync(
            repo.id, None, release_factory(), None, release_update(), has_updates=True
        )

        state = await store.record_sync(
            repo.id, None, release_factory(), None, None, has_updates=False
        )

        assert state.release_notification_active is True
        assert state.has_updates is False

    @pytest.mark.asyncio
    async def test_history_logged_once_per_version(
        self,
        store: SyncStateStore,
        create_repository: CreateRepository,
        release_factory: Callable[..., ReleaseInfo],
    ) -> None:
        """Detecting the same release twice logs a single history row."""
        repo = await create_repository()

        for _ in range(2):
            await store.record_sync(
                repo.id, None, release_factory(), None, release_update(), has_updates=True
            )

        history = await store.list_version_history(repo.id)
        assert len(history) == 1
        assert history[0].version_type == "release"
        assert history[0].version_value == "v1.0.0"
        assert history[0].release_notes == "Initial release"
        assert history[0].is_acknowledged is False

    @pytest.mark.asyncio
    async def test_history_most_recent_first(
        self, store: SyncStateStore, create_repository: CreateRepository
    ) -> None:
        """History lists newer versions before older ones."""
        repo = await create_repository()
        await store.append_version_history(repo.id, release_update("v1.0.0"))
        await store.append_version_history(repo.id, release_update("v1.1.0"))

        history = await store.list_version_history(repo.id)

        assert [h.version_value for h in history] == ["v1.1.0", "v1.0.0"]
        assert len(await store.list_version_history(repo.id, limit=1)) == 1

    @pytest.mark.asyncio
    async def test_commits_are_not_logged(
        self, store: SyncStateStore, create_repository: CreateRepository
    ) -> None:
        """Commit updates never enter the history."""
        repo = await create_repository()
        update = VersionUpdate(type=VersionType.COMMIT, value="a1b2c3d", is_new=True)

        assert await store.append_version_history(repo.id, update) is None
        assert await store.list_version_history(repo.id) == []

    @pytest.mark.asyncio
    async def test_tags_are_logged(
        self, store: SyncStateStore, create_repository: CreateRepository
    ) -> None:
        """New tags enter the history like releases."""
        repo = await create_repository()
        update = VersionUpdate(type=VersionType.TAG, value="v0.3.0", is_new=True)

        entry = await store.append_version_history(repo.id, update)

        assert entry is not None
        assert entry.version_type == "tag"

    @pytest.mark.asyncio
    async def test_acknowledge_clears_flags_and_stamps_history(
        self,
        store: SyncStateStore,
        create_repository: CreateRepository,
        release_factory: Callable[..., ReleaseInfo],
    ) -> None:
        """
        Why: Acknowledging is how the user dismisses a notification
        What: Flags are cleared, the version recorded and history stamped
        How: Acknowledges twice and checks the second call changes nothing
        """
        repo = await create_repository()
        await store.record_sync(
            repo.id, None, release_factory(), None, release_update(), has_updates=True
        )

        assert await store.acknowledge(repo.id, "v1.0.0") is True
        first = await store.list_version_history(repo.id)
        assert await store.acknowledge(repo.id, "v1.0.0") is True
        second = await store.list_version_history(repo.id)

        state = await store.get_sync_state(repo.id)
        assert state is not None
        assert state.acknowledged_release == "v1.0.0"
        assert state.release_notification_active is False
        assert state.has_updates is False
        assert first[0].acknowledged_at is not None
        assert second[0].acknowledged_at == first[0].acknowledged_at

    @pytest.mark.asyncio
    async def test_acknowledge_unsynced_repository(
        self, store: SyncStateStore, create_repository: CreateRepository
    ) -> None:
        """Acknowledging a never-synced repository reports no state."""
        repo = await create_repository()

        assert await store.acknowledge(repo.id, "v1.0.0") is False
        assert await store.get_sync_state(repo.id) is None

    @pytest.mark.asyncio
    async def test_deleting_repository_cascades(
        self,
        store: SyncStateStore,
        connection_manager: DatabaseConnectionManager,
        create_repository: CreateRepository,
        release_factory: Callable[..., ReleaseInfo],
    ) -> None:
        """Sync state and history are removed with their repository."""
        repo = await create_repository()
        await store.record_sync(
            repo.id, None, release_factory(), None, release_update(), has_updates=True
        )

        async with connection_manager.get_session() as session:
            assert await RepositoryRepository(session).delete_by_id(repo.id) is True

        async with connection_manager.get_session() as session:
            assert await SyncStateRepository(session).get_by_repo_id(repo.id) is None
        assert await store.list_version_history(repo.id) == []

    @pytest.mark.asyncio
    async def test_database_errors_become_persistence_errors(
        self, database_config: DatabaseConfig
    ) -> None:
        """Failures surface as PersistenceError with the operation name."""
        manager = DatabaseConnectionManager(database_config)
        store = SyncStateStore(manager)

        try:
            with pytest.raises(PersistenceError) as exc_info:
                await store.get_sync_state(1)
        finally:
            await manager.close()

        assert exc_info.value.operation == "read"
