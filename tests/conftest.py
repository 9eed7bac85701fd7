"""
Test configuration and fixtures shared by the unit tests.

Provides a throwaway SQLite database per test, factories for tracked
repositories, and builders for the GitHub data the sync engine consumes.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path

import pytest
import pytest_asyncio

from repowatch.config.models import DatabaseConfig
from repowatch.database import DatabaseConnectionManager
from repowatch.github.models import CommitInfo, ReleaseInfo, TagInfo
from repowatch.github.retry import RetryPolicy
from repowatch.repositories import RepositoryRepository
from repowatch.sync.directory import RepositoryRef


@pytest.fixture
def database_config(tmp_path: Path) -> DatabaseConfig:
    """
    Database configuration pointing at a temporary SQLite file.

    Why: Store and repository tests need a real relational database
    What: Provides a DatabaseConfig using aiosqlite in the test's tmp dir
    How: Builds the URL from pytest's tmp_path so every test is isolated
    """
    return DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'repowatch.db'}")


@pytest_asyncio.fixture
async def connection_manager(
    database_config: DatabaseConfig,
) -> AsyncGenerator[DatabaseConnectionManager, None]:
    """
    Connection manager with the schema already created.

    Why: Avoids repeating engine setup and teardown in every database test
    What: Yields a DatabaseConnectionManager bound to the temp database
    How: Creates all tables before the test and disposes the engine after
    """
    manager = DatabaseConnectionManager(database_config)
    await manager.create_schema()
    yield manager
    await manager.close()


@pytest.fixture
def create_repository(
    connection_manager: DatabaseConnectionManager,
) -> Callable[..., Awaitable[RepositoryRef]]:
    """
    Factory for tracked repositories.

    Why: Sync state rows reference the repos table through a foreign key
    What: Returns an async callable that inserts a repository
    How: Uses RepositoryRepository in its own committed session
    """

    async def _create(owner: str = "octo", name: str = "hello") -> RepositoryRef:
        async with connection_manager.get_session() as session:
            repository = await RepositoryRepository(session).create_repository(
                owner, name
            )
            return RepositoryRef.from_model(repository)

    return _create


@pytest.fixture
def recorded_delays() -> list[float]:
    """Delays requested by retry policies built with ``retry_policy``."""
    return []


@pytest.fixture
def retry_policy(recorded_delays: list[float]) -> RetryPolicy:
    """
    Retry policy that records backoff delays instead of sleeping.

    Why: Retry tests must be fast and must observe the exact delays
    What: Provides the default 3-attempt policy with a fake sleep
    How: Injects a coroutine that appends each delay to recorded_delays
    """

    async def fake_sleep(delay: float) -> None:
        recorded_delays.append(delay)

    return RetryPolicy(sleep=fake_sleep)


@pytest.fixture
def commit_factory() -> Callable[..., CommitInfo]:
    """Builder for CommitInfo values."""

    def _build(sha: str = "a1b2c3d4e5f6a7b8c9d0") -> CommitInfo:
        return CommitInfo(
            sha=sha,
            date="2024-05-01T12:00:00Z",
            message="Fix parser edge case",
            author="Ada Lovelace",
        )

    return _build


@pytest.fixture
def release_factory() -> Callable[..., ReleaseInfo]:
    """Builder for ReleaseInfo values."""

    def _build(tag: str = "v1.0.0", notes: str | None = "Initial release") -> ReleaseInfo:
        return ReleaseInfo(tag=tag, date="2024-05-02T08:30:00Z", notes=notes)

    return _build


@pytest.fixture
def tag_factory() -> Callable[..., TagInfo]:
    """Builder for TagInfo values."""

    def _build(tag: str = "v1.0.0") -> TagInfo:
        return TagInfo(tag=tag, date="2024-05-03T00:00:00+00:00")

    return _build
