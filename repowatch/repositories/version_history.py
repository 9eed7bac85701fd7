"""Version history repository."""

from datetime import UTC, datetime

from sqlalchemy import desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from repowatch.models import VersionHistory, VersionType

from .base import BaseRepository


class VersionHistoryRepository(BaseRepository[VersionHistory]):
    """Repository for the append-only version history log."""

    def __init__(self, session: AsyncSession):
        """Initialize with session."""
        super().__init__(session, VersionHistory)

    async def append(
        self,
        repo_id: int,
        version_type: VersionType,
        version_value: str,
        release_notes: str | None = None,
    ) -> VersionHistory | None:
        """Append a history row for a detected version.

        The insert is skipped when the repository already has a row for the
        same type and value.

        Returns:
            The new row, or None if the version was already logged
        """
        stmt = (
            self._insert()
            .values(
                repo_id=repo_id,
                version_type=version_type.value,
                version_value=version_value,
                release_notes=release_notes,
            )
            .on_conflict_do_nothing(
                index_elements=["repo_id", "version_type", "version_value"]
            )
            .returning(VersionHistory.id)
        )
        result = await self.session.execute(stmt)
        entry_id = result.scalar_one_or_none()
        if entry_id is None:
            return None
        return await self.get_by_id(entry_id)

    async def acknowledge_version(
        self,
        repo_id: int,
        version_value: str,
        acknowledged_at: datetime | None = None,
    ) -> int:
        """Stamp unacknowledged history rows matching the version.

        Returns:
            Number of rows updated
        """
        stmt = (
            update(VersionHistory)
            .where(VersionHistory.repo_id == repo_id)
            .where(VersionHistory.version_value == version_value)
            .where(VersionHistory.acknowledged_at.is_(None))
            .values(acknowledged_at=acknowledged_at or datetime.now(UTC))
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def get_history_for_repo(
        self, repo_id: int, limit: int | None = None
    ) -> list[VersionHistory]:
        """Get history rows for a repository, most recent first."""
        query = (
            select(VersionHistory)
            .where(VersionHistory.repo_id == repo_id)
            .order_by(desc(VersionHistory.detected_at), desc(VersionHistory.id))
        )
        if limit is not None:
            query = query.limit(limit)
        return await self._execute_query(query)
