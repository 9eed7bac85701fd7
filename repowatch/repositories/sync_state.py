"""Sync state repository."""

from typing import Any

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from repowatch.models import SyncState

from .base import BaseRepository


class SyncStateRepository(BaseRepository[SyncState]):
    """Repository for per-repository sync state rows."""

    def __init__(self, session: AsyncSession):
        """Initialize with session."""
        super().__init__(session, SyncState)

    async def get_by_repo_id(self, repo_id: int) -> SyncState | None:
        """Get the sync state of a repository, None if never synced."""
        return await self.get_by_id(repo_id)

    async def upsert_state(self, repo_id: int, **fields: Any) -> SyncState:
        """Insert the sync state row or update the existing one.

        Runs as a single ``INSERT ... ON CONFLICT (repo_id) DO UPDATE`` so
        concurrent syncs of the same repository never race on the insert.
        ``release_notification_active`` is OR-ed with the stored value: an
        upsert can raise the flag but never clear it.

        Args:
            repo_id: Repository ID
            **fields: Column values to write

        Returns:
            The stored sync state
        """
        stmt = self._insert().values(repo_id=repo_id, **fields)

        update_dict: dict[str, Any] = {key: stmt.excluded[key] for key in fields}
        if "release_notification_active" in fields:
            update_dict["release_notification_active"] = or_(
                stmt.excluded.release_notification_active,
                SyncState.release_notification_active,
            )

        if update_dict:
            stmt = stmt.on_conflict_do_update(
                index_elements=["repo_id"], set_=update_dict
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=["repo_id"])

        await self.session.execute(stmt)
        state = await self.session.get(SyncState, repo_id, populate_existing=True)
        if state is None:
            raise ValueError(f"SyncState with id {repo_id} not found after upsert")
        return state

    async def acknowledge(self, repo_id: int, version: str) -> bool:
        """Record a version as seen and clear notification flags.

        Returns:
            True if the repository had a sync state row
        """
        state = await self.get_by_repo_id(repo_id)
        if state is None:
            return False

        state.acknowledge(version)
        await self.flush()
        return True
