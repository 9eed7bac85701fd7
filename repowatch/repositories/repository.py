"""Repository repository for tracked GitHub repositories."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from repowatch.models import Repository

from .base import BaseRepository


class RepositoryRepository(BaseRepository[Repository]):
    """Repository for tracked repository records."""

    def __init__(self, session: AsyncSession):
        """Initialize with session."""
        super().__init__(session, Repository)

    async def get_by_full_name(self, full_name: str) -> Repository | None:
        """Get repository by full name (owner/repo)."""
        query = select(Repository).where(Repository.full_name == full_name)
        return await self._execute_single_query(query)

    async def list_ordered(self) -> list[Repository]:
        """Get all repositories in insertion order."""
        query = select(Repository).order_by(Repository.id)
        return await self._execute_query(query)

    async def create_repository(
        self,
        owner: str,
        name: str,
        url: str | None = None,
        description: str | None = None,
        github_id: str | None = None,
    ) -> Repository:
        """Create a tracked repository.

        Args:
            owner: Repository owner login
            name: Repository name
            url: Web URL, derived from owner and name when omitted
            description: Optional description
            github_id: GitHub's numeric repository id, if known

        Returns:
            The created repository
        """
        return await self.create(
            owner=owner,
            name=name,
            full_name=f"{owner}/{name}",
            url=url or f"https://github.com/{owner}/{name}",
            description=description,
            github_id=github_id,
        )
