"""Repository directory used by the sync engine to resolve tracked repositories."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from repowatch.database import DatabaseConnectionManager
from repowatch.models import Repository
from repowatch.repositories import RepositoryRepository

from .exceptions import PersistenceError


@dataclass(frozen=True)
class RepositoryRef:
    """Identity of a tracked repository as seen by the sync engine."""

    id: int
    owner: str
    name: str
    full_name: str

    @classmethod
    def from_model(cls, repository: Repository) -> "RepositoryRef":
        """Build from a Repository row."""
        return cls(
            id=repository.id,
            owner=repository.owner,
            name=repository.name,
            full_name=repository.full_name,
        )


class RepositoryDirectory(ABC):
    """Read access to the set of tracked repositories."""

    @abstractmethod
    async def find_by_id(self, repo_id: int) -> RepositoryRef | None:
        """Get a repository by ID, None if unknown."""
        pass

    @abstractmethod
    async def find_all(self) -> list[RepositoryRef]:
        """Get every tracked repository."""
        pass


class DatabaseRepositoryDirectory(RepositoryDirectory):
    """Repository directory backed by the ``repos`` table."""

    def __init__(self, connection_manager: DatabaseConnectionManager):
        self.connection_manager = connection_manager

    async def find_by_id(self, repo_id: int) -> RepositoryRef | None:
        try:
            async with self.connection_manager.get_session() as session:
                repository = await RepositoryRepository(session).get_by_id(repo_id)
                return RepositoryRef.from_model(repository) if repository else None
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to load repository {repo_id}: {e}", operation="find_by_id"
            ) from e

    async def find_all(self) -> list[RepositoryRef]:
        try:
            async with self.connection_manager.get_session() as session:
                repositories = await RepositoryRepository(session).list_ordered()
                return [RepositoryRef.from_model(r) for r in repositories]
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to list repositories: {e}", operation="find_all"
            ) from e
