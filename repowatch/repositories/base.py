"""Abstract base repository with common CRUD operations."""

from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.dialects.postgresql import Insert as PostgresInsert
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import Insert as SQLiteInsert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from repowatch.models.base import BaseModel

ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """Abstract base repository with common CRUD operations.

    Repositories only flush; committing is left to the session owner, which
    is ``DatabaseConnectionManager.get_session`` everywhere in repowatch.
    Tables are keyed by integer IDs (``repos.id``) or, for ``sync_state``,
    by the owning repository's ID.
    """

    def __init__(self, session: AsyncSession, model_class: type[ModelType]):
        """Initialize repository with database session and model class."""
        self.session = session
        self.model_class = model_class

    @property
    def _primary_key(self) -> InstrumentedAttribute[Any]:
        """Mapped attribute of the model's single-column primary key."""
        column = self.model_class.__mapper__.primary_key[0]
        return getattr(self.model_class, column.key)

    async def create(self, **kwargs: Any) -> ModelType:
        """Create a new entity."""
        entity = self.model_class(**kwargs)
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def get_by_id(self, entity_id: int) -> ModelType | None:
        """Get entity by primary key."""
        return await self.session.get(self.model_class, entity_id)

    async def get_by_id_or_raise(self, entity_id: int) -> ModelType:
        """Get entity by primary key or raise exception if not found."""
        entity = await self.get_by_id(entity_id)
        if entity is None:
            raise ValueError(
                f"{self.model_class.__name__} with id {entity_id} not found"
            )
        return entity

    async def update(self, entity: ModelType, **kwargs: Any) -> ModelType:
        """Update an existing entity."""
        for key, value in kwargs.items():
            if hasattr(entity, key):
                setattr(entity, key, value)

        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity: ModelType) -> None:
        """Delete an entity."""
        await self.session.delete(entity)
        await self.session.flush()

    async def delete_by_id(self, entity_id: int) -> bool:
        """Delete entity by primary key. Returns True if deleted."""
        entity = await self.get_by_id(entity_id)
        if entity is None:
            return False

        await self.delete(entity)
        return True

    async def list_all(
        self, limit: int | None = None, offset: int | None = None
    ) -> list[ModelType]:
        """List all entities with optional pagination."""
        query = self._build_base_query().order_by(self._primary_key)

        if offset is not None:
            query = query.offset(offset)

        if limit is not None:
            query = query.limit(limit)

        return await self._execute_query(query)

    async def count_all(self) -> int:
        """Count total number of entities."""
        query = select(func.count(self._primary_key))
        return await self._execute_count_query(query)

    async def exists(self, entity_id: int) -> bool:
        """Check if entity exists by primary key."""
        query = select(self._primary_key).where(self._primary_key == entity_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none() is not None

    def _insert(self) -> PostgresInsert | SQLiteInsert:
        """Dialect INSERT for the model, supporting ON CONFLICT clauses."""
        if self.session.get_bind().dialect.name == "postgresql":
            return postgresql_insert(self.model_class)
        return sqlite_insert(self.model_class)

    def _build_base_query(self) -> Select[tuple[ModelType]]:
        """Build base query for the model."""
        return select(self.model_class)

    async def _execute_query(self, query: Select[tuple[ModelType]]) -> list[ModelType]:
        """Execute query and return results."""
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def _execute_single_query(
        self, query: Select[tuple[ModelType]]
    ) -> ModelType | None:
        """Execute query and return single result."""
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def _execute_count_query(self, query: Select[tuple[int]]) -> int:
        """Execute count query and return result."""
        result = await self.session.execute(query)
        return result.scalar_one()

    async def flush(self) -> None:
        """Flush pending changes to database."""
        await self.session.flush()
