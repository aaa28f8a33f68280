from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar, Optional, List, Type, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from pydantic import BaseModel

from common.core.otel_axiom_exporter import trace_span
from common.db.scoped import get_session

EntityType = TypeVar("EntityType")
DomainModelType = TypeVar("DomainModelType")
CreateModelType = TypeVar("CreateModelType", bound=BaseModel)
UpdateModelType = TypeVar("UpdateModelType", bound=BaseModel)


class BaseRepository(Generic[EntityType, DomainModelType]):
    """
    Base repository with support for both explicit and lazy session management.

    1. Explicit session: pass db_session to the constructor. The session is
       used directly and the caller (usually a get_db dependency) manages
       its lifecycle.

    2. Lazy session: omit db_session. A session is acquired per operation
       and released immediately, or the enclosing transaction() is reused.

    Example:
        repo = TenantRepository(db_session)
        tenant = await repo.get("uid_123")  # Uses passed session

        repo = TenantRepository()
        tenant = await repo.get("uid_123")  # Acquires and releases a session
    """

    def __init__(
        self,
        entity_class: Type[EntityType],
        domain_class: Type[DomainModelType],
        db_session: Optional[AsyncSession] = None,
    ):
        self.entity_class = entity_class
        self.domain_class = domain_class
        self._explicit_session = db_session

    @asynccontextmanager
    async def _get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get a session for an operation.

        Respects the current context: inside a @readonly chain or readonly
        transaction the read session is used. The repository never decides
        readonly vs write itself.
        """
        if self._explicit_session is not None:
            yield self._explicit_session
        else:
            async with get_session() as session:
                yield session

    def _entity_to_domain(self, entity: EntityType) -> DomainModelType:
        """Convert database entity to domain model."""
        return self.domain_class.model_validate(entity)

    def _entities_to_domain(self, entities: List[EntityType]) -> List[DomainModelType]:
        """Convert list of database entities to domain models."""
        return [self._entity_to_domain(entity) for entity in entities]

    @trace_span
    async def get(self, id: Any) -> Optional[DomainModelType]:
        query = (
            select(self.entity_class)
            .where(self.entity_class.id == id)
            .execution_options(populate_existing=True)
        )

        async with self._get_session() as session:
            result = await session.execute(query)
            entity = result.scalar_one_or_none()
            return self._entity_to_domain(entity) if entity else None

    @trace_span
    async def get_multi(self, skip: int = 0, limit: int = 100) -> List[DomainModelType]:
        query = (
            select(self.entity_class)
            .order_by(self.entity_class.id)
            .offset(skip)
            .limit(limit)
        )

        async with self._get_session() as session:
            result = await session.execute(query)
            entities = result.scalars().all()
            return self._entities_to_domain(entities)

    @trace_span
    async def get_by_ids(self, ids: List[Any]) -> List[DomainModelType]:
        """Get multiple entities by their IDs."""
        if not ids:
            return []

        query = select(self.entity_class).where(self.entity_class.id.in_(ids))

        async with self._get_session() as session:
            result = await session.execute(query)
            entities = result.scalars().all()
            return self._entities_to_domain(entities)

    @trace_span
    async def create(self, create_model: CreateModelType) -> DomainModelType:
        """Create a new entity from a typed create model."""
        data = create_model.model_dump(exclude_none=True)
        db_obj = self.entity_class(**data)
        async with self._get_session() as session:
            session.add(db_obj)
            await session.flush()
            await session.refresh(db_obj)
            return self._entity_to_domain(db_obj)

    @trace_span
    async def update(
        self, id: Any, update_model: UpdateModelType
    ) -> Optional[DomainModelType]:
        """
        Merge-update an entity with a typed update model.

        Only fields explicitly set on the model are written; everything else
        keeps its stored value.
        """
        data = update_model.model_dump(exclude_unset=True)
        if not data:
            return await self.get(id)

        async with self._get_session() as session:
            await session.execute(
                update(self.entity_class).where(self.entity_class.id == id).values(data)
            )
            await session.flush()
        return await self.get(id)
