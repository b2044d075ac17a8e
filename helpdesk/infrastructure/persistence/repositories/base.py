"""Base repository: unscoped CRUD for system tables (e.g. tenant).

Tenant-owned tables must go through TenantScopedRepository instead; this
class applies no tenant filtering at all.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import object_session

from helpdesk.domain.exceptions import ResourceNotFoundException
from helpdesk.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_by_id, get_all, count, create, update, delete."""

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: Any) -> ModelType | None:
        """Return a single record by primary key, or None."""
        return await self.db.get(self.model, entity_id)

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[ModelType]:
        """Return records with pagination."""
        result = await self.db.execute(select(self.model).offset(skip).limit(limit))
        return list(result.scalars().all())

    async def count(self) -> int:
        """Return the number of records."""
        result = await self.db.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record and load server defaults."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def update(self, obj: ModelType) -> ModelType:
        """Update an existing record (merge if detached).

        Raises ResourceNotFoundException when a detached object has no stored row.
        """
        if object_session(obj) is not self.db.sync_session:
            entity_id = getattr(obj, "id", None)
            if entity_id is None:
                raise ValueError(
                    f"Cannot update: primary key 'id' is missing on "
                    f"{self.model.__name__} instance."
                )
            if await self.db.get(self.model, entity_id) is None:
                raise ResourceNotFoundException(self.model.__name__, str(entity_id))
            obj = await self.db.merge(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete(self, obj: ModelType) -> None:
        """Delete the record."""
        await self.db.delete(obj)
        await self.db.flush()
