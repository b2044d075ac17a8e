"""Tenant-scoped repository: every query restricted to the acting tenant.

The tenant is never passed in. Each operation reads the ambient tenant
context (helpdesk.core.tenant_context) when it builds its statement, so a
repository instance can be shared across requests and the scope always
follows whoever is calling. Scoping rule, evaluated per call:

    row.tenant_id == get_tenant_id() OR is_system_context()

Reads of another tenant's rows behave exactly like reads of missing rows
(None / False / omitted). Writes and deletes of an entity stamped with
another tenant raise TenantIsolationViolationException before anything is
flushed. With no identity bound, every operation raises
MissingTenantIdentityException before any statement is executed.
"""

from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import object_session

from helpdesk.core.tenant_context import (
    SYSTEM_TENANT_ID,
    get_tenant_id,
    is_system_context,
)
from helpdesk.domain.exceptions import TenantIsolationViolationException
from helpdesk.infrastructure.persistence.models.mixins import TenantAwareModel
from helpdesk.shared.telemetry.logging import get_logger

_logger = get_logger(__name__)


def tenant_criteria(model: Any) -> tuple[ColumnElement[bool], ...]:
    """Return the WHERE criteria that scope model to the acting tenant.

    Empty in system mode (every row is visible). Resolves the tenant first,
    so a missing identity raises here, before any statement exists.
    """
    tenant_id = get_tenant_id()
    if is_system_context():
        return ()
    return (model.tenant_id == tenant_id,)

ModelType = TypeVar("ModelType", bound=TenantAwareModel)
IdType = TypeVar("IdType")


class TenantScopedRepository(Generic[ModelType, IdType]):
    """Generic data access for one tenant-aware model, scoped by the tenant context.

    Compose it into entity repositories rather than subclassing it; use
    select_scoped() as the starting point for entity-specific queries.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    @property
    def resource_type(self) -> str:
        """Lower-case model name used in errors and logs (e.g. 'user')."""
        return self.model.__name__.lower()

    def select_scoped(self) -> Select[tuple[ModelType]]:
        """Return SELECT model with the tenant criteria already applied."""
        return select(self.model).where(*tenant_criteria(self.model))

    # ---- Reads ----

    async def find_all(self, skip: int = 0, limit: int | None = None) -> list[ModelType]:
        """Return every row visible to the acting tenant. Order is unspecified."""
        stmt = self.select_scoped()
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_by_id(self, entity_id: IdType) -> ModelType | None:
        """Return the row with entity_id if the acting tenant may see it, else None."""
        model: Any = self.model
        result = await self.db.execute(self.select_scoped().where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def find_all_by_id(self, ids: Iterable[IdType]) -> list[ModelType]:
        """Return visible rows among ids; ids outside the tenant's scope are omitted."""
        model: Any = self.model
        criteria = tenant_criteria(model)
        id_list = list(ids)
        if not id_list:
            return []
        result = await self.db.execute(
            select(self.model).where(model.id.in_(id_list), *criteria)
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        """Return the number of rows visible to the acting tenant."""
        criteria = tenant_criteria(self.model)
        result = await self.db.execute(
            select(func.count()).select_from(self.model).where(*criteria)
        )
        return result.scalar_one()

    async def exists_by_id(self, entity_id: IdType) -> bool:
        """Return True if a row with entity_id exists and is visible to the acting tenant."""
        model: Any = self.model
        criteria = tenant_criteria(model)
        result = await self.db.execute(
            select(model.id).where(model.id == entity_id, *criteria).limit(1)
        )
        return result.first() is not None

    # ---- Writes ----

    async def save(self, entity: ModelType) -> ModelType:
        """Stamp entity with the acting tenant and insert or update it by id.

        Raises:
            TenantIsolationViolationException: entity.tenant_id, or the stored
                row with entity.id, belongs to another tenant (non-system mode).
        """
        owner = await self._resolve_owner(entity, "save")
        persisted = await self._stage(entity, owner)
        await self.db.flush()
        await self.db.refresh(persisted)
        return persisted

    async def save_all(self, entities: Iterable[ModelType]) -> list[ModelType]:
        """Save every entity, or none of them.

        All entities are checked before the first one is staged, so one
        cross-tenant entity aborts the batch with nothing flushed.
        """
        items = list(entities)
        owners = [await self._resolve_owner(entity, "save") for entity in items]
        persisted: list[ModelType] = []
        for entity, owner in zip(items, owners):
            persisted.append(await self._stage(entity, owner))
        await self.db.flush()
        for entity in persisted:
            await self.db.refresh(entity)
        return persisted

    async def delete(self, entity: ModelType) -> None:
        """Delete entity by id after checking it is stamped with the acting tenant.

        Raises:
            TenantIsolationViolationException: entity.tenant_id is another
                tenant's (non-system mode).
        """
        tenant_id = get_tenant_id()
        if not is_system_context() and entity.tenant_id != tenant_id:
            raise self._violation("delete", tenant_id, entity.tenant_id)
        await self.delete_by_id(entity.id)  # type: ignore[arg-type]

    async def delete_by_id(self, entity_id: IdType) -> None:
        """Delete the row with entity_id if it is visible; otherwise do nothing."""
        model: Any = self.model
        criteria = tenant_criteria(model)
        result = await self.db.execute(delete(model).where(model.id == entity_id, *criteria))
        if not result.rowcount:
            _logger.debug("%s %s not deleted: not in scope", self.resource_type, entity_id)

    async def delete_all_by_id(self, ids: Iterable[IdType]) -> None:
        """Delete the visible rows among ids; ids outside the scope are skipped."""
        model: Any = self.model
        criteria = tenant_criteria(model)
        id_list = list(ids)
        if not id_list:
            return
        await self.db.execute(delete(model).where(model.id.in_(id_list), *criteria))

    # ---- Helpers ----

    async def _stored_owner(self, entity_id: Any) -> str | None:
        """Return tenant_id of the stored row with entity_id (unscoped), or None."""
        model: Any = self.model
        result = await self.db.execute(select(model.tenant_id).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def _resolve_owner(self, entity: ModelType, operation: str) -> str:
        """Return the tenant_id entity must carry when persisted, or raise.

        Non-system callers may only write their own rows. System callers may
        write any row but never re-tag an existing one; their new rows keep
        the tenant_id they were given, or SYSTEM_TENANT_ID.
        """
        tenant_id = get_tenant_id()
        system = is_system_context()
        claimed = entity.tenant_id
        if not system and claimed is not None and claimed != tenant_id:
            raise self._violation(operation, tenant_id, claimed)
        stored = None
        entity_id = getattr(entity, "id", None)
        if entity_id is not None:
            stored = await self._stored_owner(entity_id)
            if not system and stored is not None and stored != tenant_id:
                raise self._violation(operation, tenant_id, stored)
        if system:
            if stored is not None and claimed is not None and claimed != stored:
                raise self._violation(operation, tenant_id, stored)
            return stored or claimed or SYSTEM_TENANT_ID
        return tenant_id

    async def _stage(self, entity: ModelType, owner: str) -> ModelType:
        """Stamp owner and attach entity to the session; return the attached instance."""
        if entity.tenant_id != owner:
            entity.tenant_id = owner
        if object_session(entity) is self.db.sync_session:
            return entity
        if getattr(entity, "id", None) is None:
            self.db.add(entity)
            return entity
        return await self.db.merge(entity)

    def _violation(
        self, operation: str, tenant_id: str, owner: str | None
    ) -> TenantIsolationViolationException:
        _logger.warning(
            "Tenant isolation violation: %s %s by tenant %s (owner %s)",
            operation,
            self.resource_type,
            tenant_id,
            owner,
        )
        return TenantIsolationViolationException(operation, self.resource_type)
