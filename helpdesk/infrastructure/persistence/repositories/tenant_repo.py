"""Tenant repository. Unscoped: the tenant registry is a system table."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.domain.enums import EntityStatus, TenantType
from helpdesk.domain.exceptions import ValidationException
from helpdesk.infrastructure.persistence.models.tenant import Tenant
from helpdesk.infrastructure.persistence.repositories.base import BaseRepository


class TenantRepository(BaseRepository[Tenant]):
    """Tenant registry access. Callers must be in system context (enforced by the API)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Tenant)

    async def get_by_name(self, name: str) -> Tenant | None:
        result = await self.db.execute(select(Tenant).where(Tenant.name == name))
        return result.scalar_one_or_none()

    async def create_tenant(
        self,
        name: str,
        description: str | None = None,
        tenant_type: TenantType = TenantType.FREEMIUM,
        status: EntityStatus = EntityStatus.ACTIVE,
    ) -> Tenant:
        """Create a tenant; raises ValidationException when the name is taken."""
        tenant = Tenant(
            name=name,
            description=description,
            type=tenant_type.value,
            status=status.value,
        )
        try:
            return await self.create(tenant)
        except IntegrityError as e:
            raise ValidationException(
                f"Tenant with name '{name}' already exists", field="name"
            ) from e
