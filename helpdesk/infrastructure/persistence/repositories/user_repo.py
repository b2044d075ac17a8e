"""User repository: tenant-scoped lookups on the app_user table."""

from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.domain.enums import UserType
from helpdesk.infrastructure.persistence.models.user import User
from helpdesk.infrastructure.persistence.repositories.tenant_scoped import (
    TenantScopedRepository,
)


class UserRepository:
    """User data access. Every query is scoped to the acting tenant.

    Generic operations are delegated to a TenantScopedRepository; lookups
    specific to users start from its select_scoped().
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.scoped: TenantScopedRepository[User, int] = TenantScopedRepository(db, User)

    async def get_by_id(self, user_id: int) -> User | None:
        return await self.scoped.find_by_id(user_id)

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[User]:
        return await self.scoped.find_all(skip=skip, limit=limit)

    async def get_by_ids(self, user_ids: Iterable[int]) -> list[User]:
        return await self.scoped.find_all_by_id(user_ids)

    async def count(self) -> int:
        return await self.scoped.count()

    async def exists(self, user_id: int) -> bool:
        return await self.scoped.exists_by_id(user_id)

    async def get_by_username(self, username: str) -> User | None:
        """Return the acting tenant's user with this username, or None."""
        result = await self.db.execute(
            self.scoped.select_scoped().where(User.username == username)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Return the acting tenant's user with this email, or None.

        In system context several tenants may share an address; the first
        match by id is returned.
        """
        result = await self.db.execute(
            self.scoped.select_scoped().where(User.email == email).order_by(User.id)
        )
        return result.scalars().first()

    async def list_by_type(
        self, user_type: UserType, skip: int = 0, limit: int = 100
    ) -> list[User]:
        result = await self.db.execute(
            self.scoped.select_scoped()
            .where(User.user_type == user_type.value)
            .order_by(User.id)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def save(self, user: User) -> User:
        return await self.scoped.save(user)

    async def save_all(self, users: Iterable[User]) -> list[User]:
        return await self.scoped.save_all(users)

    async def delete(self, user: User) -> None:
        await self.scoped.delete(user)

    async def delete_by_id(self, user_id: int) -> None:
        await self.scoped.delete_by_id(user_id)
