"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions and repositories. Routes depend
only on these, never on the engine or session factory directly. The tenant
context is bound by TenantContextMiddleware before any of these run.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.tenant_context import is_system_context
from helpdesk.domain.exceptions import AuthorizationException
from helpdesk.infrastructure.persistence.database import get_db, get_db_transactional
from helpdesk.infrastructure.persistence.repositories import (
    TenantRepository,
    UserRepository,
)


def require_system_context() -> None:
    """Reject the request unless it runs in system-admin mode."""
    if not is_system_context():
        raise AuthorizationException(
            resource="tenant", action="manage", message="System context required"
        )


async def get_tenant_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TenantRepository:
    """Tenant repository for read operations."""
    return TenantRepository(db)


async def get_tenant_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> TenantRepository:
    """Tenant repository for writes (transactional)."""
    return TenantRepository(db)


async def get_user_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserRepository:
    """User repository for read operations (scoped by the tenant context)."""
    return UserRepository(db)


async def get_user_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> UserRepository:
    """User repository for writes (transactional, scoped by the tenant context)."""
    return UserRepository(db)
