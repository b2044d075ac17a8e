"""Persistence repositories. Re-exports for dependency injection."""

from helpdesk.infrastructure.persistence.repositories.base import BaseRepository
from helpdesk.infrastructure.persistence.repositories.tenant_repo import TenantRepository
from helpdesk.infrastructure.persistence.repositories.tenant_scoped import (
    TenantScopedRepository,
    tenant_criteria,
)
from helpdesk.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = [
    "BaseRepository",
    "TenantRepository",
    "TenantScopedRepository",
    "UserRepository",
    "tenant_criteria",
]
