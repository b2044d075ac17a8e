"""Persistence models: ORM entities and mixins."""

from helpdesk.infrastructure.persistence.models.mixins import (
    AuditedTenantAwareModel,
    CuidMixin,
    TenantAwareMixin,
    TenantAwareModel,
    TimestampMixin,
    UserAuditMixin,
)
from helpdesk.infrastructure.persistence.models.tenant import Tenant
from helpdesk.infrastructure.persistence.models.user import (
    AgentUser,
    CustomerUser,
    GuestUser,
    SystemUser,
    User,
)

__all__ = [
    "Tenant",
    "User",
    "AgentUser",
    "CustomerUser",
    "GuestUser",
    "SystemUser",
    "CuidMixin",
    "TimestampMixin",
    "TenantAwareMixin",
    "UserAuditMixin",
    "TenantAwareModel",
    "AuditedTenantAwareModel",
]
