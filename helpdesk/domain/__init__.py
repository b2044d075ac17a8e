"""Domain layer: enums and exceptions.

No dependencies on infrastructure or presentation. Used by core,
infrastructure and API layers.
"""

from helpdesk.domain.enums import EntityStatus, TenantType, UserType
from helpdesk.domain.exceptions import (
    AuthorizationException,
    HelpdeskException,
    MissingTenantIdentityException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    TenantIsolationViolationException,
    ValidationException,
)

__all__ = [
    # Enums
    "EntityStatus",
    "TenantType",
    "UserType",
    # Exceptions
    "AuthorizationException",
    "HelpdeskException",
    "MissingTenantIdentityException",
    "ResourceNotFoundException",
    "SqlNotConfiguredException",
    "TenantIsolationViolationException",
    "ValidationException",
]
