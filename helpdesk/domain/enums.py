"""Domain enumerations for the helpdesk platform.

Enums represent fixed sets of domain values (e.g. tenant status, user type).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class EntityStatus(_ValuesMixin, str, Enum):
    """Lifecycle status shared by tenants and users.

    Only ACTIVE entities may use the system.
    """

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    DELETED = "deleted"


class TenantType(_ValuesMixin, str, Enum):
    """Commercial tier or purpose of a tenant."""

    FREEMIUM = "freemium"
    PAID = "paid"
    ENTERPRISE = "enterprise"
    TRIAL = "trial"
    SYSTEM = "system"
    TEST = "test"
    DEMO = "demo"


class UserType(_ValuesMixin, str, Enum):
    """Discriminator for the single-table user hierarchy."""

    AGENT = "agent"
    CUSTOMER = "customer"
    GUEST = "guest"
    SYSTEM = "system"
