"""Tenant ID format validation for the HTTP boundary.

Header values are checked before they are bound to the tenant context, so
an unvalidated string never reaches logs or query parameters.
"""

import re

from helpdesk.core.tenant_context import SYSTEM_TENANT_ID

# CUID/slug-style: alphanumeric, hyphen, underscore.
TENANT_ID_MAX_LENGTH = 64
_TENANT_ID_RE = re.compile(
    r"^[a-zA-Z0-9_-]{1," + str(TENANT_ID_MAX_LENGTH) + r"}$"
)


def is_valid_tenant_id_format(value: str | None) -> bool:
    """Return True if value may be bound as a tenant id.

    The reserved SYSTEM_TENANT_ID is rejected: system mode is granted by the
    system key, never by naming the system tenant in a header.
    """
    if not value or len(value) > TENANT_ID_MAX_LENGTH:
        return False
    if value == SYSTEM_TENANT_ID:
        return False
    return bool(_TENANT_ID_RE.fullmatch(value))


def is_valid_actor_id_format(value: str | None) -> bool:
    """Return True if value may be bound as the acting user id for audit columns."""
    if not value or len(value) > TENANT_ID_MAX_LENGTH:
        return False
    return bool(_TENANT_ID_RE.fullmatch(value))
