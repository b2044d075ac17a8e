"""Pydantic request/response schemas for the API."""

from helpdesk.schemas.health import HealthResponse
from helpdesk.schemas.tenant import TenantCreateRequest, TenantResponse
from helpdesk.schemas.user import UserCountResponse, UserCreateRequest, UserResponse

__all__ = [
    "HealthResponse",
    "TenantCreateRequest",
    "TenantResponse",
    "UserCountResponse",
    "UserCreateRequest",
    "UserResponse",
]
