"""Tenant API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from helpdesk.domain.enums import EntityStatus, TenantType


class TenantCreateRequest(BaseModel):
    """Request body for registering a tenant (system context only)."""

    name: str = Field(..., min_length=1, max_length=255, description="Unique display name")
    description: str | None = Field(default=None, max_length=2000)
    type: TenantType = TenantType.FREEMIUM


class TenantResponse(BaseModel):
    """Tenant in list/get responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None = None
    type: TenantType
    status: EntityStatus
    created_at: datetime
