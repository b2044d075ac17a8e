"""User API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from helpdesk.domain.enums import EntityStatus, UserType


class UserCreateRequest(BaseModel):
    """Request body for creating a user in the acting tenant.

    Subtype fields are optional and only stored for the matching user_type
    (e.g. phone_number for customers).
    """

    user_type: UserType = UserType.CUSTOMER
    username: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8)
    display_name: str | None = Field(default=None, max_length=255)
    agent_id: str | None = None
    domain: str | None = None
    customer_id: str | None = None
    phone_number: str | None = Field(default=None, max_length=64)
    session_id: str | None = None
    expiry_time: datetime | None = None
    role: str | None = Field(default=None, max_length=64)


class UserResponse(BaseModel):
    """User response (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: str
    user_type: UserType
    username: str
    email: str
    display_name: str | None = None
    status: EntityStatus
    created_by: str
    created_at: datetime


class UserCountResponse(BaseModel):
    """Response for GET /users/count."""

    count: int
