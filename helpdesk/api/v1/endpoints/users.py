"""User API: thin routes over UserRepository, scoped to the acting tenant.

Users of other tenants are indistinguishable from missing users: reads and
deletes of them answer 404.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import IntegrityError

from helpdesk.api.v1.dependencies import get_user_repo, get_user_repo_for_write
from helpdesk.domain.enums import UserType
from helpdesk.domain.exceptions import ResourceNotFoundException, ValidationException
from helpdesk.infrastructure.persistence.models.user import (
    AgentUser,
    CustomerUser,
    GuestUser,
    SystemUser,
    User,
)
from helpdesk.infrastructure.persistence.repositories import UserRepository
from helpdesk.infrastructure.security.password import hash_password
from helpdesk.schemas.user import UserCountResponse, UserCreateRequest, UserResponse

router = APIRouter()


def _build_user(body: UserCreateRequest) -> User:
    """Instantiate the User subtype named by body.user_type."""
    common = {
        "username": body.username,
        "email": str(body.email),
        "pwd_hash": hash_password(body.password),
        "display_name": body.display_name,
    }
    if body.user_type is UserType.AGENT:
        return AgentUser(agent_id=body.agent_id, domain=body.domain, **common)
    if body.user_type is UserType.GUEST:
        return GuestUser(session_id=body.session_id, expiry_time=body.expiry_time, **common)
    if body.user_type is UserType.SYSTEM:
        return SystemUser(role=body.role, **common)
    return CustomerUser(
        customer_id=body.customer_id, phone_number=body.phone_number, **common
    )


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    body: UserCreateRequest,
    user_repo: Annotated[UserRepository, Depends(get_user_repo_for_write)],
):
    """Create a user in the acting tenant."""
    try:
        user = await user_repo.save(_build_user(body))
    except IntegrityError as e:
        raise ValidationException(
            "Username or email already exists in this tenant", field="username"
        ) from e
    return UserResponse.model_validate(user)


@router.get("", response_model=list[UserResponse])
async def list_users(
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
    user_type: UserType | None = None,
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
):
    """List the acting tenant's users (paginated, optionally by type)."""
    if user_type is not None:
        users = await user_repo.list_by_type(user_type, skip=skip, limit=limit)
    else:
        users = await user_repo.get_all(skip=skip, limit=limit)
    return [UserResponse.model_validate(u) for u in users]


@router.get("/count", response_model=UserCountResponse)
async def count_users(
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
):
    """Number of users visible to the acting tenant."""
    return UserCountResponse(count=await user_repo.count())


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
):
    """Get user by id (tenant-scoped)."""
    user = await user_repo.get_by_id(user_id)
    if not user:
        raise ResourceNotFoundException("user", str(user_id))
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: int,
    user_repo: Annotated[UserRepository, Depends(get_user_repo_for_write)],
) -> None:
    """Delete user by id (tenant-scoped)."""
    user = await user_repo.get_by_id(user_id)
    if not user:
        raise ResourceNotFoundException("user", str(user_id))
    await user_repo.delete(user)
