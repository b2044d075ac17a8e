"""Tenant API: thin routes over TenantRepository. System context only."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from helpdesk.api.v1.dependencies import (
    get_tenant_repo,
    get_tenant_repo_for_write,
    require_system_context,
)
from helpdesk.domain.exceptions import ResourceNotFoundException
from helpdesk.infrastructure.persistence.repositories import TenantRepository
from helpdesk.schemas.tenant import TenantCreateRequest, TenantResponse

router = APIRouter(dependencies=[Depends(require_system_context)])


@router.post("", response_model=TenantResponse, status_code=201)
async def create_tenant(
    body: TenantCreateRequest,
    tenant_repo: Annotated[TenantRepository, Depends(get_tenant_repo_for_write)],
):
    """Register a tenant. Duplicate names are rejected with 400."""
    tenant = await tenant_repo.create_tenant(
        name=body.name,
        description=body.description,
        tenant_type=body.type,
    )
    return TenantResponse.model_validate(tenant)


@router.get("", response_model=list[TenantResponse])
async def list_tenants(
    tenant_repo: Annotated[TenantRepository, Depends(get_tenant_repo)],
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
):
    """List registered tenants (paginated)."""
    tenants = await tenant_repo.get_all(skip=skip, limit=limit)
    return [TenantResponse.model_validate(t) for t in tenants]


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant(
    tenant_id: str,
    tenant_repo: Annotated[TenantRepository, Depends(get_tenant_repo)],
):
    """Get tenant by id."""
    tenant = await tenant_repo.get_by_id(tenant_id)
    if not tenant:
        raise ResourceNotFoundException("tenant", tenant_id)
    return TenantResponse.model_validate(tenant)
