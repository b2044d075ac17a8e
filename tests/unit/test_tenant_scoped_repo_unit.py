"""Unit tests for tenant criteria and fail-closed repository behaviour (no database).

The session is a mock: with no identity bound, no repository operation may
reach it.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from helpdesk.core.tenant_context import set_system_context, set_tenant_id
from helpdesk.domain.exceptions import MissingTenantIdentityException
from helpdesk.infrastructure.persistence.models.user import CustomerUser, User
from helpdesk.infrastructure.persistence.repositories.tenant_scoped import (
    TenantScopedRepository,
    tenant_criteria,
)


def _mock_session() -> MagicMock:
    session = MagicMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.merge = AsyncMock()
    session.add = MagicMock()
    return session


def _customer(**kwargs) -> CustomerUser:
    return CustomerUser(username="jane", email="jane@example.com", pwd_hash="x", **kwargs)


def test_criteria_restricts_to_bound_tenant() -> None:
    set_tenant_id("acme")
    criteria = tenant_criteria(User)
    assert len(criteria) == 1
    compiled = str(criteria[0].compile(compile_kwargs={"literal_binds": True}))
    assert compiled == "app_user.tenant_id = 'acme'"


def test_criteria_is_empty_in_system_mode() -> None:
    set_tenant_id("acme")
    set_system_context(True)
    assert tenant_criteria(User) == ()


def test_criteria_without_identity_raises() -> None:
    with pytest.raises(MissingTenantIdentityException):
        tenant_criteria(User)


def test_select_scoped_applies_criteria() -> None:
    set_tenant_id("globex")
    repo = TenantScopedRepository(_mock_session(), User)
    sql = str(repo.select_scoped().compile(compile_kwargs={"literal_binds": True}))
    assert "app_user.tenant_id = 'globex'" in sql


def test_resource_type_is_model_name() -> None:
    assert TenantScopedRepository(_mock_session(), User).resource_type == "user"


@pytest.mark.parametrize(
    "operation",
    [
        lambda r: r.find_all(),
        lambda r: r.find_by_id(1),
        lambda r: r.find_all_by_id([1, 2]),
        lambda r: r.find_all_by_id([]),
        lambda r: r.count(),
        lambda r: r.exists_by_id(1),
        lambda r: r.save(_customer()),
        lambda r: r.save(_customer(id=7, tenant_id="acme")),
        lambda r: r.save_all([_customer(), _customer()]),
        lambda r: r.delete(_customer(id=7, tenant_id="acme")),
        lambda r: r.delete_by_id(1),
        lambda r: r.delete_all_by_id([1, 2]),
        lambda r: r.delete_all_by_id([]),
    ],
    ids=[
        "find_all",
        "find_by_id",
        "find_all_by_id",
        "find_all_by_id_empty",
        "count",
        "exists_by_id",
        "save_new",
        "save_existing",
        "save_all",
        "delete",
        "delete_by_id",
        "delete_all_by_id",
        "delete_all_by_id_empty",
    ],
)
async def test_operations_without_identity_touch_no_store(operation) -> None:
    session = _mock_session()
    repo = TenantScopedRepository(session, User)
    with pytest.raises(MissingTenantIdentityException):
        await operation(repo)
    session.execute.assert_not_awaited()
    session.flush.assert_not_awaited()
    session.merge.assert_not_awaited()
    session.add.assert_not_called()


def test_select_scoped_without_identity_raises() -> None:
    repo = TenantScopedRepository(_mock_session(), User)
    with pytest.raises(MissingTenantIdentityException):
        repo.select_scoped()
