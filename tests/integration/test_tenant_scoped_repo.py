"""Tenant-scoped repository against SQLite: two tenants (acme, globex) plus system mode.

Each test binds the identity it acts as with tenant_unit_of_work; the session
is shared, so rows written as one tenant are really in the table when read
as another.
"""

import logging

import pytest
from sqlalchemy import select

from helpdesk.core.tenant_context import TenantIdentity, tenant_unit_of_work
from helpdesk.domain.exceptions import TenantIsolationViolationException
from helpdesk.infrastructure.persistence.models.user import (
    AgentUser,
    CustomerUser,
    User,
)
from helpdesk.infrastructure.persistence.repositories.tenant_scoped import (
    TenantScopedRepository,
)
from helpdesk.shared.context import set_current_actor

ACME = TenantIdentity.for_tenant("acme")
GLOBEX = TenantIdentity.for_tenant("globex")
SYSTEM = TenantIdentity.system()


def _customer(username: str, **kwargs) -> CustomerUser:
    return CustomerUser(
        username=username,
        email=f"{username}@example.com",
        pwd_hash="hash",
        **kwargs,
    )


@pytest.fixture
def repo(db_session) -> TenantScopedRepository[User, int]:
    return TenantScopedRepository(db_session, User)


@pytest.fixture
async def seeded(repo) -> dict[str, User]:
    """alice and carol in acme, bob in globex."""
    with tenant_unit_of_work(ACME):
        alice = await repo.save(_customer("alice"))
        carol = await repo.save(_customer("carol"))
    with tenant_unit_of_work(GLOBEX):
        bob = await repo.save(_customer("bob"))
    return {"alice": alice, "carol": carol, "bob": bob}


async def _stored_row(db_session, user_id: int) -> tuple[str, str] | None:
    """(tenant_id, username) straight from the table, bypassing the repository."""
    result = await db_session.execute(
        select(User.tenant_id, User.username).where(User.id == user_id)
    )
    row = result.first()
    return tuple(row) if row else None


# ---- Reads ----


async def test_save_stamps_acting_tenant(seeded) -> None:
    assert seeded["alice"].tenant_id == "acme"
    assert seeded["bob"].tenant_id == "globex"
    assert seeded["alice"].id is not None
    assert seeded["alice"].created_at is not None


async def test_find_all_returns_only_own_rows(repo, seeded) -> None:
    with tenant_unit_of_work(ACME):
        names = {u.username for u in await repo.find_all()}
    assert names == {"alice", "carol"}
    with tenant_unit_of_work(GLOBEX):
        names = {u.username for u in await repo.find_all()}
    assert names == {"bob"}


async def test_system_mode_sees_every_row(repo, seeded) -> None:
    with tenant_unit_of_work(SYSTEM):
        users = await repo.find_all()
        count = await repo.count()
    assert {u.username for u in users} == {"alice", "carol", "bob"}
    assert count == 3


async def test_find_all_paginates(repo, seeded) -> None:
    with tenant_unit_of_work(SYSTEM):
        first = await repo.find_all(skip=0, limit=2)
        rest = await repo.find_all(skip=2, limit=2)
    assert len(first) == 2
    assert len(rest) == 1


async def test_count_is_per_tenant(repo, seeded) -> None:
    with tenant_unit_of_work(ACME):
        assert await repo.count() == 2
    with tenant_unit_of_work(GLOBEX):
        assert await repo.count() == 1
    with tenant_unit_of_work(TenantIdentity.for_tenant("initech")):
        assert await repo.count() == 0


async def test_find_by_id_hides_foreign_rows(repo, seeded) -> None:
    bob_id = seeded["bob"].id
    with tenant_unit_of_work(ACME):
        assert await repo.find_by_id(bob_id) is None
        assert await repo.exists_by_id(bob_id) is False
        found = await repo.find_by_id(seeded["alice"].id)
    assert found is not None
    assert found.username == "alice"
    with tenant_unit_of_work(GLOBEX):
        assert await repo.exists_by_id(bob_id) is True


async def test_foreign_row_looks_like_missing_row(repo, seeded) -> None:
    with tenant_unit_of_work(ACME):
        foreign = await repo.find_by_id(seeded["bob"].id)
        missing = await repo.find_by_id(999_999)
    assert foreign is None
    assert missing is None


async def test_find_all_by_id_omits_foreign_ids(repo, seeded) -> None:
    ids = [seeded["alice"].id, seeded["bob"].id, seeded["carol"].id, 999_999]
    with tenant_unit_of_work(ACME):
        found = await repo.find_all_by_id(ids)
        assert await repo.find_all_by_id([]) == []
    assert {u.username for u in found} == {"alice", "carol"}
    with tenant_unit_of_work(SYSTEM):
        assert len(await repo.find_all_by_id(ids)) == 3


async def test_polymorphic_rows_load_as_subtypes(repo) -> None:
    with tenant_unit_of_work(ACME):
        await repo.save(
            AgentUser(username="ann", email="ann@acme.io", pwd_hash="h", agent_id="A-1")
        )
        users = await repo.find_all()
    assert len(users) == 1
    assert isinstance(users[0], AgentUser)
    assert users[0].user_type == "agent"


# ---- Writes ----


async def test_save_in_system_mode_stamps_system(repo) -> None:
    with tenant_unit_of_work(SYSTEM):
        user = await repo.save(_customer("root"))
    assert user.tenant_id == "system"


async def test_system_mode_may_create_rows_for_a_tenant(repo) -> None:
    with tenant_unit_of_work(SYSTEM):
        user = await repo.save(_customer("provisioned", tenant_id="globex"))
    assert user.tenant_id == "globex"
    with tenant_unit_of_work(GLOBEX):
        assert await repo.exists_by_id(user.id) is True


async def test_save_updates_own_row(repo, seeded, db_session) -> None:
    alice = seeded["alice"]
    with tenant_unit_of_work(ACME):
        alice.display_name = "Alice A."
        saved = await repo.save(alice)
    assert saved.display_name == "Alice A."
    assert saved.tenant_id == "acme"


async def test_save_by_id_with_detached_instance_updates_row(repo, seeded, db_session) -> None:
    alice_id = seeded["alice"].id
    with tenant_unit_of_work(ACME):
        replacement = _customer("alice", id=alice_id, display_name="Merged")
        saved = await repo.save(replacement)
    assert saved.id == alice_id
    assert saved.display_name == "Merged"
    with tenant_unit_of_work(ACME):
        assert await repo.count() == 2


async def test_save_entity_claimed_by_other_tenant_is_rejected(repo, seeded) -> None:
    with tenant_unit_of_work(ACME):
        with pytest.raises(TenantIsolationViolationException) as exc_info:
            await repo.save(_customer("mallory", tenant_id="globex"))
        assert await repo.count() == 2
    assert exc_info.value.details == {"operation": "save", "resource_type": "user"}


async def test_save_over_foreign_row_is_rejected_and_row_unchanged(
    repo, seeded, db_session
) -> None:
    bob_id = seeded["bob"].id
    with tenant_unit_of_work(ACME):
        forged = _customer("hacked", id=bob_id)
        with pytest.raises(TenantIsolationViolationException):
            await repo.save(forged)
    assert await _stored_row(db_session, bob_id) == ("globex", "bob")


async def test_save_attached_foreign_entity_is_rejected(repo, seeded) -> None:
    with tenant_unit_of_work(GLOBEX):
        with pytest.raises(TenantIsolationViolationException):
            await repo.save(seeded["alice"])


async def test_system_mode_cannot_retag_existing_row(repo, seeded, db_session) -> None:
    bob_id = seeded["bob"].id
    with tenant_unit_of_work(SYSTEM):
        with pytest.raises(TenantIsolationViolationException):
            await repo.save(_customer("bob", id=bob_id, tenant_id="acme"))
    assert await _stored_row(db_session, bob_id) == ("globex", "bob")


async def test_system_mode_may_update_any_row(repo, seeded) -> None:
    bob = seeded["bob"]
    with tenant_unit_of_work(SYSTEM):
        bob.display_name = "Bob (reviewed)"
        saved = await repo.save(bob)
    assert saved.tenant_id == "globex"
    assert saved.display_name == "Bob (reviewed)"


async def test_save_all_persists_every_entity(repo) -> None:
    with tenant_unit_of_work(ACME):
        saved = await repo.save_all([_customer("u1"), _customer("u2"), _customer("u3")])
        assert await repo.count() == 3
    assert all(u.id is not None and u.tenant_id == "acme" for u in saved)


async def test_save_all_is_all_or_nothing(repo, seeded) -> None:
    with tenant_unit_of_work(ACME):
        batch = [_customer("new1"), _customer("new2", tenant_id="globex")]
        with pytest.raises(TenantIsolationViolationException):
            await repo.save_all(batch)
        assert await repo.count() == 2
    assert batch[0].id is None


async def test_save_all_rejects_batch_touching_foreign_row(repo, seeded, db_session) -> None:
    bob_id = seeded["bob"].id
    with tenant_unit_of_work(ACME):
        with pytest.raises(TenantIsolationViolationException):
            await repo.save_all([_customer("new1"), _customer("x", id=bob_id)])
        assert await repo.count() == 2
    assert await _stored_row(db_session, bob_id) == ("globex", "bob")


async def test_violation_is_logged(repo, seeded, caplog) -> None:
    with caplog.at_level(logging.WARNING):
        with tenant_unit_of_work(ACME):
            with pytest.raises(TenantIsolationViolationException):
                await repo.save(_customer("mallory", tenant_id="globex"))
    assert "Tenant isolation violation" in caplog.text
    assert "acme" in caplog.text


# ---- Deletes ----


async def test_delete_by_id_of_foreign_row_is_silent(repo, seeded, db_session) -> None:
    bob_id = seeded["bob"].id
    with tenant_unit_of_work(ACME):
        await repo.delete_by_id(bob_id)
        await repo.delete_by_id(999_999)
    assert await _stored_row(db_session, bob_id) == ("globex", "bob")


async def test_delete_by_id_removes_own_row(repo, seeded) -> None:
    alice_id = seeded["alice"].id
    with tenant_unit_of_work(ACME):
        await repo.delete_by_id(alice_id)
        assert await repo.exists_by_id(alice_id) is False
        assert await repo.count() == 1


async def test_delete_foreign_entity_is_rejected(repo, seeded, db_session) -> None:
    bob = seeded["bob"]
    with tenant_unit_of_work(ACME):
        with pytest.raises(TenantIsolationViolationException) as exc_info:
            await repo.delete(bob)
    assert exc_info.value.details["operation"] == "delete"
    assert await _stored_row(db_session, bob.id) == ("globex", "bob")


async def test_delete_own_entity(repo, seeded) -> None:
    with tenant_unit_of_work(GLOBEX):
        await repo.delete(seeded["bob"])
        assert await repo.count() == 0


async def test_system_mode_may_delete_any_entity(repo, seeded) -> None:
    with tenant_unit_of_work(SYSTEM):
        await repo.delete(seeded["bob"])
        await repo.delete_by_id(seeded["alice"].id)
        assert await repo.count() == 1


async def test_delete_all_by_id_skips_foreign_ids(repo, seeded, db_session) -> None:
    ids = [seeded["alice"].id, seeded["bob"].id]
    with tenant_unit_of_work(ACME):
        await repo.delete_all_by_id(ids)
        await repo.delete_all_by_id([])
        assert await repo.count() == 1
    assert await _stored_row(db_session, seeded["alice"].id) is None
    assert await _stored_row(db_session, seeded["bob"].id) == ("globex", "bob")


# ---- Model-level guards ----


async def test_tenant_id_cannot_change_on_flush(seeded, db_session) -> None:
    alice = seeded["alice"]
    alice.tenant_id = "globex"
    with pytest.raises(TenantIsolationViolationException):
        await db_session.flush()
    await db_session.rollback()


async def test_audit_columns_follow_actor(repo) -> None:
    with tenant_unit_of_work(ACME):
        anonymous = await repo.save(_customer("first"))
        set_current_actor("agent-7")
        named = await repo.save(_customer("second"))
        anonymous.display_name = "edited"
        edited = await repo.save(anonymous)
    assert named.created_by == "agent-7"
    assert named.updated_by == "agent-7"
    assert edited.created_by == "system"
    assert edited.updated_by == "agent-7"
