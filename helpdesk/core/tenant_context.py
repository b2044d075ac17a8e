"""Ambient tenant context using contextvars.

Holds the identity (a tenant id, system-admin mode, or both) acting in the
current unit of work: one HTTP request or one background job. Values are
scoped to the current asyncio task or thread, so concurrent requests never
observe each other's tenant. Repositories read it on every call instead of
having a tenant id threaded through their signatures.

Every entry point must bind the identity and clear it on all exit paths:

    with tenant_unit_of_work(TenantIdentity.for_tenant("acme")):
        users = await repo.find_all()

System mode takes precedence over a bound tenant id: get_tenant_id() then
returns SYSTEM_TENANT_ID, while has_tenant() still reports the recorded id.
"""

from __future__ import annotations

import contextvars
import functools
import inspect
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, TypeVar

from helpdesk.domain.exceptions import (
    MissingTenantIdentityException,
    ValidationException,
)
from helpdesk.shared.context import clear_current_actor, set_current_actor

logger = logging.getLogger(__name__)

# Tenant key reported in system mode and stamped on rows created without a tenant.
SYSTEM_TENANT_ID = "system"

_current_tenant_id: ContextVar[str | None] = ContextVar(
    "current_tenant_id", default=None
)
_system_context: ContextVar[bool] = ContextVar("system_context", default=False)

F = TypeVar("F", bound=Callable[..., Any])
R = TypeVar("R")


@dataclass(frozen=True)
class TenantIdentity:
    """Immutable identity acting in one unit of work.

    Built by the boundary (middleware, job runner) from an already
    authenticated credential. A tenant id may accompany system mode for
    audit purposes; resolved_tenant_id still reports SYSTEM_TENANT_ID then.
    """

    tenant_id: str | None = None
    is_system: bool = False

    def __post_init__(self) -> None:
        if self.is_system:
            return
        if not self.tenant_id:
            raise ValidationException(
                "Tenant identity requires a tenant_id or system mode",
                field="tenant_id",
            )
        if self.tenant_id == SYSTEM_TENANT_ID:
            raise ValidationException(
                f"'{SYSTEM_TENANT_ID}' is reserved for system mode",
                field="tenant_id",
            )

    @classmethod
    def for_tenant(cls, tenant_id: str) -> TenantIdentity:
        """Identity for a regular tenant-scoped unit of work."""
        return cls(tenant_id=tenant_id)

    @classmethod
    def system(cls, tenant_id: str | None = None) -> TenantIdentity:
        """System-admin identity; tenant_id is recorded but never used for scoping."""
        return cls(tenant_id=tenant_id, is_system=True)

    @property
    def resolved_tenant_id(self) -> str:
        """Tenant key this identity resolves to (system mode wins)."""
        if self.is_system:
            return SYSTEM_TENANT_ID
        return self.tenant_id  # type: ignore[return-value]


def set_system_context(flag: bool) -> None:
    """Mark the current task as system-admin (True) or not (False)."""
    _system_context.set(bool(flag))


def is_system_context() -> bool:
    """Return True if the current task runs in system-admin mode."""
    return _system_context.get()


def set_tenant_id(tenant_id: str) -> None:
    """Bind a concrete tenant id to the current task. Overwrites any previous id.

    Does not touch the system flag; see get_tenant_id for precedence.
    """
    _current_tenant_id.set(tenant_id)


def get_tenant_id() -> str:
    """Return the tenant id acting in the current task.

    Returns:
        SYSTEM_TENANT_ID in system mode (even if a tenant id is also bound),
        otherwise the bound tenant id.

    Raises:
        MissingTenantIdentityException: If no tenant id is bound and system
            mode is not active.
    """
    if is_system_context():
        return SYSTEM_TENANT_ID
    tenant_id = _current_tenant_id.get()
    if tenant_id is None:
        raise MissingTenantIdentityException()
    return tenant_id


def has_tenant() -> bool:
    """Return True if a concrete tenant id is bound (independent of system mode)."""
    return _current_tenant_id.get() is not None


def clear() -> None:
    """Remove the tenant id and system flag from the current task. Idempotent."""
    _current_tenant_id.set(None)
    _system_context.set(False)


def get_identity() -> TenantIdentity | None:
    """Return a snapshot of the bound identity, or None when nothing is bound."""
    tenant_id = _current_tenant_id.get()
    system = _system_context.get()
    if tenant_id is None and not system:
        return None
    return TenantIdentity(tenant_id=tenant_id, is_system=system)


def bind_identity(identity: TenantIdentity) -> None:
    """Bind both parts of identity to the current task, replacing prior bindings."""
    _current_tenant_id.set(identity.tenant_id)
    _system_context.set(identity.is_system)


@contextmanager
def tenant_unit_of_work(
    identity: TenantIdentity | None, actor_id: str | None = None
) -> Iterator[None]:
    """Run one unit of work under identity and always clear the context afterwards.

    actor_id, when given, is bound as the acting user for audit columns
    (helpdesk.shared.context). Tenant, system flag and actor are all cleared
    on success, on error and on cancellation, so the task or worker thread
    can be reused without a stale identity. Passing None binds nothing
    (tenant-scoped repository calls then fail with
    MissingTenantIdentityException) but still guarantees the clear.
    """
    if identity is not None:
        bind_identity(identity)
        logger.debug(
            "Tenant context bound: tenant_id=%s system=%s",
            identity.tenant_id,
            identity.is_system,
        )
    if actor_id is not None:
        set_current_actor(actor_id)
    try:
        yield
    finally:
        clear()
        clear_current_actor()
        logger.debug("Tenant context cleared")


def bind_tenant(
    identity: TenantIdentity, actor_id: str | None = None
) -> Callable[[F], F]:
    """Decorator running a job function as its own unit of work under identity.

    Works for plain and async functions. Example:

        @bind_tenant(TenantIdentity.system(), actor_id="guest-purger")
        async def purge_expired_guests(session): ...
    """

    def decorator(func: F) -> F:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with tenant_unit_of_work(identity, actor_id):
                    return await func(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tenant_unit_of_work(identity, actor_id):
                return func(*args, **kwargs)

        return sync_wrapper  # type: ignore[return-value]

    return decorator


def run_in_context(func: Callable[..., R]) -> Callable[..., R]:
    """Bind func to a snapshot of the caller's context for a thread hop.

    asyncio.to_thread and Starlette's threadpool copy the context already;
    use this with raw executors (e.g. ThreadPoolExecutor.submit), whose
    worker threads otherwise start with an empty context.
    """
    ctx = contextvars.copy_context()

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> R:
        return ctx.copy().run(func, *args, **kwargs)

    return wrapper
