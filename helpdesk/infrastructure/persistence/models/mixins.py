"""SQLAlchemy mixins for common model patterns.

Provides: CuidMixin, TimestampMixin, TenantAwareMixin, UserAuditMixin, and
the combined TenantAwareModel / AuditedTenantAwareModel bases.

Tenant-aware tables are shared by all tenants and discriminated by the
tenant_id column. The column is stamped from the tenant context just before
the first INSERT and may never change afterwards.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, event, inspect
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from helpdesk.core.tenant_context import SYSTEM_TENANT_ID, get_tenant_id, has_tenant
from helpdesk.domain.exceptions import TenantIsolationViolationException
from helpdesk.shared.context import get_current_actor_id
from helpdesk.shared.utils.generators import generate_cuid


class CuidMixin:
    """Mixin for models using CUID as primary key. Provides id with default generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TimestampMixin:
    """Mixin for created_at and updated_at (server defaults, timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class TenantAwareMixin:
    """Mixin for tenant-owned rows: store-assigned integer id plus owner tag.

    tenant_id is not a foreign key: rows created outside any tenant carry
    SYSTEM_TENANT_ID, which has no tenant row.
    """

    @declared_attr
    def id(cls) -> Mapped[int]:
        return mapped_column(Integer, primary_key=True, autoincrement=True)

    @declared_attr
    def tenant_id(cls) -> Mapped[str]:
        return mapped_column(
            String(255),
            nullable=False,
            index=True,
            server_default=SYSTEM_TENANT_ID,
        )


class UserAuditMixin:
    """Mixin for created_by / updated_by, stamped from the actor context."""

    @declared_attr
    def created_by(cls) -> Mapped[str]:
        return mapped_column(String(255), nullable=False)

    @declared_attr
    def updated_by(cls) -> Mapped[str]:
        return mapped_column(String(255), nullable=False)


class TenantAwareModel(TenantAwareMixin, TimestampMixin):
    """Combined mixin: integer id + tenant_id + created_at/updated_at."""

    __abstract__ = True


class AuditedTenantAwareModel(TenantAwareModel, UserAuditMixin):
    """Combined mixin: tenant-aware model with created_by/updated_by."""

    __abstract__ = True


@event.listens_for(TenantAwareMixin, "before_insert", propagate=True)
def _stamp_tenant_id(mapper, connection, target) -> None:
    """Set tenant_id once, before the first INSERT, when the caller left it empty."""
    if target.tenant_id is None:
        target.tenant_id = get_tenant_id() if has_tenant() else SYSTEM_TENANT_ID


@event.listens_for(TenantAwareMixin, "before_update", propagate=True)
def _guard_tenant_id(mapper, connection, target) -> None:
    """Reject an UPDATE that would move a row to another tenant."""
    history = inspect(target).attrs.tenant_id.history
    if history.deleted and history.deleted[0] is not None:
        if history.added and history.added[0] != history.deleted[0]:
            raise TenantIsolationViolationException(
                "reassign", mapper.class_.__name__.lower()
            )


@event.listens_for(UserAuditMixin, "before_insert", propagate=True)
def _stamp_created_by(mapper, connection, target) -> None:
    actor_id = get_current_actor_id()
    if target.created_by is None:
        target.created_by = actor_id
    if target.updated_by is None:
        target.updated_by = actor_id


@event.listens_for(UserAuditMixin, "before_update", propagate=True)
def _stamp_updated_by(mapper, connection, target) -> None:
    target.updated_by = get_current_actor_id()
