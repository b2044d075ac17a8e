"""Tenant ORM model. Registry of tenants; a system table, not tenant-aware."""

from sqlalchemy import CheckConstraint, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.domain.enums import EntityStatus, TenantType
from helpdesk.infrastructure.persistence.database import Base
from helpdesk.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


def _in_values(column: str, values: list[str]) -> str:
    return "{} IN ({})".format(
        column, ", ".join("'{}'".format(v.replace("'", "''")) for v in values)
    )


class Tenant(CuidMixin, TimestampMixin, Base):
    """Tenant (customer organization). Table: tenant.

    Its id is the key stamped into tenant_id on every tenant-aware row.
    Only visible to system-mode callers.
    """

    __tablename__ = "tenant"

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(
        String(32), nullable=False, default=TenantType.FREEMIUM.value
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=EntityStatus.ACTIVE.value, index=True
    )

    __table_args__ = (
        CheckConstraint(_in_values("type", TenantType.values()), name="tenant_type_check"),
        CheckConstraint(
            _in_values("status", EntityStatus.values()), name="tenant_status_check"
        ),
    )
