"""User ORM models (tenant-scoped, single table discriminated by user_type).

User is the shared base; AgentUser, CustomerUser, GuestUser and SystemUser
add their own nullable columns to the same app_user table.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.domain.enums import EntityStatus, UserType
from helpdesk.infrastructure.persistence.database import Base
from helpdesk.infrastructure.persistence.models.mixins import AuditedTenantAwareModel


class User(AuditedTenantAwareModel, Base):
    """User model. Table: app_user. Unique (tenant_id, username) and (tenant_id, email).

    Instantiate one of the subclasses; a bare User has no user_type.
    """

    __tablename__ = "app_user"

    user_type: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    pwd_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    failed_login_attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=EntityStatus.ACTIVE.value
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "username", name="uq_user_tenant_username"),
        UniqueConstraint("tenant_id", "email", name="uq_user_tenant_email"),
    )
    __mapper_args__ = {"polymorphic_on": "user_type"}


class AgentUser(User):
    """Support agent working a tenant's queue."""

    agent_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    domain: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __mapper_args__ = {"polymorphic_identity": UserType.AGENT.value}


class CustomerUser(User):
    """End customer of a tenant."""

    customer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(64), nullable=True)

    __mapper_args__ = {"polymorphic_identity": UserType.CUSTOMER.value}


class GuestUser(User):
    """Anonymous visitor bound to a chat session until expiry_time."""

    session_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    expiry_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __mapper_args__ = {"polymorphic_identity": UserType.GUEST.value}


class SystemUser(User):
    """Operator account used for tenant-wide administration."""

    role: Mapped[str | None] = mapped_column(String(64), nullable=True)

    __mapper_args__ = {"polymorphic_identity": UserType.SYSTEM.value}
