"""Actor context management using contextvars.

Records which user (or component) is performing the current unit of work so
that audited models can stamp created_by / updated_by. Bound by
tenant_unit_of_work(identity, actor_id): the HTTP middleware passes the
X-Actor-ID header, jobs pass the actor given to bind_tenant. Cleared with the
tenant context at the end of every unit of work; absent actors are recorded
as "system".

Usage:
    set_current_actor("agent-42")
    actor_id = get_current_actor_id()
"""

from contextvars import ContextVar

SYSTEM_ACTOR_ID = "system"

_current_actor_id: ContextVar[str | None] = ContextVar("current_actor_id", default=None)


def set_current_actor(actor_id: str | None) -> None:
    """Set the acting user for this request or job. Context is scoped to the current task."""
    _current_actor_id.set(actor_id)


def clear_current_actor() -> None:
    """Clear the current actor."""
    _current_actor_id.set(None)


def get_current_actor_id() -> str:
    """Return the acting user id, or SYSTEM_ACTOR_ID if none is set."""
    return _current_actor_id.get() or SYSTEM_ACTOR_ID
