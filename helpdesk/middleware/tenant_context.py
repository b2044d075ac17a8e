"""Tenant context middleware.

Resolves the acting identity from X-Tenant-ID and X-System-Key, and the
acting user from X-Actor-ID, then runs the request inside
tenant_unit_of_work, so both are bound for the route and cleared on every
exit path. A request with neither identity header runs unbound;
tenant-scoped routes then fail with MissingTenantIdentityException. A
request without X-Actor-ID is audited as the system actor.
Uses raw ASGI (no BaseHTTPMiddleware) so the route runs in this task's context.
"""

import hmac
from typing import Callable

from starlette.responses import JSONResponse

from helpdesk.core.config import get_settings
from helpdesk.core.tenant_context import TenantIdentity, tenant_unit_of_work
from helpdesk.core.tenant_validation import (
    is_valid_actor_id_format,
    is_valid_tenant_id_format,
)
from helpdesk.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def _get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("utf-8", errors="replace")
    return None


def _is_system_key(presented: str | None) -> bool:
    """Return True if presented matches the configured system key (constant time)."""
    expected = get_settings().system_api_key.get_secret_value()
    if not expected or not presented:
        return False
    return hmac.compare_digest(presented.encode(), expected.encode())


def _invalid_header_response(header_name: str) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "error": "VALIDATION_ERROR",
            "message": f"Invalid {header_name} header",
            "details": {"field": header_name},
        },
    )


def TenantContextMiddleware(app: Callable) -> Callable:
    """Bind the request's tenant identity and actor for the duration of the request. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        settings = get_settings()
        raw_tenant = _get_header(scope, settings.tenant_header_name)
        tenant_id = raw_tenant.strip() if raw_tenant else None
        if tenant_id is not None and not is_valid_tenant_id_format(tenant_id):
            logger.info("Rejected request with malformed %s", settings.tenant_header_name)
            response = _invalid_header_response(settings.tenant_header_name)
            await response(scope, receive, send)
            return

        raw_actor = _get_header(scope, settings.actor_header_name)
        actor_id = raw_actor.strip() if raw_actor else None
        if actor_id is not None and not is_valid_actor_id_format(actor_id):
            logger.info("Rejected request with malformed %s", settings.actor_header_name)
            response = _invalid_header_response(settings.actor_header_name)
            await response(scope, receive, send)
            return

        identity: TenantIdentity | None = None
        system_key = _get_header(scope, settings.system_key_header_name)
        if _is_system_key(system_key):
            identity = TenantIdentity.system(tenant_id)
        else:
            if system_key:
                logger.warning("Ignored invalid %s header", settings.system_key_header_name)
            if tenant_id:
                identity = TenantIdentity.for_tenant(tenant_id)

        with tenant_unit_of_work(identity, actor_id):
            await app(scope, receive, send)

    return asgi_app
