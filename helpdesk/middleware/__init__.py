"""HTTP middleware. Import and use from helpdesk.main."""

from helpdesk.middleware.tenant_context import TenantContextMiddleware

__all__ = ["TenantContextMiddleware"]
