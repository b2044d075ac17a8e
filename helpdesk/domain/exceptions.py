"""Domain exceptions for the helpdesk platform.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class HelpdeskException(Exception):
    """Base exception for all helpdesk application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the HTTP exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(HelpdeskException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthorizationException(HelpdeskException):
    """Raised when the caller lacks required permissions for the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'tenant', 'user').
            action: Optional action that was attempted (e.g. 'create', 'read').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(HelpdeskException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'tenant', 'user').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class MissingTenantIdentityException(HelpdeskException):
    """Raised when tenant-scoped work runs with no tenant and no system mode bound.

    Signals that the boundary (middleware, job runner) never established the
    tenant context. Not retryable; the unit of work must abort.
    """

    def __init__(
        self, message: str = "No tenant ID found in current context"
    ) -> None:
        super().__init__(message, "MISSING_TENANT_IDENTITY")


class TenantIsolationViolationException(HelpdeskException):
    """Raised when a write or delete targets an entity owned by another tenant.

    The message and details never include the target id or the owning tenant,
    so the HTTP response does not reveal whether the entity exists.
    """

    def __init__(self, operation: str, resource_type: str | None = None) -> None:
        """Initialize with the rejected operation.

        Args:
            operation: Operation that was attempted (e.g. 'save', 'delete').
            resource_type: Optional entity type (e.g. 'user').
        """
        details: dict[str, Any] = {"operation": operation}
        if resource_type:
            details["resource_type"] = resource_type
        super().__init__(
            f"Cannot {operation} entity belonging to another tenant",
            "TENANT_ISOLATION_VIOLATION",
            details,
        )


class SqlNotConfiguredException(HelpdeskException):
    """Raised when an operation requires the database but no URL is configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
