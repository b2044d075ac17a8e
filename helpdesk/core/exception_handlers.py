"""HTTP error responses for the helpdesk API.

Every error leaves the app as {"error", "message", "details"?}. Domain
exceptions carry their own error_code; the status comes from
ERROR_CODE_STATUS, so a missing tenant identity is 401 and a cross-tenant
access is 403 whichever route raised it.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from helpdesk.core.config import get_settings
from helpdesk.domain.exceptions import HelpdeskException

logger = logging.getLogger(__name__)

ERROR_CODE_STATUS: dict[str, int] = {
    "MISSING_TENANT_IDENTITY": 401,
    "TENANT_ISOLATION_VIOLATION": 403,
    "PERMISSION_DENIED": 403,
    "RESOURCE_NOT_FOUND": 404,
    "VALIDATION_ERROR": 400,
    "SERVICE_UNAVAILABLE": 503,
}


def _error_body(error: str, message: Any, details: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": error, "message": message}
    if details is not None:
        body["details"] = details
    return body


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """exc.errors() minus the ctx/input entries, which may not be JSON-serializable."""
    return [
        {k: v for k, v in error.items() if k not in ("ctx", "input")}
        for error in exc.errors()
    ]


def _on_helpdesk_error(request: Request, exc: HelpdeskException) -> JSONResponse:
    status = ERROR_CODE_STATUS.get(exc.error_code, 400)
    if status in (401, 403):
        logger.info("%s %s -> %s %s", request.method, request.url.path, status, exc.error_code)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _on_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=_error_body(
            "VALIDATION_ERROR", "Request validation failed", jsonable_errors(exc)
        ),
    )


def _on_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("HTTP_ERROR", exc.detail),
        headers=getattr(exc, "headers", None),
    )


def _on_unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    """500. The exception text is exposed only with debug enabled."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=500, content=_error_body("INTERNAL_ERROR", message)
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers above on app; call once, right after creating it."""
    app.add_exception_handler(HelpdeskException, _on_helpdesk_error)
    app.add_exception_handler(RequestValidationError, _on_request_validation_error)
    app.add_exception_handler(StarletteHTTPException, _on_http_error)
    app.add_exception_handler(Exception, _on_unhandled_error)
