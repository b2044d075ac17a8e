"""Logging configuration for the application.

Every record carries a tenant attribute (the bound tenant id, "system", or
"-") so log lines from concurrent requests can be told apart.
"""

import logging
import sys

from helpdesk.core.config import get_settings
from helpdesk.core.tenant_context import get_identity

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [tenant=%(tenant)s] %(message)s"


class TenantLogFilter(logging.Filter):
    """Attach the acting tenant to each record as record.tenant."""

    def filter(self, record: logging.LogRecord) -> bool:
        identity = get_identity()
        record.tenant = identity.resolved_tenant_id if identity else "-"
        return True


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO.
    Output goes to stdout, with the tenant filter on the handler.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(TenantLogFilter())
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[handler],
    )


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
