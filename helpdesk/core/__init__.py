"""Core: config, tenant context, and application bootstrap.

Single place for settings and the ambient tenant identity.
"""

from helpdesk.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
