"""Event subscribers"""

from .audit_logger import LifecycleAuditLogger
from .creation_listener import AppCreationListener

__all__ = [
    "AppCreationListener",
    "LifecycleAuditLogger",
]
