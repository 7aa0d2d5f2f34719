"""Database models"""

from portal.models.app import App
from portal.models.audit_log import AuditDataInfluence, AuditLog
from portal.models.database import (
    Base,
    close_db,
    get_session_maker,
    init_database,
    init_db,
)
from portal.models.favorite import Favorite
from portal.models.namespace import AppNamespace
from portal.models.role import Permission, Role, RolePermission, UserRole
from portal.models.user import User

__all__ = [
    "Base",
    "get_session_maker",
    "init_database",
    "init_db",
    "close_db",
    "App",
    "AppNamespace",
    "AuditLog",
    "AuditDataInfluence",
    "Favorite",
    "Permission",
    "Role",
    "RolePermission",
    "UserRole",
    "User",
]
