"""Persistence access for lifecycle operations"""

from .app_repository import AppRepository, AppRepositoryImpl
from .unit_of_work import PortalUnitOfWork

__all__ = [
    "AppRepository",
    "AppRepositoryImpl",
    "PortalUnitOfWork",
]
