"""
Service container.

Builds the lifecycle service with its collaborators and registers the event
subscribers. One container per process; tests build their own.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import Settings
from portal.events.event_bus import EventBus
from portal.events.subscribers import AppCreationListener, LifecycleAuditLogger
from portal.services.admin_service_api import AdminServiceAPI
from portal.services.app_service import AppService, AppServiceContext
from portal.services.audit_service import audit_service
from portal.services.favorite_service import favorite_service
from portal.services.namespace_service import app_namespace_service
from portal.services.portal_settings import PortalSettings
from portal.services.ports import RemoteEnvClient
from portal.services.role_initialization_service import role_initialization_service
from portal.services.role_permission_service import role_permission_service
from portal.services.user_service import user_service

logger = logging.getLogger("portal.core.container")


class PortalContainer:
    """
    Wires the lifecycle service.

    Args:
        settings: Application settings
        session_factory: Factory for database sessions
        event_bus: Bus for lifecycle events; a fresh one if omitted
        admin_api: Admin service client; built from settings if omitted
    """

    def __init__(
        self,
        settings: Settings,
        session_factory: Callable[[], AsyncSession],
        event_bus: Optional[EventBus] = None,
        admin_api: Optional[RemoteEnvClient] = None,
    ):
        self.settings = settings
        self.event_bus = event_bus or EventBus()
        self.admin_api = admin_api or AdminServiceAPI(
            base_urls=settings.admin_service_urls,
            internal_api_key=settings.internal_api_key,
            timeout=settings.remote_call_timeout,
        )
        self.portal_settings = PortalSettings(
            envs=settings.active_envs,
            admin_api=self.admin_api,
            down_threshold=settings.env_down_threshold,
        )
        self.app_service = AppService(
            AppServiceContext(
                session_factory=session_factory,
                identity_resolver=user_service,
                admin_api=self.admin_api,
                namespace_provisioner=app_namespace_service,
                role_provisioner=role_initialization_service,
                permission_assigner=role_permission_service,
                favorite_store=favorite_service,
                audit_recorder=audit_service,
                event_publisher=self.event_bus,
                env_source=self.portal_settings,
                remote_call_timeout=settings.remote_call_timeout,
            )
        )

        self.audit_logger = LifecycleAuditLogger(self.event_bus)
        self.creation_listener = AppCreationListener(self.app_service, self.portal_settings)
        self.creation_listener.register(self.event_bus)

        logger.info(f"PortalContainer initialized (envs={self.portal_settings.all_envs})")

    async def start(self):
        if self.settings.env_health_check_enabled:
            self.portal_settings.start_health_check(self.settings.env_health_check_interval)

    async def stop(self):
        await self.portal_settings.stop_health_check()


_container: Optional[PortalContainer] = None


def set_container(container: Optional[PortalContainer]):
    global _container
    _container = container


def get_container() -> PortalContainer:
    """
    Process wide container.

    Raises:
        RuntimeError: If the application has not started
    """
    if _container is None:
        raise RuntimeError("PortalContainer not initialized")
    return _container
