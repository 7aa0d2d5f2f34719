"""
Pushes newly created apps to every active environment.
"""

import logging
from typing import TYPE_CHECKING

from portal.schemas.provisioning import ProvisioningReport
from portal.services.ports import ActiveEnvironmentSource

from ..app_events import AppCreatedEvent
from ..event_bus import EventBus
from ..event_types import EventType

if TYPE_CHECKING:
    from portal.services.app_service import AppService

logger = logging.getLogger("portal.events.creation_listener")


class AppCreationListener:
    """
    On ``AppCreatedEvent``, creates the app in each active environment.

    Environments are handled independently; the resulting report lists the
    ones that failed so they can be retried through the remote-create
    endpoint.
    """

    def __init__(self, app_service: "AppService", env_source: ActiveEnvironmentSource):
        self._app_service = app_service
        self._env_source = env_source

    def register(self, event_bus: EventBus, priority: int = 0):
        return event_bus.subscribe(
            event_type=EventType.APP_CREATED,
            handler=self.on_app_created,
            priority=priority,
        )

    async def on_app_created(self, event: AppCreatedEvent) -> ProvisioningReport:
        app = event.app
        envs = self._env_source.get_active_envs()

        report = await self._app_service.create_app_in_remotes(envs, app, event.operator)

        if report.is_complete:
            logger.info(f"App {app.app_id} created in envs {report.succeeded}")
        else:
            logger.warning(
                f"App {app.app_id} partially provisioned: failed in {report.failed}",
                extra={"app_id": app.app_id, "failed_envs": report.failed},
            )
        return report
