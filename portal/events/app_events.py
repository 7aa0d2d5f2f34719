"""
App lifecycle events.
"""

from typing import Optional

from portal.schemas.app import AppDTO

from .base_event import BaseEvent
from .event_types import EventType


class AppCreatedEvent(BaseEvent):
    """Event published after an app has been created locally."""

    def __init__(
        self,
        app: AppDTO,
        operator: str,
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            event_type=EventType.APP_CREATED,
            correlation_id=correlation_id,
            data={
                "app": app.model_dump(mode="json"),
                "operator": operator,
            },
            source="app_service"
        )

    @property
    def app(self) -> AppDTO:
        return AppDTO.model_validate(self.data["app"])

    @property
    def operator(self) -> str:
        return self.data["operator"]
