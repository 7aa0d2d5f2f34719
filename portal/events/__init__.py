"""
Lifecycle events and the in-process event bus.
"""

from .app_events import AppCreatedEvent
from .base_event import BaseEvent
from .event_bus import EventBus
from .event_types import EventType

__all__ = [
    "AppCreatedEvent",
    "BaseEvent",
    "EventBus",
    "EventType",
]
