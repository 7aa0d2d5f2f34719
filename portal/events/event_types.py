"""
Event types of the app lifecycle.
"""

from enum import Enum


class EventType(str, Enum):
    """Specific event types in the system."""

    # App lifecycle
    APP_CREATED = "app.created"
