"""
Base event model.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .event_types import EventType


class BaseEvent(BaseModel):
    """
    Base class for all events in the system.

    Provides common metadata and structure for events.
    """

    # Event metadata
    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Context
    correlation_id: Optional[str] = None  # For tracing related events

    # Event data
    data: Dict[str, Any]

    # Source metadata
    source: str  # Component that created the event
    version: str = "1.0"

    model_config = ConfigDict(use_enum_values=True)
