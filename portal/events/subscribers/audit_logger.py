"""
Audit logger subscriber that logs lifecycle events.
"""

from typing import Any, Dict, List

import structlog

from ..base_event import BaseEvent
from ..event_bus import EventBus

logger = structlog.get_logger(__name__)


class LifecycleAuditLogger:
    """
    Logs every lifecycle event with its context.

    Subscribed with high priority so the record exists even when a later
    handler fails.
    """

    def __init__(self, event_bus: EventBus, max_entries: int = 1000):
        self._audit_log: List[Dict[str, Any]] = []
        self._max_entries = max_entries
        event_bus.subscribe(handler=self._log_event, priority=100)
        logger.info("LifecycleAuditLogger initialized and subscribed to events")

    async def _log_event(self, event: BaseEvent):
        app = event.data.get("app") or {}
        log_entry = {
            "timestamp": event.timestamp.isoformat(),
            "event_type": event.event_type,
            "event_id": event.event_id,
            "correlation_id": event.correlation_id,
            "app_id": app.get("app_id"),
            "operator": event.data.get("operator"),
        }

        self._audit_log.append(log_entry)
        if len(self._audit_log) > self._max_entries:
            self._audit_log.pop(0)

        logger.info(
            str(event.event_type),
            app_id=log_entry["app_id"],
            operator=log_entry["operator"],
            correlation_id=event.correlation_id,
            event_id=event.event_id,
        )

    def get_audit_log(self) -> List[Dict[str, Any]]:
        return list(self._audit_log)
