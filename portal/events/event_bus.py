"""
Event Bus implementation for pub/sub event handling.
"""

from typing import Callable, List, Dict, Optional, Any
from collections import defaultdict
import asyncio
import logging
from datetime import datetime, timezone

from portal.services.ports import EventPublisher

from .base_event import BaseEvent
from .event_types import EventType

logger = logging.getLogger("portal.events.event_bus")


class EventHandler:
    """Wrapper for event handler with metadata."""

    def __init__(
        self,
        handler: Callable,
        priority: int = 0,
        event_type: Optional[EventType] = None
    ):
        self.handler = handler
        self.priority = priority
        self.event_type = event_type

    def __repr__(self):
        return f"EventHandler(handler={self.handler.__name__}, priority={self.priority})"


class EventBusStats:
    """Statistics for event bus operations."""

    def __init__(self):
        self.total_published: int = 0
        self.successful_handlers: int = 0
        self.failed_handlers: int = 0
        self.last_event_time: Optional[datetime] = None


class EventBus(EventPublisher):
    """
    In-process event bus for lifecycle side effects.

    Features:
    - Subscribe to a specific event type or to every event
    - Handler priorities (higher runs first)
    - Handler failures are logged and counted, never raised to the publisher
    - Synchronous ordered fan-out (wait_for_handlers=True) or fire-and-forget
    """

    def __init__(self):
        # Subscribers by event type
        self._subscribers: Dict[EventType, List[EventHandler]] = defaultdict(list)

        # Wildcard subscribers (receive all events)
        self._wildcard_subscribers: List[EventHandler] = []

        self._stats = EventBusStats()
        self._background_tasks: set[asyncio.Task] = set()

    def subscribe(
        self,
        event_type: Optional[EventType] = None,
        handler: Optional[Callable] = None,
        priority: int = 0
    ):
        """
        Subscribe to events.

        Args:
            event_type: Event type to subscribe to, None for every event
            handler: Async function to handle events
            priority: Handler priority (higher = executed first)

        Returns:
            Unsubscribe function, or a decorator when no handler is given

        Examples:
            event_bus.subscribe(event_type=EventType.APP_CREATED, handler=on_created)

            @event_bus.subscribe(event_type=EventType.APP_CREATED)
            async def on_created(event):
                pass
        """
        if handler is None:
            def decorator(func: Callable):
                self._add_subscriber(event_type, func, priority)
                return func
            return decorator

        self._add_subscriber(event_type, handler, priority)

        def unsubscribe():
            self.unsubscribe(event_type, handler)
        return unsubscribe

    def _add_subscriber(
        self,
        event_type: Optional[EventType],
        handler: Callable,
        priority: int
    ):
        event_handler = EventHandler(handler=handler, priority=priority, event_type=event_type)

        if event_type:
            handlers = self._subscribers[EventType(event_type)]
        else:
            handlers = self._wildcard_subscribers
        handlers.append(event_handler)
        handlers.sort(key=lambda h: h.priority, reverse=True)

        logger.debug(
            f"Subscribed {handler.__name__} to "
            f"{'type=' + str(event_type) if event_type else 'wildcard'}"
        )

    def unsubscribe(self, event_type: Optional[EventType], handler: Callable):
        """Unsubscribe a handler from events."""
        if event_type:
            key = EventType(event_type)
            self._subscribers[key] = [h for h in self._subscribers[key] if h.handler != handler]
        else:
            self._wildcard_subscribers = [
                h for h in self._wildcard_subscribers if h.handler != handler
            ]

        logger.debug(f"Unsubscribed {handler.__name__}")

    async def publish(
        self,
        event: BaseEvent,
        wait_for_handlers: bool = False
    ) -> Optional[List[Any]]:
        """
        Publish an event to all subscribers.

        Args:
            event: Event to publish
            wait_for_handlers: If True, run handlers one by one in priority
                order before returning

        Returns:
            List of handler results (None for failed handlers) if
            wait_for_handlers=True, else None
        """
        self._stats.total_published += 1
        self._stats.last_event_time = datetime.now(timezone.utc)

        handlers = self._get_handlers_for_event(event)

        if not handlers:
            logger.debug(f"No handlers for event {event.event_type}")
            return [] if wait_for_handlers else None

        logger.debug(f"Publishing event {event.event_type} to {len(handlers)} handlers")

        if wait_for_handlers:
            return await self._execute_handlers_sync(event, handlers)

        task = asyncio.create_task(self._execute_handlers_async(event, handlers))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return None

    def _get_handlers_for_event(self, event: BaseEvent) -> List[EventHandler]:
        handlers = list(self._subscribers.get(EventType(event.event_type), []))
        handlers.extend(self._wildcard_subscribers)
        handlers.sort(key=lambda h: h.priority, reverse=True)
        return handlers

    async def _execute_handlers_sync(
        self,
        event: BaseEvent,
        handlers: List[EventHandler]
    ) -> List[Any]:
        results = []
        for handler in handlers:
            results.append(await self._execute_single_handler(event, handler))
        return results

    async def _execute_handlers_async(
        self,
        event: BaseEvent,
        handlers: List[EventHandler]
    ):
        await asyncio.gather(
            *(self._execute_single_handler(event, handler) for handler in handlers),
            return_exceptions=True,
        )

    async def _execute_single_handler(self, event: BaseEvent, handler: EventHandler):
        try:
            result = await handler.handler(event)
        except Exception as e:
            logger.error(
                f"Error in event handler {handler.handler.__name__} "
                f"for event {event.event_type}: {e}",
                exc_info=True
            )
            self._stats.failed_handlers += 1
            return None

        self._stats.successful_handlers += 1
        return result

    def get_stats(self) -> EventBusStats:
        """Get event bus statistics."""
        return self._stats

    def clear(self):
        """Clear all subscriptions (for testing)."""
        self._subscribers.clear()
        self._wildcard_subscribers.clear()
        logger.debug("Event bus cleared")

