# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-memory event bus for admissions lifecycle events.

The admissions workflow publishes one event per lifecycle transition;
the notifier subscribes and fans each event out to guardians. Events are
matched on exact names ("admissions.lead.created") or wildcard patterns
("admissions.decision.*").

Example:
    from src.infrastructure.events import get_event_bus, EventTypes

    bus = get_event_bus()
    bus.subscribe(EventTypes.Admissions.LEAD_CREATED, on_lead_created)
    bus.subscribe("admissions.decision.*", on_any_decision)

    await bus.publish(
        EventTypes.Admissions.LEAD_CREATED,
        {"lead_id": "L-1", "student_name": "Layla"},
    )
"""

import asyncio
import fnmatch
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable
from uuid import uuid4

from src.utils.datetime import format_iso, utc_now

logger = logging.getLogger(__name__)

EventHandler = Callable[["EventData"], Awaitable[None]]


def _is_pattern(event_type: str) -> bool:
    return "*" in event_type or "?" in event_type


@dataclass
class EventData:
    """Published event with metadata.

    Attributes:
        event_type: Event name.
        payload: Event payload.
        event_id: Unique event identifier.
        timestamp: When the event was published.
    """

    event_type: str
    payload: dict[str, Any]
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "payload": self.payload,
            "timestamp": format_iso(self.timestamp),
        }


class EventBus:
    """Async publish/subscribe with wildcard matching.

    Handlers for one event run concurrently. A failing handler is logged
    and never affects the publisher or the other handlers. Intended for a
    single event loop; cross-process delivery is out of its reach.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._pattern_handlers: dict[str, list[EventHandler]] = {}
        self._event_count = 0

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Subscribe a handler to an event name or pattern.

        Args:
            event_type: Event name, or a pattern containing * or ?.
            handler: Async callable receiving the EventData.
        """
        table = self._pattern_handlers if _is_pattern(event_type) else self._handlers
        table.setdefault(event_type, []).append(handler)
        logger.debug("Subscribed handler to: %s", event_type)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> bool:
        """Remove a handler.

        Args:
            event_type: Name or pattern the handler was subscribed with.
            handler: Handler to remove.

        Returns:
            True if the handler was found and removed.
        """
        table = self._pattern_handlers if _is_pattern(event_type) else self._handlers
        handlers = table.get(event_type)
        if not handlers or handler not in handlers:
            return False
        handlers.remove(handler)
        if not handlers:
            del table[event_type]
        return True

    def handlers_for(self, event_type: str) -> list[EventHandler]:
        """Collect the handlers an event would be delivered to."""
        matched = list(self._handlers.get(event_type, []))
        for pattern, handlers in self._pattern_handlers.items():
            if fnmatch.fnmatch(event_type, pattern):
                matched.extend(handlers)
        return matched

    async def publish(self, event_type: str, payload: dict[str, Any]) -> EventData:
        """Publish an event to every matching subscriber.

        Args:
            event_type: Event name.
            payload: Event payload.

        Returns:
            The published EventData.
        """
        event = EventData(event_type=event_type, payload=payload)
        self._event_count += 1

        handlers = self.handlers_for(event_type)
        if not handlers:
            logger.debug("No handlers for event: %s", event_type)
            return event

        logger.debug("Publishing event %s to %d handlers", event_type, len(handlers))

        async def safe_call(handler: EventHandler) -> None:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    "Handler error for event %s: %s",
                    event_type,
                    str(e),
                    exc_info=True,
                )

        await asyncio.gather(*[safe_call(handler) for handler in handlers])
        return event

    def clear(self) -> None:
        """Remove all subscriptions."""
        self._handlers.clear()
        self._pattern_handlers.clear()

    def get_stats(self) -> dict[str, Any]:
        """Subscription and publish counters."""
        return {
            "event_types": sorted(self._handlers),
            "patterns": sorted(self._pattern_handlers),
            "total_handlers": sum(len(h) for h in self._handlers.values())
            + sum(len(h) for h in self._pattern_handlers.values()),
            "events_published": self._event_count,
        }


_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the process-wide event bus."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Drop the process-wide event bus. Used by tests."""
    global _event_bus
    if _event_bus is not None:
        _event_bus.clear()
    _event_bus = None
