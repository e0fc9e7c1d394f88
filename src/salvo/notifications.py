"""In-process event bus used to notify the automated opponent."""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from salvo.engine.events import MatchEvent
from salvo.telemetry import record_match_metric

logger = logging.getLogger(__name__)

EventHandler = Callable[[MatchEvent], None]


class EventPublisher(Protocol):
    def publish(self, event: MatchEvent) -> None:
        ...


class InMemoryEventBus:
    """Delivers events synchronously to every subscriber, in subscription order.

    Publishing is fire-and-forget for the publisher: a handler that raises is
    logged and the remaining handlers still receive the event.
    """

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    def publish(self, event: MatchEvent) -> None:
        event_type = type(event).__name__
        record_match_metric("salvo_events_published_total", 1, {"event": event_type})
        logger.debug("event_published", extra={"event": event_type, "match_id": event.match_id})
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                record_match_metric("salvo_event_handler_failures_total", 1, {"event": event_type})
                logger.exception(
                    "event_handler_failed",
                    extra={"event": event_type, "match_id": event.match_id},
                )
