from __future__ import annotations

from collections import defaultdict
import logging
from typing import Any, Callable, TypeVar

from .types import Event

logger = logging.getLogger(__name__)

E = TypeVar("E")
Handler = Callable[[Any], None]


class EventBus:
    """Dispatches events to the handlers subscribed for their type.

    Handlers run synchronously in subscription order. An exception raised by
    a handler stops the dispatch and reaches the publisher.
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> None:
        self._handlers[event_type].append(handler)

    def publish(self, event: Event) -> None:
        handlers = self._handlers.get(type(event), [])
        if not handlers:
            logger.warning("No handlers for event", extra={"event": event.name})
            return
        logger.info("Publishing event", extra={"event": event.name})
        for handler in handlers:
            handler(event)
