"""In-process publish/subscribe bus shared by the domain modules."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict[str, Any]], Awaitable[None]]

PAYMENT_SUCCEEDED = "payment.succeeded"


class EventBus:
    """Dispatches named events to the coroutines subscribed to them.

    Handlers run in subscription order. A failing handler is logged and does
    not stop the remaining handlers or reach the publisher.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event: str, handler: EventHandler) -> None:
        self._handlers[event].append(handler)
        logger.debug("Subscribed %s to %s", getattr(handler, "__qualname__", handler), event)

    def subscribers(self, event: str) -> list[EventHandler]:
        return list(self._handlers.get(event, ()))

    async def publish(self, event: str, payload: dict[str, Any]) -> int:
        """Deliver ``payload`` to every handler; returns how many succeeded."""
        delivered = 0
        for handler in self.subscribers(event):
            try:
                await handler(payload)
            except Exception:  # pylint: disable=broad-except
                logger.exception("Handler for event %s failed", event)
                continue
            delivered += 1
        if not delivered:
            logger.debug("Event %s had no successful handlers", event)
        return delivered


__all__ = ["EventBus", "EventHandler", "PAYMENT_SUCCEEDED"]
