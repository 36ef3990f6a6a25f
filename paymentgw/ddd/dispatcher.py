"""In-process dispatch of domain events to subscribed handlers."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

EventHandler = Callable[[Any], Awaitable[None]]


@dataclass(frozen=True)
class _Subscription:
    handler: EventHandler
    filters: Optional[frozenset[str]]

    def accepts(self, event: Any) -> bool:
        return self.filters is None or event.name in self.filters


class EventDispatcher:
    """Passes published events to every handler subscribed to their name."""

    def __init__(self) -> None:
        self._subscriptions: list[_Subscription] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: EventHandler, *events: str) -> None:
        """Subscribe ``handler`` to the named events, or to all events if none are named."""
        filters = frozenset(events) if events else None
        with self._lock:
            self._subscriptions.append(_Subscription(handler, filters))

    async def publish(self, *events: Any) -> None:
        """Hand each event to its handlers in order; the first failure stops dispatch."""
        with self._lock:
            subscriptions = list(self._subscriptions)
        for event in events:
            for subscription in subscriptions:
                if subscription.accepts(event):
                    await subscription.handler(event)