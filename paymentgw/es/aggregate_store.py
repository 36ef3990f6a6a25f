"""Storage of event-sourced aggregates and middleware around it."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

AggregateStoreMiddleware = Callable[["AggregateStore"], "AggregateStore"]


class AggregateStore(ABC):
    """Loads aggregates from, and saves their pending events to, storage."""

    @abstractmethod
    async def load(self, aggregate: Any) -> None: ...

    @abstractmethod
    async def save(self, aggregate: Any) -> None: ...


def aggregate_store_with_middleware(
    store: AggregateStore, *middlewares: AggregateStoreMiddleware
) -> AggregateStore:
    """Wrap ``store`` so the first middleware is the outermost: A(B(C(store)))."""
    for middleware in reversed(middlewares):
        store = middleware(store)
    return store


class EventPublisher(AggregateStore):
    """Store wrapper that publishes an aggregate's events once they are saved."""

    def __init__(self, store: AggregateStore, publisher: Any) -> None:
        self._store = store
        self._publisher = publisher

    async def load(self, aggregate: Any) -> None:
        await self._store.load(aggregate)

    async def save(self, aggregate: Any) -> None:
        await self._store.save(aggregate)
        await self._publisher.publish(*aggregate.events)


def new_event_publisher(publisher: Any) -> AggregateStoreMiddleware:
    """Middleware that publishes saved events through ``publisher``."""

    def middleware(store: AggregateStore) -> AggregateStore:
        return EventPublisher(store, publisher)

    return middleware