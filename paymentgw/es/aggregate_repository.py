"""Repositories that load and save event-sourced aggregates."""

from __future__ import annotations

from typing import Any

from paymentgw.ddd.entity import set_id, set_name
from paymentgw.es.aggregate_store import AggregateStore
from paymentgw.es.sourced_aggregate import Aggregate
from paymentgw.registry.registry import Registry


def _build(registry: Registry, aggregate_name: str, aggregate_type: type, aggregate_id: str) -> Any:
    v = registry.build(aggregate_name, set_id(aggregate_id), set_name(aggregate_name))
    if not isinstance(v, aggregate_type):
        raise TypeError(f"{type(v).__name__} is not the expected type {aggregate_type.__name__}")
    return v


class AggregateRepository:
    """Builds aggregates from the registry and persists them through a store."""

    def __init__(
        self,
        aggregate_name: str,
        registry: Registry,
        store: AggregateStore,
        aggregate_type: type = Aggregate,
    ) -> None:
        self._aggregate_name = aggregate_name
        self._registry = registry
        self._store = store
        self._aggregate_type = aggregate_type

    async def load(self, aggregate_id: str) -> Any:
        aggregate = _build(self._registry, self._aggregate_name, self._aggregate_type, aggregate_id)
        await self._store.load(aggregate)
        return aggregate

    async def save(self, aggregate: Any) -> None:
        """Apply and store the pending events, then commit them; no-op without changes."""
        if aggregate.version == aggregate.pending_version:
            return
        for event in aggregate.events:
            aggregate.apply_event(event)
        await self._store.save(aggregate)
        aggregate.commit_events()


class FakeAggregateRepository:
    """In-memory repository for tests: keeps saved aggregates by id."""

    def __init__(self, aggregate_name: str, registry: Registry, aggregate_type: type = Aggregate) -> None:
        self._aggregate_name = aggregate_name
        self._registry = registry
        self._aggregate_type = aggregate_type
        self._aggregates: dict[str, Any] = {}

    async def load(self, aggregate_id: str) -> Any:
        if aggregate_id in self._aggregates:
            return self._aggregates[aggregate_id]
        return _build(self._registry, self._aggregate_name, self._aggregate_type, aggregate_id)

    async def save(self, aggregate: Any) -> None:
        self._aggregates[aggregate.id] = aggregate

    def reset(self, *aggregates: Any) -> None:
        self._aggregates = {aggregate.id: aggregate for aggregate in aggregates}