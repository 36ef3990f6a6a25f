"""Aggregates that collect the events they raise."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from paymentgw.ddd.entity import Entity
from paymentgw.ddd.message_types import Event, Metadata

AGGREGATE_NAME_KEY = "aggregate-name"
AGGREGATE_ID_KEY = "aggregate-id"
AGGREGATE_VERSION_KEY = "aggregate-version"


class AggregateEvent(Event):
    """An event raised by an aggregate, identified through its metadata."""

    @property
    def aggregate_name(self) -> str:
        return self.metadata[AGGREGATE_NAME_KEY]

    @property
    def aggregate_id(self) -> str:
        return self.metadata[AGGREGATE_ID_KEY]

    @property
    def aggregate_version(self) -> int:
        return self.metadata[AGGREGATE_VERSION_KEY]


@dataclass(eq=False)
class Aggregate(Entity):
    """An entity that records the events raised against it."""

    events: list = field(default_factory=list)

    @property
    def aggregate_name(self) -> str:
        return self.name

    def add_event(self, name: str, payload: Any, *options: Mapping) -> None:
        identity = Metadata({AGGREGATE_NAME_KEY: self.name, AGGREGATE_ID_KEY: self.id})
        self.events.append(AggregateEvent.create(name, payload, *options, identity))

    def clear_events(self) -> None:
        self.events = []


def set_events(*events: Event) -> Callable[[Any], None]:
    """Build option that replaces the pending events of an aggregate."""

    def option(v: Any) -> None:
        if not isinstance(v, Aggregate):
            raise TypeError(f"{type(v).__name__} does not hold aggregate events")
        v.events = list(events)

    return option