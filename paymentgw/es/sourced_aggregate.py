"""Event-sourced aggregates that track a version."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable

from paymentgw.ddd.aggregate import AGGREGATE_VERSION_KEY
from paymentgw.ddd.aggregate import Aggregate as DomainAggregate
from paymentgw.ddd.message_types import Metadata


@dataclass(eq=False)
class Aggregate(DomainAggregate):
    """An aggregate whose state is rebuilt from its events.

    Subclasses provide ``apply_event(event)`` and, when snapshots are used,
    ``apply_snapshot(snapshot)`` and ``to_snapshot()``.
    """

    version: int = 0

    @property
    def pending_version(self) -> int:
        return self.version + len(self.events)

    def add_event(self, name: str, payload: Any, *options: Mapping) -> None:
        versioned = Metadata({AGGREGATE_VERSION_KEY: self.pending_version + 1})
        super().add_event(name, payload, *options, versioned)

    def commit_events(self) -> None:
        self.version += len(self.events)
        self.clear_events()


def set_version(version: int) -> Callable[[Any], None]:
    """Build option that sets the version of the built aggregate."""

    def option(v: Any) -> None:
        if not hasattr(v, "version"):
            raise TypeError(f"{type(v).__name__} does not have a version to set")
        v.version = version

    return option


def load_event(v: Any, event: Any) -> None:
    """Apply a stored event to an aggregate and move it to the event's version."""
    if not callable(getattr(v, "apply_event", None)) or not hasattr(v, "version"):
        raise TypeError(f"{type(v).__name__} does not have the methods implemented to load events")
    v.apply_event(event)
    v.version = event.aggregate_version


def load_snapshot(v: Any, snapshot: Any, version: int) -> None:
    """Restore an aggregate from a snapshot taken at ``version``."""
    if not callable(getattr(v, "apply_snapshot", None)) or not hasattr(v, "version"):
        raise TypeError(f"{type(v).__name__} does not have the methods implemented to load snapshots")
    v.apply_snapshot(snapshot)
    v.version = version