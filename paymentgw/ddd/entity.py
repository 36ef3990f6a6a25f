"""Identified, named domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable


@dataclass(eq=False)
class Entity:
    """Something with an identity and a name."""

    id: str
    name: str

    def equals(self, other: Any) -> bool:
        return self.id == other.id


def set_id(entity_id: str) -> Callable[[Any], None]:
    """Build option that sets the id of the built value."""

    def option(v: Any) -> None:
        if not hasattr(v, "id"):
            raise TypeError(f"{type(v).__name__} does not have an id to set")
        v.id = entity_id

    return option


def set_name(name: str) -> Callable[[Any], None]:
    """Build option that sets the name of the built value."""

    def option(v: Any) -> None:
        if not hasattr(v, "name"):
            raise TypeError(f"{type(v).__name__} does not have a name to set")
        v.name = name

    return option