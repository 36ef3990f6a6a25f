"""Events, commands and replies with their metadata."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, TypeVar

from paymentgw.ddd.entity import Entity

_T = TypeVar("_T", bound="_Envelope")


class Metadata(dict):
    """Free-form key/value data carried alongside a message."""

    def set(self, key: str, value: Any) -> None:
        self[key] = value


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _Envelope(Entity):
    payload: Any = None
    metadata: Metadata = field(default_factory=Metadata)
    occurred_at: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        if not isinstance(self.metadata, Metadata):
            self.metadata = Metadata(self.metadata)

    @classmethod
    def create(cls: type[_T], name: str, payload: Any, *options: Mapping) -> _T:
        """Create with a fresh id; each option's entries are merged into the metadata."""
        msg = cls(id=str(uuid.uuid4()), name=name, payload=payload)
        for option in options:
            if not isinstance(option, Mapping):
                raise TypeError(f"{type(option).__name__} is not a metadata option")
            msg.metadata.update(option)
        return msg


@dataclass
class Event(_Envelope):
    """Something that happened."""

    @property
    def event_name(self) -> str:
        return self.name


@dataclass
class Command(_Envelope):
    """A request for something to be done."""

    @property
    def command_name(self) -> str:
        return self.name


@dataclass
class Reply(_Envelope):
    """An answer to a command."""

    @property
    def reply_name(self) -> str:
        return self.name


def new_event(name: str, payload: Any, *options: Mapping) -> Event:
    return Event.create(name, payload, *options)


def new_command(name: str, payload: Any, *options: Mapping) -> Command:
    return Command.create(name, payload, *options)


def new_reply(name: str, payload: Any, *options: Mapping) -> Reply:
    return Reply.create(name, payload, *options)