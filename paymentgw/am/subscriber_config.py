"""Options that shape how a subscription receives and acknowledges messages."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta
from enum import IntEnum
from typing import Any, Iterable

DEFAULT_ACK_WAIT = timedelta(seconds=30)
DEFAULT_MAX_REDELIVER = 5


class AckType(IntEnum):
    """Whether messages are acknowledged automatically or by the handler's outcome."""

    AUTO = 0
    MANUAL = 1

    def _configure(self, cfg: "SubscriberConfig") -> "SubscriberConfig":
        return replace(cfg, ack_type=self)


@dataclass(frozen=True)
class SubscriberConfig:
    """The settings a subscription is made with."""

    message_filters: tuple[str, ...] = ()
    group_name: str = ""
    ack_type: AckType = AckType.MANUAL
    ack_wait: timedelta = DEFAULT_ACK_WAIT
    max_redeliver: int = DEFAULT_MAX_REDELIVER


class MessageFilter(tuple):
    """Only messages with one of these names reach the handler."""

    def _configure(self, cfg: SubscriberConfig) -> SubscriberConfig:
        return replace(cfg, message_filters=tuple(str(name) for name in self))


class GroupName(str):
    """Share the subscription's messages among the members of a named group."""

    def _configure(self, cfg: SubscriberConfig) -> SubscriberConfig:
        return replace(cfg, group_name=str(self))


class AckWait(timedelta):
    """How long a handler has before an unacknowledged message is redelivered."""

    def _configure(self, cfg: SubscriberConfig) -> SubscriberConfig:
        wait = timedelta(days=self.days, seconds=self.seconds, microseconds=self.microseconds)
        return replace(cfg, ack_wait=wait)


class MaxRedeliver(int):
    """How many times a message may be delivered."""

    def _configure(self, cfg: SubscriberConfig) -> SubscriberConfig:
        return replace(cfg, max_redeliver=int(self))


def new_subscriber_config(options: Iterable[Any]) -> SubscriberConfig:
    """Start from the defaults and apply each option in turn; later options win."""
    cfg = SubscriberConfig()
    for option in options or ():
        configure = getattr(option, "_configure", None)
        if configure is None:
            raise TypeError(f"{type(option).__name__} is not a subscriber option")
        cfg = configure(cfg)
    return cfg