"""Messages, publishers, subscribers and middleware chains around them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, TypeVar

from paymentgw.ddd.message_types import Metadata

_T = TypeVar("_T")

MessageHandler = Callable[[Any], Awaitable[None]]
MessageHandlerMiddleware = Callable[[MessageHandler], MessageHandler]
MessagePublisherMiddleware = Callable[[Any], Any]
MessageStreamMiddleware = Callable[[Any], Any]


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Message:
    """A named payload addressed to a subject."""

    id: str
    name: str
    subject: str
    data: bytes
    metadata: Metadata = field(default_factory=Metadata)
    sent_at: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        if not isinstance(self.metadata, Metadata):
            self.metadata = Metadata(self.metadata)

    @property
    def message_name(self) -> str:
        return self.name


def _apply_middleware(target: _T, *middlewares: Callable[[_T], _T]) -> _T:
    for middleware in reversed(middlewares):
        target = middleware(target)
    return target


def message_stream_with_middleware(stream: Any, *middlewares: MessageStreamMiddleware) -> Any:
    """Wrap a stream so the first middleware is the outermost: A(B(C(stream)))."""
    return _apply_middleware(stream, *middlewares)


def message_publisher_with_middleware(publisher: Any, *middlewares: MessagePublisherMiddleware) -> Any:
    """Wrap a publisher so the first middleware is the outermost: A(B(C(publisher)))."""
    return _apply_middleware(publisher, *middlewares)


def message_handler_with_middleware(handler: MessageHandler, *middlewares: MessageHandlerMiddleware) -> MessageHandler:
    """Wrap a handler so the first middleware is the outermost: A(B(C(handler)))."""
    return _apply_middleware(handler, *middlewares)


class PublisherFunc:
    """Turns an async ``fn(topic_name, msg)`` into a publisher."""

    def __init__(self, fn: Callable[[str, Any], Awaitable[None]]) -> None:
        self._fn = fn

    async def publish(self, topic_name: str, msg: Any) -> None:
        await self._fn(topic_name, msg)


class MessagePublisher:
    """A publisher with a middleware chain applied around it."""

    def __init__(self, publisher: Any, *middlewares: MessagePublisherMiddleware) -> None:
        self._publisher = message_publisher_with_middleware(publisher, *middlewares)

    async def publish(self, topic_name: str, msg: Any) -> None:
        await self._publisher.publish(topic_name, msg)


class MessageSubscriber:
    """A subscriber that wraps every handler it is given in a middleware chain."""

    def __init__(self, subscriber: Any, *middlewares: MessageHandlerMiddleware) -> None:
        self._subscriber = subscriber
        self._middlewares = middlewares

    def subscribe(self, topic_name: str, handler: MessageHandler, *options: Any) -> Any:
        wrapped = message_handler_with_middleware(handler, *self._middlewares)
        return self._subscriber.subscribe(topic_name, wrapped, *options)

    def unsubscribe(self) -> None:
        self._subscriber.unsubscribe()