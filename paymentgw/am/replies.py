"""Replies to commands carried as messages."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from paymentgw.am.events import _decode_message_data, _encode_message_data, _ReceivedEnvelope
from paymentgw.am.message import (
    Message,
    MessageHandler,
    MessageHandlerMiddleware,
    MessagePublisherMiddleware,
    message_handler_with_middleware,
    message_publisher_with_middleware,
)
from paymentgw.registry.registry import Registry

FAILURE_REPLY = "am.Failure"
SUCCESS_REPLY = "am.Success"

OUTCOME_SUCCESS = "SUCCESS"
OUTCOME_FAILURE = "FAILURE"

REPLY_HDR_PREFIX = "REPLY_"
REPLY_NAME_HDR = REPLY_HDR_PREFIX + "NAME"
REPLY_OUTCOME_HDR = REPLY_HDR_PREFIX + "OUTCOME"

_BARE_REPLIES = frozenset({SUCCESS_REPLY, FAILURE_REPLY})


@dataclass
class ReplyMessage(_ReceivedEnvelope):
    """A reply received from a message stream."""

    @property
    def reply_name(self) -> str:
        return self.name

    def ack(self) -> None:
        """Acknowledge the underlying message."""
        self.msg.ack()

    def nack(self) -> None:
        """Reject the underlying message so it is redelivered."""
        self.msg.nack()

    def extend(self) -> None:
        """Ask for more time to handle the underlying message."""
        self.msg.extend()

    def kill(self) -> None:
        """Stop redelivery of the underlying message."""
        self.msg.kill()


class ReplyPublisher:
    """Serializes replies and publishes them as messages."""

    def __init__(self, reg: Registry, msg_publisher: Any, *middlewares: MessagePublisherMiddleware) -> None:
        self._registry = reg
        self._publisher = message_publisher_with_middleware(msg_publisher, *middlewares)

    async def publish(self, topic_name: str, reply: Any) -> None:
        """Publish ``reply``; the plain success and failure replies carry no payload."""
        payload = None
        if reply.reply_name not in _BARE_REPLIES:
            payload = self._registry.serialize(reply.reply_name, reply.payload)
        data = _encode_message_data(payload, reply.occurred_at)
        await self._publisher.publish(
            topic_name,
            Message(
                id=reply.id,
                name=reply.reply_name,
                subject=topic_name,
                data=data,
                metadata=reply.metadata,
                sent_at=datetime.now(timezone.utc),
            ),
        )


def new_reply_handler(
    reg: Registry,
    handler: Callable[[ReplyMessage], Awaitable[None]],
    *middlewares: MessageHandlerMiddleware,
) -> MessageHandler:
    """Message handler that decodes replies and passes them to ``handler``."""

    async def handle_message(msg: Any) -> None:
        payload_data, occurred_at = _decode_message_data(msg.data)
        reply_name = msg.message_name
        payload = None
        if reply_name not in _BARE_REPLIES:
            payload = reg.deserialize(reply_name, payload_data)
        await handler(
            ReplyMessage(
                id=msg.id,
                name=reply_name,
                payload=payload,
                occurred_at=occurred_at,
                msg=msg,
            )
        )

    return message_handler_with_middleware(handle_message, *middlewares)