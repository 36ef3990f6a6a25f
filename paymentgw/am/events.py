"""Domain events carried as messages, and a recording publisher for tests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Optional

from google.protobuf.timestamp_pb2 import Timestamp

from paymentgw.am.message import (
    Message,
    MessageHandler,
    MessageHandlerMiddleware,
    MessagePublisherMiddleware,
    message_handler_with_middleware,
    message_publisher_with_middleware,
)
from paymentgw.registry.registry import Registry

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_PAYLOAD_FIELD = 1
_OCCURRED_AT_FIELD = 2
_WIRE_VARINT = 0
_WIRE_FIXED64 = 1
_WIRE_LENGTH = 2
_WIRE_FIXED32 = 5


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _varint(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _read_varint(data: bytes, pos: int) -> tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if pos >= len(data):
            raise ValueError("truncated message data")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, pos
        shift += 7
        if shift >= 64:
            raise ValueError("malformed varint in message data")


def _length_delimited(field_number: int, chunk: bytes) -> bytes:
    return _varint(field_number << 3 | _WIRE_LENGTH) + _varint(len(chunk)) + chunk


def _to_timestamp(moment: datetime) -> Timestamp:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    delta = moment - _EPOCH
    return Timestamp(seconds=delta.days * 86400 + delta.seconds, nanos=delta.microseconds * 1000)


def _from_timestamp(ts: Timestamp) -> datetime:
    return _EPOCH + timedelta(seconds=ts.seconds, microseconds=ts.nanos // 1000)


def _encode_message_data(payload: Optional[bytes], occurred_at: datetime) -> bytes:
    """Encode a payload and its time of occurrence as a protobuf envelope."""
    out = b""
    if payload:
        out += _length_delimited(_PAYLOAD_FIELD, bytes(payload))
    out += _length_delimited(_OCCURRED_AT_FIELD, _to_timestamp(occurred_at).SerializeToString())
    return out


def _decode_message_data(data: bytes) -> tuple[bytes, datetime]:
    """Decode an envelope written by ``_encode_message_data``."""
    data = bytes(data or b"")
    payload = b""
    occurred_at = Timestamp()
    pos = 0
    while pos < len(data):
        tag, pos = _read_varint(data, pos)
        field_number, wire_type = tag >> 3, tag & 0x07
        if wire_type == _WIRE_LENGTH:
            length, pos = _read_varint(data, pos)
            end = pos + length
            if end > len(data):
                raise ValueError("truncated message data")
            chunk = data[pos:end]
            pos = end
            if field_number == _PAYLOAD_FIELD:
                payload = chunk
            elif field_number == _OCCURRED_AT_FIELD:
                occurred_at.MergeFromString(chunk)
        elif wire_type == _WIRE_VARINT:
            _, pos = _read_varint(data, pos)
        elif wire_type == _WIRE_FIXED64:
            pos += 8
        elif wire_type == _WIRE_FIXED32:
            pos += 4
        else:
            raise ValueError(f"unsupported wire type {wire_type} in message data")
        if pos > len(data):
            raise ValueError("truncated message data")
    return payload, _from_timestamp(occurred_at)


@dataclass
class _ReceivedEnvelope:
    """A decoded payload tied to the incoming message it arrived in."""

    id: str
    name: str
    payload: Any
    occurred_at: datetime
    msg: Any

    @property
    def metadata(self) -> Any:
        return self.msg.metadata

    @property
    def subject(self) -> str:
        return self.msg.subject

    @property
    def message_name(self) -> str:
        return self.msg.message_name

    @property
    def sent_at(self) -> datetime:
        return self.msg.sent_at

    @property
    def received_at(self) -> datetime:
        return self.msg.received_at

    def ack(self) -> None:
        self.msg.ack()

    def nack(self) -> None:
        self.msg.nack()

    def extend(self) -> None:
        self.msg.extend()

    def kill(self) -> None:
        self.msg.kill()


@dataclass
class EventMessage(_ReceivedEnvelope):
    """An event received from a message stream."""

    @property
    def event_name(self) -> str:
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


class EventPublisher:
    """Serializes events and publishes them as messages."""

    def __init__(self, reg: Registry, msg_publisher: Any, *middlewares: MessagePublisherMiddleware) -> None:
        self._registry = reg
        self._publisher = message_publisher_with_middleware(msg_publisher, *middlewares)

    async def publish(self, topic_name: str, event: Any) -> None:
        payload = self._registry.serialize(event.event_name, event.payload)
        data = _encode_message_data(payload, event.occurred_at)
        await self._publisher.publish(
            topic_name,
            Message(
                id=event.id,
                name=event.event_name,
                subject=topic_name,
                data=data,
                metadata=event.metadata,
                sent_at=_now(),
            ),
        )


def new_event_handler(
    reg: Registry,
    handler: Callable[[EventMessage], Awaitable[None]],
    *middlewares: MessageHandlerMiddleware,
) -> MessageHandler:
    """Message handler that decodes events and passes them to ``handler``."""

    async def handle_message(msg: Any) -> None:
        payload_data, occurred_at = _decode_message_data(msg.data)
        event_name = msg.message_name
        payload = reg.deserialize(event_name, payload_data)
        await handler(
            EventMessage(
                id=msg.id,
                name=event_name,
                payload=payload,
                occurred_at=occurred_at,
                msg=msg,
            )
        )

    return message_handler_with_middleware(handle_message, *middlewares)


@dataclass(frozen=True)
class _PublishedEvent:
    subject: str
    event: Any


class FakeEventPublisher:
    """Records published events instead of sending them."""

    def __init__(self) -> None:
        self._messages: list[_PublishedEvent] = []

    async def publish(self, topic_name: str, event: Any) -> None:
        self._messages.append(_PublishedEvent(topic_name, event))

    def reset(self) -> None:
        self._messages = []

    def last(self) -> tuple[str, Any]:
        """Return the subject and event of the latest publication."""
        if not self._messages:
            raise LookupError("no events have been published")
        latest = self._messages[-1]
        return latest.subject, latest.event