from dataclasses import dataclass, field
from datetime import datetime, timezone

import pytest

from paymentgw.am.message import Message
from paymentgw.am.replies import (
    FAILURE_REPLY,
    REPLY_OUTCOME_HDR,
    SUCCESS_REPLY,
    ReplyMessage,
    ReplyPublisher,
    new_reply_handler,
)
from paymentgw.ddd.message_types import new_reply
from paymentgw.registry.json_serde import JsonSerde
from paymentgw.registry.registry import Registry, UnregisteredKey

CHARGED = "payments.Charged"


@dataclass
class Incoming(Message):
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    calls: list = field(default_factory=list)

    def ack(self):
        self.calls.append("ack")

    def nack(self):
        self.calls.append("nack")

    def extend(self):
        self.calls.append("extend")

    def kill(self):
        self.calls.append("kill")


class Recorder:
    def __init__(self):
        self.published = []

    async def publish(self, topic_name, msg):
        self.published.append((topic_name, msg))


def make_registry():
    reg = Registry()
    JsonSerde(reg).register_key(CHARGED, dict)
    return reg


def receive(msg, **changes):
    values = dict(id=msg.id, name=msg.name, subject=msg.subject, data=msg.data, metadata=msg.metadata, sent_at=msg.sent_at)
    values.update(changes)
    return Incoming(**values)


async def round_trip(reg, reply):
    recorder = Recorder()
    await ReplyPublisher(reg, recorder).publish("saga.replies", reply)
    received = []

    async def handle(r):
        received.append(r)

    await new_reply_handler(reg, handle)(receive(recorder.published[0][1]))
    return recorder.published[0], received[0]


@pytest.mark.asyncio
async def test_success_reply_needs_no_registration():
    reply = new_reply(SUCCESS_REPLY, None, {REPLY_OUTCOME_HDR: "SUCCESS"})
    (topic, msg), got = await round_trip(Registry(), reply)
    assert topic == "saga.replies"
    assert msg.id == reply.id
    assert got.reply_name == SUCCESS_REPLY
    assert got.payload is None
    assert got.metadata[REPLY_OUTCOME_HDR] == "SUCCESS"


@pytest.mark.asyncio
async def test_failure_reply_keeps_occurrence_time():
    reply = new_reply(FAILURE_REPLY, None)
    _, got = await round_trip(Registry(), reply)
    assert got.reply_name == FAILURE_REPLY
    assert got.occurred_at == reply.occurred_at


@pytest.mark.asyncio
async def test_custom_reply_payload_round_trip():
    reply = new_reply(CHARGED, {"charge_id": "c-1"})
    _, got = await round_trip(make_registry(), reply)
    assert got.payload == {"charge_id": "c-1"}
    assert got.id == reply.id
    assert got.message_name == CHARGED


@pytest.mark.asyncio
async def test_publish_unregistered_custom_reply_raises():
    with pytest.raises(UnregisteredKey):
        await ReplyPublisher(Registry(), Recorder()).publish("t", new_reply(CHARGED, {}))


@pytest.mark.asyncio
async def test_handle_unregistered_custom_reply_raises():
    recorder = Recorder()
    await ReplyPublisher(Registry(), recorder).publish("t", new_reply(SUCCESS_REPLY, None))
    incoming = receive(recorder.published[0][1], name="payments.Unknown")

    async def handle(r):
        raise AssertionError("handler must not run")

    with pytest.raises(UnregisteredKey):
        await new_reply_handler(Registry(), handle)(incoming)


def test_reply_message_delegates_acknowledgement():
    incoming = Incoming(id="1", name=SUCCESS_REPLY, subject="t", data=b"")
    reply = ReplyMessage(id="1", name=SUCCESS_REPLY, payload=None, occurred_at=datetime.now(timezone.utc), msg=incoming)
    reply.kill()
    reply.ack()
    reply.extend()
    reply.nack()
    assert incoming.calls == ["kill", "ack", "extend", "nack"]
    assert reply.subject == "t"