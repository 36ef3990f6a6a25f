import pytest

from paymentgw.ddd.aggregate import (
    AGGREGATE_ID_KEY,
    AGGREGATE_VERSION_KEY,
    Aggregate,
    AggregateEvent,
    set_events,
)
from paymentgw.ddd.entity import set_id, set_name
from paymentgw.ddd.message_types import new_event
from paymentgw.registry.registry import Registry


def test_event_metadata_uses_fixed_keys():
    agg = Aggregate("agg-7", "payments.Payment")
    agg.add_event("PaymentCreated", None)
    assert dict(agg.events[0].metadata) == {
        "aggregate-name": "payments.Payment",
        "aggregate-id": "agg-7",
    }


def test_add_event_records_aggregate_identity():
    agg = Aggregate("agg-1", "payments.Payment")
    agg.add_event("PaymentCreated", {"amount": 5})
    assert len(agg.events) == 1
    evt = agg.events[0]
    assert isinstance(evt, AggregateEvent)
    assert evt.event_name == "PaymentCreated"
    assert evt.aggregate_id == "agg-1"
    assert evt.aggregate_name == "payments.Payment"
    assert evt.payload == {"amount": 5}


def test_aggregate_identity_overrides_options():
    agg = Aggregate("real", "Agg")
    agg.add_event("e", None, {AGGREGATE_ID_KEY: "fake", AGGREGATE_VERSION_KEY: 3})
    evt = agg.events[0]
    assert evt.aggregate_id == "real"
    assert evt.aggregate_version == 3


def test_missing_version_raises():
    agg = Aggregate("a", "b")
    agg.add_event("e", None)
    evt = agg.events[0]
    assert AGGREGATE_VERSION_KEY not in evt.metadata
    with pytest.raises(KeyError):
        getattr(evt, "aggregate_version")


def test_events_keep_order_and_clear():
    agg = Aggregate("a", "b")
    agg.add_event("first", None)
    agg.add_event("second", None)
    assert [e.event_name for e in agg.events] == ["first", "second"]
    agg.clear_events()
    assert agg.events == []


def test_aggregate_name_is_entity_name():
    agg = Aggregate("a", "Name")
    assert agg.aggregate_name == agg.name


def test_set_events_option():
    agg = Aggregate("a", "b")
    evt = new_event("e", None)
    set_events(evt)(agg)
    assert agg.events == [evt]


def test_set_events_rejects_non_aggregate():
    with pytest.raises(TypeError):
        set_events()(object())


def test_built_from_registry_with_options():
    reg = Registry()
    reg.register("Agg", lambda: Aggregate("", ""), bytes, lambda d, v: None, None)
    agg = reg.build("Agg", set_id("id-9"), set_name("Agg"))
    agg.add_event("e", None)
    assert agg.events[0].aggregate_id == "id-9"
    assert agg.events[0].aggregate_name == "Agg"