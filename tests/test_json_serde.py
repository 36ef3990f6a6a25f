import json
from dataclasses import dataclass

import pytest

from paymentgw.registry.json_serde import JsonSerde
from paymentgw.registry.registry import AlreadyRegisteredKey, Registry


@dataclass
class Point:
    x: int = 0
    y: int = 0

    def key(self):
        return "point"


class Plain:
    def __init__(self):
        self.label = ""
        self._hidden = "internal"


@pytest.fixture
def reg():
    return Registry()


def test_serialize_dataclass_compact(reg):
    JsonSerde(reg).register(Point)
    assert reg.serialize("point", Point(1, 2)) == b'{"x":1,"y":2}'


def test_dataclass_round_trip(reg):
    JsonSerde(reg).register(Point)
    data = reg.serialize("point", Point(3, 4))
    assert reg.deserialize("point", data) == Point(3, 4)


def test_unknown_fields_ignored(reg):
    JsonSerde(reg).register(Point())
    restored = reg.deserialize("point", b'{"x": 5, "z": 9}')
    assert restored == Point(5, 0)
    assert not hasattr(restored, "z")


def test_register_key_dict_round_trip(reg):
    JsonSerde(reg).register_key("map", dict)
    data = reg.serialize("map", {"a": [1, 2], "b": "c"})
    assert reg.deserialize("map", data) == {"a": [1, 2], "b": "c"}


def test_plain_object_skips_private_attributes(reg):
    JsonSerde(reg).register_key("plain", Plain)
    obj = Plain()
    obj.label = "hi"
    data = reg.serialize("plain", obj)
    assert "_hidden" not in json.loads(data)
    assert reg.deserialize("plain", data).label == "hi"


def test_register_factory_with_options(reg):
    JsonSerde(reg).register_factory("point", lambda: Point(), lambda p: setattr(p, "y", 7))
    assert reg.deserialize("point", b'{"x": 1}') == Point(1, 7)


def test_register_factory_none_raises(reg):
    with pytest.raises(ValueError):
        JsonSerde(reg).register_factory("none", lambda: None)


def test_duplicate_registration_raises(reg):
    serde = JsonSerde(reg)
    serde.register(Point)
    with pytest.raises(AlreadyRegisteredKey):
        serde.register_key("point", Point)


def test_invalid_json_raises(reg):
    JsonSerde(reg).register(Point)
    with pytest.raises(json.JSONDecodeError):
        reg.deserialize("point", b"{not json")


def test_unserializable_value_raises(reg):
    JsonSerde(reg).register_key("any", dict)
    with pytest.raises(TypeError):
        reg.serialize("any", object())


def test_scalar_decoded_as_replacement(reg):
    JsonSerde(reg).register_factory("num", lambda: 0)
    assert reg.deserialize("num", reg.serialize("num", 12)) == 12