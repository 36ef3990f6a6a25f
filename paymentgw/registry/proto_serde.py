"""Registers protobuf message types with a registry."""

from __future__ import annotations

from typing import Any

from google.protobuf.message import Message as ProtoMessage

from paymentgw.registry.registry import BuildOption, Factory, Registry, Serde
from paymentgw.registry.registry import register as _register
from paymentgw.registry.registry import register_factory as _register_factory
from paymentgw.registry.registry import register_key as _register_key


def _is_proto(v: Any) -> bool:
    if isinstance(v, type):
        return issubclass(v, ProtoMessage)
    return isinstance(v, ProtoMessage)


def _type_name(v: Any) -> str:
    return (v if isinstance(v, type) else type(v)).__name__


def _serialize(v: Any) -> bytes:
    return v.SerializeToString()


def _deserialize(data: bytes, v: Any) -> None:
    v.ParseFromString(bytes(data))


class ProtoSerde(Serde):
    """Serializes registered values in the protobuf wire format."""

    def __init__(self, reg: Registry) -> None:
        self._registry = reg

    def register(self, v: Any, *options: BuildOption) -> None:
        if not _is_proto(v):
            raise TypeError(f"{_type_name(v)} is not a protobuf message")
        _register(self._registry, v, _serialize, _deserialize, options)

    def register_key(self, key: str, v: Any, *options: BuildOption) -> None:
        if not _is_proto(v):
            raise TypeError(f"{_type_name(v)} is not a protobuf message")
        _register_key(self._registry, key, v, _serialize, _deserialize, options)

    def register_factory(self, key: str, factory: Factory, *options: BuildOption) -> None:
        v = factory()
        if v is None:
            raise ValueError(f"{key} factory returns a nil value")
        if not isinstance(v, ProtoMessage):
            raise TypeError(f"{key} is not a protobuf message")
        _register_factory(self._registry, key, factory, _serialize, _deserialize, options)