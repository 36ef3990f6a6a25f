"""JSON serialization for registered types."""

from __future__ import annotations

import base64
import dataclasses
import json
from typing import Any

from paymentgw.registry.registry import (
    BuildOption,
    Factory,
    Registry,
    Serde,
    register as _register,
    register_factory as _register_factory,
    register_key as _register_key,
)


def _to_jsonable(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(obj).decode("ascii")
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    if hasattr(obj, "__dict__"):
        return {k: v for k, v in vars(obj).items() if not k.startswith("_")}
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _serialize(v: Any) -> bytes:
    return json.dumps(v, default=_to_jsonable, separators=(",", ":")).encode()


def _require_object(decoded: Any, target: Any) -> dict:
    if not isinstance(decoded, dict):
        raise TypeError(f"cannot decode JSON {type(decoded).__name__} into {type(target).__name__}")
    return decoded


def _deserialize(data: bytes, v: Any) -> Any:
    decoded = json.loads(data)
    if decoded is None:
        return None
    if isinstance(v, dict):
        v.update(_require_object(decoded, v))
        return None
    if isinstance(v, list):
        if not isinstance(decoded, list):
            raise TypeError(f"cannot decode JSON {type(decoded).__name__} into list")
        v[:] = decoded
        return None
    if dataclasses.is_dataclass(v):
        values = _require_object(decoded, v)
        for f in dataclasses.fields(v):
            if f.name in values:
                setattr(v, f.name, values[f.name])
        return None
    if hasattr(v, "__dict__"):
        for key, value in _require_object(decoded, v).items():
            setattr(v, key, value)
        return None
    return decoded


class JsonSerde(Serde):
    """Registers types whose payloads travel as JSON."""

    def __init__(self, registry: Registry) -> None:
        self._registry = registry

    def register(self, v: Any, *options: BuildOption) -> None:
        _register(self._registry, v, _serialize, _deserialize, options)

    def register_key(self, key: str, v: Any, *options: BuildOption) -> None:
        _register_key(self._registry, key, v, _serialize, _deserialize, options)

    def register_factory(self, key: str, factory: Factory, *options: BuildOption) -> None:
        _register_factory(self._registry, key, factory, _serialize, _deserialize, options)