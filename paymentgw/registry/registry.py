"""Keyed registry of factories, serializers and deserializers."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Protocol, runtime_checkable

BuildOption = Callable[[Any], None]
Serializer = Callable[[Any], bytes]
# A deserializer fills the given value in place and returns None, or returns
# a replacement value when the target cannot be changed in place.
Deserializer = Callable[[bytes, Any], Any]
Factory = Callable[[], Any]


@runtime_checkable
class Registrable(Protocol):
    """Anything that knows the key it is registered under."""

    def key(self) -> str: ...


class UnregisteredKey(LookupError):
    """Raised when nothing is registered under a key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"nothing has been registered with the key `{key}`")
        self.key = key


class AlreadyRegisteredKey(ValueError):
    """Raised when a key is registered a second time."""

    def __init__(self, key: str) -> None:
        super().__init__(f"something with the key `{key}` has already been registered")
        self.key = key


def validate_implements(check: type) -> BuildOption:
    """Build option that fails unless the built value is an instance of ``check``."""
    if not isinstance(check, type):
        raise TypeError(f"{check!r} is not a class")

    def option(v: Any) -> None:
        if not isinstance(v, check):
            raise TypeError(f"{type(v).__name__} does not implement {check.__name__}")

    return option


@dataclass(frozen=True)
class _Registered:
    factory: Factory
    serializer: Serializer
    deserializer: Deserializer
    options: tuple[BuildOption, ...]


class Registry:
    """Maps keys to the means of building, serializing and deserializing values."""

    def __init__(self) -> None:
        self._registered: dict[str, _Registered] = {}
        self._lock = threading.Lock()

    def _lookup(self, key: str) -> _Registered:
        with self._lock:
            try:
                return self._registered[key]
            except KeyError:
                raise UnregisteredKey(key) from None

    def serialize(self, key: str, v: Any) -> bytes:
        return self._lookup(key).serializer(v)

    def build(self, key: str, *options: BuildOption) -> Any:
        entry = self._lookup(key)
        v = entry.factory()
        for option in (*entry.options, *options):
            option(v)
        return v

    def deserialize(self, key: str, data: bytes, *options: BuildOption) -> Any:
        v = self.build(key, *options)
        result = self._lookup(key).deserializer(data, v)
        return v if result is None else result

    def register(
        self,
        key: str,
        factory: Factory,
        serializer: Serializer,
        deserializer: Deserializer,
        options: Optional[Iterable[BuildOption]],
    ) -> None:
        with self._lock:
            if key in self._registered:
                raise AlreadyRegisteredKey(key)
            self._registered[key] = _Registered(
                factory=factory,
                serializer=serializer,
                deserializer=deserializer,
                options=tuple(options or ()),
            )


class Serde(ABC):
    """Registers types with a registry using one serialization format."""

    @abstractmethod
    def register(self, v: Any, *options: BuildOption) -> None: ...

    @abstractmethod
    def register_key(self, key: str, v: Any, *options: BuildOption) -> None: ...

    @abstractmethod
    def register_factory(self, key: str, factory: Factory, *options: BuildOption) -> None: ...


def register(
    reg: Registry,
    v: Any,
    serializer: Serializer,
    deserializer: Deserializer,
    options: Optional[Iterable[BuildOption]],
) -> None:
    """Register a class or instance under the key its ``key()`` method gives."""
    key = v().key() if isinstance(v, type) else v.key()
    register_key(reg, key, v, serializer, deserializer, options)


def register_key(
    reg: Registry,
    key: str,
    v: Any,
    serializer: Serializer,
    deserializer: Deserializer,
    options: Optional[Iterable[BuildOption]],
) -> None:
    """Register the type of ``v`` (or ``v`` itself if a class) under ``key``."""
    cls = v if isinstance(v, type) else type(v)
    reg.register(key, cls, serializer, deserializer, options)


def register_factory(
    reg: Registry,
    key: str,
    factory: Factory,
    serializer: Serializer,
    deserializer: Deserializer,
    options: Optional[Iterable[BuildOption]],
) -> None:
    """Register a factory under ``key``; the factory must not return None."""
    if factory() is None:
        raise ValueError(f"factory for item `{key}` returns a nil value")
    reg.register(key, factory, serializer, deserializer, options)