"""Codecs that read and write typed values through a `StoreProtocol`.

Every storable type resolves to a codec with a `decode(key, store)` /
`encode(value, key, store)` pair. The default codec moves the value as an
opaque object and checks its type on the way out; primitives use the
store's native typed accessors instead. Containers, `Optional`, `Enum` and
`Storable` subclasses are resolved structurally from the type annotation.

Decoding never raises for bad data: it reports `ABSENT` when nothing is
stored and `FAILED` when the stored value does not fit the type.
"""
from __future__ import annotations
import logging
import types
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Generic, NewType, Optional, Protocol, TypeVar, Union, get_args, get_origin

from pydantic import AnyUrl

from stored_lib.interfaces import StoreProtocol
from stored_lib.storage.base import CorruptValueError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Single precision float, stored through the store's native float accessor.
Float32 = NewType("Float32", float)


class UnsupportedTypeError(TypeError):
    """Raised when no codec can be resolved for a type."""


class DecodeStatus(Enum):
    ABSENT = "absent"
    FAILED = "failed"
    PRESENT = "present"


@dataclass(frozen=True)
class Decoded(Generic[T]):
    """Outcome of a decode: nothing stored, unusable value, or a value."""

    status: DecodeStatus
    value: Optional[T] = None

    @property
    def present(self) -> bool:
        return self.status is DecodeStatus.PRESENT

    @classmethod
    def of(cls, value: T) -> "Decoded[T]":
        return cls(DecodeStatus.PRESENT, value)


ABSENT: Decoded[Any] = Decoded(DecodeStatus.ABSENT)
FAILED: Decoded[Any] = Decoded(DecodeStatus.FAILED)


class Codec(Protocol[T]):
    def decode(self, key: str, store: StoreProtocol) -> Decoded[T]: ...

    def encode(self, value: T, key: str, store: StoreProtocol) -> None: ...


class ObjectCodec(Generic[T]):
    """Default codec: generic object read with an isinstance check."""

    def __init__(self, value_type: type) -> None:
        self.value_type = value_type

    def decode(self, key: str, store: StoreProtocol) -> Decoded[T]:
        value = store.get(key)
        if value is None:
            return ABSENT
        return Decoded.of(value) if isinstance(value, self.value_type) else FAILED

    def encode(self, value: T, key: str, store: StoreProtocol) -> None:
        store.set(key, value)

    def __repr__(self) -> str:
        return f"ObjectCodec({self.value_type.__name__})"


class NativeCodec(Generic[T]):
    """Codec over one of the store's native typed accessors.

    The key's existence is checked before the typed getter runs, so a
    never-written key is ABSENT rather than a zero value. A stored value the
    getter cannot convert is FAILED. Without a `setter` the value is written
    through the generic object path.
    """

    def __init__(self, getter: str, setter: Optional[str] = None) -> None:
        self.getter = getter
        self.setter = setter

    def decode(self, key: str, store: StoreProtocol) -> Decoded[T]:
        if not store.contains(key):
            return ABSENT
        value = getattr(store, self.getter)(key)
        return FAILED if value is None else Decoded.of(value)

    def encode(self, value: T, key: str, store: StoreProtocol) -> None:
        if self.setter:
            getattr(store, self.setter)(key, value)
        else:
            store.set(key, value)

    def __repr__(self) -> str:
        return f"NativeCodec({self.getter})"


class ListCodec:
    def __init__(self, item_type: Any) -> None:
        self.item_type = item_type

    def decode(self, key: str, store: StoreProtocol) -> Decoded[list]:
        if not store.contains(key):
            return ABSENT
        value = store.get_list(key)
        if value is None or not all(conforms(v, self.item_type) for v in value):
            return FAILED
        return Decoded.of(value)

    def encode(self, value: list, key: str, store: StoreProtocol) -> None:
        store.set(key, list(value))


class DictCodec:
    def __init__(self, key_type: Any, value_type: Any) -> None:
        self.key_type = key_type
        self.value_type = value_type

    def decode(self, key: str, store: StoreProtocol) -> Decoded[dict]:
        if not store.contains(key):
            return ABSENT
        value = store.get_dict(key)
        if value is None:
            return FAILED
        for k, v in value.items():
            if not (conforms(k, self.key_type) and conforms(v, self.value_type)):
                return FAILED
        return Decoded.of(value)

    def encode(self, value: dict, key: str, store: StoreProtocol) -> None:
        store.set(key, dict(value))


class OptionalCodec:
    """Delegates to the wrapped codec; writing `None` removes the key."""

    def __init__(self, inner: Codec) -> None:
        self.inner = inner

    def decode(self, key: str, store: StoreProtocol) -> Decoded[Any]:
        return self.inner.decode(key, store)

    def encode(self, value: Any, key: str, store: StoreProtocol) -> None:
        if value is None:
            store.remove(key)
        else:
            self.inner.encode(value, key, store)


class EnumCodec:
    """Stores an enum member as its raw value, using the raw value's codec."""

    def __init__(self, enum_type: type) -> None:
        raw_types = {type(m.value) for m in enum_type}
        if len(raw_types) != 1:
            raise UnsupportedTypeError(
                f"{enum_type.__name__} needs members sharing one raw value type, got {sorted(t.__name__ for t in raw_types)}"
            )
        self.enum_type = enum_type
        self.raw_codec = resolve_codec(raw_types.pop())

    def decode(self, key: str, store: StoreProtocol) -> Decoded[Any]:
        raw = self.raw_codec.decode(key, store)
        if not raw.present:
            return raw
        try:
            return Decoded.of(self.enum_type(raw.value))
        except ValueError:
            return FAILED

    def encode(self, value: Any, key: str, store: StoreProtocol) -> None:
        member = self.enum_type(value)
        self.raw_codec.encode(member.value, key, store)


class Storable:
    """Base class for user types that persist themselves.

    The default pair stores the instance as an opaque object, so the
    backend's serializer must handle it (pickle does). Override the
    classmethods to store a different representation.
    """

    @classmethod
    def decode_stored(cls, key: str, store: StoreProtocol) -> Decoded[Any]:
        return ObjectCodec(cls).decode(key, store)

    @classmethod
    def encode_stored(cls, value: Any, key: str, store: StoreProtocol) -> None:
        ObjectCodec(cls).encode(value, key, store)


class StorableCodec:
    def __init__(self, storable_type: type) -> None:
        self.storable_type = storable_type

    def decode(self, key: str, store: StoreProtocol) -> Decoded[Any]:
        return self.storable_type.decode_stored(key, store)

    def encode(self, value: Any, key: str, store: StoreProtocol) -> None:
        self.storable_type.encode_stored(value, key, store)


# Types the generic object path can carry inside containers.
_PLAIN_TYPES = (str, int, float, bool, bytes, bytearray, datetime, date)

_REGISTRY: Dict[Any, Codec] = {
    int: NativeCodec("get_int", "set_int"),
    bool: NativeCodec("get_bool", "set_bool"),
    float: NativeCodec("get_double", "set_double"),
    Float32: NativeCodec("get_float", "set_float"),
    str: NativeCodec("get_string"),
    AnyUrl: NativeCodec("get_url", "set_url"),
    bytes: ObjectCodec(bytes),
    bytearray: ObjectCodec(bytearray),
    datetime: ObjectCodec(datetime),
    date: ObjectCodec(date),
}


def register_codec(value_type: Any, codec: Codec) -> None:
    """Register (or replace) the codec used for `value_type`."""
    _REGISTRY[value_type] = codec


def _is_union(origin: Any) -> bool:
    return origin is Union or origin is getattr(types, "UnionType", None)


def _check_plain(tp: Any, owner: Any) -> None:
    """Reject container element types the generic object path cannot carry."""
    if tp is Any or tp in _PLAIN_TYPES:
        return
    origin = get_origin(tp)
    if tp in (list, dict) or origin in (list, dict) or _is_union(origin):
        for arg in get_args(tp):
            if arg is not type(None):
                _check_plain(arg, owner)
        return
    raise UnsupportedTypeError(f"{tp!r} cannot be stored inside {owner!r}")


def conforms(value: Any, tp: Any) -> bool:
    """Return True if `value` has the shape described by annotation `tp`."""
    if tp is Any:
        return True
    if tp is type(None):
        return value is None
    origin = get_origin(tp)
    args = get_args(tp)
    if tp is list or origin is list:
        item = args[0] if args else Any
        return isinstance(value, list) and all(conforms(v, item) for v in value)
    if tp is dict or origin is dict:
        kt, vt = args if args else (Any, Any)
        return isinstance(value, dict) and all(conforms(k, kt) and conforms(v, vt) for k, v in value.items())
    if _is_union(origin):
        return any(conforms(value, a) for a in args)
    if tp is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if tp is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, tp)


def resolve_codec(value_type: Any) -> Codec:
    """Return the codec for a type annotation or raise UnsupportedTypeError."""
    codec = _REGISTRY.get(value_type)
    if codec is not None:
        return codec

    origin = get_origin(value_type)
    args = get_args(value_type)

    if _is_union(origin):
        inner = [a for a in args if a is not type(None)]
        if len(inner) == 1 and len(args) == 2:
            return OptionalCodec(resolve_codec(inner[0]))
        raise UnsupportedTypeError(f"only Optional[X] unions are storable, got {value_type!r}")

    if value_type is list or origin is list:
        item = args[0] if args else Any
        if item is str:
            return NativeCodec("get_string_list")
        _check_plain(item, value_type)
        return ListCodec(item)

    if value_type is dict or origin is dict:
        kt, vt = args if args else (Any, Any)
        _check_plain(kt, value_type)
        _check_plain(vt, value_type)
        return DictCodec(kt, vt)

    if isinstance(value_type, type) and origin is None:
        if issubclass(value_type, Enum):
            return EnumCodec(value_type)
        if issubclass(value_type, Storable):
            return StorableCodec(value_type)

    raise UnsupportedTypeError(f"no codec registered for {value_type!r}")


def decode_value(codec: Codec, key: str, store: StoreProtocol) -> Decoded[Any]:
    """Decode through `codec`, reporting corrupt payloads as FAILED."""
    try:
        decoded = codec.decode(key, store)
    except CorruptValueError:
        logger.warning("Stored value for %r is corrupt", key, exc_info=True)
        return FAILED
    if decoded.status is DecodeStatus.FAILED:
        logger.warning("Stored value for %r does not decode with %r", key, codec)
    return decoded
