from typing import Any, Protocol
import base64
from datetime import date, datetime
import pickle
import json
import yaml

from .base import CorruptValueError, StorageError


class Serializer(Protocol):
    """Serialize/deserialize Python values for backends that store bytes/text.

    Implementations should be symmetric: `dump` -> bytes, `load` <- bytes.
    `load` raises `CorruptValueError` for payloads it cannot decode.
    """

    extension: str

    def dump(self, value: Any) -> bytes: ...

    def load(self, data: bytes) -> Any: ...


class PickleSerializer:
    """Default serializer using pickle (binary).

    This is a practical default since stored values may be arbitrary Python
    objects (dates, bytes, enums' raw values). Consumers can choose
    `JSONSerializer` or `YAMLSerializer` when interoperable text is desired.
    """

    extension = "pkl"

    def dump(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            raise StorageError(f"cannot pickle value of type {type(value).__name__}") from e

    def load(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)
        except Exception as e:
            raise CorruptValueError("stored payload is not a valid pickle") from e


_JSON_TAG = "__type__"


def _json_default(o: Any) -> Any:
    # JSON has no date or binary types; tag them so `load` can rebuild them.
    if isinstance(o, datetime):
        return {_JSON_TAG: "datetime", "value": o.isoformat()}
    if isinstance(o, date):
        return {_JSON_TAG: "date", "value": o.isoformat()}
    if isinstance(o, (bytes, bytearray)):
        return {_JSON_TAG: type(o).__name__, "value": base64.b64encode(bytes(o)).decode("ascii")}
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


def _json_object_hook(obj: dict) -> Any:
    if set(obj) != {_JSON_TAG, "value"}:
        return obj
    kind, value = obj[_JSON_TAG], obj["value"]
    if kind == "datetime":
        return datetime.fromisoformat(value)
    if kind == "date":
        return date.fromisoformat(value)
    if kind == "bytes":
        return base64.b64decode(value, validate=True)
    if kind == "bytearray":
        return bytearray(base64.b64decode(value, validate=True))
    return obj


class JSONSerializer:
    """Serializer using JSON (text).

    Dates, datetimes and binary values are written as tagged objects and
    rebuilt on load; anything else must be JSON-serializable.
    """

    extension = "json"

    def dump(self, value: Any) -> bytes:
        try:
            return json.dumps(value, default=_json_default).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise StorageError(str(e)) from e

    def load(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"), object_hook=_json_object_hook)
        except (UnicodeDecodeError, ValueError, TypeError) as e:
            raise CorruptValueError("stored payload is not valid JSON") from e


class YAMLSerializer:
    """Serializer using YAML (text). Round-trips dates and bytes natively."""

    extension = "yml"

    def dump(self, value: Any) -> bytes:
        try:
            return yaml.safe_dump(value, allow_unicode=True, sort_keys=True).encode("utf-8")
        except yaml.YAMLError as e:
            raise StorageError(str(e)) from e

    def load(self, data: bytes) -> Any:
        try:
            return yaml.safe_load(data.decode("utf-8"))
        except (UnicodeDecodeError, yaml.YAMLError) as e:
            raise CorruptValueError("stored payload is not valid YAML") from e


SERIALIZERS = {
    "pickle": PickleSerializer,
    "json": JSONSerializer,
    "yaml": YAMLSerializer,
}


def get_serializer(name: str) -> Serializer:
    try:
        return SERIALIZERS[name]()
    except KeyError:
        raise ValueError(f"Unknown serializer {name!r}; expected one of {sorted(SERIALIZERS)}") from None
