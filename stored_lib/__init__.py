"""Typed, defaulted and observable settings on top of a key-value store."""

from .codecs import (
    Codec,
    Decoded,
    DecodeStatus,
    Float32,
    Storable,
    UnsupportedTypeError,
    register_codec,
    resolve_codec,
)
from .key import StorageKey
from .store import KeyValueStore, get_shared_store

__all__ = [
    "Codec",
    "Decoded",
    "DecodeStatus",
    "Float32",
    "Storable",
    "UnsupportedTypeError",
    "register_codec",
    "resolve_codec",
    "StorageKey",
    "KeyValueStore",
    "get_shared_store",
]
