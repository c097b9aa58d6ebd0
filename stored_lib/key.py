"""Declarative typed key bindings.

A `StorageKey` ties one string key to one storable type, a default and an
optional change observer::

    class Settings:
        retry_count = StorageKey("retryCount", int, default=3)
        theme = StorageKey("theme", Theme, default=Theme.LIGHT, on_change=apply_theme)

    settings = Settings()
    settings.retry_count        # 3 until something is written
    settings.retry_count = 5    # stored, then observers run

Bindings never cache values: every read and write goes to the store.
"""
from __future__ import annotations
import copy
import logging
from typing import Any, Callable, Generic, Optional, TypeVar, overload

from stored_lib.codecs import Codec, Decoded, decode_value, resolve_codec
from stored_lib.interfaces import StoreProtocol
from stored_lib.store import get_shared_store

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING: Any = object()


class StorageKey(Generic[T]):
    """Binding of `key` to a value of `value_type` in a store.

    Exactly one of `default` and `default_factory` must be given. A plain
    `default` is deep-copied on each miss so mutable defaults are never
    shared; `default_factory` is called on each miss. When `store` is None
    the process-wide store from `get_shared_store()` is used.
    """

    def __init__(
        self,
        key: str,
        value_type: Any,
        default: Any = _MISSING,
        *,
        default_factory: Optional[Callable[[], T]] = None,
        on_change: Optional[Callable[[T], None]] = None,
        store: Optional[StoreProtocol] = None,
    ) -> None:
        if not isinstance(key, str) or not key:
            raise ValueError("StorageKey requires a non-empty string key")
        if (default is _MISSING) == (default_factory is None):
            raise ValueError("StorageKey requires exactly one of `default` or `default_factory`")
        self.key = key
        self.value_type = value_type
        self.codec: Codec = resolve_codec(value_type)
        if default_factory is not None:
            self._default: Callable[[], T] = default_factory
        else:
            self._default = lambda: copy.deepcopy(default)
        self.on_change = on_change
        self._store = store

    @property
    def store(self) -> StoreProtocol:
        return self._store if self._store is not None else get_shared_store()

    def default(self) -> T:
        return self._default()

    def inspect(self) -> Decoded[T]:
        """Return the raw decode outcome without falling back to the default."""
        return decode_value(self.codec, self.key, self.store)

    def read(self) -> T:
        decoded = self.inspect()
        if decoded.present:
            return decoded.value  # type: ignore[return-value]
        return self.default()

    def write(self, value: T) -> None:
        self.codec.encode(value, self.key, self.store)
        logger.debug("Wrote %r", self.key)
        if self.on_change is not None:
            self.on_change(value)

    def exists(self) -> bool:
        return self.store.contains(self.key)

    def remove(self) -> None:
        """Delete the stored value; later reads return the default."""
        self.store.remove(self.key)

    value = property(read, write)

    # ------------- Descriptor protocol -------------

    @overload
    def __get__(self, instance: None, owner: type) -> "StorageKey[T]": ...

    @overload
    def __get__(self, instance: object, owner: type) -> T: ...

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return self.read()

    def __set__(self, instance: object, value: T) -> None:
        self.write(value)

    def __delete__(self, instance: object) -> None:
        self.remove()

    def __repr__(self) -> str:
        return f"StorageKey({self.key!r}, {self.codec!r})"
