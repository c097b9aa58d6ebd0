"""Flat key-value settings store.

`KeyValueStore` binds a `StorageBackend` to one namespace and exposes the
generic object get/set plus the native typed accessors used by the codecs.
`get_shared_store()` returns the process-wide instance built from
`stored_lib.config`.
"""
from __future__ import annotations
import logging
import math
import struct
import threading
from typing import Any, Dict, Iterable, List, Optional

from pydantic import AnyUrl

from stored_lib.config import StoreConfig, load_config
from stored_lib.storage import StorageBackend, MemoryStorage, create_storage

logger = logging.getLogger(__name__)

TRUE_STRINGS = frozenset({"true", "yes", "1"})
FALSE_STRINGS = frozenset({"false", "no", "0"})


def to_double(value: Any) -> Optional[float]:
    if isinstance(value, (bool, int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def to_float32(value: Any) -> Optional[float]:
    """Round a number to single precision, saturating to +/-inf on overflow."""
    d = to_double(value)
    if d is None:
        return None
    try:
        return struct.unpack("f", struct.pack("f", d))[0]
    except OverflowError:
        return math.copysign(math.inf, d)


def to_int(value: Any) -> Optional[int]:
    if isinstance(value, (bool, int)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    d = to_double(value)
    if d is None or not math.isfinite(d):
        return None
    return int(d)


def to_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        s = value.strip().lower()
        if s in TRUE_STRINGS:
            return True
        if s in FALSE_STRINGS:
            return False
    return None


def to_url(value: Any) -> Optional[AnyUrl]:
    if isinstance(value, AnyUrl):
        return value
    if isinstance(value, str):
        try:
            return AnyUrl(value)
        except ValueError:
            return None
    return None


class KeyValueStore:
    """A flat string-keyed store over one backend namespace.

    Storing `None` removes the key. The typed getters return `None` for a
    missing key as well as for a stored value they cannot convert; callers
    that need to tell the two apart check `contains` first.
    """

    def __init__(self, backend: Optional[StorageBackend] = None, namespace: str = "standard") -> None:
        self.backend = backend if backend is not None else MemoryStorage()
        self.namespace = namespace

    @classmethod
    def from_config(cls, cfg: StoreConfig) -> "KeyValueStore":
        backend = create_storage(
            backend=cfg.backend,
            serializer=cfg.serializer,
            data_dir=cfg.data_dir,
            file_path=cfg.file_path,
        )
        return cls(backend, namespace=cfg.namespace)

    def __repr__(self) -> str:
        return f"KeyValueStore(backend={type(self.backend).__name__}, namespace={self.namespace!r})"

    # ------------- Generic objects -------------

    def get(self, key: str) -> Any:
        try:
            return self.backend.load(self.namespace, key)
        except KeyError:
            return None

    def set(self, key: str, value: Any) -> None:
        if value is None:
            self.remove(key)
            return
        self.backend.save(self.namespace, key, value)
        logger.debug("Stored %s/%s (%s)", self.namespace, key, type(value).__name__)

    def remove(self, key: str) -> None:
        try:
            self.backend.delete(self.namespace, key)
        except KeyError:
            return
        logger.debug("Removed %s/%s", self.namespace, key)

    def contains(self, key: str) -> bool:
        return self.backend.exists(self.namespace, key)

    def keys(self) -> Iterable[str]:
        return list(self.backend.list_keys(self.namespace))

    # ------------- Native typed accessors -------------

    def get_int(self, key: str) -> Optional[int]:
        return to_int(self.get(key))

    def set_int(self, key: str, value: int) -> None:
        self.set(key, int(value))

    def get_bool(self, key: str) -> Optional[bool]:
        return to_bool(self.get(key))

    def set_bool(self, key: str, value: bool) -> None:
        self.set(key, bool(value))

    def get_float(self, key: str) -> Optional[float]:
        return to_float32(self.get(key))

    def set_float(self, key: str, value: float) -> None:
        self.set(key, to_float32(value))

    def get_double(self, key: str) -> Optional[float]:
        return to_double(self.get(key))

    def set_double(self, key: str, value: float) -> None:
        self.set(key, float(value))

    def get_string(self, key: str) -> Optional[str]:
        value = self.get(key)
        return value if isinstance(value, str) else None

    def get_url(self, key: str) -> Optional[AnyUrl]:
        return to_url(self.get(key))

    def set_url(self, key: str, value: AnyUrl) -> None:
        self.set(key, str(value))

    def get_string_list(self, key: str) -> Optional[List[str]]:
        value = self.get(key)
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return list(value)
        return None

    def get_list(self, key: str) -> Optional[List[Any]]:
        value = self.get(key)
        return list(value) if isinstance(value, list) else None

    def get_dict(self, key: str) -> Optional[Dict[Any, Any]]:
        value = self.get(key)
        return dict(value) if isinstance(value, dict) else None


_shared_store: Optional[KeyValueStore] = None
_shared_lock = threading.Lock()


def get_shared_store() -> KeyValueStore:
    """Return the process-wide store, creating it from config on first use."""
    global _shared_store
    if _shared_store is None:
        with _shared_lock:
            if _shared_store is None:
                cfg = load_config()
                _shared_store = KeyValueStore.from_config(cfg)
                logger.info("Created shared store %r", _shared_store)
    return _shared_store
