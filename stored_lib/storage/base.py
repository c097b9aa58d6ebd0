"""Storage backend interface definitions.

Defines the StorageBackend abstract class that `KeyValueStore` layers typed
settings access on top of. Implementations translate Python objects to
whatever format the backend persists.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Iterable


class StorageError(Exception):
    """Raised when a backend cannot read or write its persistent state."""


class CorruptValueError(StorageError):
    """Raised when a stored payload exists but cannot be deserialized."""


class StorageBackend(ABC):
    """Abstract storage backend.

    Values are grouped by `namespace`; keys are unique within a namespace
    only. Implementations must be thread-safe if used concurrently.
    """

    @abstractmethod
    def save(self, namespace: str, key: str, value: Any) -> None:
        """Save `value` under `namespace` and `key`, replacing any prior value."""

    @abstractmethod
    def load(self, namespace: str, key: str) -> Any:
        """Load and return object stored under `namespace`/`key`.

        Should raise `KeyError` if the key does not exist.
        """

    @abstractmethod
    def delete(self, namespace: str, key: str) -> None:
        """Delete the stored object. Raise `KeyError` if not found."""

    @abstractmethod
    def list_keys(self, namespace: str) -> Iterable[str]:
        """Return an iterable of keys stored in `namespace`."""

    @abstractmethod
    def exists(self, namespace: str, key: str) -> bool:
        """Return True if `key` exists under `namespace`."""
