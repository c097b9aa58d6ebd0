"""Storage abstraction package for stored_lib."""
from __future__ import annotations
from pathlib import Path
from typing import Optional

from .base import StorageBackend, StorageError, CorruptValueError
from .memory_backend import MemoryStorage
from .file_backend import FileStorageBackend
from .single_file_backend import SingleFileStorage
from .serializer import Serializer, PickleSerializer, JSONSerializer, YAMLSerializer, get_serializer

BACKENDS = ("memory", "file", "single_file")


def create_storage(
    backend: str = "memory",
    serializer: Optional[str] = None,
    data_dir: str | Path = "./data",
    file_path: Optional[str | Path] = None,
) -> StorageBackend:
    """Build a storage backend by name.

    `serializer` only applies to the file based backends; when omitted the
    per-key file backend uses pickle and the single-file backend YAML.
    """
    ser = get_serializer(serializer) if serializer else None
    if backend == "memory":
        return MemoryStorage()
    if backend == "file":
        return FileStorageBackend(data_dir=data_dir, serializer=ser)
    if backend == "single_file":
        path = Path(file_path) if file_path else Path(data_dir) / "settings"
        return SingleFileStorage(path, serializer=ser)
    raise ValueError(f"Unknown storage backend {backend!r}; expected one of {BACKENDS}")


__all__ = [
    "StorageBackend",
    "StorageError",
    "CorruptValueError",
    "MemoryStorage",
    "FileStorageBackend",
    "SingleFileStorage",
    "Serializer",
    "PickleSerializer",
    "JSONSerializer",
    "YAMLSerializer",
    "get_serializer",
    "create_storage",
]
