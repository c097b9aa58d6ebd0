"""Simple file-backed storage backend.

This backend stores one serialized value per key under
`<data_dir>/<namespace>/<quoted key>.<ext>` where `<ext>` comes from the
serializer (pickle by default). Keys are percent-encoded so every distinct
key gets its own file. It provides atomic writes by writing to a temporary
file then renaming.
"""
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any, Iterable, Optional
from urllib.parse import quote, unquote

from .base import StorageBackend, StorageError
from .serializer import PickleSerializer, Serializer

logger = logging.getLogger(__name__)


class FileStorageBackend(StorageBackend):
    def __init__(self, data_dir: str | Path = "./data", serializer: Optional[Serializer] = None) -> None:
        self.data_dir = Path(data_dir)
        self.serializer = serializer or PickleSerializer()
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"cannot create data directory {self.data_dir}") from e

    @property
    def _suffix(self) -> str:
        return "." + self.serializer.extension

    def _path_for(self, namespace: str, key: str) -> Path:
        return self.data_dir / namespace / f"{quote(key, safe='')}{self._suffix}"

    def save(self, namespace: str, key: str, value: Any) -> None:
        payload = self.serializer.dump(value)
        path = self._path_for(namespace, key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            tmp.replace(path)
        except OSError as e:
            raise StorageError(f"cannot write {path}") from e
        logger.debug("FileStorageBackend wrote %s (%d bytes)", path, len(payload))

    def load(self, namespace: str, key: str) -> Any:
        path = self._path_for(namespace, key)
        if not path.exists():
            raise KeyError(key)
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise StorageError(f"cannot read {path}") from e
        return self.serializer.load(data)

    def delete(self, namespace: str, key: str) -> None:
        path = self._path_for(namespace, key)
        if not path.exists():
            raise KeyError(key)
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(f"cannot delete {path}") from e

    def list_keys(self, namespace: str) -> Iterable[str]:
        ns = self.data_dir / namespace
        if not ns.is_dir():
            return
        for p in ns.iterdir():
            if p.is_file() and p.suffix == self._suffix:
                yield unquote(p.stem)

    def exists(self, namespace: str, key: str) -> bool:
        return self._path_for(namespace, key).exists()
