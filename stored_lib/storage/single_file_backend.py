"""Storage backend that keeps every namespace in one document file.

The file holds a mapping `{namespace: {key: value}}` encoded with the
configured serializer (YAML by default), much like a settings property
list. The document is re-read on every access and rewritten atomically on
every change so several stores in one process observe each other's writes.
"""
from __future__ import annotations
import logging
import os
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Iterable, Optional

from .base import CorruptValueError, StorageBackend, StorageError
from .serializer import Serializer, YAMLSerializer

logger = logging.getLogger(__name__)

class SingleFileStorage(StorageBackend):
    """Backend that targets a single on-disk file.

    Parameters
    - file_path: path to the document file. A missing file reads as empty.
      When the path has no suffix the serializer's extension is appended.
    - serializer: document encoding, YAML when omitted.
    """

    def __init__(self, file_path: str | Path, serializer: Optional[Serializer] = None) -> None:
        self._lock = RLock()
        self.serializer = serializer or YAMLSerializer()
        self.file_path = Path(file_path)
        self._ensure_parent()

    def _ensure_parent(self) -> None:
        if not self.file_path.parent.exists():
            os.makedirs(self.file_path.parent, exist_ok=True)

    def _target_path(self) -> Path:
        # An explicit suffix on the configured path wins over the serializer's.
        p = self.file_path
        if p.suffix:
            return p
        return p.with_name(p.name + "." + self.serializer.extension)

    def _read_document(self) -> Dict[str, Dict[str, Any]]:
        path = self._target_path()
        if not path.exists():
            return {}
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise StorageError(f"cannot read {path}") from e
        logger.debug("SingleFileStorage loaded %s (%d bytes)", path, len(data))
        if not data.strip():
            return {}
        doc = self.serializer.load(data)
        if not isinstance(doc, dict):
            raise CorruptValueError(f"{path} does not contain a mapping")
        return doc

    def _read_document_or_none(self) -> Optional[Dict[str, Dict[str, Any]]]:
        """Like `_read_document` but logs and returns None for a corrupt file."""
        try:
            return self._read_document()
        except CorruptValueError:
            logger.warning("SingleFileStorage document %s is corrupt", self._target_path(), exc_info=True)
            return None

    def _set_aside_corrupt(self) -> None:
        path = self._target_path()
        backup = path.with_name(path.name + ".corrupt")
        try:
            path.replace(backup)
        except OSError as e:
            raise StorageError(f"cannot move corrupt {path} aside") from e
        logger.warning("SingleFileStorage moved corrupt document to %s", backup)

    def _write_document(self, doc: Dict[str, Dict[str, Any]]) -> None:
        path = self._target_path()
        payload = self.serializer.dump(doc)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            with open(tmp, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            tmp.replace(path)
        except OSError as e:
            raise StorageError(f"cannot write {path}") from e

    def save(self, namespace: str, key: str, value: Any) -> None:
        with self._lock:
            doc = self._read_document_or_none()
            if doc is None:
                # Keep the unreadable document beside the fresh one.
                self._set_aside_corrupt()
                doc = {}
            ns = doc.get(namespace)
            if not isinstance(ns, dict):
                ns = doc[namespace] = {}
            ns[key] = value
            self._write_document(doc)

    def load(self, namespace: str, key: str) -> Any:
        with self._lock:
            ns = self._read_document().get(namespace)
            if not isinstance(ns, dict) or key not in ns:
                raise KeyError(key)
            return ns[key]

    def delete(self, namespace: str, key: str) -> None:
        with self._lock:
            doc = self._read_document_or_none() or {}
            ns = doc.get(namespace)
            if not isinstance(ns, dict) or key not in ns:
                raise KeyError(key)
            del ns[key]
            self._write_document(doc)

    def list_keys(self, namespace: str) -> Iterable[str]:
        with self._lock:
            ns = (self._read_document_or_none() or {}).get(namespace)
            return list(ns.keys()) if isinstance(ns, dict) else []

    def exists(self, namespace: str, key: str) -> bool:
        with self._lock:
            ns = (self._read_document_or_none() or {}).get(namespace)
            return isinstance(ns, dict) and key in ns
