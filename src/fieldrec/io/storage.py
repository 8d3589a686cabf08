"""
Key/value storage collaborator: get/put/delete/list by key.

Responsibilities
- Define StorageEntry (key + opaque bytes) with JSON helpers for Pydantic records.
- Define the Storage protocol consumed by the user backend.
- Provide InMemoryStorage (thread-safe dict) and FileStorage (one file per key,
  atomic tmp -> fsync -> rename writes).

Key layout
- Keys are "/"-separated relative paths (e.g. "user/alice").
- list(prefix) returns the immediate children under prefix, sorted; children that
  have descendants carry a trailing "/".

Notes
- Storage never interprets entry contents; records are opaque JSON documents.
- Per-key write ordering is the caller's concern (see fieldrec.users.backend).
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel

from fieldrec.core.serde import json_dumps_canonical, json_loads
from fieldrec.log import get_logger

from . import fs
from .config import BACKENDS, StorageSettings
from .errors import StorageConfigError, StorageDecodeError, StorageKeyError, StorageWriteError

__all__ = [
    "StorageEntry",
    "Storage",
    "InMemoryStorage",
    "FileStorage",
    "open_storage",
]

logger = get_logger(__name__)

_FILE_SUFFIX = ".json"


def _check_key(key: str) -> str:
    if not key or key.startswith("/") or key.endswith("/"):
        raise StorageKeyError(f"invalid storage key {key!r}")
    if any(part in ("", ".", "..") for part in key.split("/")):
        raise StorageKeyError(f"invalid storage key {key!r}")
    return key


def _children(keys: list[str], prefix: str) -> list[str]:
    out: set[str] = set()
    for key in keys:
        if not key.startswith(prefix):
            continue
        rest = key[len(prefix) :]
        head, sep, _ = rest.partition("/")
        out.add(head + sep)
    return sorted(out)


@dataclass(frozen=True)
class StorageEntry:
    """
    One stored document.

    Attributes:
        key (str): Storage key.
        value (bytes): Serialized document (canonical JSON for records).
    """

    key: str
    value: bytes

    @classmethod
    def from_json(cls, key: str, obj: Any) -> StorageEntry:
        """Serialize a Pydantic record or JSON-like object as canonical JSON (by alias)."""
        if isinstance(obj, BaseModel):
            obj = obj.model_dump(by_alias=True)
        return cls(key=key, value=json_dumps_canonical(obj).encode("utf-8"))

    def decode_json(self) -> Any:
        try:
            return json_loads(self.value)
        except ValueError as exc:
            raise StorageDecodeError(f"entry {self.key!r} is not valid JSON: {exc}") from exc


@runtime_checkable
class Storage(Protocol):
    """Narrow storage interface used by record backends."""

    def get(self, key: str) -> StorageEntry | None: ...

    def put(self, entry: StorageEntry) -> None: ...

    def delete(self, key: str) -> None: ...

    def list(self, prefix: str) -> list[str]: ...


class InMemoryStorage:
    """Dict-backed storage; safe for concurrent use from threads."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> StorageEntry | None:
        _check_key(key)
        with self._lock:
            value = self._data.get(key)
        return None if value is None else StorageEntry(key, value)

    def put(self, entry: StorageEntry) -> None:
        _check_key(entry.key)
        with self._lock:
            self._data[entry.key] = bytes(entry.value)
        logger.debug("storage_put", backend="memory", key=entry.key, size=len(entry.value))

    def delete(self, key: str) -> None:
        _check_key(key)
        with self._lock:
            self._data.pop(key, None)
        logger.debug("storage_delete", backend="memory", key=key)

    def list(self, prefix: str) -> list[str]:
        with self._lock:
            keys = list(self._data)
        return _children(keys, prefix)


class FileStorage:
    """
    One JSON file per key beneath a root directory.

    Notes:
        - Key "user/alice" lives at "<root>/user/alice.json".
        - Writes are atomic per key (tmp -> fsync -> os.replace).
    """

    def __init__(self, root_dir: str) -> None:
        if not root_dir:
            raise StorageConfigError("file storage requires a root directory")
        self.root_dir = os.path.abspath(root_dir)

    def _path(self, key: str) -> str:
        return os.path.join(self.root_dir, *_check_key(key).split("/")) + _FILE_SUFFIX

    def get(self, key: str) -> StorageEntry | None:
        value = fs.read_bytes(self._path(key))
        return None if value is None else StorageEntry(key, value)

    def put(self, entry: StorageEntry) -> None:
        path = self._path(entry.key)
        try:
            fs.write_atomic(path, entry.value)
        except OSError as exc:
            raise StorageWriteError(f"failed to write {entry.key!r}: {exc}") from exc
        logger.debug("storage_put", backend="file", key=entry.key, size=len(entry.value))

    def delete(self, key: str) -> None:
        try:
            fs.remove(self._path(key))
        except OSError as exc:
            raise StorageWriteError(f"failed to delete {key!r}: {exc}") from exc
        logger.debug("storage_delete", backend="file", key=key)

    def list(self, prefix: str) -> list[str]:
        directory = os.path.join(self.root_dir, *[p for p in prefix.split("/") if p])
        _, _, partial = prefix.rpartition("/")
        if partial:
            directory = os.path.dirname(directory)
        out: list[str] = []
        for name in fs.listdir(directory):
            if name.endswith(".tmp"):
                continue
            if fs.is_dir(os.path.join(directory, name)):
                child = name + "/"
            elif name.endswith(_FILE_SUFFIX):
                child = name[: -len(_FILE_SUFFIX)]
            else:
                continue
            if child.startswith(partial):
                out.append(child[len(partial) :] if partial else child)
        return sorted(set(out))


def open_storage(settings: StorageSettings | None = None) -> Storage:
    """
    Build the storage backend named by settings.

    Raises:
        StorageConfigError: If the backend name is unknown.
    """
    s = settings or StorageSettings()
    if s.backend == "memory":
        return InMemoryStorage()
    if s.backend == "file":
        return FileStorage(s.root_dir)
    raise StorageConfigError(
        f"unknown storage backend {s.backend!r}; expected one of {', '.join(BACKENDS)}"
    )
