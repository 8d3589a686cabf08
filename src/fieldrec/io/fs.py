"""
Filesystem helpers for the file-backed storage (file protocol baseline).

Responsibilities
- Provide a minimal stdlib-only abstraction for the operations FileStorage needs:
  directory creation, safe write handles, fsync, atomic renames, and listing.
- Establish the atomic write path: tmp write -> fsync -> atomic rename.

Notes
- Atomicity via os.replace is guaranteed only when src and dst reside on the same filesystem.
- All helpers are synchronous; callers decide on concurrency/locking.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import BinaryIO


def makedirs(path: str, exist_ok: bool = True) -> None:
    """
    Create directories recursively.

    Notes:
        Thin wrapper around os.makedirs to centralize storage-layer usage.
    """
    os.makedirs(path, exist_ok=exist_ok)


@contextmanager
def open_write(path: str) -> Iterator[BinaryIO]:
    """
    Open a file for binary write as a context manager.

    Yields:
        BinaryIO: A writable handle; flushed and fsynced before close.

    Notes:
        Caller is responsible for the atomic os.replace of the temporary file.
    """
    fh = open(path, "wb")
    try:
        yield fh
        fsync_file(fh)
    finally:
        fh.close()


def fsync_file(fh: BinaryIO) -> None:
    """Flush and fsync an open file handle."""
    fh.flush()
    os.fsync(fh.fileno())


def rename_atomic(src: str, dst: str) -> None:
    """
    Atomically rename src -> dst on the same filesystem.

    Notes:
        Uses os.replace; tmp and final must live under the same mount/volume.
    """
    os.replace(src, dst)


def write_atomic(path: str, payload: bytes) -> None:
    """
    Write payload to path via "<path>.tmp" and an atomic rename.

    Raises:
        OSError: If any step fails; the tmp file is removed best-effort.
    """
    makedirs(os.path.dirname(path) or ".", exist_ok=True)
    tmp_path = path + ".tmp"
    try:
        with open_write(tmp_path) as fh:
            fh.write(payload)
        rename_atomic(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def read_bytes(path: str) -> bytes | None:
    """Return file contents, or None if the file does not exist."""
    try:
        with open(path, "rb") as fh:
            return fh.read()
    except FileNotFoundError:
        return None


def remove(path: str) -> bool:
    """Remove a file; returns False if it did not exist."""
    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    return True


def listdir(path: str) -> list[str]:
    """
    List entry names in a directory (non-recursive).

    Returns:
        list[str]: Entry names; [] if the directory does not exist.
    """
    try:
        return os.listdir(path)
    except FileNotFoundError:
        return []


def is_dir(path: str) -> bool:
    return os.path.isdir(path)
