"""
Custom exceptions for the fieldrec.io module.

Purpose
- Provide storage-layer error types distinct from the core reconciliation errors.
- Keep fieldrec.core as the source of truth for validation/projection errors
  (see fieldrec.core.errors).

Boundaries
- StorageConfigError: invalid or unsupported configuration.
- StorageKeyError: a key that cannot be stored (empty, absolute, or escaping the root).
- StorageWriteError: atomic write or delete path failed.
- StorageDecodeError: a stored entry is not valid JSON for the requested record.
"""

from __future__ import annotations


class StorageError(Exception):
    """
    Base class for storage-related errors in fieldrec.io.

    Notes:
        Use this as a catch-all for storage failures, distinct from fieldrec.core errors.
    """


class StorageConfigError(StorageError):
    """
    Raised when storage configuration is invalid or unsupported.

    Examples:
        - Unknown backend name
        - File backend without a root directory
    """


class StorageKeyError(StorageError, ValueError):
    """Raised for keys that are empty, absolute, or contain '..' segments."""


class StorageWriteError(StorageError):
    """
    Raised when a put/delete fails to complete.

    Notes:
        The file write path is tmp file -> fsync -> os.replace(tmp, final). Failures at any
        step surface as StorageWriteError (with best-effort cleanup of tmp files).
    """


class StorageDecodeError(StorageError):
    """Raised when a stored entry cannot be decoded as JSON."""
