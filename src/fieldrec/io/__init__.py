"""
fieldrec.io — storage collaborator for reconciled records.

## Responsibilities
- Provide the narrow key/value Storage interface (get/put/delete/list) the record
  backends consume, with in-memory and file-backed implementations.
- Load StorageSettings with precedence env > TOML > defaults.

## Import DAG discipline
- Depends on stdlib, pydantic, structlog (via fieldrec.log), and fieldrec.core.serde.
- MUST NOT import fieldrec.users.

## Examples
```python
from fieldrec.io import StorageSettings, open_storage

storage = open_storage(StorageSettings(backend="file", root_dir="data"))
storage.list("user/")
```
"""

from __future__ import annotations

from .config import StorageSettings
from .storage import FileStorage, InMemoryStorage, Storage, StorageEntry, open_storage

__all__ = [
    "FileStorage",
    "InMemoryStorage",
    "Storage",
    "StorageEntry",
    "StorageSettings",
    "open_storage",
]
