"""
fieldrec.users — reference user backend wiring the core engine to storage.

## Public API
- UserBackend — create/read/update/delete/list/login over a Storage.
- UserEntry — persisted user record (token fields plus legacy fields).
- USER_SCHEMA / USER_ALIASES — request schema and renamed-field pairs.

## Examples
```python
from fieldrec.io import InMemoryStorage
from fieldrec.users import UserBackend

users = UserBackend(InMemoryStorage())
users.write("alice", {"password": "hunter2", "policies": "admin"})
users.read("alice")["token_policies"]  # ['admin']
```
"""

from __future__ import annotations

from .backend import USER_BINDER, UserBackend
from .entry import USER_ALIASES, USER_NAME_DIFFERENCES, USER_SCHEMA, UserEntry
from .tokens import TOKEN_FIELDS, TokenParams

__all__ = [
    "TOKEN_FIELDS",
    "TokenParams",
    "USER_ALIASES",
    "USER_BINDER",
    "USER_NAME_DIFFERENCES",
    "USER_SCHEMA",
    "UserBackend",
    "UserEntry",
]
