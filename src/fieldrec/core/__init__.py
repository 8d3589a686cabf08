"""
Core package aggregator for the fieldrec reconciliation engine.

## Contracts
- Values — FieldType tags, coercion, and the FieldData present/default accessor.
- Schema — frozen FieldDescriptor entries in an ordered, immutable Schema.
- Reconcile — create/update merge of supplied and previous values.
- Aliases — one write-normalizes/read-back-fills rule for renamed fields.
- Project — explicit binding table from schema names to Pydantic record keys.
- Binder — the write and read paths composed for one record type.

## Notes
- Zero-IO policy: stdlib + pydantic only; no file/network IO and no logging.
- Errors propagate to the caller; see `fieldrec.core.errors`.

## Examples
```python
from fieldrec.core import FieldDescriptor, FieldType, Operation, Schema, reconcile

schema = Schema([
    FieldDescriptor("username", FieldType.STRING, required=True),
    FieldDescriptor("password", FieldType.STRING, default=""),
])
reconcile(schema, {"username": "alice"}, None, Operation.CREATE)
# {'username': 'alice', 'password': ''}
```
"""

from __future__ import annotations

from .aliases import AliasPair, AliasResolution, AliasResolver
from .binder import RecordBinder
from .errors import (
    FieldRecError,
    FieldViolation,
    PreconditionError,
    ProjectionError,
    SchemaError,
    UnsupportedOperationError,
    ValidationError,
)
from .project import FieldBinding, NameDifference, Projector
from .reconcile import Operation, reconcile
from .schema import FieldDescriptor, Schema
from .values import FieldData, FieldType

__all__ = [
    "AliasPair",
    "AliasResolution",
    "AliasResolver",
    "FieldBinding",
    "FieldData",
    "FieldDescriptor",
    "FieldRecError",
    "FieldType",
    "FieldViolation",
    "NameDifference",
    "Operation",
    "PreconditionError",
    "ProjectionError",
    "Projector",
    "RecordBinder",
    "Schema",
    "SchemaError",
    "UnsupportedOperationError",
    "ValidationError",
    "reconcile",
]
