"""
Reconciler: merge supplied request values with previously stored values.

Responsibilities
- Define the Operation kinds a request can carry.
- Produce one authoritative value set per write:
    - create fills every schema field (supplied value, else default, else zero value);
    - update overwrites only explicitly supplied fields and carries the rest forward.
- Enforce required fields on create and aggregate every violation into a single
  ValidationError.

Notes
- Pure: inputs are never mutated; no IO, no logging.
- "Supplied" means the key is present with a non-None value; "" / 0 / [] count
  as supplied.
- Only create/update reach the reconciler; other operations are a programming
  error (UnsupportedOperationError).
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from enum import Enum

from .errors import (
    MISSING_REQUIRED,
    FieldViolation,
    PreconditionError,
    UnsupportedOperationError,
    ValidationError,
)
from .schema import Schema
from .typing import FieldValue, RawValues, Values
from .values import FieldData, coerce

__all__ = [
    "Operation",
    "reconcile",
]


class Operation(Enum):
    """Request operation kinds; only CREATE and UPDATE are reconciled."""

    CREATE = "create"
    UPDATE = "update"
    READ = "read"
    DELETE = "delete"
    LIST = "list"


def _as_field_data(schema: Schema, raw: RawValues | FieldData | None) -> FieldData:
    if isinstance(raw, FieldData):
        if raw.schema is not schema:
            raise PreconditionError("field data is bound to a different schema")
        return raw
    return FieldData(schema, raw)


def reconcile(
    schema: Schema,
    raw: RawValues | FieldData | None,
    previous: Mapping[str, FieldValue] | None,
    operation: Operation,
) -> Values:
    """
    Merge raw request values with previous values according to the operation.

    Args:
        schema (Schema): Field schema.
        raw (Mapping | FieldData | None): Supplied values; absence means not supplied.
        previous (Mapping | None): Last persisted values (update only; ignored on create).
        operation (Operation): CREATE or UPDATE.

    Returns:
        dict[str, FieldValue]: On create, an entry for every schema field. On update,
        supplied fields plus whatever `previous` held for the rest.

    Raises:
        PreconditionError: If schema is None.
        UnsupportedOperationError: If operation is not CREATE or UPDATE.
        ValidationError: Missing required fields (create) and values that fail to
            parse, all reported together.

    Examples:
        >>> from fieldrec.core.schema import FieldDescriptor, Schema
        >>> from fieldrec.core.values import FieldType
        >>> from fieldrec.core.reconcile import Operation, reconcile
        >>> s = Schema([
        ...     FieldDescriptor("username", FieldType.STRING, required=True),
        ...     FieldDescriptor("password", FieldType.STRING, default=""),
        ... ])
        >>> created = reconcile(s, {"username": "alice"}, None, Operation.CREATE)
        >>> created
        {'username': 'alice', 'password': ''}
        >>> reconcile(s, {"password": "hunter2"}, created, Operation.UPDATE)
        {'username': 'alice', 'password': 'hunter2'}
    """
    if schema is None:
        raise PreconditionError("schema is required")
    if operation not in (Operation.CREATE, Operation.UPDATE):
        raise UnsupportedOperationError(f"unsupported operation {operation!r}")

    data = _as_field_data(schema, raw)
    prev = previous or {}
    out: Values = {}
    violations: list[FieldViolation] = []

    for name, desc in schema.items():
        supplied = data.raw.get(name)
        if supplied is not None:
            try:
                out[name] = coerce(desc.type, supplied)
            except (TypeError, ValueError) as exc:
                violations.append(FieldViolation(name, str(exc)))
            continue

        if operation is Operation.CREATE:
            if desc.required and not desc.has_default:
                violations.append(FieldViolation(name, MISSING_REQUIRED))
                continue
            out[name] = desc.effective_default
        elif name in prev:
            out[name] = copy.copy(prev[name])

    if violations:
        raise ValidationError(violations)
    return out
