"""
Lightweight typing aliases used across the core engine and storage layer.

Provides minimal NewTypes and aliases to improve readability and static checks.
This module contains no runtime logic and is zero-IO.

Notes:
    - Intended for use in annotations across core, io, and users.
    - Keep the surface small and stable to avoid churn in dependents.

Examples:
    Use aliases in annotations.

    >>> from fieldrec.core.typing import FieldName, RawValues
    >>> def supplied(raw: RawValues, name: FieldName) -> bool:
    ...     return raw.get(name) is not None
    >>> supplied({"username": "alice"}, FieldName("username"))
    True
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import timedelta
from typing import Any, NewType, Union

__all__ = [
    "FieldName",
    "FieldValue",
    "RawValues",
    "Values",
    "JsonDict",
]

FieldName = NewType("FieldName", str)

# Tagged union of coerced field values; the FieldType of the descriptor is the tag.
FieldValue = Union[str, bool, int, timedelta, list[str]]

# What the caller supplied; absence of a key means "not supplied".
RawValues = Mapping[str, Any]

# Reconciled or previously persisted values keyed by schema field name.
Values = dict[str, FieldValue]

# Convenient JSON-like mapping alias. Kept intentionally broad for serde boundaries.
JsonDict = dict[str, Any]
