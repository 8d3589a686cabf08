"""
Frozen field descriptors and the ordered, immutable Schema mapping.

Notes:
    - A Schema is defined once at startup and never mutated; `extend` returns a
      new Schema.
    - Lookups are by exact name match (no case folding).
    - Defaults are coerced through the field's FieldType at construction, so a
      default that is not type-compatible fails early with SchemaError.
    - Zero-IO; stdlib only.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .errors import SchemaError
from .typing import FieldValue
from .values import FieldType, coerce, is_empty, zero_value

__all__ = [
    "FieldDescriptor",
    "Schema",
]


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Frozen descriptor for one schema field.

    Attributes:
        name (str): Field name, unique within a schema.
        type (FieldType): Value type tag.
        default (Any): Optional default; coerced through `type`. None means the
            type's zero value.
        required (bool): On create, the field must be supplied unless the
            default is non-empty.
        description (str): Human description (help text only).
        deprecated (bool): Field is a legacy alias kept for compatibility.

    Raises:
        SchemaError: If name is empty or default is not type-compatible.

    Examples:
        >>> from fieldrec.core.schema import FieldDescriptor
        >>> from fieldrec.core.values import FieldType
        >>> FieldDescriptor("ttl", FieldType.DURATION, default=60).default.total_seconds()
        60.0
    """

    name: str
    type: FieldType
    default: Any = None
    required: bool = False
    description: str = field(default="", compare=False)
    deprecated: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise SchemaError("field name must be non-empty")
        if not isinstance(self.type, FieldType):
            raise SchemaError(f"field {self.name!r} has unknown type {self.type!r}")
        if self.default is not None:
            try:
                coerced = coerce(self.type, self.default)
            except (TypeError, ValueError) as exc:
                raise SchemaError(
                    f"default for field {self.name!r} is not a {self.type.value}: {exc}"
                ) from exc
            object.__setattr__(self, "default", coerced)

    @property
    def effective_default(self) -> FieldValue:
        """The default, or the type's zero value; lists are copied per call."""
        if self.default is None:
            return zero_value(self.type)
        return copy.copy(self.default)

    @property
    def has_default(self) -> bool:
        """True when a non-empty default exists."""
        return not is_empty(self.default)


class Schema(Mapping[str, FieldDescriptor]):
    """
    Ordered mapping of field name -> FieldDescriptor.

    Iteration follows declaration order. Instances are immutable; the underlying
    mapping is exposed read-only.

    Raises:
        SchemaError: On duplicate field names.

    Examples:
        >>> from fieldrec.core.schema import FieldDescriptor, Schema
        >>> from fieldrec.core.values import FieldType
        >>> s = Schema([
        ...     FieldDescriptor("username", FieldType.STRING, required=True),
        ...     FieldDescriptor("password", FieldType.STRING, default=""),
        ... ])
        >>> list(s)
        ['username', 'password']
        >>> s.required_names()
        ['username']
    """

    __slots__ = ("_fields",)

    def __init__(self, descriptors: Iterable[FieldDescriptor]) -> None:
        fields: dict[str, FieldDescriptor] = {}
        for desc in descriptors:
            if desc.name in fields:
                raise SchemaError(f"duplicate field name {desc.name!r}")
            fields[desc.name] = desc
        self._fields = MappingProxyType(fields)

    def __getitem__(self, name: str) -> FieldDescriptor:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Schema({list(self._fields)!r})"

    def extend(self, descriptors: Iterable[FieldDescriptor]) -> Schema:
        """Return a new Schema with descriptors appended after the existing fields."""
        return Schema([*self._fields.values(), *descriptors])

    def required_names(self) -> list[str]:
        return [name for name, desc in self._fields.items() if desc.required]

    @classmethod
    def from_mapping(cls, fields: Mapping[str, FieldDescriptor]) -> Schema:
        """Build from a name -> descriptor mapping, checking keys match names."""
        for key, desc in fields.items():
            if key != desc.name:
                raise SchemaError(f"schema key {key!r} does not match field name {desc.name!r}")
        return cls(fields.values())
