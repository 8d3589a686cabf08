"""
Field types, value coercion, and the present/default accessor over raw request data.

Responsibilities
- Define FieldType, the tag of the field value union (string, bool, int, duration,
  string_list, cidr_list).
- Coerce loosely typed raw values (JSON/form input) into the tagged Python value.
- Provide FieldData, the two-method accessor (value_if_present / value_or_default)
  that keeps "not supplied" distinct from "supplied as empty".

Notes
- Zero-IO; stdlib only.
- Durations are held as datetime.timedelta; integers and digit strings are seconds,
  strings with a unit suffix (s, m, h, d) are parsed.
- A raw value of None is treated as not supplied.
"""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Iterable, Mapping
from datetime import timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any

from .errors import FieldViolation, PreconditionError, ValidationError
from .typing import FieldValue, RawValues

if TYPE_CHECKING:
    from .schema import FieldDescriptor, Schema

__all__ = [
    "FieldType",
    "coerce",
    "zero_value",
    "is_empty",
    "FieldData",
]


class FieldType(Enum):
    """
    Value types a schema field may declare.

    Serialized values are lower_snake and appear in schema descriptions.
    """

    STRING = "string"
    BOOL = "bool"
    INT = "int"
    DURATION = "duration"
    STRING_LIST = "string_list"
    CIDR_LIST = "cidr_list"


_TRUE = {"1", "t", "true", "y", "yes", "on"}
_FALSE = {"0", "f", "false", "n", "no", "off", ""}
_DURATION_RE = re.compile(r"(\d+)([smhd])")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


def _to_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    raise TypeError(f"cannot parse {value!r} as string")


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        lo = value.strip().lower()
        if lo in _TRUE:
            return True
        if lo in _FALSE:
            return False
    raise ValueError(f"cannot parse {value!r} as bool")


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("bool is not an int value")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(f"cannot parse {value!r} as int")


def _to_duration(value: Any) -> timedelta:
    try:
        return _parse_duration(value)
    except OverflowError as exc:
        raise ValueError(f"duration {value!r} is out of range") from exc


def _parse_duration(value: Any) -> timedelta:
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a duration")
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    if isinstance(value, str):
        s = value.strip().lower()
        if not s:
            return timedelta(0)
        if s.isdigit():
            return timedelta(seconds=int(s))
        parts = _DURATION_RE.findall(s)
        if not parts or "".join(n + u for n, u in parts) != s:
            raise ValueError(f"cannot parse {value!r} as duration")
        return timedelta(seconds=sum(int(n) * _UNIT_SECONDS[u] for n, u in parts))
    raise TypeError(f"cannot parse {value!r} as duration")


def _to_str_list(value: Any) -> list[str]:
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        raise TypeError(f"cannot parse {value!r} as a string list")
    out: list[str] = []
    for item in items:
        if not isinstance(item, str):
            raise TypeError(f"list item {item!r} is not a string")
        item = item.strip()
        if item:
            out.append(item)
    return out


def _to_cidr_list(value: Any) -> list[str]:
    out: list[str] = []
    for item in _to_str_list(value):
        # A bare address becomes a single-host network (/32 or /128).
        out.append(str(ipaddress.ip_network(item, strict=False)))
    return out


_COERCERS = {
    FieldType.STRING: _to_str,
    FieldType.BOOL: _to_bool,
    FieldType.INT: _to_int,
    FieldType.DURATION: _to_duration,
    FieldType.STRING_LIST: _to_str_list,
    FieldType.CIDR_LIST: _to_cidr_list,
}


def coerce(field_type: FieldType, value: Any) -> FieldValue:
    """
    Coerce a raw value into the Python value tagged by field_type.

    Args:
        field_type (FieldType): Declared type of the field.
        value (Any): Raw value as supplied (JSON scalar, list, or string).

    Returns:
        FieldValue: str, bool, int, timedelta, or list[str].

    Raises:
        ValueError: If the value has the right shape but does not parse.
        TypeError: If the value has the wrong shape for the type.

    Examples:
        >>> from fieldrec.core.values import FieldType, coerce
        >>> coerce(FieldType.STRING_LIST, "admin, ops")
        ['admin', 'ops']
        >>> coerce(FieldType.DURATION, "1h30m").total_seconds()
        5400.0
        >>> coerce(FieldType.CIDR_LIST, ["10.0.0.1"])
        ['10.0.0.1/32']
    """
    return _COERCERS[field_type](value)


def zero_value(field_type: FieldType) -> FieldValue:
    """Return the zero value for a field type (fresh list for list types)."""
    if field_type is FieldType.STRING:
        return ""
    if field_type is FieldType.BOOL:
        return False
    if field_type is FieldType.INT:
        return 0
    if field_type is FieldType.DURATION:
        return timedelta(0)
    return []


def is_empty(value: Any) -> bool:
    """True for None and for any value equal to its type's zero value."""
    if value is None:
        return True
    if isinstance(value, bool):
        return value is False
    if isinstance(value, timedelta):
        return value == timedelta(0)
    if isinstance(value, (str, int, list, tuple)):
        return not value
    return False


class FieldData:
    """
    Raw request values bound to a schema.

    The accessor pair `value_if_present` / `value_or_default` replaces untyped
    get-or-default lookups: both coerce through the field's FieldType and raise
    on names outside the schema.

    Attributes:
        schema (Schema): Field schema the raw values are interpreted against.
        raw (Mapping[str, Any]): Supplied values; None counts as absent.

    Examples:
        >>> from fieldrec.core.schema import FieldDescriptor, Schema
        >>> from fieldrec.core.values import FieldData, FieldType
        >>> schema = Schema([FieldDescriptor("password", FieldType.STRING, default="")])
        >>> data = FieldData(schema, {"password": ""})
        >>> data.is_present("password"), data.value_if_present("password")
        (True, '')
        >>> FieldData(schema, {}).value_if_present("password") is None
        True
    """

    def __init__(self, schema: Schema, raw: RawValues | None = None) -> None:
        if schema is None:
            raise PreconditionError("schema is required")
        self.schema = schema
        self.raw: Mapping[str, Any] = dict(raw or {})

    def _descriptor(self, name: str) -> FieldDescriptor:
        try:
            return self.schema[name]
        except KeyError:
            raise PreconditionError(f"field {name!r} is not in the schema") from None

    def is_present(self, name: str) -> bool:
        self._descriptor(name)
        return self.raw.get(name) is not None

    def present(self) -> frozenset[str]:
        """Schema field names explicitly supplied in this request."""
        return frozenset(n for n in self.schema if self.raw.get(n) is not None)

    def unknown_keys(self) -> list[str]:
        """Supplied keys that are not schema fields, sorted."""
        return sorted(k for k in self.raw if k not in self.schema)

    def value_if_present(self, name: str) -> FieldValue | None:
        """
        Coerced value if the field was supplied, else None.

        Raises:
            PreconditionError: If name is not a schema field.
            ValidationError: If the supplied value does not parse as the field type.
        """
        desc = self._descriptor(name)
        raw = self.raw.get(name)
        if raw is None:
            return None
        try:
            return coerce(desc.type, raw)
        except (TypeError, ValueError) as exc:
            raise ValidationError([FieldViolation(name, str(exc))]) from exc

    def value_or_default(self, name: str) -> FieldValue:
        """Coerced supplied value, else the field's default (or type zero value)."""
        value = self.value_if_present(name)
        if value is None:
            return self._descriptor(name).effective_default
        return value
