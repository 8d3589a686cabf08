"""
Bound-Object Projector: bind a flat reconciled value set onto a typed record.

Records are Pydantic v2 models. The binding between schema field names and record
keys is an explicit table built once per (schema, record type) at startup; a
schema name maps to the record key of the same name unless a NameDifference
overrides it (e.g. schema ``user_dn`` bound to record key ``userdn``).

Projection
- serialize the target to a flat mapping keyed by record keys (model_dump by alias);
- create: overwrite every bound key with the reconciled value, zero values included;
- update: overwrite only keys whose schema field was explicitly supplied;
- validate the patched mapping and repopulate the same target instance.

Notes
- Record keys are the keys model_dump(by_alias=True) produces (``serialization_alias``,
  else ``alias``, else the attribute name). Before re-validation each key is renamed
  to the one model_validate accepts, so models whose validation and serialization
  aliases differ keep unsupplied fields. A NameDifference may name either key.
- A schema field with no record key is a SchemaError at construction, unless it
  is listed in ``unbound`` (e.g. a password that is hashed by the caller).
- Zero-IO (stdlib + pydantic only).
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import AliasChoices, BaseModel
from pydantic import ValidationError as PydanticValidationError
from pydantic.fields import FieldInfo
from pydantic_core import PydanticSerializationError

from .errors import PreconditionError, ProjectionError, SchemaError, UnsupportedOperationError
from .reconcile import Operation
from .schema import Schema
from .typing import FieldValue, Values

__all__ = [
    "NameDifference",
    "FieldBinding",
    "Projector",
]

RecordT = TypeVar("RecordT", bound=BaseModel)


@dataclass(frozen=True)
class NameDifference:
    """A schema field whose record key differs from its schema name."""

    schema_name: str
    record_key: str


@dataclass(frozen=True)
class FieldBinding:
    """
    One row of the binding table.

    Attributes:
        schema_name (str): Schema field name.
        record_key (str): Key of the field in the record's serialized form.
        attribute (str): Python attribute name on the record model.
    """

    schema_name: str
    record_key: str
    attribute: str


def _load_key(record_type: type[BaseModel], attr: str, info: FieldInfo) -> str:
    """Key under which model_validate accepts a field's value."""
    if record_type.model_config.get("validate_by_alias") is False:
        return attr
    alias = info.validation_alias
    if alias is None:
        return info.alias or attr
    if isinstance(alias, str):
        return alias
    if isinstance(alias, AliasChoices):
        for choice in alias.choices:
            if isinstance(choice, str):
                return choice
    raise SchemaError(
        f"field {attr!r} on {record_type.__name__} has no plain validation key: {alias!r}"
    )


def _record_keys(record_type: type[BaseModel]) -> dict[str, tuple[str, str]]:
    """Map serialized record key -> (attribute name, validation key) for a Pydantic model."""
    keys: dict[str, tuple[str, str]] = {}
    for attr, info in record_type.model_fields.items():
        dump_key = info.serialization_alias or info.alias or attr
        keys[dump_key] = (attr, _load_key(record_type, attr, info))
    return keys


class Projector(Generic[RecordT]):
    """
    Project reconciled values onto instances of one record type.

    Args:
        schema (Schema): Field schema.
        record_type (type[BaseModel]): Pydantic record model.
        differences (Iterable[NameDifference]): Overrides of the verbatim name mapping.
        unbound (Iterable[str]): Schema fields intentionally not stored on the record.

    Raises:
        SchemaError: If a difference names an unknown schema field or record key, or a
            schema field has no record key and is not listed in ``unbound``.

    Examples:
        >>> from pydantic import BaseModel, Field
        >>> from fieldrec.core.schema import FieldDescriptor, Schema
        >>> from fieldrec.core.values import FieldType
        >>> from fieldrec.core.project import NameDifference, Projector
        >>> from fieldrec.core.reconcile import Operation
        >>> class Conf(BaseModel):
        ...     url: str = ""
        ...     user_dn: str = Field(default="", alias="userdn")
        >>> s = Schema([
        ...     FieldDescriptor("url", FieldType.STRING),
        ...     FieldDescriptor("user_dn", FieldType.STRING),
        ... ])
        >>> p = Projector(s, Conf, [NameDifference("user_dn", "userdn")])
        >>> conf = Conf()
        >>> p.project(conf, Operation.UPDATE, {"user_dn": "cn=x"}) is conf
        True
        >>> conf.user_dn
        'cn=x'
    """

    def __init__(
        self,
        schema: Schema,
        record_type: type[RecordT],
        differences: Iterable[NameDifference] = (),
        unbound: Iterable[str] = (),
    ) -> None:
        if schema is None:
            raise PreconditionError("schema is required")
        self.schema = schema
        self.record_type = record_type
        keys = _record_keys(record_type)
        self._load_keys: dict[str, str] = {dump: load for dump, (_, load) in keys.items()}
        # a record key may be named by its serialized or its validation key
        accepted = {load: dump for dump, (_, load) in keys.items()}
        accepted.update({dump: dump for dump in keys})

        overrides: dict[str, str] = {}
        for diff in differences:
            if diff.schema_name not in schema:
                raise SchemaError(f"name difference for unknown field {diff.schema_name!r}")
            if diff.schema_name in overrides:
                raise SchemaError(f"duplicate name difference for {diff.schema_name!r}")
            overrides[diff.schema_name] = diff.record_key

        skipped = frozenset(unbound)
        bindings: list[FieldBinding] = []
        for name in schema:
            if name in skipped:
                continue
            key = overrides.get(name, name)
            if key not in accepted:
                raise SchemaError(
                    f"field {name!r} has no record key {key!r} on {record_type.__name__}"
                )
            dump_key = accepted[key]
            bindings.append(FieldBinding(name, dump_key, keys[dump_key][0]))
        self.bindings: tuple[FieldBinding, ...] = tuple(bindings)

    def record_key(self, schema_name: str) -> str:
        for binding in self.bindings:
            if binding.schema_name == schema_name:
                return binding.record_key
        raise KeyError(schema_name)

    def extract(self, target: RecordT) -> Values:
        """
        Read the bound fields of a record, keyed by schema name.

        Fields holding None are omitted so they read as "absent" on update.
        """
        out: Values = {}
        for binding in self.bindings:
            value = getattr(target, binding.attribute)
            if value is not None:
                out[binding.schema_name] = copy.copy(value)
        return out

    def project(
        self,
        target: RecordT,
        operation: Operation,
        values: Mapping[str, FieldValue],
        supplied: Iterable[str] | None = None,
    ) -> RecordT:
        """
        Patch target in place with values and return the same instance.

        Args:
            target (BaseModel): Record instance to repopulate.
            operation (Operation): CREATE or UPDATE.
            values (Mapping[str, FieldValue]): Values keyed by schema name.
            supplied (Iterable[str] | None): Schema names explicitly supplied; on update
                only these are written. Defaults to every key of ``values``.

        Returns:
            BaseModel: ``target``, repopulated.

        Raises:
            PreconditionError: If target is None.
            UnsupportedOperationError: If operation is not CREATE or UPDATE.
            ProjectionError: If serialization, validation, or repopulation fails.
        """
        if target is None:
            raise PreconditionError("a target record is required")
        if operation not in (Operation.CREATE, Operation.UPDATE):
            raise UnsupportedOperationError(f"unsupported operation {operation!r}")
        write = frozenset(values if supplied is None else supplied)

        try:
            flat = target.model_dump(by_alias=True)
        except PydanticSerializationError as exc:
            raise ProjectionError(f"cannot serialize {type(target).__name__}: {exc}") from exc

        for binding in self.bindings:
            if binding.schema_name not in values:
                continue
            if operation is Operation.CREATE or binding.schema_name in write:
                flat[binding.record_key] = copy.copy(values[binding.schema_name])

        try:
            loadable = {self._load_keys.get(key, key): value for key, value in flat.items()}
            patched = type(target).model_validate(loadable)
            for attr in type(target).model_fields:
                setattr(target, attr, getattr(patched, attr))
        except PydanticValidationError as exc:
            raise ProjectionError(f"cannot populate {type(target).__name__}: {exc}") from exc
        return target
