"""
RecordBinder: the write and read paths of one record type.

Write: raw request -> reconcile (merge with the record's current values)
-> alias write rule -> project onto the record.
Read: extract bound values -> alias back-fill.

Callers own storage and locking; the binder only transforms values and records.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Generic

from .aliases import AliasPair, AliasResolver
from .errors import PreconditionError
from .project import NameDifference, Projector, RecordT
from .reconcile import Operation, reconcile
from .schema import Schema
from .typing import RawValues, Values
from .values import FieldData

__all__ = ["RecordBinder"]


class RecordBinder(Generic[RecordT]):
    """
    Bind a schema, its alias pairs, and a record model together.

    Args:
        schema (Schema): Field schema.
        record_type (type[BaseModel]): Pydantic record model.
        aliases (Iterable[AliasPair]): Canonical/legacy field pairs.
        differences (Iterable[NameDifference]): Schema name -> record key overrides.
        unbound (Iterable[str]): Schema fields not stored on the record.
    """

    def __init__(
        self,
        schema: Schema,
        record_type: type[RecordT],
        aliases: Iterable[AliasPair] = (),
        differences: Iterable[NameDifference] = (),
        unbound: Iterable[str] = (),
    ) -> None:
        if schema is None:
            raise PreconditionError("schema is required")
        self.schema = schema
        self.record_type = record_type
        self.resolver = AliasResolver(schema, aliases)
        self.projector: Projector[RecordT] = Projector(schema, record_type, differences, unbound)

    def field_data(self, raw: RawValues | None) -> FieldData:
        return FieldData(self.schema, raw)

    def write(
        self, target: RecordT, operation: Operation, raw: RawValues | FieldData | None
    ) -> RecordT:
        """
        Apply one create/update request to target in place.

        Raises:
            ValidationError: Missing required fields or unparseable values; target is
                left unchanged.
            UnsupportedOperationError: operation is not CREATE or UPDATE.
            ProjectionError: Values could not be bound onto the record.
        """
        data = raw if isinstance(raw, FieldData) else self.field_data(raw)
        previous = self.projector.extract(target) if operation is Operation.UPDATE else None
        values = reconcile(self.schema, data, previous, operation)
        supplied = data.present()
        resolution = self.resolver.apply_write(values, supplied)
        return self.projector.project(
            target, operation, resolution.values, supplied | resolution.touched
        )

    def read(self, target: RecordT) -> Values:
        """Bound values of target with legacy/canonical pairs back-filled."""
        return self.resolver.back_fill(self.projector.extract(target))
