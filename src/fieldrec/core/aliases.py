"""
Alias Resolver: one precedence rule for every renamed (deprecated) field.

When a field is renamed (e.g. ``policies`` -> ``token_policies``) records written
under the old name must keep working. Every AliasPair follows the same rule,
evaluated independently per pair:

Write (normalizes onto the canonical name)
    1. canonical supplied: keep it; clear the legacy value.
    2. only legacy supplied: copy legacy into canonical; clear the legacy value.
    3. neither supplied: leave both untouched.

Read (back-fills, never mutates)
    The effective value is the canonical value when non-empty, else the legacy
    value; it is surfaced under both names.

Notes:
    - Once a record is written through the new name it converges permanently on
      the canonical field; untouched records keep reading through back-fill.
    - Zero-IO; stdlib only.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .errors import SchemaError
from .schema import Schema
from .typing import FieldValue, Values
from .values import is_empty, zero_value

__all__ = [
    "AliasPair",
    "AliasResolution",
    "AliasResolver",
]


@dataclass(frozen=True)
class AliasPair:
    """A canonical field name and the deprecated name it replaced."""

    canonical: str
    legacy: str


@dataclass(frozen=True)
class AliasResolution:
    """
    Result of applying the write rule.

    Attributes:
        values (dict[str, FieldValue]): Values after normalization.
        touched (frozenset[str]): Fields the rule changed beyond what was supplied;
            callers that only write supplied fields on update must write these too.
    """

    values: Values
    touched: frozenset[str]


class AliasResolver:
    """
    Apply the alias precedence rule to every pair of a schema.

    Args:
        schema (Schema): Schema that declares both names of every pair.
        pairs (Iterable[AliasPair]): Canonical/legacy pairs.

    Raises:
        SchemaError: If a name is missing from the schema, the two fields of a pair
            have different types, or a name appears in more than one pair.

    Examples:
        >>> from fieldrec.core.schema import FieldDescriptor, Schema
        >>> from fieldrec.core.values import FieldType
        >>> from fieldrec.core.aliases import AliasPair, AliasResolver
        >>> s = Schema([
        ...     FieldDescriptor("token_policies", FieldType.STRING_LIST),
        ...     FieldDescriptor("policies", FieldType.STRING_LIST, deprecated=True),
        ... ])
        >>> r = AliasResolver(s, [AliasPair("token_policies", "policies")])
        >>> res = r.apply_write({"token_policies": [], "policies": ["admin"]}, {"policies"})
        >>> res.values
        {'token_policies': ['admin'], 'policies': []}
        >>> r.back_fill(res.values)["policies"]
        ['admin']
    """

    def __init__(self, schema: Schema, pairs: Iterable[AliasPair] = ()) -> None:
        self.schema = schema
        self.pairs: tuple[AliasPair, ...] = tuple(pairs)
        seen: set[str] = set()
        for pair in self.pairs:
            for name in (pair.canonical, pair.legacy):
                if name not in schema:
                    raise SchemaError(f"alias field {name!r} is not in the schema")
                if name in seen:
                    raise SchemaError(f"field {name!r} appears in more than one alias pair")
                seen.add(name)
            if schema[pair.canonical].type is not schema[pair.legacy].type:
                raise SchemaError(
                    f"alias pair {pair.canonical!r}/{pair.legacy!r} has mismatched types"
                )

    def _zero(self, name: str) -> FieldValue:
        return zero_value(self.schema[name].type)

    def apply_write(
        self, values: Mapping[str, FieldValue], supplied: Iterable[str]
    ) -> AliasResolution:
        """
        Normalize a reconciled value set onto canonical names.

        Args:
            values (Mapping[str, FieldValue]): Reconciled values (not mutated).
            supplied (Iterable[str]): Field names explicitly supplied in this write.

        Returns:
            AliasResolution: New values plus the set of fields the rule changed.
        """
        given = frozenset(supplied)
        out: Values = dict(values)
        touched: set[str] = set()
        for pair in self.pairs:
            if pair.canonical in given:
                out[pair.legacy] = self._zero(pair.legacy)
                touched.add(pair.legacy)
            elif pair.legacy in given:
                out[pair.canonical] = copy.copy(out.get(pair.legacy, self._zero(pair.legacy)))
                out[pair.legacy] = self._zero(pair.legacy)
                touched.update((pair.canonical, pair.legacy))
        return AliasResolution(values=out, touched=frozenset(touched))

    def effective(self, values: Mapping[str, FieldValue], pair: AliasPair) -> FieldValue | None:
        """Canonical value when non-empty, else the legacy value (may be None)."""
        canonical = values.get(pair.canonical)
        if not is_empty(canonical):
            return canonical
        legacy = values.get(pair.legacy)
        if not is_empty(legacy):
            return legacy
        return canonical

    def back_fill(self, values: Mapping[str, FieldValue]) -> Values:
        """Return a read view exposing the effective value under both names of every pair."""
        out: Values = dict(values)
        for pair in self.pairs:
            value = self.effective(values, pair)
            if value is None:
                continue
            out[pair.canonical] = copy.copy(value)
            out[pair.legacy] = copy.copy(value)
        return out
