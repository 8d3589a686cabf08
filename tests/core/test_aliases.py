from __future__ import annotations

from datetime import timedelta

import pytest

from fieldrec.core.aliases import AliasPair, AliasResolver
from fieldrec.core.errors import SchemaError
from fieldrec.core.reconcile import Operation, reconcile
from fieldrec.core.schema import FieldDescriptor, Schema
from fieldrec.core.values import FieldType

SCHEMA = Schema(
    [
        FieldDescriptor("token_policies", FieldType.STRING_LIST),
        FieldDescriptor("policies", FieldType.STRING_LIST, deprecated=True),
        FieldDescriptor("token_ttl", FieldType.DURATION),
        FieldDescriptor("ttl", FieldType.DURATION, deprecated=True),
    ]
)
PAIRS = [AliasPair("token_policies", "policies"), AliasPair("token_ttl", "ttl")]


@pytest.fixture()
def resolver() -> AliasResolver:
    return AliasResolver(SCHEMA, PAIRS)


def _write(resolver: AliasResolver, previous: dict | None, raw: dict) -> dict:
    op = Operation.CREATE if previous is None else Operation.UPDATE
    values = reconcile(SCHEMA, raw, previous, op)
    return resolver.apply_write(values, raw.keys()).values


def test_legacy_write_converges_on_canonical(resolver: AliasResolver) -> None:
    stored = _write(resolver, None, {"policies": ["admin"]})
    assert stored["token_policies"] == ["admin"]
    assert stored["policies"] == []
    view = resolver.back_fill(stored)
    assert view["policies"] == ["admin"]
    assert view["token_policies"] == ["admin"]


def test_canonical_write_clears_legacy(resolver: AliasResolver) -> None:
    stored = _write(resolver, None, {"policies": ["admin"]})
    stored = _write(resolver, stored, {"token_policies": ["ops"]})
    assert stored["token_policies"] == ["ops"]
    assert stored["policies"] == []
    assert resolver.back_fill(stored)["policies"] == ["ops"]


def test_canonical_wins_when_both_supplied(resolver: AliasResolver) -> None:
    stored = _write(resolver, None, {"token_policies": ["ops"], "policies": ["admin"]})
    assert stored["token_policies"] == ["ops"]
    assert stored["policies"] == []


def test_neither_supplied_leaves_both_untouched(resolver: AliasResolver) -> None:
    legacy_record = {
        "token_policies": [],
        "policies": ["old"],
        "token_ttl": timedelta(0),
        "ttl": timedelta(0),
    }
    res = resolver.apply_write(legacy_record, [])
    assert res.values == legacy_record
    assert res.touched == frozenset()


def test_pairs_are_independent(resolver: AliasResolver) -> None:
    stored = _write(resolver, None, {"policies": ["a"], "token_ttl": 60})
    assert stored["token_policies"] == ["a"]
    assert stored["policies"] == []
    assert stored["token_ttl"] == timedelta(seconds=60)
    assert stored["ttl"] == timedelta(0)


def test_apply_write_is_idempotent(resolver: AliasResolver) -> None:
    values = reconcile(SCHEMA, {"ttl": 30}, None, Operation.CREATE)
    once = resolver.apply_write(values, {"ttl"}).values
    twice = resolver.apply_write(once, ()).values
    assert once == twice


def test_touched_reports_changed_fields(resolver: AliasResolver) -> None:
    values = reconcile(SCHEMA, {"ttl": 30}, None, Operation.CREATE)
    assert resolver.apply_write(values, {"ttl"}).touched == {"token_ttl", "ttl"}
    assert resolver.apply_write(values, {"token_ttl"}).touched == {"ttl"}


def test_back_fill_prefers_canonical_and_does_not_mutate(resolver: AliasResolver) -> None:
    stored = {"token_policies": ["new"], "policies": ["old"]}
    view = resolver.back_fill(stored)
    assert view["policies"] == ["new"]
    assert stored["policies"] == ["old"]


def test_back_fill_of_untouched_legacy_record(resolver: AliasResolver) -> None:
    view = resolver.back_fill({"ttl": timedelta(seconds=5)})
    assert view["token_ttl"] == timedelta(seconds=5)
    assert view["ttl"] == timedelta(seconds=5)


def test_apply_write_does_not_mutate_input(resolver: AliasResolver) -> None:
    values = reconcile(SCHEMA, {"policies": ["a"]}, None, Operation.CREATE)
    resolver.apply_write(values, {"policies"})
    assert values["policies"] == ["a"]


def test_invalid_pairs_rejected() -> None:
    with pytest.raises(SchemaError):
        AliasResolver(SCHEMA, [AliasPair("token_policies", "missing")])
    with pytest.raises(SchemaError):
        AliasResolver(SCHEMA, [AliasPair("token_policies", "ttl")])
    with pytest.raises(SchemaError):
        AliasResolver(
            SCHEMA,
            [AliasPair("token_policies", "policies"), AliasPair("policies", "token_policies")],
        )
