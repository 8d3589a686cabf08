from __future__ import annotations

from datetime import timedelta

import pytest

from fieldrec.core.errors import (
    PreconditionError,
    UnsupportedOperationError,
    ValidationError,
)
from fieldrec.core.reconcile import Operation, reconcile
from fieldrec.core.schema import FieldDescriptor, Schema
from fieldrec.core.values import FieldData, FieldType

USER = Schema(
    [
        FieldDescriptor("username", FieldType.STRING, required=True),
        FieldDescriptor("password", FieldType.STRING, default=""),
    ]
)

WIDE = Schema(
    [
        FieldDescriptor("name", FieldType.STRING, required=True),
        FieldDescriptor("region", FieldType.STRING, required=True),
        FieldDescriptor("zone", FieldType.STRING, required=True, default="a"),
        FieldDescriptor("enabled", FieldType.BOOL),
        FieldDescriptor("retries", FieldType.INT, default=3),
        FieldDescriptor("ttl", FieldType.DURATION),
        FieldDescriptor("tags", FieldType.STRING_LIST),
    ]
)


def test_create_fills_defaults_for_missing_fields() -> None:
    assert reconcile(USER, {"username": "alice"}, None, Operation.CREATE) == {
        "username": "alice",
        "password": "",
    }


def test_create_without_required_field_names_it() -> None:
    with pytest.raises(ValidationError) as ei:
        reconcile(USER, {}, None, Operation.CREATE)
    assert ei.value.fields == ("username",)
    assert "username" in str(ei.value)


def test_create_aggregates_every_missing_required_field() -> None:
    with pytest.raises(ValidationError) as ei:
        reconcile(WIDE, {"ttl": "never"}, None, Operation.CREATE)
    err = ei.value
    assert err.missing == ("name", "region")
    # type failures land in the same report
    assert set(err.fields) == {"name", "region", "ttl"}
    for name in ("name", "region", "ttl"):
        assert name in str(err)


@pytest.mark.parametrize("ttl", [10**20, float("inf"), "99999999999999999"])
def test_out_of_range_duration_is_reported_with_other_violations(ttl) -> None:
    with pytest.raises(ValidationError) as ei:
        reconcile(WIDE, {"region": "eu", "ttl": ttl}, None, Operation.CREATE)
    assert ei.value.fields == ("name", "ttl")
    assert ei.value.missing == ("name",)


@pytest.mark.parametrize(
    "raw",
    [
        {"name": "n", "region": "r"},
        {"name": "n", "region": "r", "enabled": True, "tags": "x,y"},
        {"name": "n", "region": "r", "zone": "b", "retries": 0, "ttl": 5},
    ],
)
def test_create_is_complete(raw: dict) -> None:
    out = reconcile(WIDE, raw, None, Operation.CREATE)
    assert set(out) == set(WIDE)


def test_create_required_field_satisfied_by_default() -> None:
    out = reconcile(WIDE, {"name": "n", "region": "r"}, None, Operation.CREATE)
    assert out["zone"] == "a"
    assert out["retries"] == 3
    assert out["ttl"] == timedelta(0)
    assert out["tags"] == []


def test_create_ignores_previous_values() -> None:
    out = reconcile(USER, {"username": "bob"}, {"password": "old"}, Operation.CREATE)
    assert out["password"] == ""


def test_update_only_overwrites_supplied_fields() -> None:
    previous = {"username": "alice", "password": ""}
    assert reconcile(USER, {"password": "hunter2"}, previous, Operation.UPDATE) == {
        "username": "alice",
        "password": "hunter2",
    }
    assert reconcile(USER, {}, previous, Operation.UPDATE) == previous


def test_update_never_defaults_and_never_requires() -> None:
    out = reconcile(WIDE, {"enabled": False}, {"name": "n"}, Operation.UPDATE)
    assert out == {"name": "n", "enabled": False}


def test_update_supplied_empty_is_not_absent() -> None:
    out = reconcile(USER, {"password": ""}, {"username": "a", "password": "x"}, Operation.UPDATE)
    assert out["password"] == ""


def test_update_does_not_mutate_previous() -> None:
    previous = {"name": "n", "tags": ["a"]}
    out = reconcile(WIDE, {}, previous, Operation.UPDATE)
    out["tags"].append("b")
    assert previous["tags"] == ["a"]


def test_accepts_field_data() -> None:
    data = FieldData(USER, {"username": "carol"})
    assert reconcile(USER, data, None, Operation.CREATE)["username"] == "carol"
    with pytest.raises(PreconditionError):
        reconcile(WIDE, data, None, Operation.CREATE)


@pytest.mark.parametrize("op", [Operation.READ, Operation.DELETE, Operation.LIST])
def test_other_operations_are_unsupported(op: Operation) -> None:
    with pytest.raises(UnsupportedOperationError):
        reconcile(USER, {"username": "x"}, None, op)


def test_missing_schema_is_precondition_error() -> None:
    with pytest.raises(PreconditionError):
        reconcile(None, {}, None, Operation.CREATE)  # type: ignore[arg-type]
