from __future__ import annotations

from datetime import timedelta

import pytest

from fieldrec.core.aliases import AliasResolver
from fieldrec.users.entry import USER_ALIASES, USER_SCHEMA, UserEntry
from fieldrec.users.passwords import hash_password, verify_password
from fieldrec.users.tokens import TOKEN_FIELDS, TokenParams, parse_policies, populate_token_data


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, []),
        ("", []),
        ("b,a,B", ["a", "b"]),
        ([" Ops ", "dev", "dev"], ["dev", "ops"]),
        (["admin", "root"], ["root"]),
    ],
)
def test_parse_policies(raw, expected) -> None:
    assert parse_policies(raw) == expected


def test_token_params_normalize_policies_on_validation() -> None:
    params = TokenParams.model_validate({"token_policies": ["B", "a"]})
    assert params.token_policies == ["a", "b"]


def test_populate_token_data_renders_seconds() -> None:
    params = TokenParams(token_ttl=timedelta(minutes=2), token_bound_cidrs=["10.0.0.0/8"])
    data = populate_token_data(params, {"extra": 1})
    assert data["extra"] == 1
    assert data["token_ttl"] == 120
    assert data["token_max_ttl"] == 0
    assert data["token_bound_cidrs"] == ["10.0.0.0/8"]


def test_user_schema_contains_token_fields_and_aliases_are_valid() -> None:
    for desc in TOKEN_FIELDS:
        assert desc.name in USER_SCHEMA
    assert USER_SCHEMA.required_names() == ["username", "password"]
    AliasResolver(USER_SCHEMA, USER_ALIASES)
    for pair in USER_ALIASES:
        assert USER_SCHEMA[pair.legacy].deprecated
        assert pair.canonical in USER_SCHEMA[pair.legacy].description


def test_user_entry_serializes_legacy_fields_under_historical_keys() -> None:
    entry = UserEntry(policies=["x"], ttl=timedelta(seconds=5))
    dumped = entry.model_dump(by_alias=True)
    assert dumped["Policies"] == ["x"]
    assert dumped["TTL"] == timedelta(seconds=5)
    assert "token_policies" in dumped
    assert UserEntry.model_validate(dumped) == entry


def test_password_hash_round_trip() -> None:
    encoded = hash_password("s3cret", rounds=4)
    assert encoded.startswith("$2b$04$")
    assert verify_password("s3cret", encoded)
    assert not verify_password("S3cret", encoded)
    # salts differ per call
    assert hash_password("s3cret", rounds=4) != encoded


def test_passwords_over_72_bytes_are_rejected() -> None:
    with pytest.raises(ValueError):
        hash_password("x" * 73, rounds=4)
    # multi-byte characters count by encoded length
    with pytest.raises(ValueError):
        hash_password("é" * 37, rounds=4)
    assert verify_password("x" * 73, hash_password("x" * 72, rounds=4)) is False


@pytest.mark.parametrize(
    "bad", ["", "plain", "$2b$04$tooshort", "pbkdf2_sha256$1$00$00", "ünïcode"]
)
def test_verify_password_rejects_malformed_hashes(bad: str) -> None:
    assert verify_password("anything", bad) is False
