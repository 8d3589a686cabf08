"""
User entry record, request schema, and the legacy field bindings.

Stored user documents carry the canonical ``token_*`` fields plus the pre-rename
fields under their historical keys (``Policies``, ``TTL``, ``MaxTTL``,
``BoundCIDRs``). The schema exposes the legacy fields under their request names
(``policies``, ``ttl``, ...); NameDifference entries bind those names to the
historical record keys, and AliasPair entries fold them onto the token fields.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from pydantic import Field, field_validator

from fieldrec.core.aliases import AliasPair
from fieldrec.core.project import NameDifference
from fieldrec.core.schema import FieldDescriptor, Schema
from fieldrec.core.values import FieldType

from .tokens import TOKEN_FIELDS, TokenParams, deprecation_text, parse_policies

__all__ = [
    "UserEntry",
    "USER_SCHEMA",
    "USER_ALIASES",
    "USER_NAME_DIFFERENCES",
    "USER_UNBOUND",
]


class UserEntry(TokenParams):
    """
    Persisted user record.

    Attributes:
        password_hash (str): Encoded password hash (see fieldrec.users.passwords).
        policies (list[str]): Legacy policy list; cleared once written through
            ``token_policies``.
        ttl (timedelta): Legacy lease duration.
        max_ttl (timedelta): Legacy maximum lifetime.
        bound_cidrs (list[str]): Legacy allowed source networks.

    Notes:
        Legacy fields keep their historical serialized keys so documents written
        before the rename still load.
    """

    password_hash: str = Field(default="", alias="PasswordHash")
    policies: list[str] = Field(default_factory=list, alias="Policies")
    ttl: timedelta = Field(default=timedelta(0), alias="TTL")
    max_ttl: timedelta = Field(default=timedelta(0), alias="MaxTTL")
    bound_cidrs: list[str] = Field(default_factory=list, alias="BoundCIDRs")

    @field_validator("policies", mode="before")
    @classmethod
    def _normalize_policies(cls, v: Any) -> list[str]:
        return parse_policies(v)


USER_SCHEMA = Schema(
    [
        FieldDescriptor("username", FieldType.STRING, required=True, description="Username."),
        FieldDescriptor(
            "password", FieldType.STRING, required=True, description="Password for this user."
        ),
        FieldDescriptor(
            "policies",
            FieldType.STRING_LIST,
            description=deprecation_text("token_policies"),
            deprecated=True,
        ),
        FieldDescriptor(
            "ttl", FieldType.DURATION, description=deprecation_text("token_ttl"), deprecated=True
        ),
        FieldDescriptor(
            "max_ttl",
            FieldType.DURATION,
            description=deprecation_text("token_max_ttl"),
            deprecated=True,
        ),
        FieldDescriptor(
            "bound_cidrs",
            FieldType.CIDR_LIST,
            description=deprecation_text("token_bound_cidrs"),
            deprecated=True,
        ),
    ]
).extend(TOKEN_FIELDS)

USER_ALIASES: tuple[AliasPair, ...] = (
    AliasPair("token_policies", "policies"),
    AliasPair("token_ttl", "ttl"),
    AliasPair("token_max_ttl", "max_ttl"),
    AliasPair("token_bound_cidrs", "bound_cidrs"),
)

USER_NAME_DIFFERENCES: tuple[NameDifference, ...] = (
    NameDifference("policies", "Policies"),
    NameDifference("ttl", "TTL"),
    NameDifference("max_ttl", "MaxTTL"),
    NameDifference("bound_cidrs", "BoundCIDRs"),
)

# Username is the storage key; the password is hashed before it reaches the record.
USER_UNBOUND: tuple[str, ...] = ("username", "password")
