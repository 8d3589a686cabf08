"""
Token parameter fields shared by credential entries.

Defines the canonical ``token_*`` schema fields, the TokenParams record mixin that
stores them, and the response rendering used on read.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fieldrec.core.schema import FieldDescriptor
from fieldrec.core.values import FieldType

__all__ = [
    "TOKEN_FIELDS",
    "TokenParams",
    "parse_policies",
    "populate_token_data",
    "deprecation_text",
]


def deprecation_text(canonical: str) -> str:
    return (
        f"Deprecated. Use {canonical!r} instead. If this and {canonical!r} are both "
        f"specified, only {canonical!r} will be used."
    )


TOKEN_FIELDS: tuple[FieldDescriptor, ...] = (
    FieldDescriptor(
        "token_policies",
        FieldType.STRING_LIST,
        description="Comma-separated list of policies attached to issued tokens.",
    ),
    FieldDescriptor(
        "token_ttl", FieldType.DURATION, description="Initial lease duration of issued tokens."
    ),
    FieldDescriptor(
        "token_max_ttl", FieldType.DURATION, description="Maximum lifetime of issued tokens."
    ),
    FieldDescriptor(
        "token_explicit_max_ttl",
        FieldType.DURATION,
        description="Hard cap on token lifetime regardless of renewals.",
    ),
    FieldDescriptor(
        "token_period", FieldType.DURATION, description="Renewal period of periodic tokens."
    ),
    FieldDescriptor(
        "token_num_uses", FieldType.INT, description="Maximum number of uses; 0 is unlimited."
    ),
    FieldDescriptor(
        "token_no_default_policy",
        FieldType.BOOL,
        description="Do not attach the default policy to issued tokens.",
    ),
    FieldDescriptor(
        "token_bound_cidrs",
        FieldType.CIDR_LIST,
        description="Network ranges that issued tokens may be used from.",
    ),
)


def parse_policies(policies: Any) -> list[str]:
    """
    Normalize a policy list: trim, lower-case, drop empties, de-duplicate, sort.

    A list containing "root" collapses to ["root"].

    Examples:
        >>> parse_policies(["Ops", " admin", "ops", ""])
        ['admin', 'ops']
        >>> parse_policies("dev,root")
        ['root']
    """
    if policies is None:
        return []
    if isinstance(policies, str):
        policies = policies.split(",")
    out = sorted({p.strip().lower() for p in policies if p and p.strip()})
    if "root" in out:
        return ["root"]
    return out


class TokenParams(BaseModel):
    """
    Stored token parameters (canonical ``token_*`` fields).

    Attributes:
        token_policies (list[str]): Normalized policy names.
        token_ttl (timedelta): Initial lease duration.
        token_max_ttl (timedelta): Maximum lifetime.
        token_explicit_max_ttl (timedelta): Hard lifetime cap.
        token_period (timedelta): Periodic renewal interval.
        token_num_uses (int): Use limit (0 is unlimited).
        token_no_default_policy (bool): Skip the default policy.
        token_bound_cidrs (list[str]): Allowed source networks (CIDR text).
    """

    model_config = ConfigDict(populate_by_name=True)

    token_policies: list[str] = Field(default_factory=list)
    token_ttl: timedelta = timedelta(0)
    token_max_ttl: timedelta = timedelta(0)
    token_explicit_max_ttl: timedelta = timedelta(0)
    token_period: timedelta = timedelta(0)
    token_num_uses: int = 0
    token_no_default_policy: bool = False
    token_bound_cidrs: list[str] = Field(default_factory=list)

    @field_validator("token_policies", mode="before")
    @classmethod
    def _normalize_token_policies(cls, v: Any) -> list[str]:
        return parse_policies(v)


def _seconds(value: timedelta) -> int:
    return int(value.total_seconds())


def populate_token_data(params: TokenParams, data: dict[str, Any]) -> dict[str, Any]:
    """Render token parameters into a response mapping (durations in seconds)."""
    data.update(
        token_policies=list(params.token_policies),
        token_ttl=_seconds(params.token_ttl),
        token_max_ttl=_seconds(params.token_max_ttl),
        token_explicit_max_ttl=_seconds(params.token_explicit_max_ttl),
        token_period=_seconds(params.token_period),
        token_num_uses=params.token_num_uses,
        token_no_default_policy=params.token_no_default_policy,
        token_bound_cidrs=list(params.token_bound_cidrs),
    )
    return data
