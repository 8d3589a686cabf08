"""
Core exception types raised by reconciliation, alias resolution, and projection.

Provides typed exceptions for core-domain failures:
- ValidationError for missing required fields and unparseable supplied values.
- UnsupportedOperationError for operation kinds other than create/update.
- ProjectionError for failures binding reconciled values onto a typed record.
- PreconditionError for caller misuse (absent schema, unknown field, create on
  an existing record).
- SchemaError for invalid schema, alias, or binding definitions found at startup.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - The core never logs or swallows these; they propagate to the immediate caller.
    - ValidationError aggregates every violation found in one pass so a caller
      sees all offending fields in a single report.

Examples:
    Aggregate two missing fields into one error.

    >>> from fieldrec.core.errors import FieldViolation, ValidationError
    >>> err = ValidationError(
    ...     [FieldViolation("username", "missing"), FieldViolation("password", "missing")]
    ... )
    >>> err.fields
    ('username', 'password')
    >>> "username" in str(err) and "password" in str(err)
    True
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

__all__ = [
    "FieldRecError",
    "FieldViolation",
    "ValidationError",
    "UnsupportedOperationError",
    "ProjectionError",
    "PreconditionError",
    "SchemaError",
    "MISSING_REQUIRED",
]

MISSING_REQUIRED = "missing required field"


class FieldRecError(Exception):
    """Base class for all fieldrec core errors."""


@dataclass(frozen=True)
class FieldViolation:
    """
    A single offending field found during validation.

    Attributes:
        field (str): Schema field name.
        reason (str): Short machine-oriented reason (no user-facing prose).
    """

    field: str
    reason: str

    def __str__(self) -> str:
        return f"{self.field}: {self.reason}"


class ValidationError(FieldRecError, ValueError):
    """
    One or more field violations collected in a single pass.

    Attributes:
        violations (tuple[FieldViolation, ...]): Violations in discovery order.
    """

    def __init__(self, violations: Iterable[FieldViolation]) -> None:
        self.violations: tuple[FieldViolation, ...] = tuple(violations)
        if not self.violations:
            raise ValueError("ValidationError requires at least one violation")
        super().__init__("; ".join(str(v) for v in self.violations))

    @property
    def fields(self) -> tuple[str, ...]:
        """Offending field names, de-duplicated, in discovery order."""
        return tuple(dict.fromkeys(v.field for v in self.violations))

    @property
    def missing(self) -> tuple[str, ...]:
        """Names of required fields that were not supplied."""
        return tuple(v.field for v in self.violations if v.reason == MISSING_REQUIRED)


class UnsupportedOperationError(FieldRecError):
    """Reconciliation or projection invoked with an operation other than create/update."""


class ProjectionError(FieldRecError):
    """Serialization or deserialization failed while binding values onto a record."""


class PreconditionError(FieldRecError):
    """Caller-level misuse (absent schema, unknown field, conflicting existing record)."""


class SchemaError(FieldRecError, ValueError):
    """Invalid schema, alias pair, or record binding definition."""
