"""
Canonical JSON serialization/deserialization for stored records.

Provides a single canonical JSON policy so stored documents are byte-stable
across runs. This module is zero-IO.

Notes:
    - Canonical JSON:
        - sort_keys=True
        - separators=(",", ":")
        - ensure_ascii=False
    - timedelta values serialize as whole seconds (int) or fractional seconds.
    - Pydantic records are dumped with ``model_dump(by_alias=True)`` upstream; the
      default hook covers the non-JSON values they carry.
"""

from __future__ import annotations

import json
from datetime import timedelta
from typing import Any

__all__ = [
    "json_dumps_canonical",
    "json_loads",
]


def _default(obj: Any) -> Any:
    if isinstance(obj, timedelta):
        seconds = obj.total_seconds()
        return int(seconds) if seconds.is_integer() else seconds
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Args:
        obj (Any): JSON-serializable object (timedelta and sets are converted).

    Returns:
        str: Canonical JSON string with sort_keys=True, compact separators,
        and ensure_ascii=False.

    Examples:
        >>> from datetime import timedelta
        >>> from fieldrec.core.serde import json_dumps_canonical
        >>> json_dumps_canonical({"b": timedelta(minutes=1), "a": ["x"]})
        '{"a":["x"],"b":60}'
    """
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=_default
    )


def json_loads(s: str | bytes) -> Any:
    """
    Deserialize a JSON string to Python objects using the stdlib json module.

    Notes:
        - No datetime/duration parsing here; typed records coerce on validation.
    """
    return json.loads(s)
