"""
bcrypt password hashing for user entries.

Encoded form: the standard modular-crypt bcrypt string (``$2b$<rounds>$...``),
stored as text.

Notes:
    - bcrypt reads at most 72 bytes of input; longer passwords are rejected with
      ValueError instead of being silently truncated.
    - verify_password never raises on malformed hashes; they simply never match.
"""

from __future__ import annotations

import bcrypt

__all__ = [
    "MAX_PASSWORD_BYTES",
    "hash_password",
    "verify_password",
]

DEFAULT_ROUNDS = 12
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    raw = password.encode("utf-8")
    if len(raw) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password longer than {MAX_PASSWORD_BYTES} bytes")
    return raw


def hash_password(password: str, *, rounds: int = DEFAULT_ROUNDS) -> str:
    """
    Hash a password with a fresh bcrypt salt.

    Args:
        password (str): Plain-text password.
        rounds (int): bcrypt log rounds (cost factor, 4..31).

    Raises:
        ValueError: If the password exceeds 72 bytes once UTF-8 encoded.

    Examples:
        >>> encoded = hash_password("hunter2", rounds=4)
        >>> verify_password("hunter2", encoded), verify_password("nope", encoded)
        (True, False)
    """
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, encoded: str) -> bool:
    """Check password against a bcrypt hash; malformed input never matches."""
    try:
        return bcrypt.checkpw(_encode(password), encoded.encode("ascii"))
    except ValueError:
        return False
