"""
User backend: create, read, update, delete, list, and log in users over a Storage.

Write path
- The existence check decides the operation: no stored entry -> create, else update.
- Request values go through the RecordBinder (reconcile -> alias rule -> projection)
  onto the loaded (or fresh) UserEntry; the password is hashed separately.
- Nothing is stored unless every step succeeds.

Read path
- Token data is rendered with durations in seconds; legacy names are back-filled
  from the canonical fields so old clients keep reading the same values.

Notes
- Usernames are case-insensitive and stored lower-cased under ``<prefix><username>``.
- Writes to the same key are serialized by a per-key lock; different keys proceed
  in parallel.
"""

from __future__ import annotations

import threading
import weakref
from collections.abc import Callable
from datetime import timedelta
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from fieldrec.core.binder import RecordBinder
from fieldrec.core.errors import FieldViolation, PreconditionError, ValidationError
from fieldrec.core.reconcile import Operation
from fieldrec.core.typing import JsonDict, RawValues
from fieldrec.core.values import FieldData
from fieldrec.io.config import StorageSettings
from fieldrec.io.errors import StorageDecodeError
from fieldrec.io.storage import Storage, StorageEntry, open_storage
from fieldrec.log import get_logger

from .entry import USER_ALIASES, USER_NAME_DIFFERENCES, USER_SCHEMA, USER_UNBOUND, UserEntry
from .passwords import hash_password, verify_password
from .tokens import populate_token_data

__all__ = ["UserBackend", "USER_BINDER"]

logger = get_logger(__name__)

USER_BINDER: RecordBinder[UserEntry] = RecordBinder(
    USER_SCHEMA,
    UserEntry,
    aliases=USER_ALIASES,
    differences=USER_NAME_DIFFERENCES,
    unbound=USER_UNBOUND,
)


def _render(value: Any) -> Any:
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    return value


class UserBackend:
    """
    User CRUD over a key/value Storage.

    Args:
        storage (Storage): Storage collaborator.
        prefix (str): Key prefix for user entries (default "user/").
        hasher (Callable[[str], str]): Password hasher; defaults to bcrypt.
    """

    def __init__(
        self,
        storage: Storage,
        prefix: str = "user/",
        hasher: Callable[[str], str] = hash_password,
    ) -> None:
        self.storage = storage
        self.prefix = prefix
        self.hasher = hasher
        self.binder = USER_BINDER
        # entries vanish once no writer holds the lock
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    @classmethod
    def from_settings(cls, settings: StorageSettings | None = None) -> UserBackend:
        """Open the configured storage and use its key prefix (see StorageSettings.load)."""
        s = settings or StorageSettings.load()
        return cls(open_storage(s), prefix=s.key_prefix)

    def _key(self, username: str) -> str:
        name = (username or "").strip().lower()
        if not name:
            raise PreconditionError("missing username")
        return self.prefix + name

    def _lock(self, key: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(key, threading.Lock())

    def _load(self, key: str) -> UserEntry | None:
        entry = self.storage.get(key)
        if entry is None:
            return None
        try:
            return UserEntry.model_validate(entry.decode_json())
        except PydanticValidationError as exc:
            raise StorageDecodeError(f"entry {key!r} is not a user entry: {exc}") from exc

    def user(self, username: str) -> UserEntry | None:
        """Load a stored user entry, or None."""
        return self._load(self._key(username))

    def exists(self, username: str) -> bool:
        return self.user(username) is not None

    def list(self) -> list[str]:
        return self.storage.list(self.prefix)

    def delete(self, username: str) -> None:
        key = self._key(username)
        with self._lock(key):
            self.storage.delete(key)
        logger.info("user_deleted", key=key)

    def read(self, username: str) -> JsonDict | None:
        """
        Response data for a user, or None if it does not exist.

        Token fields are rendered from the canonical values; every legacy name
        (policies, ttl, max_ttl, bound_cidrs) carries the same effective value.
        """
        entry = self.user(username)
        if entry is None:
            return None
        data = populate_token_data(entry, {})
        values = self.binder.read(entry)
        for pair in self.binder.resolver.pairs:
            for name in (pair.canonical, pair.legacy):
                if name in values:
                    data[name] = _render(values[name])
        return data

    def write(
        self, username: str, raw: RawValues, operation: Operation | None = None
    ) -> Operation:
        """
        Create or update a user from request values.

        Args:
            username (str): User name (case-insensitive).
            raw (Mapping[str, Any]): Request values (username may be omitted).
            operation (Operation | None): Expected operation; None lets the
                existence check decide.

        Returns:
            Operation: CREATE or UPDATE, whichever was applied.

        Raises:
            PreconditionError: create on an existing user, update on a missing one,
                or a username in the body that differs from the key.
            ValidationError: Missing/invalid fields; nothing is stored.
            UnsupportedOperationError: operation other than CREATE/UPDATE.
            ProjectionError: Values could not be bound onto the entry.
        """
        key = self._key(username)
        name = key[len(self.prefix) :]
        body = dict(raw)
        if body.get("username") is not None and str(body["username"]).strip().lower() != name:
            raise PreconditionError(f"username in body does not match {name!r}")
        body["username"] = name

        with self._lock(key):
            existing = self._load(key)
            if operation is Operation.CREATE and existing is not None:
                raise PreconditionError(f"user {name!r} already exists")
            if operation is Operation.UPDATE and existing is None:
                raise PreconditionError(f"user {name!r} does not exist")
            if operation is None:
                operation = Operation.CREATE if existing is None else Operation.UPDATE

            data = FieldData(USER_SCHEMA, body)
            unknown = data.unknown_keys()
            if unknown:
                logger.warning("unknown_fields_ignored", key=key, fields=unknown)

            entry = existing or UserEntry()
            self.binder.write(entry, operation, data)
            self._apply_password(entry, data)
            _check_token_limits(entry)

            self.storage.put(StorageEntry.from_json(key, entry))

        logger.info(
            "user_written", key=key, operation=operation.value, fields=sorted(data.present())
        )
        return operation

    def create(self, username: str, raw: RawValues) -> None:
        self.write(username, raw, Operation.CREATE)

    def update(self, username: str, raw: RawValues) -> None:
        self.write(username, raw, Operation.UPDATE)

    def _apply_password(self, entry: UserEntry, data: FieldData) -> None:
        password = data.value_if_present("password")
        if password is None:
            return
        if password == "":
            raise ValidationError([FieldViolation("password", "must not be empty")])
        try:
            entry.password_hash = self.hasher(password)
        except ValueError as exc:
            raise ValidationError([FieldViolation("password", str(exc))]) from exc

    def login(self, username: str, password: str) -> JsonDict | None:
        """Verify a password; returns the user's token data on success, else None."""
        entry = self.user(username)
        if entry is None or not entry.password_hash:
            logger.info("login_failed", username=username.strip().lower())
            return None
        if not verify_password(password, entry.password_hash):
            logger.info("login_failed", username=username.strip().lower())
            return None
        return populate_token_data(entry, {})


def _check_token_limits(entry: UserEntry) -> None:
    violations: list[FieldViolation] = []
    if entry.token_max_ttl and entry.token_ttl > entry.token_max_ttl:
        violations.append(FieldViolation("token_ttl", "greater than token_max_ttl"))
    if entry.token_num_uses < 0:
        violations.append(FieldViolation("token_num_uses", "must be non-negative"))
    if violations:
        raise ValidationError(violations)
