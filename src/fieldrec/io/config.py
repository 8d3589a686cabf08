"""
Configuration for the fieldrec storage layer and logging.

Defines StorageSettings, a frozen dataclass carrying runtime configuration for the
storage backend and log output.

Precedence
- environment (prefix FIELDREC_) > TOML > defaults.
- TOML search order: ./fieldrec.toml ([storage] table or top-level keys), then
  ./pyproject.toml under [tool.fieldrec.storage].

Notes
- Unparseable values are ignored and the previous setting is kept.
- An unknown backend name is kept as given and rejected by io.storage.open_storage.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

__all__ = [
    "StorageSettings",
    "BACKENDS",
]

BACKENDS = ("memory", "file")
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}
    return False


@dataclass(frozen=True)
class StorageSettings:
    """
    Runtime settings for fieldrec.io and fieldrec.log.

    Attributes:
        backend (str): "memory" or "file".
        root_dir (str): Root directory of the file backend.
        key_prefix (str): Prefix under which user entries are stored.
        log_level (str): Standard level name (DEBUG, INFO, ...).
        log_json (bool | None): JSON log output; None auto-detects (JSON when not a TTY).

    Examples:
        >>> from fieldrec.io.config import StorageSettings
        >>> StorageSettings(backend="file", root_dir="data")  # doctest: +ELLIPSIS
        StorageSettings(...)
    """

    backend: str = "memory"
    root_dir: str = "data"
    key_prefix: str = "user/"
    log_level: str = "INFO"
    log_json: bool | None = None

    @classmethod
    def _apply_mapping(cls, base: StorageSettings, cfg: dict[str, Any] | None) -> StorageSettings:
        """Apply a loose config mapping onto StorageSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        if "backend" in cfg and isinstance(cfg["backend"], str):
            s = replace(s, backend=cfg["backend"].strip().lower())

        if "root_dir" in cfg and isinstance(cfg["root_dir"], str):
            s = replace(s, root_dir=cfg["root_dir"])

        if "key_prefix" in cfg and isinstance(cfg["key_prefix"], str):
            prefix = cfg["key_prefix"].strip()
            if prefix and not prefix.endswith("/"):
                prefix += "/"
            s = replace(s, key_prefix=prefix)

        if "log_level" in cfg and isinstance(cfg["log_level"], str):
            level = cfg["log_level"].strip().upper()
            if level in _LOG_LEVELS:
                s = replace(s, log_level=level)

        if "log_json" in cfg:
            s = replace(s, log_json=_bool(cfg["log_json"]))

        return s

    @classmethod
    def from_env(
        cls, base: StorageSettings | None = None, prefix: str = "FIELDREC_"
    ) -> StorageSettings:
        """
        Build StorageSettings from environment variables. Precedence is env > base > defaults.

        Recognized variables:
            - FIELDREC_BACKEND ("memory" | "file")
            - FIELDREC_ROOT_DIR
            - FIELDREC_KEY_PREFIX
            - FIELDREC_LOG_LEVEL
            - FIELDREC_LOG_JSON (1/0/true/false/yes/no/on/off)
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in ("backend", "root_dir", "key_prefix", "log_level", "log_json"):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> StorageSettings:
        """
        Build StorageSettings from a TOML file.

        Search order when `path` is None:
            1) ./fieldrec.toml (with either a [storage] table or direct keys)
            2) ./pyproject.toml under [tool.fieldrec.storage]

        Returns defaults if no file is present or none carries settings.
        """
        s = cls()

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "fieldrec.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            with p.open("rb") as fh:
                data = tomllib.load(fh)
            if p.name == "pyproject.toml":
                cfg = data.get("tool", {}).get("fieldrec", {}).get("storage")
            elif isinstance(data.get("storage"), dict):
                cfg = data["storage"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> StorageSettings:
        """
        Load StorageSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults.

        Raises:
            tomllib.TOMLDecodeError: If a found TOML file is malformed.
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
