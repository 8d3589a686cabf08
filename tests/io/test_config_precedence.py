from __future__ import annotations

from pathlib import Path

import pytest

from fieldrec.io.config import StorageSettings
from fieldrec.io.errors import StorageConfigError
from fieldrec.io.storage import FileStorage, InMemoryStorage, open_storage

_ENV_KEYS = [
    "FIELDREC_BACKEND",
    "FIELDREC_ROOT_DIR",
    "FIELDREC_KEY_PREFIX",
    "FIELDREC_LOG_LEVEL",
    "FIELDREC_LOG_JSON",
]


def _write_toml(tmp: Path, name: str, content: str) -> Path:
    p = tmp / name
    p.write_text(content)
    return p


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_settings_precedence_env_over_toml(tmp_path: Path, monkeypatch) -> None:
    # Arrange TOML
    _write_toml(
        tmp_path,
        "fieldrec.toml",
        """
        [storage]
        backend = "file"
        root_dir = "toml_data"
        log_level = "debug"
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    # Arrange ENV that should override TOML
    monkeypatch.setenv("FIELDREC_ROOT_DIR", "env_data")
    monkeypatch.setenv("FIELDREC_LOG_LEVEL", "WARNING")

    # Act
    s = StorageSettings.load()

    # Assert precedence: env > TOML
    assert s.backend == "file"
    assert s.root_dir == "env_data"
    assert s.log_level == "WARNING"


def test_settings_from_pyproject_tool_table(tmp_path: Path, monkeypatch) -> None:
    _write_toml(
        tmp_path,
        "pyproject.toml",
        """
        [tool.fieldrec.storage]
        backend = "file"
        key_prefix = "accounts"
        log_json = true
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)

    s = StorageSettings.load()

    assert s.backend == "file"
    assert s.key_prefix == "accounts/"
    assert s.log_json is True


def test_settings_defaults_when_no_config(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    s = StorageSettings.load()

    assert s == StorageSettings()
    assert s.backend == "memory"
    assert s.key_prefix == "user/"


def test_invalid_values_keep_previous_setting(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FIELDREC_LOG_LEVEL", "LOUD")

    assert StorageSettings.load().log_level == "INFO"


def test_open_storage_by_backend(tmp_path: Path) -> None:
    assert isinstance(open_storage(StorageSettings()), InMemoryStorage)
    fs_store = open_storage(StorageSettings(backend="file", root_dir=str(tmp_path)))
    assert isinstance(fs_store, FileStorage)
    with pytest.raises(StorageConfigError):
        open_storage(StorageSettings(backend="s3"))
