from __future__ import annotations

import os
from pathlib import Path

import pytest

from fieldrec.io.errors import StorageDecodeError, StorageKeyError
from fieldrec.io.storage import FileStorage, InMemoryStorage, Storage, StorageEntry


@pytest.fixture(params=["memory", "file"])
def storage(request, tmp_path: Path) -> Storage:
    if request.param == "memory":
        return InMemoryStorage()
    return FileStorage(str(tmp_path / "store"))


def test_get_put_delete(storage: Storage) -> None:
    assert storage.get("user/alice") is None
    storage.put(StorageEntry.from_json("user/alice", {"b": 1, "a": [2]}))
    entry = storage.get("user/alice")
    assert entry is not None
    assert entry.value == b'{"a":[2],"b":1}'
    assert entry.decode_json() == {"a": [2], "b": 1}
    storage.delete("user/alice")
    assert storage.get("user/alice") is None
    # deleting a missing key is not an error
    storage.delete("user/alice")


def test_list_returns_sorted_immediate_children(storage: Storage) -> None:
    for key in ["user/bob", "user/alice", "user/admins/carol", "role/x"]:
        storage.put(StorageEntry.from_json(key, {}))
    assert storage.list("user/") == ["admins/", "alice", "bob"]
    assert storage.list("") == ["role/", "user/"]
    assert storage.list("nothing/") == []


@pytest.mark.parametrize("key", ["", "/abs", "trailing/", "a/../b", "a//b"])
def test_invalid_keys_rejected(storage: Storage, key: str) -> None:
    with pytest.raises(StorageKeyError):
        storage.put(StorageEntry(key, b"{}"))


def test_file_storage_layout_and_no_tmp_leftovers(tmp_path: Path) -> None:
    store = FileStorage(str(tmp_path))
    store.put(StorageEntry.from_json("user/alice", {"x": 1}))
    assert (tmp_path / "user" / "alice.json").read_bytes() == b'{"x":1}'
    assert not any(name.endswith(".tmp") for name in os.listdir(tmp_path / "user"))


def test_decode_error_on_corrupt_entry() -> None:
    with pytest.raises(StorageDecodeError):
        StorageEntry("user/x", b"{not json").decode_json()


def test_storage_protocol_is_satisfied(tmp_path: Path) -> None:
    assert isinstance(InMemoryStorage(), Storage)
    assert isinstance(FileStorage(str(tmp_path)), Storage)
