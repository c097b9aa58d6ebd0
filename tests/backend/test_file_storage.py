from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from stored_lib import StorageKey
from stored_lib.storage import CorruptValueError, StorageError
from stored_lib.storage.file_backend import FileStorageBackend
from stored_lib.storage.serializer import JSONSerializer
from stored_lib.store import KeyValueStore


def test_save_load_delete_and_list_keys(tmp_path):
    b = FileStorageBackend(data_dir=tmp_path / "data_test")
    ns = "unittest"
    key = "item1"
    value = {"x": 1}

    b.save(ns, key, value)
    assert b.exists(ns, key) is True
    keys = list(b.list_keys(ns))
    assert keys == [key]
    loaded = b.load(ns, key)
    assert loaded == value
    b.delete(ns, key)
    assert b.exists(ns, key) is False


def test_missing_key_raises_key_error(tmp_path):
    b = FileStorageBackend(data_dir=tmp_path)
    with pytest.raises(KeyError):
        b.load("ns", "nope")
    with pytest.raises(KeyError):
        b.delete("ns", "nope")


def test_file_layout_uses_serializer_extension(tmp_path):
    b = FileStorageBackend(data_dir=tmp_path, serializer=JSONSerializer())
    b.save("ns", "a/b", [1, 2])
    assert (tmp_path / "ns" / "a%2Fb.json").read_text(encoding="utf-8") == "[1, 2]"
    assert list(b.list_keys("ns")) == ["a/b"]
    assert not list(tmp_path.glob("ns/*.tmp"))


def test_similar_keys_get_separate_files(tmp_path):
    store = KeyValueStore(FileStorageBackend(data_dir=tmp_path))
    StorageKey("a/b", int, default=0, store=store).write(1)
    assert StorageKey("a_b", int, default=0, store=store).read() == 0
    StorageKey("a_b", int, default=0, store=store).write(2)
    StorageKey("a%2Fb", int, default=0, store=store).write(3)
    assert StorageKey("a/b", int, default=0, store=store).read() == 1
    assert sorted(store.keys()) == ["a%2Fb", "a/b", "a_b"]


def test_reads_do_not_create_directories(tmp_path):
    b = FileStorageBackend(data_dir=tmp_path)
    assert b.exists("ns", "k") is False
    with pytest.raises(KeyError):
        b.load("ns", "k")
    assert list(b.list_keys("ns")) == []
    assert not (tmp_path / "ns").exists()


def test_delete_failure_raises_storage_error(tmp_path, monkeypatch):
    b = FileStorageBackend(data_dir=tmp_path)
    b.save("ns", "k", 1)

    def refuse(self, *args, **kwargs):
        raise PermissionError("read-only")

    monkeypatch.setattr(Path, "unlink", refuse)
    with pytest.raises(StorageError):
        b.delete("ns", "k")


def test_corrupt_file_raises_corrupt_value_error(tmp_path):
    b = FileStorageBackend(data_dir=tmp_path)
    b.save("ns", "k", 1)
    (tmp_path / "ns" / "k.pkl").write_bytes(b"garbage")
    with pytest.raises(CorruptValueError):
        b.load("ns", "k")


def test_unserializable_value_raises_storage_error(tmp_path):
    b = FileStorageBackend(data_dir=tmp_path)
    with pytest.raises(StorageError):
        b.save("ns", "k", lambda: 1)
    assert b.exists("ns", "k") is False


def test_bindings_persist_across_store_instances(tmp_path):
    first = KeyValueStore(FileStorageBackend(data_dir=tmp_path), namespace="app")
    StorageKey("launches", int, default=0, store=first).write(4)
    StorageKey("lastLaunch", datetime, default=datetime.min, store=first).write(datetime(2024, 3, 1, 9, 0))

    second = KeyValueStore(FileStorageBackend(data_dir=tmp_path), namespace="app")
    assert StorageKey("launches", int, default=0, store=second).read() == 4
    assert StorageKey("lastLaunch", datetime, default=datetime.min, store=second).read() == datetime(2024, 3, 1, 9, 0)


def test_corrupt_file_reads_default_through_binding(tmp_path):
    store = KeyValueStore(FileStorageBackend(data_dir=tmp_path), namespace="app")
    key = StorageKey("launches", int, default=1, store=store)
    key.write(3)
    (tmp_path / "app" / "launches.pkl").write_bytes(b"\x00\x01")
    assert key.read() == 1


def test_json_dates_and_bytes_round_trip(tmp_path):
    store = KeyValueStore(FileStorageBackend(data_dir=tmp_path, serializer=JSONSerializer()))
    when = StorageKey("when", datetime, default=datetime.min, store=store)
    day = StorageKey("day", date, default=date.min, store=store)
    token = StorageKey("token", bytes, default=b"", store=store)
    when.write(datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc))
    day.write(date(2024, 3, 2))
    token.write(b"\x00\xff")
    assert when.read() == datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc)
    assert day.read() == date(2024, 3, 2)
    assert token.read() == b"\x00\xff"
