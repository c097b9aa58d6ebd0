import pytest

from stored_lib.storage import (
    FileStorageBackend,
    JSONSerializer,
    MemoryStorage,
    SingleFileStorage,
    YAMLSerializer,
    create_storage,
)


def test_create_storage_memory():
    s = create_storage()
    assert isinstance(s, MemoryStorage)


def test_create_storage_file(tmp_path):
    data_dir = tmp_path / "data_file"
    s = create_storage(backend='file', serializer='json', data_dir=data_dir)
    assert isinstance(s, FileStorageBackend)
    assert isinstance(s.serializer, JSONSerializer)
    s.save('ns', 'doc', {'a': 1})
    assert (data_dir / 'ns' / 'doc.json').exists()


def test_create_storage_single_file_defaults(tmp_path):
    s = create_storage(backend='single_file', data_dir=tmp_path)
    assert isinstance(s, SingleFileStorage)
    assert isinstance(s.serializer, YAMLSerializer)
    s.save('ns', 'k', 1)
    assert (tmp_path / 'settings.yml').exists()


def test_create_storage_single_file_path(tmp_path):
    s = create_storage(backend='single_file', file_path=tmp_path / 'prefs.yaml')
    s.save('ns', 'k', 1)
    assert (tmp_path / 'prefs.yaml').exists()


def test_create_storage_rejects_unknown_names(tmp_path):
    with pytest.raises(ValueError):
        create_storage(backend='redis')
    with pytest.raises(ValueError):
        create_storage(backend='file', serializer='xml', data_dir=tmp_path)
