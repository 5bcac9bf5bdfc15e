"""Tests for key/value storage backends."""

import os

import pytest
from pydantic import ValidationError

from brandplot.adapters.storage.file import FileKeyValueStorage
from brandplot.adapters.storage.in_memory import InMemoryKeyValueStorage
from brandplot.core.config import CacheSettings
from brandplot.core.errors import StorageAppError
from brandplot.utils.result_cache import BrandResultCache


@pytest.fixture(params=["memory", "file"])
def storage(request, tmp_path):
    if request.param == "memory":
        return InMemoryKeyValueStorage()
    return FileKeyValueStorage(tmp_path / "kv")


def test_missing_key_returns_none(storage) -> None:
    assert storage.get_item("brandplotData") is None


def test_set_get_remove(storage) -> None:
    storage.set_item("brandplotData", '{"idUnico": "açaí-brandplot"}')
    assert storage.get_item("brandplotData") == '{"idUnico": "açaí-brandplot"}'

    storage.set_item("brandplotData", "{}")
    assert storage.get_item("brandplotData") == "{}"

    storage.remove_item("brandplotData")
    assert storage.get_item("brandplotData") is None


def test_remove_missing_key_is_not_an_error(storage) -> None:
    storage.remove_item("never-set")


def test_file_storage_survives_new_instance(tmp_path) -> None:
    FileKeyValueStorage(tmp_path).set_item("brandplotData", "persisted")

    assert FileKeyValueStorage(tmp_path).get_item("brandplotData") == "persisted"


def test_file_storage_leaves_no_temp_files(tmp_path) -> None:
    storage = FileKeyValueStorage(tmp_path)
    storage.set_item("brandplotData", "a")
    storage.set_item("brandplotData", "b")

    assert sorted(os.listdir(tmp_path)) == ["brandplotData.json"]


@pytest.mark.parametrize("key", ["../escape", "a/b", "", ".hidden"])
def test_file_storage_rejects_unsafe_keys(tmp_path, key) -> None:
    with pytest.raises(ValueError):
        FileKeyValueStorage(tmp_path).get_item(key)


def test_file_storage_wraps_os_errors(tmp_path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way")
    storage = FileKeyValueStorage(blocker)

    with pytest.raises(StorageAppError) as exc_info:
        storage.set_item("brandplotData", "x")

    assert exc_info.value.code == "storage_write_failed"


def test_file_storage_quota(tmp_path) -> None:
    storage = FileKeyValueStorage(tmp_path, max_value_bytes=4)

    with pytest.raises(StorageAppError) as exc_info:
        storage.set_item("brandplotData", "12345")

    assert exc_info.value.code == "storage_quota_exceeded"
    assert storage.get_item("brandplotData") is None


def test_cache_rejects_unsafe_key_at_construction(tmp_path) -> None:
    with pytest.raises(ValueError, match="invalid storage key"):
        BrandResultCache(FileKeyValueStorage(tmp_path), storage_key="brandplot data")


def test_cache_settings_reject_unsafe_storage_key() -> None:
    with pytest.raises(ValidationError):
        CacheSettings(storage_key="../brandplotData")

    assert CacheSettings(storage_key="brandplot.v2").storage_key == "brandplot.v2"
