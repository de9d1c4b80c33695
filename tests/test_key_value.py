"""
Tests for Local Key-Value Stores

Tests cover:
- Memory and file stores: get/set/remove, absent keys, quota
- File store: key encoding, overwrite, OS errors
- Redis store: delegation and error translation (mocked client)
- Store selection from settings
"""

from unittest.mock import MagicMock

import pytest
import redis

from jobtracker.config import Settings
from jobtracker.errors import StorageQuotaExceededError, StorageUnavailableError
from jobtracker.services.key_value import (
    FileKeyValueStore,
    MemoryKeyValueStore,
    RedisKeyValueStore,
    get_key_value_store,
)


class TestMemoryKeyValueStore:
    """Test MemoryKeyValueStore."""

    def test_set_get_remove(self):
        store = MemoryKeyValueStore()

        store.set_item("k", "v")
        assert store.get_item("k") == "v"

        store.remove_item("k")
        assert store.get_item("k") is None

    def test_remove_absent_key(self):
        MemoryKeyValueStore().remove_item("never-set")

    def test_quota_exceeded(self):
        store = MemoryKeyValueStore(quota_bytes=10)
        store.set_item("a", "12345")

        with pytest.raises(StorageQuotaExceededError):
            store.set_item("b", "123456")

        assert store.get_item("b") is None

    def test_overwrite_does_not_double_count(self):
        store = MemoryKeyValueStore(quota_bytes=10)
        store.set_item("a", "1234567890")
        store.set_item("a", "0987654321")
        assert store.get_item("a") == "0987654321"

    def test_quota_error_is_unavailable_error(self):
        store = MemoryKeyValueStore(quota_bytes=1)
        with pytest.raises(StorageUnavailableError):
            store.set_item("a", "too long")


class TestFileKeyValueStore:
    """Test FileKeyValueStore."""

    def test_set_get_remove(self, tmp_path):
        store = FileKeyValueStore(str(tmp_path / "store"))

        store.set_item("linkedin-job-tracker-jobs", "[]")
        assert store.get_item("linkedin-job-tracker-jobs") == "[]"

        store.remove_item("linkedin-job-tracker-jobs")
        assert store.get_item("linkedin-job-tracker-jobs") is None

    def test_missing_key(self, tmp_path):
        assert FileKeyValueStore(str(tmp_path)).get_item("absent") is None

    def test_values_survive_new_instance(self, tmp_path):
        FileKeyValueStore(str(tmp_path)).set_item("k", "persisted")
        assert FileKeyValueStore(str(tmp_path)).get_item("k") == "persisted"

    def test_keys_are_encoded_as_file_names(self, tmp_path):
        store = FileKeyValueStore(str(tmp_path))
        store.set_item("../escape/attempt", "x")

        assert store.get_item("../escape/attempt") == "x"
        assert [p.parent for p in tmp_path.iterdir()] == [tmp_path]

    def test_no_temp_files_left(self, tmp_path):
        store = FileKeyValueStore(str(tmp_path))
        store.set_item("k", "v1")
        store.set_item("k", "v2")

        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]

    def test_unicode_round_trip(self, tmp_path):
        store = FileKeyValueStore(str(tmp_path))
        store.set_item("k", "Zürich – café")
        assert store.get_item("k") == "Zürich – café"

    def test_quota_exceeded(self, tmp_path):
        store = FileKeyValueStore(str(tmp_path), quota_bytes=8)
        store.set_item("a", "1234")

        with pytest.raises(StorageQuotaExceededError):
            store.set_item("b", "12345")

    def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        store = FileKeyValueStore(str(blocker / "store"))

        with pytest.raises(StorageUnavailableError):
            store.set_item("k", "v")


class TestRedisKeyValueStore:
    """Test RedisKeyValueStore with a mocked client."""

    def test_delegates_to_client(self):
        client = MagicMock()
        client.get.return_value = "[]"
        store = RedisKeyValueStore("redis://localhost:6379/0", client=client)

        assert store.get_item("k") == "[]"
        store.set_item("k", "v")
        store.remove_item("k")

        client.get.assert_called_once_with("k")
        client.set.assert_called_once_with("k", "v")
        client.delete.assert_called_once_with("k")

    @pytest.mark.parametrize("method,args", [
        ("get_item", ("k",)),
        ("set_item", ("k", "v")),
        ("remove_item", ("k",)),
    ])
    def test_redis_errors_become_unavailable(self, method, args):
        client = MagicMock()
        client.get.side_effect = redis.ConnectionError("down")
        client.set.side_effect = redis.ConnectionError("down")
        client.delete.side_effect = redis.ConnectionError("down")
        store = RedisKeyValueStore("redis://localhost:6379/0", client=client)

        with pytest.raises(StorageUnavailableError):
            getattr(store, method)(*args)


class TestGetKeyValueStore:
    """Test store selection from settings."""

    def test_file_backend(self, tmp_path):
        settings = Settings(local_store_backend="file", local_store_path=str(tmp_path))
        store = get_key_value_store(settings)

        assert isinstance(store, FileKeyValueStore)
        assert store.quota_bytes == settings.local_store_quota_bytes

    def test_memory_backend(self):
        store = get_key_value_store(Settings(local_store_backend="memory", local_store_quota_bytes=None))
        assert isinstance(store, MemoryKeyValueStore)
        assert store.quota_bytes is None

    def test_redis_backend(self):
        # from_url does not connect until the first command
        store = get_key_value_store(Settings(local_store_backend="redis"))
        assert isinstance(store, RedisKeyValueStore)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            get_key_value_store(Settings(local_store_backend="sessionStorage"))
