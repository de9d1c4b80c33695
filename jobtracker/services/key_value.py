"""
Local Key-Value Stores

Synchronous string-blob stores backing local (signed-out) job storage.
All implementations expose the same three calls and raise
``StorageUnavailableError`` (or ``StorageQuotaExceededError``) when the
store rejects an operation:

    store.get_item(key)         -> str | None
    store.set_item(key, value)
    store.remove_item(key)

Implementations:
    - FileKeyValueStore: one file per key in a directory (on-device default)
    - RedisKeyValueStore: synchronous Redis client
    - MemoryKeyValueStore: process-local dict
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import quote

import redis

from jobtracker.config import Settings
from jobtracker.errors import StorageQuotaExceededError, StorageUnavailableError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Base class for local key-value stores"""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string or None when the key is absent"""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a string under key, replacing any previous value"""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key; absent keys are ignored"""
        pass


def _check_quota(quota_bytes: Optional[int], used: int, value: str) -> None:
    if quota_bytes is None:
        return
    needed = used + len(value.encode())
    if needed > quota_bytes:
        raise StorageQuotaExceededError(
            f"Storage quota exceeded: {needed} bytes needed, {quota_bytes} allowed"
        )


class MemoryKeyValueStore(KeyValueStore):
    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes
        self._items: Dict[str, str] = {}

    def _used_bytes(self, excluding: str) -> int:
        return sum(
            len(v.encode())
            for k, v in self._items.items()
            if k != excluding
        )

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        _check_quota(self.quota_bytes, self._used_bytes(key), value)
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileKeyValueStore(KeyValueStore):
    """
    Directory-backed store, one UTF-8 file per key.

    Writes go to a temporary file first and are renamed into place, so a
    crash mid-write leaves the previous value intact.

    Attributes:
        directory: Folder holding the key files
        quota_bytes: Optional cap on total stored bytes
    """

    def __init__(self, directory: str, quota_bytes: Optional[int] = None):
        self.directory = Path(directory)
        self.quota_bytes = quota_bytes

    def _path(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='')}.json"

    def _used_bytes(self, excluding: Path) -> int:
        if not self.directory.exists():
            return 0
        return sum(
            p.stat().st_size
            for p in self.directory.glob("*.json")
            if p != excluding
        )

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageUnavailableError(f"Local storage read failed: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            _check_quota(self.quota_bytes, self._used_bytes(path), value)

            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageUnavailableError(f"Local storage write failed: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageUnavailableError(f"Local storage remove failed: {e}") from e


class RedisKeyValueStore(KeyValueStore):
    """Redis-backed store for deployments without a writable disk."""

    def __init__(self, redis_url: str, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        if client is None:
            client = redis.Redis.from_url(
                redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        self.client = client

    def get_item(self, key: str) -> Optional[str]:
        try:
            return self.client.get(key)
        except redis.RedisError as e:
            raise StorageUnavailableError(f"Local storage read failed: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        try:
            self.client.set(key, value)
        except redis.RedisError as e:
            raise StorageUnavailableError(f"Local storage write failed: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            raise StorageUnavailableError(f"Local storage remove failed: {e}") from e


def get_key_value_store(settings: Settings) -> KeyValueStore:
    """
    Build the local store configured by ``settings.local_store_backend``.

    Args:
        settings: Application settings

    Returns:
        KeyValueStore instance
    """
    backend = settings.local_store_backend.lower()

    if backend == "file":
        store: KeyValueStore = FileKeyValueStore(
            settings.local_store_path,
            quota_bytes=settings.local_store_quota_bytes,
        )
    elif backend == "redis":
        store = RedisKeyValueStore(settings.redis_url)
    elif backend == "memory":
        store = MemoryKeyValueStore(quota_bytes=settings.local_store_quota_bytes)
    else:
        raise ValueError(f"Unknown local store backend: {settings.local_store_backend}")

    logger.info(f"Local key-value store: {backend}")
    return store
