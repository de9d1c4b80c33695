"""
Tests for Error Mapping and Retry

Tests cover:
- map_error categories and retryable flags
- with_retry: success, retry then success, non-retryable, exhaustion
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from jobtracker.errors import (
    ErrorType,
    RemoteStorageError,
    StorageQuotaExceededError,
    StorageUnavailableError,
    map_error,
    with_retry,
)


class TestMapError:
    """Test map_error categorisation."""

    @pytest.mark.parametrize("error", [
        ConnectionError("reset by peer"),
        asyncio.TimeoutError(),
        RuntimeError("Failed to fetch"),
        RemoteStorageError("Failed to get jobs: connection refused"),
    ])
    def test_network(self, error):
        mapped = map_error(error)
        assert mapped.type is ErrorType.NETWORK
        assert mapped.retryable is True
        assert mapped.original_error is error

    def test_auth(self):
        mapped = map_error(RuntimeError("JWT expired"))
        assert mapped.type is ErrorType.AUTH
        assert mapped.retryable is False

    def test_quota_not_retryable(self):
        mapped = map_error(StorageQuotaExceededError("Storage quota exceeded"))
        assert mapped.type is ErrorType.STORAGE
        assert mapped.retryable is False

    def test_storage(self):
        mapped = map_error(StorageUnavailableError("disk said no"))
        assert mapped.type is ErrorType.STORAGE
        assert mapped.retryable is True

    def test_remote_storage_error_is_storage(self):
        assert map_error(RemoteStorageError("Failed to save job: UNIQUE constraint")).type is ErrorType.STORAGE

    def test_validation(self):
        mapped = map_error(ValueError("jobTitle is required"))
        assert mapped.type is ErrorType.VALIDATION
        assert mapped.retryable is False
        assert mapped.message == "jobTitle is required"

    def test_unknown(self):
        mapped = map_error(RuntimeError("boom"))
        assert mapped.type is ErrorType.UNKNOWN
        assert mapped.retryable is True
        assert mapped.message == "boom"


class TestWithRetry:
    """Test with_retry."""

    @pytest.mark.asyncio
    async def test_success_first_try(self):
        operation = AsyncMock(return_value="ok")

        assert await with_retry(operation, delay=0) == "ok"
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_retryable_errors(self):
        operation = AsyncMock(side_effect=[ConnectionError("down"), ConnectionError("down"), "ok"])

        assert await with_retry(operation, max_attempts=3, delay=0) == "ok"
        assert operation.await_count == 3

    @pytest.mark.asyncio
    async def test_does_not_retry_validation_errors(self):
        operation = AsyncMock(side_effect=ValueError("invalid status"))

        with pytest.raises(ValueError):
            await with_retry(operation, delay=0)
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_raises_last_error_when_exhausted(self):
        operation = AsyncMock(side_effect=ConnectionError("still down"))

        with pytest.raises(ConnectionError, match="still down"):
            await with_retry(operation, max_attempts=2, delay=0)
        assert operation.await_count == 2

    @pytest.mark.asyncio
    async def test_backoff_delays(self):
        operation = AsyncMock(side_effect=[ConnectionError(), ConnectionError(), "ok"])

        with patch("jobtracker.errors.asyncio.sleep", new=AsyncMock()) as sleep:
            await with_retry(operation, max_attempts=3, delay=1.0, backoff=2.0)

        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]
