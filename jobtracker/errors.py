"""
Storage Errors and User-Facing Error Mapping

Exception hierarchy:
    StorageError
    ├── StorageUnavailableError      - local store disabled/unreachable
    │   └── StorageQuotaExceededError - local store full
    └── RemoteStorageError           - cloud store/transport failure

``map_error`` turns any exception into an ``AppError`` with a message fit
for display and a retryable flag. ``with_retry`` re-runs an async
operation with exponential backoff for retryable errors only; the storage
backends never retry on their own.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StorageError(Exception):
    """Base class for storage failures."""


class StorageUnavailableError(StorageError):
    """The local key-value store rejected the operation."""


class StorageQuotaExceededError(StorageUnavailableError):
    """A write would exceed the local store quota."""


class RemoteStorageError(StorageError):
    """The cloud store returned an error; message carries the store's text."""


class ErrorType(str, Enum):
    NETWORK = "network"
    AUTH = "auth"
    STORAGE = "storage"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


@dataclass
class AppError:
    type: ErrorType
    message: str
    retryable: bool
    original_error: Optional[BaseException] = None


_NETWORK_MARKERS = ("network", "fetch", "connection", "timeout", "timed out")
_AUTH_MARKERS = ("unauthorized", "unauthenticated", "session expired", "jwt")
_STORAGE_MARKERS = ("storage", "database", "quota")
_VALIDATION_MARKERS = ("invalid", "required", "validation")


def map_error(error: BaseException) -> AppError:
    """
    Categorise an exception and attach a user-friendly message.

    Args:
        error: Any raised exception

    Returns:
        AppError with type, display message and retryable flag
    """
    if isinstance(error, (ConnectionError, asyncio.TimeoutError)):
        return AppError(
            type=ErrorType.NETWORK,
            message="Unable to connect. Please check your internet connection.",
            retryable=True,
            original_error=error,
        )

    if isinstance(error, StorageQuotaExceededError):
        return AppError(
            type=ErrorType.STORAGE,
            message="Local storage is full. Sign in to keep your jobs in the cloud.",
            retryable=False,
            original_error=error,
        )

    message = str(error).lower()

    if any(marker in message for marker in _NETWORK_MARKERS):
        return AppError(
            type=ErrorType.NETWORK,
            message="Unable to connect. Please check your internet connection.",
            retryable=True,
            original_error=error,
        )

    if any(marker in message for marker in _AUTH_MARKERS):
        return AppError(
            type=ErrorType.AUTH,
            message="Your session has expired. Please sign in again.",
            retryable=False,
            original_error=error,
        )

    if isinstance(error, StorageError) or any(marker in message for marker in _STORAGE_MARKERS):
        return AppError(
            type=ErrorType.STORAGE,
            message="Unable to save data. Please try again.",
            retryable=True,
            original_error=error,
        )

    if isinstance(error, ValueError) or any(marker in message for marker in _VALIDATION_MARKERS):
        return AppError(
            type=ErrorType.VALIDATION,
            message=str(error),
            retryable=False,
            original_error=error,
        )

    return AppError(
        type=ErrorType.UNKNOWN,
        message=str(error) or "An unexpected error occurred. Please try again.",
        retryable=True,
        original_error=error,
    )


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
) -> T:
    """
    Run an async operation, retrying retryable failures with backoff.

    Args:
        operation: Zero-argument coroutine factory
        max_attempts: Total attempts including the first
        delay: Seconds to wait before the first retry
        backoff: Multiplier applied to the delay after each retry

    Returns:
        The operation's result

    Raises:
        The last exception when attempts are exhausted or the error is
        not retryable
    """
    current_delay = delay

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as e:
            if not map_error(e).retryable or attempt == max_attempts:
                raise
            logger.warning(f"Attempt {attempt}/{max_attempts} failed, retrying in {current_delay}s: {e}")
            await asyncio.sleep(current_delay)
            current_delay *= backoff

    raise RuntimeError("max_attempts must be at least 1")
