"""
Storage Backend Selection

Picks the job store for the current session:
    - signed in (user_id)  -> RemoteStorageBackend bound to that user
    - signed out (None)    -> LocalStorageBackend

StorageBackendSelector caches the last (user_id, backend) pair and only
builds a new backend when the identity changes. StorageContext is the
explicit per-application object that owns a selector and the migration
service, follows an AuthState, and is torn down with ``close()``.

Usage:
    context = StorageContext(local_service, session_factory, auth_state)
    backend = context.backend            # follows sign-in/sign-out
    backend = context.backend_for(uid)   # per-request identity
    context.close()
"""

import logging
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from jobtracker.auth import AuthState
from jobtracker.services.local_storage import LocalStorageBackend, LocalStorageService
from jobtracker.services.migration import MigrationService
from jobtracker.services.remote_storage import RemoteStorageBackend
from jobtracker.services.storage import StorageBackend

logger = logging.getLogger(__name__)


def create_storage_backend(
    user_id: Optional[str],
    local_service: LocalStorageService,
    session_factory: async_sessionmaker[AsyncSession],
) -> StorageBackend:
    """
    Build the backend for a user identity.

    Args:
        user_id: Signed-in owner identity, or None when signed out
        local_service: Local job store used when signed out
        session_factory: Cloud database sessions used when signed in

    Returns:
        RemoteStorageBackend for a user, LocalStorageBackend otherwise
    """
    if user_id:
        return RemoteStorageBackend(user_id, session_factory)
    return LocalStorageBackend(local_service)


class StorageBackendSelector:
    """
    Caches the backend for the most recent identity.

    States: bound to a user id, or unbound (None). Any call with a
    different identity, including None <-> user transitions, replaces the
    cached backend.
    """

    def __init__(
        self,
        local_service: LocalStorageService,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self.local_service = local_service
        self.session_factory = session_factory
        self._backend: Optional[StorageBackend] = None
        self._user_id: Optional[str] = None

    def get_backend(self, user_id: Optional[str]) -> StorageBackend:
        if self._backend is not None and self._user_id == user_id:
            return self._backend

        self._user_id = user_id
        self._backend = create_storage_backend(user_id, self.local_service, self.session_factory)
        logger.debug(f"Storage backend selected: {self._backend.kind}")
        return self._backend

    def create_remote(self, user_id: str) -> RemoteStorageBackend:
        return RemoteStorageBackend(user_id, self.session_factory)

    def clear_cache(self) -> None:
        self._backend = None
        self._user_id = None


class StorageContext:
    """
    Storage wiring for one application lifecycle.

    Attributes:
        selector: Cached backend selection
        migration: Local-to-cloud migration service
        auth_state: Optional identity source followed by ``backend``
    """

    def __init__(
        self,
        local_service: LocalStorageService,
        session_factory: async_sessionmaker[AsyncSession],
        auth_state: Optional[AuthState] = None,
    ):
        self.selector = StorageBackendSelector(local_service, session_factory)
        self.migration = MigrationService(local_service, remote_factory=self.selector.create_remote)
        self.auth_state = auth_state
        self._unsubscribe: Optional[Callable[[], None]] = None

        if auth_state is not None:
            self._unsubscribe = auth_state.subscribe(self._on_auth_change)

    @property
    def backend(self) -> StorageBackend:
        user_id = self.auth_state.user_id if self.auth_state is not None else None
        return self.selector.get_backend(user_id)

    def backend_for(self, user_id: Optional[str]) -> StorageBackend:
        return self.selector.get_backend(user_id)

    def _on_auth_change(self, user_id: Optional[str]) -> None:
        self.selector.get_backend(user_id)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.selector.clear_cache()
