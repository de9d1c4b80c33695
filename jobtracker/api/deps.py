from typing import Optional

from fastapi import Depends, Request

from jobtracker.auth import get_optional_user
from jobtracker.services.migration import MigrationService
from jobtracker.services.storage import StorageBackend
from jobtracker.services.storage_factory import StorageContext


def get_storage_context(request: Request) -> StorageContext:
    return request.app.state.storage


async def get_storage(
    user_id: Optional[str] = Depends(get_optional_user),
    context: StorageContext = Depends(get_storage_context),
) -> StorageBackend:
    """Cloud storage for signed-in callers, local storage otherwise."""
    return context.backend_for(user_id)


def get_migration_service(
    context: StorageContext = Depends(get_storage_context),
) -> MigrationService:
    return context.migration
