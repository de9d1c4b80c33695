from fastapi import APIRouter, Depends, Response, status

from jobtracker.api.deps import get_migration_service
from jobtracker.auth import get_current_user
from jobtracker.schemas import MigrationResult, MigrationStatus
from jobtracker.services.migration import MigrationService

router = APIRouter()


@router.get("/status", response_model=MigrationStatus)
async def migration_status(
    migration: MigrationService = Depends(get_migration_service),
    _: str = Depends(get_current_user),
):
    count = migration.get_local_job_count()
    return MigrationStatus(has_local_data=count > 0, local_job_count=count)


@router.post("", response_model=MigrationResult)
async def migrate_local_jobs(
    migration: MigrationService = Depends(get_migration_service),
    user_id: str = Depends(get_current_user),
):
    # Local data is kept; the client clears it after confirming the result
    return await migration.migrate_to_cloud(user_id)


@router.delete("/local", status_code=status.HTTP_204_NO_CONTENT)
async def clear_local_jobs(
    migration: MigrationService = Depends(get_migration_service),
    _: str = Depends(get_current_user),
):
    migration.clear_local_data()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
