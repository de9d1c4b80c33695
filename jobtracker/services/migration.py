"""
Local-to-Cloud Migration

Moves every locally stored job into a user's cloud storage after sign-in.

Guarantees:
    - Each job is saved independently; one failure is recorded in
      ``errors`` and the batch continues
    - id, date_added and last_updated are regenerated by the cloud store
    - Local data is never removed by ``migrate_to_cloud``; callers decide
      whether to call ``clear_local_data`` afterwards (e.g. after the user
      confirms, or only when ``result.success`` is True)

Usage:
    service = MigrationService(local_service, remote_factory)
    if service.has_local_data():
        result = await service.migrate_to_cloud(user_id)
        if result.success:
            service.clear_local_data()
"""

import logging
from typing import Callable

from jobtracker.errors import StorageUnavailableError
from jobtracker.middleware.metrics import record_migrated_job
from jobtracker.schemas.job import JobPosting, JobPostingCreate
from jobtracker.schemas.migration import MigrationResult
from jobtracker.services.local_storage import LocalStorageService
from jobtracker.services.storage import StorageBackend

logger = logging.getLogger(__name__)

RemoteFactory = Callable[[str], StorageBackend]

_REGENERATED_FIELDS = {"id", "date_added", "last_updated"}


def to_migration_payload(job: JobPosting) -> JobPostingCreate:
    """Strip storage-assigned fields so the cloud store regenerates them."""
    return JobPostingCreate.model_validate(job.model_dump(exclude=_REGENERATED_FIELDS))


class MigrationService:
    """
    Attributes:
        local_service: Source of local jobs (raw accessors)
        remote_factory: Builds a cloud backend bound to a user id
    """

    def __init__(self, local_service: LocalStorageService, remote_factory: RemoteFactory):
        self.local_service = local_service
        self.remote_factory = remote_factory

    def has_local_data(self) -> bool:
        return self.get_local_job_count() > 0

    def get_local_job_count(self) -> int:
        try:
            return len(self.local_service.read_all_jobs())
        except StorageUnavailableError:
            return 0

    async def migrate_to_cloud(self, user_id: str) -> MigrationResult:
        """
        Copy all local jobs to the user's cloud storage.

        Args:
            user_id: Owner identity for the migrated rows

        Returns:
            MigrationResult; success is True iff every job was migrated
        """
        result = MigrationResult()

        try:
            local_jobs = self.local_service.read_all_jobs()
            result.total_count = len(local_jobs)

            if not local_jobs:
                result.success = True
                return result

            remote = self.remote_factory(user_id)
            logger.info(f"Migrating {len(local_jobs)} local jobs to cloud storage")

            for job in local_jobs:
                try:
                    await remote.save_job(to_migration_payload(job))
                    result.migrated_count += 1
                    record_migrated_job("migrated")
                except Exception as e:
                    message = f'Failed to migrate job "{job.job_title}" at {job.company}: {e}'
                    logger.warning(message)
                    result.errors.append(message)
                    record_migrated_job("failed")

            result.success = result.migrated_count == result.total_count

        except Exception as e:
            logger.error(f"Migration failed: {e}")
            result.errors.append(f"Migration failed: {e}")

        logger.info(
            f"Migration finished: {result.migrated_count}/{result.total_count} jobs, "
            f"{len(result.errors)} errors"
        )
        return result

    def clear_local_data(self) -> None:
        """Remove all local jobs; failures are ignored."""
        self.local_service.clear()
