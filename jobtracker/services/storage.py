"""
Storage Backend Contract

Both job stores satisfy the same async contract, so callers never need to
know whether jobs live on this device or in the cloud:

    await backend.save_job(payload)          -> JobPosting
    await backend.get_job(job_id)            -> JobPosting | None
    await backend.get_all_jobs()             -> list[JobPosting] (newest first)
    await backend.update_job(job_id, update) -> JobPosting | None
    await backend.delete_job(job_id)         -> bool
    backend.is_available()                   -> bool

Implementations:
    - LocalStorageBackend (jobtracker.services.local_storage)
    - RemoteStorageBackend (jobtracker.services.remote_storage)
"""

from typing import Any, List, Mapping, Optional, Protocol, Union, runtime_checkable

from jobtracker.schemas.job import JobPosting, JobPostingCreate, JobPostingUpdate

JobPayload = Union[JobPostingCreate, Mapping[str, Any]]
JobUpdates = Union[JobPostingUpdate, Mapping[str, Any]]

STORAGE_OPERATIONS = (
    "save_job",
    "get_job",
    "get_all_jobs",
    "update_job",
    "delete_job",
    "is_available",
)


@runtime_checkable
class StorageBackend(Protocol):
    kind: str  # "local" or "cloud"

    async def save_job(self, job: JobPayload) -> JobPosting: ...

    async def get_job(self, job_id: str) -> Optional[JobPosting]: ...

    async def get_all_jobs(self) -> List[JobPosting]: ...

    async def update_job(self, job_id: str, updates: JobUpdates) -> Optional[JobPosting]: ...

    async def delete_job(self, job_id: str) -> bool: ...

    def is_available(self) -> bool: ...


def as_create(job: JobPayload) -> JobPostingCreate:
    """Coerce a mapping payload; id/timestamp keys in it are ignored."""
    if isinstance(job, JobPostingCreate):
        return job
    return JobPostingCreate.model_validate(job)


def as_update(updates: JobUpdates) -> JobPostingUpdate:
    """Coerce a mapping update; id/date_added keys in it are ignored."""
    if isinstance(updates, JobPostingUpdate):
        return updates
    return JobPostingUpdate.model_validate(updates)
