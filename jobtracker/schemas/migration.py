from typing import List

from pydantic import Field

from jobtracker.schemas.job import CamelModel


class MigrationResult(CamelModel):
    success: bool = False
    migrated_count: int = 0
    total_count: int = 0
    errors: List[str] = Field(default_factory=list)


class MigrationStatus(CamelModel):
    has_local_data: bool
    local_job_count: int


class StorageStatus(CamelModel):
    backend: str  # "local" or "cloud"
    available: bool
