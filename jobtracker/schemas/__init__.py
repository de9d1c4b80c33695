from jobtracker.schemas.job import (
    ApplicationStatus,
    ReferralStatus,
    ReferralOutreachStatus,
    ReferralContact,
    JobPosting,
    JobPostingCreate,
    JobPostingUpdate,
    ContactCreate,
    ContactStatusUpdate,
    JobListResponse,
)
from jobtracker.schemas.migration import MigrationResult, MigrationStatus, StorageStatus
from jobtracker.schemas.auth import LoginRequest, LoginResponse

__all__ = [
    "ApplicationStatus",
    "ReferralStatus",
    "ReferralOutreachStatus",
    "ReferralContact",
    "JobPosting",
    "JobPostingCreate",
    "JobPostingUpdate",
    "ContactCreate",
    "ContactStatusUpdate",
    "JobListResponse",
    "MigrationResult",
    "MigrationStatus",
    "StorageStatus",
    "LoginRequest",
    "LoginResponse",
]
