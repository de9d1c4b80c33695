"""Search, status filtering and ordering for job lists."""

from typing import List, Optional, Union

from jobtracker.schemas.job import ApplicationStatus, JobPosting

ALL_STATUSES = "All"

StatusFilter = Union[ApplicationStatus, str]


def search_filter(jobs: List[JobPosting], query: Optional[str]) -> List[JobPosting]:
    """Case-insensitive match on job title or company; blank query keeps all."""
    if not query or not query.strip():
        return jobs

    needle = query.strip().lower()
    return [
        job for job in jobs
        if needle in job.job_title.lower() or needle in job.company.lower()
    ]


def status_filter(jobs: List[JobPosting], status: Optional[StatusFilter]) -> List[JobPosting]:
    if not status or status == ALL_STATUSES:
        return jobs
    return [job for job in jobs if job.status == status]


def sort_by_date_added(jobs: List[JobPosting]) -> List[JobPosting]:
    """Newest first; returns a new list."""
    return sorted(jobs, key=lambda job: job.date_added, reverse=True)


def apply_filters_and_sort(
    jobs: List[JobPosting],
    query: Optional[str] = None,
    status: Optional[StatusFilter] = ALL_STATUSES,
) -> List[JobPosting]:
    result = search_filter(jobs, query)
    result = status_filter(result, status)
    return sort_by_date_added(result)
