"""
Remote Job Storage - cloud persistence scoped to one user

Stores jobs in the ``job_postings`` table through SQLAlchemy's async API.
A RemoteStorageBackend is bound to exactly one owner identity at
construction; every statement it issues carries ``user_id = <owner>``, so
there is no code path that reads or modifies another user's rows.

Contract (same shape as LocalStorageBackend):
    - save_job: insert, read back server-assigned id/timestamps
    - get_job / update_job: None when no owned row matches (missing and
      foreign rows are indistinguishable)
    - get_all_jobs: owned rows, newest first
    - delete_job: True on any non-error response, even if nothing matched
    - is_available: True iff an owner identity is bound (no network round trip)

Store failures raise RemoteStorageError("Failed to <op> job: <message>");
nothing is retried here. Wrap calls with ``jobtracker.errors.with_retry``
or a timeout at the call site when needed.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, List, Optional

from sqlalchemy import and_, case, delete, func, insert, literal, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from jobtracker.errors import RemoteStorageError
from jobtracker.middleware.metrics import record_storage_operation
from jobtracker.models.job_posting import job_postings
from jobtracker.schemas.job import ApplicationStatus, JobPosting
from jobtracker.services.storage import JobPayload, JobUpdates, as_create, as_update
from jobtracker.services.transformers import (
    db_row_to_job_posting,
    job_posting_to_db_insert,
    job_updates_to_db_update,
)

logger = logging.getLogger(__name__)

_FAILURE_MESSAGES = {
    "save_job": "Failed to save job",
    "get_job": "Failed to get job",
    "get_all_jobs": "Failed to get jobs",
    "update_job": "Failed to update job",
    "delete_job": "Failed to delete job",
}


class RemoteStorageBackend:
    """
    Cloud job storage for a single user.

    Attributes:
        user_id: Owner identity applied to every statement
        session_factory: Async session factory for the cloud database
    """

    kind = "cloud"

    def __init__(self, user_id: str, session_factory: async_sessionmaker[AsyncSession]):
        self.user_id = user_id
        self.session_factory = session_factory

    def is_available(self) -> bool:
        return bool(self.user_id)

    def _owned(self, job_id: str):
        return and_(job_postings.c.id == job_id, job_postings.c.user_id == self.user_id)

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        start = time.perf_counter()
        try:
            async with self.session_factory() as session:
                yield session
        except (SQLAlchemyError, OSError) as e:
            record_storage_operation(self.kind, operation, "error", time.perf_counter() - start)
            logger.error(f"Cloud storage {operation} failed for user {self.user_id}: {e}")
            raise RemoteStorageError(f"{_FAILURE_MESSAGES[operation]}: {e}") from e

    async def save_job(self, job: JobPayload) -> JobPosting:
        if not self.user_id:
            raise RemoteStorageError(f"{_FAILURE_MESSAGES['save_job']}: no user is bound")

        start = time.perf_counter()
        payload = as_create(job)
        values = job_posting_to_db_insert(payload, self.user_id)

        if payload.status == ApplicationStatus.APPLIED and payload.date_applied is None:
            values["date_applied"] = datetime.now(timezone.utc)

        async with self._session("save_job") as session:
            result = await session.execute(
                insert(job_postings).values(**values).returning(*job_postings.c)
            )
            row = result.mappings().one()
            await session.commit()

        record_storage_operation(self.kind, "save_job", "ok", time.perf_counter() - start)
        return db_row_to_job_posting(row)

    async def get_job(self, job_id: str) -> Optional[JobPosting]:
        start = time.perf_counter()

        async with self._session("get_job") as session:
            result = await session.execute(select(job_postings).where(self._owned(job_id)))
            row = result.mappings().one_or_none()

        outcome = "ok" if row is not None else "not_found"
        record_storage_operation(self.kind, "get_job", outcome, time.perf_counter() - start)
        return db_row_to_job_posting(row) if row is not None else None

    async def get_all_jobs(self) -> List[JobPosting]:
        start = time.perf_counter()

        async with self._session("get_all_jobs") as session:
            result = await session.execute(
                select(job_postings)
                .where(job_postings.c.user_id == self.user_id)
                .order_by(job_postings.c.date_added.desc())
            )
            rows = result.mappings().all()

        record_storage_operation(self.kind, "get_all_jobs", "ok", time.perf_counter() - start)
        return [db_row_to_job_posting(row) for row in rows]

    async def update_job(self, job_id: str, updates: JobUpdates) -> Optional[JobPosting]:
        """
        Apply a partial update to an owned job.

        date_applied and last_updated are resolved against the stored row
        in the same statement:
            - moving to Applied keeps an existing date_applied (COALESCE)
              and otherwise uses the caller's value or now
            - clearing date_applied on a job that stays Applied stamps now
            - last_updated never moves backwards
        """
        start = time.perf_counter()
        now = datetime.now(timezone.utc)
        values = job_updates_to_db_update(as_update(updates), now=now)
        stamp = literal(now, job_postings.c.date_applied.type)

        if values.get("status") == ApplicationStatus.APPLIED.value:
            explicit = values.get("date_applied")
            values["date_applied"] = func.coalesce(
                job_postings.c.date_applied,
                literal(explicit, job_postings.c.date_applied.type) if explicit is not None else stamp,
            )
        elif "status" not in values and "date_applied" in values and values["date_applied"] is None:
            values["date_applied"] = case(
                (job_postings.c.status == ApplicationStatus.APPLIED.value, stamp),
                else_=None,
            )

        values["last_updated"] = case(
            (job_postings.c.last_updated > stamp, job_postings.c.last_updated),
            else_=stamp,
        )

        async with self._session("update_job") as session:
            result = await session.execute(
                update(job_postings)
                .where(self._owned(job_id))
                .values(**values)
                .returning(*job_postings.c)
            )
            row = result.mappings().one_or_none()
            await session.commit()

        outcome = "ok" if row is not None else "not_found"
        record_storage_operation(self.kind, "update_job", outcome, time.perf_counter() - start)
        return db_row_to_job_posting(row) if row is not None else None

    async def delete_job(self, job_id: str) -> bool:
        # Does not report whether a row matched
        start = time.perf_counter()

        async with self._session("delete_job") as session:
            await session.execute(delete(job_postings).where(self._owned(job_id)))
            await session.commit()

        record_storage_operation(self.kind, "delete_job", "ok", time.perf_counter() - start)
        return True
