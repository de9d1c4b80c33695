"""
Local Job Storage - on-device persistence for signed-out use

All jobs live in one JSON array stored under one well-known key of a
synchronous ``KeyValueStore``. Every write rewrites the whole array
(read-modify-write, no locking: the local store is single-process).

Two layers:
    - LocalStorageService: synchronous operations plus raw accessors used
      by the migration service (read_all_jobs, clear)
    - LocalStorageBackend: async adapter exposing the StorageBackend
      contract shared with RemoteStorageBackend

Failure handling:
    - Unavailable/full store: writes fail silently (logged), reads return
      no data; callers check is_available()
    - Corrupted blob (not a JSON array): treated as an empty collection
    - Stale enum values in a record: replaced with defaults on read
    - Records that cannot be read at all: skipped on read, written back
      unchanged on every rewrite
    - Unknown id: get/update return None, delete returns False
"""

import json
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import TypeAdapter, ValidationError

from jobtracker.errors import StorageUnavailableError
from jobtracker.middleware.metrics import record_storage_operation
from jobtracker.schemas.job import ApplicationStatus, JobPosting
from jobtracker.services.key_value import KeyValueStore
from jobtracker.services.storage import JobPayload, JobUpdates, as_create, as_update
from jobtracker.services.transformers import local_record_to_job_posting

logger = logging.getLogger(__name__)

STORAGE_KEY = "linkedin-job-tracker-jobs"
PROBE_KEY = "__storage_test__"

_jobs_adapter = TypeAdapter(List[JobPosting])


def generate_unique_id() -> str:
    return str(uuid.uuid4())


def sort_newest_first(jobs: List[JobPosting]) -> List[JobPosting]:
    # Ties on date_added: later-appended job first
    ordered = sorted(enumerate(jobs), key=lambda item: (item[1].date_added, item[0]), reverse=True)
    return [job for _, job in ordered]


class LocalStorageService:
    """
    Synchronous job storage over a key-value store.

    Attributes:
        store: Underlying key-value store
        storage_key: Key holding the serialized job array
    """

    def __init__(self, store: KeyValueStore, storage_key: str = STORAGE_KEY):
        self.store = store
        self.storage_key = storage_key

    def is_available(self) -> bool:
        """Probe the store with a throwaway write/remove cycle."""
        try:
            self.store.set_item(PROBE_KEY, PROBE_KEY)
            self.store.remove_item(PROBE_KEY)
            return True
        except StorageUnavailableError as e:
            logger.debug(f"Local storage unavailable: {e}")
            return False

    # ==================== Raw accessors ====================

    def _load(self) -> Tuple[List[JobPosting], List[Any]]:
        """
        Read the stored array.

        Returns:
            (jobs, unreadable) where unreadable holds the raw elements that
            could not be turned into a JobPosting. Writers put them back so
            a rewrite never drops data it could not parse.
        """
        try:
            data = self.store.get_item(self.storage_key)
        except StorageUnavailableError as e:
            logger.warning(f"Local storage read failed: {e}")
            return [], []

        if not data:
            return [], []

        try:
            items = json.loads(data)
        except ValueError as e:
            logger.warning(f"Ignoring corrupted local job data: {e}")
            return [], []

        if not isinstance(items, list):
            logger.warning(f"Ignoring local job data of type {type(items).__name__}")
            return [], []

        jobs: List[JobPosting] = []
        unreadable: List[Any] = []
        for item in items:
            if not isinstance(item, dict):
                logger.warning(f"Keeping unreadable local job record: {item!r}")
                unreadable.append(item)
                continue
            try:
                jobs.append(local_record_to_job_posting(item))
            except ValidationError as e:
                logger.warning(f"Keeping unreadable local job record {item.get('id')}: {e}")
                unreadable.append(item)

        return jobs, unreadable

    def read_all_jobs(self) -> List[JobPosting]:
        """
        Load every readable job in stored order.

        Unknown enum values are replaced with defaults. Returns an empty
        list when the store is unreadable, empty, or the blob is not a JSON
        array.
        """
        return self._load()[0]

    def write_all_jobs(self, jobs: List[JobPosting], unreadable: Sequence[Any] = ()) -> bool:
        """Persist the whole job array; returns False if the store refused it."""
        records = _jobs_adapter.dump_python(jobs, mode="json", by_alias=True)
        payload = json.dumps([*records, *unreadable], separators=(",", ":"))
        try:
            self.store.set_item(self.storage_key, payload)
            return True
        except StorageUnavailableError as e:
            logger.warning(f"Local storage write failed: {e}")
            return False

    def clear(self) -> None:
        """Remove the stored job array; failures are logged and ignored."""
        try:
            self.store.remove_item(self.storage_key)
        except StorageUnavailableError as e:
            logger.warning(f"Failed to clear local job data: {e}")

    # ==================== Job operations ====================

    def save_job(self, job: JobPayload) -> JobPosting:
        payload = as_create(job)
        now = datetime.now(timezone.utc)

        fields = payload.model_dump()
        if payload.status == ApplicationStatus.APPLIED and payload.date_applied is None:
            fields["date_applied"] = now

        new_job = JobPosting.model_validate({
            **fields,
            "id": generate_unique_id(),
            "date_added": now,
            "last_updated": now,
        })

        jobs, unreadable = self._load()
        jobs.append(new_job)
        self.write_all_jobs(jobs, unreadable)

        return new_job

    def get_job(self, job_id: str) -> Optional[JobPosting]:
        for job in self.read_all_jobs():
            if job.id == job_id:
                return job
        return None

    def get_all_jobs(self) -> List[JobPosting]:
        return sort_newest_first(self.read_all_jobs())

    def update_job(self, job_id: str, updates: JobUpdates) -> Optional[JobPosting]:
        """
        Merge explicitly set fields into a stored job.

        id and date_added are never changed; last_updated is refreshed and
        never moves backwards. A job left in Applied always has a
        date_applied, and moving to Applied keeps an existing one.
        """
        changes = as_update(updates).changes()
        jobs, unreadable = self._load()

        for index, current in enumerate(jobs):
            if current.id != job_id:
                continue

            now = max(datetime.now(timezone.utc), current.last_updated)
            if changes.get("status", current.status) == ApplicationStatus.APPLIED:
                if "status" in changes and current.date_applied is not None:
                    changes["date_applied"] = current.date_applied
                elif changes.get("date_applied", current.date_applied) is None:
                    changes["date_applied"] = now

            updated = current.model_copy(update={**changes, "last_updated": now})
            jobs[index] = updated
            self.write_all_jobs(jobs, unreadable)
            return updated

        return None

    def delete_job(self, job_id: str) -> bool:
        jobs, unreadable = self._load()
        remaining = [job for job in jobs if job.id != job_id]

        if len(remaining) == len(jobs):
            return False

        self.write_all_jobs(remaining, unreadable)
        return True


class LocalStorageBackend:
    """Async adapter over LocalStorageService (StorageBackend contract)."""

    kind = "local"

    def __init__(self, service: LocalStorageService):
        self.service = service

    async def save_job(self, job: JobPayload) -> JobPosting:
        start = time.perf_counter()
        result = self.service.save_job(job)
        record_storage_operation(self.kind, "save_job", "ok", time.perf_counter() - start)
        return result

    async def get_job(self, job_id: str) -> Optional[JobPosting]:
        start = time.perf_counter()
        result = self.service.get_job(job_id)
        outcome = "ok" if result is not None else "not_found"
        record_storage_operation(self.kind, "get_job", outcome, time.perf_counter() - start)
        return result

    async def get_all_jobs(self) -> List[JobPosting]:
        start = time.perf_counter()
        result = self.service.get_all_jobs()
        record_storage_operation(self.kind, "get_all_jobs", "ok", time.perf_counter() - start)
        return result

    async def update_job(self, job_id: str, updates: JobUpdates) -> Optional[JobPosting]:
        start = time.perf_counter()
        result = self.service.update_job(job_id, updates)
        outcome = "ok" if result is not None else "not_found"
        record_storage_operation(self.kind, "update_job", outcome, time.perf_counter() - start)
        return result

    async def delete_job(self, job_id: str) -> bool:
        start = time.perf_counter()
        result = self.service.delete_job(job_id)
        outcome = "ok" if result else "not_found"
        record_storage_operation(self.kind, "delete_job", outcome, time.perf_counter() - start)
        return result

    def is_available(self) -> bool:
        return self.service.is_available()
