"""Shared fixtures: in-memory local store and a temporary SQLite cloud database."""

from datetime import date, datetime, timezone

import pytest
import pytest_asyncio

from jobtracker.database import create_session_factory, init_db
from jobtracker.schemas import JobPostingCreate
from jobtracker.services.key_value import MemoryKeyValueStore
from jobtracker.services.local_storage import LocalStorageBackend, LocalStorageService


@pytest.fixture
def memory_store():
    return MemoryKeyValueStore()


@pytest.fixture
def local_service(memory_store):
    return LocalStorageService(memory_store)


@pytest.fixture
def local_backend(local_service):
    return LocalStorageBackend(local_service)


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Session factory over a fresh SQLite file with the schema created."""
    engine, factory = create_session_factory(f"sqlite:///{tmp_path / 'jobs.db'}")
    await init_db(engine)
    yield factory
    await engine.dispose()


@pytest.fixture
def job_payload():
    """Fully populated save payload."""
    return JobPostingCreate(
        job_id="3791234567",
        job_title="Software Engineer",
        company="Acme",
        location="London, UK (Hybrid)",
        description="Build and run Python services.",
        linkedin_url="https://www.linkedin.com/jobs/view/3791234567",
        application_link="https://acme.example/careers/123",
        application_requirements="Cover letter required",
        application_deadline=date(2026, 12, 1),
        referral_message="Hi, would you be open to referring me?",
        referral_outreach_status="Found Contact",
        notes="Strong match",
        status="Saved",
        referral_contacts=[
            {
                "id": "c-1",
                "name": "Jane Doe",
                "contactMethod": "LinkedIn",
                "dateContacted": None,
                "status": "Not Contacted",
            },
            {
                "id": "c-2",
                "name": "Sam Lee",
                "contactMethod": "sam@acme.example",
                "dateContacted": datetime(2026, 10, 1, 9, 30, tzinfo=timezone.utc),
                "status": "Contacted",
            },
        ],
        date_applied=None,
    )


@pytest.fixture
def minimal_payload():
    return JobPostingCreate(job_title="Data Engineer", company="Globex")
