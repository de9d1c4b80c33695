"""
Tests for Remote Job Storage

Runs RemoteStorageBackend against a temporary SQLite database.

Tests cover:
- Save/read back with server-assigned fields
- Owner isolation for get/update/delete/list
- Applied-at stamping (set once, never overwritten)
- last_updated never moving backwards
- Contact status defaults for stale stored values
- Error wrapping into RemoteStorageError
"""

import asyncio
from datetime import datetime, timezone

import pytest
from sqlalchemy import update

from jobtracker.database import create_session_factory
from jobtracker.errors import RemoteStorageError
from jobtracker.models.job_posting import job_postings
from jobtracker.schemas import ApplicationStatus, JobPostingUpdate, ReferralStatus
from jobtracker.services.remote_storage import RemoteStorageBackend


@pytest.fixture
def alice(session_factory):
    return RemoteStorageBackend("alice", session_factory)


@pytest.fixture
def bob(session_factory):
    return RemoteStorageBackend("bob", session_factory)


class TestRemoteSave:
    """Test RemoteStorageBackend.save_job."""

    @pytest.mark.asyncio
    async def test_save_returns_stored_record(self, alice, job_payload):
        before = datetime.now(timezone.utc)

        job = await alice.save_job(job_payload)

        assert job.id
        assert job.date_added >= before
        assert job.last_updated >= before
        for field in type(job_payload).model_fields:
            assert getattr(job, field) == getattr(job_payload, field), field

    @pytest.mark.asyncio
    async def test_save_minimal_payload_uses_defaults(self, alice, minimal_payload):
        job = await alice.save_job(minimal_payload)

        assert job.status == ApplicationStatus.SAVED
        assert job.location == ""
        assert job.referral_contacts == []
        assert job.date_applied is None

    @pytest.mark.asyncio
    async def test_save_then_get(self, alice, job_payload):
        saved = await alice.save_job(job_payload)
        assert await alice.get_job(saved.id) == saved

    @pytest.mark.asyncio
    async def test_save_applied_stamps_date_applied(self, alice):
        job = await alice.save_job({"jobTitle": "SRE", "company": "Initech", "status": "Applied"})
        assert job.date_applied is not None

    @pytest.mark.asyncio
    async def test_save_without_user_raises(self, session_factory, minimal_payload):
        backend = RemoteStorageBackend("", session_factory)

        with pytest.raises(RemoteStorageError, match="Failed to save job"):
            await backend.save_job(minimal_payload)

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, alice, minimal_payload):
        jobs = [await alice.save_job(minimal_payload) for _ in range(5)]
        assert len({job.id for job in jobs}) == 5


class TestRemoteRead:
    """Test get_job / get_all_jobs."""

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, alice):
        assert await alice.get_job("00000000-0000-0000-0000-000000000000") is None

    @pytest.mark.asyncio
    async def test_get_other_users_job_returns_none(self, alice, bob, minimal_payload):
        job = await alice.save_job(minimal_payload)
        assert await bob.get_job(job.id) is None

    @pytest.mark.asyncio
    async def test_get_all_scoped_and_newest_first(self, alice, bob):
        for title in ("First", "Second", "Third"):
            await alice.save_job({"jobTitle": title, "company": "Acme"})
            await asyncio.sleep(0.01)
        await bob.save_job({"jobTitle": "Bob's job", "company": "Acme"})

        titles = [job.job_title for job in await alice.get_all_jobs()]

        assert titles == ["Third", "Second", "First"]
        assert [job.job_title for job in await bob.get_all_jobs()] == ["Bob's job"]

    @pytest.mark.asyncio
    async def test_get_all_empty(self, alice):
        assert await alice.get_all_jobs() == []


class TestRemoteUpdate:
    """Test RemoteStorageBackend.update_job."""

    @pytest.mark.asyncio
    async def test_update_present_fields_only(self, alice, job_payload):
        saved = await alice.save_job(job_payload)

        updated = await alice.update_job(saved.id, JobPostingUpdate(notes="Onsite next week"))

        assert updated.notes == "Onsite next week"
        assert updated.company == saved.company
        assert updated.referral_contacts == saved.referral_contacts
        assert updated.date_added == saved.date_added
        assert updated.last_updated >= saved.last_updated

    @pytest.mark.asyncio
    async def test_update_ignores_id_and_date_added(self, alice, minimal_payload):
        saved = await alice.save_job(minimal_payload)

        updated = await alice.update_job(saved.id, {"id": "other", "dateAdded": "2000-01-01T00:00:00Z"})

        assert updated.id == saved.id
        assert updated.date_added == saved.date_added

    @pytest.mark.asyncio
    async def test_update_other_users_job_returns_none(self, alice, bob, minimal_payload):
        saved = await alice.save_job(minimal_payload)

        assert await bob.update_job(saved.id, {"notes": "hijack"}) is None
        assert (await alice.get_job(saved.id)).notes == ""

    @pytest.mark.asyncio
    async def test_update_missing_returns_none(self, alice):
        assert await alice.update_job("missing", {"notes": "x"}) is None

    @pytest.mark.asyncio
    async def test_applied_stamps_once(self, alice, minimal_payload):
        saved = await alice.save_job(minimal_payload)

        first = await alice.update_job(saved.id, {"status": "Applied"})
        assert first.date_applied is not None

        await alice.update_job(saved.id, {"status": "Interview"})
        second = await alice.update_job(saved.id, {"status": "Applied"})

        assert second.date_applied == first.date_applied

    @pytest.mark.asyncio
    async def test_explicit_date_applied_is_written(self, alice, minimal_payload):
        saved = await alice.save_job(minimal_payload)
        chosen = datetime(2026, 3, 4, 5, 6, tzinfo=timezone.utc)

        updated = await alice.update_job(saved.id, {"status": "Applied", "dateApplied": chosen.isoformat()})

        assert updated.date_applied == chosen

    @pytest.mark.asyncio
    async def test_update_contacts(self, alice, minimal_payload):
        saved = await alice.save_job(minimal_payload)
        contacts = [{"id": "c1", "name": "Ann", "contactMethod": "email", "status": "Contacted"}]

        updated = await alice.update_job(saved.id, {"referralContacts": contacts})

        assert [c.name for c in updated.referral_contacts] == ["Ann"]
        assert (await alice.get_job(saved.id)).referral_contacts == updated.referral_contacts

    @pytest.mark.asyncio
    async def test_explicit_null_with_applied_is_stamped(self, alice, minimal_payload):
        saved = await alice.save_job(minimal_payload)

        updated = await alice.update_job(saved.id, {"status": "Applied", "dateApplied": None})

        assert updated.date_applied is not None

    @pytest.mark.asyncio
    async def test_move_to_applied_keeps_existing_date(self, alice, minimal_payload):
        saved = await alice.save_job(minimal_payload)
        first = await alice.update_job(saved.id, {"status": "Applied"})
        await alice.update_job(saved.id, {"status": "Interview"})

        later = datetime(2030, 1, 1, tzinfo=timezone.utc)
        again = await alice.update_job(saved.id, {"status": "Applied", "dateApplied": later.isoformat()})

        assert again.date_applied == first.date_applied

    @pytest.mark.asyncio
    async def test_clearing_date_on_applied_job_restamps(self, alice, minimal_payload):
        saved = await alice.save_job(minimal_payload)
        await alice.update_job(saved.id, {"status": "Applied"})

        updated = await alice.update_job(saved.id, {"dateApplied": None})

        assert updated.status == ApplicationStatus.APPLIED
        assert updated.date_applied is not None

    @pytest.mark.asyncio
    async def test_clearing_date_on_saved_job(self, alice, minimal_payload):
        saved = await alice.save_job(minimal_payload)

        updated = await alice.update_job(saved.id, {"dateApplied": None})

        assert updated.date_applied is None

    @pytest.mark.asyncio
    async def test_last_updated_never_moves_backwards(self, alice, session_factory, minimal_payload):
        saved = await alice.save_job(minimal_payload)
        future = datetime(2099, 1, 1, tzinfo=timezone.utc)
        async with session_factory() as session:
            await session.execute(
                update(job_postings).where(job_postings.c.id == saved.id).values(last_updated=future)
            )
            await session.commit()

        updated = await alice.update_job(saved.id, {"notes": "Follow up"})

        assert updated.notes == "Follow up"
        assert updated.last_updated == future


class TestRemoteStaleContacts:
    """Stored contacts with unknown statuses read back with the default."""

    @pytest.mark.asyncio
    async def test_unknown_contact_status_defaults(self, alice, session_factory, minimal_payload):
        saved = await alice.save_job(minimal_payload)
        contacts = [{"id": "c1", "name": "Ann", "contactMethod": "email", "dateContacted": None, "status": "Bogus"}]
        async with session_factory() as session:
            await session.execute(
                update(job_postings).where(job_postings.c.id == saved.id).values(referral_contacts=contacts)
            )
            await session.commit()

        job = await alice.get_job(saved.id)
        listed = await alice.get_all_jobs()

        assert job.referral_contacts[0].status == ReferralStatus.NOT_CONTACTED
        assert listed[0].referral_contacts[0].status == ReferralStatus.NOT_CONTACTED


class TestRemoteDelete:
    """Test RemoteStorageBackend.delete_job."""

    @pytest.mark.asyncio
    async def test_delete_existing(self, alice, minimal_payload):
        saved = await alice.save_job(minimal_payload)

        assert await alice.delete_job(saved.id) is True
        assert await alice.get_job(saved.id) is None

    @pytest.mark.asyncio
    async def test_delete_missing_still_true(self, alice):
        assert await alice.delete_job("missing") is True

    @pytest.mark.asyncio
    async def test_delete_other_users_job_keeps_row(self, alice, bob, minimal_payload):
        saved = await alice.save_job(minimal_payload)

        assert await bob.delete_job(saved.id) is True
        assert await alice.get_job(saved.id) is not None


class TestRemoteAvailabilityAndErrors:
    """Test is_available and error wrapping."""

    def test_available_with_user(self, alice):
        assert alice.kind == "cloud"
        assert alice.is_available() is True

    def test_unavailable_without_user(self, session_factory):
        assert RemoteStorageBackend("", session_factory).is_available() is False

    @pytest.mark.asyncio
    async def test_store_errors_are_wrapped(self, tmp_path, minimal_payload):
        # No tables created: every statement fails
        engine, factory = create_session_factory(f"sqlite:///{tmp_path / 'empty.db'}")
        backend = RemoteStorageBackend("alice", factory)

        try:
            with pytest.raises(RemoteStorageError, match="Failed to save job"):
                await backend.save_job(minimal_payload)
            with pytest.raises(RemoteStorageError, match="Failed to get job"):
                await backend.get_job("x")
            with pytest.raises(RemoteStorageError, match="Failed to get jobs"):
                await backend.get_all_jobs()
            with pytest.raises(RemoteStorageError, match="Failed to update job"):
                await backend.update_job("x", {"notes": "y"})
            with pytest.raises(RemoteStorageError, match="Failed to delete job"):
                await backend.delete_job("x")
        finally:
            await engine.dispose()
