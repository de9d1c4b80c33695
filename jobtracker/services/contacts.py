"""
Referral Contact Management

Pure helpers over a JobPosting's ordered contact list. Each returns a new
JobPosting with last_updated refreshed; persist it with
``backend.update_job(job.id, {"referral_contacts": job.referral_contacts})``.

Rules:
    - New contacts start as "Not Contacted"
    - The first move to "Contacted" stamps date_contacted if unset
    - Removing an unknown contact id is a no-op
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from jobtracker.schemas.job import JobPosting, ReferralContact, ReferralStatus


def _now() -> datetime:
    return datetime.now(timezone.utc)


def add_contact(
    job: JobPosting,
    name: str,
    contact_method: str,
    date_contacted: Optional[datetime] = None,
) -> JobPosting:
    contact = ReferralContact(
        id=str(uuid.uuid4()),
        name=name,
        contact_method=contact_method,
        date_contacted=date_contacted,
        status=ReferralStatus.NOT_CONTACTED,
    )
    return job.model_copy(update={
        "referral_contacts": [*job.referral_contacts, contact],
        "last_updated": _now(),
    })


def update_contact_status(job: JobPosting, contact_id: str, status: ReferralStatus) -> JobPosting:
    """Returns the job unchanged when the contact id is unknown."""
    contacts = list(job.referral_contacts)

    for index, contact in enumerate(contacts):
        if contact.id != contact_id:
            continue

        date_contacted = contact.date_contacted
        if status == ReferralStatus.CONTACTED and date_contacted is None:
            date_contacted = _now()

        contacts[index] = contact.model_copy(update={
            "status": status,
            "date_contacted": date_contacted,
        })
        return job.model_copy(update={"referral_contacts": contacts, "last_updated": _now()})

    return job


def remove_contact(job: JobPosting, contact_id: str) -> JobPosting:
    remaining = [c for c in job.referral_contacts if c.id != contact_id]
    if len(remaining) == len(job.referral_contacts):
        return job
    return job.model_copy(update={"referral_contacts": remaining, "last_updated": _now()})


def get_contact(job: JobPosting, contact_id: str) -> Optional[ReferralContact]:
    for contact in job.referral_contacts:
        if contact.id == contact_id:
            return contact
    return None
