"""
Job Posting Row - SQLAlchemy ORM model for cloud-stored applications

One row per tracked job application, scoped to the owning user through
``user_id``. Column names use snake_case; the application-facing record
(``jobtracker.schemas.JobPosting``) is converted to and from this shape by
``jobtracker.services.transformers``.

Enumerated columns (status, referral_outreach_status) are plain text and
are revalidated on read.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, Date, DateTime, JSON

from jobtracker.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobPostingRow(Base):
    """
    Cloud row for a tracked job application.

    Attributes:
        id: UUID primary key (generated on insert)
        user_id: Owner identity; every query filters on it (indexed)
        job_id: External posting reference (e.g. LinkedIn job ID)
        job_title/company/location/description: Extracted posting details
        linkedin_url/application_link: Optional URLs
        application_requirements: Free-text application instructions
        application_deadline: Optional closing date
        referral_message: Drafted referral request text
        referral_outreach_status: Overall referral outreach stage
        notes: User notes
        status: Application pipeline stage
        referral_contacts: JSON list of contact objects (ordered)
        date_added/date_applied/last_updated: Lifecycle timestamps
    """

    __tablename__ = "job_postings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    job_id = Column(String(255), nullable=True)
    job_title = Column(String(500), nullable=False)
    company = Column(String(500), nullable=False)
    location = Column(String(500), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    linkedin_url = Column(String(2000), nullable=True)
    application_link = Column(String(2000), nullable=True)
    application_requirements = Column(Text, nullable=True)
    application_deadline = Column(Date, nullable=True)
    referral_message = Column(Text, nullable=False, default="")
    referral_outreach_status = Column(String(32), nullable=False, default="Have to Find")
    notes = Column(Text, nullable=False, default="")
    status = Column(String(32), nullable=False, default="Saved")
    referral_contacts = Column(JSON, nullable=False, default=list)
    date_added = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    date_applied = Column(DateTime(timezone=True), nullable=True)
    last_updated = Column(DateTime(timezone=True), nullable=False, default=utcnow)


job_postings = JobPostingRow.__table__
