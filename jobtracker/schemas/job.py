"""
Job Posting Schemas - application-facing record types

Records serialize with camelCase aliases (``jobTitle``, ``linkedInUrl``,
``dateAdded``) for the local JSON blob and the HTTP API; attribute names
are accepted on input as well.

Lifecycle:
    JobPostingCreate --save--> JobPosting --update(JobPostingUpdate)--> JobPosting

Status Flow:
    Saved → Applied → Interview → Offer/Rejected
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ApplicationStatus(str, Enum):
    SAVED = "Saved"
    APPLIED = "Applied"
    INTERVIEW = "Interview"
    OFFER = "Offer"
    REJECTED = "Rejected"


class ReferralStatus(str, Enum):
    """State of a referral request to one contact."""
    NOT_CONTACTED = "Not Contacted"
    CONTACTED = "Contacted"
    REFERRAL_RECEIVED = "Referral Received"
    NO_RESPONSE = "No Response"


class ReferralOutreachStatus(str, Enum):
    """Overall referral outreach stage for a job."""
    HAVE_TO_FIND = "Have to Find"
    FOUND_CONTACT = "Found Contact"
    MESSAGED = "Messaged"
    GOT_REFERRAL = "Got Referral"
    NO_RESPONSE = "No Response"
    DECLINED = "Declined"


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReferralContact(CamelModel):
    id: str
    name: str
    contact_method: str  # email, LinkedIn, phone, etc.
    date_contacted: Optional[UtcDatetime] = None
    status: ReferralStatus = ReferralStatus.NOT_CONTACTED


class JobPostingFields(CamelModel):
    job_id: Optional[str] = None  # External posting ID (e.g. LinkedIn)
    job_title: str
    company: str
    location: str = ""
    description: str = ""
    linkedin_url: Optional[str] = Field(default=None, alias="linkedInUrl")
    application_link: Optional[str] = None
    application_requirements: Optional[str] = None
    application_deadline: Optional[date] = None
    referral_message: str = ""
    referral_outreach_status: ReferralOutreachStatus = ReferralOutreachStatus.HAVE_TO_FIND
    notes: str = ""
    status: ApplicationStatus = ApplicationStatus.SAVED
    referral_contacts: List[ReferralContact] = Field(default_factory=list)
    date_applied: Optional[UtcDatetime] = None


class JobPostingCreate(JobPostingFields):
    """Save payload; id and timestamps are assigned by storage."""
    pass


class JobPosting(JobPostingFields):
    id: str
    date_added: UtcDatetime
    last_updated: UtcDatetime


class JobPostingUpdate(CamelModel):
    """
    Partial update. Only fields the caller explicitly sets are applied
    (``model_fields_set``); id and date_added cannot be changed.
    """

    job_id: Optional[str] = None
    job_title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    linkedin_url: Optional[str] = Field(default=None, alias="linkedInUrl")
    application_link: Optional[str] = None
    application_requirements: Optional[str] = None
    application_deadline: Optional[date] = None
    referral_message: Optional[str] = None
    referral_outreach_status: Optional[ReferralOutreachStatus] = None
    notes: Optional[str] = None
    status: Optional[ApplicationStatus] = None
    referral_contacts: Optional[List[ReferralContact]] = None
    date_applied: Optional[UtcDatetime] = None

    @field_validator(
        "job_title",
        "company",
        "location",
        "description",
        "referral_message",
        "referral_outreach_status",
        "notes",
        "status",
        "referral_contacts",
    )
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("field may not be null")
        return value

    def changes(self) -> dict:
        """Explicitly set fields as attribute values (nested models kept)."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class ContactCreate(CamelModel):
    name: str
    contact_method: str
    date_contacted: Optional[UtcDatetime] = None


class ContactStatusUpdate(CamelModel):
    status: ReferralStatus


class JobListResponse(CamelModel):
    jobs: List[JobPosting]
    total: int
