"""
Job Posting Transformers - record <-> cloud row conversion

Converts between the application record (``JobPosting``, serialized with
camelCase aliases) and the ``job_postings`` row shape (snake_case columns
plus an explicit ``user_id`` owner column).

Rows are treated as untrusted input: enumerated columns are stored as
plain text and may hold stale or hand-edited values, so unknown values are
replaced with a default (logged as a warning) instead of failing the read.

Functions:
    - db_row_to_job_posting(): row mapping -> JobPosting
    - local_record_to_job_posting(): local JSON element -> JobPosting
    - job_posting_to_db_insert(): JobPostingCreate + owner -> insert values
    - job_updates_to_db_update(): JobPostingUpdate -> update values

All functions are pure apart from logging.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from jobtracker.schemas.job import (
    ApplicationStatus,
    JobPosting,
    JobPostingCreate,
    JobPostingUpdate,
    ReferralOutreachStatus,
    ReferralStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_APPLICATION_STATUS = ApplicationStatus.SAVED
DEFAULT_OUTREACH_STATUS = ReferralOutreachStatus.HAVE_TO_FIND
DEFAULT_CONTACT_STATUS = ReferralStatus.NOT_CONTACTED

_APPLICATION_STATUSES = {s.value for s in ApplicationStatus}
_OUTREACH_STATUSES = {s.value for s in ReferralOutreachStatus}
_CONTACT_STATUSES = {s.value for s in ReferralStatus}


def is_valid_application_status(value: Any) -> bool:
    return isinstance(value, str) and value in _APPLICATION_STATUSES


def is_valid_referral_outreach_status(value: Any) -> bool:
    return isinstance(value, str) and value in _OUTREACH_STATUSES


def is_valid_referral_status(value: Any) -> bool:
    return isinstance(value, str) and value in _CONTACT_STATUSES


def _valid_or_default(
    value: Any,
    is_valid: Callable[[Any], bool],
    default: Enum,
    label: str,
    job_id: Any,
) -> Any:
    if is_valid(value):
        return value
    logger.warning(f"Job {job_id}: unknown {label} {value!r}, using {default.value!r}")
    return default


def normalize_contacts(contacts: Any, job_id: Any) -> List[Any]:
    """
    Replace unknown contact statuses with "Not Contacted".

    Contacts are stored as JSON objects in the record's camelCase key
    style; entries that are not objects are passed through unchanged.
    """
    normalized = []
    for contact in contacts or []:
        if isinstance(contact, Mapping) and "status" in contact:
            contact = {
                **contact,
                "status": _valid_or_default(
                    contact["status"], is_valid_referral_status,
                    DEFAULT_CONTACT_STATUS, "contact status", job_id,
                ),
            }
        normalized.append(contact)
    return normalized


def _to_column_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        # referral_contacts: stored as JSON objects in the record's own key style
        return [item.model_dump(mode="json", by_alias=True) for item in value]
    if isinstance(value, datetime):
        return value.astimezone(timezone.utc)
    return value


def db_row_to_job_posting(row: Mapping[str, Any]) -> JobPosting:
    """
    Convert a job_postings row to a JobPosting record.

    Unknown status values fall back to "Saved", unknown outreach values to
    "Have to Find", unknown contact statuses to "Not Contacted"; a missing
    contact list becomes an empty list.

    Args:
        row: Column-name keyed mapping (e.g. ``Result.mappings()`` row)

    Returns:
        JobPosting
    """
    job_id = row.get("id")

    return JobPosting.model_validate({
        "id": row["id"],
        "job_id": row.get("job_id"),
        "job_title": row["job_title"],
        "company": row["company"],
        "location": row.get("location") or "",
        "description": row.get("description") or "",
        "linkedin_url": row.get("linkedin_url"),
        "application_link": row.get("application_link"),
        "application_requirements": row.get("application_requirements"),
        "application_deadline": row.get("application_deadline"),
        "referral_message": row.get("referral_message") or "",
        "referral_outreach_status": _valid_or_default(
            row.get("referral_outreach_status"), is_valid_referral_outreach_status,
            DEFAULT_OUTREACH_STATUS, "referral outreach status", job_id,
        ),
        "notes": row.get("notes") or "",
        "status": _valid_or_default(
            row.get("status"), is_valid_application_status,
            DEFAULT_APPLICATION_STATUS, "status", job_id,
        ),
        "referral_contacts": normalize_contacts(row.get("referral_contacts"), job_id),
        "date_added": row["date_added"],
        "date_applied": row.get("date_applied"),
        "last_updated": row["last_updated"],
    })


def local_record_to_job_posting(record: Mapping[str, Any]) -> JobPosting:
    """
    Convert one element of the local JSON array (camelCase keys) to a
    JobPosting, applying the same enum defaults as cloud rows.

    Raises:
        ValidationError: the element is missing required fields or holds
            values that cannot be coerced
    """
    job_id = record.get("id")

    return JobPosting.model_validate({
        **record,
        "status": _valid_or_default(
            record.get("status"), is_valid_application_status,
            DEFAULT_APPLICATION_STATUS, "status", job_id,
        ),
        "referralOutreachStatus": _valid_or_default(
            record.get("referralOutreachStatus"), is_valid_referral_outreach_status,
            DEFAULT_OUTREACH_STATUS, "referral outreach status", job_id,
        ),
        "referralContacts": normalize_contacts(record.get("referralContacts"), job_id),
    })


def job_posting_to_db_insert(job: JobPostingCreate, user_id: str) -> Dict[str, Any]:
    """
    Convert a save payload to insert values for the given owner.

    Only fields the caller set on the payload are included, so column
    defaults apply to the rest. id, date_added and last_updated are never
    part of the payload; storage assigns them.

    Args:
        job: Save payload
        user_id: Owner identity written to the user_id column

    Returns:
        Dict of column -> value
    """
    values: Dict[str, Any] = {"user_id": user_id}
    for field in job.model_fields_set:
        values[field] = _to_column_value(getattr(job, field))
    return values


def job_updates_to_db_update(
    updates: JobPostingUpdate,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Convert a partial update to update values.

    Only fields explicitly set on ``updates`` appear in the result;
    last_updated is always set.

    Args:
        updates: Partial update
        now: Timestamp for last_updated (defaults to current UTC time)

    Returns:
        Dict of column -> value
    """
    values: Dict[str, Any] = {
        field: _to_column_value(value)
        for field, value in updates.changes().items()
    }
    values["last_updated"] = now or datetime.now(timezone.utc)
    return values
