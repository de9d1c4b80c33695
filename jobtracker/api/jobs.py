from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status as http_status

from jobtracker.api.deps import get_storage
from jobtracker.schemas import (
    ContactCreate,
    ContactStatusUpdate,
    JobListResponse,
    JobPosting,
    JobPostingCreate,
    JobPostingUpdate,
)
from jobtracker.services.contacts import add_contact, remove_contact, update_contact_status
from jobtracker.services.filters import apply_filters_and_sort
from jobtracker.services.storage import StorageBackend

router = APIRouter()


async def _get_or_404(storage: StorageBackend, job_id: str) -> JobPosting:
    job = await storage.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@router.get("", response_model=JobListResponse)
async def list_jobs(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    storage: StorageBackend = Depends(get_storage),
):
    jobs = apply_filters_and_sort(await storage.get_all_jobs(), search, status)
    return JobListResponse(jobs=jobs, total=len(jobs))


@router.post("", response_model=JobPosting, status_code=http_status.HTTP_201_CREATED)
async def create_job(
    job: JobPostingCreate,
    storage: StorageBackend = Depends(get_storage),
):
    return await storage.save_job(job)


@router.get("/{job_id}", response_model=JobPosting)
async def get_job(
    job_id: str,
    storage: StorageBackend = Depends(get_storage),
):
    return await _get_or_404(storage, job_id)


@router.patch("/{job_id}", response_model=JobPosting)
async def update_job(
    job_id: str,
    update: JobPostingUpdate,
    storage: StorageBackend = Depends(get_storage),
):
    job = await storage.update_job(job_id, update)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@router.delete("/{job_id}", status_code=http_status.HTTP_204_NO_CONTENT)
async def delete_job(
    job_id: str,
    storage: StorageBackend = Depends(get_storage),
):
    if not await storage.delete_job(job_id):
        raise HTTPException(status_code=404, detail="Job not found")
    return Response(status_code=http_status.HTTP_204_NO_CONTENT)


# ==================== Referral contacts ====================

async def _save_contacts(storage: StorageBackend, job: JobPosting) -> JobPosting:
    updated = await storage.update_job(
        job.id, JobPostingUpdate(referral_contacts=job.referral_contacts)
    )
    if updated is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return updated


@router.post("/{job_id}/contacts", response_model=JobPosting, status_code=http_status.HTTP_201_CREATED)
async def create_contact(
    job_id: str,
    contact: ContactCreate,
    storage: StorageBackend = Depends(get_storage),
):
    job = await _get_or_404(storage, job_id)
    job = add_contact(job, contact.name, contact.contact_method, contact.date_contacted)
    return await _save_contacts(storage, job)


@router.patch("/{job_id}/contacts/{contact_id}", response_model=JobPosting)
async def change_contact_status(
    job_id: str,
    contact_id: str,
    update: ContactStatusUpdate,
    storage: StorageBackend = Depends(get_storage),
):
    job = await _get_or_404(storage, job_id)
    if not any(c.id == contact_id for c in job.referral_contacts):
        raise HTTPException(status_code=404, detail="Contact not found")
    job = update_contact_status(job, contact_id, update.status)
    return await _save_contacts(storage, job)


@router.delete("/{job_id}/contacts/{contact_id}", response_model=JobPosting)
async def delete_contact(
    job_id: str,
    contact_id: str,
    storage: StorageBackend = Depends(get_storage),
):
    job = await _get_or_404(storage, job_id)
    job = remove_contact(job, contact_id)
    return await _save_contacts(storage, job)
