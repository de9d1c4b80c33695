from fastapi import APIRouter, Depends

from jobtracker.api.deps import get_storage
from jobtracker.schemas import StorageStatus
from jobtracker.services.storage import StorageBackend

router = APIRouter()


@router.get("/status", response_model=StorageStatus)
async def storage_status(storage: StorageBackend = Depends(get_storage)):
    return StorageStatus(backend=storage.kind, available=storage.is_available())
