from fastapi import APIRouter
from jobtracker.api import auth, jobs, migration, storage

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
api_router.include_router(migration.router, prefix="/migration", tags=["migration"])
api_router.include_router(storage.router, prefix="/storage", tags=["storage"])
