"""
Job Tracker API - Main Application Entry Point

This module initializes the FastAPI application with:
- Cloud database connection and schema initialization
- Local key-value store for signed-out users
- StorageContext (backend selection + migration) on app.state
- Prometheus metrics and API router registration

Architecture:
    FastAPI App
    ├── Lifespan Management (startup/shutdown)
    ├── CORS Middleware (localhost:3000)
    ├── Prometheus Middleware (/metrics)
    └── API Router
        ├── /auth - Sign in/out (owner identity cookie)
        ├── /jobs - Job + referral contact CRUD
        ├── /migration - Local-to-cloud migration
        └── /storage - Active backend status

Run:
    uvicorn jobtracker.main:create_app --factory
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobtracker.api import api_router
from jobtracker.config import Settings, get_settings
from jobtracker.database import create_session_factory, init_db
from jobtracker.errors import RemoteStorageError, map_error
from jobtracker.middleware.metrics import setup_metrics
from jobtracker.services.key_value import get_key_value_store
from jobtracker.services.local_storage import LocalStorageService
from jobtracker.services.storage_factory import StorageContext

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup:
            1. Build the cloud engine and create tables
            2. Build the local store and the StorageContext

        Shutdown:
            1. Release the cached backend
            2. Dispose the cloud engine
        """
        engine, session_factory = create_session_factory(settings.database_url)
        await init_db(engine)

        local_service = LocalStorageService(
            get_key_value_store(settings),
            storage_key=settings.local_store_key,
        )
        app.state.storage = StorageContext(local_service, session_factory)

        if not local_service.is_available():
            logger.warning("Local storage is unavailable; signed-out changes will not persist")

        yield

        app.state.storage.close()
        await engine.dispose()

    app = FastAPI(
        title="Job Tracker API",
        description="Job application tracker with local and cloud storage",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_metrics(app)

    @app.exception_handler(RemoteStorageError)
    async def remote_storage_error_handler(request: Request, exc: RemoteStorageError):
        error = map_error(exc)
        return JSONResponse(
            status_code=503,
            content={"detail": error.message, "type": error.type.value, "retryable": error.retryable},
        )

    app.include_router(api_router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app
