"""
Middleware Package

Contains FastAPI middleware for:
- Prometheus metrics collection
- Storage and migration counters
"""

from jobtracker.middleware.metrics import (
    PrometheusMiddleware,
    setup_metrics,
    record_storage_operation,
    record_migrated_job,
    REQUEST_LATENCY,
    REQUEST_COUNT,
    ACTIVE_REQUESTS,
    STORAGE_OPERATIONS,
    MIGRATED_JOBS,
)

__all__ = [
    "PrometheusMiddleware",
    "setup_metrics",
    "record_storage_operation",
    "record_migrated_job",
    "REQUEST_LATENCY",
    "REQUEST_COUNT",
    "ACTIVE_REQUESTS",
    "STORAGE_OPERATIONS",
    "MIGRATED_JOBS",
]
