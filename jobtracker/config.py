from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    # Cloud storage (relational)
    database_url: str = "sqlite:///./data/jobs.db"

    # Local storage: "file", "redis" or "memory"
    local_store_backend: str = "file"
    local_store_path: str = "./data/local_store"
    local_store_key: str = "linkedin-job-tracker-jobs"
    local_store_quota_bytes: Optional[int] = 5 * 1024 * 1024  # 5MB, like browser storage
    redis_url: str = "redis://localhost:6379/0"

    # Auth
    app_password: str = "changeme"
    secret_key: str = "dev-secret-key-change-in-production"
    token_expire_days: int = 30

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
