"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Query endpoint
    API_TIMEOUT_SECONDS: float = 30.0
    DEFAULT_PATH_PREFIX: str = "/api/atelier/"

    # Grid paging
    DEFAULT_PAGE_SIZE: int = 100
    MAX_PAGE_SIZE: int = 1000

    # Sessions
    SESSION_SECRET_KEY: str = "change-this-secret-key-in-production"
    SESSION_ALGORITHM: str = "HS256"
    SESSION_TIMEOUT_MINUTES: int = 30
    SESSION_SWEEP_INTERVAL: float = 60.0

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8080"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # Application
    APP_NAME: str = "Table Editor"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
