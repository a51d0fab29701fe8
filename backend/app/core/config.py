from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    PROJECT_NAME: str = "CRM Scheduling API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "local"
    LOG_LEVEL: str = "INFO"
    # Keep the database next to the backend directory regardless of the working directory
    DATABASE_URL: str = "sqlite:///../crm_scheduling.db"
    SECRET_KEY: str = "changeme"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    JWT_ALGORITHM: str = "HS256"
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Redis configuration
    REDIS_CACHE_URL: str = "redis://localhost:6379/1"
    REDIS_CACHE_ENABLED: bool = True
    SCHEDULE_CACHE_TTL: int = 300

    # Scheduling defaults
    DEFAULT_TIMEZONE: str = "UTC"
    DEFAULT_CALENDAR_NAME: str = "My Calendar"
    DEFAULT_CALENDAR_COLOR: str = "#3b82f6"
    DEFAULT_BUFFER_MINUTES: int = 15
    DEFAULT_MINIMUM_NOTICE_HOURS: int = 24
    SCHEDULE_VIEW_LIMIT: int = 50
    AVAILABILITY_SLOT_STEP_MINUTES: int = 30
    DEFAULT_ENTRY_DURATION_MINUTES: int = 60

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: List[str] | str) -> List[str]:
        """Allow both comma-separated strings and list inputs."""
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
