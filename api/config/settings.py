"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "RMS API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"  # development, staging, production

    # Database
    DATABASE_URL: str = "sqlite:///./rms.db"

    # Token (HS256)
    SECRET_KEY: str = "change-me-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    ALGORITHM: str = "HS256"

    # Cookie settings
    COOKIE_NAME: str = "rms_access_token"
    COOKIE_DOMAIN: Optional[str] = None  # None = use request domain
    COOKIE_SECURE: bool = True  # HTTPS required
    COOKIE_SAMESITE: str = "lax"

    # Throttling (requests per window, per user or per IP)
    THROTTLE_ENABLED: bool = True
    THROTTLE_TTL: int = 60
    THROTTLE_LIMIT: int = 100
    AUTH_THROTTLE_LIMIT: int = 10

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
