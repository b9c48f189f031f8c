"""Rug estimate service configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings.

    All fields can be overridden via environment variables with
    the RUGESTIMATE_ prefix (e.g., RUGESTIMATE_SESSION_TTL_SECONDS).
    """

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    behind_proxy: bool = False
    cors_origins: list[str] = ["http://localhost:3000"]
    session_ttl_seconds: float = 3600.0
    max_sessions: int = 1000

    model_config = {
        "env_prefix": "RUGESTIMATE_",
        "env_file": ".env",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
