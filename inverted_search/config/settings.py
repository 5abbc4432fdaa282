"""Library settings and configuration management."""

from functools import lru_cache

from pydantic import Field, ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings with environment variable support."""

    # Debug mode logs at DEBUG unless a level is given explicitly
    debug: bool = Field(default=False)

    # Search Configuration
    default_confidence: float = Field(default=100.0, allow_inf_nan=False)
    max_query_length: int = Field(default=1000, ge=1)
    enable_stemming: bool = Field(default=True)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()
