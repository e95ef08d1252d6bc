"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables.

    The comparison engine never reads these directly; callers turn them into
    `ComparisonOptions` and pass that in.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_format: Literal["json", "text"] = Field(default="json")

    # Field comparison
    numeric_tolerance: float = Field(default=1e-6)
    unit_tokens: list[str] = Field(default=["cal/cm^2", "cal/cm2", "kA", "A"])

    # Deprecated/legacy fields excluded from every entity type
    ignored_fields: list[str] = Field(default=[])


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
