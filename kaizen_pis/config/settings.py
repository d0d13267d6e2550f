"""
Settings Management with Pydantic

Provides type-safe configuration management with:
- Environment variable support (KAIZEN_ prefix)
- Optional .env file
- Validation
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Main engine settings."""
    model_config = SettingsConfigDict(
        env_prefix="KAIZEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Application
    app_name: str = "Kaizen-PIs"
    log_level: str = "INFO"

    # Dates
    default_calendar: str = "gregorian"

    # Library facade
    top_kpi_count: int = Field(default=5, ge=1)


@lru_cache()
def get_settings() -> EngineSettings:
    """Get cached settings instance."""
    return EngineSettings()
