"""Settings module using pydantic-settings for configuration management."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Service Configuration
    service_name: str = Field(default="collection-service")
    environment: str = Field(default="development")
    port: int = Field(default=8010)
    host: str = Field(default="0.0.0.0")

    # Database Configuration (SQLite by default, PostgreSQL via asyncpg)
    database_url: str = Field(default="sqlite+aiosqlite:///./collections.db")
    echo_sql: bool = Field(default=False)

    # Page listing
    page_size: int = Field(default=100, ge=1)

    # The property set of a collection is treated as bounded even though the
    # schema does not enforce it.
    prop_set_max: int = Field(default=5000, ge=1)

    # Create "Default Collection" on startup when no collection exists
    seed_default_collection: bool = Field(default=True)

    # Logging
    log_level: str = Field(default="INFO")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
