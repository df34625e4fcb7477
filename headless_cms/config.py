"""
Configuration management for the Headless CMS.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = Field(default="Headless CMS")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # API
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    api_workers: int = Field(default=1)

    # Database
    database_url: str = Field(default="sqlite:///./headless_cms.db")

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="'json' or 'console'")

    # Bootstrap
    seed_defaults: bool = Field(
        default=True,
        description="Seed default roles and workflow transitions at startup.",
    )

    # Listing
    max_page_size: int = Field(default=200, ge=1)


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
