"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
Store credentials are optional so the service can start degraded and
report what is missing on /health.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field, field_validator
from apscheduler.triggers.cron import CronTrigger
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # GITHUB CONTENT STORE
    # ===================
    github_token: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("github_token", "token"),
        description="Personal access token with contents write permission"
    )
    github_owner: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("github_owner", "owner"),
        description="Owner (user or organization) of the storage repository"
    )
    github_repo: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("github_repo", "repo"),
        description="Repository used as the file store"
    )
    github_branch: str = Field(
        default="main",
        min_length=1,
        description="Branch that uploads are committed to"
    )
    storage_namespace: str = Field(
        default="temp",
        pattern=r"^[^/](.*[^/])?$",
        description="Directory inside the repository holding uploads"
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL"
    )
    raw_base_url: str = Field(
        default="https://raw.githubusercontent.com",
        description="Base URL for public raw file links"
    )
    store_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Timeout for a single call to the content store"
    )

    # ===================
    # SWEEP
    # ===================
    sweep_schedule: str = Field(
        default="0 * * * *",
        description="Crontab expression (UTC) for scheduled cleanup sweeps"
    )
    sweep_on_startup: bool = Field(
        default=True,
        description="Run a cleanup sweep as soon as the app is ready"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=3000,
        validation_alias=AliasChoices("api_port", "port"),
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # VALIDATORS
    # ===================
    @field_validator("sweep_schedule")
    @classmethod
    def validate_sweep_schedule(cls, value: str) -> str:
        """Reject crontab expressions the scheduler cannot parse."""
        CronTrigger.from_crontab(value, timezone="UTC")
        return value

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def sweep_trigger(self) -> CronTrigger:
        """Trigger for scheduled sweeps, evaluated in UTC."""
        return CronTrigger.from_crontab(self.sweep_schedule, timezone="UTC")

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def missing_store_settings(self) -> list[str]:
        """Names of required store settings that are not set."""
        required = {
            "GITHUB_TOKEN": self.github_token,
            "GITHUB_OWNER": self.github_owner,
            "GITHUB_REPO": self.github_repo,
            "GITHUB_BRANCH": self.github_branch,
        }
        return [name for name, value in required.items() if not value]

    @property
    def store_configured(self) -> bool:
        """Check if the content store is fully configured."""
        return not self.missing_store_settings


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are present but invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
