"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SCORING_CONFIG_PATH = Path("config/scoring.json")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Scoring Configuration
    scoring_config_path: Path = Field(
        default=DEFAULT_SCORING_CONFIG_PATH,
        description="Path to the JSON scoring override document",
    )

    @property
    def resolved_scoring_config_path(self) -> Path:
        """Get the scoring config path, handling the empty env var case."""
        if not str(self.scoring_config_path) or str(self.scoring_config_path) == ".":
            return DEFAULT_SCORING_CONFIG_PATH
        return self.scoring_config_path

    log_level: str = Field(default="INFO", description="Logging level")

    # Telemetry
    enable_telemetry: bool = Field(default=True, description="Enable PostHog telemetry")
    posthog_api_key: str | None = Field(None, description="PostHog API key for telemetry")
    posthog_host: str = Field(default="https://us.i.posthog.com", description="PostHog host URL")

    # Sentry Configuration
    sentry_dsn: str | None = Field(None, description="Sentry DSN for error tracking")

    # Application Metadata
    app_name: str = Field(default="Vinyl-Release-Scoring", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
