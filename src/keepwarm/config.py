"""Configuration management with pydantic-settings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class KeepwarmSettings(BaseSettings):
    """keepwarm application settings loaded from environment variables.

    All settings use the KEEPWARM_ prefix for environment variables. These
    only seed the defaults of a LivenessConfig; explicit config passed at
    wrap time always wins.
    """

    # Logging configuration
    log_level: str = Field(default="WARNING", description="Logging level")
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log output format: console or json",
    )

    # Keepalive defaults
    interval: int = Field(
        default=30000,
        gt=0,
        description="Milliseconds between keepalive probes",
    )
    max_failures: int = Field(
        default=3,
        gt=0,
        description="Consecutive failed probes before keepalive disables itself",
    )
    connect_delay: int = Field(
        default=2000,
        ge=0,
        description="Milliseconds to wait after connect before starting keepalive",
    )
    first_probe_delay: int = Field(
        default=1000,
        ge=0,
        description="Milliseconds between start and the first probe",
    )
    debug: bool = Field(
        default=False,
        description="Log keepalive diagnostics",
    )

    model_config = SettingsConfigDict(
        env_prefix="KEEPWARM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Global settings instance
_settings: KeepwarmSettings | None = None


def get_settings() -> KeepwarmSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = KeepwarmSettings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance (useful for testing)."""
    global _settings
    _settings = None
