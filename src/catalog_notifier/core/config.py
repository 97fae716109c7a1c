"""
Runtime settings for the catalog notifier.

Uses Pydantic Settings for environment variable validation and type safety.
The subscription file (who gets told about what) lives in notifier_config.py;
this module only covers process-level knobs.
"""

from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from catalog_notifier import DEFAULT_CONFIG, __version__

from .errors import ConfigError


class NotifierSettings(BaseSettings):
    """Process-level settings, read from NOTIFIER_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="NOTIFIER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(
        default=DEFAULT_CONFIG["log_level"],
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    config_file: str = Field(
        default=DEFAULT_CONFIG["config_file"],
        description="Notifier config file, relative to the catalog directory"
    )
    http_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Webhook request timeout in seconds"
    )
    environment: Optional[str] = Field(
        default=None,
        description="Environment label stamped into notification metadata"
    )
    user_agent: str = Field(
        default=f"EventCatalog-Notifier/{__version__}",
        description="User-Agent header sent with webhook requests"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v


# Global settings instance
_settings: Optional[NotifierSettings] = None


def get_settings() -> NotifierSettings:
    """
    Get the global settings instance.

    Lazily loads settings on first access.

    Raises:
        ConfigError: If a NOTIFIER_* variable holds an invalid value
    """
    global _settings
    if _settings is None:
        try:
            _settings = NotifierSettings()
        except ValidationError as e:
            raise ConfigError(
                "Invalid notifier settings",
                str(e),
                ["Check the NOTIFIER_* environment variables and the .env file"],
            ) from e
    return _settings


def reload_settings() -> NotifierSettings:
    """
    Reload settings from environment variables.

    Useful for testing or when environment changes.
    """
    global _settings
    _settings = None
    return get_settings()
