"""
Application Configuration Module.

Manages application settings and environment variables using Pydantic for validation.

Features:
- Environment variable and .env loading
- Secure credential handling for the Sentry auth token
- Logging configuration
"""

from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from logger import LogManager


class Settings(BaseSettings):
    """
    Application configuration settings with validation.

    Attributes:
        app_name (str): Name of the application, used for the logger
        dev (bool): Development mode flag (readable log output)
        log_dir (Optional[str]): Directory for log files, disabled when unset
        log_level (int): Logging level (default: warning)
        sentry_authtoken (Optional[SecretStr]): Sentry API authentication token
        sentry_endpoint (Optional[str]): Custom Sentry API endpoint
        request_timeout (float): Per-request transport timeout in seconds
    """

    # Application settings
    app_name: str = Field(default="sentry-event-exporter", description="Application name")
    dev: bool = Field(default=False, description="Development mode")
    log_dir: Optional[str] = Field(default=None, description="Logging directory")
    log_level: int = Field(default=30, description="Logging level, default warning")

    # Sentry configuration
    sentry_authtoken: Optional[SecretStr] = Field(
        default=None, description="Sentry authentication token"
    )
    sentry_endpoint: Optional[str] = Field(default=None, description="Sentry endpoint")
    request_timeout: float = Field(
        default=60.0, gt=0, description="HTTP request timeout in seconds"
    )

    @field_validator("sentry_endpoint", "log_dir")
    def empty_as_none(cls, v: Optional[str]) -> Optional[str]:
        """
        Treat empty strings from the environment as unset.

        Args:
            v (Optional[str]): Raw value

        Returns:
            Optional[str]: The value, or None when blank
        """
        if v is not None and not v.strip():
            return None
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
    )


# Create global settings instance
settings = Settings()

# Initialize logging configuration
logger = LogManager(
    app_name=settings.app_name.lower(),
    log_dir=settings.log_dir,
    development=settings.dev,
    level=settings.log_level,
).logger
