"""
Application settings loaded from the environment.

Every field can be set with a ``WEATHER_TABLES_`` prefixed environment variable
or in a ``.env`` file in the working directory::

    WEATHER_TABLES_API_KEY=0123456789abcdef
    WEATHER_TABLES_MISSING_VALUE_POLICY=zero
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from weather_tables.decoders import MissingValuePolicy
from weather_tables.endpoints import DEFAULT_API_URL
from weather_tables.errors import ConfigurationError
from weather_tables.request import Credentials
from weather_tables.services.http import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT


class Settings(BaseSettings):
    """Runtime configuration for scans, the transport and the CLI."""

    model_config = SettingsConfigDict(
        env_prefix="WEATHER_TABLES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "weather-tables"
    app_env: str = Field(default="development", description="Deployment environment name")
    debug: bool = False

    api_url: str = Field(default=DEFAULT_API_URL, description="One Call 3.0 base URL")
    api_key: SecretStr | None = Field(default=None, description="OpenWeather API key")
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Request timeout (seconds)")

    log_level: str = "INFO"
    missing_value_policy: MissingValuePolicy = MissingValuePolicy.NULL

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Ensure the base URL is absolute and has no trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level '{v}'")
        return level

    @property
    def has_api_key(self) -> bool:
        return self.api_key is not None and bool(self.api_key.get_secret_value())

    def credentials(self) -> Credentials:
        """
        Build request credentials from the configured key and base URL.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        key = self.api_key.get_secret_value() if self.api_key is not None else ""
        if not key:
            msg = "no API key configured. Set WEATHER_TABLES_API_KEY or add it to .env"
            raise ConfigurationError(msg, setting="api_key")
        return Credentials(api_key=key, base_url=self.api_url)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
