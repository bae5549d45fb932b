"""
Configuration Management Module

Configures defaults via environment variables (prefixed with ``HTTPSTAT_``)
or a .env file. Command-line options override these per invocation.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from httpstat import __version__

OutputFormat = Literal["table", "compact", "json"]


class Settings(BaseSettings):
    """
    Application Configuration Class

    Every field can be overridden by an environment variable named
    ``HTTPSTAT_<FIELD>``, e.g. ``HTTPSTAT_HTTP_TIMEOUT=5``.
    """

    # Verbose logging, including every trace event
    DEBUG: bool = False

    # HTTP Client Config
    # Request timeout (seconds)
    HTTP_TIMEOUT: float = 30.0
    # Verify server certificates
    VERIFY_TLS: bool = True
    # User-Agent header sent when the caller does not set one
    USER_AGENT: str = f"httpstat/{__version__}"

    # Output Config
    # Default report format
    OUTPUT_FORMAT: OutputFormat = "table"

    model_config = SettingsConfigDict(
        env_prefix="HTTPSTAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get application configuration (Singleton)

    Returns:
        Settings: Application configuration instance
    """
    return Settings()
