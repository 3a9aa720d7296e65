"""
Configuration for service error handling.

Settings are loaded from .env files and environment variables prefixed with
SERVICE_ERRORS_ (e.g. SERVICE_ERRORS_DETAIL_LEVEL=1).
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .config_enums import DetailLevel, Environment


class Settings(BaseSettings):
    """Configuration settings consumed by ServiceErrorKernel and logging setup."""

    SERVICE_NAME: str = "unknown-service"
    ENVIRONMENT: Environment = Field(
        default=Environment.PRODUCTION,
        description="Runtime environment; production never exposes details or stack traces",
    )
    DETAIL_LEVEL: int = Field(
        default=DetailLevel.MINIMAL.value,
        ge=DetailLevel.MINIMAL.value,
        le=DetailLevel.VERBOSE.value,
        description="Detail level (0-2) used when rendering errors for API consumers",
    )
    DEFAULT_HTTP_STATUS_CODE: int = Field(default=500, ge=100, le=599)
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="SERVICE_ERRORS_",
    )
