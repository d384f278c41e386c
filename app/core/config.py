"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV selects which .env.{environment} file is loaded
- Each settings group reads its own env prefix (APP_, LLM_, VIDEO_, LOG_)
- Values injected directly into the process environment always work, so
  production can skip the .env files entirely
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front.
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class LLMSettings(BaseSettings):
    """LLM provider configuration used by the assessment endpoint."""

    provider: str = Field(
        "openai",
        description="LLM provider name (currently only openai)",
    )
    model: str = Field(
        "gpt-4o-mini",
        description="Model name passed to the provider",
    )
    api_key: str | None = Field(
        None,
        description="API key for the provider",
    )
    base_url: str | None = Field(
        None,
        description="Custom API endpoint (OpenAI-compatible gateways)",
    )
    timeout_seconds: float = Field(
        15.0,
        description="Request timeout in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        case_sensitive=False,
    )


class VideoSettings(BaseSettings):
    """Video search (YouTube Data API) configuration."""

    api_key: str | None = Field(
        None,
        description="YouTube Data API key",
    )
    base_url: str = Field(
        "https://www.googleapis.com/youtube/v3",
        description="Base URL of the YouTube Data API",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Upstream request timeout in seconds",
        gt=0,
    )
    cache_ttl_seconds: int = Field(
        3600,
        description="How long search results stay cached",
        ge=1,
    )
    cache_max_entries: int = Field(
        512,
        description="Maximum number of cached searches",
        ge=1,
    )
    default_max_results: int = Field(
        5,
        description="Results returned when the caller does not ask for a count",
        ge=1,
        le=25,
    )

    model_config = SettingsConfigDict(
        env_prefix="VIDEO_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="'json' or 'plain'")
    output: str = Field("stdout", description="'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file at this size (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to propagate the correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable FastAPI debug mode (tracebacks in error pages)",
    )
    max_responses: int = Field(
        50,
        description="Maximum questionnaire responses accepted per analysis",
        ge=1,
    )
    max_response_chars: int = Field(
        500,
        description="Questions and answers are truncated to this many characters",
        ge=1,
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client admission limiting on gated endpoints",
    )
    rate_limit_window_seconds: float = Field(
        60.0,
        description="Sliding window length in seconds",
        gt=0,
        allow_inf_nan=False,
    )
    rate_limit_max_tracked_clients: int = Field(
        500,
        description="Soft cap on distinct client keys kept in memory",
        ge=1,
    )
    rate_limit_generation_requests: int = Field(
        3,
        description="Admissions per window for AI-generation endpoints",
        ge=1,
    )
    rate_limit_lookup_requests: int = Field(
        5,
        description="Admissions per window for read-only lookup endpoints",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    rate_limit_client_header: str = Field(
        "X-Forwarded-For",
        description="Request header the client key is derived from",
    )
    rate_limit_anonymous_key: str = Field(
        "anonymous",
        description="Client key used when the header is absent",
        min_length=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Environments:
    - development: Local development (.env.development)
    - testing: Automated tests (.env.testing)
    - staging: Pre-production (.env.staging)
    - production: Production deployment (.env.production or plain env vars)
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    video: VideoSettings = Field(default_factory=VideoSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
