"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
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

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front.
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_llm_settings() -> "LLMSettings":
    """Build LLM settings from environment.

    Static type checkers treat BaseSettings fields as constructor arguments,
    which is not how BaseSettings is intended to be used.
    """

    return LLMSettings()  # type: ignore[call-arg]


def _build_detection_settings() -> "DetectionSettings":
    return DetectionSettings()  # type: ignore[call-arg]


def _build_app_settings() -> "AppSettings":
    return AppSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class LLMSettings(BaseSettings):
    """Text-generation provider configuration.

    Both supported providers speak the OpenAI chat-completions protocol; the
    provider name only selects defaults and required fields in the factory.
    """

    provider: str = Field(
        "nvidia",
        description="LLM provider name (nvidia or openai)",
    )
    model: str = Field(
        "meta/llama-3.3-70b-instruct",
        description="Model name passed to the chat completions endpoint",
    )
    api_key: str | None = Field(
        None,
        description="API key for the provider; without it every call falls back to local text",
    )
    base_url: str | None = Field(
        None,
        description="Custom API endpoint (defaults to the provider's public endpoint)",
    )
    timeout_seconds: float = Field(
        30.0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        case_sensitive=False,
    )


class DetectionSettings(BaseSettings):
    """AI-generated text detection (Hugging Face inference) configuration."""

    api_token: str | None = Field(
        None,
        description="Hugging Face API token",
    )
    model_id: str = Field(
        "fakespot-ai/roberta-base-ai-text-detection-v1",
        description="Text classification model used for detection",
    )
    base_url: str = Field(
        "https://router.huggingface.co/hf-inference/models",
        description="Inference router base URL",
    )
    timeout_seconds: float = Field(
        30.0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="DETECTION_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    api_key_required: bool = Field(
        True,
        description="Whether API key authentication is required",
    )
    api_keys: str | None = Field(
        None,
        description="Comma-separated list of valid API keys for authentication",
    )
    max_prompt_chars: int = Field(
        4000,
        description="Maximum note characters embedded into a single prompt",
        ge=1,
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-caller throttling of AI endpoints",
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    rate_limit_sweep_interval_seconds: int = Field(
        60,
        description="Interval between sweeps of expired throttle entries",
        ge=1,
    )

    rate_limit_tags_requests: int = Field(10, ge=1)
    rate_limit_tags_window_seconds: int = Field(60, ge=1)
    rate_limit_detect_requests: int = Field(10, ge=1)
    rate_limit_detect_window_seconds: int = Field(60, ge=1)
    rate_limit_summary_requests: int = Field(10, ge=1)
    rate_limit_summary_window_seconds: int = Field(60, ge=1)
    rate_limit_review_requests: int = Field(10, ge=1)
    rate_limit_review_window_seconds: int = Field(60, ge=1)
    rate_limit_chat_requests: int = Field(20, ge=1)
    rate_limit_chat_window_seconds: int = Field(60, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="json or plain")
    output: str = Field("stdout", description="stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(10_485_760, description="Rotate file logs at this size (0 disables)")
    backup_count: int = Field(5, description="Rotated log files to keep")
    request_id_header: str = Field("X-Request-ID", description="Correlation header name")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.
    """

    app_env: str = APP_ENV
    llm: LLMSettings = Field(default_factory=_build_llm_settings)
    detection: DetectionSettings = Field(default_factory=_build_detection_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
