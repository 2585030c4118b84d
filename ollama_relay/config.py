"""
Configuration Management Module

Configures application parameters via environment variables or .env file.
The loaded Settings are folded into an immutable RelayConfig at startup, which
is what the request path actually consumes.
"""

import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ollama_relay.common.upstream_style import detect_upstream_style
from ollama_relay.domain.enums import UpstreamStyle

# Catalog served when MODELS is not configured
DEFAULT_MODELS: tuple[str, ...] = (
    "deepseek-r1:1.5b",
    "deepseek-r1:7b",
    "deepseek-r1:8b",
    "deepseek-r1:14b",
    "qwen2.5:7b-instruct-fp16",
)


def parse_model_list(value: Optional[str]) -> list[str]:
    """
    Parse the MODELS setting.

    Accepts either a JSON array (``["a", "b"]``) or a comma-separated list
    (``a, b``). Blank entries are dropped.

    Args:
        value: Raw setting value

    Returns:
        list[str]: Model names in configured order
    """
    if not value or not value.strip():
        return []

    stripped = value.strip()
    if stripped.startswith("["):
        try:
            parsed = json.loads(stripped)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return [str(item).strip() for item in parsed if str(item).strip()]

    return [item.strip() for item in stripped.split(",") if item.strip()]


class Settings(BaseSettings):
    """
    Application Configuration Class

    All configuration items can be overridden by environment variables, with names matching fields (uppercase).
    """

    # Application Config
    APP_NAME: str = "Ollama Relay"
    DEBUG: bool = False

    # Server Config (used by the ollama-relay entry point)
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Upstream Config
    # Base URL of the single upstream provider; a Gemini host switches the upstream style
    URL_HOST: str = "https://api.vikey.ai/v1"
    API_KEY: str = ""

    # Model Config
    # When set, every chat/completion request is sent upstream with this model
    MODEL_OVERRIDE: str = ""
    # Used when a request does not name a model
    DEFAULT_MODEL: str = ""
    # Catalog: JSON array or comma-separated list, empty means the built-in list
    MODELS: str = ""

    # Token defaults for OpenAI-style upstream payloads
    CHAT_MAX_TOKENS: int = 3000
    COMPLETION_MAX_TOKENS: int = 500

    # HTTP Client Config
    # Timeout for non-streaming upstream calls (seconds)
    HTTP_TIMEOUT: int = 60

    # Retry Config
    # Total attempts when the upstream answers 429
    RETRY_MAX_ATTEMPTS: int = 3
    # Delay between 429 retries (ms)
    RETRY_DELAY_MS: int = 5000

    # CORS Config
    # Comma-separated list of allowed origins, "*" allows all
    ALLOWED_ORIGINS: str = "*"

    # Request logging middleware also logs request bodies (never for embeddings)
    LOG_REQUEST_BODIES: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("RETRY_MAX_ATTEMPTS")
    @classmethod
    def _at_least_one_attempt(cls, value: int) -> int:
        if value < 1:
            raise ValueError("RETRY_MAX_ATTEMPTS must be >= 1")
        return value


@lru_cache()
def get_settings() -> Settings:
    """
    Get application configuration (Singleton)

    Uses lru_cache to ensure configuration is loaded only once.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()


@dataclass(frozen=True)
class RelayConfig:
    """
    Runtime configuration shared by every request.

    Built once at startup and injected into the services; never mutated.
    """

    base_url: str
    api_key: str
    upstream_style: UpstreamStyle
    model_override: Optional[str] = None
    default_model: Optional[str] = None
    models: tuple[str, ...] = DEFAULT_MODELS
    http_timeout: float = 60.0
    retry_max_attempts: int = 3
    retry_delay_ms: int = 5000
    chat_max_tokens: int = 3000
    completion_max_tokens: int = 500
    debug: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "RelayConfig":
        models = parse_model_list(settings.MODELS)
        return cls(
            base_url=settings.URL_HOST.rstrip("/"),
            api_key=settings.API_KEY,
            upstream_style=detect_upstream_style(settings.URL_HOST),
            model_override=settings.MODEL_OVERRIDE.strip() or None,
            default_model=settings.DEFAULT_MODEL.strip() or None,
            models=tuple(models) if models else DEFAULT_MODELS,
            http_timeout=float(settings.HTTP_TIMEOUT),
            retry_max_attempts=settings.RETRY_MAX_ATTEMPTS,
            retry_delay_ms=settings.RETRY_DELAY_MS,
            chat_max_tokens=settings.CHAT_MAX_TOKENS,
            completion_max_tokens=settings.COMPLETION_MAX_TOKENS,
            debug=settings.DEBUG,
        )


@lru_cache()
def get_relay_config() -> RelayConfig:
    """Runtime configuration derived from get_settings() (Singleton)."""
    return RelayConfig.from_settings(get_settings())
