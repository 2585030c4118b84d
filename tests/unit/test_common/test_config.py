"""
Configuration Unit Tests
"""

import pytest
from pydantic import ValidationError as SettingsValidationError

from ollama_relay.config import DEFAULT_MODELS, RelayConfig, Settings, parse_model_list
from ollama_relay.domain.enums import UpstreamStyle


def test_parse_model_list_accepts_json_array():
    assert parse_model_list('["a:1b", " b ", ""]') == ["a:1b", "b"]


def test_parse_model_list_accepts_comma_separated_values():
    assert parse_model_list("a:1b, b:7b,,") == ["a:1b", "b:7b"]


def test_parse_model_list_empty():
    assert parse_model_list("") == []
    assert parse_model_list(None) == []


def test_relay_config_defaults():
    config = RelayConfig.from_settings(Settings(_env_file=None))
    assert config.base_url == "https://api.vikey.ai/v1"
    assert config.upstream_style == UpstreamStyle.OPENAI
    assert config.models == DEFAULT_MODELS
    assert config.model_override is None
    assert config.retry_max_attempts == 3
    assert config.retry_delay_ms == 5000


def test_relay_config_from_gemini_settings():
    settings = Settings(
        _env_file=None,
        URL_HOST="https://generativelanguage.googleapis.com/v1beta/",
        MODEL_OVERRIDE=" gemini-2.0-flash ",
        MODELS="gemini-2.0-flash",
    )
    config = RelayConfig.from_settings(settings)
    assert config.upstream_style == UpstreamStyle.GEMINI
    assert config.base_url == "https://generativelanguage.googleapis.com/v1beta"
    assert config.model_override == "gemini-2.0-flash"
    assert config.models == ("gemini-2.0-flash",)


def test_retry_attempts_must_be_positive():
    with pytest.raises(SettingsValidationError):
        Settings(_env_file=None, RETRY_MAX_ATTEMPTS=0)
