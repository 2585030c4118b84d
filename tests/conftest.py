"""
Test Configuration Module
"""

from datetime import datetime, timezone
from typing import Callable

import pytest

from ollama_relay.common.synthetic import MetadataGenerator
from ollama_relay.config import RelayConfig
from ollama_relay.domain.enums import UpstreamStyle
from ollama_relay.services.formatter import SurfaceFormatter

TEST_BASE_URL = "https://upstream.test/v1"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class FixedMetadataGenerator(MetadataGenerator):
    """Deterministic metadata: every call returns the same values"""

    NOW = datetime(2024, 2, 29, 12, 30, 45, 123456, tzinfo=timezone.utc)

    def timings(self, profile: str) -> dict[str, int]:
        result = {
            "total_duration": 3_500_000_000,
            "load_duration": 1_000_000,
            "prompt_eval_duration": 200_000_000,
            "eval_count": 150,
            "eval_duration": 3_000_000_000,
        }
        if profile == "stream":
            result["prompt_eval_count"] = 20
        return result

    def context_tokens(self, count: int) -> list[int]:
        return [7] * count

    def digest(self) -> str:
        return "a" * 64

    def size_bytes(self) -> int:
        return 123_456_789

    def quantization_level(self) -> str:
        return "Q4_K_M"

    def completion_id(self, prefix: str) -> str:
        return f"{prefix}-fixed"

    def now(self) -> datetime:
        return self.NOW


@pytest.fixture
def metadata() -> FixedMetadataGenerator:
    return FixedMetadataGenerator()


@pytest.fixture
def formatter(metadata) -> SurfaceFormatter:
    return SurfaceFormatter(metadata)


@pytest.fixture
def make_config() -> Callable[..., RelayConfig]:
    """Factory for RelayConfig with test defaults (no retry delay)"""

    def _make(**overrides) -> RelayConfig:
        values = {
            "base_url": TEST_BASE_URL,
            "api_key": "sk-test",
            "upstream_style": UpstreamStyle.OPENAI,
            "retry_delay_ms": 0,
        }
        values.update(overrides)
        return RelayConfig(**values)

    return _make


@pytest.fixture
def relay_config(make_config) -> RelayConfig:
    return make_config()


@pytest.fixture
def gemini_config(make_config) -> RelayConfig:
    return make_config(base_url=GEMINI_BASE_URL, upstream_style=UpstreamStyle.GEMINI)
