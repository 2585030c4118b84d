"""
Model Resolver Unit Tests
"""

from ollama_relay.common.model_resolver import ModelResolver


def test_override_wins_over_requested_model():
    resolver = ModelResolver(override="forced-model", default="fallback")
    assert resolver.resolve("llama3") == "forced-model"
    assert resolver.resolve(None) == "forced-model"


def test_requested_model_passes_through_unchanged():
    resolver = ModelResolver(default="fallback")
    assert resolver.resolve("deepseek-r1:7b") == "deepseek-r1:7b"


def test_default_used_only_when_model_missing():
    resolver = ModelResolver(default="fallback")
    assert resolver.resolve(None) == "fallback"
    assert resolver.resolve("") == "fallback"


def test_no_model_anywhere_resolves_to_empty_string():
    assert ModelResolver().resolve(None) == ""
